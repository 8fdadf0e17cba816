"""Simulated frame source for pipeline testing and demos."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from contracts import Frame

from .frame_source import FrameSource, SourceStats


@dataclass(frozen=True)
class SimulatedPlayer:
    start: Tuple[float, float]
    velocity: Tuple[float, float]  # pixels per frame
    size: int = 12
    brightness: int = 210


class SimulatedFrameSource(FrameSource):
    """Renders bright squares moving over a dark floor.

    Squares bounce off the image edges. With ``realtime`` enabled reads are
    paced to ``frame_interval_s`` and stamped with ``time.monotonic()``;
    otherwise frames are produced immediately and stamped with a synthetic
    clock that advances by ``frame_interval_s`` per read. Every
    ``drop_every``-th read returns None to exercise the missing-frame path.
    """

    def __init__(
        self,
        width: int = 640,
        height: int = 480,
        players: Optional[Sequence[SimulatedPlayer]] = None,
        frame_interval_s: float = 1.0 / 30.0,
        drop_every: int = 0,
        color: bool = False,
        background: int = 20,
        realtime: bool = True,
    ) -> None:
        self._width = width
        self._height = height
        self._players = list(players) if players is not None else [
            SimulatedPlayer(start=(80.0, 120.0), velocity=(4.0, 0.0)),
            SimulatedPlayer(start=(400.0, 300.0), velocity=(-3.0, -2.0)),
        ]
        self._frame_interval_s = frame_interval_s
        self._drop_every = drop_every
        self._color = color
        self._background = background
        self._realtime = realtime
        self._last_read_t = time.monotonic()
        self._positions = [list(p.start) for p in self._players]
        self._velocities = [list(p.velocity) for p in self._players]
        self._reads = 0
        self._frames = 0
        self._missed = 0
        self._consecutive_misses = 0
        self._open = False

    def open(self) -> None:
        self._open = True
        self._last_read_t = time.monotonic()

    def read(self) -> Optional[Frame]:
        self._reads += 1
        t = self._timestamp()
        self._advance()
        if self._drop_every and self._reads % self._drop_every == 0:
            self._missed += 1
            self._consecutive_misses += 1
            return None
        self._consecutive_misses = 0
        self._frames += 1

        image = np.full((self._height, self._width), self._background, dtype=np.uint8)
        for player, (x, y) in zip(self._players, self._positions):
            half = player.size // 2
            top_left = (int(round(x)) - half, int(round(y)) - half)
            bottom_right = (top_left[0] + player.size - 1, top_left[1] + player.size - 1)
            cv2.rectangle(image, top_left, bottom_right, int(player.brightness), thickness=-1)
        if self._color:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

        return Frame(
            frame_index=self._reads,
            t_capture=t,
            image=image,
            width=self._width,
            height=self._height,
            source_id="sim",
        )

    def _timestamp(self) -> float:
        if not self._realtime:
            return self._reads * self._frame_interval_s
        if self._frame_interval_s > 0:
            elapsed = time.monotonic() - self._last_read_t
            if elapsed < self._frame_interval_s:
                time.sleep(self._frame_interval_s - elapsed)
        self._last_read_t = time.monotonic()
        return self._last_read_t

    def _advance(self) -> None:
        for pos, vel, player in zip(self._positions, self._velocities, self._players):
            half = player.size / 2.0
            for axis, limit in ((0, self._width), (1, self._height)):
                pos[axis] += vel[axis]
                if pos[axis] - half < 0 or pos[axis] + half > limit - 1:
                    vel[axis] = -vel[axis]
                    pos[axis] = min(max(pos[axis], half), limit - 1 - half)

    def get_stats(self) -> SourceStats:
        fps = 1.0 / self._frame_interval_s if self._frame_interval_s > 0 else 0.0
        return SourceStats(
            frames=self._frames,
            missed_reads=self._missed,
            consecutive_misses=self._consecutive_misses,
            fps_avg=fps,
        )

    def close(self) -> None:
        self._open = False
