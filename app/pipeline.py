"""Tick pipeline wiring frame capture, detection, tracking, and motion."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from app.events import (
    EventBus,
    PlayerAppearedEvent,
    PlayerJumpedEvent,
    PlayerLostEvent,
    PlayerMovedEvent,
    StateChangedEvent,
)
from capture import FrameSource
from configs.settings import AppConfig
from contracts import Blob, Frame, PlayerSnapshot, StateChange
from detect import BlobDetector
from exceptions import TickOverlapError
from log_config.logger import get_logger, log_performance
from player import MotionClassifier
from track import BlobTracker

logger = get_logger(__name__)

# Warn once per this many consecutive ticks without a frame
_SKIP_WARN_EVERY = 30


@dataclass(frozen=True)
class TickResult:
    tick_index: int
    frame_index: Optional[int]
    timestamp: float
    players: List[PlayerSnapshot]
    blobs: List[Blob]
    state_changes: List[StateChange] = field(default_factory=list)
    skipped: bool = False


@dataclass(frozen=True)
class PipelineStats:
    ticks: int
    skipped_ticks: int
    consecutive_skips: int
    tracked: int
    next_identity: int


class FloorPipeline:
    """Runs detection, tracking, and motion classification once per tick.

    The pipeline owns the tracker's identity table and every motion record.
    Ticks must not overlap: a tick started while another is still running
    raises ``TickOverlapError``. Events produced during a tick are published
    on the event bus after all updates for that tick are complete.

    Example:
        ```python
        pipeline = FloorPipeline(load_config())
        pipeline.add_state_listener(lambda e: print(e.identity, e.current))
        result = pipeline.tick(frame_source.read())
        ```
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or AppConfig()
        self.events = event_bus or EventBus()
        self._clock = clock
        self.detector = BlobDetector(self.config.detector)
        self.tracker = BlobTracker(self.config.tracker, clock=clock)
        self.classifier = MotionClassifier(self.config.motion)
        self._players: Dict[int, PlayerSnapshot] = {}
        self._tick_lock = threading.Lock()
        self._ticks = 0
        self._skipped = 0
        self._consecutive_skips = 0

    @property
    def players(self) -> List[PlayerSnapshot]:
        return [self._players[identity] for identity in sorted(self._players)]

    def add_state_listener(self, handler: Callable[[StateChangedEvent], None]) -> None:
        self.events.subscribe(StateChangedEvent, handler)

    def tick(self, frame: Optional[Frame], now: Optional[float] = None) -> TickResult:
        """Process one frame (or its absence).

        Args:
            frame: Frame for this tick, or None if the source had none
            now: Tick time in seconds (the pipeline clock if None)

        Returns:
            Players and tracked blobs after the tick

        Raises:
            TickOverlapError: If another tick is still running
            DetectionError: If the frame does not match the configured size
        """
        if not self._tick_lock.acquire(blocking=False):
            raise TickOverlapError("Tick started before the previous tick completed")
        try:
            return self._run_tick(frame, self._clock() if now is None else now)
        finally:
            self._tick_lock.release()

    def run(self, source: FrameSource, max_ticks: Optional[int] = None) -> Iterator[TickResult]:
        """Tick once per read from ``source`` until ``max_ticks`` is reached."""
        count = 0
        while max_ticks is None or count < max_ticks:
            yield self.tick(source.read())
            count += 1

    def get_stats(self) -> PipelineStats:
        return PipelineStats(
            ticks=self._ticks,
            skipped_ticks=self._skipped,
            consecutive_skips=self._consecutive_skips,
            tracked=self.tracker.tracked_count,
            next_identity=self.tracker.next_identity,
        )

    def _run_tick(self, frame: Optional[Frame], now: float) -> TickResult:
        start = time.perf_counter()
        self._ticks += 1
        tick_index = self._ticks
        frame_index = frame.frame_index if frame is not None else None
        event_index = frame_index if frame_index is not None else tick_index

        skipped = frame is None or frame.image is None
        if skipped:
            detected: List[Blob] = []
            self._skipped += 1
            self._consecutive_skips += 1
            logger.debug("pipeline.skip tick={} consecutive={}", tick_index, self._consecutive_skips)
            if self._consecutive_skips % _SKIP_WARN_EVERY == 0:
                logger.warning(
                    "pipeline.no_frames consecutive={} tracked={}",
                    self._consecutive_skips,
                    self.tracker.tracked_count,
                )
        else:
            if self._consecutive_skips:
                logger.info("pipeline.frames_resumed after={}", self._consecutive_skips)
            self._consecutive_skips = 0
            detected = self.detector.detect(frame.image)

        blobs = self.tracker.update(detected, now)

        events: list = []
        for identity in self.tracker.last_evicted:
            record = self.classifier.get(identity)
            self.classifier.forget(identity)
            self._players.pop(identity, None)
            last_position = record.position if record is not None else (math.nan, math.nan)
            events.append(PlayerLostEvent(identity=identity, last_position=last_position, frame_index=event_index))

        changes: List[StateChange] = []
        for identity in self.tracker.last_confirmed:
            blob = self.tracker.get(identity)
            x, y = blob.center
            if not (math.isfinite(x) and math.isfinite(y)):
                logger.error("pipeline.non_finite_center id={} center=({}, {})", identity, x, y)
                continue
            is_new = identity not in self.classifier
            update = self.classifier.observe(identity, x, y, now)
            if is_new:
                events.append(PlayerAppearedEvent(identity=identity, position=(x, y), frame_index=event_index))
            else:
                if update.moved:
                    events.append(
                        PlayerMovedEvent(
                            identity=identity,
                            position=(x, y),
                            velocity=update.velocity,
                            frame_index=event_index,
                        )
                    )
                if update.jumped:
                    events.append(PlayerJumpedEvent(identity=identity, position=(x, y), frame_index=event_index))
            if update.change is not None:
                changes.append(update.change)
                events.append(
                    StateChangedEvent(
                        identity=identity,
                        previous=update.change.previous,
                        current=update.change.current,
                        shape=update.shape,
                        timestamp=now,
                    )
                )
            self._players[identity] = self.classifier.get(identity).snapshot()

        self.events.publish_all(events)

        log_performance(
            f"pipeline.tick {tick_index}",
            (time.perf_counter() - start) * 1000.0,
            threshold_ms=self.config.detector.runtime_budget_ms,
        )
        return TickResult(
            tick_index=tick_index,
            frame_index=frame_index,
            timestamp=now,
            players=self.players,
            blobs=blobs,
            state_changes=changes,
            skipped=skipped,
        )
