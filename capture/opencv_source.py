"""OpenCV-based frame source for cameras and recorded video."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2

from contracts import Frame
from exceptions import FrameSourceConnectionError
from log_config.logger import get_logger

from .frame_source import FrameSource, SourceStats

logger = get_logger(__name__)

# Warn once per this many consecutive failed reads
_MISS_WARN_EVERY = 30


@dataclass
class _Stats:
    last_frame_t: float = 0.0
    frames: int = 0
    missed: int = 0
    consecutive_misses: int = 0
    fps_avg: float = 0.0


class OpenCVFrameSource(FrameSource):
    """Reads frames through ``cv2.VideoCapture``.

    Args:
        target: Device index (int or digit string) or path to a video file
        width: Requested capture width (devices only)
        height: Requested capture height (devices only)
    """

    def __init__(
        self,
        target: Union[int, str] = 0,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        self._target = int(target) if isinstance(target, str) and target.isdigit() else target
        self._width = width
        self._height = height
        self._capture: Optional[cv2.VideoCapture] = None
        self._stats = _Stats()

    @property
    def source_id(self) -> str:
        return str(self._target)

    def open(self) -> None:
        """Open the device or file.

        Raises:
            FrameSourceConnectionError: If OpenCV cannot open the target
        """
        if self._capture is not None:
            return
        logger.info(f"Opening frame source {self._target}")
        capture = cv2.VideoCapture(self._target)
        if not capture.isOpened():
            capture.release()
            logger.error(f"Failed to open frame source {self._target}")
            raise FrameSourceConnectionError(
                f"Failed to open frame source {self._target} - device may be in use or file missing",
                source=self.source_id,
            )
        if isinstance(self._target, int):
            if self._width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
            if self._height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
            actual_width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
            actual_height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
            if (self._width and actual_width != self._width) or (
                self._height and actual_height != self._height
            ):
                logger.warning(
                    f"Frame source {self._target}: requested {self._width}x{self._height} "
                    f"but got {actual_width}x{actual_height}"
                )
        self._capture = capture

    def read(self) -> Optional[Frame]:
        if self._capture is None:
            logger.error(f"Frame source {self._target} read before open")
            return None
        ok, image = self._capture.read()
        if not ok or image is None:
            self._stats.missed += 1
            self._stats.consecutive_misses += 1
            if self._stats.consecutive_misses % _MISS_WARN_EVERY == 0:
                logger.warning(
                    f"Frame source {self._target}: {self._stats.consecutive_misses} consecutive missed reads"
                )
            return None

        if self._stats.consecutive_misses:
            logger.info(
                f"Frame source {self._target} recovered after {self._stats.consecutive_misses} missed reads"
            )
        self._stats.consecutive_misses = 0

        now = time.monotonic()
        if self._stats.last_frame_t:
            delta_s = now - self._stats.last_frame_t
            if delta_s > 0:
                fps_instant = 1.0 / delta_s
                self._stats.fps_avg = (
                    (self._stats.fps_avg * self._stats.frames) + fps_instant
                ) / (self._stats.frames + 1)
        self._stats.frames += 1
        self._stats.last_frame_t = now
        return Frame(
            frame_index=self._stats.frames,
            t_capture=now,
            image=image,
            width=image.shape[1],
            height=image.shape[0],
            source_id=self.source_id,
        )

    def get_stats(self) -> SourceStats:
        return SourceStats(
            frames=self._stats.frames,
            missed_reads=self._stats.missed,
            consecutive_misses=self._stats.consecutive_misses,
            fps_avg=self._stats.fps_avg,
        )

    def close(self) -> None:
        if self._capture is None:
            return
        logger.info(f"Closing frame source {self._target}")
        self._capture.release()
        self._capture = None
