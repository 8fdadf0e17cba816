"""Brightness threshold blob detector using breadth-first flood fill."""

from __future__ import annotations

import time
from collections import deque
from typing import Optional

import numpy as np

from contracts import Blob
from detect import telemetry
from detect.config import Backend, DetectorConfig
from detect.filters import apply_mass_filter
from detect.utils import foreground_mask, opencv_components, to_brightness
from exceptions import DetectionError
from log_config.logger import get_logger

logger = get_logger(__name__)

# 8-connected neighbourhood
_NEIGHBOUR_OFFSETS = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)


class BlobDetector:
    """Finds connected regions whose brightness lies in a threshold band.

    The image is scanned row-major. The first unvisited foreground pixel
    seeds an 8-connected flood fill that collects every reachable foreground
    pixel into one Blob; each pixel is visited exactly once. Blobs outside
    the configured mass band are dropped.

    The visited mask is a flat boolean array sized to the image, allocated
    once and cleared at the start of every call. Instances are not safe to
    share between threads.
    """

    def __init__(self, config: Optional[DetectorConfig] = None) -> None:
        self.config = config or DetectorConfig()
        self._width = self.config.width
        self._height = self.config.height
        self._visited = np.zeros(self._width * self._height, dtype=bool)
        self._queue: deque[int] = deque()
        self.last_timing: Optional[telemetry.TimingRecord] = None
        logger.debug(
            "BlobDetector initialized {}x{} backend={} mass=[{}, {}]",
            self._width,
            self._height,
            self.config.backend.value,
            self.config.min_mass,
            self.config.max_mass,
        )

    @property
    def min_mass(self) -> int:
        return self.config.min_mass

    @property
    def max_mass(self) -> int:
        return self.config.max_mass

    def detect(
        self,
        image: np.ndarray,
        threshold: Optional[int] = None,
        threshold_range: Optional[int] = None,
    ) -> list[Blob]:
        """Detect blobs in ``image``.

        Args:
            image: 2-D brightness buffer or 3-D color frame
            threshold: Center of the brightness band (config default if None)
            threshold_range: Half-width of the band (config default if None)

        Returns:
            Blobs in discovery order, without identities

        Raises:
            DetectionError: If the image does not match the configured size
        """
        start = time.perf_counter()
        threshold = self.config.threshold if threshold is None else threshold
        threshold_range = self.config.threshold_range if threshold_range is None else threshold_range

        brightness = self._brightness(image)
        mask = foreground_mask(brightness, threshold, threshold_range)
        if self.config.backend == Backend.OPENCV:
            candidates = opencv_components(mask)
        else:
            candidates = self._flood_fill_all(mask)
        blobs = apply_mass_filter(candidates, self.config.min_mass, self.config.max_mass)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        self.last_timing = telemetry.log_timing(
            self.config.backend.value, len(blobs), elapsed_ms, self.config.runtime_budget_ms
        )
        if len(candidates) != len(blobs):
            logger.debug(
                "detect.mass_filter kept={} rejected={}", len(blobs), len(candidates) - len(blobs)
            )
        return blobs

    def _brightness(self, image: np.ndarray) -> np.ndarray:
        if not isinstance(image, np.ndarray):
            raise DetectionError(f"Expected a numpy array, got {type(image).__name__}")
        try:
            brightness = to_brightness(image, self.config.channel)
        except ValueError as e:
            raise DetectionError(str(e)) from e
        if brightness.shape != (self._height, self._width):
            raise DetectionError(
                f"Frame is {brightness.shape[1]}x{brightness.shape[0]}, "
                f"detector expects {self._width}x{self._height}"
            )
        return brightness

    def _flood_fill_all(self, mask: np.ndarray) -> list[Blob]:
        foreground = mask.ravel()
        visited = self._visited
        visited.fill(False)

        blobs: list[Blob] = []
        # Foreground indices in row-major order, so seeds are found in scan order
        for seed in np.flatnonzero(foreground):
            seed = int(seed)
            if visited[seed]:
                continue
            blobs.append(self._flood_fill(foreground, seed))
        return blobs

    def _flood_fill(self, foreground: np.ndarray, seed: int) -> Blob:
        width = self._width
        height = self._height
        visited = self._visited
        queue = self._queue
        blob = Blob()

        queue.append(seed)
        visited[seed] = True
        while queue:
            index = queue.popleft()
            y, x = divmod(index, width)
            blob.add_pixel(x, y)
            for dx, dy in _NEIGHBOUR_OFFSETS:
                nx = x + dx
                ny = y + dy
                if nx < 0 or nx >= width or ny < 0 or ny >= height:
                    continue
                neighbour = ny * width + nx
                if foreground[neighbour] and not visited[neighbour]:
                    visited[neighbour] = True
                    queue.append(neighbour)
        return blob
