"""Frame source abstraction for the tick pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from contracts import Frame


@dataclass(frozen=True)
class SourceStats:
    frames: int
    missed_reads: int
    consecutive_misses: int
    fps_avg: float


class FrameSource(ABC):
    """Supplies one brightness frame per tick, or None when none is available.

    A failed read is a transient condition and is reported as None, never as
    an exception; the pipeline skips detection for that tick.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying device or file."""

    @abstractmethod
    def read(self) -> Optional[Frame]:
        """Return the next frame, or None if it could not be obtained."""

    @abstractmethod
    def get_stats(self) -> SourceStats:
        """Return read diagnostics."""

    @abstractmethod
    def close(self) -> None:
        """Release the source. Safe to call more than once."""

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
