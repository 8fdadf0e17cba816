from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from exceptions import InvalidConfigError


class Backend(str, Enum):
    FLOOD_FILL = "flood_fill"
    OPENCV = "opencv"


@dataclass(frozen=True)
class DetectorConfig:
    width: int = 640
    height: int = 480
    threshold: int = 200
    threshold_range: int = 20
    min_mass: int = 100
    max_mass: int = 5000
    channel: int = 2  # red in an OpenCV BGR frame
    backend: Backend = Backend.FLOOD_FILL
    runtime_budget_ms: float = 30.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidConfigError(
                f"Image dimensions must be positive, got {self.width}x{self.height}",
                field="width" if self.width <= 0 else "height",
            )
        if not 0 <= self.threshold <= 255:
            raise InvalidConfigError(
                f"threshold must be within [0, 255], got {self.threshold}", field="threshold"
            )
        if self.threshold_range < 0:
            raise InvalidConfigError(
                f"threshold_range must be non-negative, got {self.threshold_range}",
                field="threshold_range",
            )
        if self.min_mass < 1:
            raise InvalidConfigError(
                f"min_mass must be at least 1, got {self.min_mass}", field="min_mass"
            )
        if self.max_mass < self.min_mass:
            raise InvalidConfigError(
                f"max_mass ({self.max_mass}) is smaller than min_mass ({self.min_mass})",
                field="max_mass",
            )
        if self.channel < 0:
            raise InvalidConfigError(f"channel must be non-negative, got {self.channel}", field="channel")
        if self.runtime_budget_ms <= 0:
            raise InvalidConfigError(
                f"runtime_budget_ms must be positive, got {self.runtime_budget_ms}",
                field="runtime_budget_ms",
            )
        # Accept plain strings from YAML
        object.__setattr__(self, "backend", Backend(self.backend))
