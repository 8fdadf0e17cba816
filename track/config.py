from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from exceptions import InvalidConfigError


@dataclass(frozen=True)
class TrackerConfig:
    max_matching_distance: float = 50.0
    mass_ratio_range: Tuple[float, float] = (0.7, 1.3)
    max_area_ratio_diff: float = 0.2
    staleness_timeout_s: float = 0.5

    def __post_init__(self) -> None:
        if self.max_matching_distance <= 0:
            raise InvalidConfigError(
                f"max_matching_distance must be positive, got {self.max_matching_distance}",
                field="max_matching_distance",
            )
        low, high = self.mass_ratio_range
        if low <= 0 or high < low:
            raise InvalidConfigError(
                f"mass_ratio_range must satisfy 0 < low <= high, got {self.mass_ratio_range}",
                field="mass_ratio_range",
            )
        if self.max_area_ratio_diff < 0:
            raise InvalidConfigError(
                f"max_area_ratio_diff must be non-negative, got {self.max_area_ratio_diff}",
                field="max_area_ratio_diff",
            )
        if self.staleness_timeout_s < 0:
            raise InvalidConfigError(
                f"staleness_timeout_s must be non-negative, got {self.staleness_timeout_s}",
                field="staleness_timeout_s",
            )
        object.__setattr__(self, "mass_ratio_range", (float(low), float(high)))
