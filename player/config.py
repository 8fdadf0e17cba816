from __future__ import annotations

from dataclasses import dataclass

from exceptions import InvalidConfigError


@dataclass(frozen=True)
class MotionConfig:
    stationary_speed: float = 0.5
    walk_speed: float = 2.0
    jump_rise_px: float = 15.0
    history_capacity: int = 10
    velocity_blend: float = 0.3
    erratic_acceleration: float = 10.0
    collision_radius_px: float = 30.0

    def __post_init__(self) -> None:
        if self.stationary_speed < 0:
            raise InvalidConfigError(
                f"stationary_speed must be non-negative, got {self.stationary_speed}",
                field="stationary_speed",
            )
        if self.walk_speed < self.stationary_speed:
            raise InvalidConfigError(
                f"walk_speed ({self.walk_speed}) is below stationary_speed ({self.stationary_speed})",
                field="walk_speed",
            )
        if self.jump_rise_px <= 0:
            raise InvalidConfigError(
                f"jump_rise_px must be positive, got {self.jump_rise_px}", field="jump_rise_px"
            )
        if self.history_capacity < 3:
            # Two displacement vectors are needed for a turning angle
            raise InvalidConfigError(
                f"history_capacity must be at least 3, got {self.history_capacity}",
                field="history_capacity",
            )
        if not 0.0 < self.velocity_blend <= 1.0:
            raise InvalidConfigError(
                f"velocity_blend must be within (0, 1], got {self.velocity_blend}",
                field="velocity_blend",
            )
        if self.erratic_acceleration < 0:
            raise InvalidConfigError(
                f"erratic_acceleration must be non-negative, got {self.erratic_acceleration}",
                field="erratic_acceleration",
            )
        if self.collision_radius_px < 0:
            raise InvalidConfigError(
                f"collision_radius_px must be non-negative, got {self.collision_radius_px}",
                field="collision_radius_px",
            )
