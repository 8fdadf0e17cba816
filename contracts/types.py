"""Core data contracts for capture, detection, tracking, and motion."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Frame:
    frame_index: int
    t_capture: float
    image: Any
    width: int
    height: int
    source_id: str = "ir"


@dataclass(eq=False)
class Blob:
    """A connected region of foreground pixels.

    Geometry is accumulated pixel by pixel during flood fill. The center is
    the midpoint of the bounding box, not the mean of the pixel coordinates.
    ``identity`` and ``last_seen`` are only ever stamped by the tracker.
    """

    mass: int = 0
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf
    center_x: float = 0.0
    center_y: float = 0.0
    identity: Optional[int] = None
    last_seen: Optional[float] = None

    def add_pixel(self, x: int, y: int) -> None:
        self.mass += 1
        if x < self.min_x:
            self.min_x = x
        if y < self.min_y:
            self.min_y = y
        if x > self.max_x:
            self.max_x = x
        if y > self.max_y:
            self.max_y = y
        self.center_x = (self.min_x + self.max_x) / 2.0
        self.center_y = (self.min_y + self.max_y) / 2.0

    @classmethod
    def from_bounds(cls, mass: int, bounds: Tuple[int, int, int, int]) -> "Blob":
        """Build a blob from precomputed component statistics."""
        min_x, min_y, max_x, max_y = bounds
        return cls(
            mass=int(mass),
            min_x=int(min_x),
            min_y=int(min_y),
            max_x=int(max_x),
            max_y=int(max_y),
            center_x=(min_x + max_x) / 2.0,
            center_y=(min_y + max_y) / 2.0,
        )

    @property
    def is_empty(self) -> bool:
        return self.mass == 0

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.center_x, self.center_y)

    @property
    def width(self) -> int:
        """Inclusive pixel width of the bounding box (0 while empty)."""
        if self.is_empty:
            return 0
        return int(self.max_x - self.min_x) + 1

    @property
    def height(self) -> int:
        if self.is_empty:
            return 0
        return int(self.max_y - self.min_y) + 1

    @property
    def area_ratio(self) -> float:
        """Fraction of the bounding box covered by the blob, in (0, 1]."""
        bounding_area = self.width * self.height
        return self.mass / bounding_area if bounding_area > 0 else 0.0

    def distance_to(self, other: "Blob") -> float:
        dx = self.center_x - other.center_x
        dy = self.center_y - other.center_y
        return (dx * dx + dy * dy) ** 0.5

    def is_valid_size(self, min_mass: int, max_mass: int) -> bool:
        return min_mass <= self.mass <= max_mass

    def has_timed_out(self, now: float, timeout_s: float) -> bool:
        if self.last_seen is None:
            return False
        return now - self.last_seen > timeout_s

    def __repr__(self) -> str:
        return (
            f"Blob(id={self.identity}, center=({self.center_x:.1f},{self.center_y:.1f}), "
            f"mass={self.mass}, bounds={self.bounds})"
        )


class PlayerState(str, Enum):
    STATIC = "STATIC"
    WALKING = "WALKING"
    RUNNING = "RUNNING"
    JUMPING = "JUMPING"
    AIRBORNE = "AIRBORNE"  # jumping while moving


class MotionShape(str, Enum):
    LINEAR = "LINEAR"
    CIRCULAR = "CIRCULAR"
    ERRATIC = "ERRATIC"


@dataclass(frozen=True)
class StateChange:
    identity: int
    previous: PlayerState
    current: PlayerState
    t: float


@dataclass(frozen=True)
class PlayerSnapshot:
    identity: int
    x: float
    y: float
    vx: float
    vy: float
    state: PlayerState
    shape: MotionShape

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)
