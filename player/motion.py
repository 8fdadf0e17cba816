"""Per-identity motion smoothing and movement classification."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, Optional, Tuple

from contracts import MotionShape, PlayerSnapshot, PlayerState, StateChange
from log_config.logger import get_logger
from player.config import MotionConfig

logger = get_logger(__name__)

# Total turning beyond three quarters of a revolution reads as a loop
CIRCULAR_TURN_RAD = 1.5 * math.pi
_MIN_DT_S = 1e-6


@dataclass
class PlayerMotion:
    """Motion record for one tracked identity."""

    identity: int
    x: float
    y: float
    prev_x: float
    prev_y: float
    history: Deque[Tuple[float, float]]
    last_update: float
    state_since: float
    vx: float = 0.0
    vy: float = 0.0
    ax: float = 0.0
    ay: float = 0.0
    state: PlayerState = PlayerState.STATIC
    shape: MotionShape = MotionShape.LINEAR

    @classmethod
    def start(cls, identity: int, x: float, y: float, now: float, capacity: int) -> "PlayerMotion":
        history: Deque[Tuple[float, float]] = deque(maxlen=capacity)
        history.append((x, y))
        return cls(
            identity=identity,
            x=x,
            y=y,
            prev_x=x,
            prev_y=y,
            history=history,
            last_update=now,
            state_since=now,
        )

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    @property
    def acceleration(self) -> float:
        return math.hypot(self.ax, self.ay)

    def state_time(self, now: float) -> float:
        """Seconds spent in the current state."""
        return now - self.state_since

    def is_colliding(self, other: "PlayerMotion", radius: float = 30.0) -> bool:
        return math.hypot(self.x - other.x, self.y - other.y) < radius

    def snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            identity=self.identity,
            x=self.x,
            y=self.y,
            vx=self.vx,
            vy=self.vy,
            state=self.state,
            shape=self.shape,
        )


@dataclass(frozen=True)
class MotionUpdate:
    identity: int
    state: PlayerState
    shape: MotionShape
    change: Optional[StateChange] = None
    jumped: bool = False
    moved: bool = False
    velocity: Tuple[float, float] = field(default=(0.0, 0.0))


def turning_angle_sum(points) -> float:
    """Sum of signed turning angles between consecutive displacements.

    Zero-length displacements are skipped; they carry no heading.
    """
    total = 0.0
    previous: Optional[Tuple[float, float]] = None
    pts = list(points)
    for (x0, y0), (x1, y1) in zip(pts, pts[1:]):
        dx = x1 - x0
        dy = y1 - y0
        if dx == 0 and dy == 0:
            continue
        if previous is not None:
            px, py = previous
            total += math.atan2(px * dy - py * dx, px * dx + py * dy)
        previous = (dx, dy)
    return total


class MotionClassifier:
    """Tracks smoothed motion per identity and classifies it each tick.

    State changes are returned in the ``MotionUpdate`` rather than pushed to
    listeners; the caller decides how to fan them out.
    """

    def __init__(self, config: Optional[MotionConfig] = None) -> None:
        self.config = config or MotionConfig()
        self._records: Dict[int, PlayerMotion] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: int) -> bool:
        return identity in self._records

    def __iter__(self) -> Iterator[PlayerMotion]:
        return iter(list(self._records.values()))

    def get(self, identity: int) -> Optional[PlayerMotion]:
        return self._records.get(identity)

    def forget(self, identity: int) -> bool:
        """Drop the record of an evicted identity."""
        return self._records.pop(identity, None) is not None

    def observe(self, identity: int, x: float, y: float, now: float) -> MotionUpdate:
        record = self._records.get(identity)
        if record is None:
            record = PlayerMotion.start(identity, x, y, now, self.config.history_capacity)
            self._records[identity] = record
            logger.debug("motion.start id={} pos=({:.1f},{:.1f})", identity, x, y)
            return MotionUpdate(identity=identity, state=record.state, shape=record.shape)

        dt = now - record.last_update
        if dt <= 0:
            dt = _MIN_DT_S

        record.prev_x, record.prev_y = record.x, record.y
        record.x, record.y = x, y
        record.history.append((x, y))

        blend = self.config.velocity_blend
        raw_vx = (x - record.prev_x) / dt
        raw_vy = (y - record.prev_y) / dt
        vx = record.vx + (raw_vx - record.vx) * blend
        vy = record.vy + (raw_vy - record.vy) * blend
        raw_ax = (vx - record.vx) / dt
        raw_ay = (vy - record.vy) / dt
        record.ax += (raw_ax - record.ax) * blend
        record.ay += (raw_ay - record.ay) * blend
        record.vx, record.vy = vx, vy

        # Image y grows downward, so a rise is a decrease in y
        rise = record.prev_y - y
        state = self._classify_state(record.speed, rise)
        change = None
        if state != record.state:
            change = StateChange(identity=identity, previous=record.state, current=state, t=now)
            record.state = state
            record.state_since = now
            logger.debug("motion.state id={} {} -> {}", identity, change.previous.value, state.value)

        if len(record.history) == self.config.history_capacity:
            record.shape = self._classify_shape(record)

        record.last_update = now
        return MotionUpdate(
            identity=identity,
            state=record.state,
            shape=record.shape,
            change=change,
            jumped=rise > self.config.jump_rise_px,
            moved=(x, y) != (record.prev_x, record.prev_y),
            velocity=(record.vx, record.vy),
        )

    def colliding_pairs(self) -> list[Tuple[int, int]]:
        """Identity pairs closer than the collision radius, ordered by identity."""
        records = sorted(self._records.values(), key=lambda r: r.identity)
        radius = self.config.collision_radius_px
        pairs = []
        for i, a in enumerate(records):
            for b in records[i + 1:]:
                if a.is_colliding(b, radius):
                    pairs.append((a.identity, b.identity))
        return pairs

    def _classify_state(self, speed: float, rise: float) -> PlayerState:
        config = self.config
        if rise > config.jump_rise_px:
            return PlayerState.AIRBORNE if speed > config.walk_speed else PlayerState.JUMPING
        if speed < config.stationary_speed:
            return PlayerState.STATIC
        if speed < config.walk_speed:
            return PlayerState.WALKING
        return PlayerState.RUNNING

    def _classify_shape(self, record: PlayerMotion) -> MotionShape:
        if abs(turning_angle_sum(record.history)) > CIRCULAR_TURN_RAD:
            return MotionShape.CIRCULAR
        if record.acceleration > self.config.erratic_acceleration:
            return MotionShape.ERRATIC
        return MotionShape.LINEAR
