"""Event types published by the tick pipeline.

All events are immutable dataclasses that flow through the EventBus. They
are published synchronously at the end of the tick that produced them, after
the tracker and the motion classifier have finished updating.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from contracts import MotionShape, PlayerState


@dataclass(frozen=True)
class PlayerAppearedEvent:
    """Published when the tracker assigns a new identity.

    Subscribed By: animation layer (spawn effect), sound (entry cue)

    Attributes:
        identity: Newly assigned identity
        position: Blob center in sensor pixels
        frame_index: Tick that produced the identity
    """
    identity: int
    position: Tuple[float, float]
    frame_index: int


@dataclass(frozen=True)
class PlayerMovedEvent:
    """Published when a confirmed player's position changed this tick.

    Attributes:
        identity: Player identity
        position: New position in sensor pixels
        velocity: Smoothed velocity in pixels per second
        frame_index: Tick index
    """
    identity: int
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    frame_index: int


@dataclass(frozen=True)
class PlayerJumpedEvent:
    """Published when a player's vertical rise exceeds the jump threshold."""
    identity: int
    position: Tuple[float, float]
    frame_index: int


@dataclass(frozen=True)
class StateChangedEvent:
    """Published on every movement-state transition.

    Attributes:
        identity: Player identity
        previous: State before the transition
        current: State after the transition
        shape: Motion shape at the time of the transition
        timestamp: Tick time in seconds
    """
    identity: int
    previous: PlayerState
    current: PlayerState
    shape: MotionShape
    timestamp: float


@dataclass(frozen=True)
class PlayerLostEvent:
    """Published when the tracker evicts a stale identity."""
    identity: int
    last_position: Tuple[float, float]
    frame_index: int
