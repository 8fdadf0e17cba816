"""Shared data contracts for floor tracking."""

from .types import (
    Blob,
    Frame,
    MotionShape,
    PlayerSnapshot,
    PlayerState,
    StateChange,
)

__all__ = [
    "Blob",
    "Frame",
    "MotionShape",
    "PlayerSnapshot",
    "PlayerState",
    "StateChange",
]
