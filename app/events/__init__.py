"""Event system for pipeline consumers."""

from app.events.event_bus import EventBus
from app.events.event_types import (
    PlayerAppearedEvent,
    PlayerJumpedEvent,
    PlayerLostEvent,
    PlayerMovedEvent,
    StateChangedEvent,
)

__all__ = [
    "EventBus",
    "PlayerAppearedEvent",
    "PlayerJumpedEvent",
    "PlayerLostEvent",
    "PlayerMovedEvent",
    "StateChangedEvent",
]
