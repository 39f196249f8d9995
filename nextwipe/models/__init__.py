"""Data models for wipe schedules and the events feed."""

from nextwipe.models.event import GameEvent, GameEventType
from nextwipe.models.wipe import (
    EventType,
    SpecialEvent,
    SpecialEventType,
    WipeData,
    WipeResponse,
)

__all__ = [
    "EventType",
    "GameEvent",
    "GameEventType",
    "SpecialEvent",
    "SpecialEventType",
    "WipeData",
    "WipeResponse",
]
