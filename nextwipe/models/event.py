"""Models for the aggregated upcoming-events feed."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GameEventType(str, Enum):
    WIPE = "wipe"
    SEASON = "season"
    UPDATE = "update"
    EVENT = "event"
    TOURNAMENT = "tournament"
    PLAYTEST = "playtest"
    MAINTENANCE = "maintenance"


class GameEvent(BaseModel):
    """One dated entry in the cross-game calendar."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    id: str = Field(description="Stable id, e.g. ``rust-next-wipe``.")
    game_id: str
    game_name: str
    title: str
    type: GameEventType
    start_date: datetime
    end_date: datetime | None = None
    confirmed: bool = False
    description: str | None = None
    url: str | None = None
    accent_color: str
