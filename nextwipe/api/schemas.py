"""Pydantic response schemas for the nextwipe API.

Wipe records themselves are served as :class:`nextwipe.models.WipeResponse`
payloads; the models here cover the envelope endpoints (cron, games,
events, health) and error bodies.  JSON keys are camelCase.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nextwipe.models.event import GameEvent

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class CronErrorResponse(BaseModel):
    """Body returned when the cron run itself fails."""

    error: str
    details: str


class CronResult(BaseModel):
    """Outcome of one game's forced refresh."""

    game: str
    status: Literal["fulfilled", "rejected"]
    success: bool
    data: Any | None = None
    error: str | None = None


class CronResponse(BaseModel):
    """Summary returned by ``/api/cron/update-wipes``."""

    success: bool
    message: str
    timestamp: str
    results: list[CronResult]


class GameInfo(BaseModel):
    """One tracked game."""

    model_config = _CAMEL

    id: str
    name: str
    accent_color: str
    frequency: str


class GamesResponse(BaseModel):
    games: list[GameInfo]


class EventsResponse(BaseModel):
    """Upcoming events, earliest first."""

    events: list[GameEvent]
    count: int = Field(description="Number of events returned.")


class CalendarResponse(BaseModel):
    """Events of one month, flat and grouped by UTC day."""

    model_config = _CAMEL

    year: int
    month: int
    events: list[GameEvent]
    by_date: dict[str, list[GameEvent]]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
