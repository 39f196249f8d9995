"""Pydantic v2 models for wipe/season schedule records.

``WipeData`` is the one record every layer passes around: scrapers build
it, the cache store persists it, the validator judges it and the API
returns it.  Field names are snake_case in Python and camelCase on the
wire (``nextWipe``, ``scrapedAt``) so cache files and API payloads keep
the established JSON shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Kind of content reset a record describes."""

    LEAGUE = "league"
    PATCH = "patch"
    UPDATE = "update"
    EVENT = "event"
    SEASON = "season"


class SpecialEventType(str, Enum):
    """Kind of sub-event attached to a record (reveal streams, PBE, ...)."""

    REVEAL = "reveal"
    TEASER = "teaser"
    ANNOUNCEMENT = "announcement"
    TOURNAMENT = "tournament"
    BETA = "beta"


_WIRE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
)


class SpecialEvent(BaseModel):
    """A dated sub-event such as a set reveal or a public beta."""

    model_config = _WIRE_CONFIG

    name: str = Field(description="Display name of the sub-event.")
    date: str = Field(description="ISO-8601 start time of the sub-event.")
    type: SpecialEventType = Field(description="Kind of sub-event.")
    description: str | None = Field(default=None, description="Optional detail text.")


class WipeData(BaseModel):
    """Schedule record for one game.

    ``confirmed`` is only ``True`` when the date came from an official or
    structured source; heuristic fallbacks always produce ``False``.
    ``scraped_at`` is stamped by the scraper that built the record.
    """

    model_config = _WIRE_CONFIG

    next_wipe: str | None = Field(description="ISO-8601 time of the next reset.")
    last_wipe: str | None = Field(description="ISO-8601 time of the previous reset.")
    frequency: str = Field(description="Human-readable reset cadence.")
    source: str = Field(description="Where the date came from.")
    scraped_at: str = Field(description="ISO-8601 time the record was produced.")
    confirmed: bool = Field(description="Official date (True) or estimate (False).")
    announcement: str | None = Field(default=None, description="Free-text announcement or estimate note.")
    event_type: EventType | None = Field(default=None, description="league/patch/update/event/season.")
    event_name: str | None = Field(default=None, description="Name of the league/season/patch.")
    is_release: bool | None = Field(default=None, description="Set for major 1.0-style releases.")
    special_events: list[SpecialEvent] | None = Field(
        default=None, description="Dated sub-events (reveals, betas, ...)."
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON shape.

        ``nextWipe``/``lastWipe`` stay present as ``null``; other unset
        optional fields are dropped.
        """
        payload = self.model_dump(mode="json", by_alias=True)
        for key in [k for k, v in payload.items() if v is None]:
            if key not in ("nextWipe", "lastWipe"):
                del payload[key]
        if "specialEvents" in payload:
            payload["specialEvents"] = [
                {k: v for k, v in event.items() if v is not None}
                for event in payload["specialEvents"]
            ]
        return payload


class WipeResponse(WipeData):
    """A ``WipeData`` annotated by the wipe service before it is returned."""

    from_cache: bool = Field(default=False, description="Served from the cache store.")
    cache_age: int | None = Field(default=None, description="Cache age in whole minutes.")
    stale: bool | None = Field(default=None, description="Set when a failed refresh fell back to cache.")
    error: str | None = Field(default=None, description="Refresh error shown alongside stale data.")

    @classmethod
    def from_wipe(cls, data: WipeData, **annotations: Any) -> WipeResponse:
        fields = data.model_dump()
        fields.update(annotations)
        return cls(**fields)
