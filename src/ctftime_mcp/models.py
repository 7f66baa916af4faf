from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


MIN_YEAR = 2011
MAX_YEAR = 2100


def reject_bool(v: Any) -> Any:
    """Refuse booleans where an integer is expected (lax int mode takes True as 1)."""
    if isinstance(v, bool):
        raise ValueError("Input should be a valid integer, not a boolean")
    return v


class ToolArgs(BaseModel):
    """Base for tool argument models: integer-valued floats and numeric strings coerce, booleans do not."""

    @field_validator("*", mode="before")
    @classmethod
    def _no_bool(cls, v: Any) -> Any:
        return reject_bool(v)


class EventsWindowArgs(ToolArgs):
    # Field order is the query-string order.
    limit: int = Field(20, ge=1, le=100, description="Max events (1-100).")
    start: Optional[int] = Field(None, description="UNIX timestamp (seconds) for window start.")
    finish: Optional[int] = Field(None, description="UNIX timestamp (seconds) for window finish.")


class EventArgs(ToolArgs):
    event_id: int = Field(..., ge=1, description="CTFtime event id.")


class TopTeamsArgs(ToolArgs):
    year: Optional[int] = Field(None, ge=MIN_YEAR, le=MAX_YEAR, description="Year (e.g., 2025).")
    limit: int = Field(10, ge=1, le=100, description="Max teams (1-100).")


class TopByCountryArgs(ToolArgs):
    country_code: str = Field(..., min_length=2, max_length=2, description="Country code (e.g., 'pl', 'us', 'de').")

    @field_validator("country_code")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()


class TeamArgs(ToolArgs):
    team_id: int = Field(..., ge=1, description="CTFtime team id.")


class ResultsArgs(ToolArgs):
    year: Optional[int] = Field(None, ge=MIN_YEAR, le=MAX_YEAR, description="Year (e.g., 2025).")


class VotesArgs(ToolArgs):
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="Year (e.g., 2025).")


# Fields kept per event by the events listing, in output order.
EVENT_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "url",
    "start",
    "finish",
    "format",
    "onsite",
    "weight",
    "restrictions",
    "ctftime_url",
    "organizers",
    "location",
)


def summarize_event(event: Any) -> dict[str, Any]:
    """Reduce one upstream event record to EVENT_FIELDS.

    Fields missing upstream stay missing; an explicit null is kept as None.
    """
    if not isinstance(event, dict):
        raise TypeError(f"expected an event object, got {type(event).__name__}")
    return {k: event[k] for k in EVENT_FIELDS if k in event}


def summarize_events(events: Any) -> list[dict[str, Any]]:
    """Summarize a list of events, keeping order. Raises TypeError for any other shape."""
    if not isinstance(events, list):
        raise TypeError(f"expected a list of events, got {type(events).__name__}")
    return [summarize_event(e) for e in events]
