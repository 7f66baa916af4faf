"""
Tool catalog and dispatch.

TOOL_DEFINITIONS is built once at import time and never mutated. The
ToolRegistry validates caller arguments against a definition's pydantic
model, hands the validated values to the matching CTFtimeAPI operation and
turns the FetchResult into a ToolResult: one text block of pretty-printed
JSON, or a failure carrying the error message.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ctftime_common.errors import CTFtimeError, ValidationError
from ctftime_mcp.api import CTFtimeAPI
from ctftime_mcp.models import (
    EventArgs,
    EventsWindowArgs,
    ResultsArgs,
    TeamArgs,
    TopByCountryArgs,
    TopTeamsArgs,
    VotesArgs,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    args_model: type[BaseModel]
    # CTFtimeAPI method the validated arguments are passed to
    operation: str


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="list-events-in-window",
        description=(
            "List CTFtime events in a time window. Uses UNIX timestamps (seconds) for start/finish; "
            "returns past and upcoming events."
        ),
        args_model=EventsWindowArgs,
        operation="list_events",
    ),
    ToolDefinition(
        name="get-event-by-id",
        description="Get full details for a specific CTFtime event by event_id.",
        args_model=EventArgs,
        operation="get_event",
    ),
    ToolDefinition(
        name="list-top-teams",
        description="Get top teams for a year (or current year if year omitted).",
        args_model=TopTeamsArgs,
        operation="list_top_teams",
    ),
    ToolDefinition(
        name="list-top-teams-by-country",
        description=(
            "Get top teams for the current year by country "
            "(ISO 3166-1 alpha-2 country code, lowercase)."
        ),
        args_model=TopByCountryArgs,
        operation="list_top_teams_by_country",
    ),
    ToolDefinition(
        name="get-team-by-id",
        description="Get information about a specific team by team_id.",
        args_model=TeamArgs,
        operation="get_team",
    ),
    ToolDefinition(
        name="get-results-for-year",
        description="Get event results for a year (or current year if omitted).",
        args_model=ResultsArgs,
        operation="get_results",
    ),
    ToolDefinition(
        name="get-votes-for-year",
        description="Get event votes for a year.",
        args_model=VotesArgs,
        operation="get_votes",
    ),
)

_BY_NAME: Mapping[str, ToolDefinition] = MappingProxyType({d.name: d for d in TOOL_DEFINITIONS})


def tool_names() -> list[str]:
    return [d.name for d in TOOL_DEFINITIONS]


def get_definition(name: str) -> ToolDefinition:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise ValidationError(f"Unknown tool: {name}", tool=name) from None


def _describe(exc: PydanticValidationError) -> tuple[str, list[str]]:
    fields: list[str] = []
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        fields.append(loc)
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts), fields


def validate_arguments(name: str, raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Coerce raw caller arguments for tool `name`, applying defaults.

    Raises ValidationError on unknown tools, missing required values,
    out-of-range numbers, non-integers (booleans included) and wrong-length
    country codes.
    """
    defn = get_definition(name)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Invalid arguments for {name}: expected an object", tool=name)

    try:
        model = defn.args_model.model_validate(dict(raw))
    except PydanticValidationError as e:
        detail, fields = _describe(e)
        raise ValidationError(f"Invalid arguments for {name}: {detail}", tool=name, fields=fields) from e
    return model.model_dump()


def render_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ToolResult:
    content: list[dict[str, str]] = field(default_factory=list)
    is_error: bool = False
    error: CTFtimeError | None = None

    @property
    def text(self) -> str:
        return self.content[0]["text"] if self.content else ""

    @classmethod
    def success(cls, data: Any) -> "ToolResult":
        return cls(content=[{"type": "text", "text": render_json(data)}])

    @classmethod
    def failure(cls, error: CTFtimeError) -> "ToolResult":
        return cls(content=[{"type": "text", "text": str(error)}], is_error=True, error=error)


class ToolRegistry:
    """Validates and dispatches tool invocations to a CTFtimeAPI."""

    def __init__(self, api: CTFtimeAPI | None = None) -> None:
        self.api = api or CTFtimeAPI()

    async def invoke(self, name: str, raw: Mapping[str, Any] | None = None) -> ToolResult:
        try:
            defn = get_definition(name)
            args = validate_arguments(name, raw)
        except ValidationError as e:
            logger.info("Rejected %s: %s", name, e)
            return ToolResult.failure(e)

        operation = getattr(self.api, defn.operation)
        res = await operation(**args)
        if not res.ok:
            return ToolResult.failure(res.error)
        return ToolResult.success(res.data)
