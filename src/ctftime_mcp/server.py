import functools
import inspect
import logging
import sys
from typing import Annotated, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BeforeValidator, Field

from ctftime_common.errors import TransportError
from ctftime_common.tooling import InstrumentConfig, instrument_async_tool
from ctftime_config import settings
from ctftime_config.settings import init_runtime
from ctftime_mcp.models import MAX_YEAR, MIN_YEAR, reject_bool
from ctftime_mcp.registry import ToolRegistry, ToolResult, get_definition


logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="ctftime",
    instructions=(
        "Read-only access to the public CTFtime API: events, teams, rankings, results and votes. "
        "Every tool returns pretty-printed JSON."
    ),
)

registry = ToolRegistry()

MCP_CLIENT_ID = "ctftime_mcp"


def _cfg(tool_name: str) -> InstrumentConfig:
    return InstrumentConfig(kind="tool", name=tool_name, client_id=MCP_CLIENT_ID)


def _as_mcp_result(fn):
    """Unwrap a ToolResult: text on success, ToolError (an MCP error result) on failure."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        result: ToolResult = await fn(*args, **kwargs)
        if result.is_error:
            raise ToolError(result.text)
        return result.text

    wrapper.__signature__ = inspect.signature(fn)  # type: ignore[attr-defined]
    return wrapper


def ctftime_tool(name: str):
    """
    Registers an MCP tool under the catalog name, with the catalog description,
    and applies instrumentation. Keeps the tool signature for schema generation.
    """
    defn = get_definition(name)

    def decorator(fn):
        wrapped = _as_mcp_result(instrument_async_tool(_cfg(name))(fn))
        mcp.tool(name=name, description=defn.description, structured_output=False)(wrapped)
        return wrapped

    return decorator


def delegate_to_registry(tool_name: str):
    """Replaces the tool body with registry.invoke(tool_name, bound_args)."""

    def decorator(fn):
        tool_sig = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            bound = tool_sig.bind(*args, **kwargs)
            bound.apply_defaults()
            return await registry.invoke(tool_name, dict(bound.arguments))

        wrapper.__signature__ = tool_sig  # type: ignore[attr-defined]
        return wrapper

    return decorator


# Kept after Field(...) so the bounds land on the int schema itself.
NotBool = BeforeValidator(reject_bool)

Year = Annotated[int, Field(ge=MIN_YEAR, le=MAX_YEAR, description="Year (e.g., 2025)."), NotBool]
OptionalYear = Annotated[Optional[int], Field(ge=MIN_YEAR, le=MAX_YEAR, description="Year (e.g., 2025)."), NotBool]


@ctftime_tool("list-events-in-window")
@delegate_to_registry("list-events-in-window")
async def list_events_in_window(
    limit: Annotated[int, Field(ge=1, le=100, description="Max events (1-100)."), NotBool] = 20,
    start: Annotated[Optional[int], Field(description="UNIX timestamp (seconds) for window start."), NotBool] = None,
    finish: Annotated[Optional[int], Field(description="UNIX timestamp (seconds) for window finish."), NotBool] = None,
) -> str:
    ...


@ctftime_tool("get-event-by-id")
@delegate_to_registry("get-event-by-id")
async def get_event_by_id(
    event_id: Annotated[int, Field(ge=1, description="CTFtime event id."), NotBool],
) -> str:
    ...


@ctftime_tool("list-top-teams")
@delegate_to_registry("list-top-teams")
async def list_top_teams(
    year: OptionalYear = None,
    limit: Annotated[int, Field(ge=1, le=100, description="Max teams (1-100)."), NotBool] = 10,
) -> str:
    ...


@ctftime_tool("list-top-teams-by-country")
@delegate_to_registry("list-top-teams-by-country")
async def list_top_teams_by_country(
    country_code: Annotated[
        str, Field(min_length=2, max_length=2, description="Country code (e.g., 'pl', 'us', 'de').")
    ],
) -> str:
    ...


@ctftime_tool("get-team-by-id")
@delegate_to_registry("get-team-by-id")
async def get_team_by_id(
    team_id: Annotated[int, Field(ge=1, description="CTFtime team id."), NotBool],
) -> str:
    ...


@ctftime_tool("get-results-for-year")
@delegate_to_registry("get-results-for-year")
async def get_results_for_year(year: OptionalYear = None) -> str:
    ...


@ctftime_tool("get-votes-for-year")
@delegate_to_registry("get-votes-for-year")
async def get_votes_for_year(year: Year) -> str:
    ...


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging), then rebuild the
    # registry so .env values reach the HTTP client.
    global registry
    init_runtime()
    registry = ToolRegistry()

    transport = settings.transport()
    logger.info("mcp-ctftime running on %s", transport)
    try:
        mcp.run(transport=transport)
    except Exception as e:
        err = TransportError(f"MCP transport {transport!r} failed: {e}")
        logger.critical("Fatal error: %s", err, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
