import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

import ctftime_mcp.server as srv
from ctftime_mcp.registry import tool_names
from tests.helpers.fakes import BASE, FakeResponse, json_response


@pytest.fixture
def use_registry(monkeypatch, make_registry):
    def _use(responder=None):
        registry, session = make_registry(responder)
        monkeypatch.setattr(srv, "registry", registry)
        return session

    return _use


@pytest.mark.asyncio
async def test_all_catalog_tools_are_registered():
    tools = await srv.mcp.list_tools()
    assert sorted(t.name for t in tools) == sorted(tool_names())


@pytest.mark.asyncio
async def test_schema_carries_bounds_and_defaults():
    tools = {t.name: t for t in await srv.mcp.list_tools()}

    events = tools["list-events-in-window"].inputSchema
    assert events["properties"]["limit"]["minimum"] == 1
    assert events["properties"]["limit"]["maximum"] == 100
    assert events["properties"]["limit"]["default"] == 20
    assert not events.get("required")

    assert tools["get-event-by-id"].inputSchema["required"] == ["event_id"]
    assert tools["get-votes-for-year"].inputSchema["required"] == ["year"]
    assert tools["list-top-teams-by-country"].description.startswith("Get top teams for the current year by country")


@pytest.mark.asyncio
async def test_tool_returns_pretty_json_text(use_registry):
    session = use_registry(json_response({"id": 2000, "title": "X"}))

    out = await srv.get_event_by_id(event_id=2000)

    assert session.urls == [f"{BASE}/events/2000/"]
    assert out == json.dumps({"id": 2000, "title": "X"}, indent=2)


@pytest.mark.asyncio
async def test_tool_defaults_flow_to_query(use_registry):
    session = use_registry(json_response([]))

    await srv.list_top_teams()
    await srv.list_events_in_window(start=1700000000)

    assert session.urls == [f"{BASE}/top/?limit=10", f"{BASE}/events/?limit=20&start=1700000000"]


@pytest.mark.asyncio
async def test_country_code_lowercased_in_path(use_registry):
    session = use_registry(json_response({}))
    await srv.list_top_teams_by_country(country_code="US")
    assert session.urls == [f"{BASE}/top-by-country/us/"]


@pytest.mark.asyncio
async def test_upstream_failure_raises_tool_error(use_registry):
    use_registry(FakeResponse("not found", status_code=404))

    with pytest.raises(ToolError) as ei:
        await srv.get_team_by_id(team_id=1)

    assert "404" in str(ei.value)
    assert "not found" in str(ei.value)


@pytest.mark.asyncio
async def test_validation_failure_raises_tool_error_without_request(use_registry):
    session = use_registry()

    with pytest.raises(ToolError) as ei:
        await srv.get_votes_for_year(year=1999)

    assert "year" in str(ei.value)
    assert session.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,arguments",
    [
        ("get-event-by-id", {"event_id": True}),
        ("get-votes-for-year", {"year": False}),
        ("list-top-teams", {"limit": True}),
    ],
)
async def test_boolean_arguments_rejected_before_any_request(use_registry, name, arguments):
    session = use_registry()

    with pytest.raises(ToolError):
        await srv.mcp.call_tool(name, arguments)

    assert session.calls == []


@pytest.mark.asyncio
async def test_integer_like_arguments_accepted_over_mcp(use_registry):
    session = use_registry(json_response({"id": 2000}))

    await srv.mcp.call_tool("get-event-by-id", {"event_id": "2000"})

    assert session.urls == [f"{BASE}/events/2000/"]


def test_main_runs_configured_transport(monkeypatch):
    calls = []
    monkeypatch.setattr(srv, "init_runtime", lambda: None)
    monkeypatch.setattr(srv.mcp, "run", lambda transport: calls.append(transport))
    monkeypatch.setenv("MCP_TRANSPORT", "stdio")
    monkeypatch.setattr(srv, "registry", srv.registry)

    srv.main()

    assert calls == ["stdio"]


def test_main_exits_non_zero_on_transport_failure(monkeypatch, caplog):
    def broken_run(transport):
        raise OSError("stdin closed")

    monkeypatch.setattr(srv, "init_runtime", lambda: None)
    monkeypatch.setattr(srv.mcp, "run", broken_run)
    monkeypatch.setattr(srv, "registry", srv.registry)

    with pytest.raises(SystemExit) as ei:
        srv.main()

    assert ei.value.code == 1
    assert "Fatal error" in caplog.text
    assert "stdin closed" in caplog.text


def test_main_logs_transport(monkeypatch, caplog):
    monkeypatch.setattr(srv, "init_runtime", lambda: None)
    monkeypatch.setattr(srv.mcp, "run", lambda transport: None)
    monkeypatch.setenv("MCP_TRANSPORT", "stdio")
    monkeypatch.setattr(srv, "registry", srv.registry)

    with caplog.at_level("INFO", logger="ctftime_mcp.server"):
        srv.main()

    assert "mcp-ctftime running on stdio" in caplog.text
