"""
CTFtime API gateway.

Each operation builds exactly one URL, performs one GET and returns a
FetchResult instead of raising, so callers see every failure as data:
non-2xx statuses become UpstreamError, undecodable or wrong-shaped bodies
ParseError and connection problems NetworkError.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from ctftime_common.errors import CTFtimeError, NetworkError, ParseError, UpstreamError
from ctftime_config import settings
from ctftime_mcp.http_client import HttpClient
from ctftime_mcp.models import summarize_events
from ctftime_mcp.urls import endpoint_url


logger = logging.getLogger(__name__)

# Upstream body text kept in UpstreamError messages.
ERROR_BODY_LIMIT = 300


@dataclass(frozen=True)
class FetchResult:
    url: str
    data: Any = None
    error: CTFtimeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _body_snippet(resp: requests.Response) -> str:
    try:
        text = resp.text or ""
    except Exception:
        # best-effort only; the status code is what matters
        return ""
    return text[:ERROR_BODY_LIMIT]


class CTFtimeAPI:
    def __init__(self, *, base_url: str | None = None, http: HttpClient | None = None) -> None:
        self.base_url = (base_url or settings.api_base()).rstrip("/")
        self.http = http or HttpClient()

    def url(self, *segments: Any) -> str:
        return endpoint_url(self.base_url, *segments)

    def _fetch_sync(self, path_url: str, params: Mapping[str, Any] | None = None) -> FetchResult:
        # Same URL the session will send; used in results and error messages.
        url = requests.Request("GET", path_url, params=params).prepare().url
        try:
            resp = self.http.get(path_url, params=params)
        except requests.RequestException as e:
            return FetchResult(url, error=NetworkError(url, str(e)))

        if not 200 <= resp.status_code < 300:
            return FetchResult(url, error=UpstreamError(resp.status_code, url, _body_snippet(resp)))

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Non-JSON body from %s: %s", url, e)
            return FetchResult(url, error=ParseError(url, str(e)))

        return FetchResult(url, data=data)

    async def fetch_json(self, url: str, params: Mapping[str, Any] | None = None) -> FetchResult:
        # requests is blocking; keep the event loop free while waiting on upstream.
        return await asyncio.to_thread(self._fetch_sync, url, params)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_events(self, limit: int = 20, start: int | None = None, finish: int | None = None) -> FetchResult:
        """Events in a time window, each reduced to the summary fields.

        A payload that is not a list of event objects is a ParseError.
        """
        # Key order is the query-string order.
        res = await self.fetch_json(self.url("events"), params={"limit": limit, "start": start, "finish": finish})
        if not res.ok:
            return res
        try:
            events = summarize_events(res.data)
        except TypeError as e:
            logger.warning("Unexpected events payload from %s: %s", res.url, e)
            return FetchResult(res.url, error=ParseError(res.url, str(e)))
        return dataclasses.replace(res, data=events)

    async def get_event(self, event_id: int) -> FetchResult:
        return await self.fetch_json(self.url("events", event_id))

    async def list_top_teams(self, year: int | None = None, limit: int = 10) -> FetchResult:
        # No year -> upstream's current-year ranking.
        return await self.fetch_json(self.url("top", year), params={"limit": limit})

    async def list_top_teams_by_country(self, country_code: str) -> FetchResult:
        return await self.fetch_json(self.url("top-by-country", country_code.lower()))

    async def get_team(self, team_id: int) -> FetchResult:
        return await self.fetch_json(self.url("teams", team_id))

    async def get_results(self, year: int | None = None) -> FetchResult:
        return await self.fetch_json(self.url("results", year))

    async def get_votes(self, year: int) -> FetchResult:
        return await self.fetch_json(self.url("votes", year))
