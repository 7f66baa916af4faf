from __future__ import annotations

import pytest

from ctftime_mcp.api import CTFtimeAPI
from ctftime_mcp.http_client import HttpClient, HttpClientConfig
from ctftime_mcp.registry import ToolRegistry
from tests.helpers.fakes import BASE, FakeSession


@pytest.fixture
def make_api():
    """Build a CTFtimeAPI wired to a FakeSession answering with `responder`."""

    def _make(responder=None) -> tuple[CTFtimeAPI, FakeSession]:
        session = FakeSession(responder)
        http = HttpClient(config=HttpClientConfig(), session=session)
        return CTFtimeAPI(base_url=BASE, http=http), session

    return _make


@pytest.fixture
def make_registry(make_api):
    def _make(responder=None) -> tuple[ToolRegistry, FakeSession]:
        api, session = make_api(responder)
        return ToolRegistry(api=api), session

    return _make
