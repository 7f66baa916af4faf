"""
Lightweight shared HTTP client for the CTFtime API.

Goals:
- Centralize the fixed request headers and error logging.
- Keep dependencies limited to `requests`.
- Provide a small, testable surface area (the session is injectable).

Requests are sent exactly once: no retry adapter is mounted, and no timeout is
applied unless CTFTIME_HTTP_TIMEOUT is set.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

import requests
from requests import Response

from ctftime_config import settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpClientConfig:
    timeout: float | None = None
    user_agent: str = settings.DEFAULT_USER_AGENT
    accept: str = "application/json"

    @classmethod
    def from_env(cls) -> "HttpClientConfig":
        return cls(timeout=settings.http_timeout(), user_agent=settings.user_agent())


class HttpClient:
    """A small wrapper around `requests.Session` with the CTFtime headers preset."""

    def __init__(self, *, config: HttpClientConfig | None = None, session: requests.Session | None = None) -> None:
        self.config = config or HttpClientConfig.from_env()
        self.session = session or requests.Session()
        self._configure_session(self.session, self.config)

    @staticmethod
    def _configure_session(session: requests.Session, config: HttpClientConfig) -> None:
        session.headers["Accept"] = config.accept
        session.headers["User-Agent"] = config.user_agent

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Response:
        """Perform one HTTP request. Non-2xx responses are returned, not raised.

        None-valued params are dropped by requests, so optional query keys can
        be passed unconditionally.
        """
        t0 = time.perf_counter()
        try:
            resp = self.session.request(
                method=method,
                url=url,
                params=dict(params) if params else None,
                timeout=self.config.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            ms = int((time.perf_counter() - t0) * 1000)
            logger.warning("HTTP %s %s failed (ms=%s): %s", method.upper(), url, ms, str(e))
            raise

        ms = int((time.perf_counter() - t0) * 1000)
        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP %s %s returned status=%s (ms=%s)", method.upper(), url, resp.status_code, ms)
        else:
            logger.debug("HTTP %s %s status=%s ms=%s", method.upper(), url, resp.status_code, ms)
        return resp

    def get(self, url: str, *, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Response:
        return self.request("GET", url, params=params, **kwargs)
