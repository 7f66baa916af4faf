from __future__ import annotations

from typing import Any


def typed_error(code: str, message: str, *, details: dict | None = None) -> dict:
    """
    Standard error envelope:
      {"error": {"code": code, "message": message, "details": {...}}}
    """
    err: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        err["error"]["details"] = details
    return err


class CTFtimeError(Exception):
    """Base class for every failure a tool invocation can end with."""

    code = "internal"

    def details(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        return typed_error(self.code, str(self), details=self.details())


class ValidationError(CTFtimeError):
    """Caller-supplied arguments do not match the tool's schema."""

    code = "bad_request"

    def __init__(self, message: str, *, tool: str | None = None, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.tool = tool
        self.fields = list(fields or [])

    def details(self) -> dict:
        out: dict[str, Any] = {}
        if self.tool:
            out["tool"] = self.tool
        if self.fields:
            out["fields"] = self.fields
        return out


class UpstreamError(CTFtimeError):
    """The CTFtime API answered with a non-2xx status."""

    code = "upstream_error"

    def __init__(self, status: int, url: str, body: str = "") -> None:
        self.status = status
        self.url = url
        self.body = body
        suffix = f": {body}" if body else ""
        super().__init__(f"CTFtime API error {status} for {url}{suffix}")

    def details(self) -> dict:
        return {"status": self.status, "url": self.url}


class ParseError(CTFtimeError):
    """A 2xx response whose body is not valid JSON or not the expected shape."""

    code = "parse_error"

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"Could not parse CTFtime API response from {url}: {detail}")

    def details(self) -> dict:
        return {"url": self.url}


class NetworkError(CTFtimeError):
    """The request never produced an HTTP response."""

    code = "network_error"

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"CTFtime API request failed for {url}: {detail}")

    def details(self) -> dict:
        return {"url": self.url}


class TransportError(CTFtimeError):
    """The MCP transport could not be started or died. Fatal for the process."""

    code = "transport_error"
