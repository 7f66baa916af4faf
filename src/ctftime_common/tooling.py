from __future__ import annotations

import functools
import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ctftime_common.context import new_request_id, set_request_id
from ctftime_common.errors import typed_error
from ctftime_common.telemetry import log_event


# ---------------------------------------------------------------------------
# Shared helpers for MCP tool handlers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    client_id: str


def _error_envelope(payload: Any) -> dict | None:
    """Typed error for a failed tool payload, None when the payload succeeded."""
    if not getattr(payload, "is_error", False):
        return None
    return payload.error.to_dict()["error"]


def instrument_async_tool(cfg: InstrumentConfig):
    """Decorator for async tools: correlation id, timing and one telemetry record per call."""

    def decorator(fn: Callable[..., Awaitable[Any]]):
        fn_sig = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any):
            corr_id = new_request_id()
            set_request_id(corr_id)

            t0 = time.perf_counter()

            bound = fn_sig.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            args_for_log: dict[str, Any] = {"args": dict(bound.arguments)}

            try:
                payload = await fn(*args, **kwargs)
            except Exception as e:
                ms = int((time.perf_counter() - t0) * 1000)
                args_for_log["error"] = typed_error("internal", str(e))["error"]
                log_event(cfg.kind, cfg.name, args_for_log, ok=False, ms=ms, client_id=cfg.client_id, corr_id=corr_id)
                raise

            ms = int((time.perf_counter() - t0) * 1000)
            err = _error_envelope(payload)
            if err is not None:
                args_for_log["error"] = err

            log_event(cfg.kind, cfg.name, args_for_log, ok=err is None, ms=ms, client_id=cfg.client_id, corr_id=corr_id)
            return payload

        # Preserve signature for schema generation
        wrapper.__signature__ = fn_sig  # type: ignore[attr-defined]
        return wrapper

    return decorator
