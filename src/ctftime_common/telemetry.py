from __future__ import annotations

import datetime as _dt
import json
import logging
from typing import Any

from ctftime_common.context import get_request_id
from ctftime_config.settings import telemetry_disabled, telemetry_file


logger = logging.getLogger(__name__)


def log_event(
    kind: str,
    name: str,
    args: dict | None = None,
    ok: bool = True,
    ms: int = 0,
    *,
    client_id: str | None = None,
    corr_id: str | None = None,
) -> dict | None:
    """
    Emit one telemetry record for a tool call.

    The record always goes to this module's logger as a single JSON line
    (stderr once logging is configured). It is also appended to
    CTFTIME_TELEMETRY_FILE when that variable is set.
    """
    if telemetry_disabled():
        return None

    rid = get_request_id()
    rec: dict[str, Any] = {
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"),
        "kind": kind,
        "name": name,
        "client_id": client_id,
        "corr_id": corr_id or rid,
        "args": {} if args is None else dict(args),
        "ok": bool(ok),
        "ms": int(ms),
    }

    line = json.dumps(rec, ensure_ascii=False, default=str)
    logger.log(logging.INFO if ok else logging.WARNING, line)

    p = telemetry_file()
    if p is not None:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    return rec
