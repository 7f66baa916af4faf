from __future__ import annotations

from typing import Any


def endpoint_url(base: str, *segments: Any) -> str:
    """Join path segments under base, each followed by a slash.

    None segments are skipped, which selects the upstream variant without them
    (e.g. /top/ instead of /top/2023/). Query parameters are left to requests.

    >>> endpoint_url("https://ctftime.org/api/v1", "top", None)
    'https://ctftime.org/api/v1/top/'
    """
    parts = [str(s).strip("/") for s in segments if s is not None]
    return base.rstrip("/") + "/" + "".join(p + "/" for p in parts)
