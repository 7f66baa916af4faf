from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_API_BASE = "https://ctftime.org/api/v1"
DEFAULT_USER_AGENT = "mcp-ctftime/0.1.0 (+https://ctftime.org/api/)"


def _project_dir(start: Path) -> Path:
    """Nearest directory at or above start holding pyproject.toml or .git, else start."""
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return start


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) CTFTIME_ENV_FILE (explicit path)
      2) .env in the project directory found from the working directory
    """
    explicit = os.getenv("CTFTIME_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(_project_dir(Path.cwd()) / ".env")

    for p in candidates:
        p = p.resolve()
        if p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def api_base() -> str:
    return os.getenv("CTFTIME_API_BASE", DEFAULT_API_BASE).rstrip("/")


def user_agent() -> str:
    return os.getenv("CTFTIME_USER_AGENT", DEFAULT_USER_AGENT)


def http_timeout() -> float | None:
    """Upstream timeout in seconds; None (the default) waits indefinitely."""
    t = _env_float("CTFTIME_HTTP_TIMEOUT", None)
    if t is not None and t <= 0:
        return None
    return t


def telemetry_file() -> Path | None:
    p = os.getenv("CTFTIME_TELEMETRY_FILE")
    if not p:
        return None
    return Path(p).expanduser().resolve()


def telemetry_disabled() -> bool:
    return os.getenv("CTFTIME_DISABLE_TELEMETRY", "0").strip().lower() in {"1", "true", "yes"}


def transport() -> str:
    return os.getenv("MCP_TRANSPORT", "stdio")


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.

    Always logs to stderr: with the stdio transport, stdout carries MCP frames.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("CTFTIME_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "CTFTIME_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
