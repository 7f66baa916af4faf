"""
Live smoke check for the CTFtime MCP server (hits the real CTFtime API).

It performs:
 1) Spawns `python -m ctftime_mcp.server` over stdio and lists its tools
 2) Calls list-events-in-window for the next week
 3) Calls list-top-teams (current year, limit 3)
 4) Calls get-votes-for-year with an out-of-range year and expects an error result
"""

from __future__ import annotations

import asyncio
import os
import sys
import time
from pathlib import Path
from typing import Any

_REPO_ROOT = Path(__file__).resolve().parents[1]


def _text(res: Any) -> str:
    content = getattr(res, "content", None) or []
    return "\n".join(getattr(c, "text", str(c)) for c in content)


async def demo_mcp() -> bool:
    # Lazy import so the script fails with a readable message without MCP installed
    from mcp import ClientSession
    from mcp.client.stdio import StdioServerParameters, stdio_client

    python_cmd = os.getenv("MCP_PYTHON") or sys.executable
    src = str(_REPO_ROOT / "src")
    env = dict(os.environ, MCP_TRANSPORT="stdio")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src, env.get("PYTHONPATH")) if p)

    print(f"[smoke] Repo root: {_REPO_ROOT}")
    print(f"[smoke] Python: {python_cmd}")

    server = StdioServerParameters(command=python_cmd, args=["-m", "ctftime_mcp.server"], env=env)
    now = int(time.time())
    calls = [
        ("list-events-in-window", {"limit": 5, "start": now, "finish": now + 7 * 24 * 3600}, False),
        ("list-top-teams", {"limit": 3}, False),
        ("get-votes-for-year", {"year": 1999}, True),
    ]

    ok = True
    async with stdio_client(server) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            tools = await session.list_tools()
            print("\n[smoke] TOOLS:")
            for t in tools.tools:
                print(f" - {t.name}")

            for name, args, expect_error in calls:
                res = await session.call_tool(name, args)
                print(f"\n[smoke] CALL {name}({args}) isError={res.isError}:")
                print(_text(res))
                if bool(res.isError) != expect_error:
                    print(f"[smoke] WARN: unexpected outcome for {name}")
                    ok = False

    return ok


async def main() -> int:
    ok = await demo_mcp()
    print("\n[smoke] OK" if ok else "\n[smoke] Completed with warnings")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
