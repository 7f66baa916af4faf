"""MCP server exposing the read-only CTFtime API as tools."""

__version__ = "0.1.0"
