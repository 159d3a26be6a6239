"""searchops MCP server entrypoint using FastMCP.

Exposes read-only search tools over the configured cluster.
Run with:
  - searchops-mcp
  - or: python -m searchops.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from searchops.client import SearchOps
from searchops.config import Settings, load_settings
from searchops.exceptions import ConfigError
from searchops.logging_setup import setup_logging
from searchops.mcp.tools import register_search_tools

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.ops: Optional[SearchOps] = None

    def init_clients(self) -> None:
        """Initialize the search client from configuration."""
        try:
            self.ops = SearchOps.from_settings(self.settings)
        except ConfigError as exc:
            logger.error("Search cluster not configured: %s", exc)
            self.ops = None


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("searchops MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    setup_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_clients()
    register_search_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
