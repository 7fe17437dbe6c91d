"""MCP server for the web tools.

Exposes web_search and web_fetch via the Model Context Protocol (stdio
transport). All logic delegates to WebToolsService.
"""
import os
import platform
import signal
import sys
from datetime import datetime, timezone
from typing import Optional

from mcp.server.fastmcp import FastMCP

from webfetch_mcp.config import __version__, get_config
from webfetch_mcp.logger import (
    configure_file_logging,
    detailed_log,
    get_logger,
    shutdown_logging,
)
from webfetch_mcp.service import get_service

logger = get_logger(__name__)

SERVER_NAME = "webfetch-mcp"

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=(
        "Live web access: search through a local SearXNG instance and fetch "
        "clean, readable text from web pages."
    ),
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _call_tool(name: str, arguments: dict, handler) -> str:
    """Run one tool handler with request/response logging around it."""
    detailed_log("INCOMING_REQUEST", {
        "method": "tools/call",
        "tool_name": name,
        "arguments": arguments,
        "timestamp": _now(),
    })

    error = None
    try:
        text = await handler(**arguments)
    except Exception as e:
        # the service renders its own failures; this only catches bugs
        error = e
        logger.exception(f"Tool {name} raised: {e}")
        text = f"Tool execution failed: {e}"

    detailed_log("OUTGOING_RESPONSE", {
        "method": "tools/call",
        "tool_name": name,
        "response": {"content": [{"type": "text", "text": text}]},
        "error": {"message": str(error), "type": type(error).__name__} if error else None,
        "timestamp": _now(),
    })
    if error is not None:
        detailed_log("ERROR", {
            "method": "tools/call",
            "tool_name": name,
            "error_details": {"message": str(error), "arguments": arguments},
            "timestamp": _now(),
        })
    return text


@mcp.tool()
async def web_search(
    query: str,
    limit: int = 5,
    site: Optional[str] = None,
    engines: Optional[str] = None,
    language: Optional[str] = None,
    safesearch: Optional[int] = None,
    page: int = 1,
    time_range: Optional[str] = None,
) -> str:
    """Search the web using a local SearxNG instance. Returns search results with titles, URLs, and snippets.

    Args:
        query: Search query.
        limit: Maximum number of results to return (1-20, default 5).
        site: Restrict search to a specific site (e.g., 'weather.gov').
        engines: Comma-separated list of search engines.
        language: Language code (e.g., 'en').
        safesearch: Safe search level: 0=off, 1=moderate, 2=strict.
        page: Page number for pagination (default 1).
        time_range: Time range filter: day, week, month or year.
    """
    arguments = {
        "query": query,
        "limit": limit,
        "site": site,
        "engines": engines,
        "language": language,
        "safesearch": safesearch,
        "page": page,
        "time_range": time_range,
    }
    return await _call_tool("web_search", arguments, get_service().web_search)


@mcp.tool()
async def web_fetch(url: str, max_chars: int = 20000) -> str:
    """Fetch and extract readable content from a web page URL.

    Args:
        url: HTTP/HTTPS URL to fetch (must be a valid URL).
        max_chars: Maximum characters to return (1000-100000, default 20000).
    """
    arguments = {"url": url, "max_chars": max_chars}
    return await _call_tool("web_fetch", arguments, get_service().web_fetch)


# =========================================================================
# Lifecycle
# =========================================================================

_shutdown_reason: Optional[str] = None


def _handle_sigterm(signum, frame):
    """Route SIGTERM through the same KeyboardInterrupt path as Ctrl-C."""
    global _shutdown_reason
    _shutdown_reason = signal.Signals(signum).name
    raise KeyboardInterrupt


def main() -> None:
    """Start the stdio server. Exit 0 on SIGINT/SIGTERM, 1 on startup failure."""
    try:
        config = get_config()
        log_file = configure_file_logging()

        detailed_log("SERVER_STARTUP", {
            "server_info": {
                "name": SERVER_NAME,
                "version": __version__,
                "searxng_base": config.search.base_url,
                "debug_enabled": config.logging.debug,
                "detailed_log_enabled": config.logging.detailed,
                "log_file": str(log_file) if log_file else None,
            },
            "environment": {
                "python_version": platform.python_version(),
                "platform": sys.platform,
                "cwd": os.getcwd(),
                "argv": sys.argv,
            },
            "timestamp": _now(),
        })

        signal.signal(signal.SIGTERM, _handle_sigterm)

        get_service()

        detailed_log("TRANSPORT_CONNECTING", {"transport_type": "stdio", "timestamp": _now()})
        logger.info("MCP Web Tools Server ready")
        logger.info(f"[{SERVER_NAME}] SearxNG Base: {config.search.base_url}")
        logger.info(f"[{SERVER_NAME}] Debug mode: {config.logging.debug}")
        logger.info(
            f"[{SERVER_NAME}] Detailed logging: "
            f"{'ENABLED' if config.logging.detailed else 'DISABLED'}"
        )
        if log_file:
            logger.info(f"[{SERVER_NAME}] Log file: {log_file}")
        detailed_log("SERVER_READY", {
            "message": "MCP Web Tools Server is ready and listening",
            "timestamp": _now(),
        })
    except Exception as e:
        logger.exception(f"Fatal error during startup: {e}")
        sys.exit(1)

    try:
        mcp.run()
    except KeyboardInterrupt:
        reason = _shutdown_reason or "SIGINT"
        detailed_log("SERVER_SHUTDOWN", {"reason": reason, "timestamp": _now()})
        logger.info(f"[{SERVER_NAME}] Shutting down gracefully ({reason})...")
        sys.exit(0)
    finally:
        shutdown_logging()


# Entry point for standalone execution: python -m webfetch_mcp.adapters.mcp.server
if __name__ == "__main__":
    main()
