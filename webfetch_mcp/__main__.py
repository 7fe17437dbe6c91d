#!/usr/bin/env python3
"""
webfetch-mcp - Main Entry Point

Runs the MCP server on stdio.

Usage:
    python3 -m webfetch_mcp
    SEARXNG_BASE=http://localhost:8888 DEBUG=true python3 -m webfetch_mcp
"""

from webfetch_mcp.adapters.mcp.server import main as run_server


def main():
    """Main entry point"""
    run_server()


if __name__ == "__main__":
    main()
