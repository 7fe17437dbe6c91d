from .server import mcp, main, web_search, web_fetch

__all__ = ["mcp", "main", "web_search", "web_fetch"]
