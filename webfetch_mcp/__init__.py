"""
webfetch-mcp - live web search and clean page extraction for local AI clients
"""

from .config import __version__, get_config, get_env_settings, load_config
from .service import WebToolsService, get_service
from .tools import AdmissionController, OriginPacer, SearchExecutor, PageRetriever, ExtractionPipeline
from .logger import get_logger

__author__ = "webfetch-mcp"

__all__ = [
    # Config
    "get_config",
    "get_env_settings",
    "load_config",

    # Service
    "WebToolsService",
    "get_service",

    # Tools
    "AdmissionController",
    "OriginPacer",
    "SearchExecutor",
    "PageRetriever",
    "ExtractionPipeline",

    # Logger
    "get_logger",
]
