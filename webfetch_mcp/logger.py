"""
Logging Module for the web tools server
Provides rich console output on stderr and the detailed JSON request log
"""
import json
import logging
import logging.handlers
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import get_config

# stdout carries the MCP stream, so everything human-facing goes to stderr
console = Console(stderr=True)

ROOT_LOGGER_NAME = "webfetch_mcp"
DETAILED_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.detailed"

_setup_lock = threading.Lock()
_console_handler: Optional[RichHandler] = None
_file_handler: Optional[logging.Handler] = None


def _ensure_console_handler() -> None:
    """Attach the rich console handler to the package logger once."""
    global _console_handler
    if _console_handler is not None:
        return
    with _setup_lock:
        if _console_handler is not None:
            return
        config = get_config()
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(logging.DEBUG)
        root.propagate = False

        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
        root.addHandler(handler)
        _console_handler = handler


class ToolsLogger:
    """Custom logger with rich formatting"""

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.name = name
        _ensure_console_handler()
        self.logger = logging.getLogger(name)

    def debug(self, msg: str, *args, **kwargs):
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self.logger.critical(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self.logger.exception(msg, *args, **kwargs)


# Logger cache
_loggers = {}


def get_logger(name: str = ROOT_LOGGER_NAME) -> ToolsLogger:
    """Get or create a logger instance"""
    if name not in _loggers:
        _loggers[name] = ToolsLogger(name)
    return _loggers[name]


# =============================================================================
# DETAILED FILE LOG
# =============================================================================

def configure_file_logging() -> Optional[Path]:
    """Attach the rotating detailed-log file handler when DETAILED_LOG is on.

    Returns the log file path, or None when detailed logging is disabled.
    Called once at server startup, never at import time.
    """
    global _file_handler
    config = get_config()
    _ensure_console_handler()
    if not config.logging.detailed:
        return None

    log_file = Path(config.logging.file)
    with _setup_lock:
        if _file_handler is None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=config.logging.max_file_size * 1024 * 1024,
                backupCount=config.logging.backup_count,
                encoding='utf-8'
            )
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logging.getLogger(ROOT_LOGGER_NAME).addHandler(handler)
            _file_handler = handler

    banner = "=" * 80
    _file_handler.stream.write(
        f"\n{banner}\nMCP Server Session Started: {datetime.now(timezone.utc).isoformat()}\n{banner}\n"
    )
    _file_handler.flush()
    return log_file


def detailed_log(category: str, data: Any) -> None:
    """Record one structured event (request, response, lifecycle) as JSON.

    Entries are emitted at DEBUG, so they reach the file handler always and
    the console only when DEBUG is set.
    """
    if not get_config().logging.detailed:
        return
    entry = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    get_logger(DETAILED_LOGGER_NAME).debug(f"{category}: {entry}")


def shutdown_logging() -> None:
    """Flush and detach the file handler (used on shutdown and by tests)."""
    global _file_handler
    with _setup_lock:
        if _file_handler is not None:
            logging.getLogger(ROOT_LOGGER_NAME).removeHandler(_file_handler)
            _file_handler.close()
            _file_handler = None
