"""
Configuration classes, singletons, and loaders for the web tools server.
"""
import threading
from pathlib import Path
from typing import Optional, List

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

__version__ = "0.1.8"


# =============================================================================
# CONFIGURATION MODELS
# =============================================================================

class AdmissionConfig(BaseModel):
    sustained_window_seconds: float = 300.0
    max_calls_per_window: int = 12
    burst_window_seconds: float = 30.0
    burst_limit: int = 8
    warning_threshold: int = 2


class PacingConfig(BaseModel):
    min_interval_seconds: float = 1.0


class SearchConfig(BaseModel):
    base_url: str = "http://localhost:8080"
    timeout: float = 15.0
    default_limit: int = 5
    max_limit: int = 20
    category: str = "general"
    user_agent: str = f"webfetch-mcp/{__version__} (+https://example.local)"
    time_ranges: List[str] = Field(default_factory=lambda: ["day", "week", "month", "year"])


class ScrapingConfig(BaseModel):
    timeout: float = 20.0
    humanize_delay_min: float = 0.5
    humanize_delay_max: float = 1.5
    retry_statuses: List[int] = Field(default_factory=lambda: [429, 502, 503, 504])
    max_attempts: int = 2
    retry_wait_min: float = 2.0
    retry_wait_max: float = 5.0
    binary_char_ratio: float = 0.1
    drop_dnt_probability: float = 0.3
    drop_client_hints_probability: float = 0.2


class ExtractionConfig(BaseModel):
    default_max_chars: int = 20000
    min_max_chars: int = 1000
    max_max_chars: int = 100000
    min_content_chars: int = 100
    min_region_chars: int = 200
    min_paragraph_chars: int = 20
    printable_ratio: float = 0.5


class LoggingConfig(BaseModel):
    level: str = "INFO"
    debug: bool = False
    detailed: bool = True
    file: str = "logs/webfetch-mcp-detailed.log"
    max_file_size: int = 10
    backup_count: int = 5


class Config(BaseModel):
    """Main configuration model"""
    admission: AdmissionConfig = Field(default_factory=AdmissionConfig)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    scraping: ScrapingConfig = Field(default_factory=ScrapingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# ENVIRONMENT SETTINGS
# =============================================================================

class Settings(BaseSettings):
    """Environment-based settings"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    searxng_base: Optional[str] = Field(default=None, alias="SEARXNG_BASE")
    debug: bool = Field(default=False, alias="DEBUG")
    detailed_log: bool = Field(default=True, alias="DETAILED_LOG")
    config_path: str = Field(default="config.yaml", alias="WEBFETCH_CONFIG")


# =============================================================================
# CONFIGURATION LOADER
# =============================================================================

def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from YAML file, falling back to defaults.

    Nothing is printed here: stdout carries the MCP stream.
    """
    path = Path(config_path)

    if path.exists():
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)

    return Config()


def get_settings() -> Settings:
    """Get environment settings"""
    return Settings()


# Global instances
_config: Optional[Config] = None
_settings: Optional[Settings] = None
_config_lock = threading.Lock()
_settings_lock = threading.Lock()


def get_config() -> Config:
    """Get global config instance, with environment overrides applied."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                settings = get_env_settings()
                config = load_config(settings.config_path)
                _apply_env_overrides(config, settings)
                _config = config
    return _config


def _apply_env_overrides(config: Config, settings: Settings) -> None:
    """Overlay SEARXNG_BASE / DEBUG / DETAILED_LOG onto the loaded config."""
    if settings.searxng_base:
        config.search.base_url = settings.searxng_base
    config.logging.debug = settings.debug
    if settings.debug:
        config.logging.level = "DEBUG"
    config.logging.detailed = settings.detailed_log


def get_env_settings() -> Settings:
    """Get global settings instance"""
    global _settings
    if _settings is None:
        with _settings_lock:
            if _settings is None:
                _settings = get_settings()
    return _settings


def set_config(config: Config) -> None:
    """Replace the global config singleton (thread-safe)."""
    global _config
    with _config_lock:
        _config = config


def reset_settings() -> None:
    """Drop the cached environment settings so the next read re-parses os.environ."""
    global _settings
    with _settings_lock:
        _settings = None
