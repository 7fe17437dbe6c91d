"""
Configuration package: settings loaders and domain models.
"""
from .settings import (
    __version__,
    AdmissionConfig,
    PacingConfig,
    SearchConfig,
    ScrapingConfig,
    ExtractionConfig,
    LoggingConfig,
    Config,
    Settings,
    load_config,
    get_settings,
    get_config,
    get_env_settings,
    set_config,
    reset_settings,
)
from .types import (
    ExtractionStage,
    AdmissionDecision,
    SearchParams,
    SearchResult,
    SearchResponse,
    RequestIdentity,
    FetchedPage,
    ExtractedArticle,
    ExtractionResult,
)
