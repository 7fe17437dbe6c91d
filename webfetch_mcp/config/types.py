"""
Domain models (enums + Pydantic data models) for the web tools server.
"""
from typing import Optional, List, Dict
from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================

class ExtractionStage(str, Enum):
    READABILITY = "readability"
    CONTENT_REGION = "content_region"
    PARAGRAPHS = "paragraphs"
    FAILED = "failed"


# =============================================================================
# ADMISSION
# =============================================================================

class AdmissionDecision(BaseModel):
    """Outcome of one admission check"""
    limited: bool = False
    message: Optional[str] = None
    warning: Optional[str] = None


# =============================================================================
# SEARCH
# =============================================================================

class SearchParams(BaseModel):
    """Validated web_search arguments"""
    query: str
    limit: int = 5
    site: Optional[str] = None
    engines: Optional[str] = None
    language: Optional[str] = None
    safesearch: Optional[int] = None
    page: int = 1
    time_range: Optional[str] = None

    @property
    def effective_query(self) -> str:
        return f"{self.query} site:{self.site}" if self.site else self.query


class SearchResult(BaseModel):
    """One normalized search hit"""
    title: str = "No title"
    url: str = ""
    snippet: str = ""
    engine: str = "unknown"
    score: float = 0
    category: str = "general"


class SearchResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)
    total: Optional[int] = None


# =============================================================================
# FETCH / EXTRACTION
# =============================================================================

class RequestIdentity(BaseModel):
    """Browser fingerprint used for a single outbound fetch"""
    user_agent: str
    headers: Dict[str, str] = Field(default_factory=dict)


class FetchedPage(BaseModel):
    url: str
    status_code: int
    reason: str = ""
    content_type: str = ""
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ExtractedArticle(BaseModel):
    """Readable article produced by exactly one extraction stage"""
    title: str
    byline: Optional[str] = None
    body: str


class ExtractionResult(BaseModel):
    """Result threaded through the extraction stages.

    ``stage`` records which stage produced ``article``; ``FAILED`` carries no
    article, only the page title for the failure message.
    """
    stage: ExtractionStage
    article: Optional[ExtractedArticle] = None
    page_title: str = ""

    @property
    def succeeded(self) -> bool:
        return self.stage != ExtractionStage.FAILED and self.article is not None
