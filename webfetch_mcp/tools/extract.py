"""Content extraction: layered fallback from raw HTML to readable text.

Stages run in order and each one only when the previous stage's output fails
its sufficiency check:

    cleanup -> readability (trafilatura) -> content region -> paragraphs -> failed

Cleanup always runs; the remaining stages share the cleaned soup.
"""
from typing import Callable, List, Optional, Tuple

import trafilatura
from bs4 import BeautifulSoup

from ..config import (
    ExtractedArticle,
    ExtractionConfig,
    ExtractionResult,
    ExtractionStage,
    get_config,
)
from ..logger import get_logger
from .text import normalized_length, safe_text, strip_image_data

logger = get_logger(__name__)


# Boilerplate regions removed before any extraction
UNWANTED_SELECTORS = [
    'script', 'style', 'nav', 'header', 'footer', 'aside',
    '.advertisement', '.ads', '.social-share', '.comments',
    '.sidebar', '.menu', '.navigation', '.cookie-notice',
    '[class*="ad-"]', '[id*="ad-"]', '[class*="social"]',
]

# Likely main-content containers, in priority order
CONTENT_SELECTORS = [
    'main', 'article', '[role="main"]', '.main-content', '.content',
    '.post-content', '.entry-content', '.article-content', '.story-body',
    '#content', '#main', '.container .content', '.page-content',
]

# (title, byline, text) or None
PrimaryExtractor = Callable[[str], Optional[Tuple[Optional[str], Optional[str], Optional[str]]]]


def readability_extract(html: str) -> Optional[Tuple[Optional[str], Optional[str], Optional[str]]]:
    """Run trafilatura's main-content algorithm and return (title, byline, text)."""
    try:
        document = trafilatura.bare_extraction(
            html,
            include_comments=False,
            include_tables=True,
            with_metadata=True,
        )
    except Exception as e:
        logger.debug(f"Trafilatura extraction failed: {e}")
        return None

    if document is None:
        return None
    if not isinstance(document, dict):
        document = document.as_dict()
    return document.get("title"), document.get("author"), document.get("text")


# =============================================================================
# STAGES
# =============================================================================

def clean_document(html: str) -> Tuple[BeautifulSoup, str]:
    """Parse ``html`` and strip boilerplate; returns (soup, page title)."""
    soup = BeautifulSoup(html, 'html.parser')
    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()

    for selector in UNWANTED_SELECTORS:
        for element in soup.select(selector):
            # nested matches die with their ancestor
            if not element.decomposed:
                element.decompose()

    return soup, title


class ExtractionPipeline:
    """Ordered extraction stages over one cleaned document."""

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        primary_extractor: Optional[PrimaryExtractor] = None,
    ):
        self.config = config or get_config().extraction
        self.primary_extractor = primary_extractor or readability_extract

    def stages(self) -> List[Tuple[ExtractionStage, Callable[[BeautifulSoup, str], Optional[ExtractedArticle]]]]:
        return [
            (ExtractionStage.READABILITY, self._readability),
            (ExtractionStage.CONTENT_REGION, self._content_region),
            (ExtractionStage.PARAGRAPHS, self._paragraphs),
        ]

    def run(self, html: str) -> ExtractionResult:
        """Run every stage until one yields a sufficient article."""
        soup, page_title = clean_document(html)

        for stage, extract in self.stages():
            article = extract(soup, page_title)
            if article is not None:
                logger.debug(f"Extraction succeeded at stage: {stage.value}")
                return ExtractionResult(stage=stage, article=article, page_title=page_title)
            logger.debug(f"Extraction stage {stage.value} insufficient, falling through")

        return ExtractionResult(stage=ExtractionStage.FAILED, page_title=page_title)

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    def _readability(self, soup: BeautifulSoup, page_title: str) -> Optional[ExtractedArticle]:
        extracted = self.primary_extractor(str(soup))
        if not extracted:
            return None
        title, byline, text = extracted
        if not text or normalized_length(text) <= self.config.min_content_chars:
            return None
        return ExtractedArticle(
            title=(title or page_title or "Untitled").strip(),
            byline=byline.strip() if byline and byline.strip() else None,
            body=text,
        )

    def _content_region(self, soup: BeautifulSoup, page_title: str) -> Optional[ExtractedArticle]:
        best = ""
        for selector in CONTENT_SELECTORS:
            for element in soup.select(selector):
                text = element.get_text()
                if len(text) > len(best) and len(text) >= self.config.min_region_chars:
                    best = text

        if not best or len(best.strip()) < self.config.min_content_chars:
            body = soup.body or soup
            best = body.get_text()

        if len(best.strip()) < self.config.min_content_chars:
            return None
        return ExtractedArticle(title=page_title or "Untitled", body=best)

    def _paragraphs(self, soup: BeautifulSoup, page_title: str) -> Optional[ExtractedArticle]:
        paragraphs = [
            p.get_text() for p in soup.find_all('p')
            if len(p.get_text().strip()) > self.config.min_paragraph_chars
        ]
        text = "\n\n".join(paragraphs)
        if len(text) < self.config.min_content_chars:
            return None
        return ExtractedArticle(title=page_title or "Untitled", body=text)

    # ------------------------------------------------------------------
    # Output shaping
    # ------------------------------------------------------------------

    def clamp_max_chars(self, max_chars: Optional[int]) -> int:
        if max_chars is None:
            return self.config.default_max_chars
        return max(self.config.min_max_chars, min(int(max_chars), self.config.max_max_chars))

    def finalize(self, article: ExtractedArticle, max_chars: Optional[int] = None) -> ExtractedArticle:
        """Collapse whitespace and truncate the body to the caller's budget."""
        body = safe_text(strip_image_data(article.body), self.clamp_max_chars(max_chars))
        return article.model_copy(update={"body": body})
