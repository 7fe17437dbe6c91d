"""
WebToolsService: facade behind the web_search and web_fetch tools.

Owns the process-wide admission controller and per-origin pacer so both tool
handlers draw from one quota pool and one pacing map. Every failure is turned
into a plain text reply here; nothing escapes as a protocol fault.
"""
import asyncio
import random
import threading
import time
from typing import Awaitable, Callable, Optional

import httpx

from .config import Config, get_config
from .logger import get_logger
from .tools import (
    AdmissionController,
    OriginPacer,
    SearchExecutor,
    PageRetriever,
    ExtractionPipeline,
    ToolError,
    build_search_params,
    is_garbled,
    append_warning,
    format_search_results,
    format_no_results,
    format_article,
    format_extraction_failure,
    format_encoding_problem,
)
from .tools.extract import PrimaryExtractor

logger = get_logger(__name__)


def _describe(error: Exception) -> str:
    # httpx timeouts often stringify to ""
    return str(error) or type(error).__name__


class WebToolsService:
    """Facade for the two tool handlers."""

    def __init__(
        self,
        config: Optional[Config] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
        search_transport: Optional[httpx.AsyncBaseTransport] = None,
        fetch_transport: Optional[httpx.AsyncBaseTransport] = None,
        primary_extractor: Optional[PrimaryExtractor] = None,
    ):
        self.config = config or get_config()
        self.admission = AdmissionController(self.config.admission, clock=clock)
        self.pacer = OriginPacer(self.config.pacing, clock=clock, sleep=sleep)
        self.searcher = SearchExecutor(self.config.search, transport=search_transport)
        self.retriever = PageRetriever(
            self.pacer,
            self.config.scraping,
            transport=fetch_transport,
            sleep=sleep,
            rng=rng,
        )
        self.pipeline = ExtractionPipeline(self.config.extraction, primary_extractor=primary_extractor)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def web_search(
        self,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        site: Optional[str] = None,
        engines: Optional[str] = None,
        language: Optional[str] = None,
        safesearch: Optional[int] = None,
        page: Optional[int] = None,
        time_range: Optional[str] = None,
    ) -> str:
        """Search the backend and return a numbered result list.

        Returns:
            Formatted results, a "no results" notice, or an explanatory
            error message.
        """
        logger.debug(f"web_search called: query={query!r} limit={limit} site={site}")

        decision = self.admission.check()
        if decision.limited:
            return decision.message

        if not query or not str(query).strip():
            return "Error: Missing required parameter 'query'"

        try:
            params = build_search_params(
                query,
                limit=limit,
                site=site,
                engines=engines,
                language=language,
                safesearch=safesearch,
                page=page,
                time_range=time_range,
                config=self.config.search,
            )
            response = await self.searcher.search(params)
        except ToolError as e:
            return str(e)
        except Exception as e:
            logger.exception(f"Exception in web_search: {e}")
            return f"Search failed: {_describe(e)}"

        if not response.results:
            return format_no_results(query)

        logger.debug(f"Returning {len(response.results)} search results")
        return format_search_results(query, response, decision.warning)

    async def web_fetch(self, url: Optional[str] = None, max_chars: Optional[int] = None) -> str:
        """Fetch ``url`` and return its readable text.

        Returns:
            Title, optional byline and body text, or an explanatory message
            for invalid input, HTTP failures and unextractable content.
        """
        logger.debug(f"web_fetch called: url={url!r} max_chars={max_chars}")

        decision = self.admission.check()
        if decision.limited:
            return decision.message

        if not url or not str(url).strip():
            return "Error: Missing required parameter 'url'"

        try:
            page = await self.retriever.fetch(str(url))
            result = self.pipeline.run(page.text)
            if not result.succeeded:
                logger.info(f"No extractable content at {url}")
                return format_extraction_failure(result.page_title)

            article = self.pipeline.finalize(result.article, max_chars)
            text = format_article(article)
        except ToolError as e:
            return str(e)
        except Exception as e:
            logger.exception(f"Exception in web_fetch: {e}")
            return f"Fetch failed: {_describe(e)}"

        if is_garbled(text, self.config.extraction.printable_ratio):
            logger.info(f"Extracted content from {url} looks garbled")
            return format_encoding_problem(result.page_title, str(url))

        logger.debug(f"Extraction via {result.stage.value} completed, content length: {len(text)}")
        return append_warning(text, decision.warning)


# ----------------------------------------------------------------------
# Singleton
# ----------------------------------------------------------------------

_service: Optional[WebToolsService] = None
_service_lock = threading.Lock()


def get_service() -> WebToolsService:
    """Return the process-wide WebToolsService (created on first use)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = WebToolsService()
    return _service


def reset_service() -> None:
    """Drop the singleton so the next get_service() starts with empty quotas."""
    global _service
    with _service_lock:
        _service = None
