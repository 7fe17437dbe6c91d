"""Web search against a SearXNG-compatible JSON backend."""
import json
import time
from typing import Any, Dict, List, Optional

import httpx

from ..config import SearchConfig, SearchParams, SearchResponse, SearchResult, get_config
from ..logger import get_logger
from .errors import UpstreamError
from .identity import search_headers
from .text import safe_text

logger = get_logger(__name__)

TITLE_MAX_CHARS = 300
SNIPPET_MAX_CHARS = 500


# =============================================================================
# PARAMETER HANDLING
# =============================================================================

def build_search_params(
    query: str,
    limit: Optional[int] = None,
    site: Optional[str] = None,
    engines: Optional[str] = None,
    language: Optional[str] = None,
    safesearch: Optional[int] = None,
    page: Optional[int] = None,
    time_range: Optional[str] = None,
    config: Optional[SearchConfig] = None,
) -> SearchParams:
    """Clamp and clean raw tool arguments into ``SearchParams``."""
    config = config or get_config().search

    limit = config.default_limit if limit is None else int(limit)
    limit = max(1, min(limit, config.max_limit))
    page = 1 if page is None else max(1, int(page))

    if safesearch is not None:
        safesearch = max(0, min(int(safesearch), 2))

    if time_range and time_range not in config.time_ranges:
        logger.debug(f"Ignoring unsupported time_range: {time_range}")
        time_range = None

    return SearchParams(
        query=query,
        limit=limit,
        site=site or None,
        engines=engines or None,
        language=language or None,
        safesearch=safesearch,
        page=page,
        time_range=time_range,
    )


def build_query_string(params: SearchParams, category: str = "general") -> Dict[str, str]:
    """Backend query parameters; site restriction rides inside ``q``."""
    query = {
        "format": "json",
        "q": params.effective_query,
        "pageno": str(params.page),
        "categories": category,
    }
    if params.limit:
        query["count"] = str(params.limit)
    if params.engines:
        query["engines"] = params.engines
    if params.language:
        query["language"] = params.language
    if params.safesearch is not None:
        query["safesearch"] = str(params.safesearch)
    if params.time_range:
        query["time_range"] = params.time_range
    return query


def normalize_result(item: Any) -> SearchResult:
    """Map one loosely-typed backend item onto ``SearchResult``."""
    if not isinstance(item, dict):
        item = {}
    return SearchResult(
        title=safe_text(_as_text(item.get("title")), TITLE_MAX_CHARS) or "No title",
        url=_as_text(item.get("url")).strip(),
        snippet=safe_text(
            _as_text(item.get("content")) or _as_text(item.get("description")),
            SNIPPET_MAX_CHARS,
        ),
        engine=_as_text(item.get("engine")).strip() or "unknown",
        score=_as_number(item.get("score")),
        category=_as_text(item.get("category")).strip() or "general",
    )


def _as_text(value: Any) -> str:
    # backends occasionally send numbers or lists where strings belong
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> float:
    try:
        return float(value) if value else 0
    except (TypeError, ValueError):
        return 0


# =============================================================================
# SEARCH EXECUTOR
# =============================================================================

class SearchExecutor:
    """Issues one JSON query per call to the configured search backend."""

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config().search
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.config.base_url.rstrip("/") + "/search"

    async def search(self, params: SearchParams) -> SearchResponse:
        """Run ``params`` against the backend and normalize the hits.

        Raises:
            UpstreamError: non-2xx status or a body that isn't JSON.
        """
        query = build_query_string(params, self.config.category)
        logger.debug(f"Searching: {self.endpoint} q={query['q']!r}")

        started = time.monotonic()
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(
                self.endpoint,
                params=query,
                headers=search_headers(self.config.user_agent),
            )
        logger.debug(
            f"Search response in {(time.monotonic() - started) * 1000:.0f}ms, "
            f"status: {response.status_code}"
        )

        if not response.is_success:
            logger.warning(f"Search backend error {response.status_code}: {response.text[:200]}")
            raise UpstreamError(
                f"Search failed: HTTP {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = json.loads(response.text)
        except json.JSONDecodeError as e:
            logger.debug(f"JSON parse error: {e}")
            raise UpstreamError("Search failed: Invalid JSON response from search engine")

        if not isinstance(data, dict):
            data = {}
        raw_results: List[Any] = data.get("results") or []
        if not isinstance(raw_results, list):
            raw_results = []

        results = [normalize_result(item) for item in raw_results[:params.limit]]
        total = data.get("number_of_results")
        logger.debug(f"Parsed {len(raw_results)} raw results, keeping {len(results)}")

        return SearchResponse(
            results=results,
            total=int(total) if isinstance(total, (int, float)) and total else None,
        )
