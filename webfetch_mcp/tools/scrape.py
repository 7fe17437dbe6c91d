"""Page retrieval: paced, identity-randomized fetch with one transient retry."""
import asyncio
import random
from typing import Awaitable, Callable, Optional
from urllib.parse import urlsplit, SplitResult

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_random

from ..config import FetchedPage, ScrapingConfig, get_config
from ..logger import get_logger
from .errors import ContentError, InputError, UpstreamError
from .identity import IdentityRandomizer
from .pacing import OriginPacer
from .text import looks_binary

logger = get_logger(__name__)


DOCUMENT_EXTENSIONS = {'pdf', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx'}
BINARY_TYPE_MARKERS = ('application/', 'image/', 'video/', 'audio/')
HTML_TYPE_MARKERS = ('text/html', 'application/xhtml')


# =============================================================================
# URL + RESPONSE CLASSIFICATION
# =============================================================================

def validate_url(url: str) -> SplitResult:
    """Parse ``url`` and require an http(s) scheme and a hostname."""
    try:
        parsed = urlsplit(url.strip())
    except ValueError as e:
        raise InputError(f"Invalid URL: {e}")
    if parsed.scheme not in ('http', 'https'):
        raise InputError("Invalid URL: Only HTTP and HTTPS URLs are supported")
    if not parsed.hostname:
        raise InputError(f"Invalid URL: {url}")
    return parsed


def is_html(content_type: str) -> bool:
    content_type = (content_type or "").lower()
    return any(marker in content_type for marker in HTML_TYPE_MARKERS)


def classify_non_html(url: str, content_type: str) -> Optional[str]:
    """Explain why a non-HTML response can't be extracted, or None to let it through.

    Types outside both the document and binary families (``text/plain``, a
    missing header) are handed to the binary heuristic instead.
    """
    if is_html(content_type):
        return None

    path = urlsplit(url).path
    extension = path.rsplit('.', 1)[-1].lower() if '.' in path.rsplit('/', 1)[-1] else ''
    if extension in DOCUMENT_EXTENSIONS:
        return (
            f"Cannot extract text from {extension.upper()} files. This URL points to a "
            f"{content_type or 'binary'} file, not a web page. Please provide a URL to an "
            "HTML web page for text extraction."
        )

    lowered = (content_type or "").lower()
    if any(marker in lowered for marker in BINARY_TYPE_MARKERS):
        return (
            f"Cannot extract text from {content_type} content. This URL points to a binary "
            "file, not a web page. Please provide a URL to an HTML web page for text extraction."
        )

    return None


def status_message(status_code: int, reason: str = "") -> str:
    """Human-readable explanation for a failed fetch status."""
    if status_code == 403:
        return (
            f"Access forbidden ({status_code}). The site may be blocking automated "
            "requests or require authentication."
        )
    if status_code == 404:
        return (
            f"Page not found ({status_code}). The URL may be incorrect or the page "
            "may have been moved."
        )
    if status_code == 429:
        return (
            f"Rate limited ({status_code}). The site is temporarily blocking requests "
            "due to too many attempts."
        )
    if status_code == 503:
        return (
            f"Service unavailable ({status_code}). The site may be temporarily down "
            "or overloaded."
        )
    return f"Failed to fetch URL: HTTP {status_code} - {reason}"


# =============================================================================
# RETRIEVER
# =============================================================================

class PageRetriever:
    """Fetches one HTML page per call.

    Each attempt waits on the per-origin pacer, builds a new browser
    identity and streams the response so non-HTML bodies are never read.
    Transient statuses on the first attempt get exactly one retry.
    """

    def __init__(
        self,
        pacer: OriginPacer,
        config: Optional[ScrapingConfig] = None,
        identity: Optional[IdentityRandomizer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or get_config().scraping
        self.pacer = pacer
        self.rng = rng or random.Random()
        self.identity = identity or IdentityRandomizer(self.config, rng=self.rng)
        self._transport = transport
        self._sleep = sleep

    def _is_transient(self, page: FetchedPage) -> bool:
        return page.status_code in self.config.retry_statuses

    def _log_retry(self, retry_state: RetryCallState) -> None:
        page = retry_state.outcome.result()
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.info(f"Retrying {page.url} after HTTP {page.status_code} in {wait:.1f}s")

    async def fetch(self, url: str) -> FetchedPage:
        """Retrieve ``url`` and return its decoded HTML.

        Raises:
            InputError: malformed URL or non-http(s) scheme.
            UpstreamError: non-success status after the retry budget.
            ContentError: non-HTML content type or binary-looking body.
        """
        parsed = validate_url(url)
        url = parsed.geturl()
        hostname = parsed.hostname

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_random(self.config.retry_wait_min, self.config.retry_wait_max),
            retry=retry_if_result(self._is_transient),
            retry_error_callback=lambda state: state.outcome.result(),
            before_sleep=self._log_retry,
            sleep=self._sleep,
        )

        page: Optional[FetchedPage] = None
        async for attempt in retrying:
            with attempt:
                page = await self._attempt(url, hostname, attempt.retry_state.attempt_number)
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(page)

        if not page.ok:
            raise UpstreamError(status_message(page.status_code, page.reason), status_code=page.status_code)

        if looks_binary(page.text, self.config.binary_char_ratio):
            logger.info(f"Binary-looking body rejected for {url}")
            raise ContentError(
                "This URL appears to contain binary data or has encoding issues. The content "
                "cannot be properly extracted as readable text. Please verify the URL points "
                "to a standard HTML web page."
            )

        return page

    async def _attempt(self, url: str, hostname: str, attempt_number: int) -> FetchedPage:
        humanize = 0.0
        if attempt_number == 1:
            humanize = self.rng.uniform(self.config.humanize_delay_min, self.config.humanize_delay_max)
        await self.pacer.wait(hostname, extra_delay=humanize)

        identity = self.identity.build(hostname)
        logger.debug(f"Fetching {url} (attempt {attempt_number}) with headers: {', '.join(identity.headers)}")

        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url, headers=identity.headers) as response:
                content_type = response.headers.get("content-type", "")
                page = FetchedPage(
                    url=str(response.url),
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                    content_type=content_type,
                )
                logger.debug(f"Fetch response status: {response.status_code}, Content-Type: {content_type}")

                if not response.is_success:
                    return page

                rejection = classify_non_html(url, content_type)
                if rejection:
                    raise ContentError(rejection)

                await response.aread()
                page.text = response.text

        logger.debug(f"Fetched content length: {len(page.text)}")
        return page
