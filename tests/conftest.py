"""
Shared fixtures for the webfetch-mcp test suite.

Provides isolated test environments with:
- A pristine Config per test (detailed file logging off)
- Service singleton reset, so quotas never leak between tests
- A fake clock whose async sleep advances time instead of waiting
- Helpers for faking the search backend and origin servers with httpx
"""
import sys
from pathlib import Path
from typing import Callable, List, Tuple

import httpx
import pytest

# Ensure project root is on sys.path so `webfetch_mcp` is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ---------------------------------------------------------------------------
# Core fixtures: config + service isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_environment():
    """Auto-use fixture that gives every test its own config + service."""
    from webfetch_mcp.config.settings import Config, set_config
    from webfetch_mcp import service as svc_mod

    config = Config()
    config.logging.detailed = False
    config.search.base_url = "http://searx.test"

    set_config(config)
    svc_mod.reset_service()

    yield config

    svc_mod.reset_service()
    set_config(Config())


@pytest.fixture
def test_config(isolated_environment):
    """Explicit access to the test Config object."""
    return isolated_environment


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

class FakeClock:
    """Monotonic clock stand-in; ``sleep`` advances time and records the wait."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request and the clock time it was sent."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response], clock: FakeClock = None):
        self.requests: List[httpx.Request] = []
        self.dispatched_at: List[Tuple[str, float]] = []
        self._clock = clock

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if self._clock is not None:
                self.dispatched_at.append((request.url.host, self._clock()))
            return handler(request)

        super().__init__(recording_handler)


def html_response(body: str, status_code: int = 200, content_type: str = "text/html; charset=utf-8") -> httpx.Response:
    return httpx.Response(status_code, headers={"content-type": content_type}, content=body.encode("utf-8"))


def sequence_handler(*responses: httpx.Response) -> Callable[[httpx.Request], httpx.Response]:
    """Hand out copies of ``responses`` in order, repeating the last one."""
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        template = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(
            template.status_code,
            headers=template.headers,
            content=template.content,
        )

    return handler


LONG_PARAGRAPH = (
    "The committee spent most of the afternoon reviewing the proposed changes to the "
    "regional transit plan, focusing on how new bus corridors would connect outlying "
    "neighbourhoods with the central station and the university campus."
)


def article_page(title: str = "Transit Plan Update", paragraphs: int = 5) -> str:
    body = "".join(f"<p>{LONG_PARAGRAPH} Paragraph {i}.</p>" for i in range(paragraphs))
    return (
        f"<html><head><title>{title}</title></head><body>"
        f"<nav>Home | News | Contact</nav>"
        f"<article><h1>{title}</h1>{body}</article>"
        f"<footer>Copyright 2025</footer>"
        f"</body></html>"
    )
