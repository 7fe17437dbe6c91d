"""
Tests for webfetch_mcp.service: end-to-end tool behavior with faked network.
"""
import asyncio
import random

import httpx
import pytest

from conftest import LONG_PARAGRAPH, RecordingTransport, article_page, html_response, sequence_handler
from webfetch_mcp.service import WebToolsService, get_service, reset_service


def _search_payload(n, total=None):
    payload = {
        "results": [
            {
                "title": f"Result {i}",
                "url": f"https://r{i}.example/",
                "content": f"About result {i}",
                "engine": "brave",
            }
            for i in range(1, n + 1)
        ]
    }
    if total is not None:
        payload["number_of_results"] = total
    return payload


@pytest.fixture
def network(clock):
    """Fake search backend + origin server wired into a fresh service."""

    class Network:
        search_payload = _search_payload(3, total=42)
        search_status = 200
        page = html_response(article_page("Transit Plan Update"))
        primary_extractor = None
        refuse_connections = False

        def __init__(self):
            self.search = RecordingTransport(self._search, clock=clock)
            self.fetch = RecordingTransport(self._fetch, clock=clock)

        def _search(self, request):
            return httpx.Response(self.search_status, json=self.search_payload)

        def _fetch(self, request):
            if self.refuse_connections:
                raise httpx.ConnectError("connection refused", request=request)
            return sequence_handler(self.page)(request)

        def service(self):
            return WebToolsService(
                clock=clock,
                sleep=clock.sleep,
                rng=random.Random(3),
                search_transport=self.search,
                fetch_transport=self.fetch,
                primary_extractor=self.primary_extractor,
            )

    return Network()


def _run(coro):
    return asyncio.run(coro)


class TestWebSearch:
    def test_formats_numbered_results(self, network):
        text = _run(network.service().web_search("transit plans", limit=3))

        assert text.startswith('Search Results for "transit plans":')
        assert "1. **Result 1**" in text
        assert "   URL: https://r2.example/" in text
        assert "   About result 3" in text
        assert "   Source: brave" in text
        assert "4. **" not in text
        assert text.endswith("Found 3 results (42 total available)")

    def test_no_results(self, network):
        network.search_payload = {"results": []}
        text = _run(network.service().web_search("nothing here"))
        assert text == 'No search results found for query: "nothing here"'

    def test_missing_query(self, network):
        service = network.service()
        assert _run(service.web_search("   ")) == "Error: Missing required parameter 'query'"
        assert network.search.requests == []
        assert service.admission.call_count == 1

    def test_loosely_typed_items_still_listed(self, network):
        network.search_payload = {"results": [{"title": "A", "url": "https://a.example/", "engine": 5, "content": "x"}]}
        text = _run(network.service().web_search("q"))
        assert "1. **A**" in text
        assert "   Source: 5" in text
        assert text.endswith("Found 1 results")

    def test_backend_failure_is_text(self, network):
        network.search_status = 500
        text = _run(network.service().web_search("q"))
        assert text == "Search failed: HTTP 500 - Internal Server Error"

    def test_site_filter_reaches_backend(self, network):
        _run(network.service().web_search("pep 8", site="python.org"))
        assert network.search.requests[0].url.params["q"] == "pep 8 site:python.org"


class TestWebFetch:
    def test_returns_title_and_body(self, network):
        text = _run(network.service().web_fetch("https://news.example/transit"))
        assert text.startswith("**Transit Plan Update**\n\n")
        assert "Paragraph 4." in text

    def test_byline_line(self, network):
        network.primary_extractor = lambda html: ("Headline", "Jane Doe", LONG_PARAGRAPH)
        text = _run(network.service().web_fetch("https://news.example/transit"))
        assert text.startswith("**Headline**\n\nBy: Jane Doe\n\n")

    def test_max_chars_applied(self, network):
        network.page = html_response(article_page(paragraphs=40))
        text = _run(network.service().web_fetch("https://news.example/transit", max_chars=1500))
        title, body = text.split("\n\n", 1)
        assert len(body) == 1500

    def test_missing_url(self, network):
        assert _run(network.service().web_fetch("")) == "Error: Missing required parameter 'url'"

    def test_invalid_url(self, network):
        text = _run(network.service().web_fetch("ftp://files.example/"))
        assert text == "Invalid URL: Only HTTP and HTTPS URLs are supported"
        assert network.fetch.requests == []

    def test_http_failure_message(self, network):
        network.page = html_response("gone", status_code=404)
        text = _run(network.service().web_fetch("https://news.example/missing"))
        assert text.startswith("Page not found (404)")

    def test_pdf_message(self, network):
        network.page = httpx.Response(200, headers={"content-type": "application/pdf"}, content=b"%PDF-1.4")
        text = _run(network.service().web_fetch("https://docs.example/paper.pdf"))
        assert text.startswith("Cannot extract text from PDF files.")

    def test_extraction_failure_names_page_title(self, network):
        network.page = html_response("<html><head><title>Empty App</title></head><body><div id='root'></div></body></html>")
        text = _run(network.service().web_fetch("https://app.example/"))
        assert text.startswith("Unable to extract meaningful text content from this URL.")
        assert "Page title: Empty App" in text

    def test_garbled_output_replaced(self, network):
        network.primary_extractor = lambda html: ("Headline", None, "Ω€☃ " * 100)
        text = _run(network.service().web_fetch("https://odd.example/page"))
        assert text.startswith("The extracted content contains significant encoding issues")
        assert "Page title: Transit Plan Update" in text
        assert "URL: https://odd.example/page" in text

    def test_unexpected_exception_is_text(self, network):
        def explode(html):
            raise RuntimeError("parser exploded")

        network.primary_extractor = explode
        text = _run(network.service().web_fetch("https://news.example/transit"))
        assert text == "Fetch failed: parser exploded"

    def test_transport_error_is_text(self, network):
        network.refuse_connections = True
        text = _run(network.service().web_fetch("https://down.example/"))
        assert text == "Fetch failed: connection refused"


class TestSharedQuota:
    def test_burst_shared_between_tools(self, network):
        service = network.service()
        for _ in range(8):
            assert _run(service.web_search("q")).startswith("Search Results")

        text = _run(service.web_fetch("https://news.example/transit"))
        assert "Burst Limit Reached" in text
        assert network.fetch.requests == []

    def test_denied_call_does_no_work(self, network):
        service = network.service()
        for _ in range(8):
            _run(service.web_fetch(""))
        assert "Burst Limit Reached" in _run(service.web_search("q"))
        assert network.search.requests == []

    def test_warning_is_appended_last(self, network):
        service = network.service()
        for _ in range(5):
            _run(service.web_search("q"))

        text = _run(service.web_fetch("https://news.example/transit"))
        assert text.startswith("**Transit Plan Update**")
        assert text.endswith("\n\n⚠️ **2 quick calls remaining** - Consider spacing out requests.")

    def test_search_warning_after_summary(self, network):
        service = network.service()
        for _ in range(5):
            _run(service.web_search("q"))

        text = _run(service.web_search("q"))
        summary, warning = text.rsplit("\n\n", 1)
        assert summary.endswith("Found 3 results (42 total available)")
        assert "quick calls remaining" in warning


class TestSingleton:
    def test_get_service_is_shared(self):
        assert get_service() is get_service()

    def test_reset_gives_fresh_quota(self):
        first = get_service()
        first.admission.check()
        reset_service()
        assert get_service() is not first
        assert get_service().admission.call_count == 0
