"""Response formatting: one text block per tool call."""
from typing import Optional

from ..config import ExtractedArticle, SearchResponse


def append_warning(text: str, warning: Optional[str]) -> str:
    """Advisory warnings always go last."""
    if warning:
        return f"{text}\n\n{warning}"
    return text


def format_search_results(query: str, response: SearchResponse, warning: Optional[str] = None) -> str:
    lines = [f'Search Results for "{query}":', ""]
    for index, result in enumerate(response.results, start=1):
        lines.append(f"{index}. **{result.title}**")
        lines.append(f"   URL: {result.url}")
        lines.append(f"   {result.snippet}")
        lines.append(f"   Source: {result.engine}")
        lines.append("")

    summary = f"Found {len(response.results)} results"
    if response.total:
        summary += f" ({response.total} total available)"
    lines.append(summary)

    return append_warning("\n".join(lines), warning)


def format_no_results(query: str) -> str:
    return f'No search results found for query: "{query}"'


def format_article(article: ExtractedArticle) -> str:
    text = f"**{article.title or 'Untitled'}**\n\n"
    if article.byline:
        text += f"By: {article.byline}\n\n"
    return text + article.body


def format_extraction_failure(page_title: str) -> str:
    return (
        "Unable to extract meaningful text content from this URL. The page may be:\n"
        "- A single-page application that loads content with JavaScript\n"
        "- A page with mostly images or media\n"
        "- Protected by authentication or paywall\n"
        "- Not a standard HTML page\n"
        "- Blocked by anti-bot measures\n"
        "\n"
        f"Page title: {page_title or 'No title'}\n"
        "Try accessing the URL directly in a browser to verify the content is accessible."
    )


def format_encoding_problem(page_title: str, url: str) -> str:
    return (
        "The extracted content contains significant encoding issues or non-text data. "
        "This may be due to:\n"
        "- Character encoding problems\n"
        "- Binary content mixed with text\n"
        "- Non-standard page format\n"
        "\n"
        f"Page title: {page_title or 'No title'}\n"
        f"URL: {url}"
    )
