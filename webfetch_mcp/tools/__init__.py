"""
Tool building blocks: admission, pacing, identity, search, fetch, extraction.
"""

# errors.py
from .errors import (
    ToolError,
    InputError,
    UpstreamError,
    ContentError,
)

# text.py
from .text import (
    safe_text,
    strip_image_data,
    count_binary_chars,
    looks_binary,
    strip_non_printable,
    is_garbled,
)

# admission.py
from .admission import AdmissionController

# pacing.py
from .pacing import OriginPacer

# identity.py
from .identity import (
    BROWSER_USER_AGENTS,
    IdentityRandomizer,
    search_headers,
)

# search.py
from .search import (
    SearchExecutor,
    build_search_params,
    build_query_string,
    normalize_result,
)

# scrape.py
from .scrape import (
    PageRetriever,
    validate_url,
    classify_non_html,
    status_message,
)

# extract.py
from .extract import (
    ExtractionPipeline,
    clean_document,
    readability_extract,
)

# formatting.py
from .formatting import (
    append_warning,
    format_search_results,
    format_no_results,
    format_article,
    format_extraction_failure,
    format_encoding_problem,
)
