"""Text processing utilities: whitespace normalization and byte-noise heuristics."""
import re

_WHITESPACE_RE = re.compile(r'\s+')
# Control characters (minus tab/newline/CR), the DEL + Latin-1 high range, and
# U+FFFD, which is what undecodable high bytes become after charset decoding
_BINARY_CHAR_RE = re.compile(r'[\x00-\x08\x0E-\x1F\x7F-\xFF\uFFFD]')
_NON_PRINTABLE_RE = re.compile(r'[^\x20-\x7E\n\r\t]')


def safe_text(value, max_chars: int = 20000) -> str:
    """Collapse whitespace runs, trim, and cap at ``max_chars``."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()[:max_chars]


def normalized_length(text: str) -> int:
    return len(safe_text(text, max_chars=len(text or "")))


def strip_image_data(text: str) -> str:
    """Remove base64 data URIs and other embedded image/binary noise from text.

    Inline data URIs survive DOM text extraction on some pages and would
    otherwise eat the caller's character budget.
    """
    # data:image/...;base64,<long blob>  (greedy across whitespace)
    text = re.sub(r'data:image/[^;]{1,20};base64,[A-Za-z0-9+/=\s]{20,}', '[image removed]', text)
    # data:application/octet-stream or other binary data URIs
    text = re.sub(r'data:[a-z]+/[a-z0-9.+-]+;base64,[A-Za-z0-9+/=\s]{100,}', '[binary data removed]', text)
    # Stray long base64 blobs that aren't wrapped in a data URI (>200 chars of pure b64)
    text = re.sub(r'(?<![A-Za-z0-9+/=])[A-Za-z0-9+/]{200,}={0,3}(?![A-Za-z0-9+/=])', '[blob removed]', text)
    return text


def count_binary_chars(text: str) -> int:
    """Count control, high-byte and U+FFFD replacement characters in ``text``"""
    if not text:
        return 0
    return len(_BINARY_CHAR_RE.findall(text))


def looks_binary(text: str, ratio: float = 0.1) -> bool:
    """True when control/high-byte characters exceed ``ratio`` of the text."""
    if not text:
        return False
    return count_binary_chars(text) > len(text) * ratio


def strip_non_printable(text: str) -> str:
    return _NON_PRINTABLE_RE.sub("", text or "")


def is_garbled(text: str, ratio: float = 0.5) -> bool:
    """True when stripping non-printable characters loses more than ``1 - ratio``.

    Compares the stripped length against the untouched text.
    """
    if not text:
        return False
    return len(strip_non_printable(text)) < len(text) * ratio
