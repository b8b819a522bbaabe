"""
Encoding for list-valued listing attributes stored in text columns.

Images, amenities and building amenities are persisted as JSON array text.
Older rows and some clients send comma separated strings instead, so decoding
falls back to splitting on commas when the text is not valid JSON.
"""

from typing import Any, Iterable, List, Optional, Union
import json
import logging

logger = logging.getLogger(__name__)


ListInput = Union[str, Iterable[Any], None]


def encode(values: Optional[Iterable[Any]]) -> str:
    """
    Encode a list of strings as JSON array text.

    Args:
        values: Items to encode; None encodes as an empty array

    Returns:
        JSON array text
    """
    if values is None:
        return "[]"
    return json.dumps([str(value) for value in values], ensure_ascii=False)


def decode(text: Optional[str]) -> List[str]:
    """
    Decode stored list text into a list of strings. Never raises.

    - valid JSON array: its string entries
    - valid JSON that is not an array: empty list
    - anything else: comma split, trimmed, empty entries dropped
    - None or empty text: empty list
    """
    if text is None:
        return []
    if not isinstance(text, str):
        logger.warning(f"Unexpected list field type {type(text).__name__}, treating as empty")
        return []
    if not text.strip():
        return []

    try:
        parsed = json.loads(text)
    except ValueError:
        logger.warning("List field is not valid JSON, falling back to comma split")
        return split_commas(text)

    if not isinstance(parsed, list):
        return []
    return [item for item in parsed if isinstance(item, str)]


def split_commas(text: str) -> List[str]:
    """Split comma separated text into trimmed, non-empty entries."""
    return [part.strip() for part in text.split(",") if part.strip()]


def coerce(value: ListInput) -> List[str]:
    """
    Accept either an array or encoded text from a request body.

    Arrays keep their non-empty string entries; text goes through decode().
    """
    if value is None:
        return []
    if isinstance(value, str):
        return decode(value)
    if isinstance(value, (list, tuple)):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def normalize_image_urls(urls: Iterable[Any], site_origin: str) -> List[str]:
    """
    Make image references absolute.

    Absolute http(s) URLs pass through unchanged. Relative paths get the
    site origin prepended with a single separating slash. Empty and
    non-string entries are dropped.

    Args:
        urls: Image references as supplied by the client
        site_origin: Origin such as "https://squareonerentals.com"

    Returns:
        List of absolute URLs
    """
    origin = site_origin.rstrip("/")
    normalized = []
    for url in urls:
        if not isinstance(url, str):
            continue
        url = url.strip()
        if not url:
            continue
        if url.startswith("http://") or url.startswith("https://"):
            normalized.append(url)
        elif url.startswith("/"):
            normalized.append(f"{origin}{url}")
        else:
            normalized.append(f"{origin}/{url}")
    return normalized
