"""
Utility functions for feed parsing and data normalisation.
"""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import structlog

logger = structlog.get_logger()

CANONICAL_HOST = "www.defense.gov"

# Hosts that serve the same articles as the canonical host
_HOST_ALIASES = [
    re.compile(r'//(?:www\.)?war\.gov(?=[/:?#]|$)', re.IGNORECASE),
    re.compile(r'//defense\.gov(?=[/:?#]|$)', re.IGNORECASE),
]


def normalize_url(url: Optional[str]) -> str:
    """
    Force https and rewrite alias hosts to the canonical host.

    Args:
        url: Raw link from the feed

    Returns:
        Normalised URL (empty string for empty input)
    """
    u = (url or "").strip()
    u = re.sub(r'^http:', 'https:', u, flags=re.IGNORECASE)
    for alias in _HOST_ALIASES:
        u = alias.sub(f'//{CANONICAL_HOST}', u)
    return u


def extract_tag(block: str, tag: str) -> str:
    """
    Extract the text of the first ``<tag>`` in an RSS item block.

    The CDATA form is tried first, the plain form second.

    Args:
        block: Contents of one ``<item>`` element
        tag: Tag name, e.g. ``title``

    Returns:
        Trimmed text, or empty string if the tag is missing
    """
    name = re.escape(tag)
    cdata = re.search(
        rf'<{name}><!\[CDATA\[([\s\S]*?)\]\]></{name}>', block, re.IGNORECASE
    )
    if cdata:
        return cdata.group(1).strip()

    plain = re.search(rf'<{name}>([\s\S]*?)</{name}>', block, re.IGNORECASE)
    if plain:
        return plain.group(1).strip()

    return ""


def _format_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_iso(value: Optional[str], default: Optional[datetime] = None) -> str:
    """
    Convert a feed date to an ISO-8601 UTC timestamp.

    Handles RFC 822 dates (``Fri, 17 Oct 2025 17:00:00 -0400``) and ISO
    strings. Anything else falls back to ``default`` (current time if not
    given).

    Args:
        value: Raw date string
        default: Timestamp used when parsing fails

    Returns:
        Timestamp like ``2025-10-17T21:00:00.000Z``
    """
    raw = (value or "").strip()
    if raw:
        try:
            return _format_iso(parsedate_to_datetime(raw))
        except (TypeError, ValueError, IndexError):
            pass
        try:
            return _format_iso(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            logger.debug("date_parse_failed", date_str=raw)

    return _format_iso(default or datetime.now(timezone.utc))
