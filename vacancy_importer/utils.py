"""Utility helpers shared across the importer."""

from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from typing import Optional

from bs4 import BeautifulSoup

# Elements removed together with their content.
UNSAFE_TAGS = ["script", "style", "iframe", "object", "embed", "noscript"]
URL_ATTRS = ("href", "src", "action", "formaction", "xlink:href")
UNSAFE_SCHEMES = ("javascript:", "vbscript:")
# Browsers ignore control characters and whitespace inside a URL scheme.
SCHEME_NOISE_RE = re.compile(r"[\x00-\x20]+")


def strip_tags(text: Optional[str]) -> str:
    """Remove HTML tags, keeping the text content."""
    if not text:
        return ""
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(UNSAFE_TAGS):
        tag.decompose()
    return soup.get_text()


def decode_entities(text: Optional[str]) -> str:
    return html.unescape(text or "")


def escape(text: Optional[str]) -> str:
    return html.escape(text or "", quote=True)


def _unsafe_url(value) -> bool:
    if isinstance(value, list):
        value = " ".join(value)
    return SCHEME_NOISE_RE.sub("", value or "").lower().startswith(UNSAFE_SCHEMES)


def sanitize_html(text: Optional[str]) -> str:
    """Decode entities and drop active content from vendor HTML.

    Vendors send the body either as markup or as entity-encoded markup, so the
    entities are decoded first and the cleanup runs on the parsed tree.
    """
    out = decode_entities(text)
    if not out.strip():
        return ""

    soup = BeautifulSoup(out, "html.parser")
    for tag in soup(UNSAFE_TAGS):
        tag.decompose()
    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            name = attr.lower()
            if name.startswith("on") or (name in URL_ATTRS and _unsafe_url(tag.attrs[attr])):
                del tag.attrs[attr]
    return str(soup).strip()


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the representation used in the store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
