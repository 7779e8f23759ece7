"""Normalization helpers shared by the source adapters.

This module contains the deterministic mapping rules every vendor adapter uses:
- localized value resolution with the locale fallback chain
- plain text cleanup
- fact lookup (category extraction) and fact block rendering
- language code detection
- vendor date normalization

Keeping these rules centralized makes each adapter a thin field-by-field
mapping and keeps the behaviour identical across vendors.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional
from zoneinfo import ZoneInfo

from .models import UNDEFINED_LANGUAGE
from .utils import escape

logger = logging.getLogger(__name__)

FALLBACK_LOCALE = "en-GB"
SOURCE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Formats seen in vendor feeds that `datetime.fromisoformat` does not cover.
EXTRA_DATE_FORMATS = ["%d-%m-%Y %H:%M:%S", "%d-%m-%Y %H:%M", "%d-%m-%Y", "%d.%m.%Y"]

FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def format_plain_text(text: Any) -> str:
    """Trim and strip single and double quotes from a plain text value."""
    if text is None:
        return ""
    return str(text).strip().replace('"', "").replace("'", "")


def trim_text(text: Any) -> str:
    return "" if text is None else str(text).strip()


def _entries(localizations: Any) -> List[dict]:
    if not isinstance(localizations, list):
        return []
    return [entry for entry in localizations if isinstance(entry, dict)]


def localized_value(
    localizations: Any,
    locale: str,
    fallback: str = FALLBACK_LOCALE,
    clean: Callable[[Any], str] = format_plain_text,
) -> str:
    """Resolve a `[{locale, value}, ...]` list to one plain text value.

    Order: exact match on `locale`, then the `fallback` locale, then the first
    entry carrying a value, then an empty string.
    """
    entries = _entries(localizations)

    for entry in entries:
        if entry.get("locale") == locale:
            return clean(entry.get("value"))

    for entry in entries:
        if entry.get("locale") == fallback:
            return clean(entry.get("value"))

    for entry in entries:
        if entry.get("value"):
            return clean(entry["value"])

    return ""


def localized_field(container: Any, key: str, locale: str, clean: Callable[[Any], str] = format_plain_text) -> str:
    """Shortcut for `container[key]["localization"]` resolved by `localized_value`."""
    if not isinstance(container, dict):
        return ""
    node = container.get(key)
    if not isinstance(node, dict):
        return ""
    return localized_value(node.get("localization"), locale, clean=clean)


def first_locale(localizations: Any) -> str:
    for entry in _entries(localizations):
        loc = entry.get("locale")
        if isinstance(loc, str) and loc.strip():
            return loc.strip()
    return ""


def language_code(explicit: Optional[str] = None, fallback_locale: Optional[str] = None) -> str:
    """ISO 639-1 code from an explicit language attribute or a locale tag, else 'und'."""
    for candidate in (explicit, fallback_locale):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()[:2].lower()
    return UNDEFINED_LANGUAGE


def matches_fact_id(fact_id: Any, configured_id: Optional[str]) -> bool:
    """Case-insensitive, whitespace-trimmed identifier compare."""
    wanted = (configured_id or "").strip().lower()
    if not wanted or not isinstance(fact_id, (str, int)):
        return False
    return str(fact_id).strip().lower() == wanted


def fact_value(fact: dict, locale: str) -> str:
    """Resolve a fact's value: a localized string, or a list of titled sub-items."""
    value = fact.get("value")
    if isinstance(value, dict) and "localization" in value:
        return localized_value(value.get("localization"), locale)
    if isinstance(value, list):
        parts = [localized_field(item, "title", locale) for item in value]
        return ", ".join(p for p in parts if p)
    return ""


def find_fact(facts: Iterable[Any], configured_id: Optional[str], locale: str) -> str:
    """Value of the first fact whose identifier matches `configured_id`."""
    for fact in facts or []:
        if isinstance(fact, dict) and matches_fact_id(fact.get("jobDetailsId"), configured_id):
            return fact_value(fact, locale)
    return ""


def render_facts(
    facts: Iterable[Any],
    locale: str,
    job_id: Optional[str] = None,
    job_id_label: str = "Job ID",
) -> str:
    """Render facts as `<h3>title</h3><p>value</p>` pairs.

    Facts missing either a title or a value are left out. When `job_id` is
    given it is appended as a synthesized fact.
    """
    parts: List[str] = []
    for fact in facts or []:
        if not isinstance(fact, dict):
            continue
        title = localized_field(fact, "title", locale)
        value = fact_value(fact, locale)
        if title and value:
            parts.append(f"<h3>{escape(title)}</h3><p>{escape(value)}</p>")

    if job_id:
        parts.append(f"<h3>{escape(job_id_label)}</h3><p>{escape(job_id)}</p>")

    return "".join(parts)


def parse_source_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None

    iso = FRACTION_RE.sub(r"\1", raw.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    for fmt in EXTRA_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def format_source_date(value: Any, timezone: str = "UTC") -> str:
    """Normalize a vendor date to `YYYY-MM-DD HH:MM:SS` in the site timezone.

    Dates carrying an offset are converted; naive dates are taken as site-local.
    Unparseable input yields an empty string.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""

    parsed = parse_source_date(value)
    if parsed is None:
        logger.warning("Could not parse source date %r", value)
        return ""

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(timezone))
    return parsed.strftime(SOURCE_DATE_FORMAT)
