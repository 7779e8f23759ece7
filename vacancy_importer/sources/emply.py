"""Emply vacancy source adapter.

Emply (https://www.emply.com) exposes the postings of one media as a JSON list.
Most text fields are `{"localization": [{"locale": ..., "value": ...}]}`
objects, and the structured metadata ("facts") comes as a `data` list whose
entries are identified by a `jobDetailsId`. The admin maps those ids to the
work area / work time / employment type / work place categories.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import EmplySettings
from ..errors import ParseError
from ..models import CanonicalVacancyItem
from ..normalize import (
    find_fact,
    first_locale,
    format_source_date,
    language_code,
    localized_field,
    render_facts,
    trim_text,
)
from .base import VacancySource

logger = logging.getLogger(__name__)


def _dig(obj: Any, *keys: Any) -> Any:
    """Follow dict keys / list indexes, returning None on the first miss."""
    for key in keys:
        if isinstance(obj, dict):
            obj = obj.get(key)
        elif isinstance(obj, list) and isinstance(key, int) and -len(obj) <= key < len(obj):
            obj = obj[key]
        else:
            return None
    return obj


class EmplySource(VacancySource):
    """Fetch postings from the Emply API and normalize them."""

    name = "emply"
    label = "Emply"
    description = "Import of vacancies from Emply (https://www.emply.com)"
    settings_model = EmplySettings

    settings: EmplySettings

    def fetch(self, settings: EmplySettings) -> List[Dict[str, Any]]:
        url = settings.api_domain.strip().rstrip("/") + settings.postings_path.format(media_id=settings.media_id.strip())
        resp = self._get(
            url,
            params={"apiKey": settings.api_key.strip()},
            headers={"Accept": "application/json"},
        )

        try:
            payload = resp.json()
        except ValueError as exc:
            logger.error("emply: API response is not valid JSON: %s", resp.text[:500])
            raise ParseError(self.name, "API response is not valid JSON") from exc

        if not isinstance(payload, list):
            logger.error("emply: expected a list of postings, got %s", type(payload).__name__)
            raise ParseError(self.name, "API response is not a list of postings")
        return payload

    def records(self, payload: List[Any]) -> List[Any]:
        return payload

    def map_record(self, vacancy: Dict[str, Any]) -> CanonicalVacancyItem:
        s = self.settings
        guid = trim_text(vacancy["jobId"])

        lang = language_code(
            _dig(vacancy, "ad", "attributes", "language"),
            first_locale(_dig(vacancy, "title", "localization")),
        )

        advertisement = _dig(vacancy, "advertisements", 0)
        data = vacancy.get("data")
        facts: List[Any] = data if isinstance(data, list) else []

        department = localized_field(vacancy.get("department"), "title", lang)
        if not department:
            department = find_fact(facts, s.fact_id_department, lang)

        return CanonicalVacancyItem(
            guid=guid,
            language_code=lang,
            create_time=format_source_date(vacancy.get("created"), self.timezone),
            advertisement_title=localized_field(advertisement, "title", lang),
            job_title=localized_field(vacancy, "title", lang),
            body=localized_field(advertisement, "content", lang, clean=trim_text),
            facts=render_facts(facts, lang, job_id=guid if s.insert_jobid_in_facts else None),
            category_work_area=find_fact(facts, s.fact_id_work_area, lang),
            category_work_time=find_fact(facts, s.fact_id_work_time, lang),
            category_employment_type=find_fact(facts, s.fact_id_employment_type, lang),
            category_department=department,
            work_place=find_fact(facts, s.fact_id_work_place, lang),
            advertisement_url=localized_field(vacancy, "adUrl", lang, clean=trim_text),
            application_url=localized_field(vacancy, "applyUrl", lang, clean=trim_text),
            due_date=format_source_date(vacancy.get("deadline"), self.timezone),
            due_date_txt=localized_field(vacancy, "deadlineText", lang),
        )
