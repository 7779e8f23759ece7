"""Import engine.

Pulls the canonical items of the active source and reconciles them with the
content store through the GUID mapping table: a guid seen before updates its
entity in place, a new guid creates one. Items are processed strictly in order
and each save commits on its own, so a failure part-way leaves the earlier
items imported.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from .config import ImporterSettings
from .db import (
    TEXT_FORMAT_HTML,
    VOCAB_DEPARTMENT,
    VOCAB_EMPLOYMENT_TYPE,
    VOCAB_WORK_AREA,
    VOCAB_WORK_TIME,
    Vacancy,
)
from .models import UNDEFINED_LANGUAGE, CanonicalVacancyItem, ImportResult
from .normalize import parse_source_date
from .registry import SourceRegistry
from .store import ContentStore, MappingStore
from .utils import sanitize_html, strip_tags, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

# (item attribute, vocabulary, entity attribute)
CATEGORY_FIELDS = [
    ("category_work_area", VOCAB_WORK_AREA, "work_area_tid"),
    ("category_work_time", VOCAB_WORK_TIME, "work_time_tid"),
    ("category_department", VOCAB_DEPARTMENT, "department_tid"),
    ("category_employment_type", VOCAB_EMPLOYMENT_TYPE, "employment_type_tid"),
]


class VacancyImporter:
    """Create or update vacancy entities from the configured source."""

    def __init__(
        self,
        registry: SourceRegistry,
        content: ContentStore,
        mappings: MappingStore,
        settings: ImporterSettings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.content = content
        self.mappings = mappings
        self.settings = settings
        self._clock = clock

    def execute(self) -> ImportResult:
        """Run one import and return how many vacancies were imported/updated.

        Source errors (configuration, transport, parse) propagate before anything
        is written. Store errors abort the remaining items.
        """
        plugin_id = self.registry.get_active()
        logger.info("Starting vacancy import from %s", plugin_id)
        items = self.registry.instantiate(plugin_id).get_data()

        now = self._clock()
        count = 0
        for item in items:
            entity_id = self.mappings.get_entity_id(plugin_id, item.guid)
            entity_id = self.create_vacancy(item, entity_id, now=now)
            if entity_id:
                self.mappings.upsert(entity_id, plugin_id, item.guid, now)
                count += 1
            else:
                logger.warning("Vacancy %s from %s was not saved", item.guid, plugin_id)

        logger.info("%d vacancies imported/updated from %s", count, plugin_id)
        return ImportResult(count=count, plugin_id=plugin_id)

    def create_vacancy(
        self,
        item: CanonicalVacancyItem,
        entity_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[int]:
        """Create the entity for `item`, or update entity `entity_id`; return its id."""
        now = now or self._clock()
        vacancy = self.content.load(entity_id) if entity_id else None

        if vacancy is None:
            if entity_id:
                logger.warning("Mapped vacancy %s for guid %s no longer exists; creating it again", entity_id, item.guid)
            vacancy = Vacancy(
                langcode=self.langcode(item),
                owner_id=self.settings.author_uid,
                published=True,
                created=self.to_store_datetime(item.create_time) or now,
            )

        vacancy.changed = now
        vacancy.title = strip_tags(item.title)

        vacancy.body_summary = strip_tags(item.summary) if item.summary else ""
        vacancy.body_format = TEXT_FORMAT_HTML
        vacancy.body_value = sanitize_html(item.body)

        if item.facts:
            vacancy.facts_value = sanitize_html(item.facts)
            vacancy.facts_format = TEXT_FORMAT_HTML

        if item.job_title:
            vacancy.job_title = strip_tags(item.job_title)

        for attr, vocabulary, field in CATEGORY_FIELDS:
            label = getattr(item, attr)
            if label:
                tid = self.term_id(vocabulary, label, vacancy.langcode)
                if tid:
                    setattr(vacancy, field, tid)

        if item.advertisement_url:
            vacancy.advertisement_url = item.advertisement_url
        if item.application_url:
            vacancy.application_url = item.application_url

        if item.due_date:
            due = self.to_store_datetime(item.due_date)
            if due is not None:
                vacancy.due_date = due
        if item.due_date_txt:
            vacancy.due_date_text = strip_tags(item.due_date_txt)

        if item.work_place:
            vacancy.work_place = strip_tags(item.work_place)

        return self.content.save(vacancy)

    def term_id(self, vocabulary: str, label: str, langcode: str) -> Optional[int]:
        """Look up or create the term; names match exactly, case included."""
        name = strip_tags(label).strip()
        if not name:
            return None
        return self.content.term_id(vocabulary, name, langcode)

    def langcode(self, item: CanonicalVacancyItem) -> str:
        if item.language_code and item.language_code != UNDEFINED_LANGUAGE:
            return item.language_code
        return self.settings.default_langcode

    def to_store_datetime(self, value: str) -> Optional[datetime]:
        """Site-local `YYYY-MM-DD HH:MM:SS` (or offset-aware ISO) to naive UTC."""
        parsed = parse_source_date(value)
        if parsed is None:
            if value:
                logger.warning("Could not parse date %r", value)
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=ZoneInfo(self.settings.timezone))
        return to_naive_utc(parsed)
