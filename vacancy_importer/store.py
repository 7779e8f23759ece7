"""Content store and GUID mapping store.

Both stores work on a caller-supplied SQLAlchemy session and commit per write;
a run is never wrapped in one transaction. Any SQLAlchemy failure is rolled
back and re-raised as a `PersistError` (or `TermCreationError`).
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import SourceGuidMapping, TaxonomyTerm, Vacancy
from .errors import PersistError, TermCreationError

logger = logging.getLogger(__name__)


class MappingStore:
    """Persistent (plugin_id, guid) <-> entity id table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_entity_id(self, plugin_id: str, guid: str) -> Optional[int]:
        stmt = select(SourceGuidMapping.nid).where(
            SourceGuidMapping.plugin_id == plugin_id,
            SourceGuidMapping.guid == guid,
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistError(f"Could not look up mapping for {plugin_id}:{guid}: {exc}") from exc

    def get(self, entity_id: int) -> Optional[SourceGuidMapping]:
        try:
            return self.session.get(SourceGuidMapping, entity_id)
        except SQLAlchemyError as exc:
            raise PersistError(f"Could not load mapping for entity {entity_id}: {exc}") from exc

    def upsert(self, entity_id: int, plugin_id: str, guid: str, imported_at: datetime) -> None:
        """Create or refresh the row keyed by `entity_id`."""
        try:
            # A row pointing another entity at the same guid is stale; the new entity wins.
            self.session.execute(
                delete(SourceGuidMapping).where(
                    SourceGuidMapping.plugin_id == plugin_id,
                    SourceGuidMapping.guid == guid,
                    SourceGuidMapping.nid != entity_id,
                )
            )
            row = self.session.get(SourceGuidMapping, entity_id)
            if row is None:
                row = SourceGuidMapping(nid=entity_id)
                self.session.add(row)
            row.plugin_id = plugin_id
            row.guid = guid
            row.imported = calendar.timegm(imported_at.utctimetuple())
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistError(f"Could not save mapping for entity {entity_id}: {exc}") from exc

    def delete(self, entity_ids: Iterable[int], commit: bool = True) -> None:
        ids = list(entity_ids)
        if not ids:
            return
        try:
            self.session.execute(delete(SourceGuidMapping).where(SourceGuidMapping.nid.in_(ids)))
            if commit:
                self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistError(f"Could not delete mappings for entities {ids}: {exc}") from exc


class ContentStore:
    """Vacancy entities and the taxonomy terms they reference."""

    def __init__(self, session: Session, mappings: Optional[MappingStore] = None) -> None:
        self.session = session
        self.mappings = mappings or MappingStore(session)

    def load(self, entity_id: int) -> Optional[Vacancy]:
        try:
            return self.session.get(Vacancy, entity_id)
        except SQLAlchemyError as exc:
            raise PersistError(f"Could not load vacancy {entity_id}: {exc}") from exc

    def save(self, vacancy: Vacancy) -> Optional[int]:
        """Persist `vacancy` and return its id."""
        try:
            self.session.add(vacancy)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistError(f"Could not save vacancy {vacancy.title!r}: {exc}") from exc
        return vacancy.id

    def delete(self, vacancies: Iterable[Vacancy]) -> int:
        """Delete vacancies together with their GUID mappings."""
        items = list(vacancies)
        if not items:
            return 0
        try:
            self.mappings.delete([v.id for v in items], commit=False)
            for vacancy in items:
                self.session.delete(vacancy)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistError(f"Could not delete vacancies: {exc}") from exc
        return len(items)

    def term_id(self, vocabulary: str, name: str, langcode: str) -> int:
        """Id of the term named exactly `name`, created if missing."""
        try:
            stmt = select(TaxonomyTerm.id).where(
                TaxonomyTerm.vocabulary == vocabulary,
                TaxonomyTerm.name == name,
                TaxonomyTerm.langcode == langcode,
            )
            tid = self.session.execute(stmt).scalars().first()
            if tid is not None:
                return tid

            term = TaxonomyTerm(vocabulary=vocabulary, name=name, langcode=langcode)
            self.session.add(term)
            self.session.flush()
            logger.info("Created term %r in %s", name, vocabulary)
            return term.id
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise TermCreationError(f"Could not create term {name!r} in {vocabulary}: {exc}") from exc

    def published_due_before(self, cutoff: datetime) -> List[Vacancy]:
        return self._due_before(cutoff, published=True)

    def unpublished_due_before(self, cutoff: datetime) -> List[Vacancy]:
        return self._due_before(cutoff, published=False)

    def _due_before(self, cutoff: datetime, published: bool) -> List[Vacancy]:
        stmt = select(Vacancy).where(
            Vacancy.published == published,
            Vacancy.due_date.is_not(None),
            Vacancy.due_date < cutoff,
        )
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise PersistError(f"Could not query vacancies due before {cutoff}: {exc}") from exc
