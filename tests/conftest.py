"""
Pytest fixtures for testing.
"""
from __future__ import annotations

from typing import Any, Callable, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vacancy_importer.config import ImporterSettings
from vacancy_importer.db import Base
from vacancy_importer.importer import VacancyImporter
from vacancy_importer.lifecycle import LifecycleMaintainer
from vacancy_importer.models import CanonicalVacancyItem
from vacancy_importer.registry import SourceRegistry, build_registry
from vacancy_importer.store import ContentStore, MappingStore

from tests.helpers import StaticSource, json_transport, make_settings


@pytest.fixture
def session() -> Session:
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def settings() -> ImporterSettings:
    return make_settings()


@pytest.fixture
def mappings(session: Session) -> MappingStore:
    return MappingStore(session)


@pytest.fixture
def content(session: Session, mappings: MappingStore) -> ContentStore:
    return ContentStore(session, mappings)


@pytest.fixture
def static_items() -> List[CanonicalVacancyItem]:
    """Items served by `static_registry`; tests mutate this list in place."""
    return []


@pytest.fixture
def static_registry(settings: ImporterSettings, static_items: List[CanonicalVacancyItem]) -> SourceRegistry:
    class Source(StaticSource):
        items = static_items

    registry = SourceRegistry(settings.model_copy(update={"source": "static"}))
    registry.register("static", Source, lambda s: s.emply, "Static", "Fixed items")
    return registry


@pytest.fixture
def make_importer(content: ContentStore, mappings: MappingStore) -> Callable[[SourceRegistry], VacancyImporter]:
    def factory(registry: SourceRegistry) -> VacancyImporter:
        return VacancyImporter(registry, content, mappings, registry.settings)

    return factory


@pytest.fixture
def emply_registry(settings: ImporterSettings) -> Callable[..., SourceRegistry]:
    def factory(payload: Any, status_code: int = 200) -> SourceRegistry:
        return build_registry(settings, transport=json_transport(payload, status_code))

    return factory


@pytest.fixture
def maintainer(content: ContentStore, settings: ImporterSettings) -> LifecycleMaintainer:
    return LifecycleMaintainer(content, settings)
