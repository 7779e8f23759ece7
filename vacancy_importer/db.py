"""SQLAlchemy schema and session setup.

`vacancy` and `taxonomy_term` stand in for the content management system's
storage; `vacancy_importer_item` is the GUID mapping table owned by the
importer. Datetimes are stored as naive UTC.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from .utils import utcnow

VOCAB_DEPARTMENT = "vacancy_importer_department"
VOCAB_EMPLOYMENT_TYPE = "vacancy_importer_employment_type"
VOCAB_WORK_AREA = "vacancy_importer_work_area"
VOCAB_WORK_TIME = "vacancy_importer_work_time"

TEXT_FORMAT_HTML = "vacancy_importer_html"


class Base(DeclarativeBase):
    """Declarative base for the importer tables."""


class TaxonomyTerm(Base):
    __tablename__ = "taxonomy_term"
    __table_args__ = (Index("ix_taxonomy_term_lookup", "vocabulary", "name", "langcode"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vocabulary: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    langcode: Mapped[str] = mapped_column(String(12), nullable=False)

    def __repr__(self) -> str:
        return f"<TaxonomyTerm(id={self.id}, vocabulary={self.vocabulary}, name={self.name!r})>"


class Vacancy(Base):
    """A vacancy content entity."""

    __tablename__ = "vacancy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    langcode: Mapped[str] = mapped_column(String(12), nullable=False)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    changed: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    job_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    body_value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body_format: Mapped[str] = mapped_column(String(64), nullable=False, default=TEXT_FORMAT_HTML)
    facts_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    facts_format: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    work_area_tid: Mapped[Optional[int]] = mapped_column(ForeignKey("taxonomy_term.id"), nullable=True)
    work_time_tid: Mapped[Optional[int]] = mapped_column(ForeignKey("taxonomy_term.id"), nullable=True)
    employment_type_tid: Mapped[Optional[int]] = mapped_column(ForeignKey("taxonomy_term.id"), nullable=True)
    department_tid: Mapped[Optional[int]] = mapped_column(ForeignKey("taxonomy_term.id"), nullable=True)

    advertisement_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    application_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    due_date_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    work_place: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Vacancy(id={self.id}, title={self.title[:30] if self.title else ''}, published={self.published})>"


class SourceGuidMapping(Base):
    """Links an imported vacancy to the (source plugin, vendor guid) it came from."""

    __tablename__ = "vacancy_importer_item"
    __table_args__ = (UniqueConstraint("plugin_id", "guid", name="uq_vacancy_importer_item_source"),)

    nid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    plugin_id: Mapped[str] = mapped_column(String(64), nullable=False)
    guid: Mapped[str] = mapped_column(String(255), nullable=False)
    imported: Mapped[int] = mapped_column(Integer, nullable=False)


class CronState(Base):
    """Last run time (unix timestamp) per scheduled task."""

    __tablename__ = "vacancy_importer_state"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    last_run: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


def make_engine(database_url: str) -> Engine:
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cur = dbapi_connection.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
