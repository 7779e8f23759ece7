"""Data models for the vacancy importer.

The key idea: every vendor adapter converges on one canonical record, no matter
how the upstream payload is shaped. The record is built in one go by the
adapter and is immutable afterwards; the import engine only reads it.

This file uses Pydantic v2.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

UNDEFINED_LANGUAGE = "und"


class CanonicalVacancyItem(BaseModel):
    """A normalized vacancy as produced by a source adapter.

    Only `guid` and `language_code` are required. Every other field defaults to
    an empty string, and the import engine treats empty as "not provided".
    Date fields use the `YYYY-MM-DD HH:MM:SS` format in the site timezone.
    """

    model_config = ConfigDict(frozen=True)

    guid: str = Field(..., min_length=1, description="Vendor-unique id, stable across fetches.")
    language_code: str = Field(
        default=UNDEFINED_LANGUAGE,
        min_length=1,
        description="ISO 639-1 code, or 'und' when the vendor gives no hint.",
    )
    create_time: str = Field(default="", description="Source creation time; empty means 'now'.")

    advertisement_title: str = ""
    job_title: str = ""
    body: str = ""
    summary: str = ""
    facts: str = Field(default="", description="Pre-rendered <h3>/<p> HTML fragment.")

    category_work_area: str = ""
    category_work_time: str = ""
    category_employment_type: str = ""
    category_department: str = ""
    work_place: str = ""

    advertisement_url: str = ""
    application_url: str = ""

    due_date: str = Field(default="", description="Application deadline; empty if the source has none.")
    due_date_txt: str = Field(default="", description="Free-text deadline, used when no date exists.")

    @property
    def title(self) -> str:
        """Advertisement title, falling back to the job title."""
        return self.advertisement_title or self.job_title


class SourceDefinition(NamedTuple):
    """Declarative metadata shown when picking a source."""

    label: str
    description: str


class ImportResult(NamedTuple):
    count: int
    plugin_id: str
