"""Importer settings.

Global settings and the per-vendor settings are read from the environment
(prefix `VACANCY_IMPORTER_`, nested values with `__`, e.g.
`VACANCY_IMPORTER_EMPLY__API_KEY`) or from a `.env` file. Adapters never read
settings themselves: the registry hands each adapter its own settings object.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def endpoint_problems(api_domain: str, label: str = "API Domain") -> List[str]:
    """Check an endpoint domain: https scheme, a host, and no path."""
    domain = (api_domain or "").strip()
    if not domain:
        return [f"{label} is required"]

    try:
        parts = urlsplit(domain)
        # Raises ValueError for a non-numeric or out of range port.
        parts.port
    except ValueError:
        return [f"{label} is not a valid domain"]

    problems = []
    if parts.scheme != "https":
        problems.append(f"{label} should include the protocol https")
    if not parts.netloc:
        problems.append(f"{label} is not a valid domain")
    if parts.path or parts.query or parts.fragment:
        problems.append(f"{label} should not include a path or leading slash")
    return problems


class SourceSettings(BaseModel):
    """Base class for per-vendor settings."""

    def problems(self) -> List[str]:
        return []


class EmplySettings(SourceSettings):
    api_domain: str = Field(default="", description="Format: https://company.emply.com")
    media_id: str = ""
    api_key: str = ""
    postings_path: str = "/v1/norden/postings/{media_id}"
    insert_jobid_in_facts: bool = False
    fact_id_work_area: str = ""
    fact_id_work_time: str = ""
    fact_id_employment_type: str = ""
    fact_id_work_place: str = ""
    fact_id_department: str = ""

    def problems(self) -> List[str]:
        problems = []
        if not self.media_id.strip():
            problems.append("Media Id is required")
        if not self.api_key.strip():
            problems.append("API Key is required")
        problems.extend(endpoint_problems(self.api_domain))
        return problems


class HrManagerSettings(SourceSettings):
    api_domain: str = "https://api.hr-manager.net"
    api_name: str = Field(default="", description="[YOUR NAME] in /jobportal.svc/[YOUR NAME]/positionlist/xml/")
    query_parameters: str = Field(default="", description="Extra query, e.g. 'param1=value&param2=value'.")

    def problems(self) -> List[str]:
        problems = []
        if not self.api_name.strip():
            problems.append("API Name is required")
        problems.extend(endpoint_problems(self.api_domain))
        return problems


class CronSettings(BaseModel):
    enabled: bool = False
    interval: int = 1800


class ArchiveSettings(BaseModel):
    enabled: bool = False
    interval: int = 900
    minutes: int = Field(default=15, ge=0, description="Minutes after the due date before archiving.")


class CleanupSettings(BaseModel):
    enabled: bool = False
    interval: int = 86400


class ImporterSettings(BaseSettings):
    source: str = "emply"
    database_url: str = "sqlite:///./vacancy_importer.db"
    timezone: str = "UTC"
    default_langcode: str = "da"
    author_uid: int = 1
    request_timeout_s: float = 20.0

    cron: CronSettings = Field(default_factory=CronSettings)
    archive: ArchiveSettings = Field(default_factory=ArchiveSettings)
    cleanup: CleanupSettings = Field(default_factory=CleanupSettings)

    emply: EmplySettings = Field(default_factory=EmplySettings)
    hrmanager: HrManagerSettings = Field(default_factory=HrManagerSettings)

    model_config = SettingsConfigDict(
        env_prefix="VACANCY_IMPORTER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value


@lru_cache
def get_settings() -> ImporterSettings:
    return ImporterSettings()
