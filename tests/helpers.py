"""Shared builders for test payloads, settings and transports."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from vacancy_importer.config import EmplySettings, HrManagerSettings, ImporterSettings
from vacancy_importer.models import CanonicalVacancyItem
from vacancy_importer.sources.base import VacancySource

EMPLY_DOMAIN = "https://acme.emply.com"


def make_settings(**overrides: Any) -> ImporterSettings:
    values: Dict[str, Any] = {
        "source": "emply",
        "database_url": "sqlite://",
        "timezone": "UTC",
        "emply": EmplySettings(
            api_domain=EMPLY_DOMAIN,
            media_id="media-1",
            api_key="secret",
            fact_id_work_area="work_area",
            fact_id_work_time="work_time",
            fact_id_employment_type="employment_type",
            fact_id_work_place="work_place",
        ),
        "hrmanager": HrManagerSettings(api_name="acme"),
    }
    values.update(overrides)
    return ImporterSettings(_env_file=None, **values)


def loc(value: str, locale: str = "da-DK") -> Dict[str, Any]:
    return {"localization": [{"locale": locale, "value": value}]}


def emply_vacancy(job_id: str = "1001", **overrides: Any) -> Dict[str, Any]:
    vacancy: Dict[str, Any] = {
        "jobId": job_id,
        "created": "2024-01-10T08:00:00Z",
        "deadline": "2024-02-01T12:00:00Z",
        "ad": {"attributes": {"language": "da-DK"}},
        "title": loc("Udvikler"),
        "advertisements": [
            {"title": loc("Erfaren udvikler"), "content": loc("  <p>Kom og arbejd hos os</p>  ")}
        ],
        "department": {"title": loc("IT")},
        "adUrl": loc("https://acme.emply.com/ad/1001"),
        "applyUrl": loc("https://acme.emply.com/apply/1001"),
        "deadlineText": loc("Snarest"),
        "data": [
            {
                "jobDetailsId": "work_area",
                "title": loc("Område"),
                "valueType": 0,
                "value": loc("Teknik"),
            },
            {
                "jobDetailsId": "employment_type",
                "title": loc("Ansættelse"),
                "valueType": 1,
                "value": [{"title": loc("Fast")}, {"title": loc("Fuldtid")}],
            },
        ],
    }
    vacancy.update(overrides)
    return vacancy


def json_transport(payload: Any, status_code: int = 200, calls: Optional[List[httpx.Request]] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code=status_code, content=json.dumps(payload).encode("utf-8"), request=request)

    return httpx.MockTransport(handler)


def text_transport(body: str, status_code: int = 200, calls: Optional[List[httpx.Request]] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code=status_code, content=body.encode("utf-8"), request=request)

    return httpx.MockTransport(handler)


class StaticSource(VacancySource):
    """Source returning a fixed list of items, for engine tests."""

    name = "static"
    label = "Static"
    items: List[CanonicalVacancyItem] = []

    def fetch(self, settings):
        return list(self.items)

    def records(self, payload):
        return payload

    def map_record(self, record):
        return record
