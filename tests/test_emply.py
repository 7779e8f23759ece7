from __future__ import annotations

from typing import List

import httpx
import pytest

from vacancy_importer.config import EmplySettings
from vacancy_importer.errors import ConfigurationError, ParseError, TransportError
from vacancy_importer.sources.emply import EmplySource

from tests.helpers import EMPLY_DOMAIN, emply_vacancy, json_transport, loc, make_settings, text_transport


def make_source(transport: httpx.BaseTransport, **overrides) -> EmplySource:
    settings = make_settings().emply.model_copy(update=overrides)
    return EmplySource(settings, transport=transport)


def test_get_data_maps_vacancy_fields() -> None:
    calls: List[httpx.Request] = []
    source = make_source(json_transport([emply_vacancy()], calls=calls))

    items = source.get_data()

    assert len(items) == 1
    item = items[0]
    assert item.guid == "1001"
    assert item.language_code == "da"
    assert item.create_time == "2024-01-10 08:00:00"
    assert item.advertisement_title == "Erfaren udvikler"
    assert item.job_title == "Udvikler"
    assert item.title == "Erfaren udvikler"
    assert item.body == "<p>Kom og arbejd hos os</p>"
    assert item.category_department == "IT"
    assert item.category_work_area == "Teknik"
    assert item.category_employment_type == "Fast, Fuldtid"
    assert item.category_work_time == ""
    assert item.work_place == ""
    assert item.advertisement_url == "https://acme.emply.com/ad/1001"
    assert item.application_url == "https://acme.emply.com/apply/1001"
    assert item.due_date == "2024-02-01 12:00:00"
    assert item.due_date_txt == "Snarest"
    assert item.facts == "<h3>Område</h3><p>Teknik</p><h3>Ansættelse</h3><p>Fast, Fuldtid</p>"

    request = calls[0]
    assert str(request.url).startswith(f"{EMPLY_DOMAIN}/v1/norden/postings/media-1")
    assert request.url.params["apiKey"] == "secret"
    assert request.headers["Accept"] == "application/json"


def test_get_data_appends_job_id_fact_when_configured() -> None:
    source = make_source(json_transport([emply_vacancy(data=[])]), insert_jobid_in_facts=True)
    assert source.get_data()[0].facts == "<h3>Job ID</h3><p>1001</p>"


def test_language_falls_back_to_title_locale_then_und() -> None:
    payload = [
        emply_vacancy("1", ad={}, title={"localization": [{"locale": "en-GB", "value": "Engineer"}]}),
        emply_vacancy("2", ad={}, title={}),
    ]
    items = make_source(json_transport(payload)).get_data()
    assert [i.language_code for i in items] == ["en", "und"]


def test_localized_fields_follow_detected_language() -> None:
    title = {"localization": [{"locale": "en-GB", "value": "Engineer"}, {"locale": "de", "value": "Ingenieur"}]}
    payload = [emply_vacancy(ad={"attributes": {"language": "de-DE"}}, title=title)]
    assert make_source(json_transport(payload)).get_data()[0].job_title == "Ingenieur"


def test_minimal_record_maps_with_empty_optionals() -> None:
    item = make_source(json_transport([{"jobId": 7}])).get_data()[0]

    assert item.guid == "7"
    assert item.language_code == "und"
    assert item.title == ""
    assert item.body == ""
    assert item.facts == ""
    assert item.due_date == ""
    assert item.create_time == ""


def test_malformed_records_are_skipped() -> None:
    payload = [{"title": loc("no id")}, "garbage", {"jobId": None}, emply_vacancy("5")]
    items = make_source(json_transport(payload)).get_data()
    assert [i.guid for i in items] == ["5"]


def test_unparseable_dates_do_not_abort_record() -> None:
    payload = [emply_vacancy(created="yesterday", deadline="soon")]
    item = make_source(json_transport(payload)).get_data()[0]
    assert item.create_time == ""
    assert item.due_date == ""


def test_http_error_raises_transport_error() -> None:
    source = make_source(json_transport({"message": "Forbidden"}, status_code=403))
    with pytest.raises(TransportError) as excinfo:
        source.get_data()
    assert excinfo.value.status_code == 403
    assert "Forbidden" in excinfo.value.body


def test_network_error_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        make_source(httpx.MockTransport(handler)).get_data()


def test_malformed_url_raises_transport_error() -> None:
    source = make_source(json_transport([]))
    bad = EmplySettings(api_domain="https://acme.emply.com:abc", media_id="m", api_key="k")

    with pytest.raises(TransportError):
        source.fetch(bad)
    assert source.check_api(bad) is False


def test_invalid_json_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        make_source(text_transport("<html>maintenance</html>")).get_data()


def test_non_list_payload_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        make_source(json_transport({"postings": []})).get_data()


def test_empty_listing_is_not_an_error() -> None:
    assert make_source(json_transport([])).get_data() == []


def test_missing_credentials_fail_before_request() -> None:
    calls: List[httpx.Request] = []
    source = make_source(json_transport([], calls=calls), api_key="")
    with pytest.raises(ConfigurationError):
        source.get_data()
    assert calls == []


@pytest.mark.parametrize(
    "domain, message",
    [
        ("", "API Domain is required"),
        ("http://acme.emply.com", "https"),
        ("https://acme.emply.com/api", "path"),
        ("https://", "not a valid domain"),
        ("https://acme.emply.com:abc", "not a valid domain"),
        ("https://acme.emply.com:99999", "not a valid domain"),
    ],
)
def test_validate_settings_rejects_bad_domains(domain: str, message: str) -> None:
    source = make_source(json_transport([]))
    problems = source.validate_settings(EmplySettings(api_domain=domain, media_id="m", api_key="k"))
    assert any(message in p for p in problems)


def test_validate_settings_requires_credentials() -> None:
    source = make_source(json_transport([]))
    problems = source.validate_settings(EmplySettings(api_domain=EMPLY_DOMAIN))
    assert "Media Id is required" in problems
    assert "API Key is required" in problems


def test_check_api_never_raises() -> None:
    assert make_source(json_transport([])).check_api() is True
    assert make_source(json_transport([], status_code=500)).check_api() is False
    assert make_source(text_transport("nope")).check_api() is False
    assert make_source(json_transport([])).check_api(EmplySettings()) is False


def test_configure_cross_checks_api_before_accepting() -> None:
    source = make_source(json_transport([], status_code=401))
    new_settings = EmplySettings(api_domain="https://other.emply.com", media_id="m2", api_key="k2")

    with pytest.raises(ConfigurationError):
        source.configure(new_settings)
    assert source.settings.media_id == "media-1"


def test_configure_accepts_working_settings() -> None:
    calls: List[httpx.Request] = []
    source = make_source(json_transport([], calls=calls))
    new_settings = EmplySettings(api_domain="https://other.emply.com", media_id="m2", api_key="k2")

    assert source.configure(new_settings) is new_settings
    assert source.settings.media_id == "m2"
    assert calls[0].url.host == "other.emply.com"


def test_configure_accepts_plain_mapping() -> None:
    source = make_source(json_transport([]))
    accepted = source.configure({"api_domain": "https://other.emply.com", "media_id": "m3", "api_key": "k3"})

    assert isinstance(accepted, EmplySettings)
    assert source.settings.media_id == "m3"
