"""HR-Manager vacancy source adapter.

HR-Manager (https://www.hr-manager.dk) publishes a customer's open positions as
XML at /jobportal.svc/[API NAME]/positionlist/xml/. Positions live under
Items/JobPortalPosition; a TransactionStatus/StatusCode of "Error" means the
request was rejected.

Fields are plain elements rather than localization lists, so no locale
fallback is needed here.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from ..config import HrManagerSettings
from ..errors import ParseError
from ..models import CanonicalVacancyItem
from ..normalize import format_plain_text, format_source_date, language_code, trim_text
from .base import VacancySource

logger = logging.getLogger(__name__)

DEFAULT_QUERY: Dict[str, Any] = {"incads": 1, "take": 999}


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]
    return root


def _text(el: ET.Element, path: str) -> str:
    return trim_text(el.findtext(path))


class HrManagerSource(VacancySource):
    """Fetch positions from the HR-Manager job portal API and normalize them."""

    name = "hrmanager"
    label = "HR Manager"
    description = "Import of vacancies from HR Manager (https://www.hr-manager.dk)."
    settings_model = HrManagerSettings

    settings: HrManagerSettings

    @staticmethod
    def build_query(query_parameters: Optional[str]) -> Dict[str, Any]:
        """Default query overlaid with the admin-supplied `a=1&b=2` string."""
        query = dict(DEFAULT_QUERY)
        query.update(parse_qsl((query_parameters or "").strip().lstrip("?")))
        return query

    def fetch(self, settings: HrManagerSettings) -> ET.Element:
        url = f"{settings.api_domain.strip().rstrip('/')}/jobportal.svc/{settings.api_name.strip()}/positionlist/xml/"
        resp = self._get(url, params=self.build_query(settings.query_parameters))

        try:
            root = _strip_namespaces(ET.fromstring(resp.content))
        except ET.ParseError as exc:
            logger.error("hrmanager: API response is not valid XML: %s", resp.text[:500])
            raise ParseError(self.name, "API response is not valid XML") from exc

        status = root.findtext("TransactionStatus/StatusCode")
        if status is not None and status.strip().lower() == "error":
            message = _text(root, "TransactionStatus/Message") or "API reported an error"
            logger.error("hrmanager: API transaction failed: %s", message)
            raise ParseError(self.name, message)
        return root

    def records(self, payload: ET.Element) -> List[ET.Element]:
        return payload.findall("Items/JobPortalPosition")

    def map_record(self, position: ET.Element) -> CanonicalVacancyItem:
        guid = _text(position, "Id")
        name = format_plain_text(position.findtext("Name"))

        return CanonicalVacancyItem(
            guid=guid,
            language_code=language_code(position.findtext("Languages/JobPortalLanguage/Code")),
            create_time=format_source_date(position.findtext("LastUpdated"), self.timezone),
            advertisement_title=name,
            job_title=name,
            body=_text(position, "Advertisements/JobPortalAdvertisement/Content"),
            category_work_area=format_plain_text(position.findtext("PositionCategory/Name")),
            category_work_time=format_plain_text(position.findtext("WorkHours")),
            category_employment_type=format_plain_text(position.findtext("PositionType")),
            category_department=format_plain_text(position.findtext("Department/Name")),
            work_place=format_plain_text(position.findtext("WorkPlace")),
            advertisement_url=_text(position, "AdvertisementUrlSecure"),
            application_url=_text(position, "ApplicationFormUrlSecure"),
            due_date=format_source_date(position.findtext("ApplicationDue"), self.timezone),
        )
