"""Base classes for vacancy source adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

import httpx
from pydantic import ValidationError

from ..config import SourceSettings
from ..errors import ConfigurationError, FetchError, TransportError
from ..models import CanonicalVacancyItem

logger = logging.getLogger(__name__)

# Record-level failures an adapter recovers from by skipping the record.
RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError, ValidationError)


class VacancySource(ABC):
    """Abstract base class for a vacancy source adapter.

    An adapter receives its settings at construction time and performs at most
    one outbound request per `get_data` call. Fetch failures raise a
    `FetchError` subclass so that a failed fetch is never mistaken for an empty
    listing.
    """

    name: ClassVar[str]
    label: ClassVar[str]
    description: ClassVar[str] = ""
    settings_model: ClassVar[Type[SourceSettings]]

    def __init__(
        self,
        settings: SourceSettings,
        timezone: str = "UTC",
        timeout_s: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.timezone = timezone
        self._timeout = timeout_s
        self._transport = transport

    @abstractmethod
    def fetch(self, settings: SourceSettings) -> Any:
        """Perform the vendor request with `settings` and return the parsed payload."""
        raise NotImplementedError

    @abstractmethod
    def records(self, payload: Any) -> List[Any]:
        """Split a parsed payload into vendor records."""
        raise NotImplementedError

    @abstractmethod
    def map_record(self, record: Any) -> CanonicalVacancyItem:
        """Map one vendor record to the canonical schema."""
        raise NotImplementedError

    def get_data(self) -> List[CanonicalVacancyItem]:
        """Fetch the vendor listing and return normalized items."""
        self.ensure_valid(self.settings)
        payload = self.fetch(self.settings)

        out: List[CanonicalVacancyItem] = []
        for record in self.records(payload):
            try:
                out.append(self.map_record(record))
            except RECORD_ERRORS as exc:
                logger.warning("%s: skipped malformed vacancy record: %s", self.name, exc)

        logger.info("%s: fetched %d vacancies", self.name, len(out))
        return out

    def check_api(self, settings: Optional[SourceSettings] = None) -> bool:
        """Return True if the vendor answers with a usable payload for `settings`."""
        settings = settings if settings is not None else self.settings
        try:
            self.ensure_valid(settings)
            self.fetch(settings)
        except (ConfigurationError, FetchError) as exc:
            logger.error("%s API check failed: %s", self.name, exc)
            return False
        return True

    def validate_settings(self, settings: SourceSettings) -> List[str]:
        return settings.problems()

    def ensure_valid(self, settings: SourceSettings) -> None:
        problems = self.validate_settings(settings)
        if problems:
            raise ConfigurationError(f"Invalid {self.label} settings", problems)

    def configure(self, settings: Union[SourceSettings, Dict[str, Any]]) -> SourceSettings:
        """Accept new settings only if they validate and the API answers with them."""
        if not isinstance(settings, SourceSettings):
            settings = self.settings_model.model_validate(settings)
        self.ensure_valid(settings)
        if not self.check_api(settings):
            raise ConfigurationError(
                f"The {self.label} API is not accessible. Please, check the configuration again."
            )
        self.settings = settings
        return settings

    def _get(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET `url`, turning any httpx failure into a `TransportError`."""
        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True, transport=self._transport) as client:
                resp = client.get(url, params=params, headers=headers)
                resp.raise_for_status()
                return resp
        except httpx.HTTPStatusError as exc:
            body = exc.response.text
            logger.error("%s: error response from API (%s): %s", self.name, exc.response.status_code, body)
            raise TransportError(
                self.name,
                f"API responded with status {exc.response.status_code}",
                status_code=exc.response.status_code,
                body=body,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("%s: API request exception: %s", self.name, exc)
            raise TransportError(self.name, f"API request failed: {exc}") from exc
