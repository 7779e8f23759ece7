"""Registry of the available vacancy sources.

The registry is a plain mapping from source id to a factory and its metadata,
filled at startup by `build_registry`. Exactly one source is active at a time;
which one is read from `ImporterSettings.source`.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

import httpx

from .config import ImporterSettings, SourceSettings
from .errors import SourceNotFoundError
from .models import CanonicalVacancyItem, SourceDefinition
from .sources.base import VacancySource
from .sources.emply import EmplySource
from .sources.hrmanager import HrManagerSource

logger = logging.getLogger(__name__)

SourceFactory = Callable[..., VacancySource]
SettingsLookup = Callable[[ImporterSettings], SourceSettings]


class SourceRegistry:
    """Resolve, build and run the configured vacancy source."""

    def __init__(self, settings: ImporterSettings, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport
        self._factories: Dict[str, SourceFactory] = {}
        self._settings_lookup: Dict[str, SettingsLookup] = {}
        self._definitions: Dict[str, SourceDefinition] = {}

    def register(
        self,
        source_id: str,
        factory: SourceFactory,
        settings_lookup: SettingsLookup,
        label: str,
        description: str = "",
    ) -> None:
        self._factories[source_id] = factory
        self._settings_lookup[source_id] = settings_lookup
        self._definitions[source_id] = SourceDefinition(label=label, description=description)

    def register_class(self, source_cls: type, settings_lookup: SettingsLookup) -> None:
        self.register(source_cls.name, source_cls, settings_lookup, source_cls.label, source_cls.description)

    def list_available(self) -> Dict[str, SourceDefinition]:
        return dict(self._definitions)

    def get_active(self) -> str:
        """Id of the configured source, validated against the registry."""
        source_id = self.settings.source
        if source_id not in self._factories:
            raise SourceNotFoundError(source_id)
        return source_id

    def instantiate(self, source_id: str) -> VacancySource:
        if source_id not in self._factories:
            raise SourceNotFoundError(source_id)
        return self._factories[source_id](
            self._settings_lookup[source_id](self.settings),
            timezone=self.settings.timezone,
            timeout_s=self.settings.request_timeout_s,
            transport=self._transport,
        )

    def get_source_data(self) -> List[CanonicalVacancyItem]:
        source_id = self.get_active()
        return self.instantiate(source_id).get_data()


def build_registry(settings: ImporterSettings, transport: Optional[httpx.BaseTransport] = None) -> SourceRegistry:
    registry = SourceRegistry(settings, transport=transport)
    registry.register_class(EmplySource, lambda s: s.emply)
    registry.register_class(HrManagerSource, lambda s: s.hrmanager)
    return registry
