"""Vacancy importer package.

The package is split along the import pipeline:
- `models.py` defines the canonical vacancy record every source converges on.
- `sources/` contains one adapter per recruitment vendor.
- `normalize.py` contains the shared mapping rules (localization fallback, facts).
- `importer.py`, `store.py` and `lifecycle.py` reconcile items with the content store.
"""

from .errors import (
    ConfigurationError,
    FetchError,
    ParseError,
    PersistError,
    SourceNotFoundError,
    TermCreationError,
    TransportError,
    VacancyImporterError,
)
from .models import CanonicalVacancyItem

__all__ = [
    "CanonicalVacancyItem",
    "ConfigurationError",
    "FetchError",
    "ParseError",
    "PersistError",
    "SourceNotFoundError",
    "TermCreationError",
    "TransportError",
    "VacancyImporterError",
]
