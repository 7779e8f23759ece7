"""Exceptions raised by the importer.

Fetch problems and store problems are kept apart so callers can tell a failed
run from a run that legitimately found nothing to import.
"""

from __future__ import annotations

from typing import Iterable


class VacancyImporterError(Exception):
    """Base class for all importer errors."""


class ConfigurationError(VacancyImporterError):
    """Settings are missing or invalid; raised before any request is made."""

    def __init__(self, message: str, problems: Iterable[str] = ()) -> None:
        self.problems = list(problems)
        if self.problems:
            message = f"{message}: {'; '.join(self.problems)}"
        super().__init__(message)


class SourceNotFoundError(ConfigurationError):
    """The configured source id has no registered adapter."""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(f"The configured vacancy source '{source_id}' was not found")


class FetchError(VacancyImporterError):
    """The vendor could not deliver a usable listing."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class TransportError(FetchError):
    """Network failure or non-2xx response from the vendor endpoint."""

    def __init__(self, source: str, message: str, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(source, message)


class ParseError(FetchError):
    """The response body is not valid JSON/XML, or the vendor reported an error."""


class PersistError(VacancyImporterError):
    """A content store or mapping store write failed."""


class TermCreationError(PersistError):
    """A taxonomy term could not be looked up or created."""
