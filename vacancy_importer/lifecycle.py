"""Time-based vacancy maintenance.

Two independent sweeps over the content store:
- archive: unpublish published vacancies whose due date passed more than
  `archive.minutes` ago
- cleanup: delete unpublished vacancies whose due date passed more than
  60 days ago, along with their GUID mappings

Both compare strictly (`due_date < cutoff`), so re-running a sweep only touches
vacancies that crossed the line since the previous run.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from .config import ImporterSettings
from .store import ContentStore
from .utils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

CLEANUP_AFTER = timedelta(days=60)


class LifecycleMaintainer:
    def __init__(self, content: ContentStore, settings: ImporterSettings) -> None:
        self.content = content
        self.settings = settings

    def archive_cutoff(self, now: Optional[datetime] = None) -> datetime:
        current = to_naive_utc(now) if now is not None else utcnow()
        return current - timedelta(minutes=self.settings.archive.minutes)

    def cleanup_cutoff(self, now: Optional[datetime] = None) -> datetime:
        current = to_naive_utc(now) if now is not None else utcnow()
        return current - CLEANUP_AFTER

    def archive_due_vacancies(self, now: Optional[datetime] = None) -> int:
        """Unpublish published vacancies past their due date; return how many."""
        cutoff = self.archive_cutoff(now)
        count = 0
        for vacancy in self.content.published_due_before(cutoff):
            vacancy.published = False
            self.content.save(vacancy)
            count += 1

        if count:
            logger.info("Archived %d vacancies due before %s", count, cutoff)
        return count

    def cleanup_old_vacancies(self, now: Optional[datetime] = None) -> int:
        """Delete unpublished vacancies due more than 60 days ago; return how many."""
        cutoff = self.cleanup_cutoff(now)
        count = self.content.delete(self.content.unpublished_due_before(cutoff))

        if count:
            logger.info("Deleted %d unpublished vacancies due before %s", count, cutoff)
        return count
