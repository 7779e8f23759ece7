"""Interval gate for the scheduled tasks.

An external scheduler calls `CronRunner.run` often (e.g. every few minutes);
each task only runs when it is enabled and its interval has elapsed since its
last recorded run. The run time is recorded before the task starts, so a
failing import is not retried until the next interval. A failing task does not
stop the other due tasks; the first error is re-raised once they have run.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import ImporterSettings
from .db import CronState
from .errors import PersistError
from .importer import VacancyImporter
from .lifecycle import LifecycleMaintainer
from .utils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


class CronRunner:
    def __init__(
        self,
        session: Session,
        importer: VacancyImporter,
        maintainer: LifecycleMaintainer,
        settings: ImporterSettings,
    ) -> None:
        self.session = session
        self.importer = importer
        self.maintainer = maintainer
        self.settings = settings

    def tasks(self, now: datetime) -> List[Tuple[str, bool, int, Callable[[], Any]]]:
        s = self.settings
        return [
            ("import", s.cron.enabled, s.cron.interval, self.importer.execute),
            ("archive", s.archive.enabled, s.archive.interval, lambda: self.maintainer.archive_due_vacancies(now)),
            ("cleanup", s.cleanup.enabled, s.cleanup.interval, lambda: self.maintainer.cleanup_old_vacancies(now)),
        ]

    def run(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Run every due task and return their results keyed by task name."""
        now = to_naive_utc(now) if now is not None else utcnow()
        timestamp = calendar.timegm(now.utctimetuple())

        results: Dict[str, Any] = {}
        first_error: Optional[Exception] = None
        for name, enabled, interval, task in self.tasks(now):
            if not enabled:
                continue
            if timestamp - self.last_run(name) < interval:
                logger.debug("Cron task %s not due yet", name)
                continue

            self.record_run(name, timestamp)
            try:
                results[name] = task()
            except Exception as exc:
                logger.exception("Cron task %s failed", name)
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise first_error
        return results

    def last_run(self, name: str) -> int:
        state = self.session.get(CronState, name)
        return state.last_run if state is not None else 0

    def record_run(self, name: str, timestamp: int) -> None:
        try:
            state = self.session.get(CronState, name)
            if state is None:
                state = CronState(name=name)
                self.session.add(state)
            state.last_run = timestamp
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistError(f"Could not record cron run for {name}: {exc}") from exc
