"""CLI entry point.

This script runs the vacancy importer and its maintenance sweeps against the
database configured in the environment (see `vacancy_importer.config`).

Examples:
    python run_import.py import
    python run_import.py archive
    python run_import.py cleanup
    python run_import.py cron
    python run_import.py sources
    python run_import.py check

Every command exits non-zero when the run fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from vacancy_importer.config import ImporterSettings, get_settings
from vacancy_importer.cron import CronRunner
from vacancy_importer.db import init_db, make_engine, make_session_factory
from vacancy_importer.errors import VacancyImporterError
from vacancy_importer.importer import VacancyImporter
from vacancy_importer.lifecycle import LifecycleMaintainer
from vacancy_importer.registry import build_registry
from vacancy_importer.store import ContentStore, MappingStore

logger = logging.getLogger("vacancy_importer")

COMMANDS = ["import", "archive", "cleanup", "cron", "sources", "check"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import vacancies from the configured vacancy source.")
    p.add_argument("command", choices=COMMANDS, help="What to run.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return p.parse_args(argv)


def run(command: str, settings: ImporterSettings) -> None:
    registry = build_registry(settings)

    if command == "sources":
        active = settings.source
        for source_id, definition in registry.list_available().items():
            marker = "*" if source_id == active else " "
            print(f"{marker} {source_id}: {definition.label} - {definition.description}")
        return

    if command == "check":
        source_id = registry.get_active()
        source = registry.instantiate(source_id)
        source.configure(source.settings)
        print(f'The "{source_id}" API is accessible.')
        return

    engine = make_engine(settings.database_url)
    init_db(engine)
    session = make_session_factory(engine)()
    try:
        mappings = MappingStore(session)
        content = ContentStore(session, mappings)
        importer = VacancyImporter(registry, content, mappings, settings)
        maintainer = LifecycleMaintainer(content, settings)

        if command == "import":
            print("Starting vacancy import....")
            result = importer.execute()
            print(f'{result.count} vacancies imported/updated from "{result.plugin_id}".')
        elif command == "archive":
            print(f"{maintainer.archive_due_vacancies()} vacancies archived.")
        elif command == "cleanup":
            print(f"{maintainer.cleanup_old_vacancies()} vacancies deleted.")
        elif command == "cron":
            results = CronRunner(session, importer, maintainer, settings).run()
            print(f"Cron tasks run: {', '.join(results) or 'none'}")
    finally:
        session.close()
        engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        run(args.command, get_settings())
    except ValidationError as exc:
        logger.error("Invalid settings: %s", exc)
        return 1
    except VacancyImporterError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
