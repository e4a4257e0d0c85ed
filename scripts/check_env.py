"""Verify that the Notion configuration is complete and the journal is reachable.

Two commands are available:

1. ``check`` loads ``AppSettings`` from the given ``.env`` file and reports
   missing or malformed entries before the API is started.
2. ``probe`` additionally reads the configured journal database once and
   prints how many rows were normalized, which catches revoked tokens and
   databases that were never shared with the integration.

Example usages::

    python -m scripts.check_env check --env-file .env
    python -m scripts.check_env probe --env-file .env --db <database-id>
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from app.clients import NotionClient, SourceUnavailableError
from app.core.config import AppSettings, ConfigurationMissingError, _load_env_file, load_settings
from app.services import ProgressIngestionService
from app.services.progress_analytics import compute_kpis

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_SOURCE_ERROR = 4
EXIT_RUNTIME_ERROR = 5


def _validate_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    return load_settings()


async def _probe(settings: AppSettings, database_id: str | None) -> int:
    service = ProgressIngestionService(NotionClient(settings.notion))
    try:
        records = await service.ingest(database_id)
    except SourceUnavailableError as exc:
        print(f"Notion database is unreachable: {exc}", file=sys.stderr)
        return EXIT_SOURCE_ERROR

    kpis = compute_kpis(records)
    undated = sum(1 for record in records if record.date is None)
    print(
        f"Fetched {kpis.total} rows ({kpis.done} done, {undated} without a date); "
        f"current streak {kpis.streak} day(s)."
    )
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate Notion settings and optionally probe the journal database."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )

    check_parser = subparsers.add_parser(
        "check",
        help="Validate settings without contacting Notion.",
    )
    add_common_arguments(check_parser)

    probe_parser = subparsers.add_parser(
        "probe",
        help="Validate settings and read the journal database once.",
    )
    add_common_arguments(probe_parser)
    probe_parser.add_argument(
        "--db",
        default=None,
        help="Database identifier overriding NOTION_DATABASE_ID.",
    )

    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        settings = _validate_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ConfigurationMissingError as exc:
        print(f"Settings validation failed. {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if args.command == "probe":
        return asyncio.run(_probe(settings, args.db))

    print("Settings OK.")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
