"""Command line entry point for brokerage statement imports and reports."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Iterable

from .annual import (
    get_proventos_year_details,
    get_trade_year_details,
    summarize_proventos_by_year,
    summarize_proventos_overall,
    summarize_trades_by_year,
)
from .config import Settings
from .db import SqlOperationRepository, create_db_engine, ensure_schema
from .logging_utils import configure_logging
from .pipeline import run_import
from .positions import calculate_positions
from .repository import OperationRepository
from .spreadsheet import MissingColumnsError, SpreadsheetError

LOGGER = logging.getLogger(__name__)


def build_repository(settings: Settings) -> SqlOperationRepository:
    """Create the database backed repository described by ``settings``."""

    engine = create_db_engine(settings.database_url)
    ensure_schema(engine)
    return SqlOperationRepository(engine)


def execute(options: argparse.Namespace, settings: Settings, repository: OperationRepository) -> Any:
    """Run the selected sub-command and return a JSON serializable payload."""

    if options.command == "import":
        summary = run_import(
            options.source,
            repository,
            options.user,
            batch_size=settings.batch_size,
            timeout=settings.http_timeout,
        )
        return summary.to_dict()
    if options.command == "purge":
        return {"total_deleted": repository.delete_all(options.user, batch_size=settings.batch_size)}

    operations = repository.list_operations(options.user)
    if options.command == "positions":
        return [position.to_dict() for position in calculate_positions(operations)]
    if options.command == "trades":
        if options.year is not None:
            return [item.to_dict() for item in get_trade_year_details(operations, options.year)]
        return [item.to_dict() for item in summarize_trades_by_year(operations)]
    if options.command == "proventos":
        if options.year is not None:
            return [item.to_dict() for item in get_proventos_year_details(operations, options.year)]
        return [item.to_dict() for item in summarize_proventos_by_year(operations)]
    if options.command == "proventos-overall":
        top = options.top if options.top is not None else settings.top_payers
        return summarize_proventos_overall(operations, top).to_dict()
    raise ValueError(f"Unknown command: {options.command}")


def parse_args(args: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--user", required=True, help="Owner of the operations")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    importer = commands.add_parser("import", help="Import a brokerage statement (XLSX)")
    importer.add_argument("source", help="Path or http(s) URL of the spreadsheet")

    commands.add_parser("positions", help="Current holdings with average cost")

    trades = commands.add_parser("trades", help="Purchases and sales per year")
    trades.add_argument("--year", type=int, help="Per-ticker details for one year")

    proventos = commands.add_parser("proventos", help="Dividends and JCP per year")
    proventos.add_argument("--year", type=int, help="Per-ticker details for one year")

    overall = commands.add_parser("proventos-overall", help="All-time income and top payers")
    overall.add_argument("--top", type=int, help="Number of top payers to list")

    commands.add_parser("purge", help="Delete every stored operation of the user")
    return parser.parse_args(args=args)


def main(argv: Iterable[str] | None = None) -> None:
    options = parse_args(argv)
    configure_logging(logging.DEBUG if options.verbose else None)
    settings = Settings.load()
    repository = build_repository(settings)
    try:
        payload = execute(options, settings, repository)
    except (MissingColumnsError, SpreadsheetError) as exc:
        LOGGER.error("Import failed: %s", exc)
        print(str(exc), file=sys.stderr)
        raise SystemExit(2) from exc
    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":  # pragma: no cover
    main()
