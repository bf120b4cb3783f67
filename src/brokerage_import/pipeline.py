"""Import pipeline turning a brokerage statement into stored operations."""
from __future__ import annotations

import logging

import requests

from .identity import attach_operation_id
from .models import ImportSummary, Operation, PreparedImport
from .repository import MAX_WRITES_PER_BATCH, OperationRepository, import_operations
from .rows import normalize_row
from .spreadsheet import (
    MissingColumnsError,
    SpreadsheetSource,
    read_spreadsheet,
    validate_expected_columns,
)

LOGGER = logging.getLogger(__name__)


def prepare_import(
    source: SpreadsheetSource,
    *,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> PreparedImport:
    """Read, validate and normalize a statement without persisting anything.

    Raises :class:`MissingColumnsError` when a required column is absent.
    The returned summary only knows how many rows were read; imported and
    duplicate counts are filled in by :func:`import_operations`.
    """

    parsed = read_spreadsheet(source, session=session, timeout=timeout)
    validation = validate_expected_columns(parsed.headers)
    if not validation.ok:
        LOGGER.warning("Rejecting spreadsheet, missing columns: %s", ", ".join(validation.missing))
        raise MissingColumnsError(validation.missing)

    operations: list[Operation] = []
    for row in parsed.rows:
        draft = normalize_row(row)
        if draft is None:
            continue
        operations.append(attach_operation_id(draft))

    total_rows = len(parsed.rows)
    LOGGER.info(
        "Prepared %d operations from %d rows (%d rows dropped)",
        len(operations),
        total_rows,
        total_rows - len(operations),
    )
    return PreparedImport(operations=operations, summary=ImportSummary(total_rows_read=total_rows))


def run_import(
    source: SpreadsheetSource,
    repository: OperationRepository,
    user_id: str,
    *,
    batch_size: int = MAX_WRITES_PER_BATCH,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> ImportSummary:
    """Prepare ``source`` and store its new operations for ``user_id``."""

    prepared = prepare_import(source, session=session, timeout=timeout)
    return import_operations(
        repository,
        user_id,
        prepared.operations,
        batch_size=batch_size,
        summary=prepared.summary,
    )


__all__ = ["MissingColumnsError", "prepare_import", "run_import"]
