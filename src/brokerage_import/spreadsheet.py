"""Spreadsheet reader for brokerage statement exports."""
from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Union

import requests
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .parsing import normalize_header_name

LOGGER = logging.getLogger(__name__)

EXPECTED_COLUMNS: tuple[str, ...] = (
    "Entrada/Saída",
    "Data",
    "Movimentação",
    "Produto",
    "Instituição",
    "Quantidade",
    "Preço unitário",
    "Valor da Operação",
)

SpreadsheetSource = Union[bytes, bytearray, str, Path, BinaryIO]


class SpreadsheetError(ValueError):
    """Raised when a source cannot be decoded as a workbook."""


class MissingColumnsError(ValueError):
    """Raised when required statement columns are absent."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing columns in spreadsheet: {', '.join(self.missing)}")


@dataclass(slots=True)
class ParsedSheet:
    """Header row and data rows of the first worksheet."""

    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ColumnValidation:
    ok: bool
    missing: list[str]


def validate_expected_columns(headers: Iterable[str]) -> ColumnValidation:
    """Check ``headers`` against :data:`EXPECTED_COLUMNS` after normalization."""

    present = {normalize_header_name(header) for header in headers}
    missing = [column for column in EXPECTED_COLUMNS if normalize_header_name(column) not in present]
    return ColumnValidation(ok=not missing, missing=missing)


def _is_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://"))


def load_source_bytes(
    source: SpreadsheetSource,
    *,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> bytes:
    """Read the full binary content of ``source``."""

    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and _is_url(source):
        http = session or requests.Session()
        LOGGER.debug("Downloading spreadsheet from %s", source)
        response = http.get(source, timeout=timeout)
        response.raise_for_status()
        return response.content
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def _cell_text(value: Any) -> str:
    return str(value if value is not None else "").strip()


def rows_to_records(raw_rows: Iterable[Iterable[Any]]) -> ParsedSheet:
    """Map raw cell rows to records keyed by header and normalized header."""

    iterator = iter(raw_rows)
    try:
        header_row = next(iterator)
    except StopIteration:
        return ParsedSheet(headers=[])

    headers = [_cell_text(value) for value in header_row]
    parsed = ParsedSheet(headers=headers)
    for values in iterator:
        cells = list(values)
        if all(_cell_text(value) == "" for value in cells):
            continue
        record: dict[str, Any] = {}
        for index, key in enumerate(headers):
            if not key:
                continue
            value = cells[index] if index < len(cells) else None
            record[key] = "" if value is None else value
        for key, value in list(record.items()):
            record.setdefault(normalize_header_name(key), value)
        parsed.rows.append(record)
    return parsed


def read_spreadsheet(
    source: SpreadsheetSource,
    *,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> ParsedSheet:
    """Decode the first worksheet of an XLSX ``source``.

    The first row is treated as the header row. ``source`` may be raw bytes,
    a filesystem path, a binary file object or an ``http(s)`` URL.
    """

    payload = load_source_bytes(source, session=session, timeout=timeout)
    try:
        workbook = load_workbook(BytesIO(payload), data_only=True, read_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise SpreadsheetError(f"Unable to read spreadsheet: {exc}") from exc

    try:
        if not workbook.worksheets:
            raise SpreadsheetError("Spreadsheet has no worksheets")
        sheet = workbook.worksheets[0]
        parsed = rows_to_records(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()

    LOGGER.debug("Read %d rows from sheet with headers %s", len(parsed.rows), parsed.headers)
    return parsed


__all__ = [
    "ColumnValidation",
    "EXPECTED_COLUMNS",
    "MissingColumnsError",
    "ParsedSheet",
    "SpreadsheetError",
    "SpreadsheetSource",
    "load_source_bytes",
    "read_spreadsheet",
    "rows_to_records",
    "validate_expected_columns",
]
