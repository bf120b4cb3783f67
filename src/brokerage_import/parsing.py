"""Parsers for the Brazilian formatted values found in brokerage exports."""
from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser


SPREADSHEET_EPOCH = datetime(1899, 12, 30)
MS_PER_DAY = 86_400_000

CURRENCY_PREFIX = re.compile(r"R\$\s?", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")
TRAILING_MINUS = re.compile(r"-\s*$")
DAY_FIRST_DATE = re.compile(r"^([0-3]?\d)[/\-]([0-1]?\d)[/\-](\d{4})")
PLAIN_DECIMAL = re.compile(r"^([0-9]+\.?[0-9]*|\.[0-9]+)(e[+-]?[0-9]+)?$", re.IGNORECASE)


def parse_number(value: Any) -> float:
    """Parse a Brazilian formatted number such as ``"R$ 3.856,52"``.

    Negative values may be written as ``(123,45)``, ``123,45-`` or ``-123,45``.
    Anything that cannot be read as a finite number yields ``0``.
    """

    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if value is None:
        return 0.0

    raw = str(value).strip()
    if not raw:
        return 0.0

    negative = (raw.startswith("(") and raw.endswith(")")) or bool(TRAILING_MINUS.search(raw))
    cleaned = raw
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = cleaned[1:-1]
    cleaned = TRAILING_MINUS.sub("", cleaned)
    cleaned = CURRENCY_PREFIX.sub("", cleaned)
    cleaned = WHITESPACE.sub("", cleaned)
    if cleaned.startswith("-"):
        negative = True
        cleaned = cleaned[1:]
    cleaned = cleaned.replace(".", "").replace(",", ".")
    if not PLAIN_DECIMAL.match(cleaned):
        return 0.0

    number = float(cleaned)
    if not math.isfinite(number):
        return 0.0
    return -number if negative else number


def parse_date(value: Any) -> Optional[date]:
    """Parse a spreadsheet date cell into a calendar date.

    Accepts native dates, spreadsheet serial numbers, ISO strings and
    ``dd/mm/yyyy`` (or ``dd-mm-yyyy``) text. Returns ``None`` when nothing
    matches.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        try:
            moment = SPREADSHEET_EPOCH + timedelta(milliseconds=value * MS_PER_DAY)
        except OverflowError:
            return None
        return moment.date()

    raw = str(value if value is not None else "").strip()
    if not raw:
        return None

    try:
        moment = parser.isoparse(raw)
    except (ValueError, OverflowError):
        pass
    else:
        # Offset-aware timestamps are keyed by their UTC calendar day.
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()

    match = DAY_FIRST_DATE.match(raw)
    if match:
        day, month, year = (int(group) for group in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


def extract_ticker(product: Any) -> str:
    """Return the ticker from a product label like ``"ABEV3 - AMBEV S/A"``."""

    raw = str(product if product is not None else "").strip()
    if not raw:
        return ""
    head = raw.split("-", 1)[0]
    tokens = head.split()
    return tokens[0].upper() if tokens else ""


def normalize_header_name(header: Any) -> str:
    """Canonical form of a column header used for resilient lookups."""

    text = str(header if header is not None else "").replace("\u00a0", " ")
    return WHITESPACE.sub(" ", text).strip().lower()


def fold_text(value: Any) -> str:
    """Lower-case ``value`` and strip accents so that "Crédito" matches "credito"."""

    text = str(value if value is not None else "").strip().lower()
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def format_date_id(value: date) -> str:
    """Day precision ``YYYY-MM-DD`` key used in operation identities."""

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


__all__ = [
    "extract_ticker",
    "fold_text",
    "format_date_id",
    "normalize_header_name",
    "parse_date",
    "parse_number",
]
