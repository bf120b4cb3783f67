"""Content-addressed identities used to deduplicate imported operations."""
from __future__ import annotations

import hashlib
import math
from datetime import date
from decimal import Decimal

from .models import Operation, OperationDraft, OperationKind
from .parsing import format_date_id

SEPARATOR = "-"


def _format_number(value: float) -> str:
    """Render ``value`` the way ECMAScript ``Number.prototype.toString`` does.

    Integral amounts have no decimal point (``306``). Magnitudes below ``1e-6``
    or from ``1e21`` upward use exponent notation (``1e-7``, ``1e+21``).
    """

    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "0"

    sign = "-" if number < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(number))).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple)
    size = len(digits)
    point = exponent + size

    if size <= point <= 21:
        return sign + digits + "0" * (point - size)
    if 0 < point <= 21:
        return f"{sign}{digits[:point]}.{digits[point:]}"
    if -6 < point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"

    power = point - 1
    mantissa = digits if size == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{sign}{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def build_operation_id(
    operation_date: date,
    kind: OperationKind,
    ticker: str,
    quantity: float,
    total_value: float,
) -> str:
    """Return the SHA-256 hex digest identifying an operation.

    Only the calendar day of ``operation_date`` is used. Two real events that
    share day, kind, ticker, quantity and value collapse into one identity.
    """

    kind_code = kind.value if isinstance(kind, OperationKind) else str(kind)
    base = SEPARATOR.join(
        (
            format_date_id(operation_date),
            kind_code,
            ticker,
            _format_number(quantity),
            _format_number(total_value),
        )
    )
    return hashlib.sha256(base.encode("utf-8")).hexdigest()


def attach_operation_id(draft: OperationDraft) -> Operation:
    """Promote a draft into a full :class:`Operation`."""

    operation_id = build_operation_id(
        draft.date,
        draft.kind,
        draft.ticker,
        draft.quantity,
        draft.total_value,
    )
    return Operation.from_draft(draft, operation_id)


__all__ = ["attach_operation_id", "build_operation_id"]
