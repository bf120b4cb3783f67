"""Classification of brokerage statement rows into operation kinds."""
from __future__ import annotations

import logging
import re
from typing import Callable, Mapping, Optional, Sequence

from ..models import OperationKind
from ..parsing import fold_text, normalize_header_name

LOGGER = logging.getLogger(__name__)

DIRECTION_COLUMNS = ("Entrada/Saída", "Entrada/Saida")
MOVEMENT_COLUMNS = ("Movimentação", "Movimentacao")

INCOME_MARKERS = ("dividend", "provento", "rendimento")
JCP_TOKEN = re.compile(r"\bjcp\b")
CREDIT_MARKERS = ("entr", "cr", "cred")
DEBIT_MARKERS = ("sai", "deb")

Rule = Callable[[str, str], Optional[OperationKind]]


def lookup(row: Mapping[str, object], candidates: Sequence[str]) -> object:
    """Return the first non-null value among ``candidates`` and their aliases."""

    for name in candidates:
        for key in (name, normalize_header_name(name)):
            value = row.get(key)
            if value is not None:
                return value
    return None


def _income(movement: str, _direction: str) -> Optional[OperationKind]:
    if any(marker in movement for marker in INCOME_MARKERS):
        return OperationKind.DIVIDEND
    return None


def _interest_on_equity(movement: str, _direction: str) -> Optional[OperationKind]:
    if "juros sobre capital proprio" in movement or JCP_TOKEN.search(movement):
        return OperationKind.INTEREST_ON_EQUITY
    return None


def _bonus(movement: str, _direction: str) -> Optional[OperationKind]:
    # Bonus shares enter as a zero-cost purchase.
    if "bonifica" in movement:
        return OperationKind.PURCHASE
    return None


def _explicit_trade(movement: str, _direction: str) -> Optional[OperationKind]:
    if "compra" in movement:
        return OperationKind.PURCHASE
    if "venda" in movement:
        return OperationKind.SALE
    return None


def _settlement_transfer(movement: str, direction: str) -> Optional[OperationKind]:
    if "transfer" not in movement or "liquida" not in movement:
        return None
    if any(marker in direction for marker in CREDIT_MARKERS):
        return OperationKind.PURCHASE
    if any(marker in direction for marker in DEBIT_MARKERS):
        return OperationKind.SALE
    return None


# Evaluated top to bottom; income rules precede settlement transfers.
RULES: tuple[Rule, ...] = (
    _income,
    _interest_on_equity,
    _bonus,
    _explicit_trade,
    _settlement_transfer,
)


def classify(movement: str, direction: str) -> Optional[OperationKind]:
    """Apply :data:`RULES` to already folded movement and direction texts."""

    for rule in RULES:
        kind = rule(movement, direction)
        if kind is not None:
            return kind
    return None


def infer_operation_kind(row: Mapping[str, object]) -> Optional[OperationKind]:
    """Infer the operation kind of a spreadsheet row, or ``None`` to drop it."""

    direction = fold_text(lookup(row, DIRECTION_COLUMNS))
    movement = fold_text(lookup(row, MOVEMENT_COLUMNS))
    kind = classify(movement, direction)
    if kind is None:
        LOGGER.debug("Unrecognized movement %r (%r)", movement, direction)
    return kind


__all__ = ["RULES", "classify", "infer_operation_kind", "lookup"]
