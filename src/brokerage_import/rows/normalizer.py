"""Conversion of raw spreadsheet rows into operation drafts."""
from __future__ import annotations

from typing import Mapping, Optional

from ..models import OperationDraft
from ..parsing import extract_ticker, parse_date, parse_number
from .classifier import infer_operation_kind, lookup

DATE_COLUMNS = ("Data",)
PRODUCT_COLUMNS = ("Produto",)
BROKER_COLUMNS = ("Instituição", "Instituicao")
QUANTITY_COLUMNS = ("Quantidade",)
UNIT_PRICE_COLUMNS = ("Preço unitário", "Preco unitario")
TOTAL_VALUE_COLUMNS = ("Valor da Operação", "Valor da Operacao")


def normalize_row(row: Mapping[str, object]) -> Optional[OperationDraft]:
    """Build an :class:`OperationDraft` from ``row``.

    Rows without a readable date, ticker or recognizable movement are not
    operations (repeated headers, subtotals, disclaimers) and yield ``None``.
    Brokers report some flows as negative cash, so every amount is stored as
    its magnitude.
    """

    operation_date = parse_date(lookup(row, DATE_COLUMNS))
    ticker = extract_ticker(lookup(row, PRODUCT_COLUMNS))
    kind = infer_operation_kind(row)
    if operation_date is None or not ticker or kind is None:
        return None

    broker = lookup(row, BROKER_COLUMNS)
    return OperationDraft(
        date=operation_date,
        ticker=ticker,
        kind=kind,
        quantity=abs(parse_number(lookup(row, QUANTITY_COLUMNS))),
        unit_price=abs(parse_number(lookup(row, UNIT_PRICE_COLUMNS))),
        total_value=abs(parse_number(lookup(row, TOTAL_VALUE_COLUMNS))),
        broker=str(broker).strip() if broker is not None else "",
    )


__all__ = ["normalize_row"]
