"""Domain models representing brokerage operations and their projections."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any


class OperationKind(str, Enum):
    """Economic nature of an operation.

    Values are the codes persisted by the brokerage application and fed into
    the operation identity, so they must never change.
    """

    PURCHASE = "COMPRA"
    SALE = "VENDA"
    DIVIDEND = "DIVIDENDO"
    INTEREST_ON_EQUITY = "JCP"

    @property
    def is_trade(self) -> bool:
        return self in (OperationKind.PURCHASE, OperationKind.SALE)

    @property
    def is_income(self) -> bool:
        return self in (OperationKind.DIVIDEND, OperationKind.INTEREST_ON_EQUITY)


@dataclass(frozen=True, slots=True)
class OperationDraft:
    """A normalized spreadsheet row that has not been given an identity yet."""

    date: date
    ticker: str
    kind: OperationKind
    quantity: float
    unit_price: float
    total_value: float
    broker: str = ""


@dataclass(frozen=True, slots=True)
class Operation:
    """An immutable economic event imported from a brokerage statement.

    Numeric fields hold non-negative magnitudes; direction lives in ``kind``.
    """

    operation_id: str
    date: date
    ticker: str
    kind: OperationKind
    quantity: float
    unit_price: float
    total_value: float
    broker: str = ""

    @classmethod
    def from_draft(cls, draft: OperationDraft, operation_id: str) -> "Operation":
        return cls(
            operation_id=operation_id,
            date=draft.date,
            ticker=draft.ticker,
            kind=draft.kind,
            quantity=draft.quantity,
            unit_price=draft.unit_price,
            total_value=draft.total_value,
            broker=draft.broker,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["kind"] = self.kind.value
        return data


@dataclass(slots=True)
class Position:
    """Current holding of a ticker, recomputed from the full operation set."""

    ticker: str
    current_quantity: float
    average_cost: float
    invested_value: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ImportSummary:
    """Counters reported back to whoever triggered an import."""

    total_rows_read: int
    total_imported: int = 0
    total_skipped_duplicate: int = 0

    def with_counts(self, imported: int, skipped_duplicate: int) -> "ImportSummary":
        return replace(self, total_imported=imported, total_skipped_duplicate=skipped_duplicate)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PreparedImport:
    """Operations extracted from a statement, ready to be persisted."""

    operations: list[Operation]
    summary: ImportSummary


@dataclass(slots=True)
class TradeTickerSummary:
    ticker: str
    compras_qtd: float = 0.0
    compras_valor: float = 0.0
    vendas_qtd: float = 0.0
    vendas_valor: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class TradeYearHeader:
    ano: int
    total_compras_qtd: float
    total_compras_valor: float
    total_vendas_qtd: float
    total_vendas_valor: float
    tickers_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ProventosTickerSummary:
    ticker: str
    is_fii: bool
    dividendos: float
    jcp: float
    total: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ProventosYearHeader:
    ano: int
    total: float
    total_dividendos: float
    total_jcp: float
    total_fii: float
    total_outros: float
    tickers_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ProventosOverallSummary:
    total: float
    total_dividendos: float
    total_jcp: float
    total_fii: float
    total_outros: float
    top_payers: list[ProventosTickerSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = [
    "ImportSummary",
    "Operation",
    "OperationDraft",
    "OperationKind",
    "Position",
    "PreparedImport",
    "ProventosOverallSummary",
    "ProventosTickerSummary",
    "ProventosYearHeader",
    "TradeTickerSummary",
    "TradeYearHeader",
]
