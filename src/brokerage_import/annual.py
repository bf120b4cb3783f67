"""Per-year and all-time summaries of trades and income (proventos)."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from .models import (
    Operation,
    OperationKind,
    ProventosOverallSummary,
    ProventosTickerSummary,
    ProventosYearHeader,
    TradeTickerSummary,
    TradeYearHeader,
)

TWO_DIGIT_SUFFIX = re.compile(r"\d\d$")

DEFAULT_TOP_PAYERS = 5


def is_fii_ticker(ticker: str) -> bool:
    """Heuristic: real-estate funds (FIIs) trade under tickers ending in ``11``.

    Known to misfire for units and other non-standard tickers.
    """

    return bool(TWO_DIGIT_SUFFIX.search(ticker)) and ticker.endswith("11")


def _add(total: float, value: Any) -> float:
    """Add ``value`` to ``total`` treating stray non-finite input as zero."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return total
    return total + number if math.isfinite(number) else total


def _trades(operations: Iterable[Operation]) -> Iterable[Operation]:
    return (op for op in operations if op.ticker and op.kind.is_trade)


def _proventos(operations: Iterable[Operation]) -> Iterable[Operation]:
    return (op for op in operations if op.ticker and op.kind.is_income)


@dataclass(slots=True)
class _TradeYear:
    compras_qtd: float = 0.0
    compras_valor: float = 0.0
    vendas_qtd: float = 0.0
    vendas_valor: float = 0.0
    tickers: set[str] = field(default_factory=set)


def summarize_trades_by_year(operations: Iterable[Operation]) -> list[TradeYearHeader]:
    """Purchase and sale totals per calendar year, most recent year first."""

    by_year: dict[int, _TradeYear] = {}
    for op in _trades(operations):
        current = by_year.setdefault(op.date.year, _TradeYear())
        current.tickers.add(op.ticker)
        if op.kind == OperationKind.PURCHASE:
            current.compras_qtd = _add(current.compras_qtd, op.quantity)
            current.compras_valor = _add(current.compras_valor, op.total_value)
        else:
            current.vendas_qtd = _add(current.vendas_qtd, op.quantity)
            current.vendas_valor = _add(current.vendas_valor, op.total_value)

    headers = [
        TradeYearHeader(
            ano=year,
            total_compras_qtd=sums.compras_qtd,
            total_compras_valor=sums.compras_valor,
            total_vendas_qtd=sums.vendas_qtd,
            total_vendas_valor=sums.vendas_valor,
            tickers_count=len(sums.tickers),
        )
        for year, sums in by_year.items()
    ]
    headers.sort(key=lambda header: header.ano, reverse=True)
    return headers


def get_trade_year_details(operations: Iterable[Operation], year: int) -> list[TradeTickerSummary]:
    """Per-ticker purchases and sales for ``year`` sorted by ticker."""

    by_ticker: dict[str, TradeTickerSummary] = {}
    for op in _trades(operations):
        if op.date.year != year:
            continue
        current = by_ticker.setdefault(op.ticker, TradeTickerSummary(ticker=op.ticker))
        if op.kind == OperationKind.PURCHASE:
            current.compras_qtd = _add(current.compras_qtd, op.quantity)
            current.compras_valor = _add(current.compras_valor, op.total_value)
        else:
            current.vendas_qtd = _add(current.vendas_qtd, op.quantity)
            current.vendas_valor = _add(current.vendas_valor, op.total_value)
    return sorted(by_ticker.values(), key=lambda summary: summary.ticker)


@dataclass(slots=True)
class _IncomeTotals:
    total: float = 0.0
    dividendos: float = 0.0
    jcp: float = 0.0
    fii: float = 0.0
    outros: float = 0.0
    tickers: set[str] = field(default_factory=set)

    def add(self, op: Operation) -> None:
        value = _add(0.0, op.total_value)
        self.tickers.add(op.ticker)
        self.total = _add(self.total, value)
        if op.kind == OperationKind.DIVIDEND:
            self.dividendos = _add(self.dividendos, value)
        else:
            self.jcp = _add(self.jcp, value)
        if is_fii_ticker(op.ticker):
            self.fii = _add(self.fii, value)
        else:
            self.outros = _add(self.outros, value)


def _ticker_income(operations: Iterable[Operation]) -> list[ProventosTickerSummary]:
    by_ticker: dict[str, list[float]] = {}
    for op in operations:
        sums = by_ticker.setdefault(op.ticker, [0.0, 0.0])
        value = _add(0.0, op.total_value)
        if op.kind == OperationKind.DIVIDEND:
            sums[0] = _add(sums[0], value)
        else:
            sums[1] = _add(sums[1], value)
    return [
        ProventosTickerSummary(
            ticker=ticker,
            is_fii=is_fii_ticker(ticker),
            dividendos=dividendos,
            jcp=jcp,
            total=_add(dividendos, jcp),
        )
        for ticker, (dividendos, jcp) in by_ticker.items()
    ]


def summarize_proventos_by_year(operations: Iterable[Operation]) -> list[ProventosYearHeader]:
    """Dividend and JCP totals per calendar year, most recent year first."""

    by_year: dict[int, _IncomeTotals] = {}
    for op in _proventos(operations):
        by_year.setdefault(op.date.year, _IncomeTotals()).add(op)

    headers = [
        ProventosYearHeader(
            ano=year,
            total=sums.total,
            total_dividendos=sums.dividendos,
            total_jcp=sums.jcp,
            total_fii=sums.fii,
            total_outros=sums.outros,
            tickers_count=len(sums.tickers),
        )
        for year, sums in by_year.items()
    ]
    headers.sort(key=lambda header: header.ano, reverse=True)
    return headers


def get_proventos_year_details(
    operations: Iterable[Operation], year: int
) -> list[ProventosTickerSummary]:
    """Per-ticker dividend/JCP breakdown for ``year`` sorted by ticker."""

    in_year = (op for op in _proventos(operations) if op.date.year == year)
    return sorted(_ticker_income(in_year), key=lambda summary: summary.ticker)


def summarize_proventos_overall(
    operations: Iterable[Operation], top_n: int = DEFAULT_TOP_PAYERS
) -> ProventosOverallSummary:
    """All-time income totals plus the ``top_n`` best paying tickers.

    Payers with equal totals keep the order in which they first appeared.
    """

    income = list(_proventos(operations))
    totals = _IncomeTotals()
    for op in income:
        totals.add(op)

    payers = sorted(_ticker_income(income), key=lambda summary: summary.total, reverse=True)
    return ProventosOverallSummary(
        total=totals.total,
        total_dividendos=totals.dividendos,
        total_jcp=totals.jcp,
        total_fii=totals.fii,
        total_outros=totals.outros,
        top_payers=payers[: max(0, top_n)],
    )


__all__ = [
    "DEFAULT_TOP_PAYERS",
    "get_proventos_year_details",
    "get_trade_year_details",
    "is_fii_ticker",
    "summarize_proventos_by_year",
    "summarize_proventos_overall",
    "summarize_trades_by_year",
]
