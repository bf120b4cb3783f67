"""Current holdings computed from the operation history."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Operation, OperationKind, Position


@dataclass(slots=True)
class _TradeTotals:
    purchased_quantity: float = 0.0
    sold_quantity: float = 0.0
    purchased_value: float = 0.0
    sold_value: float = 0.0


def calculate_positions(operations: Iterable[Operation]) -> list[Position]:
    """Fold ``operations`` into one weighted-average position per ticker.

    Sales remove the value reported in the statement, not a recomputed
    average, and income operations never touch quantity or cost. A ticker
    with a net quantity of zero has an average cost of exactly ``0``.
    """

    totals: dict[str, _TradeTotals] = {}
    for operation in operations:
        if not operation.ticker:
            continue
        current = totals.setdefault(operation.ticker, _TradeTotals())
        if operation.kind == OperationKind.PURCHASE:
            current.purchased_quantity += operation.quantity
            current.purchased_value += operation.total_value
        elif operation.kind == OperationKind.SALE:
            current.sold_quantity += operation.quantity
            current.sold_value += operation.total_value

    positions: list[Position] = []
    for ticker, sums in totals.items():
        quantity = sums.purchased_quantity - sums.sold_quantity
        net_value = sums.purchased_value - sums.sold_value
        average_cost = net_value / quantity if quantity != 0 else 0.0
        positions.append(
            Position(
                ticker=ticker,
                current_quantity=quantity,
                average_cost=average_cost,
                invested_value=quantity * average_cost,
            )
        )

    positions.sort(key=lambda position: position.ticker)
    return positions


__all__ = ["calculate_positions"]
