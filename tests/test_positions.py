"""Tests for the weighted-average position aggregator."""
from __future__ import annotations

import math
from datetime import date

import pytest

from brokerage_import.models import OperationKind
from brokerage_import.positions import calculate_positions

from conftest import make_operation


class TestCalculatePositions:
    """Tests for calculate_positions."""

    def test_weighted_average_ignores_income(self) -> None:
        operations = [
            make_operation("ABEV3", OperationKind.PURCHASE, when=date(2025, 1, 1), quantity=100, unit_price=10, total_value=1000),
            make_operation("ABEV3", OperationKind.SALE, when=date(2025, 2, 1), quantity=20, unit_price=12, total_value=240),
            make_operation("ABEV3", OperationKind.DIVIDEND, when=date(2025, 3, 1), total_value=50),
        ]

        [position] = calculate_positions(operations)

        assert position.ticker == "ABEV3"
        assert position.current_quantity == 80
        assert position.average_cost == pytest.approx(9.5)
        assert position.invested_value == pytest.approx(760)

    def test_zero_net_quantity_has_zero_cost(self) -> None:
        operations = [
            make_operation("ITUB4", OperationKind.PURCHASE, quantity=10, unit_price=10, total_value=100),
            make_operation("ITUB4", OperationKind.SALE, when=date(2025, 2, 1), quantity=10, unit_price=12, total_value=120),
        ]

        [position] = calculate_positions(operations)

        assert position.current_quantity == 0
        assert position.average_cost == 0
        assert position.invested_value == 0
        assert not math.isnan(position.average_cost)

    def test_bonus_dilutes_average_cost(self) -> None:
        operations = [
            make_operation("ITSA4", OperationKind.PURCHASE, quantity=100, unit_price=10, total_value=1000),
            make_operation("ITSA4", OperationKind.PURCHASE, when=date(2025, 6, 1), quantity=25),
        ]

        [position] = calculate_positions(operations)

        assert position.current_quantity == 125
        assert position.average_cost == pytest.approx(8.0)
        assert position.invested_value == pytest.approx(1000)

    def test_jcp_does_not_change_holdings(self) -> None:
        base = [make_operation("BBAS3", OperationKind.PURCHASE, quantity=10, total_value=200)]
        with_income = base + [make_operation("BBAS3", OperationKind.INTEREST_ON_EQUITY, total_value=15)]

        assert calculate_positions(base) == calculate_positions(with_income)

    def test_sorted_by_ticker(self) -> None:
        operations = [
            make_operation(ticker, OperationKind.PURCHASE, quantity=1, total_value=1)
            for ticker in ("VALE3", "ABEV3", "PETR4", "BBDC4")
        ]

        assert [p.ticker for p in calculate_positions(operations)] == ["ABEV3", "BBDC4", "PETR4", "VALE3"]

    def test_empty_input(self) -> None:
        assert calculate_positions([]) == []
