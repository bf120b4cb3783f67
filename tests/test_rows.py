"""Tests for row classification and normalization."""
from __future__ import annotations

from datetime import date

import pytest

from brokerage_import.models import OperationKind
from brokerage_import.rows import classify, infer_operation_kind, normalize_row


def _row(direction: str, movement: str, **overrides) -> dict[str, object]:
    row: dict[str, object] = {
        "Entrada/Saída": direction,
        "Data": "04/12/2025",
        "Movimentação": movement,
        "Produto": "ALUP3 - ALUPAR INVESTIMENTOS S/A",
        "Instituição": "NU INVEST CORRETORA DE VALORES S.A.",
        "Quantidade": "306",
        "Preço unitário": "R$ 12,603",
        "Valor da Operação": "R$ 3.856,52",
    }
    row.update(overrides)
    return row


class TestInferOperationKind:
    """Tests for the ordered classification rules."""

    @pytest.mark.parametrize(
        ("movement", "expected"),
        [
            ("Dividendo", OperationKind.DIVIDEND),
            ("Rendimento", OperationKind.DIVIDEND),
            ("Proventos em dinheiro", OperationKind.DIVIDEND),
            ("Juros Sobre Capital Próprio", OperationKind.INTEREST_ON_EQUITY),
            ("juros sobre capital proprio", OperationKind.INTEREST_ON_EQUITY),
            ("Pagamento JCP", OperationKind.INTEREST_ON_EQUITY),
            ("JCP", OperationKind.INTEREST_ON_EQUITY),
            ("Bonificação em Ativos", OperationKind.PURCHASE),
            ("Compra", OperationKind.PURCHASE),
            ("Venda", OperationKind.SALE),
        ],
    )
    def test_movement_text(self, movement: str, expected: OperationKind) -> None:
        assert infer_operation_kind(_row("Credito", movement)) is expected

    @pytest.mark.parametrize(
        ("direction", "expected"),
        [
            ("Credito", OperationKind.PURCHASE),
            ("Crédito", OperationKind.PURCHASE),
            ("Entrada", OperationKind.PURCHASE),
            ("Debito", OperationKind.SALE),
            ("Débito", OperationKind.SALE),
            ("Saída", OperationKind.SALE),
        ],
    )
    def test_settlement_transfer_uses_direction(self, direction: str, expected: OperationKind) -> None:
        row = _row(direction, "Transferência - Liquidação")
        assert infer_operation_kind(row) is expected

    def test_income_wins_over_settlement(self) -> None:
        row = _row("Debito", "Transferência - Liquidação Rendimento")
        assert infer_operation_kind(row) is OperationKind.DIVIDEND

    def test_jcp_requires_standalone_token(self) -> None:
        assert classify("transferencia jcpx", "credito") is None

    @pytest.mark.parametrize(
        "movement",
        ["Transferência", "Cessão de Direitos", "Atualização", "", "Leilão de Fração"],
    )
    def test_unrecognized_rows(self, movement: str) -> None:
        assert infer_operation_kind(_row("Credito", movement)) is None

    def test_settlement_without_direction(self) -> None:
        assert infer_operation_kind(_row("", "Transferência - Liquidação")) is None

    def test_normalized_header_aliases(self) -> None:
        row = {"entrada/saída": "Debito", "movimentação": "Transferência - Liquidação"}
        assert infer_operation_kind(row) is OperationKind.SALE

    def test_accent_free_headers(self) -> None:
        row = {"Entrada/Saida": "Credito", "Movimentacao": "Transferencia - Liquidacao"}
        assert infer_operation_kind(row) is OperationKind.PURCHASE


class TestNormalizeRow:
    """Tests for normalize_row."""

    def test_settlement_credit_is_purchase(self) -> None:
        draft = normalize_row(_row("Credito", "Transferência - Liquidação"))

        assert draft is not None
        assert draft.kind is OperationKind.PURCHASE
        assert draft.ticker == "ALUP3"
        assert draft.date == date(2025, 12, 4)
        assert draft.quantity == 306
        assert draft.unit_price == pytest.approx(12.603)
        assert draft.total_value == pytest.approx(3856.52)
        assert draft.broker == "NU INVEST CORRETORA DE VALORES S.A."

    def test_settlement_debit_is_sale(self) -> None:
        row = _row(
            "Debito",
            "Transferência - Liquidação",
            Produto="ALUP11 - ALUPAR INVESTIMENTOS S/A",
            Quantidade="101",
            **{"Preço unitário": "R$ 33,61", "Valor da Operação": "R$ 3.394,61"},
        )
        draft = normalize_row(row)

        assert draft is not None
        assert draft.kind is OperationKind.SALE
        assert draft.ticker == "ALUP11"
        assert draft.quantity == 101
        assert draft.total_value == pytest.approx(3394.61)

    def test_bonus_is_zero_cost_purchase(self) -> None:
        row = _row(
            "Credito",
            "Bonificação em Ativos",
            Produto="ITSA4 - ITAUSA S.A.",
            Quantidade="12,2",
            **{"Preço unitário": "-", "Valor da Operação": "-"},
        )
        draft = normalize_row(row)

        assert draft is not None
        assert draft.kind is OperationKind.PURCHASE
        assert draft.quantity == pytest.approx(12.2)
        assert draft.unit_price == 0
        assert draft.total_value == 0

    def test_dividend_and_jcp(self) -> None:
        dividend = normalize_row(
            _row("Credito", "Dividendo", Produto="ITSA4 - ITAUSA S.A.", **{"Valor da Operação": "R$ 472,97"})
        )
        jcp = normalize_row(
            _row(
                "Credito",
                "Juros Sobre Capital Próprio",
                Produto="DXCO3 - DEXCO S.A.",
                **{"Valor da Operação": "R$ 0,04"},
            )
        )

        assert dividend is not None and dividend.kind is OperationKind.DIVIDEND
        assert dividend.total_value == pytest.approx(472.97)
        assert jcp is not None and jcp.kind is OperationKind.INTEREST_ON_EQUITY
        assert jcp.ticker == "DXCO3"
        assert jcp.total_value == pytest.approx(0.04)

    def test_negative_amounts_become_magnitudes(self) -> None:
        row = _row(
            "Debito",
            "Venda",
            Quantidade="-306",
            **{"Preço unitário": "(12,603)", "Valor da Operação": "R$ 3.856,52-"},
        )
        draft = normalize_row(row)

        assert draft is not None
        assert draft.quantity == 306
        assert draft.unit_price == pytest.approx(12.603)
        assert draft.total_value == pytest.approx(3856.52)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"Data": "Data"},
            {"Data": ""},
            {"Produto": ""},
            {"Movimentação": "Cessão de Direitos"},
        ],
    )
    def test_incomplete_rows_are_dropped(self, overrides) -> None:
        assert normalize_row(_row("Credito", "Compra", **overrides)) is None

    def test_missing_broker_defaults_to_empty(self) -> None:
        row = _row("Credito", "Compra")
        del row["Instituição"]
        draft = normalize_row(row)

        assert draft is not None
        assert draft.broker == ""
