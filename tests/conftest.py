"""Pytest configuration and fixtures."""
from __future__ import annotations

from datetime import date, datetime
from io import BytesIO
from typing import Any, Callable, Sequence

import pytest
from openpyxl import Workbook
from sqlalchemy.engine import Engine

from brokerage_import.db import SqlOperationRepository, create_db_engine, ensure_schema
from brokerage_import.identity import build_operation_id
from brokerage_import.models import Operation, OperationKind
from brokerage_import.repository import InMemoryOperationRepository
from brokerage_import.spreadsheet import EXPECTED_COLUMNS

STATEMENT_ROWS: list[list[Any]] = [
    [
        "Credito",
        "04/12/2025",
        "Transferência - Liquidação",
        "ALUP3 - ALUPAR INVESTIMENTOS S/A",
        "NU INVEST CORRETORA DE VALORES S.A.",
        "306",
        "R$ 12,603",
        "R$ 3.856,52",
    ],
    [
        "Debito",
        "02/12/2025",
        "Transferência - Liquidação",
        "ALUP11 - ALUPAR INVESTIMENTOS S/A",
        "NU INVEST CORRETORA DE VALORES S.A.",
        "101",
        "R$ 33,61",
        "R$ 3.394,61",
    ],
    [
        "Credito",
        datetime(2025, 12, 19),
        "Dividendo",
        "ITSA4 - ITAUSA S.A.",
        "NU INVEST",
        610,
        0.775,
        472.97,
    ],
    [
        "Credito",
        "18/12/2025",
        "Juros Sobre Capital Próprio",
        "DXCO3 - DEXCO S.A.",
        "NU INVEST",
        "1",
        "R$ 0,046",
        "R$ 0,04",
    ],
    [
        "Credito",
        "22/12/2025",
        "Bonificação em Ativos",
        "ITSA4 - ITAUSA S.A.",
        "NU INVEST",
        "12,2",
        "-",
        "-",
    ],
    # Not an operation: cash movement without a product.
    ["Credito", "05/12/2025", "Transferência", "", "NU INVEST", "", "", "R$ 100,00"],
    # Not an operation: unclassifiable movement.
    ["Debito", "06/12/2025", "Cessão de Direitos", "ITSA4 - ITAUSA S.A.", "NU INVEST", "1", "", ""],
    # Not an operation: disclaimer line.
    ["", "Valores sujeitos a confirmação", "", "", "", "", "", ""],
]

OPERATION_BEARING_ROWS = 5


def build_workbook(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[str] = EXPECTED_COLUMNS,
    extra_sheets: int = 0,
) -> bytes:
    """Serialize ``headers`` and ``rows`` as an XLSX document."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Movimentacao"
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))
    for index in range(extra_sheets):
        other = workbook.create_sheet(f"Extra {index}")
        other.append(["Irrelevante"])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def statement_bytes() -> bytes:
    """A brokerage statement mixing operations and noise rows."""
    return build_workbook(STATEMENT_ROWS)


@pytest.fixture
def workbook_factory() -> Callable[..., bytes]:
    return build_workbook


@pytest.fixture
def memory_repository() -> InMemoryOperationRepository:
    """Fresh in-memory repository for each test."""
    return InMemoryOperationRepository()


@pytest.fixture
def engine(tmp_path) -> Engine:
    """SQLite engine with the schema created."""
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'brokerage.db'}")
    ensure_schema(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def sql_repository(engine: Engine) -> SqlOperationRepository:
    return SqlOperationRepository(engine)


def make_operation(
    ticker: str,
    kind: OperationKind,
    *,
    when: date = date(2025, 1, 1),
    quantity: float = 0.0,
    unit_price: float = 0.0,
    total_value: float = 0.0,
    broker: str = "X",
) -> Operation:
    """Build a fully identified operation for aggregation tests."""

    return Operation(
        operation_id=build_operation_id(when, kind, ticker, quantity, total_value),
        date=when,
        ticker=ticker,
        kind=kind,
        quantity=quantity,
        unit_price=unit_price,
        total_value=total_value,
        broker=broker,
    )
