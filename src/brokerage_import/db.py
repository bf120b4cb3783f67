"""Database integration utilities."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Sequence

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
)
from sqlalchemy.engine import Connection, Engine

from .models import Operation, OperationKind
from .repository import MAX_WRITES_PER_BATCH, OperationRepository, chunked, require_user


metadata = MetaData()

LOGGER = logging.getLogger(__name__)

operations = Table(
    "operacoes_ativos",
    metadata,
    Column("user_id", String(128), nullable=False),
    Column("operation_id", String(64), nullable=False),
    Column("date", Date, nullable=False),
    Column("ticker", String(32), nullable=False, index=True),
    Column("kind", String(16), nullable=False),
    Column("quantity", Float, nullable=False, default=0.0),
    Column("unit_price", Float, nullable=False, default=0.0),
    Column("total_value", Float, nullable=False, default=0.0),
    Column("broker", String(255), nullable=False, default=""),
    Column("created_at", DateTime, nullable=False, default=datetime.utcnow),
    PrimaryKeyConstraint("user_id", "operation_id", name="pk_operacoes_ativos"),
)


def create_db_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine."""

    LOGGER.debug("Creating database engine")
    return create_engine(database_url, future=True, pool_pre_ping=True)


@contextmanager
def session(engine: Engine) -> Iterator[Connection]:
    """Provide a transactional scope around a series of operations."""

    with engine.begin() as conn:
        yield conn


def ensure_schema(engine: Engine) -> None:
    """Create tables if they do not exist."""

    LOGGER.debug("Ensuring database schema is present")
    metadata.create_all(engine)


def _to_record(user_id: str, operation: Operation) -> dict[str, object]:
    return {
        "user_id": user_id,
        "operation_id": operation.operation_id,
        "date": operation.date,
        "ticker": operation.ticker,
        "kind": operation.kind.value,
        "quantity": operation.quantity,
        "unit_price": operation.unit_price,
        "total_value": operation.total_value,
        "broker": operation.broker,
    }


def _from_row(row) -> Operation:
    data = row._mapping
    return Operation(
        operation_id=str(data["operation_id"]),
        date=data["date"],
        ticker=str(data["ticker"]),
        kind=OperationKind(data["kind"]),
        quantity=float(data["quantity"] or 0),
        unit_price=float(data["unit_price"] or 0),
        total_value=float(data["total_value"] or 0),
        broker=str(data["broker"] or ""),
    )


class SqlOperationRepository(OperationRepository):
    """Operation repository backed by a relational database."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def find_existing_ids(self, user_id: str) -> set[str]:
        require_user(user_id)
        stmt = select(operations.c.operation_id).where(operations.c.user_id == user_id)
        with self.engine.connect() as conn:
            return set(conn.execute(stmt).scalars())

    def insert_batch(self, user_id: str, batch: Sequence[Operation]) -> None:
        require_user(user_id)
        if not batch:
            return
        with session(self.engine) as conn:
            conn.execute(insert(operations), [_to_record(user_id, op) for op in batch])
        LOGGER.debug("Inserted %d operations for %s", len(batch), user_id)

    def list_operations(self, user_id: str) -> list[Operation]:
        require_user(user_id)
        LOGGER.debug("Loading operations for %s", user_id)
        stmt = (
            select(operations)
            .where(operations.c.user_id == user_id)
            .order_by(operations.c.date.desc(), operations.c.ticker)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).all()
        return [_from_row(row) for row in rows]

    def delete_all(self, user_id: str, *, batch_size: int = MAX_WRITES_PER_BATCH) -> int:
        require_user(user_id)
        with self.engine.connect() as conn:
            ids = list(
                conn.execute(
                    select(operations.c.operation_id).where(operations.c.user_id == user_id)
                ).scalars()
            )

        deleted = 0
        for part in chunked(ids, batch_size):
            with session(self.engine) as conn:
                conn.execute(
                    delete(operations).where(
                        operations.c.user_id == user_id,
                        operations.c.operation_id.in_(part),
                    )
                )
            deleted += len(part)
        LOGGER.info("Deleted %d operations for %s", deleted, user_id)
        return deleted


__all__ = [
    "SqlOperationRepository",
    "create_db_engine",
    "ensure_schema",
    "metadata",
    "operations",
    "session",
]
