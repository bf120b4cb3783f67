"""Persistence boundary for imported operations."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Sequence, TypeVar

from .models import ImportSummary, Operation

LOGGER = logging.getLogger(__name__)

MAX_WRITES_PER_BATCH = 450

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""

    if size < 1:
        raise ValueError("Batch size must be a positive integer")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def require_user(user_id: str) -> None:
    if not user_id:
        raise ValueError("A user id is required")


class OperationRepository(ABC):
    """Store of a user's operations keyed by ``operation_id``."""

    @abstractmethod
    def find_existing_ids(self, user_id: str) -> set[str]:
        """Return every operation id already stored for ``user_id``."""

    @abstractmethod
    def insert_batch(self, user_id: str, operations: Sequence[Operation]) -> None:
        """Atomically store ``operations`` for ``user_id``."""

    @abstractmethod
    def list_operations(self, user_id: str) -> list[Operation]:
        """Return the operations of ``user_id``, newest first."""

    @abstractmethod
    def delete_all(self, user_id: str, *, batch_size: int = MAX_WRITES_PER_BATCH) -> int:
        """Delete every operation of ``user_id`` and return how many were removed."""


class InMemoryOperationRepository(OperationRepository):
    """Dictionary backed repository, mostly useful for tests and dry runs."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Operation]] = {}
        self.committed_batches: list[int] = []

    def find_existing_ids(self, user_id: str) -> set[str]:
        require_user(user_id)
        return set(self._records.get(user_id, {}))

    def insert_batch(self, user_id: str, operations: Sequence[Operation]) -> None:
        require_user(user_id)
        bucket = self._records.setdefault(user_id, {})
        for operation in operations:
            bucket[operation.operation_id] = operation
        self.committed_batches.append(len(operations))

    def list_operations(self, user_id: str) -> list[Operation]:
        require_user(user_id)
        operations = list(self._records.get(user_id, {}).values())
        return sorted(operations, key=lambda op: op.date, reverse=True)

    def delete_all(self, user_id: str, *, batch_size: int = MAX_WRITES_PER_BATCH) -> int:
        require_user(user_id)
        return len(self._records.pop(user_id, {}))


def import_operations(
    repository: OperationRepository,
    user_id: str,
    operations: Iterable[Operation],
    *,
    batch_size: int = MAX_WRITES_PER_BATCH,
    summary: ImportSummary | None = None,
) -> ImportSummary:
    """Persist the operations that ``user_id`` does not have yet.

    Existing identities are fetched once. New operations are written in
    sequential batches so an interrupted import leaves a committed prefix
    behind; re-running the import skips it.
    """

    require_user(user_id)
    operations = list(operations)
    if summary is None:
        summary = ImportSummary(total_rows_read=len(operations))

    existing = repository.find_existing_ids(user_id)
    pending: list[Operation] = []
    skipped = 0
    for operation in operations:
        if operation.operation_id in existing:
            skipped += 1
            continue
        existing.add(operation.operation_id)
        pending.append(operation)

    for number, batch in enumerate(chunked(pending, batch_size), start=1):
        repository.insert_batch(user_id, batch)
        LOGGER.debug("Committed batch %d with %d operations for %s", number, len(batch), user_id)

    LOGGER.info(
        "Imported %d operations for %s (%d duplicates skipped)",
        len(pending),
        user_id,
        skipped,
    )
    return summary.with_counts(imported=len(pending), skipped_duplicate=skipped)


__all__ = [
    "InMemoryOperationRepository",
    "MAX_WRITES_PER_BATCH",
    "OperationRepository",
    "chunked",
    "import_operations",
    "require_user",
]
