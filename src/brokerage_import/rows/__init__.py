"""Row level interpretation of brokerage statements."""
from __future__ import annotations

from .classifier import classify, infer_operation_kind
from .normalizer import normalize_row

__all__ = ["classify", "infer_operation_kind", "normalize_row"]
