"""Validation errors raised while building a monthly map.

All errors derive from ``ValueError`` so callers that only care about "bad
input" can catch a single type. ``transaction_id`` identifies the offending
ledger entry; it is ``None`` when the opening balance itself is invalid.
"""

from __future__ import annotations


class MapError(ValueError):
    def __init__(self, message: str, *, transaction_id: str | None = None) -> None:
        super().__init__(message)
        self.transaction_id = transaction_id


class InvalidCategory(MapError):
    """Category id is unknown or names a derived line."""


class KindMismatch(MapError):
    """Declared income/expense kind disagrees with the line's kind."""


class InvalidAmount(MapError):
    """Non-positive or non-finite entry value, or non-finite opening balance."""


__all__ = ["MapError", "InvalidCategory", "KindMismatch", "InvalidAmount"]
