"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the conference hierarchy and ledger models used by
``conference_finance``.
"""

from .finance import Base, Conference, Council, FinancialTransaction, Member

__all__ = [
    "Base",
    "Council",
    "Conference",
    "Member",
    "FinancialTransaction",
]
