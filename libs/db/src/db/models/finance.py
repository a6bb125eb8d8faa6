from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------
# Hierarchy: councils -> conferences -> members
# ---------------------------


class Council(Base):
    __tablename__ = "councils"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    # Metropolitano > Central > Particular. Depth is checked in the service
    # layer; the DB only enforces the allowed labels.
    type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("councils.id"), nullable=True
    )
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    president_name: Mapped[str | None] = mapped_column(String, nullable=True)
    treasurer_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "type in ('Metropolitano','Central','Particular')", name="ck_councils_type"
        ),
    )


class Conference(Base):
    __tablename__ = "conferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    foundation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    metropolitan_council_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("councils.id"), nullable=True
    )
    central_council_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("councils.id"), nullable=True
    )
    particular_council_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("councils.id"), nullable=True
    )
    president_name: Mapped[str | None] = mapped_column(String, nullable=True)
    treasurer_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class Member(Base):
    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    conference_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conferences.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Confrade | Consócia
    type: Mapped[str] = mapped_column(String, nullable=False)
    # Free text (Presidente, Tesoureiro, Aspirante, ...)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    admission_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("type in ('Confrade','Consócia')", name="ck_members_type"),
    )


# ---------------------------
# Ledger: financial_transactions
# ---------------------------


class FinancialTransaction(Base):
    __tablename__ = "financial_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    conference_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conferences.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    # Map line id (1..30). Which lines accept entries is decided by the
    # application catalog; the DB only guards the range.
    category_id: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("kind in ('income','expense')", name="ck_fin_tx_kind"),
        CheckConstraint("category_id BETWEEN 1 AND 30", name="ck_fin_tx_category_range"),
        CheckConstraint("value > 0", name="ck_fin_tx_value_positive"),
        Index("ix_fin_tx_conference_date", "conference_id", "date"),
    )


__all__ = [
    "Base",
    "Council",
    "Conference",
    "Member",
    "FinancialTransaction",
]
