# ruff: noqa: I001
"""Conference hierarchy and monthly ledger tables.

Revision ID: 0001_conference_finance_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_conference_finance_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "councils",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("councils.id"), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("president_name", sa.String(), nullable=True),
        sa.Column("treasurer_name", sa.String(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "type in ('Metropolitano','Central','Particular')", name="ck_councils_type"
        ),
    )

    op.create_table(
        "conferences",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("foundation_date", sa.Date(), nullable=True),
        sa.Column(
            "metropolitan_council_id", sa.String(36), sa.ForeignKey("councils.id"), nullable=True
        ),
        sa.Column("central_council_id", sa.String(36), sa.ForeignKey("councils.id"), nullable=True),
        sa.Column(
            "particular_council_id", sa.String(36), sa.ForeignKey("councils.id"), nullable=True
        ),
        sa.Column("president_name", sa.String(), nullable=True),
        sa.Column("treasurer_name", sa.String(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "conference_id", sa.String(36), sa.ForeignKey("conferences.id"), nullable=False
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("admission_date", sa.Date(), nullable=True),
        sa.CheckConstraint("type in ('Confrade','Consócia')", name="ck_members_type"),
    )

    op.create_table(
        "financial_transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "conference_id", sa.String(36), sa.ForeignKey("conferences.id"), nullable=False
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        _created_at(),
        sa.CheckConstraint("kind in ('income','expense')", name="ck_fin_tx_kind"),
        sa.CheckConstraint("category_id BETWEEN 1 AND 30", name="ck_fin_tx_category_range"),
        sa.CheckConstraint("value > 0", name="ck_fin_tx_value_positive"),
    )
    op.create_index(
        "ix_fin_tx_conference_date",
        "financial_transactions",
        ["conference_id", "date"],
    )


def downgrade() -> None:
    op.drop_index("ix_fin_tx_conference_date", table_name="financial_transactions")
    op.drop_table("financial_transactions")
    op.drop_table("members")
    op.drop_table("conferences")
    op.drop_table("councils")
