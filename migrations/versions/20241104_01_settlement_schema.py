"""Settlement reporting schema."""
from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from alembic import op

revision = "20241104_01"
down_revision = None
branch_labels = None
depends_on: Iterable[str] | None = None


def upgrade() -> None:  # noqa: D401
    """Create merchant, account and funding transaction tables."""

    op.create_table(
        "merchants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uid", sa.String(length=36), nullable=False, unique=True),
        sa.Column("merchant_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255)),
    )
    op.create_index("ix_merchants_merchant_id", "merchants", ["merchant_id"])

    op.create_table(
        "merchant_accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("merchant_uid", sa.String(length=36), nullable=False),
        sa.Column("account_number", sa.String(length=34), nullable=False),
        sa.ForeignKeyConstraint(["merchant_uid"], ["merchants.uid"], ondelete="CASCADE"),
    )
    op.create_index("ix_merchant_accounts_merchant_uid", "merchant_accounts", ["merchant_uid"])

    op.create_table(
        "funding_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("merchant_id", sa.String(length=64), nullable=False),
        sa.Column("program_id", sa.String(length=32), nullable=False),
        sa.Column("processing_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 4), nullable=False),
        sa.Column("reference_number", sa.String(length=32), nullable=False),
    )
    op.create_index(
        "ix_funding_transactions_program_date",
        "funding_transactions",
        ["program_id", "processing_date"],
    )


def downgrade() -> None:  # noqa: D401
    """Drop settlement reporting tables."""

    op.drop_index("ix_funding_transactions_program_date", table_name="funding_transactions")
    op.drop_table("funding_transactions")
    op.drop_index("ix_merchant_accounts_merchant_uid", table_name="merchant_accounts")
    op.drop_table("merchant_accounts")
    op.drop_index("ix_merchants_merchant_id", table_name="merchants")
    op.drop_table("merchants")
