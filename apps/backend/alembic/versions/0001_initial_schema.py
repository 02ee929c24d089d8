"""initial schema: users, categories, rules, uploads, expenses

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "defaultcategory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_other", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "defaultcategoryrule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("keyword", sa.String(100), nullable=False, unique=True),
        sa.Column(
            "default_category_id",
            sa.Integer(),
            sa.ForeignKey("defaultcategory.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("priority", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_other", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )
    op.create_table(
        "categoryrule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=True),
        sa.Column("keyword", sa.String(100), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id", ondelete="CASCADE"), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_categoryrule_user_priority", "categoryrule", ["user_id", "priority"])
    op.create_table(
        "csvupload",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("raw_data", sa.JSON(), nullable=False),
        sa.Column("row_count", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "expense",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("upload_id", sa.Integer(), sa.ForeignKey("csvupload.id", ondelete="SET NULL"), nullable=True),
        sa.Column("transaction_date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("merchant", sa.String(200), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id", ondelete="SET NULL"), nullable=True),
        sa.Column("payment_method", sa.String(100), nullable=True),
        sa.Column("external_transaction_id", sa.String(50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "external_transaction_id", name="uq_expense_external_id"),
    )
    op.create_index("ix_expense_user_date", "expense", ["user_id", "transaction_date"])
    op.create_index("ix_expense_user_category", "expense", ["user_id", "category_id"])


def downgrade() -> None:
    op.drop_index("ix_expense_user_category", table_name="expense")
    op.drop_index("ix_expense_user_date", table_name="expense")
    op.drop_table("expense")
    op.drop_table("csvupload")
    op.drop_index("ix_categoryrule_user_priority", table_name="categoryrule")
    op.drop_table("categoryrule")
    op.drop_table("category")
    op.drop_table("defaultcategoryrule")
    op.drop_table("defaultcategory")
    op.drop_table("user")
