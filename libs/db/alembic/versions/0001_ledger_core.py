# ruff: noqa: I001
"""Ledger registries (categories/sources), expenses, incomes and fixed templates.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-03-02
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("now()"),
    )


def upgrade() -> None:
    op.create_table(
        "expense_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("icon", sa.Text(), nullable=False, server_default=sa.text("'MoreHorizontal'")),
        sa.Column("color", sa.Text(), nullable=False, server_default=sa.text("'#64748b'")),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_expense_categories_user_id", "expense_categories", ["user_id"])
    # One category name per user, compared case-insensitively.
    op.execute(
        "CREATE UNIQUE INDEX uq_expense_categories_user_name "
        "ON expense_categories (user_id, lower(name))"
    )

    op.create_table(
        "income_sources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False, server_default=sa.text("'other'")),
        sa.Column("frequency", sa.Text(), nullable=False, server_default=sa.text("'sporadic'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_income_sources_user_id", "income_sources", ["user_id"])
    op.execute(
        "CREATE UNIQUE INDEX uq_income_sources_user_name "
        "ON income_sources (user_id, lower(name))"
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_fixed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("jar_type", sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["category_id"], ["expense_categories.id"], name="fk_expenses_category"
        ),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint(
            "payment_method IS NULL OR payment_method in "
            "('pix','debit','credit','cash','boleto','transfer')",
            name="ck_expenses_payment_method",
        ),
        sa.CheckConstraint(
            "jar_type IS NULL OR jar_type in "
            "('necessities','education','savings','play','investment','giving')",
            name="ck_expenses_jar_type",
        ),
    )
    op.create_index("ix_expenses_user_id", "expenses", ["user_id"])
    op.create_index("ix_expenses_date", "expenses", ["date"])

    op.create_table(
        "incomes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_confirmed", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
        sa.ForeignKeyConstraint(["source_id"], ["income_sources.id"], name="fk_incomes_source"),
        sa.CheckConstraint("amount > 0", name="ck_incomes_amount_positive"),
    )
    op.create_index("ix_incomes_user_id", "incomes", ["user_id"])
    op.create_index("ix_incomes_date", "incomes", ["date"])

    op.create_table(
        "fixed_expense_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_day", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["category_id"], ["expense_categories.id"], name="fk_fixed_templates_category"
        ),
        sa.CheckConstraint("due_day >= 1 AND due_day <= 28", name="ck_fixed_templates_due_day"),
    )
    op.create_index("ix_fixed_expense_templates_user_id", "fixed_expense_templates", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_fixed_expense_templates_user_id", table_name="fixed_expense_templates")
    op.drop_table("fixed_expense_templates")
    op.drop_index("ix_incomes_date", table_name="incomes")
    op.drop_index("ix_incomes_user_id", table_name="incomes")
    op.drop_table("incomes")
    op.drop_index("ix_expenses_date", table_name="expenses")
    op.drop_index("ix_expenses_user_id", table_name="expenses")
    op.drop_table("expenses")
    op.execute("DROP INDEX IF EXISTS uq_income_sources_user_name")
    op.drop_index("ix_income_sources_user_id", table_name="income_sources")
    op.drop_table("income_sources")
    op.execute("DROP INDEX IF EXISTS uq_expense_categories_user_name")
    op.drop_index("ix_expense_categories_user_id", table_name="expense_categories")
    op.drop_table("expense_categories")
