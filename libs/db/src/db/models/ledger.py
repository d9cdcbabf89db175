from __future__ import annotations

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
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression as sa_expr


class Base(DeclarativeBase):
    pass


# ---------------------------
# Registries: expense_categories / income_sources
# ---------------------------


class ExpenseCategory(Base):
    __tablename__ = "expense_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    icon: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'MoreHorizontal'")
    )
    color: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'#64748b'"))
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.false())
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class IncomeSource(Base):
    __tablename__ = "income_sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'other'"))
    frequency: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'sporadic'")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# One registry name per user, compared case-insensitively (seeding relies on it).
Index(
    "uq_expense_categories_user_name",
    ExpenseCategory.user_id,
    func.lower(ExpenseCategory.name),
    unique=True,
)
Index(
    "uq_income_sources_user_name",
    IncomeSource.user_id,
    func.lower(IncomeSource.name),
    unique=True,
)


# ---------------------------
# Ledger: expenses / incomes
# ---------------------------


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("expense_categories.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    is_fixed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.false())
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    payment_method: Mapped[str | None] = mapped_column(String, nullable=True)
    jar_type: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        CheckConstraint(
            "payment_method IS NULL OR payment_method in "
            "('pix','debit','credit','cash','boleto','transfer')",
            name="ck_expenses_payment_method",
        ),
        CheckConstraint(
            "jar_type IS NULL OR jar_type in "
            "('necessities','education','savings','play','investment','giving')",
            name="ck_expenses_jar_type",
        ),
    )


class Income(Base):
    __tablename__ = "incomes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    source_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("income_sources.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    is_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (CheckConstraint("amount > 0", name="ck_incomes_amount_positive"),)


class FixedExpenseTemplate(Base):
    __tablename__ = "fixed_expense_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("expense_categories.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("due_day >= 1 AND due_day <= 28", name="ck_fixed_templates_due_day"),
    )


__all__ = [
    "Base",
    "ExpenseCategory",
    "IncomeSource",
    "Expense",
    "Income",
    "FixedExpenseTemplate",
]
