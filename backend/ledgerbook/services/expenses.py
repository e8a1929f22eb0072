"""Business expenses outside payroll."""
from __future__ import annotations

from datetime import date
from typing import Optional

from loguru import logger
from sqlmodel import Session, col, select

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.payroll import Expense, PayMode
from ledgerbook.services.money import to_amount


def record_expense(
    session: Session,
    name: str,
    amount: float,
    mode: PayMode = PayMode.OTHER,
    payment_to: Optional[str] = None,
    expense_date: Optional[date] = None,
    remarks: Optional[str] = None,
) -> Expense:
    if not (name or "").strip():
        raise ValidationError("NAME_REQUIRED", "Expense name is required")
    amount = to_amount(amount)
    if amount < 0:
        raise ValidationError("INVALID_AMOUNT", "Expense amount cannot be negative")

    expense = Expense(
        name=name.strip(),
        amount=amount,
        mode=mode,
        payment_to=payment_to,
        expense_date=expense_date or date.today(),
        remarks=remarks,
    )
    session.add(expense)
    session.commit()
    session.refresh(expense)
    logger.info(f"Expense '{expense.name}' {expense.amount:.2f} on {expense.expense_date}")
    return expense


def list_expenses(
    session: Session,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Expense]:
    stmt = select(Expense)
    if date_from:
        stmt = stmt.where(Expense.expense_date >= date_from)
    if date_to:
        stmt = stmt.where(Expense.expense_date <= date_to)
    return list(session.exec(stmt.order_by(col(Expense.expense_date).desc(), col(Expense.id).desc())).all())


def delete_expense(session: Session, expense_id: int) -> None:
    expense = session.get(Expense, expense_id)
    if not expense:
        raise NotFoundError("EXPENSE_NOT_FOUND", f"Expense {expense_id} not found")
    name = expense.name
    session.delete(expense)
    session.commit()
    logger.info(f"Expense #{expense_id} '{name}' deleted")
