"""
Expense and report routes.

Endpoints:
  POST /api/expenses
  GET  /api/expenses
  DELETE /api/expenses/{id}
  GET  /api/reports/net-balance
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ledgerbook.core.database import get_session
from ledgerbook.schemas.requests import ExpenseCreate
from ledgerbook.schemas.responses import ExpenseRead, MonthlyNetRead
from ledgerbook.services import expenses, reports

report_router = APIRouter(prefix="/api", tags=["reports"])


@report_router.post("/expenses", response_model=ExpenseRead, status_code=201)
def record_expense(body: ExpenseCreate, session: Session = Depends(get_session)):
    expense = expenses.record_expense(
        session,
        body.name,
        body.amount,
        mode=body.mode,
        payment_to=body.payment_to,
        expense_date=body.expense_date,
        remarks=body.remarks,
    )
    return ExpenseRead.model_validate(expense)


@report_router.get("/expenses", response_model=list[ExpenseRead])
def list_expenses(
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    session: Session = Depends(get_session),
):
    return [ExpenseRead.model_validate(e) for e in expenses.list_expenses(session, date_from, date_to)]


@report_router.delete("/expenses/{expense_id}")
def delete_expense(expense_id: int, session: Session = Depends(get_session)) -> dict:
    expenses.delete_expense(session, expense_id)
    return {"status": "deleted", "expense_id": expense_id}


@report_router.get("/reports/net-balance", response_model=list[MonthlyNetRead])
def net_balance(
    month: Optional[str] = Query(default=None, description="YYYY-MM; all months when omitted"),
    session: Session = Depends(get_session),
):
    return [MonthlyNetRead.model_validate(row) for row in reports.net_balance(session, month)]
