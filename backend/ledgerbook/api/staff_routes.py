"""
Staff, advance and payroll routes.

Endpoints:
  POST  /api/staff
  GET   /api/staff
  GET   /api/staff/{id}
  PATCH /api/staff/{id}
  POST  /api/staff/{id}/advances
  POST  /api/staff/{id}/salary
  GET   /api/staff/{id}/ledger
  GET   /api/staff/{id}/ledger/csv
  GET   /api/staff/{id}/ledger/xlsx
  POST  /api/staff/{id}/adjustments
  GET   /api/payroll
  GET   /api/payroll/{id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ledgerbook.api.client_routes import csv_response, statement_response, xlsx_response
from ledgerbook.core.database import get_session
from ledgerbook.models.ledger import AccountKind
from ledgerbook.schemas.requests import (
    AdjustmentCreate,
    AdvanceCreate,
    SalaryCreate,
    StaffCreate,
    StaffUpdate,
)
from ledgerbook.schemas.responses import (
    AdvanceRecorded,
    LedgerEntryRead,
    SalaryPaid,
    SalaryRead,
    StaffRead,
    StatementResponse,
)
from ledgerbook.services import ledger, parties, payroll, reports

staff_router = APIRouter(prefix="/api", tags=["staff"])


def _staff_statement(session: Session, staff_id: int) -> reports.Statement:
    staff = parties.get_staff(session, staff_id)
    return reports.statement(session, AccountKind.STAFF, staff.id, staff.name)


# ── Staff ─────────────────────────────────────────────────────────────────────


@staff_router.post("/staff", response_model=StaffRead, status_code=201)
def create_staff(body: StaffCreate, session: Session = Depends(get_session)):
    return StaffRead.model_validate(parties.create_staff(session, body.model_dump()))


@staff_router.get("/staff", response_model=list[StaffRead])
def list_staff(
    active_only: bool = Query(default=False),
    session: Session = Depends(get_session),
):
    return [StaffRead.model_validate(s) for s in parties.list_staff(session, active_only)]


@staff_router.get("/staff/{staff_id}", response_model=StaffRead)
def get_staff(staff_id: int, session: Session = Depends(get_session)):
    return StaffRead.model_validate(parties.get_staff(session, staff_id))


@staff_router.patch("/staff/{staff_id}", response_model=StaffRead)
def update_staff(staff_id: int, body: StaffUpdate, session: Session = Depends(get_session)):
    staff = parties.update_staff(session, staff_id, body.model_dump(exclude_unset=True))
    return StaffRead.model_validate(staff)


# ── Advances & salary ─────────────────────────────────────────────────────────


@staff_router.post("/staff/{staff_id}/advances", response_model=AdvanceRecorded, status_code=201)
def record_advance(staff_id: int, body: AdvanceCreate, session: Session = Depends(get_session)):
    entry = payroll.record_advance(
        session, staff_id, body.amount, advance_date=body.advance_date, remarks=body.remarks
    )
    return AdvanceRecorded(entry=LedgerEntryRead.model_validate(entry), balance_after=entry.balance_after)


@staff_router.post("/staff/{staff_id}/salary", response_model=SalaryPaid, status_code=201)
def pay_salary(staff_id: int, body: SalaryCreate, session: Session = Depends(get_session)):
    components = payroll.SalaryComponents(
        basic=body.basic,
        hra=body.hra,
        other_allowances=body.other_allowances,
        pf=body.pf,
        tds=body.tds,
        advance_recovery=body.advance_recovery,
        other_deductions=body.other_deductions,
    )
    result = payroll.pay_salary(
        session,
        staff_id,
        body.month,
        body.year,
        components,
        paid_on=body.paid_on,
        pay_mode=body.pay_mode,
        remarks=body.remarks,
    )
    return SalaryPaid(
        salary=SalaryRead.model_validate(result.payment),
        entries=[LedgerEntryRead.model_validate(e) for e in result.entries],
        balance_after=result.balance_after,
    )


@staff_router.get("/payroll", response_model=list[SalaryRead])
def list_payroll(
    staff_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    return [SalaryRead.model_validate(p) for p in payroll.list_salary_payments(session, staff_id)]


@staff_router.get("/payroll/{payroll_id}", response_model=SalaryRead)
def get_payroll(payroll_id: int, session: Session = Depends(get_session)):
    return SalaryRead.model_validate(payroll.get_salary_payment(session, payroll_id))


# ── Staff ledger ──────────────────────────────────────────────────────────────


@staff_router.get("/staff/{staff_id}/ledger", response_model=StatementResponse)
def staff_ledger(staff_id: int, session: Session = Depends(get_session)):
    return statement_response(_staff_statement(session, staff_id))


@staff_router.get("/staff/{staff_id}/ledger/csv")
def staff_ledger_csv(staff_id: int, session: Session = Depends(get_session)):
    return csv_response(_staff_statement(session, staff_id), "staff")


@staff_router.get("/staff/{staff_id}/ledger/xlsx")
def staff_ledger_xlsx(staff_id: int, session: Session = Depends(get_session)):
    return xlsx_response(_staff_statement(session, staff_id), "staff")


@staff_router.post("/staff/{staff_id}/adjustments", response_model=LedgerEntryRead, status_code=201)
def staff_adjustment(staff_id: int, body: AdjustmentCreate, session: Session = Depends(get_session)):
    staff = parties.get_staff(session, staff_id)
    entry = ledger.post_adjustment(
        session, AccountKind.STAFF, staff.id, body.entry_type, body.amount, body.remarks
    )
    return LedgerEntryRead.model_validate(entry)
