"""
Payroll ledger: staff advances and monthly salary runs.

Staff ledger polarity (see ``ledger.ACCOUNT_RULES``): DEBIT is money paid to
the staff member, CREDIT is money recovered from them.

A salary run posts, in order:
  DEBIT  net pay           (refType SALARY)
  CREDIT advance recovery  (refType RECOVERY, only when > 0)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from ledgerbook.core.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from ledgerbook.models.ledger import AccountKind, EntryType, LedgerEntry, RefType
from ledgerbook.models.payroll import PayMode, SalaryPayment
from ledgerbook.services import ledger, numbering
from ledgerbook.services.money import round2
from ledgerbook.services.parties import get_staff


@dataclass(frozen=True)
class SalaryComponents:
    basic: float = 0.0
    hra: float = 0.0
    other_allowances: float = 0.0
    pf: float = 0.0
    tds: float = 0.0
    advance_recovery: float = 0.0
    other_deductions: float = 0.0

    @property
    def gross(self) -> float:
        return round2(self.basic + self.hra + self.other_allowances)

    @property
    def total_deductions(self) -> float:
        return round2(self.pf + self.tds + self.advance_recovery + self.other_deductions)

    @property
    def net_pay(self) -> float:
        return round2(self.gross - self.total_deductions)


@dataclass
class SalaryResult:
    payment: SalaryPayment
    entries: list[LedgerEntry]
    balance_after: float


def record_advance(
    session: Session,
    staff_id: int,
    amount: float,
    advance_date: Optional[date] = None,
    remarks: Optional[str] = None,
) -> LedgerEntry:
    """Pay a salary advance: DEBIT the staff ledger."""
    staff = get_staff(session, staff_id)
    if round2(amount or 0.0) <= 0:
        raise ValidationError("AMOUNT_REQUIRED", "Advance amount must be greater than zero")

    with ledger.posting(session, AccountKind.STAFF, staff.id):
        entry = ledger.append(
            session,
            AccountKind.STAFF,
            staff.id,
            EntryType.DEBIT,
            amount,
            ref_type=RefType.ADVANCE,
            remarks=remarks or "Salary advance",
            date=datetime.combine(advance_date, time.min) if advance_date else None,
        )
    session.refresh(entry)
    logger.info(f"Advance {entry.amount:.2f} to staff #{staff.id}, balance {entry.balance_after:.2f}")
    return entry


def _already_paid(session: Session, staff_id: int, month: int, year: int) -> bool:
    stmt = select(SalaryPayment.id).where(
        SalaryPayment.staff_id == staff_id,
        SalaryPayment.month == month,
        SalaryPayment.year == year,
    )
    return session.exec(stmt).first() is not None


def pay_salary(
    session: Session,
    staff_id: int,
    month: Optional[int],
    year: Optional[int],
    components: SalaryComponents,
    paid_on: Optional[date] = None,
    pay_mode: PayMode = PayMode.OTHER,
    remarks: Optional[str] = None,
) -> SalaryResult:
    staff = get_staff(session, staff_id)
    if not month or not year:
        raise ValidationError("MONTH_YEAR_REQUIRED", "month and year are required")
    if not 1 <= int(month) <= 12:
        raise ValidationError("MONTH_YEAR_REQUIRED", "month must be between 1 and 12")

    figures = (
        components.basic, components.hra, components.other_allowances,
        components.pf, components.tds, components.advance_recovery, components.other_deductions,
    )
    if any(v < 0 for v in figures):
        raise ValidationError("NEGATIVE_COMPONENT", "Salary components cannot be negative")

    net_pay = components.net_pay
    if net_pay < 0:
        raise BusinessRuleError("NET_PAY_NEGATIVE", "Deductions exceed gross pay")

    period = f"{int(month):02d}/{year}"
    entries: list[LedgerEntry] = []

    with ledger.posting(session, AccountKind.STAFF, staff.id):
        # Fast path; the unique (staff, month, year) constraint is what actually guarantees it
        if _already_paid(session, staff.id, month, year):
            logger.warning(f"Salary for staff #{staff.id} {period} already paid")
            raise ConflictError("ALREADY_PAID_FOR_MONTH", f"Salary for {period} already paid")

        payment = SalaryPayment(
            staff_id=staff.id,
            month=month,
            year=year,
            basic=round2(components.basic),
            hra=round2(components.hra),
            other_allowances=round2(components.other_allowances),
            pf=round2(components.pf),
            tds=round2(components.tds),
            advance_recovery=round2(components.advance_recovery),
            other_deductions=round2(components.other_deductions),
            gross=components.gross,
            total_deductions=components.total_deductions,
            net_pay=net_pay,
            paid_on=paid_on or date.today(),
            pay_mode=pay_mode,
            slip_no=numbering.next_salary_slip_no(session, year),
            remarks=remarks,
        )
        try:
            with session.begin_nested():
                session.add(payment)
        except IntegrityError as exc:
            raise ConflictError("ALREADY_PAID_FOR_MONTH", f"Salary for {period} already paid") from exc

        if net_pay > 0:
            entries.append(
                ledger.append(
                    session,
                    AccountKind.STAFF,
                    staff.id,
                    EntryType.DEBIT,
                    net_pay,
                    ref_type=RefType.SALARY,
                    ref_id=payment.id,
                    remarks=f"Salary for {period}",
                )
            )
        if payment.advance_recovery > 0:
            entries.append(
                ledger.append(
                    session,
                    AccountKind.STAFF,
                    staff.id,
                    EntryType.CREDIT,
                    payment.advance_recovery,
                    ref_type=RefType.RECOVERY,
                    ref_id=payment.id,
                    remarks=f"Advance recovery for {period}",
                )
            )

    session.refresh(payment)
    balance = ledger.current_balance(session, AccountKind.STAFF, staff.id)
    logger.info(
        f"Salary {payment.slip_no} for staff #{staff.id} {period}: net {net_pay:.2f}, "
        f"recovered {payment.advance_recovery:.2f}, balance {balance:.2f}"
    )
    return SalaryResult(payment=payment, entries=entries, balance_after=balance)


def get_salary_payment(session: Session, payroll_id: int) -> SalaryPayment:
    payment = session.get(SalaryPayment, payroll_id)
    if not payment:
        raise NotFoundError("SALARY_PAYMENT_NOT_FOUND", f"Salary payment {payroll_id} not found")
    return payment


def list_salary_payments(session: Session, staff_id: Optional[int] = None) -> list[SalaryPayment]:
    stmt = select(SalaryPayment)
    if staff_id is not None:
        stmt = stmt.where(SalaryPayment.staff_id == staff_id)
    stmt = stmt.order_by(col(SalaryPayment.year).desc(), col(SalaryPayment.month).desc())
    return list(session.exec(stmt).all())
