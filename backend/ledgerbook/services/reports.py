"""Read-side reports: account statements, balance overview, monthly net cash position."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlmodel import Session, col, select

from ledgerbook.core.errors import ValidationError
from ledgerbook.models.billing import Payment
from ledgerbook.models.ledger import AccountKind, EntryType, LedgerEntry, RefType
from ledgerbook.models.party import Client
from ledgerbook.models.payroll import Expense, SalaryPayment
from ledgerbook.services import ledger
from ledgerbook.services.money import round2
from ledgerbook.services.pricing import month_bounds


@dataclass
class Statement:
    account_kind: AccountKind
    account_id: int
    name: str
    entries: list[LedgerEntry]
    balance: float
    total_debits: float = 0.0
    total_credits: float = 0.0


@dataclass
class MonthlyNet:
    month: str  # "YYYY-MM"
    client_payments: float = 0.0
    expenses: float = 0.0
    salaries_net: float = 0.0
    advances_given: float = 0.0
    advances_recovered: float = 0.0
    inflows: float = 0.0
    outflows: float = 0.0
    net: float = 0.0


@dataclass
class BalanceOverview:
    rows: list[tuple[Client, float]] = field(default_factory=list)
    total_receivable: float = 0.0
    total_advances: float = 0.0


def statement(session: Session, kind: AccountKind, account_id: int, name: str) -> Statement:
    entries = ledger.list_entries(session, kind, account_id)
    debits = round2(sum(e.amount for e in entries if e.entry_type == EntryType.DEBIT))
    credits = round2(sum(e.amount for e in entries if e.entry_type == EntryType.CREDIT))
    return Statement(
        account_kind=kind,
        account_id=account_id,
        name=name,
        entries=entries,
        balance=ledger.current_balance(session, kind, account_id),
        total_debits=debits,
        total_credits=credits,
    )


def balance_overview(session: Session) -> BalanceOverview:
    """Every client with its current balance; positives are receivables, negatives advances."""
    overview = BalanceOverview()
    clients = session.exec(select(Client).order_by(col(Client.created_at), col(Client.id))).all()
    for client in clients:
        balance = ledger.current_balance(session, AccountKind.CLIENT, client.id)
        overview.rows.append((client, balance))
        if balance > 0:
            overview.total_receivable = round2(overview.total_receivable + balance)
        elif balance < 0:
            overview.total_advances = round2(overview.total_advances - balance)
    return overview


def _month_range(month: Optional[str]) -> tuple[Optional[date], Optional[date]]:
    if not month:
        return None, None
    try:
        year, mon = (int(p) for p in month.split("-"))
        return month_bounds(year, mon)
    except ValueError as exc:
        raise ValidationError("INVALID_MONTH", f"Expected YYYY-MM, got {month!r}") from exc


def _within(stmt, column, start: Optional[date], end: Optional[date]):
    if start is not None:
        stmt = stmt.where(column >= start)
    if end is not None:
        stmt = stmt.where(column <= end)
    return stmt


def net_balance(session: Session, month: Optional[str] = None) -> list[MonthlyNet]:
    """
    Monthly cash position: client payments in; expenses and net salaries out.

    Staff advances given / recovered are reported alongside but do not count
    toward net, matching how salary runs already net recoveries out of pay.
    """
    start, end = _month_range(month)

    rows: dict[str, MonthlyNet] = defaultdict(lambda: MonthlyNet(month=""))

    def bucket(d: date) -> MonthlyNet:
        key = f"{d:%Y-%m}"
        row = rows[key]
        row.month = key
        return row

    for p in session.exec(_within(select(Payment), Payment.payment_date, start, end)).all():
        row = bucket(p.payment_date)
        row.client_payments = round2(row.client_payments + p.amount)

    for e in session.exec(_within(select(Expense), Expense.expense_date, start, end)).all():
        row = bucket(e.expense_date)
        row.expenses = round2(row.expenses + e.amount)

    for s in session.exec(_within(select(SalaryPayment), SalaryPayment.paid_on, start, end)).all():
        row = bucket(s.paid_on)
        row.salaries_net = round2(row.salaries_net + s.net_pay)

    staff_stmt = select(LedgerEntry).where(
        LedgerEntry.account_kind == AccountKind.STAFF,
        col(LedgerEntry.ref_type).in_([RefType.ADVANCE, RefType.RECOVERY]),
    )
    # Entries are timestamped; the window runs to midnight after the last day
    if start is not None:
        staff_stmt = staff_stmt.where(LedgerEntry.date >= datetime.combine(start, time.min))
    if end is not None:
        staff_stmt = staff_stmt.where(LedgerEntry.date < datetime.combine(end + timedelta(days=1), time.min))
    for entry in session.exec(staff_stmt).all():
        row = bucket(entry.date.date())
        if entry.ref_type == RefType.ADVANCE and entry.entry_type == EntryType.DEBIT:
            row.advances_given = round2(row.advances_given + entry.amount)
        elif entry.ref_type == RefType.RECOVERY and entry.entry_type == EntryType.CREDIT:
            row.advances_recovered = round2(row.advances_recovered + entry.amount)

    report = []
    for key in sorted(rows):
        row = rows[key]
        row.inflows = row.client_payments
        row.outflows = round2(row.expenses + row.salaries_net)
        row.net = round2(row.inflows - row.outflows)
        report.append(row)
    return report
