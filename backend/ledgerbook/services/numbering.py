"""
Human-readable document numbers backed by atomic counters.

Each key owns one row in ``counters``; the next number comes from a single
``UPDATE … SET seq = seq + 1`` inside the caller's transaction, so two
writers can never read the same value.

  INV-YYYYMM-0001   invoices, counter per issue month
  PAY-00001         payment receipts
  QTN-0001          quotations
  SAL-YYYY-00001    salary slips, counter per year
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ledgerbook.models.counter import Counter


def next_value(session: Session, key: str) -> int:
    """Atomically increment and return the counter for ``key``."""
    result = session.execute(
        update(Counter).where(Counter.key == key).values(seq=Counter.seq + 1)
    )
    if result.rowcount == 0:
        try:
            with session.begin_nested():
                session.add(Counter(key=key, seq=1))
            return 1
        except IntegrityError:
            # Someone created the row between our UPDATE and INSERT
            session.execute(
                update(Counter).where(Counter.key == key).values(seq=Counter.seq + 1)
            )
    return session.exec(select(Counter.seq).where(Counter.key == key)).one()


def next_invoice_no(session: Session, issue_date: Optional[date] = None) -> str:
    key = f"INV-{(issue_date or date.today()):%Y%m}"
    return f"{key}-{next_value(session, key):04d}"


def next_receipt_no(session: Session) -> str:
    return f"PAY-{next_value(session, 'PAY'):05d}"


def next_quote_no(session: Session) -> str:
    return f"QTN-{next_value(session, 'QTN'):04d}"


def next_salary_slip_no(session: Session, year: int) -> str:
    key = f"SAL-{year}"
    return f"{key}-{next_value(session, key):05d}"
