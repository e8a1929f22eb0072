"""
Running-balance ledger engine.

Every balance change in the system goes through :func:`append`. The current
balance of an account is always read back from its latest entry
(:func:`current_balance`); nothing else caches a running total.

Account polarity
----------------
Client and staff accounts share the DEBIT/CREDIT vocabulary and the same
arithmetic (DEBIT adds, CREDIT subtracts) but mean opposite things in the
real world:

  CLIENT  positive balance = client owes the business (receivable)
          negative balance = business holds the client's advance
          DEBIT = invoice raised, CREDIT = money received / advance applied
  STAFF   positive balance = net amount paid out to the staff member
          DEBIT = advance or salary paid, CREDIT = advance recovered

Both read "DEBIT moves money toward the counterparty". ``ACCOUNT_RULES`` is
the single table of that mapping; do not re-derive signs at call sites.

Concurrency
-----------
Appends for one account must be strictly sequential. :func:`account_lock`
serializes writers inside this process; callers hold it from the balance read
until their unit of work commits. Writers in other processes are caught by
the unique (account_kind, account_id, seq) constraint and surface as
:class:`ConcurrencyError`.
"""
from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from ledgerbook.core.errors import ConcurrencyError, ValidationError
from ledgerbook.core.logging import audit_logger
from ledgerbook.models.ledger import AccountKind, EntryType, LedgerEntry, RefType
from ledgerbook.services.money import round2


@dataclass(frozen=True)
class AccountRule:
    signs: dict[EntryType, int]
    ref_types: frozenset[RefType]
    positive_means: str


ACCOUNT_RULES: dict[AccountKind, AccountRule] = {
    AccountKind.CLIENT: AccountRule(
        signs={EntryType.DEBIT: 1, EntryType.CREDIT: -1},
        ref_types=frozenset(
            {RefType.INVOICE, RefType.PAYMENT, RefType.OPENING, RefType.ADJUSTMENT}
        ),
        positive_means="client owes the business",
    ),
    AccountKind.STAFF: AccountRule(
        signs={EntryType.DEBIT: 1, EntryType.CREDIT: -1},
        ref_types=frozenset(
            {RefType.ADVANCE, RefType.SALARY, RefType.RECOVERY, RefType.ADJUSTMENT, RefType.OTHER}
        ),
        positive_means="business has paid out to the staff member",
    ),
}


# ── Per-account serialization ─────────────────────────────────────────────────

# An account's lock is dropped once no caller references it
_locks: weakref.WeakValueDictionary[tuple[AccountKind, int], threading.RLock] = (
    weakref.WeakValueDictionary()
)
_locks_guard = threading.Lock()


def _lock_for(kind: AccountKind, account_id: int) -> threading.RLock:
    with _locks_guard:
        lock = _locks.get((kind, account_id))
        if lock is None:
            lock = threading.RLock()
            _locks[(kind, account_id)] = lock
        return lock


@contextmanager
def account_lock(kind: AccountKind, account_id: int) -> Iterator[None]:
    """Hold the account's mutex for a read-balance → append → commit sequence."""
    lock = _lock_for(kind, account_id)
    with lock:
        yield


# ── Reads ─────────────────────────────────────────────────────────────────────


def _latest_entry(session: Session, kind: AccountKind, account_id: int) -> Optional[LedgerEntry]:
    stmt = (
        select(LedgerEntry)
        .where(LedgerEntry.account_kind == kind, LedgerEntry.account_id == account_id)
        .order_by(col(LedgerEntry.date).desc(), col(LedgerEntry.seq).desc())
        .limit(1)
    )
    return session.exec(stmt).first()


def current_balance(session: Session, kind: AccountKind, account_id: int) -> float:
    """balance_after of the latest entry (by date, then creation order), or 0."""
    latest = _latest_entry(session, kind, account_id)
    return latest.balance_after if latest else 0.0


def list_entries(session: Session, kind: AccountKind, account_id: int) -> list[LedgerEntry]:
    """All entries of an account, oldest first."""
    stmt = (
        select(LedgerEntry)
        .where(LedgerEntry.account_kind == kind, LedgerEntry.account_id == account_id)
        .order_by(col(LedgerEntry.date), col(LedgerEntry.seq))
    )
    return list(session.exec(stmt).all())


# ── Writes ────────────────────────────────────────────────────────────────────


def append(
    session: Session,
    kind: AccountKind,
    account_id: int,
    entry_type: EntryType,
    amount: float,
    ref_type: RefType,
    ref_id: Optional[int] = None,
    remarks: Optional[str] = None,
    date: Optional[datetime] = None,
) -> LedgerEntry:
    """
    Append one immutable entry and return it (flushed, not committed).

    The entry date never precedes the account's latest entry, so the
    (date, seq) order used by :func:`current_balance` is also the append order.
    The new seq is taken from the same row as the previous balance; a writer
    that committed in between already holds that seq and the insert fails.
    """
    amount = round2(amount)
    if amount <= 0:
        raise ValidationError("INVALID_AMOUNT", "Ledger amount must be greater than zero")

    rule = ACCOUNT_RULES[kind]
    if ref_type not in rule.ref_types:
        raise ValidationError(
            "INVALID_REF_TYPE", f"{ref_type.value} entries are not valid on {kind.value} accounts"
        )

    latest = _latest_entry(session, kind, account_id)
    prev = latest.balance_after if latest else 0.0
    entry_date = date or datetime.utcnow()
    if latest and entry_date < latest.date:
        entry_date = latest.date

    entry = LedgerEntry(
        account_kind=kind,
        account_id=account_id,
        seq=latest.seq + 1 if latest else 1,
        date=entry_date,
        entry_type=entry_type,
        amount=amount,
        balance_after=round2(prev + rule.signs[entry_type] * amount),
        ref_type=ref_type,
        ref_id=ref_id,
        remarks=remarks,
    )
    session.add(entry)
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        logger.error(f"Ledger append conflict on {kind.value}#{account_id} seq={entry.seq}")
        raise ConcurrencyError(
            "LEDGER_APPEND_CONFLICT",
            "Another posting to this account landed first; retry the operation",
        ) from exc

    ref = f" ref={ref_id}" if ref_id is not None else ""
    audit_logger(f"{kind.value}#{account_id}").info(
        f"seq={entry.seq} {entry_type.value} {amount:.2f} {ref_type.value}{ref} "
        f"balance={entry.balance_after:.2f}"
    )
    return entry


def _commit(session: Session) -> None:
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.error(f"Ledger commit conflict: {exc.orig}")
        raise ConcurrencyError(
            "LEDGER_APPEND_CONFLICT",
            "Another posting to this account landed first; retry the operation",
        ) from exc


@contextmanager
def posting(session: Session, kind: AccountKind, account_id: int, commit: bool = True) -> Iterator[None]:
    """
    One all-or-nothing unit of work against an account.

    Holds the account lock, commits when the block finishes (or only flushes
    when ``commit`` is False and an outer unit of work owns the commit) and
    rolls back everything on any failure.
    """
    with account_lock(kind, account_id):
        try:
            yield
            if commit:
                _commit(session)
            else:
                session.flush()
        except Exception:
            session.rollback()
            raise


def post_adjustment(
    session: Session,
    kind: AccountKind,
    account_id: int,
    entry_type: EntryType,
    amount: float,
    remarks: Optional[str] = None,
) -> LedgerEntry:
    """Correct a balance with a new ADJUSTMENT entry (entries are never edited)."""
    with posting(session, kind, account_id):
        entry = append(
            session, kind, account_id, entry_type, amount,
            ref_type=RefType.ADJUSTMENT, remarks=remarks or "Manual adjustment",
        )
    session.refresh(entry)
    logger.info(
        f"Adjustment on {kind.value}#{account_id}: {entry_type.value} {entry.amount:.2f}"
    )
    return entry
