"""SQLModel model for the append-only running ledger shared by client and staff accounts."""
from enum import Enum
from typing import Optional
from datetime import datetime
from sqlalchemy import Index, UniqueConstraint
from sqlmodel import SQLModel, Field


class AccountKind(str, Enum):
    CLIENT = "CLIENT"
    STAFF = "STAFF"


class EntryType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class RefType(str, Enum):
    # client accounts
    INVOICE = "INVOICE"
    PAYMENT = "PAYMENT"
    OPENING = "OPENING"
    # both
    ADJUSTMENT = "ADJUSTMENT"
    # staff accounts
    ADVANCE = "ADVANCE"
    SALARY = "SALARY"
    RECOVERY = "RECOVERY"
    OTHER = "OTHER"


class LedgerEntry(SQLModel, table=True):
    """
    One immutable movement against an account's running balance.

    Rows are inserted once and never updated or deleted. ``seq`` is the
    per-account creation order; the unique (account_kind, account_id, seq)
    constraint turns a lost-update race into an IntegrityError.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint("account_kind", "account_id", "seq", name="uq_ledger_account_seq"),
        Index("ix_ledger_account_date_seq", "account_kind", "account_id", "date", "seq"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    account_kind: AccountKind = Field(index=True)
    account_id: int = Field(index=True)
    seq: int

    date: datetime
    entry_type: EntryType
    amount: float
    balance_after: float  # signed running total at append time

    ref_type: RefType
    ref_id: Optional[int] = Field(default=None, index=True)
    remarks: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
