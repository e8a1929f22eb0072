"""SQLModel models for the parties the business deals with (clients, their services, staff)."""
from enum import Enum
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class ServiceKind(str, Enum):
    HOSTING = "HOSTING"
    DIGITAL_MARKETING = "DIGITAL_MARKETING"
    OTHER = "OTHER"


class BillingType(str, Enum):
    ONE_TIME = "ONE_TIME"
    MONTHLY = "MONTHLY"


class Client(SQLModel, table=True):
    """A customer account. Its balance lives in the ledger, never on this row."""

    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = Field(default=None, index=True)
    # +ve means the client owes the business; posted once as an OPENING entry
    opening_balance: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ClientService(SQLModel, table=True):
    """A recurring or one-off service sold to a client; feeds monthly invoices."""

    __tablename__ = "client_services"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    kind: ServiceKind
    billing_type: BillingType
    amount_monthly: float = Field(default=0.0)   # GST-exclusive
    amount_one_time: float = Field(default=0.0)  # GST-exclusive
    start_date: date
    expiry_date: Optional[date] = None  # open-ended when absent
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Staff(SQLModel, table=True):
    """An employee paid through payroll; has its own staff ledger."""

    __tablename__ = "staff"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    phone: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    join_date: Optional[date] = None
    salary_base: float = Field(default=0.0)  # agreed monthly base
    upi_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
