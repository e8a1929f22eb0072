"""SQLModel models for billing documents (invoices, payments, quotations) and their lines."""
from enum import Enum
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field

from ledgerbook.models.party import BillingType


class GstMode(str, Enum):
    EXCLUSIVE = "EXCLUSIVE"  # prices exclude GST; tax added on top
    INCLUSIVE = "INCLUSIVE"  # prices already include GST; tax backed out
    NOGST = "NOGST"


class InvoiceStatus(str, Enum):
    DUE = "DUE"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class PaymentMode(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    NEFT = "NEFT"
    IMPS = "IMPS"
    RTGS = "RTGS"
    CARD = "CARD"
    CHEQUE = "CHEQUE"
    OTHER = "OTHER"


class QuotationStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class Invoice(SQLModel, table=True):
    """A tax invoice. paid_amount + pending_amount == total_incl_gst at all times."""

    __tablename__ = "invoices"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    invoice_no: str = Field(index=True, unique=True)
    issue_date: date = Field(index=True)
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    billing_type: BillingType = Field(default=BillingType.ONE_TIME)

    gst_mode: GstMode = Field(default=GstMode.EXCLUSIVE)
    gst_rate: float = Field(default=0.0)
    extra_amount: float = Field(default=0.0)
    remarks: Optional[str] = None

    # Computed totals
    subtotal_excl_gst: float = Field(default=0.0)
    gst_amount: float = Field(default=0.0)
    total_incl_gst: float = Field(default=0.0)

    # Mutated only by auto-advance offset and payment application
    paid_amount: float = Field(default=0.0)
    pending_amount: float = Field(default=0.0)
    status: InvoiceStatus = Field(default=InvoiceStatus.DUE, index=True)

    quotation_id: Optional[int] = Field(default=None, foreign_key="quotations.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class InvoiceLine(SQLModel, table=True):
    """One priced line of an invoice. Exactly one of the two amount fields is set."""

    __tablename__ = "invoice_lines"

    id: Optional[int] = Field(default=None, primary_key=True)
    invoice_id: int = Field(foreign_key="invoices.id", index=True)
    description: str
    qty: float = Field(default=1.0)
    amount_excl_gst: Optional[float] = None
    amount_incl_gst: Optional[float] = None
    discount: float = Field(default=0.0)  # per unit
    line_total: float = Field(default=0.0)
    order: int = Field(default=0)


class Payment(SQLModel, table=True):
    """Money received from a client. Immutable once recorded."""

    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    invoice_id: Optional[int] = Field(default=None, foreign_key="invoices.id", index=True)
    receipt_no: str = Field(index=True, unique=True)
    payment_date: date = Field(index=True)
    amount: float
    applied_amount: float = Field(default=0.0)  # portion settled against invoice_id
    mode: PaymentMode = Field(default=PaymentMode.OTHER)
    slip_ref: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Quotation(SQLModel, table=True):
    """A priced offer. No ledger effect; status is set by hand."""

    __tablename__ = "quotations"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: Optional[int] = Field(default=None, foreign_key="clients.id", index=True)
    quote_no: str = Field(index=True, unique=True)
    issue_date: date
    valid_until: Optional[date] = None

    # "to whom" details when no client record exists yet
    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    recipient_company: Optional[str] = None
    recipient_address: Optional[str] = None

    gst_mode: GstMode = Field(default=GstMode.EXCLUSIVE)
    gst_rate: float = Field(default=0.0)
    extra_amount: float = Field(default=0.0)
    subtotal_excl_gst: float
    gst_amount: float
    total_incl_gst: float

    terms: Optional[str] = None
    notes: Optional[str] = None
    status: QuotationStatus = Field(default=QuotationStatus.DRAFT, index=True)
    sent_to: Optional[str] = None  # comma-separated recipient addresses
    sent_at: Optional[datetime] = None
    converted_invoice_id: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class QuotationLine(SQLModel, table=True):
    __tablename__ = "quotation_lines"

    id: Optional[int] = Field(default=None, primary_key=True)
    quotation_id: int = Field(foreign_key="quotations.id", index=True)
    description: str
    qty: float = Field(default=1.0)
    amount_excl_gst: Optional[float] = None
    amount_incl_gst: Optional[float] = None
    discount: float = Field(default=0.0)
    billing_type: BillingType = Field(default=BillingType.ONE_TIME)
    line_total: float = Field(default=0.0)
    order: int = Field(default=0)
