"""Pydantic response schemas for API endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from ledgerbook.models.billing import GstMode, InvoiceStatus, PaymentMode, QuotationStatus
from ledgerbook.models.ledger import EntryType, RefType
from ledgerbook.models.meeting import ActionStatus
from ledgerbook.models.party import BillingType, ServiceKind
from ledgerbook.models.payroll import PayMode


class HealthResponse(BaseModel):
    status: str
    db: str
    version: str = "1.0.0"
    gst_rate: float


# ── Parties ───────────────────────────────────────────────────────────────────


class ClientRead(BaseModel):
    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    gstin: Optional[str]
    opening_balance: float
    created_at: datetime

    class Config:
        from_attributes = True


class ClientDetail(ClientRead):
    balance: float


class ClientListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: list[ClientRead]


class ServiceRead(BaseModel):
    id: int
    client_id: int
    kind: ServiceKind
    billing_type: BillingType
    amount_monthly: float
    amount_one_time: float
    start_date: date
    expiry_date: Optional[date]
    notes: Optional[str]
    is_expired: bool = False

    class Config:
        from_attributes = True


class StaffRead(BaseModel):
    id: int
    name: str
    phone: Optional[str]
    email: Optional[str]
    designation: Optional[str]
    join_date: Optional[date]
    salary_base: float
    upi_id: Optional[str]
    notes: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True


# ── Ledger ────────────────────────────────────────────────────────────────────


class LedgerEntryRead(BaseModel):
    id: int
    seq: int
    date: datetime
    entry_type: EntryType
    amount: float
    balance_after: float
    ref_type: RefType
    ref_id: Optional[int]
    remarks: Optional[str]

    class Config:
        from_attributes = True


class StatementResponse(BaseModel):
    account_kind: str
    account_id: int
    name: str
    balance: float
    total_debits: float
    total_credits: float
    entries: list[LedgerEntryRead]


class BalanceRow(BaseModel):
    client_id: int
    name: str
    balance: float


class BalanceOverviewResponse(BaseModel):
    total_receivable: float
    total_advances: float
    clients: list[BalanceRow]


# ── Billing ───────────────────────────────────────────────────────────────────


class LineRead(BaseModel):
    id: int
    description: str
    qty: float
    amount_excl_gst: Optional[float]
    amount_incl_gst: Optional[float]
    discount: float
    line_total: float
    order: int

    class Config:
        from_attributes = True


class QuotationLineRead(LineRead):
    billing_type: BillingType


class InvoiceRead(BaseModel):
    id: int
    client_id: int
    invoice_no: str
    issue_date: date
    period_start: Optional[date]
    period_end: Optional[date]
    billing_type: BillingType
    gst_mode: GstMode
    gst_rate: float
    extra_amount: float
    subtotal_excl_gst: float
    gst_amount: float
    total_incl_gst: float
    paid_amount: float
    pending_amount: float
    status: InvoiceStatus
    remarks: Optional[str]
    quotation_id: Optional[int]

    class Config:
        from_attributes = True


class InvoiceDetail(InvoiceRead):
    lines: list[LineRead] = []


class InvoiceCreated(BaseModel):
    ok: bool = True
    invoice: InvoiceDetail
    advance_applied: float
    balance_after: float
    document_url: Optional[str] = None


class PaymentRead(BaseModel):
    id: int
    client_id: int
    invoice_id: Optional[int]
    receipt_no: str
    payment_date: date
    amount: float
    applied_amount: float
    mode: PaymentMode
    slip_ref: Optional[str]
    notes: Optional[str]

    class Config:
        from_attributes = True


class PaymentRecorded(BaseModel):
    ok: bool = True
    payment: PaymentRead
    is_advance: bool
    applied: float
    unapplied: float
    invoice: Optional[InvoiceRead] = None
    balance_after: float


class QuotationRead(BaseModel):
    id: int
    client_id: Optional[int]
    quote_no: str
    issue_date: date
    valid_until: Optional[date]
    recipient_name: Optional[str]
    recipient_email: Optional[str]
    recipient_phone: Optional[str]
    recipient_company: Optional[str]
    recipient_address: Optional[str]
    gst_mode: GstMode
    gst_rate: float
    extra_amount: float
    subtotal_excl_gst: float
    gst_amount: float
    total_incl_gst: float
    terms: Optional[str]
    notes: Optional[str]
    status: QuotationStatus
    sent_to: Optional[str]
    sent_at: Optional[datetime]
    converted_invoice_id: Optional[int]

    class Config:
        from_attributes = True


class QuotationDetail(QuotationRead):
    lines: list[QuotationLineRead] = []


class QuotationListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: list[QuotationRead]


# ── Payroll & expenses ────────────────────────────────────────────────────────


class SalaryRead(BaseModel):
    id: int
    staff_id: int
    month: int
    year: int
    basic: float
    hra: float
    other_allowances: float
    pf: float
    tds: float
    advance_recovery: float
    other_deductions: float
    gross: float
    total_deductions: float
    net_pay: float
    paid_on: date
    pay_mode: PayMode
    slip_no: str
    remarks: Optional[str]

    class Config:
        from_attributes = True


class SalaryPaid(BaseModel):
    ok: bool = True
    salary: SalaryRead
    entries: list[LedgerEntryRead]
    balance_after: float


class AdvanceRecorded(BaseModel):
    ok: bool = True
    entry: LedgerEntryRead
    balance_after: float


class ExpenseRead(BaseModel):
    id: int
    name: str
    amount: float
    mode: PayMode
    payment_to: Optional[str]
    expense_date: date
    remarks: Optional[str]

    class Config:
        from_attributes = True


class MonthlyNetRead(BaseModel):
    month: str
    client_payments: float
    expenses: float
    salaries_net: float
    advances_given: float
    advances_recovered: float
    inflows: float
    outflows: float
    net: float

    class Config:
        from_attributes = True


# ── Meetings ──────────────────────────────────────────────────────────────────


class ActionItemRead(BaseModel):
    position: int
    description: str
    owner: Optional[str]
    due_date: Optional[date]
    status: ActionStatus

    class Config:
        from_attributes = True


class MeetingRead(BaseModel):
    id: int
    client_id: int
    meeting_date: datetime
    title: Optional[str]
    attendees: Optional[str]
    remarks: Optional[str]
    summary: Optional[str]
    next_follow_up: Optional[date]
    updated_at: datetime

    class Config:
        from_attributes = True


class MeetingDetail(MeetingRead):
    action_items: list[ActionItemRead] = []
