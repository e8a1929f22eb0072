"""Pydantic request bodies for API endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ledgerbook.models.billing import GstMode, PaymentMode, QuotationStatus
from ledgerbook.models.ledger import EntryType
from ledgerbook.models.meeting import ActionStatus
from ledgerbook.models.party import BillingType, ServiceKind
from ledgerbook.models.payroll import PayMode


class LineItemIn(BaseModel):
    description: str
    qty: float = 1.0
    amount_excl_gst: Optional[float] = None
    amount_incl_gst: Optional[float] = None
    discount: float = 0.0  # per unit
    billing_type: BillingType = BillingType.ONE_TIME  # quotations only


# ── Parties ───────────────────────────────────────────────────────────────────


class ClientCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    opening_balance: float = 0.0


class ServiceCreate(BaseModel):
    kind: Optional[ServiceKind] = None
    billing_type: Optional[BillingType] = None
    amount_monthly: float = 0.0
    amount_one_time: float = 0.0
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class StaffCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    join_date: Optional[date] = None
    salary_base: float = 0.0
    upi_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    join_date: Optional[date] = None
    salary_base: Optional[float] = None
    upi_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


# ── Billing ───────────────────────────────────────────────────────────────────


class InvoiceCreate(BaseModel):
    client_id: int
    line_items: list[LineItemIn] = Field(default_factory=list)
    gst_mode: GstMode = GstMode.EXCLUSIVE
    gst_rate: Optional[float] = None  # fraction; defaults to the configured rate
    extra_amount: float = 0.0
    issue_date: Optional[date] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    billing_type: BillingType = BillingType.ONE_TIME
    prorate: bool = False
    remarks: Optional[str] = None


class FromServicesRequest(BaseModel):
    client_id: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    gst_mode: GstMode = GstMode.EXCLUSIVE
    gst_rate: Optional[float] = None
    issue_date: Optional[date] = None
    remarks: Optional[str] = None


class PaymentCreate(BaseModel):
    client_id: int
    amount: float = 0.0
    invoice_id: Optional[int] = None
    mode: PaymentMode = PaymentMode.OTHER
    payment_date: Optional[date] = None
    slip_ref: Optional[str] = None
    notes: Optional[str] = None


class RecipientIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None


class QuotationCreate(BaseModel):
    client_id: Optional[int] = None
    recipient: Optional[RecipientIn] = None
    line_items: list[LineItemIn] = Field(default_factory=list)
    gst_mode: GstMode = GstMode.EXCLUSIVE
    gst_rate: Optional[float] = None
    extra_amount: float = 0.0
    issue_date: Optional[date] = None
    valid_until: Optional[date] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    mark_sent_to: list[str] = Field(default_factory=list)


class QuotationStatusUpdate(BaseModel):
    status: Optional[QuotationStatus] = None
    add_sent_to: list[str] = Field(default_factory=list)


# ── Payroll & ledger ──────────────────────────────────────────────────────────


class AdvanceCreate(BaseModel):
    amount: float = 0.0
    advance_date: Optional[date] = None
    remarks: Optional[str] = None


class SalaryCreate(BaseModel):
    month: Optional[int] = None
    year: Optional[int] = None
    basic: float = 0.0
    hra: float = 0.0
    other_allowances: float = 0.0
    pf: float = 0.0
    tds: float = 0.0
    advance_recovery: float = 0.0
    other_deductions: float = 0.0
    paid_on: Optional[date] = None
    pay_mode: PayMode = PayMode.OTHER
    remarks: Optional[str] = None


class AdjustmentCreate(BaseModel):
    entry_type: EntryType
    amount: float
    remarks: Optional[str] = None


class ExpenseCreate(BaseModel):
    name: str
    amount: float = 0.0
    mode: PayMode = PayMode.OTHER
    payment_to: Optional[str] = None
    expense_date: Optional[date] = None
    remarks: Optional[str] = None


# ── Meetings ──────────────────────────────────────────────────────────────────


class ActionItemIn(BaseModel):
    description: str
    owner: Optional[str] = None
    due_date: Optional[date] = None
    status: ActionStatus = ActionStatus.OPEN


class MeetingCreate(BaseModel):
    meeting_date: Optional[datetime] = None
    title: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)
    remarks: Optional[str] = None
    summary: Optional[str] = None
    next_follow_up: Optional[date] = None
    action_items: list[ActionItemIn] = Field(default_factory=list)


class ActionItemUpdate(BaseModel):
    description: Optional[str] = None
    owner: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[ActionStatus] = None
