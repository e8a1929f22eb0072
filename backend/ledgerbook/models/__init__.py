from ledgerbook.models.party import BillingType, Client, ClientService, ServiceKind, Staff
from ledgerbook.models.ledger import AccountKind, EntryType, LedgerEntry, RefType
from ledgerbook.models.billing import (
    GstMode,
    Invoice,
    InvoiceLine,
    InvoiceStatus,
    Payment,
    PaymentMode,
    Quotation,
    QuotationLine,
    QuotationStatus,
)
from ledgerbook.models.payroll import Expense, PayMode, SalaryPayment
from ledgerbook.models.counter import Counter
from ledgerbook.models.meeting import ActionStatus, ClientMeeting, MeetingActionItem

__all__ = [
    "BillingType",
    "Client",
    "ClientService",
    "ServiceKind",
    "Staff",
    "AccountKind",
    "EntryType",
    "LedgerEntry",
    "RefType",
    "GstMode",
    "Invoice",
    "InvoiceLine",
    "InvoiceStatus",
    "Payment",
    "PaymentMode",
    "Quotation",
    "QuotationLine",
    "QuotationStatus",
    "Expense",
    "PayMode",
    "SalaryPayment",
    "Counter",
    "ActionStatus",
    "ClientMeeting",
    "MeetingActionItem",
]
