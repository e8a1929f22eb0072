"""
Invoice lifecycle.

create_invoice:
  1. validate client and line items
  2. price through the GST engine
  3. invoice starts paid=0, pending=total, status=DUE (PAID when the total is 0)
  4. DEBIT the client ledger for the total
  5. if the client held an advance (balance < 0 before the DEBIT), apply it to
     the invoice and post an ADJUSTMENT CREDIT
  6. commit everything as one unit of work

Steps 4 and 5 run under the client's account lock so no other posting can
land between the DEBIT and the ADJUSTMENT.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from loguru import logger
from sqlmodel import Session, col, select

from ledgerbook.core.errors import BusinessRuleError, NotFoundError, ValidationError
from ledgerbook.models.billing import GstMode, Invoice, InvoiceLine, InvoiceStatus
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.models.party import BillingType
from ledgerbook.services import ledger, numbering
from ledgerbook.services.money import round2
from ledgerbook.services.parties import get_client, list_services
from ledgerbook.services.pricing import (
    ExclusiveAmount,
    InclusiveAmount,
    PricedLine,
    compute_totals,
    days_in_month,
    inclusive_days,
    month_bounds,
    overlap_days,
    prorate,
    resolve_gst_rate,
)


@dataclass
class InvoiceResult:
    invoice: Invoice
    lines: list[InvoiceLine] = field(default_factory=list)
    advance_applied: float = 0.0
    balance_after: float = 0.0


# ── Status bookkeeping ────────────────────────────────────────────────────────


def invoice_status(paid: float, pending: float) -> InvoiceStatus:
    if pending <= 0:
        return InvoiceStatus.PAID
    if paid > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.DUE


def apply_to_invoice(invoice: Invoice, amount: float) -> float:
    """
    Settle up to ``amount`` of an invoice's pending balance.

    Returns the amount actually applied (never more than pending). Only the
    invoice's own paid/pending/status move; ledger postings are the caller's.
    """
    apply = round2(min(float(amount), invoice.pending_amount))
    if apply <= 0:
        return 0.0
    invoice.paid_amount = round2(invoice.paid_amount + apply)
    invoice.pending_amount = round2(invoice.total_incl_gst - invoice.paid_amount)
    invoice.status = invoice_status(invoice.paid_amount, invoice.pending_amount)
    invoice.updated_at = datetime.utcnow()
    return apply


def get_invoice(session: Session, invoice_id: int) -> Invoice:
    invoice = session.get(Invoice, invoice_id)
    if not invoice:
        raise NotFoundError("INVOICE_NOT_FOUND", f"Invoice {invoice_id} not found")
    return invoice


def invoice_lines(session: Session, invoice_id: int) -> list[InvoiceLine]:
    stmt = (
        select(InvoiceLine)
        .where(InvoiceLine.invoice_id == invoice_id)
        .order_by(col(InvoiceLine.order))
    )
    return list(session.exec(stmt).all())


def list_invoices(
    session: Session,
    client_id: Optional[int] = None,
    status: Optional[InvoiceStatus] = None,
) -> list[Invoice]:
    stmt = select(Invoice)
    if client_id is not None:
        stmt = stmt.where(Invoice.client_id == client_id)
    if status is not None:
        stmt = stmt.where(Invoice.status == status)
    stmt = stmt.order_by(col(Invoice.issue_date).desc(), col(Invoice.id).desc())
    return list(session.exec(stmt).all())


# ── Creation ──────────────────────────────────────────────────────────────────


def prorate_lines(lines: Iterable[PricedLine], period_start: date, period_end: date) -> list[PricedLine]:
    """Scale every line to the share of the period-start month the window covers."""
    if period_end < period_start:
        raise ValidationError("INVALID_PERIOD", "period_end precedes period_start")
    days = inclusive_days(period_start, period_end)
    month_days = days_in_month(period_start.year, period_start.month)
    scaled = []
    for line in lines:
        price = type(line.price)(prorate(line.price.amount, days, month_days))
        discount = prorate(line.discount, days, month_days)
        scaled.append(
            PricedLine(
                description=f"{line.description} ({days}/{month_days} days)",
                price=price,
                qty=line.qty,
                discount=discount,
            )
        )
    return scaled


def create_invoice(
    session: Session,
    client_id: int,
    lines: list[PricedLine],
    gst_mode: GstMode = GstMode.EXCLUSIVE,
    gst_rate: Optional[float] = None,
    extra_amount: float = 0.0,
    issue_date: Optional[date] = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    billing_type: BillingType = BillingType.ONE_TIME,
    remarks: Optional[str] = None,
    prorate_period: bool = False,
    quotation_id: Optional[int] = None,
    commit: bool = True,
) -> InvoiceResult:
    """Create an invoice, post it to the client ledger and offset any advance."""
    client = get_client(session, client_id)
    if not lines:
        raise ValidationError("LINE_ITEMS_REQUIRED", "At least one line item is required")

    if prorate_period:
        if not (period_start and period_end):
            raise ValidationError("PERIOD_REQUIRED", "Proration needs period_start and period_end")
        lines = prorate_lines(lines, period_start, period_end)

    pricing = compute_totals(gst_mode, lines, extra_amount, gst_rate)
    issue_date = issue_date or date.today()

    applied = 0.0
    with ledger.posting(session, AccountKind.CLIENT, client.id, commit=commit):
        invoice = Invoice(
            client_id=client.id,
            invoice_no=numbering.next_invoice_no(session, issue_date),
            issue_date=issue_date,
            period_start=period_start,
            period_end=period_end,
            billing_type=billing_type,
            gst_mode=gst_mode,
            gst_rate=pricing.gst_rate,
            extra_amount=round2(extra_amount),
            remarks=remarks,
            subtotal_excl_gst=pricing.subtotal_excl_gst,
            gst_amount=pricing.gst_amount,
            total_incl_gst=pricing.total_incl_gst,
            paid_amount=0.0,
            pending_amount=pricing.total_incl_gst,
            status=invoice_status(0.0, pricing.total_incl_gst),
            quotation_id=quotation_id,
        )
        session.add(invoice)
        session.flush()

        stored_lines = []
        for i, line in enumerate(lines):
            row = InvoiceLine(
                invoice_id=invoice.id,
                description=line.description,
                qty=line.qty,
                amount_excl_gst=line.price.amount if isinstance(line.price, ExclusiveAmount) else None,
                amount_incl_gst=line.price.amount if isinstance(line.price, InclusiveAmount) else None,
                discount=line.discount,
                line_total=line.total,
                order=i,
            )
            session.add(row)
            stored_lines.append(row)

        prev_balance = ledger.current_balance(session, AccountKind.CLIENT, client.id)
        entry = None
        if invoice.total_incl_gst > 0:
            entry = ledger.append(
                session,
                AccountKind.CLIENT,
                client.id,
                EntryType.DEBIT,
                invoice.total_incl_gst,
                ref_type=RefType.INVOICE,
                ref_id=invoice.id,
                remarks=f"Invoice {invoice.invoice_no}",
            )

        available = round2(-prev_balance) if prev_balance < 0 else 0.0
        if available > 0:
            applied = apply_to_invoice(invoice, min(available, invoice.total_incl_gst))
            if applied > 0:
                session.add(invoice)
                entry = ledger.append(
                    session,
                    AccountKind.CLIENT,
                    client.id,
                    EntryType.CREDIT,
                    applied,
                    ref_type=RefType.ADJUSTMENT,
                    ref_id=invoice.id,
                    remarks=f"Advance adjusted against {invoice.invoice_no}",
                )

    session.refresh(invoice)
    logger.info(
        f"Invoice {invoice.invoice_no} for client #{client.id}: total {invoice.total_incl_gst:.2f} "
        f"({gst_mode.value} @ {pricing.gst_rate}), advance applied {applied:.2f}, "
        f"status {invoice.status.value}"
    )
    return InvoiceResult(
        invoice=invoice,
        lines=stored_lines,
        advance_applied=applied,
        balance_after=entry.balance_after if entry else prev_balance,
    )


# ── Service-derived monthly invoices ──────────────────────────────────────────


def service_lines(
    session: Session,
    client_id: int,
    month: int,
    year: int,
    gst_mode: GstMode = GstMode.EXCLUSIVE,
    gst_rate: Optional[float] = None,
) -> list[PricedLine]:
    """
    Turn a client's services into invoice lines for one calendar month.

    MONTHLY services are prorated to the days their active window overlaps the
    month; ONE_TIME services bill their flat amount in the month they start.
    Service prices are GST-exclusive; for INCLUSIVE invoices they are grossed
    up so the engine backs out the same base.
    """
    month_start, month_end = month_bounds(year, month)
    month_days = days_in_month(year, month)
    rate = resolve_gst_rate(gst_mode, gst_rate)

    def tagged(amount: float):
        if gst_mode == GstMode.INCLUSIVE:
            return InclusiveAmount(round2(amount * (1 + rate)))
        return ExclusiveAmount(amount)

    lines: list[PricedLine] = []
    for service in list_services(session, client_id):
        label = service.kind.value.replace("_", " ").title()
        if service.billing_type == BillingType.MONTHLY:
            days = overlap_days(service.start_date, service.expiry_date, month_start, month_end)
            if days <= 0 or service.amount_monthly <= 0:
                continue
            amount = prorate(service.amount_monthly, days, month_days)
            lines.append(
                PricedLine(
                    description=f"{label} – {month_start:%b %Y} ({days}/{month_days} days)",
                    price=tagged(amount),
                )
            )
        elif month_start <= service.start_date <= month_end and service.amount_one_time > 0:
            lines.append(
                PricedLine(description=f"{label} – one-time", price=tagged(service.amount_one_time))
            )
    return lines


def create_invoice_from_services(
    session: Session,
    client_id: int,
    month: Optional[int],
    year: Optional[int],
    gst_mode: GstMode = GstMode.EXCLUSIVE,
    gst_rate: Optional[float] = None,
    issue_date: Optional[date] = None,
    remarks: Optional[str] = None,
) -> InvoiceResult:
    if not client_id or not month or not year or not 1 <= int(month) <= 12:
        raise ValidationError(
            "CLIENTID_MONTH_YEAR_REQUIRED", "client_id, month (1-12) and year are required"
        )
    get_client(session, client_id)

    lines = service_lines(session, client_id, month, year, gst_mode, gst_rate)
    if not lines:
        raise BusinessRuleError(
            "NO_ACTIVE_SERVICES_IN_MONTH",
            f"Client {client_id} has nothing billable in {year}-{month:02d}",
        )

    period_start, period_end = month_bounds(year, month)
    return create_invoice(
        session,
        client_id,
        lines,
        gst_mode=gst_mode,
        gst_rate=gst_rate,
        issue_date=issue_date,
        period_start=period_start,
        period_end=period_end,
        billing_type=BillingType.MONTHLY,
        remarks=remarks or f"Services for {period_start:%B %Y}",
    )
