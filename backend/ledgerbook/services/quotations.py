"""Quotations: priced offers with a hand-driven status and conversion to an invoice."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from loguru import logger
from sqlmodel import Session, col, or_, select, func

from ledgerbook.core.errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from ledgerbook.models.billing import GstMode, Quotation, QuotationLine, QuotationStatus
from ledgerbook.models.ledger import AccountKind
from ledgerbook.models.party import BillingType
from ledgerbook.services import ledger, numbering
from ledgerbook.services.invoicing import InvoiceResult, create_invoice
from ledgerbook.services.parties import get_client
from ledgerbook.services.pricing import (
    ExclusiveAmount,
    InclusiveAmount,
    PricedLine,
    compute_totals,
    tag_line_amount,
)

ALLOWED_TRANSITIONS: dict[QuotationStatus, frozenset[QuotationStatus]] = {
    QuotationStatus.DRAFT: frozenset(
        {QuotationStatus.SENT, QuotationStatus.ACCEPTED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED}
    ),
    QuotationStatus.SENT: frozenset(
        {QuotationStatus.ACCEPTED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED}
    ),
    QuotationStatus.ACCEPTED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
}


@dataclass
class QuotedLine:
    line: PricedLine
    billing_type: BillingType = BillingType.ONE_TIME


@dataclass
class QuotationResult:
    quotation: Quotation
    lines: list[QuotationLine] = field(default_factory=list)


def _split_recipients(value: Optional[str]) -> list[str]:
    return [v for v in (value or "").split(",") if v]


def get_quotation(session: Session, quotation_id: int) -> Quotation:
    qtn = session.get(Quotation, quotation_id)
    if not qtn:
        raise NotFoundError("QUOTATION_NOT_FOUND", f"Quotation {quotation_id} not found")
    return qtn


def find_quotation(session: Session, id_or_no: str) -> Quotation:
    """Look up by numeric id or by quote number (e.g. QTN-0007)."""
    if str(id_or_no).isdigit():
        qtn = session.get(Quotation, int(id_or_no))
        if qtn:
            return qtn
    qtn = session.exec(select(Quotation).where(Quotation.quote_no == id_or_no)).first()
    if not qtn:
        raise NotFoundError("QUOTATION_NOT_FOUND", f"Quotation {id_or_no} not found")
    return qtn


def quotation_lines(session: Session, quotation_id: int) -> list[QuotationLine]:
    stmt = (
        select(QuotationLine)
        .where(QuotationLine.quotation_id == quotation_id)
        .order_by(col(QuotationLine.order))
    )
    return list(session.exec(stmt).all())


def create_quotation(
    session: Session,
    lines: list[QuotedLine],
    gst_mode: GstMode = GstMode.EXCLUSIVE,
    gst_rate: Optional[float] = None,
    extra_amount: float = 0.0,
    client_id: Optional[int] = None,
    recipient: Optional[dict] = None,
    issue_date: Optional[date] = None,
    valid_until: Optional[date] = None,
    terms: Optional[str] = None,
    notes: Optional[str] = None,
    mark_sent_to: Optional[list[str]] = None,
) -> QuotationResult:
    if not lines:
        raise ValidationError("LINE_ITEMS_REQUIRED", "At least one line item is required")
    if client_id is not None:
        get_client(session, client_id)

    pricing = compute_totals(gst_mode, [q.line for q in lines], extra_amount, gst_rate)
    recipient = recipient or {}
    sent_to = [s for s in (mark_sent_to or []) if s]

    qtn = Quotation(
        client_id=client_id,
        quote_no=numbering.next_quote_no(session),
        issue_date=issue_date or date.today(),
        valid_until=valid_until,
        recipient_name=recipient.get("name"),
        recipient_email=recipient.get("email"),
        recipient_phone=recipient.get("phone"),
        recipient_company=recipient.get("company"),
        recipient_address=recipient.get("address"),
        gst_mode=gst_mode,
        gst_rate=pricing.gst_rate,
        extra_amount=float(extra_amount or 0.0),
        subtotal_excl_gst=pricing.subtotal_excl_gst,
        gst_amount=pricing.gst_amount,
        total_incl_gst=pricing.total_incl_gst,
        terms=terms,
        notes=notes,
        status=QuotationStatus.SENT if sent_to else QuotationStatus.DRAFT,
        sent_to=",".join(sent_to) or None,
        sent_at=datetime.utcnow() if sent_to else None,
    )
    try:
        session.add(qtn)
        session.flush()
        rows = []
        for i, quoted in enumerate(lines):
            line = quoted.line
            row = QuotationLine(
                quotation_id=qtn.id,
                description=line.description,
                qty=line.qty,
                amount_excl_gst=line.price.amount if isinstance(line.price, ExclusiveAmount) else None,
                amount_incl_gst=line.price.amount if isinstance(line.price, InclusiveAmount) else None,
                discount=line.discount,
                billing_type=quoted.billing_type,
                line_total=line.total,
                order=i,
            )
            session.add(row)
            rows.append(row)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(qtn)
    logger.info(f"Quotation {qtn.quote_no}: total {qtn.total_incl_gst:.2f} ({qtn.status.value})")
    return QuotationResult(quotation=qtn, lines=rows)


def list_quotations(
    session: Session,
    q: Optional[str] = None,
    status: Optional[QuotationStatus] = None,
    page: int = 1,
    limit: int = 25,
) -> tuple[list[Quotation], int]:
    stmt = select(Quotation)
    if q and q.strip():
        term = q.strip()
        stmt = stmt.where(
            or_(
                col(Quotation.quote_no).contains(term),
                col(Quotation.recipient_name).contains(term),
                col(Quotation.recipient_email).contains(term),
            )
        )
    if status is not None:
        stmt = stmt.where(Quotation.status == status)
    total = session.exec(select(func.count()).select_from(stmt.subquery())).one()
    stmt = stmt.order_by(col(Quotation.created_at).desc(), col(Quotation.id).desc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    return list(session.exec(stmt).all()), total


def _transition(qtn: Quotation, target: QuotationStatus) -> None:
    if target == qtn.status:
        return
    if target not in ALLOWED_TRANSITIONS[qtn.status]:
        raise BusinessRuleError(
            "INVALID_STATUS_TRANSITION",
            f"Quotation {qtn.quote_no} cannot move from {qtn.status.value} to {target.value}",
        )
    qtn.status = target


def update_quotation_status(
    session: Session,
    quotation_id: int,
    status: Optional[QuotationStatus] = None,
    add_sent_to: Optional[list[str]] = None,
) -> Quotation:
    qtn = get_quotation(session, quotation_id)
    if status is not None:
        _transition(qtn, status)
    recipients = [s for s in (add_sent_to or []) if s]
    if recipients:
        qtn.sent_to = ",".join(_split_recipients(qtn.sent_to) + recipients)
        qtn.sent_at = datetime.utcnow()
        if qtn.status == QuotationStatus.DRAFT:
            qtn.status = QuotationStatus.SENT
    qtn.updated_at = datetime.utcnow()
    session.add(qtn)
    session.commit()
    session.refresh(qtn)
    logger.info(f"Quotation {qtn.quote_no} → {qtn.status.value}")
    return qtn


def convert_quotation_to_invoice(session: Session, quotation_id: int) -> InvoiceResult:
    """Raise an invoice from a quotation and mark the quotation ACCEPTED, atomically."""
    qtn = get_quotation(session, quotation_id)
    if qtn.client_id is None:
        raise ValidationError("CLIENT_REQUIRED_TO_CONVERT", "Quotation has no client to invoice")
    if qtn.converted_invoice_id is not None:
        raise ConflictError(
            "QUOTATION_ALREADY_CONVERTED",
            f"Quotation {qtn.quote_no} already converted to invoice {qtn.converted_invoice_id}",
        )
    if qtn.status != QuotationStatus.ACCEPTED:
        _transition(qtn, QuotationStatus.ACCEPTED)

    rows = quotation_lines(session, qtn.id)
    lines = [
        PricedLine(
            description=row.description,
            price=tag_line_amount(row.amount_excl_gst, row.amount_incl_gst),
            qty=row.qty,
            discount=row.discount,
        )
        for row in rows
    ]
    billing_type = (
        BillingType.MONTHLY
        if any(row.billing_type == BillingType.MONTHLY for row in rows)
        else BillingType.ONE_TIME
    )

    with ledger.posting(session, AccountKind.CLIENT, qtn.client_id):
        result = create_invoice(
            session,
            qtn.client_id,
            lines,
            gst_mode=qtn.gst_mode,
            gst_rate=qtn.gst_rate,
            extra_amount=qtn.extra_amount,
            billing_type=billing_type,
            remarks=f"Converted from quotation {qtn.quote_no}",
            quotation_id=qtn.id,
            commit=False,
        )
        qtn.status = QuotationStatus.ACCEPTED
        qtn.converted_invoice_id = result.invoice.id
        qtn.updated_at = datetime.utcnow()
        session.add(qtn)

    session.refresh(result.invoice)
    logger.info(f"Quotation {qtn.quote_no} converted to invoice {result.invoice.invoice_no}")
    return result
