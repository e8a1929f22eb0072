"""
Payment application.

A receipt is always booked as one CREDIT for its full amount on the client
ledger. When it names an invoice of the same client, up to the invoice's
pending amount is settled on the invoice itself; that settlement is
bookkeeping on the invoice only and posts nothing further to the ledger.
Whatever is not settled leaves the client balance negative, an advance that
the next invoice will absorb.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from loguru import logger
from sqlmodel import Session, col, select

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.billing import Invoice, Payment, PaymentMode
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.services import ledger, numbering
from ledgerbook.services.invoicing import apply_to_invoice
from ledgerbook.services.money import round2
from ledgerbook.services.parties import get_client


@dataclass
class PaymentResult:
    payment: Payment
    is_advance: bool
    invoice: Optional[Invoice]
    applied: float
    unapplied: float
    balance_after: float


def record_payment(
    session: Session,
    client_id: int,
    amount: float,
    invoice_id: Optional[int] = None,
    mode: PaymentMode = PaymentMode.OTHER,
    payment_date: Optional[date] = None,
    slip_ref: Optional[str] = None,
    notes: Optional[str] = None,
) -> PaymentResult:
    client = get_client(session, client_id)
    amount = round2(amount or 0.0)
    if amount <= 0:
        raise ValidationError("AMOUNT_REQUIRED", "Payment amount must be greater than zero")

    payment_date = payment_date or date.today()
    applied = 0.0

    with ledger.posting(session, AccountKind.CLIENT, client.id):
        invoice = session.get(Invoice, invoice_id) if invoice_id is not None else None
        if invoice_id is not None and invoice is None:
            logger.warning(f"Payment for client #{client.id} names unknown invoice {invoice_id}; booked as advance")
        if invoice is not None and invoice.client_id != client.id:
            raise ValidationError(
                "INVOICE_CLIENT_MISMATCH",
                f"Invoice {invoice.invoice_no} does not belong to client {client.id}",
            )

        payment = Payment(
            client_id=client.id,
            invoice_id=invoice.id if invoice else None,
            receipt_no=numbering.next_receipt_no(session),
            payment_date=payment_date,
            amount=amount,
            mode=mode,
            slip_ref=slip_ref,
            notes=notes,
        )
        session.add(payment)
        session.flush()

        ref = f" | Ref: {slip_ref}" if slip_ref else ""
        entry = ledger.append(
            session,
            AccountKind.CLIENT,
            client.id,
            EntryType.CREDIT,
            amount,
            ref_type=RefType.PAYMENT,
            ref_id=payment.id,
            remarks=(f"Payment against {invoice.invoice_no}" if invoice else "Advance payment") + ref,
            date=datetime.combine(payment_date, time.min),
        )

        if invoice is not None:
            applied = apply_to_invoice(invoice, amount)
            payment.applied_amount = applied
            session.add(invoice)
            session.add(payment)

    session.refresh(payment)
    if invoice is not None:
        session.refresh(invoice)

    result = PaymentResult(
        payment=payment,
        is_advance=invoice is None,
        invoice=invoice,
        applied=applied,
        unapplied=round2(amount - applied),
        balance_after=entry.balance_after,
    )
    logger.info(
        f"Payment {payment.receipt_no} from client #{client.id}: {amount:.2f} via {mode.value}, "
        f"applied {applied:.2f}"
        + (f" to {invoice.invoice_no}" if invoice else " (advance)")
        + f", balance {result.balance_after:.2f}"
    )
    return result


def get_payment(session: Session, payment_id: int) -> Payment:
    payment = session.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("PAYMENT_NOT_FOUND", f"Payment {payment_id} not found")
    return payment


def list_payments(session: Session, client_id: Optional[int] = None) -> list[Payment]:
    stmt = select(Payment)
    if client_id is not None:
        stmt = stmt.where(Payment.client_id == client_id)
    stmt = stmt.order_by(col(Payment.payment_date).desc(), col(Payment.id).desc())
    return list(session.exec(stmt).all())
