"""
Payment routes.

Endpoints:
  POST /api/payments
  GET  /api/payments
  GET  /api/payments/{id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ledgerbook.core.database import get_session
from ledgerbook.schemas.requests import PaymentCreate
from ledgerbook.schemas.responses import InvoiceRead, PaymentRead, PaymentRecorded
from ledgerbook.services import payments

payment_router = APIRouter(prefix="/api/payments", tags=["payments"])


@payment_router.post("", response_model=PaymentRecorded, status_code=201)
def record_payment(body: PaymentCreate, session: Session = Depends(get_session)):
    result = payments.record_payment(
        session,
        body.client_id,
        body.amount,
        invoice_id=body.invoice_id,
        mode=body.mode,
        payment_date=body.payment_date,
        slip_ref=body.slip_ref,
        notes=body.notes,
    )
    return PaymentRecorded(
        payment=PaymentRead.model_validate(result.payment),
        is_advance=result.is_advance,
        applied=result.applied,
        unapplied=result.unapplied,
        invoice=InvoiceRead.model_validate(result.invoice) if result.invoice else None,
        balance_after=result.balance_after,
    )


@payment_router.get("", response_model=list[PaymentRead])
def list_payments(
    client_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    return [PaymentRead.model_validate(p) for p in payments.list_payments(session, client_id)]


@payment_router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(payment_id: int, session: Session = Depends(get_session)):
    return PaymentRead.model_validate(payments.get_payment(session, payment_id))
