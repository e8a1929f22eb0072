"""
Invoice routes.

Endpoints:
  POST /api/invoices
  POST /api/invoices/from-services
  GET  /api/invoices
  GET  /api/invoices/{id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ledgerbook.core.database import get_session
from ledgerbook.models.billing import InvoiceStatus
from ledgerbook.schemas.requests import FromServicesRequest, InvoiceCreate
from ledgerbook.schemas.responses import InvoiceCreated, InvoiceDetail, InvoiceRead, LineRead
from ledgerbook.services import invoicing
from ledgerbook.services.documents import invoice_snapshot, publish_snapshot
from ledgerbook.api.routes import priced_lines

invoice_router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def invoice_detail(invoice, lines) -> InvoiceDetail:
    return InvoiceDetail(
        **InvoiceRead.model_validate(invoice).model_dump(),
        lines=[LineRead.model_validate(line) for line in lines],
    )


def invoice_created(session: Session, result: invoicing.InvoiceResult) -> InvoiceCreated:
    """Build the response once the invoice is committed; the document is published best-effort."""
    invoice = result.invoice
    url = publish_snapshot(invoice.invoice_no, invoice_snapshot(session, invoice))
    return InvoiceCreated(
        invoice=invoice_detail(invoice, invoicing.invoice_lines(session, invoice.id)),
        advance_applied=result.advance_applied,
        balance_after=result.balance_after,
        document_url=url,
    )


@invoice_router.post("", response_model=InvoiceCreated, status_code=201)
def create_invoice(body: InvoiceCreate, session: Session = Depends(get_session)):
    result = invoicing.create_invoice(
        session,
        body.client_id,
        priced_lines(body.line_items),
        gst_mode=body.gst_mode,
        gst_rate=body.gst_rate,
        extra_amount=body.extra_amount,
        issue_date=body.issue_date,
        period_start=body.period_start,
        period_end=body.period_end,
        billing_type=body.billing_type,
        remarks=body.remarks,
        prorate_period=body.prorate,
    )
    return invoice_created(session, result)


@invoice_router.post("/from-services", response_model=InvoiceCreated, status_code=201)
def create_from_services(body: FromServicesRequest, session: Session = Depends(get_session)):
    result = invoicing.create_invoice_from_services(
        session,
        body.client_id,
        body.month,
        body.year,
        gst_mode=body.gst_mode,
        gst_rate=body.gst_rate,
        issue_date=body.issue_date,
        remarks=body.remarks,
    )
    return invoice_created(session, result)


@invoice_router.get("", response_model=list[InvoiceRead])
def list_invoices(
    client_id: Optional[int] = Query(default=None),
    status: Optional[InvoiceStatus] = Query(default=None),
    session: Session = Depends(get_session),
):
    return [InvoiceRead.model_validate(i) for i in invoicing.list_invoices(session, client_id, status)]


@invoice_router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: int, session: Session = Depends(get_session)):
    invoice = invoicing.get_invoice(session, invoice_id)
    return invoice_detail(invoice, invoicing.invoice_lines(session, invoice.id))
