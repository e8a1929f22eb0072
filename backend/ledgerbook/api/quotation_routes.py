"""
Quotation routes.

Endpoints:
  POST  /api/quotations
  GET   /api/quotations
  GET   /api/quotations/{id_or_no}
  PATCH /api/quotations/{id}/status
  POST  /api/quotations/{id}/convert
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ledgerbook.api.invoice_routes import invoice_created
from ledgerbook.api.routes import priced_lines
from ledgerbook.core.database import get_session
from ledgerbook.models.billing import QuotationStatus
from ledgerbook.schemas.requests import QuotationCreate, QuotationStatusUpdate
from ledgerbook.schemas.responses import (
    InvoiceCreated,
    QuotationDetail,
    QuotationLineRead,
    QuotationListResponse,
    QuotationRead,
)
from ledgerbook.services import quotations

quotation_router = APIRouter(prefix="/api/quotations", tags=["quotations"])


def quotation_detail(qtn, lines) -> QuotationDetail:
    return QuotationDetail(
        **QuotationRead.model_validate(qtn).model_dump(),
        lines=[QuotationLineRead.model_validate(line) for line in lines],
    )


@quotation_router.post("", response_model=QuotationDetail, status_code=201)
def create_quotation(body: QuotationCreate, session: Session = Depends(get_session)):
    lines = [
        quotations.QuotedLine(line=line, billing_type=item.billing_type)
        for line, item in zip(priced_lines(body.line_items), body.line_items)
    ]
    result = quotations.create_quotation(
        session,
        lines,
        gst_mode=body.gst_mode,
        gst_rate=body.gst_rate,
        extra_amount=body.extra_amount,
        client_id=body.client_id,
        recipient=body.recipient.model_dump() if body.recipient else None,
        issue_date=body.issue_date,
        valid_until=body.valid_until,
        terms=body.terms,
        notes=body.notes,
        mark_sent_to=body.mark_sent_to,
    )
    return quotation_detail(result.quotation, result.lines)


@quotation_router.get("", response_model=QuotationListResponse)
def list_quotations(
    q: Optional[str] = Query(default=None),
    status: Optional[QuotationStatus] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=200),
    session: Session = Depends(get_session),
):
    rows, total = quotations.list_quotations(session, q=q, status=status, page=page, limit=limit)
    return QuotationListResponse(
        total=total, page=page, limit=limit,
        items=[QuotationRead.model_validate(r) for r in rows],
    )


@quotation_router.get("/{id_or_no}", response_model=QuotationDetail)
def get_quotation(id_or_no: str, session: Session = Depends(get_session)):
    qtn = quotations.find_quotation(session, id_or_no)
    return quotation_detail(qtn, quotations.quotation_lines(session, qtn.id))


@quotation_router.patch("/{quotation_id}/status", response_model=QuotationRead)
def update_status(quotation_id: int, body: QuotationStatusUpdate, session: Session = Depends(get_session)):
    qtn = quotations.update_quotation_status(
        session, quotation_id, status=body.status, add_sent_to=body.add_sent_to
    )
    return QuotationRead.model_validate(qtn)


@quotation_router.post("/{quotation_id}/convert", response_model=InvoiceCreated, status_code=201)
def convert(quotation_id: int, session: Session = Depends(get_session)):
    result = quotations.convert_quotation_to_invoice(session, quotation_id)
    return invoice_created(session, result)
