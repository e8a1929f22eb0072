"""
Shared routes and helpers for the Ledgerbook API.

Endpoints:
  GET  /api/health
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from ledgerbook.core.config import settings
from ledgerbook.core.database import get_session
from ledgerbook.models.counter import Counter
from ledgerbook.schemas.requests import LineItemIn
from ledgerbook.schemas.responses import HealthResponse
from ledgerbook.services.pricing import PricedLine, tag_line_amount

router = APIRouter(prefix="/api")


def priced_lines(items: list[LineItemIn]) -> list[PricedLine]:
    """Tag each incoming line with the single price field it carries."""
    return [
        PricedLine(
            description=item.description,
            price=tag_line_amount(item.amount_excl_gst, item.amount_incl_gst),
            qty=item.qty,
            discount=item.discount,
        )
        for item in items
    ]


# ── Health ────────────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
def health(session: Session = Depends(get_session)):
    try:
        session.exec(select(Counter).limit(1))
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"
    return HealthResponse(status="ok", db=db_status, gst_rate=settings.GST_RATE)
