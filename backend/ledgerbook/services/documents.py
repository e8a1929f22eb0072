"""
Document snapshots handed to renderers.

Snapshots are plain dicts with every total already computed. Publishing one
happens strictly after the financial unit of work has committed and is
best-effort: a failure is logged and reported, never rolled back into the
ledger.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlmodel import Session

from ledgerbook.core.config import settings
from ledgerbook.models.billing import Invoice
from ledgerbook.models.party import Client
from ledgerbook.services.invoicing import invoice_lines


def invoice_snapshot(session: Session, invoice: Invoice) -> dict:
    client = session.get(Client, invoice.client_id)
    return {
        "org": settings.ORG_NAME,
        "invoice_no": invoice.invoice_no,
        "issue_date": invoice.issue_date.isoformat(),
        "period_start": invoice.period_start.isoformat() if invoice.period_start else None,
        "period_end": invoice.period_end.isoformat() if invoice.period_end else None,
        "billing_type": invoice.billing_type.value,
        "client": {
            "id": client.id,
            "name": client.name,
            "gstin": client.gstin,
            "address": client.address,
        } if client else None,
        "gst_mode": invoice.gst_mode.value,
        "gst_rate": invoice.gst_rate,
        "lines": [
            {
                "description": line.description,
                "qty": line.qty,
                "amount_excl_gst": line.amount_excl_gst,
                "amount_incl_gst": line.amount_incl_gst,
                "discount": line.discount,
                "line_total": line.line_total,
            }
            for line in invoice_lines(session, invoice.id)
        ],
        "extra_amount": invoice.extra_amount,
        "subtotal_excl_gst": invoice.subtotal_excl_gst,
        "gst_amount": invoice.gst_amount,
        "total_incl_gst": invoice.total_incl_gst,
        "paid_amount": invoice.paid_amount,
        "pending_amount": invoice.pending_amount,
        "status": invoice.status.value,
        "remarks": invoice.remarks,
    }


def publish_snapshot(name: str, snapshot: dict, export_dir: Optional[Path] = None) -> Optional[str]:
    """Write a snapshot for the renderer; returns its URL, or None when publishing failed."""
    target_dir = Path(export_dir or settings.EXPORT_DIR)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{name}.json"
        path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        logger.error(f"Document publish failed for {name}: {exc}")
        return None
    return f"{settings.BASE_URL}/exports/{path.name}"
