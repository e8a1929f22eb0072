"""Client, client-service and staff records."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from loguru import logger
from sqlmodel import Session, col, func, or_, select

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.models.party import BillingType, Client, ClientService, ServiceKind, Staff
from ledgerbook.services import ledger
from ledgerbook.services.money import to_amount


# ── Clients ───────────────────────────────────────────────────────────────────


def get_client(session: Session, client_id: Optional[int]) -> Client:
    client = session.get(Client, client_id) if client_id is not None else None
    if not client:
        raise NotFoundError("CLIENT_NOT_FOUND", f"Client {client_id} not found")
    return client


def create_client(session: Session, data: dict) -> Client:
    """Create a client; a non-zero opening balance is posted as an OPENING entry."""
    if not (data.get("name") or "").strip():
        raise ValidationError("NAME_REQUIRED", "Client name is required")

    opening = to_amount(data.get("opening_balance"))
    client = Client(**{**data, "opening_balance": opening})
    session.add(client)
    session.flush()

    if opening:
        with ledger.posting(session, AccountKind.CLIENT, client.id):
            ledger.append(
                session,
                AccountKind.CLIENT,
                client.id,
                EntryType.DEBIT if opening > 0 else EntryType.CREDIT,
                abs(opening),
                ref_type=RefType.OPENING,
                remarks="Opening balance",
            )
    else:
        session.commit()

    session.refresh(client)
    logger.info(f"Client #{client.id} '{client.name}' created (opening {opening:.2f})")
    return client


def list_clients(
    session: Session,
    q: Optional[str] = None,
    page: int = 1,
    limit: int = 25,
) -> tuple[list[Client], int]:
    stmt = select(Client)
    if q and q.strip():
        term = q.strip()
        stmt = stmt.where(
            or_(
                col(Client.name).contains(term),
                col(Client.email).contains(term),
                col(Client.phone).contains(term),
                col(Client.gstin).contains(term),
            )
        )
    total = session.exec(select(func.count()).select_from(stmt.subquery())).one()
    stmt = stmt.order_by(col(Client.created_at).desc(), col(Client.id).desc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    return list(session.exec(stmt).all()), total


def add_service(session: Session, client_id: int, data: dict) -> ClientService:
    get_client(session, client_id)
    if not data.get("kind") or not data.get("billing_type") or not data.get("start_date"):
        raise ValidationError(
            "KIND_BILLINGTYPE_STARTDATE_REQUIRED",
            "kind, billing_type and start_date are required",
        )
    expiry = data.get("expiry_date")
    if expiry and expiry < data["start_date"]:
        raise ValidationError("INVALID_SERVICE_WINDOW", "expiry_date precedes start_date")

    service = ClientService(
        client_id=client_id,
        kind=ServiceKind(data["kind"]),
        billing_type=BillingType(data["billing_type"]),
        amount_monthly=to_amount(data.get("amount_monthly")),
        amount_one_time=to_amount(data.get("amount_one_time")),
        start_date=data["start_date"],
        expiry_date=expiry,
        notes=data.get("notes"),
    )
    if service.amount_monthly < 0 or service.amount_one_time < 0:
        raise ValidationError("NEGATIVE_LINE_AMOUNT", "Service amounts cannot be negative")
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info(f"Service {service.kind.value}/{service.billing_type.value} added to client #{client_id}")
    return service


def list_services(session: Session, client_id: int) -> list[ClientService]:
    stmt = (
        select(ClientService)
        .where(ClientService.client_id == client_id)
        .order_by(col(ClientService.start_date), col(ClientService.id))
    )
    return list(session.exec(stmt).all())


def is_expired(service: ClientService, today: Optional[date] = None) -> bool:
    return service.expiry_date is not None and service.expiry_date < (today or date.today())


# ── Staff ─────────────────────────────────────────────────────────────────────


def get_staff(session: Session, staff_id: Optional[int]) -> Staff:
    staff = session.get(Staff, staff_id) if staff_id is not None else None
    if not staff:
        raise NotFoundError("STAFF_NOT_FOUND", f"Staff member {staff_id} not found")
    return staff


def create_staff(session: Session, data: dict) -> Staff:
    if not (data.get("name") or "").strip():
        raise ValidationError("NAME_REQUIRED", "Staff name is required")
    staff = Staff(**{**data, "salary_base": to_amount(data.get("salary_base"))})
    session.add(staff)
    session.commit()
    session.refresh(staff)
    logger.info(f"Staff #{staff.id} '{staff.name}' created")
    return staff


def update_staff(session: Session, staff_id: int, data: dict) -> Staff:
    staff = get_staff(session, staff_id)
    for k, v in data.items():
        if v is not None:
            setattr(staff, k, v)
    staff.updated_at = datetime.utcnow()
    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff


def list_staff(session: Session, active_only: bool = False) -> list[Staff]:
    stmt = select(Staff)
    if active_only:
        stmt = stmt.where(Staff.is_active == True)  # noqa: E712
    return list(session.exec(stmt.order_by(col(Staff.created_at).desc(), col(Staff.id).desc())).all())
