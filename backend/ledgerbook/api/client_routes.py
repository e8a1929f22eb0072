"""
Client, client-service, client-ledger and meeting-log routes.

Endpoints:
  POST /api/clients
  GET  /api/clients
  GET  /api/clients/ledgers
  GET  /api/clients/{id}
  POST /api/clients/{id}/services
  GET  /api/clients/{id}/services
  GET  /api/clients/{id}/ledger
  GET  /api/clients/{id}/ledger/csv
  GET  /api/clients/{id}/ledger/xlsx
  POST /api/clients/{id}/adjustments
  POST /api/clients/{id}/meetings
  GET  /api/clients/{id}/meetings
  PATCH /api/clients/{id}/meetings/{meeting_id}/action-items/{index}
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from ledgerbook.core.database import get_session
from ledgerbook.models.ledger import AccountKind
from ledgerbook.schemas.requests import (
    ActionItemUpdate,
    AdjustmentCreate,
    ClientCreate,
    MeetingCreate,
    ServiceCreate,
)
from ledgerbook.schemas.responses import (
    ActionItemRead,
    BalanceOverviewResponse,
    BalanceRow,
    ClientDetail,
    ClientListResponse,
    ClientRead,
    LedgerEntryRead,
    MeetingDetail,
    MeetingRead,
    ServiceRead,
    StatementResponse,
)
from ledgerbook.services import ledger, meetings, parties, reports
from ledgerbook.services.exports import statement_csv, statement_xlsx

client_router = APIRouter(prefix="/api/clients", tags=["clients"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def statement_response(stmt: reports.Statement) -> StatementResponse:
    return StatementResponse(
        account_kind=stmt.account_kind.value,
        account_id=stmt.account_id,
        name=stmt.name,
        balance=stmt.balance,
        total_debits=stmt.total_debits,
        total_credits=stmt.total_credits,
        entries=[LedgerEntryRead.model_validate(e) for e in stmt.entries],
    )


def csv_response(stmt: reports.Statement, prefix: str) -> StreamingResponse:
    filename = f"{prefix}_{stmt.account_id}_ledger_{date.today()}.csv"
    return StreamingResponse(
        iter([statement_csv(stmt)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def xlsx_response(stmt: reports.Statement, prefix: str) -> StreamingResponse:
    filename = f"{prefix}_{stmt.account_id}_ledger_{date.today()}.xlsx"
    return StreamingResponse(
        statement_xlsx(stmt),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _client_statement(session: Session, client_id: int) -> reports.Statement:
    client = parties.get_client(session, client_id)
    return reports.statement(session, AccountKind.CLIENT, client.id, client.name)


# ── Clients ───────────────────────────────────────────────────────────────────


@client_router.post("", response_model=ClientDetail, status_code=201)
def create_client(body: ClientCreate, session: Session = Depends(get_session)):
    client = parties.create_client(session, body.model_dump())
    balance = ledger.current_balance(session, AccountKind.CLIENT, client.id)
    return ClientDetail(**ClientRead.model_validate(client).model_dump(), balance=balance)


@client_router.get("", response_model=ClientListResponse)
def list_clients(
    q: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=200),
    session: Session = Depends(get_session),
):
    rows, total = parties.list_clients(session, q=q, page=page, limit=limit)
    return ClientListResponse(
        total=total, page=page, limit=limit,
        items=[ClientRead.model_validate(c) for c in rows],
    )


@client_router.get("/ledgers", response_model=BalanceOverviewResponse)
def all_ledgers(session: Session = Depends(get_session)):
    overview = reports.balance_overview(session)
    return BalanceOverviewResponse(
        total_receivable=overview.total_receivable,
        total_advances=overview.total_advances,
        clients=[BalanceRow(client_id=c.id, name=c.name, balance=b) for c, b in overview.rows],
    )


@client_router.get("/{client_id}", response_model=ClientDetail)
def get_client(client_id: int, session: Session = Depends(get_session)):
    client = parties.get_client(session, client_id)
    balance = ledger.current_balance(session, AccountKind.CLIENT, client.id)
    return ClientDetail(**ClientRead.model_validate(client).model_dump(), balance=balance)


# ── Services ──────────────────────────────────────────────────────────────────


@client_router.post("/{client_id}/services", response_model=ServiceRead, status_code=201)
def add_service(client_id: int, body: ServiceCreate, session: Session = Depends(get_session)):
    service = parties.add_service(session, client_id, body.model_dump())
    return ServiceRead.model_validate(service)


@client_router.get("/{client_id}/services", response_model=list[ServiceRead])
def list_services(client_id: int, session: Session = Depends(get_session)):
    parties.get_client(session, client_id)
    return [
        ServiceRead.model_validate(s).model_copy(update={"is_expired": parties.is_expired(s)})
        for s in parties.list_services(session, client_id)
    ]


# ── Ledger ────────────────────────────────────────────────────────────────────


@client_router.get("/{client_id}/ledger", response_model=StatementResponse)
def client_ledger(client_id: int, session: Session = Depends(get_session)):
    return statement_response(_client_statement(session, client_id))


@client_router.get("/{client_id}/ledger/csv")
def client_ledger_csv(client_id: int, session: Session = Depends(get_session)):
    return csv_response(_client_statement(session, client_id), "client")


@client_router.get("/{client_id}/ledger/xlsx")
def client_ledger_xlsx(client_id: int, session: Session = Depends(get_session)):
    return xlsx_response(_client_statement(session, client_id), "client")


@client_router.post("/{client_id}/adjustments", response_model=LedgerEntryRead, status_code=201)
def client_adjustment(client_id: int, body: AdjustmentCreate, session: Session = Depends(get_session)):
    client = parties.get_client(session, client_id)
    entry = ledger.post_adjustment(
        session, AccountKind.CLIENT, client.id, body.entry_type, body.amount, body.remarks
    )
    return LedgerEntryRead.model_validate(entry)


# ── Meetings ──────────────────────────────────────────────────────────────────


def meeting_detail(session: Session, meeting) -> MeetingDetail:
    return MeetingDetail(
        **MeetingRead.model_validate(meeting).model_dump(),
        action_items=[ActionItemRead.model_validate(i) for i in meetings.action_items(session, meeting.id)],
    )


@client_router.post("/{client_id}/meetings", response_model=MeetingDetail, status_code=201)
def add_meeting(client_id: int, body: MeetingCreate, session: Session = Depends(get_session)):
    meeting = meetings.add_meeting(session, client_id, body.model_dump())
    return meeting_detail(session, meeting)


@client_router.get("/{client_id}/meetings", response_model=list[MeetingDetail])
def list_meetings(
    client_id: int,
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    q: Optional[str] = Query(default=None, description="Matches title, remarks, summary or attendees"),
    session: Session = Depends(get_session),
):
    rows = meetings.list_meetings(session, client_id, date_from, date_to, q)
    return [meeting_detail(session, m) for m in rows]


@client_router.patch(
    "/{client_id}/meetings/{meeting_id}/action-items/{index}", response_model=MeetingDetail
)
def update_action_item(
    client_id: int,
    meeting_id: int,
    index: int,
    body: ActionItemUpdate,
    session: Session = Depends(get_session),
):
    meetings.update_action_item(session, client_id, meeting_id, index, body.model_dump(exclude_unset=True))
    return meeting_detail(session, meetings.get_meeting(session, client_id, meeting_id))
