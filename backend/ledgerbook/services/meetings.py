"""Client meeting log: notes, attendees and numbered action items."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from loguru import logger
from sqlmodel import Session, col, or_, select

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.meeting import ActionStatus, ClientMeeting, MeetingActionItem
from ledgerbook.services.parties import get_client

ACTION_ITEM_FIELDS = ("description", "owner", "due_date", "status")


def _status(value) -> ActionStatus:
    try:
        return ActionStatus(value or ActionStatus.OPEN)
    except ValueError as exc:
        raise ValidationError("INVALID_ACTION_STATUS", f"Unknown action item status {value!r}") from exc


def _description(value: Optional[str]) -> str:
    if not (value or "").strip():
        raise ValidationError("DESCRIPTION_REQUIRED", "Action items need a description")
    return value.strip()


def add_meeting(session: Session, client_id: int, data: dict) -> ClientMeeting:
    """Log a meeting with its action items (positions 0, 1, 2… in the given order)."""
    get_client(session, client_id)
    attendees = [a.strip() for a in (data.get("attendees") or []) if a and a.strip()]
    meeting = ClientMeeting(
        client_id=client_id,
        meeting_date=data.get("meeting_date") or datetime.utcnow(),
        title=data.get("title"),
        attendees=",".join(attendees) or None,
        remarks=data.get("remarks"),
        summary=data.get("summary"),
        next_follow_up=data.get("next_follow_up"),
    )
    items = [
        MeetingActionItem(
            meeting_id=0,
            position=i,
            description=_description(item.get("description")),
            owner=item.get("owner"),
            due_date=item.get("due_date"),
            status=_status(item.get("status")),
        )
        for i, item in enumerate(data.get("action_items") or [])
    ]

    session.add(meeting)
    session.flush()
    for item in items:
        item.meeting_id = meeting.id
        session.add(item)
    session.commit()
    session.refresh(meeting)
    logger.info(f"Meeting #{meeting.id} logged for client #{client_id} with {len(items)} action item(s)")
    return meeting


def list_meetings(
    session: Session,
    client_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    q: Optional[str] = None,
) -> list[ClientMeeting]:
    """Meetings of a client, latest first; ``q`` matches title, remarks, summary or attendees."""
    get_client(session, client_id)
    stmt = select(ClientMeeting).where(ClientMeeting.client_id == client_id)
    if date_from:
        stmt = stmt.where(ClientMeeting.meeting_date >= datetime.combine(date_from, time.min))
    if date_to:
        stmt = stmt.where(ClientMeeting.meeting_date < datetime.combine(date_to + timedelta(days=1), time.min))
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                col(ClientMeeting.title).ilike(pattern),
                col(ClientMeeting.remarks).ilike(pattern),
                col(ClientMeeting.summary).ilike(pattern),
                col(ClientMeeting.attendees).ilike(pattern),
            )
        )
    stmt = stmt.order_by(col(ClientMeeting.meeting_date).desc(), col(ClientMeeting.id).desc())
    return list(session.exec(stmt).all())


def action_items(session: Session, meeting_id: int) -> list[MeetingActionItem]:
    stmt = (
        select(MeetingActionItem)
        .where(MeetingActionItem.meeting_id == meeting_id)
        .order_by(col(MeetingActionItem.position))
    )
    return list(session.exec(stmt).all())


def get_meeting(session: Session, client_id: int, meeting_id: int) -> ClientMeeting:
    get_client(session, client_id)
    meeting = session.get(ClientMeeting, meeting_id)
    if not meeting or meeting.client_id != client_id:
        raise NotFoundError("MEETING_NOT_FOUND", f"Meeting {meeting_id} not found for client {client_id}")
    return meeting


def update_action_item(
    session: Session, client_id: int, meeting_id: int, index: int, data: dict
) -> MeetingActionItem:
    """Patch the action item at ``index``; only keys present in ``data`` change."""
    meeting = get_meeting(session, client_id, meeting_id)
    if index < 0:
        raise ValidationError("INVALID_ACTION_INDEX", "Action item index cannot be negative")
    item = session.exec(
        select(MeetingActionItem).where(
            MeetingActionItem.meeting_id == meeting.id,
            MeetingActionItem.position == index,
        )
    ).first()
    if not item:
        raise NotFoundError("ACTION_ITEM_NOT_FOUND", f"Meeting {meeting_id} has no action item {index}")

    changes = {k: data[k] for k in ACTION_ITEM_FIELDS if k in data}
    if "description" in changes:
        changes["description"] = _description(changes["description"])
    if "status" in changes:
        changes["status"] = _status(changes["status"])
    for key, value in changes.items():
        setattr(item, key, value)
    meeting.updated_at = datetime.utcnow()
    session.add(item)
    session.add(meeting)
    session.commit()
    session.refresh(item)
    logger.info(f"Action item {index} of meeting #{meeting.id} now {item.status.value}")
    return item
