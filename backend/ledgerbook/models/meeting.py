"""SQLModel models for the client meeting log and its action items."""
from enum import Enum
from typing import Optional
from datetime import date, datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class ActionStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    BLOCKED = "BLOCKED"


class ClientMeeting(SQLModel, table=True):
    """Notes from one meeting with a client."""

    __tablename__ = "client_meetings"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    meeting_date: datetime = Field(default_factory=datetime.utcnow, index=True)
    title: Optional[str] = None
    attendees: Optional[str] = None  # comma-separated names / emails
    remarks: Optional[str] = None
    summary: Optional[str] = None
    next_follow_up: Optional[date] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class MeetingActionItem(SQLModel, table=True):
    """A follow-up agreed in a meeting, addressed by its position in the meeting."""

    __tablename__ = "meeting_action_items"
    __table_args__ = (UniqueConstraint("meeting_id", "position", name="uq_action_item_position"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    meeting_id: int = Field(foreign_key="client_meetings.id", index=True)
    position: int
    description: str
    owner: Optional[str] = None
    due_date: Optional[date] = None
    status: ActionStatus = Field(default=ActionStatus.OPEN)
