"""Atomic sequence counters backing human-readable document numbers."""
from typing import Optional
from sqlmodel import SQLModel, Field


class Counter(SQLModel, table=True):
    __tablename__ = "counters"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True, unique=True)  # e.g. "INV-202509", "PAY", "QTN"
    seq: int = Field(default=0)
