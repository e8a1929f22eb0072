"""SQLModel models for payroll (salary runs) and business expenses."""
from enum import Enum
from typing import Optional
from datetime import date, datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class PayMode(str, Enum):
    CASH = "CASH"
    BANK = "BANK"
    UPI = "UPI"
    CARD = "CARD"
    OTHER = "OTHER"


class SalaryPayment(SQLModel, table=True):
    """
    One salary run for a staff member and month.

    gross = basic + hra + other_allowances
    total_deductions = pf + tds + advance_recovery + other_deductions
    net_pay = gross - total_deductions (never negative)
    """

    __tablename__ = "salary_payments"
    __table_args__ = (
        UniqueConstraint("staff_id", "month", "year", name="uq_salary_staff_month_year"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: int = Field(foreign_key="staff.id", index=True)
    month: int  # 1..12
    year: int

    # Earnings
    basic: float = Field(default=0.0)
    hra: float = Field(default=0.0)
    other_allowances: float = Field(default=0.0)

    # Deductions
    pf: float = Field(default=0.0)
    tds: float = Field(default=0.0)
    advance_recovery: float = Field(default=0.0)  # posted as a RECOVERY credit
    other_deductions: float = Field(default=0.0)

    gross: float
    total_deductions: float
    net_pay: float

    paid_on: date
    pay_mode: PayMode = Field(default=PayMode.OTHER)
    slip_no: str = Field(index=True, unique=True)
    remarks: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Expense(SQLModel, table=True):
    """Money spent by the business outside payroll (rent, ads, hosting …)."""

    __tablename__ = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    amount: float
    mode: PayMode = Field(default=PayMode.OTHER)
    payment_to: Optional[str] = None
    expense_date: date = Field(index=True)
    remarks: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
