"""
GST pricing engine.

One implementation of the subtotal / tax / total arithmetic, shared by
invoices, quotations, service-derived monthly invoices and quotation
conversion. Line prices arrive as a tagged amount, chosen once at the input
boundary by :func:`tag_line_amount`, so the arithmetic below never compares
mode strings.

Modes:
  EXCLUSIVE – prices exclude GST; tax is added on top of the subtotal.
  INCLUSIVE – prices include GST; the subtotal is backed out of the gross.
  NOGST     – no tax; rate forced to 0.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from ledgerbook.core.config import settings
from ledgerbook.core.errors import ValidationError
from ledgerbook.models.billing import GstMode
from ledgerbook.services.money import round2


# ── Tagged line amounts ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExclusiveAmount:
    amount: float


@dataclass(frozen=True)
class InclusiveAmount:
    amount: float


LineAmount = Union[ExclusiveAmount, InclusiveAmount]


@dataclass(frozen=True)
class PricedLine:
    description: str
    price: LineAmount  # per-unit price
    qty: float = 1.0
    discount: float = 0.0  # per unit, same GST sense as price

    @property
    def total(self) -> float:
        return round2((self.price.amount - self.discount) * self.qty)


@dataclass(frozen=True)
class PricingResult:
    gst_mode: GstMode
    gst_rate: float
    subtotal_excl_gst: float
    gst_amount: float
    total_incl_gst: float


def tag_line_amount(
    amount_excl_gst: Optional[float],
    amount_incl_gst: Optional[float],
) -> LineAmount:
    """Pick the single price field a line carries and tag it."""
    has_excl = amount_excl_gst is not None
    has_incl = amount_incl_gst is not None
    if has_excl and has_incl:
        raise ValidationError(
            "AMBIGUOUS_LINE_AMOUNT",
            "A line item carries either amountExclGst or amountInclGst, not both",
        )
    if has_incl:
        return InclusiveAmount(float(amount_incl_gst))
    return ExclusiveAmount(float(amount_excl_gst or 0.0))


def resolve_gst_rate(gst_mode: GstMode, gst_rate: Optional[float] = None) -> float:
    """NOGST forces 0; otherwise the override, falling back to the configured default."""
    if gst_mode == GstMode.NOGST:
        return 0.0
    rate = settings.GST_RATE if gst_rate is None else float(gst_rate)
    if rate < 0:
        raise ValidationError("INVALID_GST_RATE", "GST rate cannot be negative")
    return rate


def _matches(mode: GstMode, price: LineAmount) -> bool:
    if isinstance(price, InclusiveAmount):
        return mode == GstMode.INCLUSIVE
    return mode != GstMode.INCLUSIVE


def validate_lines(lines: Iterable[PricedLine]) -> None:
    for line in lines:
        if line.price.amount < 0 or line.discount < 0 or line.qty < 0:
            raise ValidationError(
                "NEGATIVE_LINE_AMOUNT",
                f"Line '{line.description}' has a negative price, discount or quantity",
            )
        if line.total < 0:
            raise ValidationError(
                "NEGATIVE_LINE_AMOUNT",
                f"Discount exceeds the price on line '{line.description}'",
            )


def compute_totals(
    gst_mode: GstMode,
    lines: Iterable[PricedLine],
    extra_amount: float = 0.0,
    gst_rate: Optional[float] = None,
) -> PricingResult:
    """
    Compute subtotal, GST and gross total for a document.

    Lines tagged for the other GST sense are ignored. ``extra_amount`` is a
    flat addend in the same sense as the lines.
    """
    lines = list(lines)
    validate_lines(lines)
    rate = resolve_gst_rate(gst_mode, gst_rate)

    total = sum(line.total for line in lines if _matches(gst_mode, line.price))
    total += float(extra_amount or 0.0)

    if gst_mode == GstMode.INCLUSIVE:
        gross = round2(total)
        subtotal = round2(gross / (1 + rate)) if rate > 0 else gross
        tax = round2(gross - subtotal)
        grand_total = gross
    elif gst_mode == GstMode.EXCLUSIVE:
        subtotal = round2(total)
        tax = round2(subtotal * rate)
        grand_total = round2(subtotal + tax)
    else:
        subtotal = round2(total)
        tax = 0.0
        grand_total = subtotal

    if subtotal < 0:
        raise ValidationError("NEGATIVE_SUBTOTAL", "Document subtotal cannot be negative")

    return PricingResult(
        gst_mode=gst_mode,
        gst_rate=rate,
        subtotal_excl_gst=subtotal,
        gst_amount=tax,
        total_incl_gst=grand_total,
    )


# ── Proration ─────────────────────────────────────────────────────────────────


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    return start, start + relativedelta(months=1, days=-1)


def inclusive_days(start: date, end: date) -> int:
    """Days from start to end counting both ends; 0 when end precedes start."""
    return max((end - start).days + 1, 0)


def overlap_days(
    active_from: date,
    active_to: Optional[date],
    window_start: date,
    window_end: date,
) -> int:
    """Days an active window [active_from, active_to or open] covers inside a window."""
    start = max(active_from, window_start)
    end = window_end if active_to is None else min(active_to, window_end)
    return inclusive_days(start, end)


def prorate(base_amount: float, days: int, period_days: int) -> float:
    """Scale a monthly amount to ``days`` out of ``period_days``."""
    if period_days <= 0:
        return 0.0
    return round2(float(base_amount) * days / period_days)
