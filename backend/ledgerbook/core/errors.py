"""
Domain error taxonomy.

Every error carries a machine-readable ``code`` (e.g. ``AMOUNT_REQUIRED``)
and a human message. The API layer maps each kind to an HTTP status; services
never swallow them.
"""
from __future__ import annotations

from typing import Optional


class BillingError(Exception):
    """Base class for all domain errors raised by the services."""

    kind: str = "error"
    http_status: int = 400
    retryable: bool = False

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or code.replace("_", " ").capitalize()
        super().__init__(f"{code}: {self.message}")


class ValidationError(BillingError):
    """Missing or invalid required input."""

    kind = "validation"
    http_status = 400


class NotFoundError(BillingError):
    """Referenced client, staff member, invoice or document does not exist."""

    kind = "not_found"
    http_status = 404


class ConflictError(BillingError):
    """Uniqueness violation, e.g. a second salary run for the same month."""

    kind = "conflict"
    http_status = 409


class BusinessRuleError(BillingError):
    """Input is well-formed but breaks a business rule."""

    kind = "business_rule"
    http_status = 422


class ConcurrencyError(BillingError):
    """Another writer appended to the same ledger account first. Safe to retry."""

    kind = "concurrency"
    http_status = 409
    retryable = True
