"""Unit tests for payment recording and application."""
from datetime import date

import pytest

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.billing import GstMode, InvoiceStatus, PaymentMode
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.services import invoicing, ledger, payments
from ledgerbook.services.pricing import ExclusiveAmount, PricedLine


def invoice_for(session, client, amount=1000):
    lines = [PricedLine("Hosting", ExclusiveAmount(amount))]
    return invoicing.create_invoice(session, client.id, lines, GstMode.EXCLUSIVE, 0.18).invoice


class TestAdvancePayments:
    def test_overpayment_without_invoice_becomes_advance(self, session, make_client):
        """Balance 1180, pay 2000 with no invoice → −820 and flagged as advance."""
        c = make_client()
        invoice_for(session, c)
        result = payments.record_payment(session, c.id, 2000, mode=PaymentMode.UPI)

        assert result.is_advance is True
        assert result.applied == 0.0
        assert result.unapplied == 2000.0
        assert result.balance_after == -820.0
        assert ledger.current_balance(session, AccountKind.CLIENT, c.id) == -820.0
        assert result.payment.receipt_no == "PAY-00001"

    def test_unknown_invoice_is_booked_as_advance(self, session, make_client):
        c = make_client()
        result = payments.record_payment(session, c.id, 500, invoice_id=9999)
        assert result.is_advance is True
        assert result.payment.invoice_id is None
        assert result.balance_after == -500.0

    def test_advance_offsets_next_invoice(self, session, make_client):
        c = make_client()
        payments.record_payment(session, c.id, 500)
        inv = invoice_for(session, c)
        assert inv.paid_amount == 500.0
        assert inv.status == InvoiceStatus.PARTIALLY_PAID


class TestInvoicePayments:
    def test_partial_then_full(self, session, make_client):
        c = make_client()
        inv = invoice_for(session, c)

        first = payments.record_payment(session, c.id, 180, invoice_id=inv.id)
        assert first.is_advance is False
        assert first.applied == 180.0
        assert first.invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert first.invoice.pending_amount == 1000.0

        second = payments.record_payment(session, c.id, 1000, invoice_id=inv.id)
        assert second.invoice.status == InvoiceStatus.PAID
        assert second.invoice.pending_amount == 0.0
        assert second.balance_after == 0.0

    def test_surplus_stays_on_ledger(self, session, make_client):
        c = make_client()
        inv = invoice_for(session, c)
        result = payments.record_payment(session, c.id, 1500, invoice_id=inv.id)
        assert result.applied == 1180.0
        assert result.unapplied == 320.0
        assert result.payment.applied_amount == 1180.0
        assert result.invoice.paid_amount == 1180.0
        assert result.balance_after == -320.0

    def test_one_credit_entry_per_payment(self, session, make_client):
        c = make_client()
        inv = invoice_for(session, c)
        result = payments.record_payment(
            session, c.id, 200, invoice_id=inv.id, payment_date=date(2025, 1, 15), slip_ref="UTR123"
        )
        entries = ledger.list_entries(session, AccountKind.CLIENT, c.id)
        credit = entries[-1]
        assert len(entries) == 2
        assert credit.entry_type == EntryType.CREDIT
        assert credit.ref_type == RefType.PAYMENT
        assert credit.ref_id == result.payment.id
        assert "UTR123" in credit.remarks
        assert result.payment.payment_date == date(2025, 1, 15)


class TestValidation:
    @pytest.mark.parametrize("amount", [0, -10, None])
    def test_amount_required(self, session, make_client, amount):
        c = make_client()
        with pytest.raises(ValidationError) as exc:
            payments.record_payment(session, c.id, amount)
        assert exc.value.code == "AMOUNT_REQUIRED"
        assert ledger.list_entries(session, AccountKind.CLIENT, c.id) == []

    def test_unknown_client(self, session):
        with pytest.raises(NotFoundError):
            payments.record_payment(session, 12345, 100)

    def test_invoice_of_another_client(self, session, make_client):
        a = make_client("Alpha")
        b = make_client("Beta")
        inv = invoice_for(session, a)
        with pytest.raises(ValidationError) as exc:
            payments.record_payment(session, b.id, 100, invoice_id=inv.id)
        assert exc.value.code == "INVOICE_CLIENT_MISMATCH"
        assert ledger.current_balance(session, AccountKind.CLIENT, b.id) == 0.0
        assert payments.list_payments(session, b.id) == []
