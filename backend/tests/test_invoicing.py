"""Unit tests for invoice creation, advance offset and service-derived invoices."""
from datetime import date

import pytest

from ledgerbook.core.errors import BusinessRuleError, NotFoundError, ValidationError
from ledgerbook.models.billing import GstMode, InvoiceStatus
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.models.party import BillingType, ServiceKind
from ledgerbook.services import invoicing, ledger, parties, payments
from ledgerbook.services.money import round2
from ledgerbook.services.pricing import ExclusiveAmount, InclusiveAmount, PricedLine


def line(amount, description="Website hosting", **kw):
    return PricedLine(description, ExclusiveAmount(amount), **kw)


def balance(session, client):
    return ledger.current_balance(session, AccountKind.CLIENT, client.id)


class TestCreateInvoice:
    def test_fresh_client_is_debited(self, session, make_client):
        """Balance 0, one 1000 line at 18% → total 1180, ledger 1180, nothing applied."""
        c = make_client()
        result = invoicing.create_invoice(session, c.id, [line(1000)], GstMode.EXCLUSIVE, 0.18)
        inv = result.invoice

        assert (inv.subtotal_excl_gst, inv.gst_amount, inv.total_incl_gst) == (1000.0, 180.0, 1180.0)
        assert (inv.paid_amount, inv.pending_amount) == (0.0, 1180.0)
        assert inv.status == InvoiceStatus.DUE
        assert result.advance_applied == 0.0
        assert balance(session, c) == 1180.0

        entries = ledger.list_entries(session, AccountKind.CLIENT, c.id)
        assert len(entries) == 1
        assert entries[0].entry_type == EntryType.DEBIT
        assert entries[0].ref_type == RefType.INVOICE
        assert entries[0].ref_id == inv.id

    def test_advance_is_offset_automatically(self, session, make_client):
        """Balance −500 → DEBIT 1180 (680) then ADJUSTMENT CREDIT 500 (180)."""
        c = make_client(opening_balance=-500)
        assert balance(session, c) == -500.0

        result = invoicing.create_invoice(session, c.id, [line(1000)], GstMode.EXCLUSIVE, 0.18)
        inv = result.invoice

        assert inv.paid_amount == 500.0
        assert inv.pending_amount == 680.0
        assert inv.status == InvoiceStatus.PARTIALLY_PAID
        assert result.advance_applied == 500.0
        assert result.balance_after == 180.0

        entries = ledger.list_entries(session, AccountKind.CLIENT, c.id)
        assert [(e.entry_type, e.ref_type, e.amount, e.balance_after) for e in entries] == [
            (EntryType.CREDIT, RefType.OPENING, 500.0, -500.0),
            (EntryType.DEBIT, RefType.INVOICE, 1180.0, 680.0),
            (EntryType.CREDIT, RefType.ADJUSTMENT, 500.0, 180.0),
        ]

    def test_large_advance_settles_invoice(self, session, make_client):
        c = make_client(opening_balance=-5000)
        result = invoicing.create_invoice(session, c.id, [line(1000)], GstMode.EXCLUSIVE, 0.18)
        assert result.invoice.status == InvoiceStatus.PAID
        assert result.invoice.pending_amount == 0.0
        assert result.advance_applied == 1180.0
        # DEBIT 1180 then ADJUSTMENT CREDIT 1180
        assert balance(session, c) == -5000.0

    def test_receivable_is_not_applied(self, session, make_client):
        c = make_client(opening_balance=300)
        result = invoicing.create_invoice(session, c.id, [line(100)], GstMode.NOGST)
        assert result.advance_applied == 0.0
        assert balance(session, c) == 400.0

    def test_inclusive_invoice(self, session, make_client):
        c = make_client()
        lines = [PricedLine("Ads package", InclusiveAmount(1180))]
        inv = invoicing.create_invoice(session, c.id, lines, GstMode.INCLUSIVE, 0.18).invoice
        assert (inv.subtotal_excl_gst, inv.gst_amount, inv.total_incl_gst) == (1000.0, 180.0, 1180.0)
        assert invoicing.invoice_lines(session, inv.id)[0].amount_incl_gst == 1180.0

    def test_zero_total_posts_nothing(self, session, make_client):
        c = make_client()
        inv = invoicing.create_invoice(session, c.id, [line(0)], GstMode.EXCLUSIVE).invoice
        assert inv.total_incl_gst == 0.0
        assert inv.status == InvoiceStatus.PAID
        assert ledger.list_entries(session, AccountKind.CLIENT, c.id) == []

    def test_unknown_client(self, session):
        with pytest.raises(NotFoundError) as exc:
            invoicing.create_invoice(session, 404, [line(10)])
        assert exc.value.code == "CLIENT_NOT_FOUND"

    def test_line_items_required(self, session, make_client):
        c = make_client()
        with pytest.raises(ValidationError) as exc:
            invoicing.create_invoice(session, c.id, [])
        assert exc.value.code == "LINE_ITEMS_REQUIRED"

    def test_rejected_invoice_leaves_no_trace(self, session, make_client):
        c = make_client()
        with pytest.raises(ValidationError):
            invoicing.create_invoice(session, c.id, [line(100, discount=200)])
        assert invoicing.list_invoices(session, c.id) == []
        assert balance(session, c) == 0.0


class TestNumbering:
    def test_numbers_follow_issue_month(self, session, make_client):
        c = make_client()
        first = invoicing.create_invoice(session, c.id, [line(10)], issue_date=date(2025, 3, 5)).invoice
        second = invoicing.create_invoice(session, c.id, [line(10)], issue_date=date(2025, 3, 20)).invoice
        other = invoicing.create_invoice(session, c.id, [line(10)], issue_date=date(2025, 4, 1)).invoice
        assert first.invoice_no == "INV-202503-0001"
        assert second.invoice_no == "INV-202503-0002"
        assert other.invoice_no == "INV-202504-0001"


class TestConservation:
    def test_paid_plus_pending_equals_total(self, session, make_client):
        c = make_client(opening_balance=-123.45)
        inv = invoicing.create_invoice(session, c.id, [line(847.46, qty=2)], GstMode.EXCLUSIVE, 0.18).invoice
        for amount in (100, 250.55, 10_000):
            payments.record_payment(session, c.id, amount, invoice_id=inv.id)
            session.refresh(inv)
            assert round2(inv.paid_amount + inv.pending_amount) == inv.total_incl_gst
            assert inv.pending_amount >= 0
        assert inv.status == InvoiceStatus.PAID


class TestProratedInvoice:
    def test_date_range_prorates_lines(self, session, make_client):
        c = make_client()
        result = invoicing.create_invoice(
            session, c.id, [line(3000)], GstMode.NOGST,
            period_start=date(2025, 2, 14), period_end=date(2025, 2, 28), prorate_period=True,
        )
        assert result.invoice.subtotal_excl_gst == 1607.14
        assert result.lines[0].description.endswith("(15/28 days)")

    def test_period_required(self, session, make_client):
        c = make_client()
        with pytest.raises(ValidationError) as exc:
            invoicing.create_invoice(session, c.id, [line(3000)], prorate_period=True)
        assert exc.value.code == "PERIOD_REQUIRED"


class TestFromServices:
    def _service(self, session, client, **data):
        base = {"kind": ServiceKind.HOSTING, "billing_type": BillingType.MONTHLY, "start_date": date(2025, 1, 1)}
        return parties.add_service(session, client.id, {**base, **data})

    def test_partial_month_is_prorated(self, session, make_client):
        c = make_client()
        self._service(session, c, amount_monthly=3000, start_date=date(2025, 2, 14))
        result = invoicing.create_invoice_from_services(session, c.id, 2, 2025, GstMode.EXCLUSIVE, 0.18)
        inv = result.invoice
        assert inv.subtotal_excl_gst == 1607.14
        assert inv.gst_amount == 289.29
        assert inv.total_incl_gst == 1896.43
        assert inv.billing_type == BillingType.MONTHLY
        assert (inv.period_start, inv.period_end) == (date(2025, 2, 1), date(2025, 2, 28))

    def test_one_time_billed_in_start_month_only(self, session, make_client):
        c = make_client()
        self._service(session, c, amount_monthly=1000)
        self._service(
            session, c, kind=ServiceKind.DIGITAL_MARKETING, billing_type=BillingType.ONE_TIME,
            amount_one_time=5000, start_date=date(2025, 3, 10),
        )
        march = invoicing.create_invoice_from_services(session, c.id, 3, 2025, GstMode.NOGST).invoice
        april = invoicing.create_invoice_from_services(session, c.id, 4, 2025, GstMode.NOGST).invoice
        assert march.total_incl_gst == 6000.0
        assert april.total_incl_gst == 1000.0

    def test_inclusive_mode_keeps_service_base(self, session, make_client):
        c = make_client()
        self._service(session, c, amount_monthly=1000)
        inv = invoicing.create_invoice_from_services(session, c.id, 5, 2025, GstMode.INCLUSIVE, 0.18).invoice
        assert inv.subtotal_excl_gst == 1000.0
        assert inv.total_incl_gst == 1180.0

    def test_expired_service_not_billed(self, session, make_client):
        c = make_client()
        self._service(session, c, amount_monthly=1000, expiry_date=date(2025, 1, 31))
        with pytest.raises(BusinessRuleError) as exc:
            invoicing.create_invoice_from_services(session, c.id, 2, 2025)
        assert exc.value.code == "NO_ACTIVE_SERVICES_IN_MONTH"

    def test_month_and_year_required(self, session, make_client):
        c = make_client()
        with pytest.raises(ValidationError) as exc:
            invoicing.create_invoice_from_services(session, c.id, None, 2025)
        assert exc.value.code == "CLIENTID_MONTH_YEAR_REQUIRED"

    def test_service_fields_required(self, session, make_client):
        c = make_client()
        with pytest.raises(ValidationError) as exc:
            parties.add_service(session, c.id, {"kind": ServiceKind.HOSTING})
        assert exc.value.code == "KIND_BILLINGTYPE_STARTDATE_REQUIRED"
