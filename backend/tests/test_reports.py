"""Unit tests for statements, exports, document snapshots and the net-balance report."""
import csv
import io
import json
from datetime import date

import openpyxl
import pytest
from sqlalchemy import event

from ledgerbook.core.errors import NotFoundError, ValidationError
from ledgerbook.models.billing import GstMode
from ledgerbook.models.ledger import AccountKind
from ledgerbook.services import expenses, invoicing, payments, payroll, reports
from ledgerbook.services.documents import invoice_snapshot, publish_snapshot
from ledgerbook.services.exports import STATEMENT_FIELDS, statement_csv, statement_xlsx
from ledgerbook.services.payroll import SalaryComponents
from ledgerbook.services.pricing import ExclusiveAmount, PricedLine


@pytest.fixture
def billed_client(session, make_client):
    c = make_client("Globex")
    lines = [PricedLine("Hosting", ExclusiveAmount(1000))]
    inv = invoicing.create_invoice(session, c.id, lines, GstMode.EXCLUSIVE, 0.18).invoice
    payments.record_payment(session, c.id, 500, invoice_id=inv.id, payment_date=date(2025, 3, 3))
    return c, inv


class TestStatements:
    def test_client_statement(self, session, billed_client):
        c, _ = billed_client
        stmt = reports.statement(session, AccountKind.CLIENT, c.id, c.name)
        assert stmt.balance == 680.0
        assert stmt.total_debits == 1180.0
        assert stmt.total_credits == 500.0
        assert [e.seq for e in stmt.entries] == [1, 2]

    def test_balance_overview(self, session, billed_client, make_client):
        make_client("Initech", opening_balance=-250)
        overview = reports.balance_overview(session)
        assert overview.total_receivable == 680.0
        assert overview.total_advances == 250.0
        assert [client.name for client, _ in overview.rows] == ["Globex", "Initech"]


class TestExports:
    def test_csv(self, session, billed_client):
        c, _ = billed_client
        text = statement_csv(reports.statement(session, AccountKind.CLIENT, c.id, c.name))
        rows = list(csv.DictReader(io.StringIO(text)))
        assert list(rows[0].keys()) == STATEMENT_FIELDS
        assert rows[0]["debit"] == "1180.0"
        assert rows[1]["credit"] == "500.0"
        assert rows[1]["balance_after"] == "680.0"

    def test_xlsx(self, session, billed_client):
        c, _ = billed_client
        buf = statement_xlsx(reports.statement(session, AccountKind.CLIENT, c.id, c.name))
        ws = openpyxl.load_workbook(buf).active
        assert ws.title == "Statement"
        assert ws.cell(row=4, column=1).value == "Date"
        assert ws.cell(row=5, column=6).value == 1180.0
        assert ws.cell(row=7, column=8).value == 680.0


class TestDocuments:
    def test_snapshot_carries_totals(self, session, billed_client):
        _, inv = billed_client
        snap = invoice_snapshot(session, inv)
        assert snap["invoice_no"] == inv.invoice_no
        assert snap["client"]["name"] == "Globex"
        assert snap["total_incl_gst"] == 1180.0
        assert snap["pending_amount"] == 680.0
        assert snap["lines"][0]["line_total"] == 1000.0

    def test_publish_writes_json(self, tmp_path):
        url = publish_snapshot("INV-202503-0001", {"total": 1}, export_dir=tmp_path)
        assert url.endswith("/exports/INV-202503-0001.json")
        assert json.loads((tmp_path / "INV-202503-0001.json").read_text()) == {"total": 1}

    def test_publish_failure_is_reported_not_raised(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        assert publish_snapshot("INV-1", {}, export_dir=blocker) is None


class TestNetBalance:
    def test_monthly_buckets(self, session, make_client, make_staff):
        c = make_client()
        s = make_staff()
        payments.record_payment(session, c.id, 10000, payment_date=date(2025, 3, 5))
        payments.record_payment(session, c.id, 2000, payment_date=date(2025, 4, 5))
        expenses.record_expense(session, "Office rent", 3000, expense_date=date(2025, 3, 10))
        payroll.pay_salary(session, s.id, 3, 2025, SalaryComponents(basic=4000), paid_on=date(2025, 3, 31))

        report = reports.net_balance(session)
        march = next(r for r in report if r.month == "2025-03")
        assert march.client_payments == 10000.0
        assert march.expenses == 3000.0
        assert march.salaries_net == 4000.0
        assert march.net == 3000.0

        only_april = reports.net_balance(session, "2025-04")
        assert [r.month for r in only_april] == ["2025-04"]
        assert only_april[0].net == 2000.0

    def test_month_filter_runs_in_the_query(self, session, make_client, make_staff):
        c = make_client()
        s = make_staff()
        payments.record_payment(session, c.id, 700, payment_date=date(2025, 2, 28))
        payments.record_payment(session, c.id, 900, payment_date=date(2025, 3, 1))
        payroll.record_advance(session, s.id, 300, advance_date=date(2025, 3, 31))
        payroll.record_advance(session, s.id, 400, advance_date=date(2025, 4, 1))

        statements = []

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        engine = session.get_bind()
        event.listen(engine, "before_cursor_execute", capture)
        try:
            report = reports.net_balance(session, "2025-03")
        finally:
            event.remove(engine, "before_cursor_execute", capture)

        assert [r.month for r in report] == ["2025-03"]
        assert report[0].client_payments == 900.0
        assert report[0].advances_given == 300.0
        payment_sql = next(sql for sql in statements if "FROM payments" in sql)
        assert "payment_date >=" in payment_sql
        assert "payment_date <=" in payment_sql

    def test_bad_month(self, session):
        with pytest.raises(ValidationError) as exc:
            reports.net_balance(session, "March")
        assert exc.value.code == "INVALID_MONTH"

    def test_expense_filters(self, session):
        expenses.record_expense(session, "Ads", 500, expense_date=date(2025, 1, 5))
        expenses.record_expense(session, "Domain", 900, expense_date=date(2025, 2, 5))
        rows = expenses.list_expenses(session, date_from=date(2025, 2, 1))
        assert [e.name for e in rows] == ["Domain"]

    def test_delete_expense(self, session):
        kept = expenses.record_expense(session, "Ads", 500, expense_date=date(2025, 1, 5))
        gone = expenses.record_expense(session, "Typo", "50", expense_date=date(2025, 1, 6))
        expenses.delete_expense(session, gone.id)
        assert [e.id for e in expenses.list_expenses(session)] == [kept.id]
        with pytest.raises(NotFoundError) as exc:
            expenses.delete_expense(session, gone.id)
        assert exc.value.code == "EXPENSE_NOT_FOUND"
