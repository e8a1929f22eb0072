"""Unit tests for staff advances and salary runs."""
from datetime import date

import pytest

from ledgerbook.core.errors import BusinessRuleError, ConflictError, ValidationError
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.services import ledger, payroll
from ledgerbook.services.payroll import SalaryComponents


def staff_balance(session, staff):
    return ledger.current_balance(session, AccountKind.STAFF, staff.id)


class TestComponents:
    def test_gross_deductions_net(self):
        c = SalaryComponents(basic=10000, hra=4000, other_allowances=1000.5, pf=1200, tds=300.25,
                             advance_recovery=2000, other_deductions=100)
        assert c.gross == 15000.5
        assert c.total_deductions == 3600.25
        assert c.net_pay == 11400.25


class TestAdvanceAndSalary:
    def test_advance_then_salary_with_recovery(self, session, make_staff):
        """Advance 5000 → 5000; net 8000 → 13000; recovery 5000 → 8000."""
        s = make_staff()
        advance = payroll.record_advance(session, s.id, 5000)
        assert advance.balance_after == 5000.0

        result = payroll.pay_salary(
            session, s.id, 3, 2025,
            SalaryComponents(basic=13000, advance_recovery=5000),
            paid_on=date(2025, 3, 31),
        )
        assert result.payment.net_pay == 8000.0
        assert [(e.entry_type, e.ref_type, e.amount, e.balance_after) for e in result.entries] == [
            (EntryType.DEBIT, RefType.SALARY, 8000.0, 13000.0),
            (EntryType.CREDIT, RefType.RECOVERY, 5000.0, 8000.0),
        ]
        assert result.balance_after == 8000.0
        assert staff_balance(session, s) == 8000.0
        assert result.payment.slip_no == "SAL-2025-00001"

    def test_second_run_for_same_month_rejected(self, session, make_staff):
        s = make_staff()
        payroll.pay_salary(session, s.id, 3, 2025, SalaryComponents(basic=9000))
        entries_before = ledger.list_entries(session, AccountKind.STAFF, s.id)

        with pytest.raises(ConflictError) as exc:
            payroll.pay_salary(session, s.id, 3, 2025, SalaryComponents(basic=9000))
        assert exc.value.code == "ALREADY_PAID_FOR_MONTH"

        assert len(ledger.list_entries(session, AccountKind.STAFF, s.id)) == len(entries_before)
        assert len(payroll.list_salary_payments(session, s.id)) == 1

    def test_other_month_is_allowed(self, session, make_staff):
        s = make_staff()
        payroll.pay_salary(session, s.id, 3, 2025, SalaryComponents(basic=9000))
        payroll.pay_salary(session, s.id, 4, 2025, SalaryComponents(basic=9000))
        assert staff_balance(session, s) == 18000.0

    def test_zero_net_posts_only_recovery(self, session, make_staff):
        s = make_staff()
        payroll.record_advance(session, s.id, 3000)
        result = payroll.pay_salary(session, s.id, 6, 2025, SalaryComponents(basic=3000, advance_recovery=3000))
        assert [e.ref_type for e in result.entries] == [RefType.RECOVERY]
        assert staff_balance(session, s) == 0.0


class TestValidation:
    def test_advance_amount_required(self, session, make_staff):
        s = make_staff()
        with pytest.raises(ValidationError) as exc:
            payroll.record_advance(session, s.id, 0)
        assert exc.value.code == "AMOUNT_REQUIRED"

    def test_month_and_year_required(self, session, make_staff):
        s = make_staff()
        with pytest.raises(ValidationError) as exc:
            payroll.pay_salary(session, s.id, None, 2025, SalaryComponents(basic=1))
        assert exc.value.code == "MONTH_YEAR_REQUIRED"
        with pytest.raises(ValidationError):
            payroll.pay_salary(session, s.id, 13, 2025, SalaryComponents(basic=1))

    def test_negative_net_rejected(self, session, make_staff):
        s = make_staff()
        with pytest.raises(BusinessRuleError) as exc:
            payroll.pay_salary(session, s.id, 1, 2025, SalaryComponents(basic=1000, tds=1500))
        assert exc.value.code == "NET_PAY_NEGATIVE"
        assert payroll.list_salary_payments(session, s.id) == []

    def test_negative_component_rejected(self, session, make_staff):
        s = make_staff()
        with pytest.raises(ValidationError) as exc:
            payroll.pay_salary(session, s.id, 1, 2025, SalaryComponents(basic=-1))
        assert exc.value.code == "NEGATIVE_COMPONENT"
