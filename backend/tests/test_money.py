"""Unit tests for monetary rounding."""
import pytest

from ledgerbook.core.errors import ValidationError
from ledgerbook.services.money import round2, to_amount


@pytest.mark.parametrize(
    "value,expected",
    [
        (1.005, 1.01),
        (2.675, 2.68),
        (1.004, 1.0),
        (0.125, 0.13),
        (-1.005, -1.01),
        (-2.675, -2.68),
        (10, 10.0),
        (0, 0.0),
    ],
)
def test_round2_half_away_from_zero(value, expected):
    assert round2(value) == expected


def test_round2_never_returns_negative_zero():
    result = round2(-0.001)
    assert result == 0.0
    assert str(result) == "0.0"


def test_round2_is_idempotent():
    for v in (1180.0, 847.46, 1607.14, 0.01, 152.54):
        assert round2(round2(v)) == round2(v)


def test_round2_accepts_none_and_strings():
    assert round2(None) == 0.0
    assert round2("12.345") == 12.35


def test_to_amount_coerces_loose_input():
    assert to_amount("") == 0.0
    assert to_amount(None) == 0.0
    assert to_amount("99.999") == 100.0
    assert to_amount(5) == 5.0


def test_to_amount_rejects_text():
    with pytest.raises(ValidationError) as exc:
        to_amount("twelve")
    assert exc.value.code == "INVALID_AMOUNT"


def test_loose_amounts_are_coerced_at_creation(make_client, make_staff):
    client = make_client(opening_balance="1500.505")
    assert client.opening_balance == 1500.51
    assert make_staff(salary_base="25000").salary_base == 25000.0
    with pytest.raises(ValidationError):
        make_client(name="Bad Co", opening_balance="n/a")
