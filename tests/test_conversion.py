import pytest

from itinerary_ace.services.money import format_currency, round2
from itinerary_ace.services.rates.conversion import (
    MIN_RATE,
    MissingRateError,
    RateTable,
    UnknownCurrencyError,
)

KNOWN = {"USD", "EUR", "GBP", "THB", "JPY"}


def test_round2_is_half_up():
    assert round2(2.675) == 2.68
    assert round2(1.005) == 1.01
    assert round2(-0.125) == -0.13


def test_format_currency():
    assert format_currency(1000, "THB") == "THB 1,000.00"
    assert format_currency(12.345, "USD") == "USD 12.35"


def test_same_currency_is_identity_without_markup():
    table = RateTable([], markup_percentage=5, known_currencies=KNOWN)
    details = table.get_rate("THB", "thb")
    assert details.base_rate == 1.0
    assert details.final_rate == 1.0
    assert details.markup_applied == 0.0


def test_direct_and_inverse_legs(rate_table):
    assert rate_table.get_rate("USD", "THB").final_rate == pytest.approx(36.5)
    assert rate_table.get_rate("THB", "USD").final_rate == pytest.approx(1 / 36.5)


def test_cross_rate_goes_through_usd(rate_table):
    details = rate_table.get_rate("EUR", "THB")
    assert details.base_rate == pytest.approx(36.5 / 0.92)
    result = rate_table.convert(100, "EUR", "THB")
    assert result.converted_amount == 3967.39
    assert result.from_currency == "EUR"
    assert result.to_currency == "THB"


def test_markup_applies_to_cross_currency_only():
    table = RateTable(
        [("USD", "THB", 36.5)], markup_percentage=2, known_currencies=KNOWN
    )
    details = table.get_rate("USD", "THB")
    assert details.base_rate == pytest.approx(36.5)
    assert details.final_rate == pytest.approx(37.23)
    assert details.markup_applied == 2
    assert table.convert(10, "USD", "THB").converted_amount == 372.3


def test_unknown_currency_rejected(rate_table):
    with pytest.raises(UnknownCurrencyError):
        rate_table.get_rate("USD", "VND")


def test_missing_leg_rejected(rate_table):
    with pytest.raises(MissingRateError):
        rate_table.get_rate("GBP", "THB")


def test_rate_is_floored():
    table = RateTable([("USD", "XXX", 1e9)], known_currencies=KNOWN | {"XXX"})
    assert table.get_rate("XXX", "USD").final_rate == MIN_RATE


def test_negative_markup_rejected():
    with pytest.raises(ValueError):
        RateTable([], markup_percentage=-1)


def test_from_rows_accepts_stored_rows():
    rows = [{"id": 1, "from_currency": "usd", "to_currency": "thb", "rate": 36.5}]
    table = RateTable.from_rows(rows, known_currencies=KNOWN)
    assert table.find_base_rate("USD", "THB") == 36.5
    assert table.find_base_rate("THB", "USD") == pytest.approx(1 / 36.5)
    assert table.find_base_rate("EUR", "THB") is None
