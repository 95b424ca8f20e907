from datetime import date
from decimal import Decimal

import pytest

from opsdesk.erp.codec import (
    LINE_STATUS,
    ORDER_STATUS,
    LineStatus,
    OrderStatus,
    currency_scale,
    decode_currency_amount,
    decode_int,
    decode_julian_date,
    decode_optional_julian_date,
    decode_status_code,
    decode_text,
    format_quantity,
)

TODAY = date(2026, 3, 1)


@pytest.mark.parametrize("year", [0, 1, 24, 49, 50, 99, 100, 124, 149])
def test_julian_date_century_pivot(year):
    for day in (1, 59, 200, 365):
        full_year = year + 1900 if year >= 50 else year + 2000
        expected = date.fromordinal(date(full_year, 1, 1).toordinal() + day - 1)
        assert decode_julian_date(year * 1000 + day, today=TODAY) == expected


def test_julian_date_known_values():
    assert decode_julian_date(124015) == date(2024, 1, 15)
    assert decode_julian_date(99365) == date(1999, 12, 31)
    assert decode_julian_date(24060) == date(2024, 2, 29)
    assert decode_julian_date("124045") == date(2024, 2, 14)
    assert decode_julian_date(Decimal("124001")) == date(2024, 1, 1)


@pytest.mark.parametrize("raw", [None, 0, -5, "", "   ", "abc", True])
def test_julian_date_sentinel_is_today(raw):
    assert decode_julian_date(raw, today=TODAY) == TODAY


def test_julian_date_passes_dates_and_iso_strings_through():
    assert decode_julian_date(date(2024, 5, 6), today=TODAY) == date(2024, 5, 6)
    assert decode_julian_date("2024-05-06T10:00:00", today=TODAY) == date(2024, 5, 6)


def test_julian_date_accepts_numeric_strings_with_fraction():
    # NUMBER columns fetched as text keep a trailing ".0"
    assert decode_julian_date("124045.0", today=TODAY) == date(2024, 2, 14)
    assert decode_julian_date(" 99365.00 ", today=TODAY) == date(1999, 12, 31)
    assert decode_julian_date("-5.0", today=TODAY) == TODAY


def test_optional_julian_date_keeps_missing_as_none():
    assert decode_optional_julian_date(None) is None
    assert decode_optional_julian_date(0) is None
    assert decode_optional_julian_date("0") is None
    assert decode_optional_julian_date("0.0") is None
    assert decode_optional_julian_date("") is None
    assert decode_optional_julian_date(124045) == date(2024, 2, 14)


@pytest.mark.parametrize("raw", [0, 1, 99, 100, 12345, 987654321])
def test_currency_amount_vnd_and_usd(raw):
    assert decode_currency_amount(raw, "VND") == Decimal(raw) / 100
    assert decode_currency_amount(raw, "USD") == Decimal(raw) / 10000


def test_currency_table_is_extensible_without_touching_callers():
    scales = {"USD": 10000, "BHD": 1000}
    assert decode_currency_amount(5000, "BHD", scales=scales) == Decimal("5")
    # unknown codes fall back to the default scale
    assert currency_scale("XXX") == 10000
    assert decode_currency_amount(150000, " jpy ") == Decimal("1500")
    assert decode_currency_amount(None, "USD") == 0


def test_status_tables_default_unknown_codes():
    assert decode_status_code("OP", ORDER_STATUS) is OrderStatus.ACTIVE
    assert decode_status_code("cl", ORDER_STATUS) is OrderStatus.COMPLETED
    assert decode_status_code("CA", ORDER_STATUS) is OrderStatus.CANCELLED
    assert decode_status_code("HO", ORDER_STATUS) is OrderStatus.HOLD
    assert decode_status_code("O7", ORDER_STATUS) is OrderStatus.ACTIVE
    assert decode_status_code(None, ORDER_STATUS) is OrderStatus.ACTIVE

    assert decode_status_code("999", LINE_STATUS) is LineStatus.CLOSED
    assert decode_status_code(550, LINE_STATUS) is LineStatus.HOLD
    assert decode_status_code(" 520 ", LINE_STATUS) is LineStatus.ACTIVE
    assert decode_status_code("400", LINE_STATUS) is LineStatus.ACTIVE


def test_text_and_int_decoders_never_raise():
    assert decode_text(None) == ""
    assert decode_text("  M30 ") == "M30"
    assert decode_text(1001.0) == "1001"
    assert decode_text(b"ABC") == "ABC"
    assert decode_text("   ", "EA") == "EA"
    assert decode_int("12x") == 0
    assert decode_int("42") == 42
    assert decode_int(float("nan")) == 0


def test_format_quantity_uses_count_units():
    assert format_quantity(123456, "EA") == "1,235"
    assert format_quantity(123456, "KG") == "1,234.56"
    assert format_quantity(None, None) == "0"
    assert format_quantity(-250, "LB") == "-2.50"
