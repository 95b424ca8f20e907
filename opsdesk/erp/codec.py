"""Decoders for packed JDE column values.

Everything here is pure: no I/O and no exceptions on bad input. Unreadable
values fall back to the documented sentinel of each decoder so a single
damaged legacy row never aborts an extraction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping

# Two-digit style year offsets below the pivot belong to the 2000s.
CENTURY_PIVOT = 50

# Implicit divisor per currency; zero-decimal currencies are stored x100,
# everything else x10000.
DEFAULT_CURRENCY_SCALE = 10000
CURRENCY_SCALES: Mapping[str, int] = {
    "USD": 10000,
    "EUR": 10000,
    "GBP": 10000,
    "SGD": 10000,
    "CNY": 10000,
    "VND": 100,
    "JPY": 100,
    "KRW": 100,
}

# Fixed scales used by specific columns.
HEADER_TOTAL_SCALE = 100   # PHOTOT, regardless of currency
LINE_NUMBER_SCALE = 1000   # PDLNID / PRLNID / SDLNID
QUANTITY_SCALE = 100       # PDUORG, PDUREC, SDUORG, ...
EXTENDED_PRICE_SCALE = 100  # PDAEXP
FOREIGN_UNIT_COST_SCALE = 10000  # PDFRRC

DEFAULT_UOM = "EA"
DEFAULT_CURRENCY = "USD"

# Count-type units display without decimals.
NON_DECIMAL_UOMS = frozenset({
    "EA", "PCS", "UNT", "SET", "BOX", "CASE", "PACK", "BAG", "ROLL",
    "BOTTLE", "CAN", "JAR", "TUBE", "BUNDLE", "PALLET", "CONTAINER",
    "DRUM", "BARREL", "COIL", "REEL", "SPOOL", "SHEET", "PANEL", "PLATE",
})


class OrderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    HOLD = "HOLD"


class LineStatus(str, Enum):
    ACTIVE = "A"
    CLOSED = "C"
    HOLD = "H"


@dataclass(frozen=True)
class StatusTable:
    """Closed lookup from a short legacy code to a domain status."""

    codes: Mapping[str, Enum]
    default: Enum
    name: str = field(default="status")

    def lookup(self, raw) -> Enum:
        key = decode_text(raw).upper()
        return self.codes.get(key, self.default)


# Header status is derived from the order type code (PHDCTO).
ORDER_STATUS = StatusTable(
    codes={
        "OP": OrderStatus.ACTIVE,
        "CL": OrderStatus.COMPLETED,
        "CA": OrderStatus.CANCELLED,
        "HO": OrderStatus.HOLD,
    },
    default=OrderStatus.ACTIVE,
    name="order",
)

# Line status from last/next status codes (PDLTTR, PDNXTR, SDNXTR).
LINE_STATUS = StatusTable(
    codes={
        "520": LineStatus.ACTIVE,
        "999": LineStatus.CLOSED,
        "550": LineStatus.HOLD,
    },
    default=LineStatus.ACTIVE,
    name="line",
)


def decode_text(raw, default: str = "") -> str:
    if raw is None:
        return default
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, Decimal) and raw == raw.to_integral_value():
        raw = int(raw)
    text = str(raw).strip()
    return text if text else default


def decode_decimal(raw, default: Decimal | None = Decimal(0)) -> Decimal | None:
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else default
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return default
    return value if value.is_finite() else default


def decode_int(raw, default: int = 0) -> int:
    value = decode_decimal(raw, Decimal(default))
    return int(value)


def decode_non_negative_int(raw) -> int:
    return max(0, decode_int(raw))


def decode_scaled(raw, scale: int) -> Decimal:
    """Legacy integer divided by a fixed implicit factor."""
    return decode_decimal(raw) / Decimal(scale)


def decode_julian_date(raw, *, today: date | None = None) -> date:
    """Decode a ``YYYDDD`` style value where the leading digits are a year offset.

    ``year = raw // 1000``, ``day = raw % 1000``; offsets at or above the pivot
    are 19xx (and 124 -> 2024), below it 20xx. Day 1 is January 1st. Missing,
    zero, negative or non-numeric input returns ``today`` (current date by
    default) as a sentinel.
    """
    sentinel = today or date.today()
    if raw is None or isinstance(raw, bool):
        return sentinel
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return sentinel
        number = decode_decimal(text, default=None)
        if number is None:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return sentinel
        raw = number

    number = decode_int(raw)
    if number <= 0:
        return sentinel

    year, day_of_year = divmod(number, 1000)
    full_year = year + 1900 if year >= CENTURY_PIVOT else year + 2000
    try:
        return date(full_year, 1, 1) + timedelta(days=day_of_year - 1)
    except (ValueError, OverflowError):
        return sentinel


def decode_optional_julian_date(raw, *, today: date | None = None) -> date | None:
    """Like decode_julian_date, but empty columns stay None (promise dates, count dates)."""
    if raw is None:
        return None
    if not isinstance(raw, date):
        text = decode_text(raw)
        number = decode_decimal(text, default=None)
        if not text or (number is not None and number <= 0):
            return None
    return decode_julian_date(raw, today=today)


def currency_scale(currency_code, scales: Mapping[str, int] = CURRENCY_SCALES) -> int:
    code = decode_text(currency_code, DEFAULT_CURRENCY).upper()
    return scales.get(code, DEFAULT_CURRENCY_SCALE)


def decode_currency_amount(raw, currency_code, *, scales: Mapping[str, int] = CURRENCY_SCALES) -> Decimal:
    return decode_decimal(raw) / Decimal(currency_scale(currency_code, scales))


def decode_status_code(raw, table: StatusTable) -> Enum:
    return table.lookup(raw)


def format_quantity(value, uom) -> str:
    """Display form of a raw legacy quantity: /100, no decimals for count units."""
    scaled = decode_decimal(value) / Decimal(QUANTITY_SCALE)
    unit = decode_text(uom, DEFAULT_UOM).upper()
    if unit in NON_DECIMAL_UOMS:
        return f"{scaled.quantize(Decimal(1)):,}"
    return f"{scaled.quantize(Decimal('0.01')):,}"


__all__ = [
    "CENTURY_PIVOT",
    "CURRENCY_SCALES",
    "DEFAULT_CURRENCY_SCALE",
    "LINE_STATUS",
    "LineStatus",
    "ORDER_STATUS",
    "OrderStatus",
    "StatusTable",
    "currency_scale",
    "decode_currency_amount",
    "decode_decimal",
    "decode_int",
    "decode_julian_date",
    "decode_non_negative_int",
    "decode_optional_julian_date",
    "decode_scaled",
    "decode_status_code",
    "decode_text",
    "format_quantity",
]
