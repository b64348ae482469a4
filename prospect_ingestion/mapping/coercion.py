"""
Tolerant cell parsers: string cell -> declared field type.

Every parser returns None instead of raising when a cell cannot be parsed;
an unparseable optional value is not a validation failure. ZERO I/O.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from prospect_config.schema import FieldType

# Month-precision and year-precision forms seen in contact exports
_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})[\s/\-](\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def is_empty(value: str | None, empty_tokens: tuple[str, ...] = ("-",)) -> bool:
    """Empty string, whitespace, or a sentinel empty token."""
    if value is None:
        return True
    s = value.strip()
    return not s or s in empty_tokens


def parse_text(value: str) -> str | None:
    s = value.strip()
    return s or None


def _to_decimal(value: str) -> Decimal | None:
    s = value.strip().replace("_", "")
    if not s:
        return None
    try:
        d = Decimal(s)
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def parse_integer(value: str) -> int | None:
    """Integral numbers only ("350", "350.0") within the signed 64-bit range; anything else is None."""
    d = _to_decimal(value)
    if d is None or d.adjusted() > 18 or d != d.to_integral_value():
        return None
    n = int(d)
    return n if _INT64_MIN <= n <= _INT64_MAX else None


def parse_number(value: str) -> float | None:
    d = _to_decimal(value)
    if d is None:
        return None
    f = float(d)
    return f if math.isfinite(f) else None


def parse_list(value: str, delimiter: str = ";", empty_tokens: tuple[str, ...] = ("-",)) -> tuple[str, ...]:
    """Split on the secondary delimiter, trim, drop empty and sentinel items."""
    items = (item.strip() for item in value.split(delimiter))
    return tuple(item for item in items if item and item not in empty_tokens)


def _first_of(year: int, month: int) -> date | None:
    try:
        return date(year, month, 1)
    except ValueError:
        return None


def parse_date(value: str) -> date | None:
    """
    Tolerant date parser.

    Month/year forms ("01 2024", "01/2024", "01-2024") map to the first of
    the month, a bare year to January 1st. Full dates accept ISO, US and a
    few written-month forms. Unparseable input yields None.
    """
    s = value.strip().replace(",", " ")
    s = " ".join(s.split())
    if not s:
        return None

    m = _MONTH_YEAR_RE.match(s)
    if m:
        return _first_of(int(m.group(2)), int(m.group(1)))

    m = _YEAR_RE.match(s)
    if m:
        return _first_of(int(m.group(1)), 1)

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def coerce_cell(
    value: str,
    field_type: FieldType,
    list_delimiter: str = ";",
    empty_tokens: tuple[str, ...] = ("-",),
) -> Any:
    """Parse a non-empty cell according to its declared type."""
    if field_type == FieldType.LIST:
        return parse_list(value, list_delimiter, empty_tokens)
    parser = PARSERS[field_type]
    return parser(value)


PARSERS: dict[FieldType, Callable[[str], Any]] = {
    FieldType.STRING: parse_text,
    FieldType.INTEGER: parse_integer,
    FieldType.NUMBER: parse_number,
    FieldType.LIST: parse_list,
    FieldType.DATE: parse_date,
}
