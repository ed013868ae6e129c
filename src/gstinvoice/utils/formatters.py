from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from gstinvoice.config import CURRENCY_SYMBOL, IST, PLACEHOLDER
from gstinvoice.utils.coerce import to_number_or_default

CENT = Decimal("0.01")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def quantize_half_up(value: Decimal, exp: Decimal) -> Decimal:
    """Quantize half-up, widening precision so large amounts never trap."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(exp, rounding=ROUND_HALF_UP)


def quantize2(value: Decimal) -> Decimal:
    """Round half-up to 2 places; negative zero comes back as 0.00."""
    q = quantize_half_up(value, CENT)
    return q.copy_abs() if q == 0 else q


def format_indian_number(value: Any) -> str:
    """Group the integer part Indian style: last 3 digits, then pairs (12,34,567)."""
    d = to_number_or_default(value)
    text = format(d, "f")
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    whole, _, frac = text.partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join([*groups, tail])
    return sign + whole + (f".{frac}" if frac else "")


def format_currency(amount: Any, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount as ₹X,XX,XXX.XX (sign before the symbol)."""
    d = quantize2(to_number_or_default(amount))
    grouped = format_indian_number(d.copy_abs())
    sign = "-" if d < 0 else ""
    return f"{sign}{symbol}{grouped}"


def format_fixed2(amount: Any) -> str:
    """Plain two-decimal string for table columns, e.g. 9 -> '9.00'."""
    return f"{quantize2(to_number_or_default(amount)):.2f}"


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(IST)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return _parse_date(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def format_date(value: Any) -> str:
    """Format a date as DD/MM/YYYY; missing or unparseable values give the placeholder."""
    parsed = _parse_date(value)
    if parsed is None:
        return PLACEHOLDER
    return parsed.strftime("%d/%m/%Y")


def format_date_long(value: Any, default: str = "") -> str:
    """Format a date as DD Mon YYYY (quotation letters)."""
    parsed = _parse_date(value)
    if parsed is None:
        return default
    return f"{parsed.day:02d} {_MONTHS[parsed.month - 1]} {parsed.year}"
