from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from gstinvoice.config import INVOICE_TYPES

_GSTIN = re.compile(r"\d{2}[A-Z]{5}\d{4}[A-Z][1-9A-Z]Z[0-9A-Z]")

# 01-38 are states/UTs, 97 is "Other Territory", 99 is "Centre Jurisdiction"
_VALID_STATE_CODES = frozenset({f"{n:02d}" for n in range(1, 39)} | {"97", "99"})


def validate_gstin(value: str) -> str:
    """Validate a 15-character GSTIN (state code + PAN + entity + Z + check).

    Returns the value upper-cased. Raises ValueError when malformed.
    """
    gstin = value.strip().upper()
    if not _GSTIN.fullmatch(gstin):
        raise ValueError(f"Invalid GSTIN: '{value}'")
    validate_state_code(gstin[:2])
    return gstin


def validate_state_code(value: str) -> str:
    """Validate a two-digit GST state code."""
    code = str(value).strip().zfill(2)
    if code not in _VALID_STATE_CODES:
        raise ValueError(f"Invalid state code: '{value}'")
    return code


def validate_gst_rate(value: str) -> str:
    """Validate and normalize a GST rate percentage (0.00-100.00)."""
    try:
        d = Decimal(str(value))
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"Invalid GST rate: '{value}'") from None
    if d < 0 or d > 100:
        raise ValueError("GST rate must be between 0.00 and 100.00")
    return f"{d:.2f}"


def validate_date(value: str | date) -> str:
    """Validate an ISO date (YYYY-MM-DD, optionally with a time part)."""
    if isinstance(value, date):
        return value.isoformat()
    try:
        datetime.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD.") from None
    return str(value)


def validate_invoice_type(value: str) -> str:
    if value not in INVOICE_TYPES:
        raise ValueError(f"Invalid invoice type: '{value}'")
    return value
