from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal(0)

# exponents beyond this are treated as garbage, not as amounts
MAX_ADJUSTED_EXPONENT = 100


def to_number_or_default(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce an arbitrary input value to a finite Decimal.

    None, empty strings, booleans, non-numeric strings, NaN/Infinity and
    magnitudes beyond 10^100 all fall back to ``default``. Floats go through
    ``str`` so 0.1 stays 0.1.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return default
        try:
            d = Decimal(text)
        except InvalidOperation:
            return default
    else:
        return default
    if not is_usable_number(d):
        return default
    return d


def is_usable_number(d: Decimal) -> bool:
    return d.is_finite() and abs(d.adjusted()) <= MAX_ADJUSTED_EXPONENT


def optional_number(value: Any) -> Decimal | None:
    """Like to_number_or_default, but keep None (absent) distinct from 0."""
    if value is None:
        return None
    return to_number_or_default(value)


def first_non_empty(source: Mapping[str, Any] | None, *keys: str, default: str = "") -> str:
    """Return the first candidate field of ``source`` holding a non-empty value.

    Candidates are tried in the given order; the value is returned as a string.
    """
    if not source:
        return default
    for key in keys:
        value = source.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return default


def as_mapping(value: Any) -> Mapping[str, Any]:
    """Return ``value`` if it is a mapping, else an empty dict."""
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_strings(values: Iterable[Any]) -> list[str]:
    return [str(v).strip() for v in values if v is not None and str(v).strip()]
