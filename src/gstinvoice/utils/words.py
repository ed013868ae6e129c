"""Indian-scale amount in words (crore / lakh / thousand).

Only whole rupees are spelled; paise are rounded away before conversion.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from gstinvoice.services.exceptions import AmountInWordsError
from gstinvoice.utils.coerce import to_number_or_default
from gstinvoice.utils.formatters import quantize_half_up

ONES = (
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
)
TENS = ("", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety")

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000

# one crore crore; the crore count itself must stay below a crore
WORDS_LIMIT = 10**14


def _two(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens, units = divmod(n, 10)
    return f"{TENS[tens]} {ONES[units]}" if units else TENS[tens]


def _three(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    parts = []
    if hundreds:
        parts.append(f"{ONES[hundreds]} Hundred")
    if rest:
        parts.append(_two(rest))
    return " ".join(parts)


def _indian(n: int) -> str:
    """Spell 0 < n < 10^14 using crore, lakh, thousand segments."""
    crore, n = divmod(n, CRORE)
    lakh, n = divmod(n, LAKH)
    thousand, n = divmod(n, THOUSAND)

    segments = []
    if crore:
        # crore counts above 999 are spelled in the Indian scale too
        words = _three(crore) if crore < 1000 else _indian(crore)
        segments.append(f"{words} Crore")
    if lakh:
        segments.append(f"{_three(lakh)} Lakh")
    if thousand:
        segments.append(f"{_three(thousand)} Thousand")
    if n:
        segments.append(_three(n))
    return " ".join(segments)


def round_rupees(amount: Any) -> int:
    """Round an amount half-up to whole rupees."""
    d = to_number_or_default(amount)
    return int(quantize_half_up(d, Decimal(1)))


def amount_in_words_inr(amount: Any) -> str:
    """Convert a rupee amount to words, e.g. 1234567 ->
    'Twelve Lakh Thirty Four Thousand Five Hundred Sixty Seven Rupees Only'.

    Raises AmountInWordsError for negative amounts and amounts of 10^14 or more.
    """
    n = round_rupees(amount)
    if n == 0:
        return "Zero Rupees Only"
    if n < 0:
        raise AmountInWordsError(f"Cannot spell a negative amount: {n}", amount=n)
    if n >= WORDS_LIMIT:
        raise AmountInWordsError(f"Amount too large to spell: {n}", amount=n)
    return f"{_indian(n)} Rupees Only"
