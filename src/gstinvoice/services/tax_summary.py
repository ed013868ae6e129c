"""GST tax summary: per-rate buckets and invoice-level totals.

Invoice-level declared totals (``taxableValue``, ``totalTax``, ``totalCgst``,
``totalSgst``, ``totalIgst``, ``grandTotal``) take precedence over the sums
derived from line items, so an invoice can lock its totals independently of
line-item drift.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from gstinvoice.models.invoice import Invoice
from gstinvoice.utils.coerce import ZERO
from gstinvoice.utils.formatters import quantize2, quantize_half_up


@dataclass
class TaxRateBucket:
    rate: Decimal
    taxable: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    def to_dict(self) -> dict[str, float]:
        return {
            "rate": float(self.rate),
            "taxable": float(self.taxable),
            "cgst": float(self.cgst),
            "sgst": float(self.sgst),
            "igst": float(self.igst),
        }


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    tax_total: Decimal = ZERO
    grand: Decimal = ZERO
    rounded: Decimal = ZERO
    round_off: Decimal = ZERO

    def to_dict(self) -> dict[str, float]:
        return {
            "subtotal": float(self.subtotal),
            "totalCgst": float(self.total_cgst),
            "totalSgst": float(self.total_sgst),
            "totalIgst": float(self.total_igst),
            "taxTotal": float(self.tax_total),
            "grand": float(self.grand),
            "rounded": float(self.rounded),
            "roundOff": float(self.round_off),
        }


@dataclass(frozen=True)
class TaxSummary:
    rows: list[TaxRateBucket] = field(default_factory=list)
    totals: InvoiceTotals = field(default_factory=InvoiceTotals)

    @property
    def show_igst(self) -> bool:
        """Inter-state layout is used when any IGST was charged."""
        return self.totals.total_igst > 0

    def to_dict(self) -> dict[str, Any]:
        return {"rows": [r.to_dict() for r in self.rows], "totals": self.totals.to_dict()}


def round_half_up(value: Decimal) -> Decimal:
    """Round to a whole number, halves away from zero."""
    return quantize_half_up(value, Decimal(1))


def _pick(declared: Decimal | None, derived: Decimal) -> Decimal:
    return declared if declared is not None else derived


def compute_summary(invoice: Invoice | Mapping[str, Any] | None) -> TaxSummary:
    """Aggregate line items into per-rate rows and compute invoice totals.

    Accepts an Invoice or any invoice-shaped mapping. Never raises on bad
    data: non-numeric values count as 0. Rows are sorted by ascending rate.
    """
    if not isinstance(invoice, Invoice):
        invoice = Invoice.from_dict(invoice)

    buckets: dict[Decimal, TaxRateBucket] = {}
    item_cgst = item_sgst = item_igst = ZERO
    for item in invoice.items:
        rate = item.effective_rate
        bucket = buckets.get(rate)
        if bucket is None:
            bucket = buckets[rate] = TaxRateBucket(rate=rate)
        bucket.taxable += item.taxable_value
        bucket.cgst += item.cgst_amount
        bucket.sgst += item.sgst_amount
        bucket.igst += item.igst_amount
        item_cgst += item.cgst_amount
        item_sgst += item.sgst_amount
        item_igst += item.igst_amount

    rows = sorted(buckets.values(), key=lambda b: b.rate)

    ov = invoice.overrides
    subtotal = _pick(ov.taxable_value, sum((r.taxable for r in rows), ZERO))
    total_cgst = _pick(ov.total_cgst, item_cgst)
    total_sgst = _pick(ov.total_sgst, item_sgst)
    total_igst = _pick(ov.total_igst, item_igst)
    tax_total = _pick(ov.total_tax, total_cgst + total_sgst + total_igst)
    grand = _pick(ov.grand_total, subtotal + tax_total)
    rounded = round_half_up(grand)

    totals = InvoiceTotals(
        subtotal=subtotal,
        total_cgst=total_cgst,
        total_sgst=total_sgst,
        total_igst=total_igst,
        tax_total=tax_total,
        grand=grand,
        rounded=rounded,
        round_off=quantize2(rounded - grand),
    )
    return TaxSummary(rows=rows, totals=totals)
