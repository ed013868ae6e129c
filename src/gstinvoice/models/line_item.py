from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from gstinvoice.utils.coerce import ZERO, first_non_empty, optional_number, to_number_or_default


@dataclass(frozen=True)
class LineItem:
    """One billable row on an invoice."""

    description: str = ""
    hsn: str = ""
    unit: str = ""
    quantity: Decimal = ZERO
    rate: Decimal = ZERO
    discount: Decimal = ZERO
    declared_taxable: Decimal | None = None  # taxableValue override
    cgst_rate: Decimal = ZERO
    sgst_rate: Decimal = ZERO
    igst_rate: Decimal = ZERO
    gst_rate: Decimal = ZERO
    cgst_amount: Decimal = ZERO
    sgst_amount: Decimal = ZERO
    igst_amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> LineItem:
        """Create a LineItem from an API/YAML mapping; bad numbers become 0."""
        return cls(
            description=first_non_empty(d, "description", "name"),
            hsn=first_non_empty(d, "hsn", "sac"),
            unit=first_non_empty(d, "unit", "per"),
            quantity=to_number_or_default(d.get("quantity")),
            rate=to_number_or_default(d.get("rate")),
            discount=to_number_or_default(d.get("discount")),
            declared_taxable=optional_number(d.get("taxableValue")),
            cgst_rate=to_number_or_default(d.get("cgstRate")),
            sgst_rate=to_number_or_default(d.get("sgstRate")),
            igst_rate=to_number_or_default(d.get("igstRate")),
            gst_rate=to_number_or_default(d.get("gstRate")),
            cgst_amount=to_number_or_default(d.get("cgstAmount")),
            sgst_amount=to_number_or_default(d.get("sgstAmount")),
            igst_amount=to_number_or_default(d.get("igstAmount")),
        )

    @property
    def taxable_value(self) -> Decimal:
        """Declared taxable value, else quantity * rate - discount floored at 0."""
        if self.declared_taxable is not None:
            return self.declared_taxable
        return max(ZERO, self.quantity * self.rate - self.discount)

    @property
    def effective_rate(self) -> Decimal:
        """Combined GST rate; gstRate is used when the split rates sum to 0."""
        combined = self.cgst_rate + self.sgst_rate + self.igst_rate
        return combined if combined != 0 else self.gst_rate

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount
