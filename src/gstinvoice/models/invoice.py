from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from gstinvoice.config import DEFAULT_INVOICE_TYPE
from gstinvoice.models.line_item import LineItem
from gstinvoice.models.party import Party
from gstinvoice.utils.coerce import as_list, as_mapping, first_non_empty, optional_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceOverrides:
    """Invoice-level totals that lock the summary regardless of line items."""

    taxable_value: Decimal | None = None
    total_tax: Decimal | None = None
    total_cgst: Decimal | None = None
    total_sgst: Decimal | None = None
    total_igst: Decimal | None = None
    grand_total: Decimal | None = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> InvoiceOverrides:
        return cls(
            taxable_value=optional_number(d.get("taxableValue")),
            total_tax=optional_number(d.get("totalTax")),
            total_cgst=optional_number(d.get("totalCgst")),
            total_sgst=optional_number(d.get("totalSgst")),
            total_igst=optional_number(d.get("totalIgst")),
            grand_total=optional_number(d.get("grandTotal")),
        )


@dataclass(frozen=True)
class Invoice:
    invoice_no: str = ""
    invoice_type: str = DEFAULT_INVOICE_TYPE
    invoice_date: Any = None  # date, datetime or ISO string; formatted leniently
    po_no: str = ""
    place_of_supply: str = ""
    place_of_delivery: str = ""
    notes: str = ""
    seller: Party = field(default_factory=Party)
    buyer: Party = field(default_factory=Party)
    ship_to: Party = field(default_factory=Party)
    company: Party = field(default_factory=Party)
    items: tuple[LineItem, ...] = ()
    overrides: InvoiceOverrides = field(default_factory=InvoiceOverrides)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> Invoice:
        """Create an Invoice from an invoice-shaped mapping.

        ``buyer`` falls back to ``customer`` and ``companyId`` to ``company``;
        a non-list ``items`` is treated as empty and non-mapping items are skipped.
        """
        d = as_mapping(d)
        items = []
        for idx, raw in enumerate(as_list(d.get("items"))):
            if not isinstance(raw, Mapping):
                logger.warning("Skipping item %d: expected a mapping, got %s", idx + 1, type(raw).__name__)
                continue
            items.append(LineItem.from_dict(raw))

        buyer = as_mapping(d.get("buyer")) or as_mapping(d.get("customer"))
        company = as_mapping(d.get("companyId")) or as_mapping(d.get("company"))

        return cls(
            invoice_no=first_non_empty(d, "invoiceNo"),
            invoice_type=first_non_empty(d, "invoiceType", default=DEFAULT_INVOICE_TYPE),
            invoice_date=d.get("invoiceDate"),
            po_no=first_non_empty(d, "poNo"),
            place_of_supply=first_non_empty(d, "placeOfSupply"),
            place_of_delivery=first_non_empty(d, "placeOfDelivery"),
            notes=first_non_empty(d, "notes"),
            seller=Party.from_dict(as_mapping(d.get("seller"))),
            buyer=Party.from_dict(buyer),
            ship_to=Party.from_dict(as_mapping(d.get("shipTo"))),
            company=Party.from_dict(company),
            items=tuple(items),
            overrides=InvoiceOverrides.from_dict(d),
        )

    @property
    def company_name(self) -> str:
        return self.company.name or self.seller.name
