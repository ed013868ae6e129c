"""Line pricing: split GST into CGST + SGST (intra-state) or IGST (inter-state)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from gstinvoice.models.line_item import LineItem
from gstinvoice.models.party import Party
from gstinvoice.utils.coerce import ZERO, as_list, as_mapping, to_number_or_default
from gstinvoice.utils.formatters import quantize2

logger = logging.getLogger(__name__)

_AMOUNT_KEYS = ("cgstAmount", "sgstAmount", "igstAmount")


def is_inter_state(seller_state_code: str, buyer_state_code: str) -> bool:
    """Supply is inter-state only when both state codes are known and differ."""
    if not seller_state_code or not buyer_state_code:
        return False
    return seller_state_code != buyer_state_code


def has_tax_amounts(item: Mapping[str, Any]) -> bool:
    return any(item.get(k) is not None for k in _AMOUNT_KEYS)


def price_item(item: Mapping[str, Any], seller_state_code: str, buyer_state_code: str) -> dict[str, Any]:
    """Return a copy of ``item`` with taxable value, GST split and total filled in."""
    qty = to_number_or_default(item.get("quantity"))
    rate = to_number_or_default(item.get("rate"))
    discount = to_number_or_default(item.get("discount"))
    gst_rate = to_number_or_default(item.get("gstRate"))

    taxable = quantize2(max(ZERO, qty * rate - discount))
    priced = dict(item)
    priced["taxableValue"] = float(taxable)

    if is_inter_state(seller_state_code, buyer_state_code):
        igst = quantize2(taxable * gst_rate / 100)
        cgst = sgst = ZERO
        priced.update(cgstRate=0, sgstRate=0, igstRate=float(gst_rate))
    else:
        half_rate = gst_rate / 2
        cgst = sgst = quantize2(taxable * gst_rate / 200)
        igst = ZERO
        priced.update(cgstRate=float(half_rate), sgstRate=float(half_rate), igstRate=0)

    priced.update(
        cgstAmount=float(cgst),
        sgstAmount=float(sgst),
        igstAmount=float(igst),
        total=float(taxable + cgst + sgst + igst),
    )
    return priced


def _sum(items: list[dict[str, Any]], key: str) -> Decimal:
    return sum((to_number_or_default(i.get(key)) for i in items), ZERO)


def price_invoice(invoice: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new invoice mapping with priced items and locked totals.

    Items that already carry tax amounts are kept as they are, and totals
    already declared on the invoice are not replaced. The input mapping is
    not modified.
    """
    seller = Party.from_dict(as_mapping(invoice.get("seller")))
    buyer = Party.from_dict(as_mapping(invoice.get("buyer")) or as_mapping(invoice.get("customer")))
    seller_code = seller.resolved_state_code
    buyer_code = buyer.resolved_state_code
    if not seller_code or not buyer_code:
        logger.info("State code missing (seller=%r, buyer=%r); pricing as intra-state", seller_code, buyer_code)

    items: list[dict[str, Any]] = []
    for raw in as_list(invoice.get("items")):
        if not isinstance(raw, Mapping):
            continue
        if has_tax_amounts(raw):
            items.append(dict(raw))
        else:
            items.append(price_item(raw, seller_code, buyer_code))

    subtotal = sum((LineItem.from_dict(i).taxable_value for i in items), ZERO)
    total_cgst = _sum(items, "cgstAmount")
    total_sgst = _sum(items, "sgstAmount")
    total_igst = _sum(items, "igstAmount")
    total_tax = total_cgst + total_sgst + total_igst

    derived = {
        "taxableValue": float(subtotal),
        "totalCgst": float(total_cgst),
        "totalSgst": float(total_sgst),
        "totalIgst": float(total_igst),
        "totalTax": float(total_tax),
        "grandTotal": float(subtotal + total_tax),
    }
    priced = dict(invoice)
    priced["items"] = items
    # totals declared on the invoice itself win over derived ones
    for key, value in derived.items():
        if priced.get(key) is None:
            priced[key] = value
    return priced
