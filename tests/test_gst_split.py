from __future__ import annotations

import pytest

from gstinvoice.services.gst_split import has_tax_amounts, is_inter_state, price_invoice, price_item
from gstinvoice.services.tax_summary import compute_summary

RAW_ITEM = {"description": "Bottle", "quantity": 2, "rate": 100, "gstRate": 18}


@pytest.mark.parametrize(
    ("seller", "buyer", "expected"),
    [("29", "27", True), ("29", "29", False), ("", "27", False), ("29", "", False), ("", "", False)],
)
def test_is_inter_state(seller, buyer, expected):
    assert is_inter_state(seller, buyer) is expected


def test_has_tax_amounts():
    assert has_tax_amounts({"cgstAmount": 0}) is True
    assert has_tax_amounts({"gstRate": 18}) is False


class TestPriceItem:
    def test_intra_state_split(self):
        priced = price_item(RAW_ITEM, "29", "29")
        assert priced["taxableValue"] == 200.0
        assert priced["cgstRate"] == 9.0
        assert priced["sgstRate"] == 9.0
        assert priced["igstRate"] == 0
        assert priced["cgstAmount"] == 18.0
        assert priced["sgstAmount"] == 18.0
        assert priced["igstAmount"] == 0.0
        assert priced["total"] == 236.0

    def test_inter_state_igst(self):
        priced = price_item(RAW_ITEM, "29", "27")
        assert priced["igstRate"] == 18.0
        assert priced["igstAmount"] == 36.0
        assert priced["cgstAmount"] == 0.0
        assert priced["total"] == 236.0

    def test_unknown_state_prices_as_intra(self):
        priced = price_item(RAW_ITEM, "29", "")
        assert priced["igstAmount"] == 0.0
        assert priced["cgstAmount"] == 18.0

    def test_half_paise_rounds_up(self):
        priced = price_item({"quantity": 1, "rate": 10.5, "gstRate": 5}, "29", "29")
        # 10.50 * 2.5% = 0.2625 each
        assert priced["cgstAmount"] == 0.26
        priced = price_item({"quantity": 1, "rate": 1, "gstRate": 1}, "29", "29")
        # 1.00 * 0.5% = 0.005 each
        assert priced["cgstAmount"] == 0.01

    def test_discount(self):
        priced = price_item({"quantity": 1, "rate": 100, "discount": 20, "gstRate": 5}, "29", "27")
        assert priced["taxableValue"] == 80.0
        assert priced["igstAmount"] == 4.0

    def test_input_untouched(self):
        item = dict(RAW_ITEM)
        price_item(item, "29", "27")
        assert item == RAW_ITEM

    def test_keeps_display_fields(self):
        assert price_item(RAW_ITEM, "29", "29")["description"] == "Bottle"


class TestPriceInvoice:
    def test_inter_state_from_gstin(self, seller_dict, buyer_dict):
        priced = price_invoice({"seller": seller_dict, "buyer": buyer_dict, "items": [RAW_ITEM]})
        assert priced["totalIgst"] == 36.0
        assert priced["totalCgst"] == 0.0
        assert priced["grandTotal"] == 236.0

    def test_intra_state_from_gstin_prefix(self, seller_dict, local_buyer_dict):
        priced = price_invoice({"seller": seller_dict, "buyer": local_buyer_dict, "items": [RAW_ITEM]})
        assert priced["totalCgst"] == 18.0
        assert priced["totalSgst"] == 18.0
        assert priced["totalIgst"] == 0.0

    def test_customer_alias(self, seller_dict, buyer_dict):
        priced = price_invoice({"seller": seller_dict, "customer": buyer_dict, "items": [RAW_ITEM]})
        assert priced["totalIgst"] == 36.0

    def test_items_with_amounts_are_kept(self, seller_dict, buyer_dict, single_item):
        priced = price_invoice({"seller": seller_dict, "buyer": buyer_dict, "items": [single_item, RAW_ITEM]})
        assert priced["items"][0] == single_item
        assert priced["totalCgst"] == 18.0
        assert priced["totalIgst"] == 36.0
        assert priced["taxableValue"] == 400.0

    def test_declared_totals_preserved(self, seller_dict, buyer_dict):
        priced = price_invoice(
            {"seller": seller_dict, "buyer": buyer_dict, "items": [RAW_ITEM], "grandTotal": 250}
        )
        assert priced["grandTotal"] == 250
        assert priced["totalIgst"] == 36.0

    def test_does_not_mutate_input(self, seller_dict, buyer_dict):
        invoice = {"seller": seller_dict, "buyer": buyer_dict, "items": [dict(RAW_ITEM)]}
        price_invoice(invoice)
        assert "taxableValue" not in invoice
        assert invoice["items"][0] == RAW_ITEM

    def test_summary_agrees(self, seller_dict, buyer_dict):
        priced = price_invoice({"seller": seller_dict, "buyer": buyer_dict, "items": [RAW_ITEM]})
        totals = compute_summary(priced).totals
        assert totals.rounded == 236
        assert compute_summary(priced).rows[0].igst == 36
