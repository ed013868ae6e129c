from __future__ import annotations

from decimal import Decimal

from gstinvoice.utils.coerce import as_list, as_mapping, first_non_empty, optional_number, to_number_or_default


class TestToNumberOrDefault:
    def test_numbers(self):
        assert to_number_or_default(5) == Decimal(5)
        assert to_number_or_default(0.1) == Decimal("0.1")
        assert to_number_or_default(Decimal("2.50")) == Decimal("2.50")

    def test_strings(self):
        assert to_number_or_default("18") == Decimal(18)
        assert to_number_or_default(" 1,25,000.50 ") == Decimal("125000.50")

    def test_bad_values_fall_back(self):
        for bad in (None, "", "  ", "abc", float("nan"), float("inf"), True, [1], {"a": 1}):
            assert to_number_or_default(bad) == 0

    def test_custom_default(self):
        assert to_number_or_default(None, Decimal(7)) == 7


def test_optional_number_keeps_none():
    assert optional_number(None) is None
    assert optional_number("x") == 0
    assert optional_number(12.5) == Decimal("12.5")


class TestFirstNonEmpty:
    def test_order_of_candidates(self):
        d = {"accountNo": "222", "accountNumber": "111"}
        assert first_non_empty(d, "accountNumber", "accountNo") == "111"

    def test_skips_blank_and_none(self):
        d = {"description": "  ", "name": "Bottle"}
        assert first_non_empty(d, "description", "name") == "Bottle"
        assert first_non_empty({"a": None}, "a", default="—") == "—"

    def test_missing_source(self):
        assert first_non_empty(None, "a") == ""

    def test_non_string_values(self):
        assert first_non_empty({"pinCode": 411001}, "pinCode") == "411001"


def test_shape_helpers():
    assert as_mapping(None) == {}
    assert as_mapping("x") == {}
    assert as_list({"a": 1}) == []
    assert as_list((1, 2)) == [1, 2]


def test_magnitude_bounds():
    assert to_number_or_default("1e100") == Decimal("1e100")
    assert to_number_or_default("1e101") == 0
    assert to_number_or_default(10**200) == 0
    assert to_number_or_default("1e-200", Decimal(5)) == 5
