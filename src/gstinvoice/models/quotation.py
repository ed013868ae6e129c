from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from gstinvoice.models.party import Party
from gstinvoice.utils.coerce import (
    ZERO,
    as_list,
    as_mapping,
    as_strings,
    first_non_empty,
    is_usable_number,
    to_number_or_default,
)

QTY_KEYS = ("qty", "quantity", "QTY")
PRICE_KEYS = ("price", "rate", "unitPrice", "sellPrice")


def explicit_number(value: Any) -> Decimal | None:
    """Parse ``value`` as a number, or None when it is absent, blank or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return d if is_usable_number(d) else None


def _first_present(columns: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if columns.get(key) is not None:
            return columns[key]
    return None


@dataclass(frozen=True)
class Column:
    key: str
    label: str


DEFAULT_COLUMNS = (Column("rate", "Rate"), Column("total", "Total"))


@dataclass(frozen=True)
class QuotationItem:
    item: str = ""
    columns: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> QuotationItem:
        return cls(item=first_non_empty(d, "item", "name"), columns=dict(as_mapping(d.get("columns"))))

    @property
    def row_total(self) -> Decimal:
        """Explicit ``total`` column when numeric, else qty * price - discount."""
        explicit = explicit_number(self.columns.get("total"))
        if explicit is not None:
            return explicit
        qty = to_number_or_default(_first_present(self.columns, QTY_KEYS))
        price = to_number_or_default(_first_present(self.columns, PRICE_KEYS))
        discount = to_number_or_default(self.columns.get("discount"))
        return qty * price - discount


@dataclass(frozen=True)
class Quotation:
    quotation_no: str = ""
    date: Any = None
    subject: str = ""
    customer: Party = field(default_factory=Party)
    company: Party = field(default_factory=Party)
    columns: tuple[Column, ...] = DEFAULT_COLUMNS
    items: tuple[QuotationItem, ...] = ()
    terms: tuple[str, ...] = ()
    notes: str = ""
    total: Decimal | None = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> Quotation:
        d = as_mapping(d)
        columns = tuple(
            Column(key=first_non_empty(c, "key"), label=first_non_empty(c, "label", "key"))
            for c in as_list(d.get("customColumns"))
            if isinstance(c, Mapping) and first_non_empty(c, "key")
        )
        company = as_mapping(d.get("companyId")) or as_mapping(d.get("company"))
        return cls(
            quotation_no=first_non_empty(d, "quotationNo"),
            date=d.get("date"),
            subject=first_non_empty(d, "subject"),
            customer=Party.from_dict(as_mapping(d.get("customer"))),
            company=Party.from_dict(company),
            columns=columns or DEFAULT_COLUMNS,
            items=tuple(QuotationItem.from_dict(i) for i in as_list(d.get("items")) if isinstance(i, Mapping)),
            terms=tuple(as_strings(as_list(d.get("termsAndConditions")))),
            notes=first_non_empty(d, "notes"),
            total=explicit_number(d.get("total")),
        )

    @property
    def grand_total(self) -> Decimal:
        """Explicit quotation total when numeric, else the sum of row totals."""
        if self.total is not None:
            return self.total
        return sum((it.row_total for it in self.items), ZERO)

    @property
    def has_total_column(self) -> bool:
        return any(c.key == "total" for c in self.columns)

    @property
    def show_total_row(self) -> bool:
        return self.total is not None or self.has_total_column or self.grand_total > 0
