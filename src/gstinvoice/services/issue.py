from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gstinvoice.config import get_rendered_dir, load_company, load_customer
from gstinvoice.models.invoice import Invoice
from gstinvoice.models.quotation import Quotation
from gstinvoice.services.gst_split import has_tax_amounts, price_invoice
from gstinvoice.services.html_builder import render_invoice_html, render_quotation_html
from gstinvoice.services.tax_summary import TaxSummary, compute_summary
from gstinvoice.utils.coerce import as_list, as_mapping
from gstinvoice.utils.formatters import format_fixed2
from gstinvoice.utils.registry import add_document
from gstinvoice.utils.sequence import next_number, peek_next

logger = logging.getLogger(__name__)


@dataclass
class PreparedDocument:
    """A rendered document plus the data needed to save and register it."""

    kind: str
    number: str
    data: dict[str, Any]
    html: str
    customer_name: str = ""
    document_date: str | None = None
    grand_total: str | None = None
    summary: TaxSummary | None = None


def load_document(source: Path | str | Mapping[str, Any]) -> dict[str, Any]:
    """Load an invoice/quotation document from a YAML or JSON file, or copy a mapping."""
    if isinstance(source, Mapping):
        return dict(source)
    path = Path(source)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, Mapping):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return dict(data)


def _reserve_number(kind: str, dry_run: bool) -> str:
    return peek_next(kind) if dry_run else next_number(kind)


def _date_text(value: Any) -> str | None:
    return None if value is None else str(value)


def prepare_invoice(
    source: Path | str | Mapping[str, Any],
    customer: str | None = None,
    dry_run: bool = False,
) -> PreparedDocument:
    """Merge profiles, number, price and render an invoice.

    The company profile fills ``seller`` and ``company`` when the document has
    none; ``customer`` names a saved customer used as ``buyer``. With
    ``dry_run`` the next number is previewed but not reserved.
    """
    data = load_document(source)
    company = load_company()
    if not as_mapping(data.get("seller")):
        data["seller"] = company
    if not (as_mapping(data.get("companyId")) or as_mapping(data.get("company"))):
        data["company"] = company
    if customer:
        data["buyer"] = load_customer(customer)

    if not data.get("invoiceNo"):
        data["invoiceNo"] = _reserve_number("invoice", dry_run)

    items = [i for i in as_list(data.get("items")) if isinstance(i, Mapping)]
    if any(not has_tax_amounts(i) for i in items):
        data = price_invoice(data)

    invoice = Invoice.from_dict(data)
    summary = compute_summary(invoice)
    logger.info("Rendering invoice %s (%d items)", invoice.invoice_no, len(invoice.items))
    return PreparedDocument(
        kind="invoice",
        number=invoice.invoice_no,
        data=data,
        html=render_invoice_html(invoice),
        customer_name=invoice.buyer.name,
        document_date=_date_text(data.get("invoiceDate")),
        grand_total=format_fixed2(summary.totals.rounded),
        summary=summary,
    )


def prepare_quotation(
    source: Path | str | Mapping[str, Any],
    customer: str | None = None,
    dry_run: bool = False,
) -> PreparedDocument:
    """Merge profiles, number and render a quotation."""
    data = load_document(source)
    if not (as_mapping(data.get("companyId")) or as_mapping(data.get("company"))):
        data["company"] = load_company()
    if customer:
        data["customer"] = load_customer(customer)
    if not data.get("quotationNo"):
        data["quotationNo"] = _reserve_number("quotation", dry_run)

    quotation = Quotation.from_dict(data)
    logger.info("Rendering quotation %s (%d items)", quotation.quotation_no, len(quotation.items))
    return PreparedDocument(
        kind="quotation",
        number=quotation.quotation_no,
        data=data,
        html=render_quotation_html(quotation),
        customer_name=quotation.customer.name,
        document_date=_date_text(data.get("date")),
        grand_total=format_fixed2(quotation.grand_total),
    )


def _safe_filename(number: str) -> str:
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in number)


def save_html(prepared: PreparedDocument, out_path: Path | str | None = None) -> str:
    """Write the rendered HTML and register the document.

    A registry failure is logged and does not discard the written file.
    """
    path = Path(out_path) if out_path else get_rendered_dir() / f"{_safe_filename(prepared.number)}.html"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(prepared.html, encoding="utf-8")

    try:
        add_document(
            prepared.number,
            kind=prepared.kind,
            customer=prepared.customer_name or None,
            document_date=prepared.document_date,
            grand_total=prepared.grand_total,
            path=str(path),
        )
    except Exception:
        logger.warning("Failed to register %s %s", prepared.kind, prepared.number, exc_info=True)

    return str(path)
