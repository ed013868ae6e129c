"""Static HTML documents for invoices and quotations.

The markup is built as an lxml tree, so every value is escaped on
serialization. The output is meant for an external HTML-to-PDF tool.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from lxml import etree, html

from gstinvoice.config import DECLARATION, DEFAULT_QUOTATION_TERMS, PLACEHOLDER
from gstinvoice.models.invoice import Invoice
from gstinvoice.models.party import Party
from gstinvoice.models.quotation import Quotation, explicit_number
from gstinvoice.services.exceptions import AmountInWordsError
from gstinvoice.services.tax_summary import TaxSummary, compute_summary
from gstinvoice.utils.formatters import format_currency, format_date, format_date_long, format_fixed2
from gstinvoice.utils.words import amount_in_words_inr

logger = logging.getLogger(__name__)

DOCTYPE = "<!DOCTYPE html>"

INVOICE_CSS = """
@page { size: A4; margin: 0; }
* { box-sizing: border-box; }
body { margin: 0; color: #111; font: 11px/1.35 'Roboto', Arial, sans-serif; }
.sheet { position: relative; width: 210mm; min-height: 297mm; padding: 10mm; display: flex; flex-direction: column; }
.bottom { margin-top: auto; }
.hdr { position: relative; text-align: center; margin-bottom: 6mm; }
.hdr h1 { margin: 0 0 2mm; font-weight: 700; }
.hdr .sub { color: #444; }
.hdr .badge { position: absolute; right: 0; top: 0; text-align: right; }
.pill { display: inline-block; padding: 2px 6px; border: 1px solid #bbb; border-radius: 3px; font-weight: 700; color: #666; font-size: 10px; margin-bottom: 2mm; }
.inv { font-size: 23px; font-weight: 800; letter-spacing: .4px; }
.meta { width: 100%; border-collapse: collapse; border-top: 1px solid #dbdbdb; table-layout: fixed; margin-bottom: 6mm; }
.meta td { padding: 3mm 2.5mm; text-align: center; }
.lbl { display: block; text-transform: uppercase; color: #666; font-size: 10px; margin-bottom: 1mm; }
.val { font-weight: 600; }
.twocol { display: grid; grid-template-columns: 1fr 1fr; gap: 6mm; margin-bottom: 6mm; }
.card h4 { margin: 0 0 2mm; text-transform: uppercase; color: #666; font-size: 12px; }
.name { font-size: 15px; font-weight: 700; margin-bottom: 1mm; }
.muted { margin: 5px 0; }
table.items, table.summary { width: 100%; border-collapse: collapse; border: 1px solid #888; }
table.items { table-layout: fixed; margin-bottom: 6mm; }
table.items th, table.items td, table.summary th, table.summary td { border: 1px solid #888; padding: 2.6mm 2.2mm; }
table.items thead th, table.summary thead th, .tfoot { background: #f1f1f1; text-transform: uppercase; font-size: 10px; }
.num { text-align: right; } .ctr { text-align: center; }
.row { border-top: 1px solid #bbb; display: grid; grid-template-columns: 1fr 1fr; gap: 6mm; margin-bottom: 4mm; }
table.summary td { text-align: right; }
.section-head { font-weight: 700; color: #444; text-transform: uppercase; margin: 0 0 2mm; padding-top: 2mm; text-align: center; }
.totals { width: 100%; margin-top: 50px; }
.totals td:last-child { text-align: right; }
.totals tr.grand td { font-weight: 700; font-size: 13px; border-top: 1px solid #bbb; padding-top: 2.2mm; }
.words { border-top: 1px solid #bbb; padding-top: 3mm; margin-bottom: 4mm; font-weight: 700; }
.foot { border-top: 1px solid #bbb; padding-top: 4mm; display: grid; grid-template-columns: 1fr 1fr; gap: 8mm; }
.decl { display: flex; flex-direction: column; gap: 10px; }
.decl-text { font-size: 12px; font-weight: 700; margin: 0; }
.bank-text { font-weight: 500; margin: 1px 0; }
.sign { display: flex; flex-direction: column; align-items: center; justify-content: space-around; min-height: 42mm; }
.for-co { font-weight: 700; text-transform: uppercase; margin-bottom: 12mm; }
.signwrap { text-align: center; width: 100%; }
.sigline { margin: 0 auto 2mm; border-top: 1px solid #bbb; width: 70mm; }
.siglbl { color: #444; }
.end { border-top: 1px solid #e5e7eb; margin-top: 6mm; padding-top: 2mm; display: flex; justify-content: space-between; color: #666; font-size: 10px; }
"""

QUOTATION_CSS = """
@page { size: Letter; }
html, body { margin: 0; font-family: 'Cambria', 'Times New Roman', serif; font-size: 11pt; color: #111; }
.page { padding: 2.2cm 1.27cm 1.27cm; }
.space { margin-top: 18px; } .space1 { margin-top: 16px; }
h1 { font-size: 14pt; margin: 0; color: #1a3c7c; }
.gstin { margin-top: 2px; }
.to-block { line-height: 1.4; width: 60%; }
.subject { font-weight: bold; color: #2b5f9e; }
table { width: 100%; border-collapse: collapse; margin-top: 12px; }
table th, table td { border: 1px solid #000; padding: 15px 8px; text-align: center; }
table th { background: #f2f4f9; }
.terms { margin-top: 50px; }
.terms b { color: #2b5f9e; display: block; margin-bottom: 6px; font-size: 13pt; }
.terms li { margin-bottom: 15px; line-height: 1.35; }
.closing { margin-top: 35px; line-height: 1.4; }
.date { margin-top: 10px; }
"""


def _sub(parent: etree._Element, tag: str, text: str | None = None, cls: str | None = None, **attrs: str) -> etree._Element:
    el = etree.SubElement(parent, tag)
    if cls:
        el.set("class", cls)
    for key, value in attrs.items():
        el.set(key, value)
    if text is not None:
        el.text = text
    return el


def _labelled(parent: etree._Element, label: str, value: str, tag: str = "div", cls: str | None = None) -> etree._Element:
    """<div>Label: <strong>value</strong></div>"""
    el = _sub(parent, tag, label, cls=cls)
    _sub(el, "strong", value)
    return el


def _document(title: str, css: str) -> tuple[etree._Element, etree._Element]:
    root = etree.Element("html", lang="en")
    head = _sub(root, "head")
    _sub(head, "meta", charset="utf-8")
    _sub(head, "title", title)
    _sub(head, "meta", name="viewport", content="width=device-width, initial-scale=1")
    _sub(head, "style", css)
    body = _sub(root, "body")
    return root, body


def _serialize(root: etree._Element) -> str:
    return html.tostring(root, doctype=DOCTYPE, encoding="unicode", method="html", pretty_print=True)


def _or_placeholder(value: str) -> str:
    return value or PLACEHOLDER


def _qty(value: Decimal) -> str:
    return format(value.normalize(), "f")


def _words(amount: Decimal) -> str:
    try:
        return amount_in_words_inr(amount)
    except AmountInWordsError:
        logger.warning("Amount in words unavailable for %s", amount, exc_info=True)
        return PLACEHOLDER


# --- Invoice ---


def _header(sheet: etree._Element, inv: Invoice) -> None:
    seller = inv.seller
    hdr = _sub(sheet, "div", cls="hdr")
    _sub(hdr, "h1", inv.company_name)
    if seller.address:
        _sub(hdr, "div", seller.address, cls="sub")
    contact = []
    if seller.email:
        contact.append(f"Email: {seller.email}")
    if seller.phone:
        contact.append(f"Mob: {seller.phone}")
    if contact:
        _sub(hdr, "div", " | ".join(contact), cls="sub")
    if seller.gstin:
        _labelled(hdr, "GSTIN: ", seller.gstin, cls="sub")
    badge = _sub(hdr, "div", cls="badge")
    _sub(badge, "div", inv.invoice_type, cls="pill")
    _sub(badge, "div", "INVOICE", cls="inv")


def _meta(sheet: etree._Element, inv: Invoice) -> None:
    tr = _sub(_sub(sheet, "table", cls="meta"), "tr")
    for label, value in (
        ("Invoice No.", _or_placeholder(inv.invoice_no)),
        ("Invoice Date", format_date(inv.invoice_date)),
        ("P.O. Number", _or_placeholder(inv.po_no)),
        ("Place of Delivery", _or_placeholder(inv.place_of_delivery)),
    ):
        td = _sub(tr, "td")
        _sub(td, "span", label, cls="lbl")
        _sub(td, "span", value, cls="val")


def _parties(sheet: etree._Element, buyer: Party, ship_to: Party) -> None:
    twocol = _sub(sheet, "div", cls="twocol")

    bill = _sub(twocol, "div", cls="card")
    _sub(bill, "h4", "Bill To")
    _sub(bill, "div", _or_placeholder(buyer.name), cls="name")
    _sub(bill, "div", _or_placeholder(buyer.address), cls="muted")
    state_line = buyer.state + (f" - {buyer.pin_code}" if buyer.pin_code else "")
    _sub(bill, "div", state_line, cls="muted")
    if buyer.phone:
        _sub(bill, "div", f"Phone: {buyer.phone}", cls="muted")
    if buyer.gstin:
        _labelled(bill, "GSTIN: ", buyer.gstin)
    if buyer.pan:
        _labelled(bill, "PAN: ", buyer.pan)

    ship = _sub(twocol, "div", cls="card")
    _sub(ship, "h4", "Ship To")
    _sub(ship, "div", _or_placeholder(ship_to.name or buyer.name), cls="name")
    _sub(ship, "div", _or_placeholder(ship_to.address or buyer.address), cls="muted")
    _sub(ship, "div", ship_to.state or buyer.state, cls="muted")
    if ship_to.gstin:
        _labelled(ship, "GSTIN: ", ship_to.gstin)


ITEM_COLUMNS = (
    ("S.NO", "6%", "ctr"),
    ("DESCRIPTION", "36%", None),
    ("HSN/SAC", "10%", "ctr"),
    ("QTY", "8%", "ctr"),
    ("UNIT", "8%", "ctr"),
    ("RATE", "12%", "num"),
    ("DISCOUNT", "10%", "num"),
    ("AMOUNT", "10%", "num"),
)


def _items(sheet: etree._Element, inv: Invoice) -> None:
    table = _sub(sheet, "table", cls="items")
    head_row = _sub(_sub(table, "thead"), "tr")
    for label, width, cls in ITEM_COLUMNS:
        style = f"width:{width}" + ("; text-align:left" if cls is None else "")
        _sub(head_row, "th", label, cls=cls if cls == "num" else None, style=style)

    tbody = _sub(table, "tbody")
    if not inv.items:
        _sub(_sub(tbody, "tr"), "td", "No items", cls="ctr", colspan=str(len(ITEM_COLUMNS)))
        return
    for idx, item in enumerate(inv.items, start=1):
        tr = _sub(tbody, "tr")
        cells = (
            f"{idx}.",
            _or_placeholder(item.description),
            _or_placeholder(item.hsn),
            _qty(item.quantity),
            _or_placeholder(item.unit),
            format_fixed2(item.rate),
            format_fixed2(item.discount) if item.discount > 0 else "-",
            format_fixed2(item.taxable_value),
        )
        for text, (_, width, cls) in zip(cells, ITEM_COLUMNS, strict=True):
            _sub(tr, "td", text, cls=cls, style=f"width:{width}")


def _tax_table(col: etree._Element, summary: TaxSummary) -> None:
    totals = summary.totals
    _sub(col, "div", "TAX SUMMARY", cls="section-head")
    table = _sub(col, "table", cls="summary")
    head = _sub(_sub(table, "thead"), "tr")
    body = _sub(table, "tbody")
    foot = _sub(_sub(table, "tfoot", cls="tfoot"), "tr")

    if summary.show_igst:
        for label in ("Taxable Value", "IGST %", "IGST Amount"):
            _sub(head, "th", label)
        for r in summary.rows:
            tr = _sub(body, "tr")
            _sub(tr, "td", format_fixed2(r.taxable))
            _sub(tr, "td", f"{format_fixed2(r.rate)}%", cls="ctr")
            _sub(tr, "td", format_fixed2(r.igst))
        footer = (totals.subtotal, None, totals.total_igst)
    else:
        for label in ("Taxable Value", "CGST %", "Amount", "SGST %", "Amount"):
            _sub(head, "th", label)
        for r in summary.rows:
            half = f"{format_fixed2(r.rate / 2)}%"
            tr = _sub(body, "tr")
            _sub(tr, "td", format_fixed2(r.taxable))
            _sub(tr, "td", half, cls="ctr")
            _sub(tr, "td", format_fixed2(r.cgst))
            _sub(tr, "td", half, cls="ctr")
            _sub(tr, "td", format_fixed2(r.sgst))
        footer = (totals.subtotal, None, totals.total_cgst, None, totals.total_sgst)

    for amount in footer:
        td = _sub(foot, "td")
        if amount is not None:
            _sub(td, "strong", format_fixed2(amount))


def _totals(rcol: etree._Element, summary: TaxSummary) -> None:
    totals = summary.totals
    tbody = _sub(_sub(rcol, "table", cls="totals"), "tbody")
    lines = [("Taxable Value", format_fixed2(totals.subtotal)), ("Total Tax", format_fixed2(totals.tax_total))]
    if totals.round_off != 0:
        lines.append(("Round Off", format_fixed2(totals.round_off)))
    for label, value in lines:
        tr = _sub(tbody, "tr")
        _sub(tr, "td", label)
        _sub(tr, "td", value)
    grand = _sub(tbody, "tr", cls="grand")
    _sub(grand, "td", "Grand Total")
    _sub(grand, "td", format_currency(totals.rounded))


def _footer(bottom: etree._Element, inv: Invoice) -> None:
    bank = inv.seller.bank
    foot = _sub(bottom, "div", cls="foot")
    decl = _sub(foot, "div", cls="decl")

    bank_block = _sub(decl, "div", cls="bank")
    _sub(bank_block, "p", "Bank Details", cls="decl-text")
    for label, value in (
        ("Bank", bank.bank_name),
        ("Branch", bank.branch),
        ("A/C No", bank.account_number),
        ("IFSC", bank.ifsc),
    ):
        _sub(bank_block, "div", f"{label}: {_or_placeholder(value)}", cls="bank-text")

    declaration = _sub(decl, "div")
    _sub(declaration, "p", "Declaration", cls="decl-text")
    _sub(declaration, "em", DECLARATION)

    sign = _sub(foot, "div", cls="sign")
    _sub(sign, "div", f"For {_or_placeholder(inv.company_name)}", cls="for-co")
    wrap = _sub(sign, "div", cls="signwrap")
    _sub(wrap, "div", "", cls="sigline")
    _sub(wrap, "div", "Authorised Signatory", cls="siglbl")

    end = _sub(bottom, "div", cls="end")
    _sub(end, "span", "This is a computer generated invoice.")
    _sub(end, "span", "E. & O.E")


def render_invoice_html(invoice: Invoice | Mapping[str, Any] | None) -> str:
    """Render an invoice-shaped object to a printable HTML document."""
    inv = invoice if isinstance(invoice, Invoice) else Invoice.from_dict(invoice)
    summary = compute_summary(inv)

    root, body = _document(inv.invoice_no or "Invoice", INVOICE_CSS)
    sheet = _sub(body, "div", cls="sheet")
    _header(sheet, inv)
    _meta(sheet, inv)
    _parties(sheet, inv.buyer, inv.ship_to)
    _items(sheet, inv)

    bottom = _sub(sheet, "div", cls="bottom")
    row = _sub(bottom, "div", cls="row")
    _tax_table(_sub(row, "div", cls="col"), summary)
    _totals(_sub(row, "div", cls="rcol"), summary)

    words = _sub(bottom, "div", cls="words")
    _sub(words, "span", "Amount in Words:").tail = f" {_words(summary.totals.rounded)}"

    _footer(bottom, inv)
    return _serialize(root)


# --- Quotation ---


def _cell_text(key: str, raw: Any, row_total: Decimal, columns: Mapping[str, Any]) -> str:
    if key == "total":
        explicit = explicit_number(columns.get("total"))
        return format_fixed2(explicit if explicit is not None else row_total)
    number = explicit_number(raw)
    if number is not None:
        return format_fixed2(number)
    return "" if raw is None else str(raw)


def render_quotation_html(quotation: Quotation | Mapping[str, Any] | None, today: date | None = None) -> str:
    """Render a quotation letter with its custom-column price table."""
    q = quotation if isinstance(quotation, Quotation) else Quotation.from_dict(quotation)
    seller, buyer = q.company, q.customer

    root, body = _document(q.quotation_no or "Quotation", QUOTATION_CSS)
    page = _sub(body, "div", cls="page")
    _sub(page, "h1", seller.name)
    if seller.gstin:
        _sub(page, "div", f"GSTIN: {seller.gstin}", cls="gstin")

    to_block = _sub(page, "div", cls="to-block space")
    _sub(_sub(to_block, "div"), "b", "To:")
    _sub(_sub(to_block, "div", cls="space1"), "b", buyer.name)
    _sub(to_block, "div", buyer.company)
    _sub(to_block, "div", buyer.address)
    if buyer.state:
        state = buyer.state + (f" ({buyer.state_code})" if buyer.state_code else "")
        _sub(to_block, "div", state)

    _sub(page, "div", f"Subject: {q.subject or 'Quotation'}", cls="subject space")
    _sub(page, "div", "Dear Sir,", cls="intro space1")
    _sub(
        page,
        "div",
        "We are grateful for your interest and confidence in our products and services. "
        "Please find below our proposal:",
        cls="intro",
    )

    table = _sub(page, "table")
    head = _sub(_sub(table, "thead"), "tr")
    _sub(head, "th", "S. No", style="width:8%")
    _sub(head, "th", "Item")
    for col in q.columns:
        _sub(head, "th", col.label)

    tbody = _sub(table, "tbody")
    for idx, item in enumerate(q.items, start=1):
        tr = _sub(tbody, "tr")
        _sub(tr, "td", str(idx))
        _sub(tr, "td", item.item)
        for col in q.columns:
            text = _cell_text(col.key, item.columns.get(col.key), item.row_total, item.columns)
            style = "font-weight:bold" if col.key == "total" else None
            td = _sub(tr, "td", text)
            if style:
                td.set("style", style)

    if q.show_total_row:
        tr = _sub(tbody, "tr")
        _sub(tr, "td", "Grand Total", colspan=str(len(q.columns) + 1), style="font-weight:bold")
        _sub(tr, "td", format_fixed2(q.grand_total), style="text-align:right;font-weight:bold")

    if q.notes:
        _sub(page, "p", q.notes, cls="space")

    terms = _sub(page, "div", cls="terms")
    _sub(terms, "b", "Terms & Conditions")
    ul = _sub(terms, "ul")
    for term in q.terms or DEFAULT_QUOTATION_TERMS:
        _sub(ul, "li", term)

    closing = _sub(page, "div", cls="closing")
    _sub(
        closing,
        "div",
        "We hope this quotation meets your expectations. We look forward to your valuable "
        "order and the beginning of a long-term business relationship.",
    )
    _sub(closing, "br")
    _sub(closing, "div", "Thanks & Regards")
    _sub(_sub(closing, "div"), "b", seller.contact_name)
    _sub(closing, "div", seller.name)

    issued = format_date_long(q.date) or format_date_long(today or date.today())
    _sub(page, "div", f"Date: {issued}", cls="date")
    return _serialize(root)
