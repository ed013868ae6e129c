from __future__ import annotations

import argparse
import json
import re
import sys
from importlib.resources import files
from pathlib import Path

TEMPLATES = [
    "company.yaml.example",
    "customers/acme-traders.yaml.example",
    "invoice.yaml.example",
    "quotation.yaml.example",
]


def _init_config() -> None:
    """Copy bundled example files to the user's config/data directories."""
    from gstinvoice.config import get_config_dir, get_data_dir

    config_dir = get_config_dir()
    data_dir = get_data_dir()
    templates = files("gstinvoice") / "templates"

    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "customers").mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    copied = 0
    for rel in TEMPLATES:
        dest = config_dir / rel
        if dest.exists():
            print(f"  already exists: {dest}")
            continue
        src = templates / rel
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  created: {dest}")
        copied += 1

    print()
    print(f"Config: {config_dir}")
    print(f"Data:   {data_dir}")
    print()
    if copied:
        print("Next steps:")
        print(f"  1. cp {config_dir / 'company.yaml.example'} {config_dir / 'company.yaml'}")
        print("  2. Edit company.yaml with your GSTIN, address and bank details")
        print(f"  3. Run: gst-invoice render {config_dir / 'invoice.yaml.example'} --dry-run")
    else:
        print("No new files created (all already existed).")


def _preflight() -> bool:
    """Verify the company profile exists before rendering.

    Auto-creates the data directory.
    """
    from gstinvoice.config import get_config_dir, get_data_dir

    get_data_dir().mkdir(parents=True, exist_ok=True)

    config_dir = get_config_dir()
    if not config_dir.is_dir():
        print(f"Error: config directory not found: {config_dir}")
        print("Run 'gst-invoice init' to create the example files.")
        return False
    if not (config_dir / "company.yaml").is_file():
        print(f"Error: company.yaml not found in {config_dir}")
        print("Run 'gst-invoice init' and fill in the company profile.")
        return False
    return True


def _render(args: argparse.Namespace) -> int:
    import yaml

    from gstinvoice.config import ConfigError
    from gstinvoice.services.issue import prepare_invoice, prepare_quotation, save_html

    if not _preflight():
        return 1
    prepare = prepare_quotation if args.command == "quote" else prepare_invoice
    try:
        prepared = prepare(args.file, customer=args.customer, dry_run=args.dry_run)
    except (ConfigError, OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1

    if args.dry_run:
        if args.output:
            Path(args.output).write_text(prepared.html, encoding="utf-8")
            print(f"Preview written to {args.output} (number {prepared.number} not reserved)")
        else:
            sys.stdout.write(prepared.html)
        return 0

    path = save_html(prepared, args.output)
    print(f"{prepared.kind.capitalize()} {prepared.number} -> {path}")
    if prepared.grand_total is not None:
        print(f"  Grand total: {prepared.grand_total}")
    return 0


def _summary(args: argparse.Namespace) -> int:
    import yaml

    from gstinvoice.services.issue import load_document
    from gstinvoice.services.tax_summary import compute_summary

    try:
        data = load_document(args.file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1
    print(json.dumps(compute_summary(data).to_dict(), indent=2, ensure_ascii=False))
    return 0


def _words(args: argparse.Namespace) -> int:
    from gstinvoice.services.exceptions import AmountInWordsError
    from gstinvoice.utils.words import amount_in_words_inr

    try:
        print(amount_in_words_inr(args.amount))
    except AmountInWordsError as e:
        print(f"Error: {e}")
        return 1
    return 0


def _check(args: argparse.Namespace) -> int:
    """Validate an invoice file and print one line per finding."""
    import yaml

    from gstinvoice.services.issue import load_document
    from gstinvoice.utils.coerce import as_list, as_mapping
    from gstinvoice.utils.validators import (
        validate_date,
        validate_gst_rate,
        validate_gstin,
        validate_invoice_type,
        validate_state_code,
    )

    try:
        data = load_document(args.file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR {e}")
        return 1

    errors = 0

    def report(label: str, check, value) -> None:
        nonlocal errors
        try:
            check(value)
            print(f"OK    {label}")
        except ValueError as e:
            errors += 1
            print(f"ERROR {label}: {e}")

    for role in ("seller", "buyer", "shipTo"):
        party = as_mapping(data.get(role))
        if party.get("gstin"):
            report(f"{role} GSTIN", validate_gstin, str(party["gstin"]))
        if party.get("stateCode"):
            report(f"{role} state code", validate_state_code, str(party["stateCode"]))
    if data.get("invoiceDate") is not None:
        report("invoice date", validate_date, data["invoiceDate"])
    if data.get("invoiceType") is not None:
        report("invoice type", validate_invoice_type, str(data["invoiceType"]))
    for idx, item in enumerate(as_list(data.get("items")), start=1):
        item = as_mapping(item)
        for key in ("gstRate", "cgstRate", "sgstRate", "igstRate"):
            if item.get(key) is not None:
                report(f"item {idx} {key}", validate_gst_rate, item[key])

    print()
    print("No problems found." if not errors else f"{errors} problem(s) found.")
    return 1 if errors else 0


def _list(args: argparse.Namespace) -> int:
    from gstinvoice.utils.registry import list_documents

    entries = list_documents(args.kind)
    if not entries:
        print("No documents registered.")
        return 0
    for e in entries:
        print(
            f"{e.get('number', ''):<16} {e.get('kind', ''):<10} {e.get('status', ''):<9} "
            f"{e.get('grand_total', ''):>14}  {e.get('customer', '')}"
        )
    return 0


def _status(args: argparse.Namespace) -> int:
    from gstinvoice.services.exceptions import DocumentNotFoundError
    from gstinvoice.utils.registry import update_status

    try:
        entry = update_status(args.number, args.status)
    except (DocumentNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print(f"{entry['number']}: {entry['status']}")
    return 0


_SLUG = re.compile(r"[a-z0-9_-]+")


def _customer(args: argparse.Namespace) -> int:
    """Manage saved customer profiles under config/customers/."""
    from gstinvoice.config import delete_customer, list_customers

    if args.action == "list":
        slugs = list_customers()
        if not slugs:
            print("No customers saved.")
        for slug in slugs:
            print(slug)
        return 0

    if not _SLUG.fullmatch(args.slug):
        print(f"Error: Invalid slug {args.slug!r}: use lowercase letters, digits, _ and -")
        return 1
    if args.action == "remove":
        try:
            delete_customer(args.slug)
        except FileNotFoundError:
            print(f"Error: Customer not found: {args.slug}")
            return 1
        print(f"Removed customer {args.slug}")
        return 0

    return _customer_add(args)


def _customer_add(args: argparse.Namespace) -> int:
    import yaml

    from gstinvoice.config import list_customers, save_customer
    from gstinvoice.services.issue import load_document
    from gstinvoice.utils.validators import validate_gstin, validate_state_code

    if args.slug in list_customers() and not args.force:
        print(f"Error: Customer {args.slug} already exists (use --force to replace it)")
        return 1
    try:
        data = load_document(args.file)
        if not str(data.get("name") or "").strip():
            raise ValueError("customer name is required")
        if data.get("gstin"):
            data["gstin"] = validate_gstin(str(data["gstin"]))
        if data.get("stateCode"):
            data["stateCode"] = validate_state_code(str(data["stateCode"]))
        path = save_customer(args.slug, data)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1
    print(f"Saved customer {args.slug} -> {path}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gst-invoice", description="GST invoice and quotation renderer")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING (default) or ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="create example config files")

    for name, help_text in (("render", "render an invoice to HTML"), ("quote", "render a quotation to HTML")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("file", help="YAML or JSON document")
        p.add_argument("--customer", help="saved customer slug to bill")
        p.add_argument("--dry-run", action="store_true", help="preview without reserving a number")
        p.add_argument("-o", "--output", help="output HTML path")

    p = sub.add_parser("summary", help="print the GST tax summary as JSON")
    p.add_argument("file")

    p = sub.add_parser("words", help="spell an amount in Indian rupees")
    p.add_argument("amount")

    p = sub.add_parser("check", help="validate GSTINs, state codes, rates and dates")
    p.add_argument("file")

    p = sub.add_parser("list", help="list rendered documents")
    p.add_argument("--kind", choices=["invoice", "quotation"])

    p = sub.add_parser("status", help="change a document's status")
    p.add_argument("number")
    p.add_argument("status")

    p = sub.add_parser("customer", help="manage saved customer profiles")
    actions = p.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="list saved customer slugs")
    a = actions.add_parser("add", help="save a customer from a YAML or JSON file")
    a.add_argument("slug")
    a.add_argument("file")
    a.add_argument("--force", action="store_true", help="replace an existing customer")
    r = actions.add_parser("remove", help="delete a saved customer")
    r.add_argument("slug")
    return parser


HANDLERS = {
    "render": _render,
    "quote": _render,
    "summary": _summary,
    "words": _words,
    "check": _check,
    "list": _list,
    "status": _status,
    "customer": _customer,
}


def main(argv: list[str] | None = None) -> None:
    """Entry point for the gst-invoice CLI."""
    args = _build_parser().parse_args(argv)

    from gstinvoice.config import setup_logging

    setup_logging(args.log_level)

    if args.command == "init":
        _init_config()
        return

    code = HANDLERS[args.command](args)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
