from __future__ import annotations

from unittest.mock import patch

import pytest

from gstinvoice.services.exceptions import DocumentNotFoundError
from gstinvoice.utils.registry import (
    add_document,
    find_document,
    list_documents,
    remove_document,
    update_status,
)


@pytest.fixture
def registry_path(tmp_path):
    rp = tmp_path / "documents.json"
    with (
        patch("gstinvoice.utils.registry._registry_path", return_value=rp),
        patch("gstinvoice.utils.registry._locked"),
    ):
        yield rp


def test_add_and_find(registry_path):
    add_document(
        "INV-2024-1",
        kind="invoice",
        customer="Acme Traders",
        document_date="2024-01-05",
        grand_total="236.00",
        path="/tmp/INV-2024-1.html",
    )
    entry = find_document("INV-2024-1")
    assert entry is not None
    assert entry["kind"] == "invoice"
    assert entry["status"] == "draft"
    assert entry["customer"] == "Acme Traders"
    assert entry["grand_total"] == "236.00"
    assert "rendered_at" in entry


def test_find_not_found(registry_path):
    assert find_document("INV-2024-99") is None


def test_none_fields_are_omitted(registry_path):
    entry = add_document("QUO-2024-1", kind="quotation")
    assert "customer" not in entry
    assert "path" not in entry


def test_rerender_refreshes_existing(registry_path):
    """Adding an existing number merges non-None fields instead of duplicating."""
    add_document("INV-2024-1", customer="Acme", grand_total="100.00")
    update_status("INV-2024-1", "approved")
    add_document("INV-2024-1", grand_total="236.00", path="/out/a.html")

    entries = list_documents()
    assert len(entries) == 1
    entry = entries[0]
    assert entry["customer"] == "Acme"
    assert entry["grand_total"] == "236.00"
    assert entry["path"] == "/out/a.html"
    # status survives a re-render
    assert entry["status"] == "approved"


def test_list_filters_by_kind(registry_path):
    add_document("INV-2024-1", kind="invoice")
    add_document("QUO-2024-1", kind="quotation")
    add_document("INV-2024-2", kind="invoice")

    assert [e["number"] for e in list_documents()] == ["INV-2024-1", "QUO-2024-1", "INV-2024-2"]
    assert [e["number"] for e in list_documents("quotation")] == ["QUO-2024-1"]


def test_update_status(registry_path):
    add_document("INV-2024-1")
    updated = update_status("INV-2024-1", "paid")
    assert updated is not None
    assert updated["status"] == "paid"
    assert find_document("INV-2024-1")["status"] == "paid"


def test_update_status_per_kind(registry_path):
    add_document("QUO-2024-1", kind="quotation")
    assert update_status("QUO-2024-1", "accepted")["status"] == "accepted"
    with pytest.raises(ValueError, match="Invalid status 'paid'"):
        update_status("QUO-2024-1", "paid")


def test_update_status_invalid(registry_path):
    add_document("INV-2024-1")
    with pytest.raises(ValueError, match="expected one of: draft, approved, paid, void"):
        update_status("INV-2024-1", "shipped")
    assert find_document("INV-2024-1")["status"] == "draft"


def test_update_status_missing(registry_path):
    add_document("INV-2024-1")
    with pytest.raises(DocumentNotFoundError, match="Document not found: INV-2024-404") as exc:
        update_status("INV-2024-404", "paid")
    assert exc.value.number == "INV-2024-404"
    assert find_document("INV-2024-1")["status"] == "draft"


def test_remove_existing(registry_path):
    add_document("INV-2024-1")
    assert remove_document("INV-2024-1") is True
    assert find_document("INV-2024-1") is None


def test_remove_missing(registry_path):
    assert remove_document("INV-2024-1") is False


def test_unicode_is_written_verbatim(registry_path):
    add_document("INV-2024-1", grand_total="₹236.00")
    assert "₹236.00" in registry_path.read_text(encoding="utf-8")


def test_corrupt_json_backup(tmp_path):
    """_load() returns empty list and creates backup when JSON file is corrupt."""
    rp = tmp_path / "documents.json"
    rp.write_text("not valid json {{{")
    with (
        patch("gstinvoice.utils.registry._registry_path", return_value=rp),
        patch("gstinvoice.utils.registry._locked"),
    ):
        assert list_documents() == []
    assert not rp.exists()
    backups = list(tmp_path.glob("documents.json.corrupt.*"))
    assert len(backups) == 1
    assert backups[0].read_text() == "not valid json {{{"


def test_real_lock_and_data_dir(data_dir):
    add_document("INV-2024-1")
    assert (data_dir / "documents.json").exists()
    assert find_document("INV-2024-1")["number"] == "INV-2024-1"
