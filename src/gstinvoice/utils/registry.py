"""Local document registry: every invoice and quotation rendered through the CLI.

Entries live in a single JSON list under the data directory, keyed by
document number.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock

from gstinvoice import config as _config
from gstinvoice.services.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)

STATUSES = {
    "invoice": _config.INVOICE_STATUSES,
    "quotation": _config.QUOTATION_STATUSES,
}


def _registry_path() -> Path:
    return _config.get_data_dir() / "documents.json"


def _backup_corrupt(path: Path) -> Path:
    """Rename a corrupt file to a timestamped backup before it gets overwritten."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup = path.with_name(f"{path.name}.corrupt.{ts}")
    path.rename(backup)
    logger.warning("Corrupt file backed up: %s -> %s", path, backup)
    return backup


@contextmanager
def _locked() -> Iterator[None]:
    """Hold an exclusive file lock during registry read-modify-write."""
    rp = _registry_path()
    rp.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(rp.with_suffix(".lock"))
    with lock:
        yield


def _load() -> list[dict[str, Any]]:
    rp = _registry_path()
    if not rp.exists():
        return []
    try:
        return json.loads(rp.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError):
        _backup_corrupt(rp)
        return []


def _save(entries: list[dict[str, Any]]) -> None:
    rp = _registry_path()
    rp.parent.mkdir(parents=True, exist_ok=True)
    tmp = rp.with_suffix(".tmp")
    tmp.write_text(json.dumps(entries, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    os.replace(tmp, rp)


def list_documents(kind: str | None = None) -> list[dict[str, Any]]:
    """Return all registered documents, optionally filtered by kind."""
    with _locked():
        entries = _load()
    if kind:
        entries = [e for e in entries if e.get("kind") == kind]
    return entries


def add_document(
    number: str,
    *,
    kind: str = "invoice",
    customer: str | None = None,
    document_date: str | None = None,
    grand_total: str | None = None,
    path: str | None = None,
    status: str = "draft",
) -> dict[str, Any]:
    """Add a document to the registry. Re-rendering an existing number refreshes it."""
    optional = {
        "customer": customer,
        "date": document_date,
        "grand_total": grand_total,
        "path": path,
    }
    rendered_at = datetime.now(UTC).isoformat(timespec="seconds")

    with _locked():
        entries = _load()

        existing = next((e for e in entries if e.get("number") == number), None)
        if existing:
            existing.update({k: v for k, v in optional.items() if v is not None})
            existing["rendered_at"] = rendered_at
            _save(entries)
            return existing

        entry: dict[str, Any] = {
            "number": number,
            "kind": kind,
            "status": status,
            "rendered_at": rendered_at,
            **{k: v for k, v in optional.items() if v is not None},
        }
        entries.append(entry)
        _save(entries)
        return entry


def update_status(number: str, status: str) -> dict[str, Any]:
    """Change a document's status and return the updated entry.

    Raises DocumentNotFoundError when no entry has that number, and ValueError
    when the status is not valid for the document kind.
    """
    with _locked():
        entries = _load()
        target = next((e for e in entries if e.get("number") == number), None)
        if target is None:
            raise DocumentNotFoundError(number)
        allowed = STATUSES.get(target.get("kind", "invoice"), ())
        if status not in allowed:
            raise ValueError(f"Invalid status {status!r}; expected one of: {', '.join(allowed)}")
        if target.get("status") != status:
            target["status"] = status
            _save(entries)
    return target


def find_document(number: str) -> dict[str, Any] | None:
    """Look up a single document by number."""
    with _locked():
        entries = _load()
    return next((e for e in entries if e.get("number") == number), None)


def remove_document(number: str) -> bool:
    """Remove a document from the registry by number."""
    with _locked():
        entries = _load()
        filtered = [e for e in entries if e.get("number") != number]
        if len(filtered) == len(entries):
            return False
        _save(filtered)
        return True
