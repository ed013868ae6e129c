from __future__ import annotations

import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from filelock import FileLock

from gstinvoice import config as _config


def _sequence_file() -> Path:
    return _config.get_data_dir() / "sequence.json"


@contextmanager
def _locked() -> Iterator[None]:
    """Hold an exclusive file lock during sequence read-modify-write."""
    sf = _sequence_file()
    sf.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(sf.with_suffix(".lock"))
    with lock:
        yield


def _load() -> dict[str, int]:
    sf = _sequence_file()
    if not sf.exists():
        return {}
    return json.loads(sf.read_text())


def _save(data: dict[str, int]) -> None:
    sf = _sequence_file()
    sf.parent.mkdir(parents=True, exist_ok=True)
    tmp = sf.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, indent=2, sort_keys=True))
    os.replace(tmp, sf)


def _key(kind: str, year: int | None) -> str:
    if kind not in _config.NUMBER_PREFIXES:
        raise ValueError(f"Unknown document kind: {kind!r}")
    return f"{kind}-{year or datetime.now(_config.IST).year}"


def format_number(kind: str, seq: int, year: int | None = None) -> str:
    """INV-2026-7 style document number."""
    year = year or datetime.now(_config.IST).year
    return f"{_config.NUMBER_PREFIXES[kind]}-{year}-{seq}"


def current(kind: str = "invoice", year: int | None = None) -> int:
    with _locked():
        return _load().get(_key(kind, year), 0)


def next_seq(kind: str = "invoice", year: int | None = None) -> int:
    key = _key(kind, year)
    with _locked():
        data = _load()
        data[key] = data.get(key, 0) + 1
        _save(data)
        return data[key]


def next_number(kind: str = "invoice", year: int | None = None) -> str:
    """Reserve and return the next document number for ``kind`` (counter resets yearly)."""
    return format_number(kind, next_seq(kind, year), year)


def peek_next(kind: str = "invoice", year: int | None = None) -> str:
    """Return the next document number without persisting it."""
    with _locked():
        seq = _load().get(_key(kind, year), 0) + 1
    return format_number(kind, seq, year)


def set_seq(value: int, kind: str = "invoice", year: int | None = None) -> None:
    key = _key(kind, year)
    with _locked():
        data = _load()
        data[key] = value
        _save(data)
