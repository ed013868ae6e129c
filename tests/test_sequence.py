from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from gstinvoice.config import IST
from gstinvoice.utils import sequence


def test_sequence_increment(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        assert sequence.current("invoice", 2024) == 0
        assert sequence.next_seq("invoice", 2024) == 1
        assert sequence.next_seq("invoice", 2024) == 2
        assert sequence.current("invoice", 2024) == 2


def test_next_number_format(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        assert sequence.next_number("invoice", 2024) == "INV-2024-1"
        assert sequence.next_number("quotation", 2024) == "QUO-2024-1"
        assert sequence.next_number("invoice", 2024) == "INV-2024-2"


def test_defaults_to_current_year(tmp_path: Path):
    year = datetime.now(IST).year
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        assert sequence.next_number() == f"INV-{year}-1"
        assert sequence.current("invoice", year) == 1


def test_set_sequence(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        sequence.set_seq(10, "invoice", 2024)
        assert sequence.current("invoice", 2024) == 10
        assert sequence.next_seq("invoice", 2024) == 11


def test_peek_does_not_persist(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        assert sequence.next_seq("invoice", 2024) == 1
        assert sequence.peek_next("invoice", 2024) == "INV-2024-2"
        assert sequence.peek_next("invoice", 2024) == "INV-2024-2"
        assert sequence.current("invoice", 2024) == 1


def test_counter_resets_per_year(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        sequence.next_seq("invoice", 2024)
        sequence.next_seq("invoice", 2024)
        assert sequence.next_number("invoice", 2025) == "INV-2025-1"


def test_per_kind_isolation(tmp_path: Path):
    """Incrementing invoices does not affect quotations."""
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        sequence.next_seq("invoice", 2024)
        sequence.next_seq("invoice", 2024)
        sequence.next_seq("quotation", 2024)

        assert sequence.current("invoice", 2024) == 2
        assert sequence.current("quotation", 2024) == 1

        data = json.loads((tmp_path / "sequence.json").read_text())
        assert data == {"invoice-2024": 2, "quotation-2024": 1}


def test_unknown_kind(tmp_path: Path):
    with patch("gstinvoice.config.get_data_dir", return_value=tmp_path):
        with pytest.raises(ValueError, match="Unknown document kind"):
            sequence.next_seq("receipt", 2024)


def test_uses_data_dir_from_env(data_dir):
    sequence.next_seq("invoice", 2024)
    assert (data_dir / "sequence.json").exists()
