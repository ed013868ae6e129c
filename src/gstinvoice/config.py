from __future__ import annotations

import logging
import os
import sys
from datetime import timedelta, timezone
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "gst-invoice"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and that dir does not exist yet.
    """
    from_env = os.environ.get("GST_INVOICE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/gstinvoice/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("GST_INVOICE_CONFIG_DIR", "config", kind="config")


def get_data_dir() -> Path:
    """Resolve data directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("GST_INVOICE_DATA_DIR", "data", kind="data")


# --- Presentation constants ---

CURRENCY_SYMBOL = "₹"
PLACEHOLDER = "—"

IST = timezone(timedelta(hours=5, minutes=30))

INVOICE_TYPES = (
    "Proforma Invoice",
    "Delivery Challan",
    "Original for Buyer",
    "Duplicate for Transporter",
)
DEFAULT_INVOICE_TYPE = "Original for Buyer"

INVOICE_STATUSES = ("draft", "approved", "paid", "void")
QUOTATION_STATUSES = ("draft", "sent", "accepted", "rejected")

NUMBER_PREFIXES = {"invoice": "INV", "quotation": "QUO"}

DECLARATION = (
    "We declare that this invoice shows the actual price of the goods described "
    "and that all particulars are true and correct."
)

DEFAULT_QUOTATION_TERMS = (
    "GST @12% applicable on the total amount.",
    "Price includes branding and single location delivery.",
    "Payment against delivery.",
)


# --- Logging ---


def setup_logging(level: str | None = None) -> None:
    """Install a single stderr handler on the root logger.

    Level comes from the argument, then GST_INVOICE_LOG_LEVEL, then WARNING.
    """
    name = (level or os.environ.get("GST_INVOICE_LOG_LEVEL") or "WARNING").upper()
    log_level = getattr(logging, name, logging.WARNING)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


# --- YAML config ---


class ConfigError(Exception):
    """Required configuration file is missing or unreadable."""


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_company() -> dict:
    """Load the seller/company profile from config/company.yaml."""
    path = get_config_dir() / "company.yaml"
    if not path.is_file():
        raise ConfigError(f"company.yaml not found in {get_config_dir()}")
    return load_yaml(path)


def load_customer(slug: str) -> dict:
    """Load a customer from config/customers/{slug}.yaml."""
    path = get_config_dir() / "customers" / f"{slug}.yaml"
    if not path.is_file():
        raise ConfigError(f"Customer not found: {slug}")
    return load_yaml(path)


def list_customers() -> list[str]:
    """Return sorted list of customer slugs (YAML file stems) from config/customers/."""
    customers_dir = get_config_dir() / "customers"
    if not customers_dir.exists():
        return []
    return sorted(f.stem for f in customers_dir.glob("*.yaml"))


def save_customer(slug: str, data: dict) -> Path:
    """Save a customer to config/customers/{slug}.yaml (atomic write)."""
    customers_dir = get_config_dir() / "customers"
    customers_dir.mkdir(parents=True, exist_ok=True)
    path = customers_dir / f"{slug}.yaml"
    tmp = path.with_suffix(".tmp")
    tmp.write_text(
        yaml.dump(data, default_flow_style=False, allow_unicode=True), encoding="utf-8"
    )
    os.replace(tmp, path)
    return path


def delete_customer(slug: str) -> None:
    """Delete config/customers/{slug}.yaml."""
    path = get_config_dir() / "customers" / f"{slug}.yaml"
    path.unlink()


def get_rendered_dir() -> Path:
    """Return the directory rendered HTML documents are written to."""
    return get_data_dir() / "rendered"
