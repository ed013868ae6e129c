from __future__ import annotations

import pytest
import yaml


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point config and data dirs at tmp_path so tests never touch real files."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    monkeypatch.setenv("GST_INVOICE_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("GST_INVOICE_DATA_DIR", str(data_dir))
    return config_dir, data_dir


# --- Party fixtures ---


@pytest.fixture
def seller_dict() -> dict:
    return {
        "name": "Gift Plus",
        "gstin": "29ABCDE1234F1Z5",
        "address": "12, 3rd Cross, Indiranagar, Bengaluru",
        "state": "Karnataka",
        "stateCode": "29",
        "phone": "9845000000",
        "email": "accounts@giftplus.example",
        "contactName": "Ashutosh",
        "bankName": "State Bank of India",
        "branchName": "Indiranagar",
        "accountNo": "000011112222",
        "ifscCode": "SBIN0000123",
    }


@pytest.fixture
def buyer_dict() -> dict:
    return {
        "name": "Acme Traders",
        "gstin": "27AAACA1234B1Z2",
        "address": "45, MG Road, Pune",
        "state": "Maharashtra",
        "stateCode": "27",
        "pincode": "411001",
        "phone": "02025550000",
    }


@pytest.fixture
def local_buyer_dict() -> dict:
    return {
        "name": "Bengaluru Stores",
        "gstin": "29AAACB9999C1Z1",
        "address": "8, Church Street, Bengaluru",
        "state": "Karnataka",
    }


# --- Invoice fixtures ---


@pytest.fixture
def single_item() -> dict:
    return {
        "description": "Steel bottle",
        "hsn": "7323",
        "quantity": 2,
        "rate": 100,
        "discount": 0,
        "cgstRate": 9,
        "sgstRate": 9,
        "cgstAmount": 18,
        "sgstAmount": 18,
    }


@pytest.fixture
def invoice_dict(seller_dict, buyer_dict, single_item) -> dict:
    return {
        "invoiceNo": "INV-2024-7",
        "invoiceType": "Original for Buyer",
        "invoiceDate": "2024-01-05",
        "poNo": "PO-11",
        "placeOfDelivery": "Pune",
        "seller": seller_dict,
        "buyer": buyer_dict,
        "items": [single_item],
    }


@pytest.fixture
def igst_invoice_dict(seller_dict, buyer_dict) -> dict:
    return {
        "invoiceNo": "INV-2024-8",
        "seller": seller_dict,
        "buyer": buyer_dict,
        "items": [
            {"description": "Notebook", "quantity": 10, "rate": 50, "igstRate": 12, "igstAmount": 60},
            {"description": "Bottle", "quantity": 1, "rate": 1000, "igstRate": 18, "igstAmount": 180},
        ],
    }


@pytest.fixture
def quotation_dict(buyer_dict) -> dict:
    return {
        "quotationNo": "QUO-2024-3",
        "date": "2024-03-09",
        "subject": "Diwali gifting",
        "customer": buyer_dict,
        "customColumns": [
            {"key": "qty", "label": "Qty"},
            {"key": "price", "label": "Unit Price"},
            {"key": "total", "label": "Total"},
        ],
        "items": [
            {"item": "Bottle", "columns": {"qty": 10, "price": 400}},
            {"item": "Diary", "columns": {"qty": 5, "price": 650, "total": 3000}},
        ],
    }


# --- Config dir fixture ---


@pytest.fixture
def config_dir(isolated_dirs, seller_dict, buyer_dict):
    cfg, _ = isolated_dirs
    cfg.mkdir(parents=True, exist_ok=True)
    (cfg / "company.yaml").write_text(yaml.dump(seller_dict))
    customers = cfg / "customers"
    customers.mkdir()
    (customers / "acme.yaml").write_text(yaml.dump(buyer_dict))
    return cfg


@pytest.fixture
def data_dir(isolated_dirs):
    return isolated_dirs[1]
