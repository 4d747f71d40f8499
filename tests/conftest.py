"""Shared fixtures: an in-memory MongoDB and the store handles built on it."""

from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from invoice_reports.api import create_app
from invoice_reports.config import Settings
from invoice_reports.store import Stores


@pytest.fixture
def db():
    return mongomock.MongoClient().invoicing


@pytest.fixture
def stores(db) -> Stores:
    return Stores.from_database(db)


@pytest.fixture
def accounts(db) -> dict[str, ObjectId]:
    ids = {}
    for code, name, kind in (
        ("ACC-0001", "Acme Traders", "company"),
        ("ACC-0002", "Bilal Stores", "customer"),
    ):
        ids[name] = db.accounts.insert_one(
            {"name": name, "code": code, "type": kind, "city": "Lahore", "branch": "Main"}
        ).inserted_id
    return ids


def make_invoice(number, when, total, status="paid", invoice_type="simple", account=None):
    return {
        "invoiceNumber": number,
        "invoiceDate": when,
        "invoiceType": invoice_type,
        "status": status,
        "account": account,
        "payment": {"subTotal": total, "discount": 0, "total": total},
    }


@pytest.fixture
def march_invoices(db, accounts):
    acme = accounts["Acme Traders"]
    bilal = accounts["Bilal Stores"]
    db.invoices.insert_many(
        [
            make_invoice("INV-001", datetime(2024, 3, 1), 100, account=acme),
            make_invoice("INV-002", datetime(2024, 3, 12), 250, invoice_type="tax", account=bilal),
            make_invoice("INV-003", datetime(2024, 3, 31), 150, account=acme),
            make_invoice("INV-004", datetime(2024, 3, 20), 500, status="pending", account=bilal),
            make_invoice("INV-005", datetime(2024, 4, 2), 900, account=acme),
        ]
    )


@pytest.fixture
def client(stores) -> TestClient:
    return TestClient(create_app(Settings(), stores))


@pytest.fixture
def add_invoice(db):
    def _add(number, when, total, **fields):
        return db.invoices.insert_one(make_invoice(number, when, total, **fields)).inserted_id

    return _add
