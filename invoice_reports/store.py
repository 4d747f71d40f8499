"""MongoDB-backed handles for the invoice, report, and account collections."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from .config import Settings

logger = logging.getLogger(__name__)

INVOICES = "invoices"
REPORTS = "reports"
ACCOUNTS = "accounts"


def as_object_id(value: Any) -> Any:
    """ObjectId for a 24-hex string, else the value unchanged."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def stringify_id(document: Dict[str, Any]) -> Dict[str, Any]:
    if "_id" in document:
        document["_id"] = str(document["_id"])
    return document


class AccountStore:
    def __init__(self, db: Database) -> None:
        self.collection = db[ACCOUNTS]

    def find(self, account_type: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if account_type:
            query["type"] = account_type
        return [stringify_id(doc) for doc in self.collection.find(query).sort("name", 1)]

    def find_by_id(self, account_id: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.find_one({"_id": as_object_id(account_id)})
        return stringify_id(doc) if doc else None

    def names_for(self, account_ids: Iterable[Any]) -> Dict[str, str]:
        """Display names keyed by the string form of each account id."""
        ids = list({as_object_id(str(account_id)) for account_id in account_ids if account_id is not None})
        if not ids:
            return {}
        cursor = self.collection.find({"_id": {"$in": ids}}, {"name": 1})
        return {str(doc["_id"]): doc.get("name") for doc in cursor}


class InvoiceStore:
    """Read-only view of invoices; account references are resolved to display names."""

    def __init__(self, db: Database, accounts: AccountStore) -> None:
        self.collection = db[INVOICES]
        self.accounts = accounts

    def find(self, predicate: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = dict(predicate)
        if "account" in query:
            account = query["account"]
            # References may be stored as ObjectIds or as their string form.
            if as_object_id(account) is not account:
                query["account"] = {"$in": [as_object_id(account), account]}
        invoices = list(self.collection.find(query))

        referenced = [inv.get("account") for inv in invoices if not isinstance(inv.get("account"), dict)]
        names = self.accounts.names_for(referenced)
        for inv in invoices:
            account = inv.get("account")
            if isinstance(account, dict):
                inv["accountName"] = account.get("name")
            else:
                inv["accountName"] = names.get(str(account)) if account is not None else None
        return invoices


class ReportStore:
    def __init__(self, db: Database) -> None:
        self.collection = db[REPORTS]

    def create(self, document: Dict[str, Any]) -> str:
        result = self.collection.insert_one(dict(document))
        return str(result.inserted_id)

    def find_all(self) -> List[Dict[str, Any]]:
        return [stringify_id(doc) for doc in self.collection.find({}).sort("createdAt", DESCENDING)]

    def find_by_id(self, report_id: str) -> Optional[Dict[str, Any]]:
        if not ObjectId.is_valid(report_id):
            return None
        doc = self.collection.find_one({"_id": ObjectId(report_id)})
        return stringify_id(doc) if doc else None


@dataclass
class Stores:
    """Store handles for one database; built once by whoever owns the connection."""

    invoices: InvoiceStore
    reports: ReportStore
    accounts: AccountStore
    client: Optional[MongoClient] = None

    @classmethod
    def from_database(cls, db: Database, client: Optional[MongoClient] = None) -> "Stores":
        accounts = AccountStore(db)
        return cls(invoices=InvoiceStore(db, accounts), reports=ReportStore(db), accounts=accounts, client=client)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Stores":
        client: MongoClient = MongoClient(settings.mongo_uri, tz_aware=False)
        logger.info("Using MongoDB database %r", settings.database)
        return cls.from_database(client[settings.database], client)

    def close(self) -> None:
        """Close the owned client; handles built from a bare database are left alone."""
        if self.client is not None:
            self.client.close()
            self.client = None

    def __enter__(self) -> "Stores":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
