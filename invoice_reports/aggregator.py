"""Query invoices for a resolved predicate and flatten them into report lines."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from .errors import AggregationError
from .filters import InvoiceQuery
from .schemas import ReportLineItem
from .store import InvoiceStore
from .utils import safe_amount

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    items: List[ReportLineItem] = field(default_factory=list)
    total_sales: float = 0.0

    @property
    def total_items(self) -> int:
        return len(self.items)


def to_line_item(invoice: Dict[str, Any]) -> ReportLineItem:
    payment = invoice.get("payment") or {}
    return ReportLineItem(
        date=invoice.get("invoiceDate"),
        invoice_number=invoice.get("invoiceNumber"),
        account_name=invoice.get("accountName") or "N/A",
        amount=safe_amount(payment.get("total")),
        status=invoice.get("status"),
        invoice_type=invoice.get("invoiceType"),
    )


class InvoiceAggregator:
    def __init__(self, invoices: InvoiceStore) -> None:
        self.invoices = invoices

    def aggregate(self, query: InvoiceQuery) -> AggregationResult:
        predicate = query.to_predicate()
        try:
            invoices = self.invoices.find(predicate)
        except PyMongoError as exc:
            logger.error("Invoice query failed for %s: %s", predicate, exc)
            raise AggregationError(str(exc)) from exc

        items = [to_line_item(inv) for inv in invoices]
        total_sales = sum((item.amount for item in items), 0.0)
        logger.info("Aggregated %d invoices totalling %.2f", len(items), total_sales)
        return AggregationResult(items=items, total_sales=total_sales)
