"""Summarize report lines into breakdown tables and persist the report document."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pymongo.errors import PyMongoError

from .aggregator import AggregationResult, InvoiceAggregator
from .errors import PersistenceError
from .filters import InvoiceQuery, resolve_filters
from .schemas import (
    ReportData,
    ReportDocument,
    ReportKind,
    ReportLineItem,
    ReportPayload,
    ReportRequest,
    ReportSummary,
)
from .store import ReportStore

logger = logging.getLogger(__name__)


def _accumulate(items: Iterable[ReportLineItem], key: str) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for item in items:
        value = getattr(item, key)
        if value is None:
            value = "N/A"
        totals[value] = totals.get(value, 0.0) + item.amount
    return totals


def summarize(items: List[ReportLineItem], total_sales: Optional[float] = None) -> ReportSummary:
    """Group amounts by status, invoice type and account; only observed keys appear."""
    if total_sales is None:
        total_sales = sum((item.amount for item in items), 0.0)
    return ReportSummary(
        total_sales=total_sales,
        total_items=len(items),
        by_status=_accumulate(items, "status"),
        by_invoice_type=_accumulate(items, "invoice_type"),
        by_account=_accumulate(items, "account_name"),
    )


def report_label(kind: ReportKind) -> str:
    return kind.label


def _utcnow() -> datetime:
    # Naive UTC, matching what pymongo hands back.
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class GeneratedReport:
    report_id: str
    payload: ReportPayload


class ReportGenerator:
    """Resolve filters, aggregate invoices, summarize, and persist one new report."""

    def __init__(self, aggregator: InvoiceAggregator, reports: ReportStore) -> None:
        self.aggregator = aggregator
        self.reports = reports

    def build_document(
        self, request: ReportRequest, query: InvoiceQuery, result: AggregationResult, generated_by: str
    ) -> ReportDocument:
        summary = summarize(result.items, result.total_sales)
        now = _utcnow()
        return ReportDocument(
            report_name=request.report_name or report_label(request.report_type),
            report_type=request.report_type,
            generated_by=generated_by,
            filters_applied=query.filters_applied(),
            total_invoices=result.total_items,
            report_data=result.items,
            data=ReportData.from_summary(summary, result.items),
            created_at=now,
            updated_at=now,
        )

    def generate(self, request: ReportRequest, generated_by: str) -> GeneratedReport:
        query = resolve_filters(request)
        result = self.aggregator.aggregate(query)
        report = self.build_document(request, query, result, generated_by)
        document = report.to_document()

        try:
            report_id = self.reports.create(document)
        except PyMongoError as exc:
            logger.error("Failed to persist %s report for %s: %s", request.report_type.value, generated_by, exc)
            raise PersistenceError(str(exc)) from exc

        logger.info("Generated %s report %s with %d invoices", request.report_type.value, report_id, result.total_items)
        payload = ReportPayload(
            report_id=report_id,
            report_type=request.report_type,
            report_name=report.report_name,
            filters_applied=document["filtersApplied"],
            total_invoices=report.total_invoices,
            total_sales=report.data.total_sales,
            created_at=report.created_at,
            data=document,
        )
        return GeneratedReport(report_id=report_id, payload=payload)
