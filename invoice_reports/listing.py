"""Read path: list and fetch persisted reports, and the accounts a request can target."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .errors import NotFoundError
from .schemas import AccountOption, ReportListEntry
from .store import AccountStore, ReportStore


def format_report(report: Dict[str, Any]) -> ReportListEntry:
    """Fill display defaults for filters that were not applied."""
    filters = report.get("filtersApplied") or report.get("filters") or {}
    data = report.get("data") or {}
    created_at = report.get("createdAt")
    return ReportListEntry(
        report_id=report["_id"],
        report_type=report.get("reportType"),
        report_name=report.get("reportName"),
        created_at=created_at,
        filters_applied={
            "account": filters.get("account") or "All Accounts",
            "dateRange": filters.get("dateRange") or {"startDate": created_at, "endDate": created_at},
            "invoiceType": filters.get("invoiceType") or "All",
            "status": filters.get("status") or "All",
        },
        total_invoices=report.get("totalInvoices") or data.get("totalItems") or 0,
        total_sales=data.get("totalSales") or 0,
        report_data=report.get("reportData") or [],
    )


def list_reports(reports: ReportStore) -> List[ReportListEntry]:
    return [format_report(report) for report in reports.find_all()]


def get_report(reports: ReportStore, accounts: AccountStore, report_id: str) -> Dict[str, Any]:
    report = reports.find_by_id(report_id)
    if report is None:
        raise NotFoundError(f"No report with id {report_id!r}")

    filters = report.get("filtersApplied") or {}
    account_id = filters.get("account")
    if account_id:
        filters["account"] = accounts.find_by_id(account_id) or account_id
    return report


def list_accounts(accounts: AccountStore, account_type: Optional[str] = None) -> List[AccountOption]:
    return [AccountOption.model_validate(doc) for doc in accounts.find(account_type)]
