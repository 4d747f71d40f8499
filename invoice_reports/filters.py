"""Resolve a report request into a concrete date range and invoice predicate."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import ValidationError
from .schemas import DateRangeInput, FiltersApplied, ReportKind, ReportRequest, ResolvedDateRange
from .utils import first_of_month, last_day_of_month, normalize_filter, parse_datetime, parse_month, parse_year

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceQuery:
    """Resolved date range plus the exact-match constraints that survived normalization."""

    date_range: ResolvedDateRange
    account: Optional[str] = None
    invoice_type: Optional[str] = None
    status: Optional[str] = None

    @property
    def start(self) -> datetime:
        return self.date_range.start_date

    @property
    def end(self) -> datetime:
        return self.date_range.end_date

    def to_predicate(self) -> Dict[str, Any]:
        predicate: Dict[str, Any] = {"invoiceDate": {"$gte": self.start, "$lte": self.end}}
        if self.account is not None:
            predicate["account"] = self.account
        if self.invoice_type is not None:
            predicate["invoiceType"] = self.invoice_type
        if self.status is not None:
            predicate["status"] = self.status
        return predicate

    def filters_applied(self) -> FiltersApplied:
        return FiltersApplied(
            date_range=self.date_range,
            account=self.account,
            invoice_type=self.invoice_type,
            status=self.status,
        )


def _explicit_range(date_range: DateRangeInput) -> ResolvedDateRange:
    start = parse_datetime(date_range.start_date)
    end = parse_datetime(date_range.end_date)
    if start is None or end is None:
        raise ValidationError("startDate and endDate must be valid dates")
    if start > end:
        raise ValidationError("startDate must not be after endDate")
    return ResolvedDateRange(start_date=start, end_date=end, month=date_range.month, year=date_range.year)


def _require_year(date_range: DateRangeInput) -> int:
    if not date_range.year:
        raise ValidationError("year required")
    year = parse_year(date_range.year)
    if year is None:
        raise ValidationError(f"invalid year: {date_range.year!r}")
    return year


def _parse_day(token: str, year: int) -> datetime:
    default = datetime(year, 1, 1)
    day = parse_datetime(f"{year}-{token}", default=default) or parse_datetime(token, default=default)
    if day is None:
        raise ValidationError(f"invalid date: {token!r}")
    return day


def resolve_date_range(kind: ReportKind, date_range: DateRangeInput) -> ResolvedDateRange:
    """Turn an explicit range or a month/year selection into ``[start, end]``.

    An explicit ``startDate``/``endDate`` pair always wins. Otherwise:

    - yearly: Jan 1 through Dec 31 of ``year``
    - monthly: the first through the last calendar day of ``month``
    - daily: ``month`` holds a day token (``"03-15"``) and start equals end
    """
    if date_range.is_explicit:
        return _explicit_range(date_range)

    if kind is ReportKind.YEARLY:
        year = _require_year(date_range)
        return ResolvedDateRange(
            start_date=datetime(year, 1, 1),
            end_date=datetime(year, 12, 31),
            year=date_range.year,
        )

    if not date_range.month:
        raise ValidationError("month required")
    year = _require_year(date_range)

    if kind is ReportKind.MONTHLY:
        month = parse_month(date_range.month)
        if month is None:
            raise ValidationError(f"invalid month: {date_range.month!r}")
        return ResolvedDateRange(
            start_date=first_of_month(year, month),
            end_date=last_day_of_month(year, month),
            month=date_range.month,
            year=date_range.year,
        )

    # Daily ranges collapse to one instant.
    day = _parse_day(date_range.month, year)
    return ResolvedDateRange(start_date=day, end_date=day, month=date_range.month, year=date_range.year)


def resolve_filters(request: ReportRequest) -> InvoiceQuery:
    filters = request.filters
    date_range = resolve_date_range(request.report_type, filters.date_range)
    query = InvoiceQuery(
        date_range=date_range,
        account=normalize_filter(filters.account),
        invoice_type=normalize_filter(filters.invoice_type),
        status=normalize_filter(filters.status),
    )
    logger.debug("Resolved %s report filters: %s", request.report_type.value, query.to_predicate())
    return query
