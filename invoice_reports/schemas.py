"""Data models used across the resolver, aggregator, summarizer, CLI, and API."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReportKind(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire and in the document store."""

    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    value = str(value).strip()
    return value or None


class DateRangeInput(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    month: Optional[str] = None
    year: Optional[str] = None

    @field_validator("start_date", "end_date", "month", "year", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def is_explicit(self) -> bool:
        return bool(self.start_date and self.end_date)


class ReportFilters(CamelModel):
    account: Optional[str] = "all"
    date_range: DateRangeInput = Field(default_factory=DateRangeInput)
    invoice_type: Optional[str] = "all"
    status: Optional[str] = "all"


class ReportRequest(CamelModel):
    report_type: ReportKind
    filters: ReportFilters
    report_name: Optional[str] = None
    generated_by: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("generatedBy", "createdBy", "generated_by"),
    )


class ResolvedDateRange(CamelModel):
    start_date: datetime
    end_date: datetime
    month: Optional[str] = None
    year: Optional[str] = None


class ReportLineItem(CamelModel):
    date: Optional[datetime] = None
    invoice_number: Optional[str] = None
    account_name: str = "N/A"
    amount: float = 0.0
    status: Optional[str] = None
    invoice_type: Optional[str] = None


class ReportBreakdowns(CamelModel):
    by_status: Dict[str, float] = Field(default_factory=dict)
    by_invoice_type: Dict[str, float] = Field(default_factory=dict)
    by_account: Dict[str, float] = Field(default_factory=dict)


class ReportSummary(ReportBreakdowns):
    total_sales: float = 0.0
    total_items: int = 0


class ReportData(CamelModel):
    total_sales: float = 0.0
    total_items: int = 0
    items: List[ReportLineItem] = Field(default_factory=list)
    summary: ReportBreakdowns = Field(default_factory=ReportBreakdowns)

    @classmethod
    def from_summary(cls, summary: ReportSummary, items: List[ReportLineItem]) -> ReportData:
        return cls(
            total_sales=summary.total_sales,
            total_items=summary.total_items,
            items=items,
            summary=ReportBreakdowns(
                by_status=summary.by_status,
                by_invoice_type=summary.by_invoice_type,
                by_account=summary.by_account,
            ),
        )


class FiltersApplied(CamelModel):
    date_range: ResolvedDateRange
    account: Optional[str] = None
    invoice_type: Optional[str] = None
    status: Optional[str] = None


class ReportDocument(CamelModel):
    model_config = ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    report_name: str
    report_type: ReportKind
    generated_by: str
    filters_applied: FiltersApplied
    total_invoices: int = 0
    report_data: List[ReportLineItem] = Field(default_factory=list)
    data: ReportData = Field(default_factory=ReportData)
    created_at: datetime
    updated_at: datetime

    def to_document(self) -> Dict[str, Any]:
        """Shape stored in the report collection; unset filters are omitted."""
        return self.model_dump(mode="python", by_alias=True, exclude_none=True)


class ReportPayload(CamelModel):
    report_id: str = Field(alias="_id")
    report_type: ReportKind
    report_name: str
    filters_applied: Dict[str, Any] = Field(default_factory=dict)
    total_invoices: int = 0
    total_sales: float = 0.0
    created_at: datetime
    data: Optional[Dict[str, Any]] = None


class GenerateReportResponse(CamelModel):
    message: str = "Report generated successfully"
    report_id: str
    report: ReportPayload


class ReportListEntry(CamelModel):
    report_id: str = Field(alias="_id")
    report_type: Optional[str] = None
    report_name: Optional[str] = None
    created_at: Optional[datetime] = None
    filters_applied: Dict[str, Any] = Field(default_factory=dict)
    total_invoices: int = 0
    total_sales: float = 0.0
    report_data: List[Dict[str, Any]] = Field(default_factory=list)


class AccountOption(CamelModel):
    account_id: str = Field(alias="_id")
    name: str
    code: Optional[str] = None
    type: Optional[str] = None
    city: Optional[str] = None
    branch: Optional[str] = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    error: Optional[str] = None
    stack: Optional[str] = None
