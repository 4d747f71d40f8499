"""Error taxonomy for report generation and retrieval."""
from __future__ import annotations


class ReportError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""

    status_code = 500
    message = "Error generating report"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(ReportError):
    status_code = 400
    message = "Invalid report request"


class AggregationError(ReportError):
    message = "Error querying invoices"


class PersistenceError(ReportError):
    message = "Error generating report"


class NotFoundError(ReportError):
    status_code = 404
    message = "Report not found"
