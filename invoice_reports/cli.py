"""Command-line entrypoints for generating and browsing sales reports."""
from __future__ import annotations

from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from .aggregator import InvoiceAggregator
from .config import Settings, configure_logging
from .errors import NotFoundError, ReportError
from .listing import get_report, list_reports
from .schemas import ReportKind, ReportRequest
from .store import Stores
from .summarizer import ReportGenerator

app = typer.Typer(add_completion=False, help="Invoice sales reports CLI")
console = Console()


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="YAML settings file"),
) -> None:
    settings = Settings.load(config)
    configure_logging(settings.log_level)
    ctx.obj = settings


def _stores(ctx: typer.Context) -> Stores:
    return Stores.from_settings(ctx.obj)


def _print_summary(payload) -> None:
    breakdowns = ((payload.data or {}).get("data") or {}).get("summary") or {}
    print(f"[bold]{payload.report_name}[/bold] ({payload.report_type.value})")
    print(f"[bold]Invoices:[/bold] {payload.total_invoices}  [green]Total sales:[/green] {payload.total_sales:.2f}")
    for title, key in (("By status", "byStatus"), ("By invoice type", "byInvoiceType"), ("By account", "byAccount")):
        breakdown = breakdowns.get(key) or {}
        if not breakdown:
            continue
        table = Table(title=title)
        table.add_column("Value")
        table.add_column("Amount", justify="right")
        for value, amount in sorted(breakdown.items(), key=lambda x: x[1], reverse=True):
            table.add_row(str(value), f"{amount:.2f}")
        console.print(table)


@app.command()
def generate(
    ctx: typer.Context,
    report_type: ReportKind = typer.Option(ReportKind.MONTHLY, "--type", help="daily, monthly or yearly"),
    year: Optional[str] = typer.Option(None, help="Report year"),
    month: Optional[str] = typer.Option(None, help="Month (number or name); a day token like 03-15 for daily"),
    start: Optional[str] = typer.Option(None, help="Explicit range start, overrides month/year"),
    end: Optional[str] = typer.Option(None, help="Explicit range end, overrides month/year"),
    account: str = typer.Option("all", help="Account id or 'all'"),
    invoice_type: str = typer.Option("all", help="tax, simple, detailed or 'all'"),
    status: str = typer.Option("all", help="pending, paid, cancelled or 'all'"),
    name: Optional[str] = typer.Option(None, help="Report name; defaults to the report type"),
    user: Optional[str] = typer.Option(None, help="Identifier recorded as generatedBy"),
) -> None:
    """Generate and store a sales report."""
    settings: Settings = ctx.obj
    request = ReportRequest.model_validate(
        {
            "reportType": report_type,
            "reportName": name,
            "generatedBy": user,
            "filters": {
                "account": account,
                "invoiceType": invoice_type,
                "status": status,
                "dateRange": {"startDate": start, "endDate": end, "month": month, "year": year},
            },
        }
    )
    with _stores(ctx) as stores:
        generator = ReportGenerator(InvoiceAggregator(stores.invoices), stores.reports)
        try:
            generated = generator.generate(request, request.generated_by or settings.default_user)
        except ReportError as exc:
            print(f"[red]{exc.message}:[/red] {exc.detail}")
            raise typer.Exit(code=1)
    _print_summary(generated.payload)
    print(f"Report stored with id {generated.report_id}")


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List stored reports, newest first."""
    with _stores(ctx) as stores:
        reports = list_reports(stores.reports)
    table = Table(title=f"{len(reports)} reports")
    for column in ("Id", "Name", "Type", "Created", "Invoices", "Sales"):
        table.add_column(column)
    for report in reports:
        table.add_row(
            report.report_id,
            report.report_name or "",
            report.report_type or "",
            report.created_at.strftime("%Y-%m-%d %H:%M") if report.created_at else "",
            str(report.total_invoices),
            f"{report.total_sales:.2f}",
        )
    console.print(table)


@app.command()
def show(ctx: typer.Context, report_id: str = typer.Argument(..., help="Report id")) -> None:
    """Print one stored report as JSON."""
    with _stores(ctx) as stores:
        try:
            report = get_report(stores.reports, stores.accounts, report_id)
        except NotFoundError as exc:
            print(f"[red]{exc.message}:[/red] {exc.detail}")
            raise typer.Exit(code=1)
    console.print_json(data=report, default=str)


def main():
    app()


if __name__ == "__main__":
    main()
