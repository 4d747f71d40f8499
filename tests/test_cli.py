"""Tests for the typer CLI."""

import pytest
from typer.testing import CliRunner

from invoice_reports import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def mock_stores(stores, monkeypatch):
    monkeypatch.setattr(cli, "_stores", lambda ctx: stores)


def test_generate_monthly(db, march_invoices):
    result = runner.invoke(
        cli.app, ["generate", "--type", "monthly", "--month", "march", "--year", "2024", "--status", "paid"]
    )
    assert result.exit_code == 0, result.output
    assert "500.00" in result.output
    report = db.reports.find_one({})
    assert report["totalInvoices"] == 3
    assert report["generatedBy"] == "system"
    assert str(report["_id"]) in result.output


def test_generate_validation_error(db):
    result = runner.invoke(cli.app, ["generate", "--type", "yearly"])
    assert result.exit_code == 1
    assert "year required" in result.output
    assert db.reports.count_documents({}) == 0


def test_list_and_show(db, march_invoices):
    runner.invoke(cli.app, ["generate", "--type", "yearly", "--year", "2024", "--name", "FY2024", "--user", "ana"])
    report_id = str(db.reports.find_one({})["_id"])

    listed = runner.invoke(cli.app, ["list"])
    assert listed.exit_code == 0
    assert "FY2024" in listed.output

    shown = runner.invoke(cli.app, ["show", report_id])
    assert shown.exit_code == 0
    assert '"reportName": "FY2024"' in shown.output


def test_show_missing():
    result = runner.invoke(cli.app, ["show", "0123456789abcdef01234567"])
    assert result.exit_code == 1
    assert "Report not found" in result.output


def test_generate_prints_breakdowns(march_invoices):
    result = runner.invoke(cli.app, ["generate", "--month", "march", "--year", "2024"])
    assert result.exit_code == 0, result.output
    assert "By status" in result.output
    assert "By invoice type" in result.output
    assert "By account" in result.output
    assert "pending" in result.output


def test_commands_close_their_stores(stores, monkeypatch):
    closed = []
    monkeypatch.setattr(stores, "close", lambda: closed.append(True))
    runner.invoke(cli.app, ["list"])
    assert closed == [True]
