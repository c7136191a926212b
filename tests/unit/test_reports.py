#!/usr/bin/env python3
"""Tests for the Excel verification report."""

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from order_payment_recon.reports import ExcelReportGenerator
from order_payment_recon.service import ReconciliationService
from order_payment_recon.stores import InMemoryOrderStore
from tests.fixtures.factories import make_order, make_transaction


@pytest.fixture
def transactions():
    return [
        make_transaction("00098765", "1500.00", row_number=5),
        make_transaction("7777123456", "1000.00", row_number=6),
        make_transaction("555", "12.00", description="COMISION", row_number=7),
    ]


@pytest.fixture
def orders():
    return [
        make_order("s1", "98765", "1500.00", customer_name="Ana Perez"),
        make_order("s2", "8888123456", "1060.00", customer_name="Luis Rojas"),
    ]


def reconcile(config, transactions, orders, settle=True):
    store = InMemoryOrderStore(orders)
    return ReconciliationService(config).run_transactions(
        transactions, store, statement_name="statement.xlsx", settle=settle
    )


class TestExcelReportGenerator:
    """Test workbook layout and content."""

    def test_all_sheets_written(self, config, temp_dir, transactions, orders):
        run = reconcile(config, transactions, orders)

        path = ExcelReportGenerator(config).generate_report(run, temp_dir / "report.xlsx")

        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Summary",
            "Matches",
            "Manual Review",
            "Settlement",
            "Unmatched Transactions",
        ]
        assert wb["Summary"]["B4"].value == "statement.xlsx"

    def test_match_rows(self, config, temp_dir, transactions, orders):
        config.settlement.auto_approve_threshold = 90
        run = reconcile(config, transactions, orders)

        path = ExcelReportGenerator(config).generate_report(run, temp_dir / "report.xlsx")

        wb = load_workbook(path)
        matches = list(wb["Matches"].iter_rows(min_row=2, values_only=True))
        assert [row[0] for row in matches] == ["ORD-s1", "ORD-s2"]
        assert matches[0][9] == "Exact"
        assert matches[1][6] == -60
        assert matches[1][11] == 85
        review = list(wb["Manual Review"].iter_rows(min_row=2, values_only=True))
        assert [row[0] for row in review] == ["ORD-s2"]
        unmatched = list(wb["Unmatched Transactions"].iter_rows(min_row=2, values_only=True))
        assert [row[2] for row in unmatched] == ["555"]

    def test_settlement_sheet(self, config, temp_dir, transactions, orders):
        run = reconcile(config, transactions, orders)

        path = ExcelReportGenerator(config).generate_report(run, temp_dir / "report.xlsx")

        rows = list(load_workbook(path)["Settlement"].iter_rows(values_only=True))
        assert rows[0] == ("Order", "Order ID", "Result", "Reason")
        assert [row[:3] for row in rows[1:]] == [
            ("ORD-s1", "s1", "Updated"),
            ("ORD-s2", "s2", "Updated"),
        ]

    def test_dry_run_settlement_sheet(self, config, temp_dir, transactions, orders):
        run = reconcile(config, transactions, orders, settle=False)

        path = ExcelReportGenerator(config).generate_report(run, temp_dir / "report.xlsx")

        ws = load_workbook(path)["Settlement"]
        assert ws["A1"].value == "Dry run - no orders were updated"

    def test_disabled_sheets_are_skipped(self, config, temp_dir, transactions, orders):
        config.output.sheets.manual_review.enabled = False
        config.output.sheets.unmatched.enabled = False
        run = reconcile(config, transactions, orders)

        path = ExcelReportGenerator(config).generate_report(run, temp_dir / "report.xlsx")

        assert load_workbook(path).sheetnames == ["Summary", "Matches", "Settlement"]

    def test_default_output_path(self, config):
        generator = ExcelReportGenerator(config)
        now = datetime(2024, 8, 15, 9, 30, 0)

        assert generator.default_output_path(now) == Path(
            "payment_verification_20240815_093000.xlsx"
        )

        config.output.excel.include_timestamp = False
        assert generator.default_output_path(now) == Path("payment_verification.xlsx")
