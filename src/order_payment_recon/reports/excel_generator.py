"""
Excel report generator for payment verification results.
Creates multi-sheet workbooks with formatted output for manual review.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.payment import (
    BankTransaction,
    MatchType,
    PaymentMatch,
    ReconciliationRun,
    ReconciliationSummary,
    SettlementResult,
)
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
EXACT_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
REVIEW_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
FAILED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

MATCH_HEADERS = [
    "Order",
    "Customer",
    "Order Reference",
    "Bank Reference",
    "Order Amount",
    "Bank Amount",
    "Difference",
    "Bank Date",
    "Statement Row",
    "Match Type",
    "Matching Digits",
    "Confidence",
]


class ExcelReportGenerator:
    """Generates Excel verification reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets
        self.threshold = config.settlement.auto_approve_threshold

    def default_output_path(self, now: Optional[datetime] = None) -> Path:
        """Build the report filename from the configured template."""
        now = now or datetime.now()
        template = self.config.output.excel.filename_template
        if not self.config.output.excel.include_timestamp:
            return Path(template.replace("_{date}", "").replace("_{time}", ""))
        return Path(template.format(date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")))

    def generate_report(self, run: ReconciliationRun, output_path: Path) -> Path:
        """
        Generate the complete verification report.

        Args:
            run: Finished reconciliation run
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        summary = ReconciliationSummary.from_run(run)
        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, sheets.summary, summary)
        if sheets.matches.enabled:
            self._create_match_sheet(wb, sheets.matches, run.matches)
        if sheets.manual_review.enabled:
            self._create_match_sheet(wb, sheets.manual_review, run.manual_review)
        if sheets.settlement.enabled:
            self._create_settlement_sheet(wb, sheets.settlement, run)
        if sheets.unmatched.enabled:
            self._create_unmatched_sheet(wb, sheets.unmatched, run.unmatched_transactions)

        if not wb.sheetnames:
            wb.create_sheet(sheets.summary.name)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _write_headers(self, ws: Worksheet, headers: list[str], row: int = 1) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _create_summary_sheet(
        self, wb: Workbook, sheet: SheetConfig, summary: ReconciliationSummary
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Payment Verification Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections = [
            (
                "Run Information",
                [
                    ("Bank Statement:", summary.statement_name),
                    (
                        "Reconciliation Date:",
                        summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S"),
                    ),
                    ("Config File:", summary.config_file_used or "Default"),
                    ("Mode:", "Dry run" if summary.dry_run else "Settled"),
                ],
            ),
            (
                "Counts",
                [
                    ("Bank Transactions:", summary.total_transactions),
                    ("Open Orders:", summary.total_open_orders),
                    ("Candidate Matches:", summary.match_count),
                    ("Auto-approved:", summary.auto_approved_count),
                    ("Manual Review:", summary.manual_review_count),
                    ("Unmatched Transactions:", summary.unmatched_transaction_count),
                    ("Unmatched Orders:", summary.unmatched_order_count),
                    ("Order Match Rate:", f"{summary.order_match_rate:.1f}%"),
                ],
            ),
            (
                "Settlement",
                [
                    ("Orders Requested:", summary.settlement_requested),
                    ("Orders Updated:", summary.settlement_applied),
                    ("Orders Failed:", summary.settlement_failed),
                ],
            ),
        ]

        row = 3
        for title, items in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in items:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                row += 1
            row += 1

        ws[f"A{row}"] = "Matches by Type"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1
        for match_type, count in summary.matches_by_type.items():
            ws[f"A{row}"] = MatchType(match_type).label
            ws[f"B{row}"] = count
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_match_sheet(
        self, wb: Workbook, sheet: SheetConfig, matches: list[PaymentMatch]
    ) -> None:
        """Create a sheet listing matches, one row per order/transaction pair."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, MATCH_HEADERS)

        for row_num, match in enumerate(matches, start=2):
            order = match.order
            txn = match.transaction
            row_data = [
                order.order_number,
                order.customer_name,
                order.initial_reference or "",
                txn.reference,
                float(order.initial_amount_local),
                float(txn.amount),
                float(match.amount_difference) if match.amount_difference is not None else "",
                txn.date,
                txn.row_number or "",
                match.match_type.label,
                match.matching_digits,
                match.confidence,
            ]

            if match.match_type is MatchType.EXACT:
                fill = EXACT_FILL
            elif not match.is_auto_approvable(self.threshold):
                fill = REVIEW_FILL
            else:
                fill = None

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if fill:
                    cell.fill = fill

        self._auto_fit_columns(ws)

    def _create_settlement_sheet(
        self, wb: Workbook, sheet: SheetConfig, run: ReconciliationRun
    ) -> None:
        """Create the sheet of applied and failed order updates."""
        ws = wb.create_sheet(sheet.name)
        settlement: Optional[SettlementResult] = run.settlement

        if settlement is None:
            ws["A1"] = "Dry run - no orders were updated"
            ws["A1"].font = Font(bold=True)
            return

        self._write_headers(ws, ["Order", "Order ID", "Result", "Reason"])

        order_numbers = {m.order.id: m.order.order_number for m in run.auto_approved}
        row = 2
        for order_id in settlement.applied:
            values = [order_numbers.get(order_id, order_id), order_id, "Updated", ""]
            for col, value in enumerate(values, start=1):
                ws.cell(row=row, column=col, value=value).border = THIN_BORDER
            row += 1

        for failure in settlement.failures:
            values = [failure.order_number, failure.order_id, "Failed", failure.reason]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = FAILED_FILL
            row += 1

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self, wb: Workbook, sheet: SheetConfig, transactions: list[BankTransaction]
    ) -> None:
        """Create the sheet of statement lines without any candidate."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Statement Row", "Date", "Reference", "Amount", "Description"])

        for row_num, txn in enumerate(transactions, start=2):
            row_data = [
                txn.row_number or "",
                txn.date,
                txn.reference,
                float(txn.amount),
                txn.description,
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER

        self._auto_fit_columns(ws)

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            column = column_cells[0].column_letter
            ws.column_dimensions[column].width = min(max_length + 2, 50)
