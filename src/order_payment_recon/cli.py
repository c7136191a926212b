"""
Command-line interface for the order payment verification tool.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config
from .models.payment import MatchType, PaymentMatch, ReconciliationSummary
from .parsers.statement_parser import BankStatementParser
from .reports.excel_generator import ExcelReportGenerator
from .service import ReconciliationService
from .stores.csv_store import CsvOrderStore
from .utils.logging_config import setup_logging

console = Console()

# Exit status when some auto-approved orders could not be updated
EXIT_PARTIAL_SETTLEMENT = 2


@click.group()
@click.version_option(version=__version__)
def main():
    """Verify channel order payments against bank statements."""
    pass


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.argument("orders_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--threshold",
    type=click.IntRange(0, 100),
    default=None,
    help="Override the auto-approve confidence threshold",
)
@click.option("--log-file", type=click.Path(path_type=Path), help="Also log to this file")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Compute matches without updating any order"
)
@click.option("--no-report", is_flag=True, help="Do not write the Excel report")
def reconcile(
    statement_file: Path,
    orders_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    threshold: Optional[int],
    log_file: Optional[Path],
    verbose: bool,
    dry_run: bool,
    no_report: bool,
):
    """
    Verify open order payments against a bank statement.

    STATEMENT_FILE: Bank statement export (.xlsx or .csv)
    ORDERS_FILE: CSV export of the order table
    """
    try:
        recon_config = load_config(config)
        log_level = (
            logging.DEBUG
            if verbose
            else getattr(logging, recon_config.logging.level.upper(), logging.INFO)
        )
        setup_logging(log_level, log_file=log_file, log_format=recon_config.logging.format)

        if threshold is not None:
            recon_config.settlement.auto_approve_threshold = threshold

        store = CsvOrderStore(orders_file, recon_config)
        service = ReconciliationService(recon_config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Reconciling bank statement...", total=None)
            run = service.run(statement_file, store, settle=not dry_run)
            progress.update(task, completed=True)

        summary = ReconciliationSummary.from_run(run)
        _display_summary(summary)
        _display_matches(run.matches, recon_config.settlement.auto_approve_threshold)

        if run.settlement and run.settlement.failures:
            _display_failures(run.settlement.failures)

        if dry_run:
            console.print("\n[yellow]Dry run - no orders were updated[/yellow]")

        if not no_report:
            report_generator = ExcelReportGenerator(recon_config)
            report_path = report_generator.generate_report(
                run, output or report_generator.default_output_path()
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)

    if run.settlement and not run.settlement.is_complete:
        console.print(
            f"\n[yellow]{run.settlement.failed_count} of {run.settlement.requested} "
            f"orders could not be updated; verify them again[/yellow]"
        )
        sys.exit(EXIT_PARTIAL_SETTLEMENT)


@main.command("parse-statement")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_statement(statement_file: Path, config: Optional[Path]):
    """
    Parse a bank statement and display its transactions.

    STATEMENT_FILE: Bank statement export (.xlsx or .csv)
    """
    recon_config = load_config(config)
    parser = BankStatementParser(recon_config)

    try:
        transactions = parser.parse_file(statement_file)

        table = Table(title=f"Bank Transactions: {statement_file.name}")
        table.add_column("Row", justify="right")
        table.add_column("Date")
        table.add_column("Reference")
        table.add_column("Amount", justify="right")
        table.add_column("Description")

        for txn in transactions[:20]:  # Show first 20
            table.add_row(
                str(txn.row_number or "-"),
                str(txn.date),
                txn.reference or "-",
                _format_amount(txn.amount),
                (
                    txn.description[:40] + "..."
                    if len(txn.description) > 40
                    else txn.description
                ),
            )

        console.print(table)

        if len(transactions) > 20:
            console.print(f"\n... and {len(transactions) - 20} more transactions")

        console.print(f"\nTotal transactions: {len(transactions)}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)


@main.command("pending-orders")
@click.argument("orders_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("--limit", type=int, default=10, show_default=True, help="Rows to display")
def pending_orders(orders_file: Path, config: Optional[Path], limit: int):
    """
    List channel orders waiting for payment verification.

    ORDERS_FILE: CSV export of the order table
    """
    recon_config = load_config(config)
    settlement = recon_config.settlement
    store = CsvOrderStore(orders_file, recon_config)

    try:
        orders = store.fetch_open_orders(settlement.channel, settlement.pending_status)
    except Exception as e:
        console.print(f"[red]Error reading orders: {e}[/red]")
        sys.exit(1)

    if not orders:
        console.print(
            f"No '{settlement.channel}' orders pending verification "
            f"(status '{settlement.pending_status}')."
        )
        return

    table = Table(title=f"Orders Pending Verification ({len(orders)})")
    table.add_column("Order")
    table.add_column("Customer")
    table.add_column("Reference")
    table.add_column("Amount", justify="right")
    table.add_column("Status")

    for order in orders[:limit]:
        table.add_row(
            order.order_number,
            order.customer_name,
            order.initial_reference or "N/A",
            _format_amount(order.initial_amount_local),
            order.status,
        )

    console.print(table)

    if len(orders) > limit:
        console.print(f"\n... and {len(orders) - limit} more orders")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _format_amount(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Payment Verification Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Bank Transactions", str(summary.total_transactions))
    table.add_row("Open Orders", str(summary.total_open_orders))
    table.add_row("Candidate Matches", str(summary.match_count))
    table.add_row("Auto-approved", str(summary.auto_approved_count))
    table.add_row("Manual Review", str(summary.manual_review_count))
    table.add_row("Unmatched Transactions", str(summary.unmatched_transaction_count))
    table.add_row("Order Match Rate", f"{summary.order_match_rate:.1f}%")
    if not summary.dry_run:
        table.add_row(
            "Orders Updated",
            f"{summary.settlement_applied} / {summary.settlement_requested}",
        )
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)


def _display_matches(matches: list[PaymentMatch], threshold: int) -> None:
    """Display the candidate matches."""
    if not matches:
        return

    table = Table(title="Payment Matches")
    table.add_column("Order")
    table.add_column("Customer")
    table.add_column("Order Ref.")
    table.add_column("Bank Ref.")
    table.add_column("Order Amount", justify="right")
    table.add_column("Bank Amount", justify="right")
    table.add_column("Match")

    for match in matches:
        style = "green" if match.match_type is MatchType.EXACT else None
        if not match.is_auto_approvable(threshold):
            style = "yellow"
        table.add_row(
            match.order.order_number,
            match.order.customer_name,
            match.order.initial_reference or "",
            match.transaction.reference,
            _format_amount(match.order.initial_amount_local),
            _format_amount(match.transaction.amount),
            f"{match.match_type.label} ({match.confidence}%)",
            style=style,
        )

    console.print(table)


def _display_failures(failures) -> None:
    table = Table(title="Orders Not Updated")
    table.add_column("Order")
    table.add_column("Reason", style="red")
    for failure in failures:
        table.add_row(failure.order_number, failure.reason)
    console.print(table)


if __name__ == "__main__":
    main()
