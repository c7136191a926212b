"""
Reconciliation run orchestration.
Parses a bank statement, fetches the open orders, matches them and
settles the high-confidence matches.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from .config import ReconConfig
from .matching.engine import PaymentMatcher
from .models.payment import BankTransaction, ReconciliationRun
from .parsers.statement_parser import BankStatementParser
from .settlement import AutoSettlementGate
from .stores.base import OrderStore


class ReconciliationService:
    """Runs one payment verification pass per uploaded statement."""

    def __init__(self, config: ReconConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize the service.

        Args:
            config: Application configuration
            logger: Logger passed down to the matcher and settlement gate
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.parser = BankStatementParser(config)
        self.matcher = PaymentMatcher(config, logger=logger)
        self.gate = AutoSettlementGate(config.settlement, logger=logger)

    def run(
        self, statement_path: Path, store: OrderStore, settle: bool = True
    ) -> ReconciliationRun:
        """
        Reconcile a bank statement file against the open orders.

        Args:
            statement_path: Uploaded bank statement
            store: Order store to read open orders from and settle into
            settle: When False, matches are computed but no order is updated

        Returns:
            The reconciliation run

        Raises:
            StatementParseError: If the statement cannot be parsed; nothing
                is matched in that case
            OrderStoreError: If open orders cannot be fetched
        """
        transactions = self.parser.parse_file(statement_path)
        return self.run_transactions(
            transactions, store, statement_name=statement_path.name, settle=settle
        )

    def run_transactions(
        self,
        transactions: list[BankTransaction],
        store: OrderStore,
        statement_name: str = "",
        settle: bool = True,
    ) -> ReconciliationRun:
        """Reconcile already parsed transactions against the open orders."""
        started_at = datetime.now()
        settlement_config = self.config.settlement

        orders = store.fetch_open_orders(
            settlement_config.channel, settlement_config.pending_status
        )

        if not transactions:
            self.logger.info("No transactions found in bank statement")

        matches = self.matcher.find_matches(transactions, orders)
        auto_approved, manual_review = self.gate.partition(matches)
        self.logger.info(
            f"{len(matches)} matches: {len(auto_approved)} auto-approved, "
            f"{len(manual_review)} for manual review"
        )

        settlement = self.gate.settle(auto_approved, store) if settle else None

        return ReconciliationRun(
            statement_name=statement_name,
            transactions=transactions,
            orders=orders,
            matches=matches,
            auto_approved=auto_approved,
            manual_review=manual_review,
            settlement=settlement,
            started_at=started_at,
            processing_time_seconds=(datetime.now() - started_at).total_seconds(),
            config_file_used=self.config.config_file_path,
        )
