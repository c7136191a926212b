"""
Auto-settlement of verified payments.

Splits the candidate matches into auto-approved and manual-review sets
and advances the orders of the auto-approved ones in the order store.
"""

from typing import Optional
import logging

from .config import SettlementConfig
from .models.payment import PaymentMatch, SettlementFailure, SettlementResult
from .stores.base import OrderStore
from .utils.exceptions import OrderStoreError


class AutoSettlementGate:
    """
    The single side-effecting boundary of a reconciliation run.

    Failures are collected into the result instead of raised. Applied
    updates are kept and nothing is retried; a failed order has to be
    verified again in a later run.
    """

    def __init__(
        self,
        settlement: Optional[SettlementConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settlement = settlement or SettlementConfig()
        self.threshold = self.settlement.auto_approve_threshold
        self.logger = logger or logging.getLogger(__name__)

    def partition(
        self, matches: list[PaymentMatch]
    ) -> tuple[list[PaymentMatch], list[PaymentMatch]]:
        """
        Split matches by the auto-approve threshold.

        Args:
            matches: All candidate matches of the run

        Returns:
            Tuple of (auto_approved, manual_review); together they hold
            every match, in the original order
        """
        auto_approved = [m for m in matches if m.is_auto_approvable(self.threshold)]
        manual_review = [m for m in matches if not m.is_auto_approvable(self.threshold)]
        return auto_approved, manual_review

    def settle(self, matches: list[PaymentMatch], store: OrderStore) -> SettlementResult:
        """
        Advance the orders of all auto-approvable matches.

        Each order is submitted once, even when several transactions
        matched it. The update is conditional on the order still being in
        the pending status.

        Args:
            matches: Candidate matches (matches below the threshold are ignored)
            store: Order store receiving the status updates

        Returns:
            Settlement result with requested, applied and failed orders
        """
        result = SettlementResult()
        submitted: set[str] = set()

        for match in matches:
            if not match.is_auto_approvable(self.threshold):
                continue

            order = match.order
            if order.id in submitted:
                continue
            submitted.add(order.id)
            result.requested += 1

            try:
                applied = store.advance_status(
                    order.id,
                    expected_status=self.settlement.pending_status,
                    new_status=self.settlement.verified_status,
                )
            except OrderStoreError as e:
                self.logger.error(f"Error updating order {order.order_number}: {e}")
                result.failures.append(
                    SettlementFailure(order.id, order.order_number, str(e))
                )
                continue

            if applied:
                result.applied.append(order.id)
                self.logger.info(
                    f"Order {order.order_number} verified "
                    f"({match.match_type.value}, {match.confidence}%): "
                    f"{self.settlement.pending_status} -> {self.settlement.verified_status}"
                )
            else:
                result.failures.append(
                    SettlementFailure(
                        order.id,
                        order.order_number,
                        f"order is no longer '{self.settlement.pending_status}'",
                    )
                )
                self.logger.warning(
                    f"Order {order.order_number} was not updated: status changed "
                    f"since it was fetched"
                )

        if result.is_complete:
            self.logger.info(f"Settled {result.applied_count} orders")
        else:
            self.logger.warning(
                f"Settled {result.applied_count} of {result.requested} orders; "
                f"{result.failed_count} failed"
            )

        return result
