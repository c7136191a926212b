"""
Payment matching engine.
Compares every bank transaction against every open order and collects
the candidate matches produced by the scorer.
"""

from datetime import datetime
from typing import Optional
import logging

from ..config import MatchingConfig, ReconConfig
from ..models.payment import BankTransaction, Order, PaymentMatch
from .reference import ReferenceComparator
from .scoring import MatchScorer


class PaymentMatcher:
    """
    Pairs bank transactions with open orders.

    The matcher is a pure function of its inputs: it holds no state
    between runs and performs no side effects beyond logging.
    """

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        comparator: Optional[ReferenceComparator] = None,
        scorer: Optional[MatchScorer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the matcher.

        Args:
            config: Application configuration (defaults used if omitted)
            comparator: Reference comparator overriding the configured one
            scorer: Match scorer overriding the configured one
            logger: Logger receiving comparison decisions
        """
        matching = config.matching if config else MatchingConfig()
        self.comparator = comparator or self._build_comparator(matching)
        self.scorer = scorer or self._build_scorer(matching)
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _build_comparator(matching: MatchingConfig) -> ReferenceComparator:
        return ReferenceComparator(
            exact_embedded_min_digits=matching.exact_embedded_min_digits,
            strong_partial_digits=matching.strong_partial_digits,
            substring_min_digits=matching.substring_min_digits,
            suffix_digits=matching.suffix_digits,
            prefix_digits=matching.prefix_digits,
        )

    @staticmethod
    def _build_scorer(matching: MatchingConfig) -> MatchScorer:
        return MatchScorer(
            min_reference_digits=matching.min_reference_digits,
            strong_partial_digits=matching.strong_partial_digits,
            strong_amount_tolerance=matching.strong_amount_tolerance,
            weak_amount_tolerance=matching.weak_amount_tolerance,
            exact_confidence=matching.exact_confidence,
            strong_confidence=matching.strong_confidence,
            weak_confidence=matching.weak_confidence,
        )

    def find_matches(
        self,
        transactions: list[BankTransaction],
        orders: list[Order],
    ) -> list[PaymentMatch]:
        """
        Find candidate matches over the full transactions x orders product.

        Args:
            transactions: Transactions parsed from the bank statement
            orders: Open orders awaiting payment verification

        Returns:
            Matches in statement order, then order-list order. One
            transaction may match several orders and vice versa.
        """
        start_time = datetime.now()
        self.logger.info(
            f"Matching {len(transactions)} bank transactions against "
            f"{len(orders)} open orders"
        )

        matches: list[PaymentMatch] = []

        for transaction in transactions:
            for order in orders:
                if not order.initial_reference:
                    continue

                comparison = self.comparator.compare(
                    transaction.reference, order.initial_reference
                )
                match = self.scorer.score(comparison, transaction, order)

                outcome = (
                    f"{match.match_type.value} ({match.confidence}%)" if match else "rejected"
                )
                self.logger.debug(
                    f"Bank ref {transaction.reference!r} vs order "
                    f"{order.order_number} ref {order.initial_reference!r}: "
                    f"{comparison.type.value}/{comparison.matching_digits} digits -> {outcome}"
                )

                if match:
                    matches.append(match)

        elapsed = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Matching complete in {elapsed:.2f}s: {len(matches)} matches")

        return matches
