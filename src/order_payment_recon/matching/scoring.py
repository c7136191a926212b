"""
Match scoring.

Turns a reference comparison plus the amounts on both sides into a
payment match with a confidence score, or rejects the pair.
"""

from decimal import Decimal
from typing import Optional

from ..models.payment import (
    BankTransaction,
    MatchType,
    Order,
    PaymentMatch,
    ReferenceComparison,
)


class MatchScorer:
    """Decides whether a compared pair becomes a match and how confident it is."""

    def __init__(
        self,
        min_reference_digits: int = 6,
        strong_partial_digits: int = 8,
        strong_amount_tolerance: Decimal = Decimal("1000"),
        weak_amount_tolerance: Decimal = Decimal("100"),
        exact_confidence: int = 100,
        strong_confidence: int = 95,
        weak_confidence: int = 85,
    ):
        """
        Initialize with tolerances and confidence levels.

        Args:
            min_reference_digits: Fewest matching digits worth an amount check
            strong_partial_digits: Digits from which the strong tolerance applies
            strong_amount_tolerance: Allowed amount difference for strong partials
            weak_amount_tolerance: Allowed amount difference for weak partials
            exact_confidence: Confidence for exact reference matches
            strong_confidence: Confidence for strong partials within tolerance
            weak_confidence: Confidence for weak partials within tolerance
        """
        self.min_reference_digits = min_reference_digits
        self.strong_partial_digits = strong_partial_digits
        self.strong_amount_tolerance = Decimal(str(strong_amount_tolerance))
        self.weak_amount_tolerance = Decimal(str(weak_amount_tolerance))
        self.exact_confidence = exact_confidence
        self.strong_confidence = strong_confidence
        self.weak_confidence = weak_confidence

    def score(
        self,
        comparison: ReferenceComparison,
        transaction: BankTransaction,
        order: Order,
    ) -> Optional[PaymentMatch]:
        """
        Score a transaction/order pair.

        Args:
            comparison: Result of comparing the two references
            transaction: Bank transaction
            order: Candidate order

        Returns:
            PaymentMatch, or None if the pair should not be proposed
        """
        if comparison.is_exact:
            # Amounts are not compared for exact references
            return PaymentMatch(
                order=order,
                transaction=transaction,
                match_type=MatchType.EXACT,
                confidence=self.exact_confidence,
                matching_digits=comparison.matching_digits,
            )

        digits = comparison.matching_digits
        if digits < self.min_reference_digits:
            return None

        strong = digits >= self.strong_partial_digits
        tolerance = self.strong_amount_tolerance if strong else self.weak_amount_tolerance
        difference = transaction.amount - order.initial_amount_local

        if abs(difference) > tolerance:
            return None

        return PaymentMatch(
            order=order,
            transaction=transaction,
            match_type=MatchType.REFERENCE_AMOUNT,
            confidence=self.strong_confidence if strong else self.weak_confidence,
            matching_digits=digits,
            amount_difference=difference,
        )
