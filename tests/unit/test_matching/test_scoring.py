#!/usr/bin/env python3
"""Tests for match scoring."""

from decimal import Decimal

import pytest

from order_payment_recon.matching.scoring import MatchScorer
from order_payment_recon.models import MatchType, ReferenceComparison
from tests.fixtures.factories import make_order, make_transaction


def partial(digits: int) -> ReferenceComparison:
    return ReferenceComparison(MatchType.PARTIAL, digits)


class TestMatchScorer:
    """Test the confidence policy."""

    @pytest.fixture
    def scorer(self):
        return MatchScorer()

    def test_exact_reference_ignores_amount(self, scorer):
        txn = make_transaction("98765", "10.00")
        order = make_order("s1", "98765", "99999.00")

        match = scorer.score(ReferenceComparison(MatchType.EXACT, 5), txn, order)

        assert match is not None
        assert match.match_type is MatchType.EXACT
        assert match.confidence == 100
        assert match.amount_difference is None

    def test_eight_digit_partial_within_tolerance(self, scorer):
        txn = make_transaction("111122223333", "1500.00")
        order = make_order("s1", "999922223333", "1500.50")

        match = scorer.score(partial(8), txn, order)

        assert match is not None
        assert match.match_type is MatchType.REFERENCE_AMOUNT
        assert match.confidence == 95
        assert match.amount_difference == Decimal("-0.50")

    def test_six_digit_partial_outside_tolerance(self, scorer):
        txn = make_transaction("7777123456", "1000.00")
        order = make_order("s1", "8888123456", "1300.00")

        assert scorer.score(partial(6), txn, order) is None

    def test_six_digit_partial_within_tolerance(self, scorer):
        txn = make_transaction("7777123456", "1000.00")
        order = make_order("s1", "8888123456", "1060.00")

        match = scorer.score(partial(6), txn, order)

        assert match is not None
        assert match.match_type is MatchType.REFERENCE_AMOUNT
        assert match.confidence == 85

    def test_seven_digit_partial_is_still_weak(self, scorer):
        txn = make_transaction("1", "1000.00")
        order = make_order("s1", "1", "1060.00")

        assert scorer.score(partial(7), txn, order).confidence == 85

    def test_tolerance_is_inclusive(self, scorer):
        txn = make_transaction("1", "1100.00")
        order = make_order("s1", "1", "1000.00")

        assert scorer.score(partial(6), txn, order) is not None

    def test_strong_partial_uses_wide_tolerance(self, scorer):
        txn = make_transaction("1", "1900.00")
        order = make_order("s1", "1", "1000.00")

        assert scorer.score(partial(8), txn, order) is not None
        assert scorer.score(partial(7), txn, order) is None

    @pytest.mark.parametrize("digits", [0, 3, 5])
    def test_too_few_digits_is_rejected(self, scorer, digits):
        txn = make_transaction("1", "1000.00")
        order = make_order("s1", "1", "1000.00")

        assert scorer.score(partial(digits), txn, order) is None

    def test_custom_confidences(self):
        scorer = MatchScorer(strong_confidence=90, weak_confidence=70)
        txn = make_transaction("1", "1000.00")
        order = make_order("s1", "1", "1000.00")

        assert scorer.score(partial(8), txn, order).confidence == 90
        assert scorer.score(partial(6), txn, order).confidence == 70
