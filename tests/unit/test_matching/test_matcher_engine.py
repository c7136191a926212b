#!/usr/bin/env python3
"""Tests for the payment matching engine."""

import logging

import pytest

from order_payment_recon.config import load_config
from order_payment_recon.matching import PaymentMatcher
from order_payment_recon.models import MatchType
from tests.fixtures.factories import make_order, make_transaction


class TestPaymentMatcher:
    """Test the transactions x orders comparison."""

    @pytest.fixture
    def matcher(self):
        return PaymentMatcher()

    def test_zero_padded_bank_reference_matches_exactly(self, matcher):
        transactions = [make_transaction("00098765", "1500.00")]
        orders = [make_order("s1", "98765", "1500.00")]

        matches = matcher.find_matches(transactions, orders)

        assert len(matches) == 1
        assert matches[0].match_type is MatchType.EXACT
        assert matches[0].confidence == 100
        assert matches[0].order.id == "s1"

    def test_no_transactions_gives_no_matches(self, matcher):
        assert matcher.find_matches([], [make_order("s1", "98765")]) == []

    def test_orders_without_reference_are_skipped(self, matcher):
        transactions = [make_transaction("0", "800.00")]
        orders = [make_order("s1", None, "800.00"), make_order("s2", "", "800.00")]

        assert matcher.find_matches(transactions, orders) == []

    def test_one_transaction_may_match_several_orders(self, matcher):
        transactions = [make_transaction("12345678901", "500.00")]
        orders = [
            make_order("s1", "345678", "500.00"),
            make_order("s2", "12345678901", "500.00"),
        ]

        matches = matcher.find_matches(transactions, orders)

        assert [m.order.id for m in matches] == ["s1", "s2"]
        assert all(m.transaction is transactions[0] for m in matches)

    def test_one_order_may_match_several_transactions(self, matcher):
        transactions = [
            make_transaction("98765", "1500.00"),
            make_transaction("000098765", "1500.00"),
        ]
        orders = [make_order("s1", "98765", "1500.00")]

        matches = matcher.find_matches(transactions, orders)

        assert len(matches) == 2
        assert {m.order.id for m in matches} == {"s1"}

    def test_results_follow_statement_then_order_order(self, matcher):
        transactions = [
            make_transaction("222222", "10.00"),
            make_transaction("111111", "10.00"),
        ]
        orders = [make_order("a", "111111"), make_order("b", "222222")]

        matches = matcher.find_matches(transactions, orders)

        assert [(m.transaction.reference, m.order.id) for m in matches] == [
            ("222222", "b"),
            ("111111", "a"),
        ]

    def test_partial_reference_needs_amount(self, matcher):
        transactions = [make_transaction("111122223333", "1500.00")]
        near = make_order("s1", "999922223333", "1500.50")
        far = make_order("s2", "888822223333", "9000.00")

        matches = matcher.find_matches(transactions, [near, far])

        assert len(matches) == 1
        assert matches[0].order.id == "s1"
        assert matches[0].match_type is MatchType.REFERENCE_AMOUNT
        assert matches[0].confidence == 95

    def test_thresholds_come_from_config(self):
        config = load_config(None)
        config.matching.exact_confidence = 99
        matcher = PaymentMatcher(config)

        matches = matcher.find_matches(
            [make_transaction("98765")], [make_order("s1", "98765")]
        )

        assert matches[0].confidence == 99

    def test_decisions_logged_to_injected_logger(self, caplog):
        logger = logging.getLogger("test.matcher")
        matcher = PaymentMatcher(logger=logger)

        with caplog.at_level(logging.DEBUG, logger="test.matcher"):
            matcher.find_matches(
                [make_transaction("98765")], [make_order("s1", "98765")]
            )

        decisions = [r for r in caplog.records if r.name == "test.matcher"]
        assert any("exact (100%)" in r.getMessage() for r in decisions)
