#!/usr/bin/env python3
"""Tests for payment reference comparison."""

import pytest

from order_payment_recon.matching.reference import (
    ReferenceComparator,
    clean_reference,
    compare_references,
    count_trailing_matches,
)
from order_payment_recon.models import MatchType


class TestCleanReference:
    """Test reduction of references to significant digits."""

    def test_strips_non_digits_and_leading_zeros(self):
        assert clean_reference("REF-0031 2345/67") == "31234567"
        assert clean_reference("000123") == "123"

    def test_all_zero_or_empty_collapses_to_zero(self):
        assert clean_reference("0000") == "0"
        assert clean_reference("") == "0"
        assert clean_reference("N/A") == "0"
        assert clean_reference(None) == "0"

    def test_count_trailing_matches(self):
        assert count_trailing_matches("111122223333", "999922223333") == 8
        assert count_trailing_matches("123", "456") == 0
        assert count_trailing_matches("345", "12345") == 3


class TestCompareReferences:
    """Test the layered reference comparison."""

    def test_leading_zeros_are_ignored(self):
        result = compare_references("0031234567", "31234567")

        assert result.type is MatchType.EXACT
        assert result.matching_digits == 8

    def test_short_reference_embedded_in_longer_is_exact(self):
        result = compare_references("12345678901", "345678")

        assert result.type is MatchType.EXACT
        assert result.matching_digits == 6

    def test_embedded_rule_is_symmetric(self):
        assert compare_references("345678", "12345678901").is_exact

    def test_embedded_reference_shorter_than_six_digits_is_not_exact(self):
        result = compare_references("12345678901", "45678")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 0

    def test_eight_trailing_digits_is_partial(self):
        result = compare_references("111122223333", "999922223333")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 8

    def test_six_digit_suffix_fallback(self):
        # Only six trailing digits agree
        result = compare_references("7777123456", "8888123456")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 6

    def test_eight_digit_prefix_fallback(self):
        result = compare_references("1234567890", "1234567811")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 8

    def test_no_similarity_returns_trailing_count(self):
        result = compare_references("555123", "999923")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 2

    def test_two_zero_references_are_not_exact(self):
        result = compare_references("000", "0")

        assert result.type is MatchType.PARTIAL

    def test_punctuation_does_not_matter(self):
        assert compare_references("Ref. 98-765", "98765").is_exact


class TestReferenceComparatorThresholds:
    """Test configurable thresholds."""

    def test_higher_embedded_minimum_falls_back_to_partial_substring(self):
        comparator = ReferenceComparator(exact_embedded_min_digits=10)

        result = comparator.compare("12345678901", "345678")

        assert result.type is MatchType.PARTIAL
        assert result.matching_digits == 6

    @pytest.mark.parametrize(
        "ref1,ref2",
        [
            ("111122223333", "999922223333"),
            ("1234567890", "1234567811"),
        ],
    )
    def test_argument_order_does_not_change_result(self, ref1, ref2):
        assert compare_references(ref1, ref2) == compare_references(ref2, ref1)
