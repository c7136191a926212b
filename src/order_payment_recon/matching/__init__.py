"""Reference comparison, match scoring and the matching engine."""

from .engine import PaymentMatcher
from .reference import ReferenceComparator, clean_reference, compare_references
from .scoring import MatchScorer

__all__ = [
    "PaymentMatcher",
    "ReferenceComparator",
    "MatchScorer",
    "clean_reference",
    "compare_references",
]
