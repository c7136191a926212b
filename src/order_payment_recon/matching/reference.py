"""
Payment reference comparison.

References are typed inconsistently across banking channels: banks
truncate them, pad them with zeros or embed them in longer numbers. The
comparator works on digits only and layers progressively looser checks,
favouring recall; the amount check in the scorer filters the rest.
"""

from typing import Optional
import re

from ..models.payment import MatchType, ReferenceComparison

_NON_DIGITS = re.compile(r"\D")


def clean_reference(reference: Optional[str]) -> str:
    """
    Reduce a reference to its significant digits.

    Non-digit characters and leading zeros are removed. A reference with
    no significant digits collapses to "0".
    """
    digits = _NON_DIGITS.sub("", reference or "")
    return digits.lstrip("0") or "0"


def count_trailing_matches(first: str, second: str) -> int:
    """Count digits equal from the right end of both strings."""
    count = 0
    for a, b in zip(reversed(first), reversed(second)):
        if a != b:
            break
        count += 1
    return count


class ReferenceComparator:
    """Classifies the similarity of two payment references."""

    def __init__(
        self,
        exact_embedded_min_digits: int = 6,
        strong_partial_digits: int = 8,
        substring_min_digits: int = 6,
        suffix_digits: int = 6,
        prefix_digits: int = 8,
    ):
        """
        Initialize with digit thresholds.

        Args:
            exact_embedded_min_digits: Minimum length of a reference fully
                contained in the other for the pair to count as exact
            strong_partial_digits: Trailing digits that make a strong partial
            substring_min_digits: Minimum length for a partial substring hit
            suffix_digits: Length of the suffix compared as a fallback
            prefix_digits: Length of the prefix compared as a fallback
        """
        self.exact_embedded_min_digits = exact_embedded_min_digits
        self.strong_partial_digits = strong_partial_digits
        self.substring_min_digits = substring_min_digits
        self.suffix_digits = suffix_digits
        self.prefix_digits = prefix_digits

    def compare(self, ref1: Optional[str], ref2: Optional[str]) -> ReferenceComparison:
        """
        Compare two references.

        Args:
            ref1: First reference (usually the bank side)
            ref2: Second reference (usually the order side)

        Returns:
            Comparison with type EXACT or PARTIAL and the number of
            matching digits
        """
        clean1 = clean_reference(ref1)
        clean2 = clean_reference(ref2)

        if clean1 == clean2 and clean1 != "0":
            return ReferenceComparison(MatchType.EXACT, len(clean1))

        if len(clean1) < len(clean2):
            shorter, longer = clean1, clean2
        else:
            shorter, longer = clean2, clean1

        # A bank echoing only part of the reference
        if len(shorter) >= self.exact_embedded_min_digits and shorter in longer:
            return ReferenceComparison(MatchType.EXACT, len(shorter))

        matching_digits = count_trailing_matches(clean1, clean2)
        if matching_digits >= self.strong_partial_digits:
            return ReferenceComparison(MatchType.PARTIAL, matching_digits)

        fallback = self._fallback_digits(shorter, longer)
        if fallback is not None:
            return ReferenceComparison(MatchType.PARTIAL, fallback)

        return ReferenceComparison(MatchType.PARTIAL, matching_digits)

    def _fallback_digits(self, shorter: str, longer: str) -> Optional[int]:
        """
        Run the substring, suffix and prefix checks in order.

        Returns:
            Matching digit count of the first check that hits, or None
        """
        if len(shorter) >= self.substring_min_digits and (
            shorter in longer or longer in shorter
        ):
            return len(shorter)

        n = self.suffix_digits
        if len(shorter) >= n and shorter[-n:] == longer[-n:]:
            return n

        n = self.prefix_digits
        if len(shorter) >= n and shorter[:n] == longer[:n]:
            return n

        return None


_default_comparator = ReferenceComparator()


def compare_references(ref1: Optional[str], ref2: Optional[str]) -> ReferenceComparison:
    """Compare two references with the default thresholds."""
    return _default_comparator.compare(ref1, ref2)
