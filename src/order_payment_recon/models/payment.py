"""Data models for bank transactions, orders and payment matches."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class MatchType(Enum):
    """How a bank transaction was paired with an order."""

    EXACT = "exact"
    PARTIAL = "partial"
    AMOUNT = "amount"
    REFERENCE_AMOUNT = "reference_amount"

    @property
    def label(self) -> str:
        """Human readable label used in tables and reports."""
        return {
            MatchType.EXACT: "Exact",
            MatchType.PARTIAL: "Partial",
            MatchType.AMOUNT: "By amount",
            MatchType.REFERENCE_AMOUNT: "Reference + amount",
        }[self]


@dataclass(frozen=True)
class BankTransaction:
    """
    A single credit line read from an uploaded bank statement.

    Transactions exist only for the duration of one reconciliation run
    and are never persisted.
    """

    # Payment reference as printed by the bank (free text)
    reference: str

    # Amount credited, in local currency
    amount: Decimal

    # Value date of the movement
    date: date

    description: str = ""

    # Spreadsheet row the transaction was read from (1-based)
    row_number: Optional[int] = None


@dataclass
class Order:
    """
    The subset of an order record relevant to payment verification.

    Orders are owned by the order store; the matcher only reads them.
    """

    id: str
    order_number: str

    # Reference of the initial payment reported by the customer
    initial_reference: Optional[str]

    # Expected initial payment in local currency
    initial_amount_local: Decimal

    status: str
    channel: str = ""
    customer_name: str = ""

    # Freight details, initialised when the order moves to dispatch
    freight_amount_usd: Optional[Decimal] = None
    free_freight: bool = False
    freight_status: Optional[str] = None

    @property
    def has_freight_info(self) -> bool:
        """Whether freight was already priced or waived."""
        return bool(self.freight_amount_usd) or self.free_freight


@dataclass(frozen=True)
class ReferenceComparison:
    """Outcome of comparing two payment references."""

    type: MatchType
    matching_digits: int

    @property
    def is_exact(self) -> bool:
        return self.type is MatchType.EXACT


@dataclass
class PaymentMatch:
    """
    A candidate pairing of one bank transaction with one order.

    Several matches may reference the same order or the same transaction;
    ambiguity is left to confidence filtering and manual review.
    """

    order: Order
    transaction: BankTransaction
    match_type: MatchType

    # Confidence score, 0-100
    confidence: int

    matching_digits: int = 0

    # bank amount - expected order amount (None when not checked)
    amount_difference: Optional[Decimal] = None

    matched_at: datetime = field(default_factory=datetime.now)

    def is_auto_approvable(self, threshold: int) -> bool:
        """Check whether the match clears the auto-settlement threshold."""
        return self.confidence >= threshold


@dataclass
class SettlementFailure:
    """An order that could not be advanced during settlement."""

    order_id: str
    order_number: str
    reason: str


@dataclass
class SettlementResult:
    """
    Aggregate outcome of submitting auto-approved matches.

    Partial success is accepted: applied updates are never rolled back.
    """

    requested: int = 0
    applied: list[str] = field(default_factory=list)
    failures: list[SettlementFailure] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def is_complete(self) -> bool:
        """True when every requested order was advanced."""
        return self.applied_count == self.requested


@dataclass
class ReconciliationRun:
    """Everything produced by one reconciliation of a bank statement."""

    statement_name: str
    transactions: list[BankTransaction]
    orders: list[Order]
    matches: list[PaymentMatch]
    auto_approved: list[PaymentMatch]
    manual_review: list[PaymentMatch]

    # None for dry runs
    settlement: Optional[SettlementResult] = None

    started_at: datetime = field(default_factory=datetime.now)
    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def unmatched_transactions(self) -> list[BankTransaction]:
        """Transactions that produced no candidate match at all."""
        matched = {id(m.transaction) for m in self.matches}
        return [t for t in self.transactions if id(t) not in matched]

    @property
    def unmatched_orders(self) -> list[Order]:
        """Open orders no transaction could be paired with."""
        matched = {m.order.id for m in self.matches}
        return [o for o in self.orders if o.id not in matched]


@dataclass
class ReconciliationSummary:
    """Summary counts of a reconciliation run."""

    statement_name: str
    reconciliation_date: datetime

    total_transactions: int
    total_open_orders: int

    match_count: int
    auto_approved_count: int
    manual_review_count: int
    unmatched_transaction_count: int
    unmatched_order_count: int

    settlement_requested: int = 0
    settlement_applied: int = 0
    settlement_failed: int = 0

    total_statement_amount: Decimal = Decimal("0")

    matches_by_type: dict[str, int] = field(default_factory=dict)

    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None
    dry_run: bool = False

    @property
    def order_match_rate(self) -> float:
        """Percentage of open orders with at least one candidate match."""
        if self.total_open_orders == 0:
            return 0.0
        matched = self.total_open_orders - self.unmatched_order_count
        return (matched / self.total_open_orders) * 100

    @classmethod
    def from_run(cls, run: ReconciliationRun) -> "ReconciliationSummary":
        """Build the summary from a finished run."""
        type_counts: dict[str, int] = {}
        for match in run.matches:
            key = match.match_type.value
            type_counts[key] = type_counts.get(key, 0) + 1

        settlement = run.settlement
        return cls(
            statement_name=run.statement_name,
            reconciliation_date=run.started_at,
            total_transactions=len(run.transactions),
            total_open_orders=len(run.orders),
            match_count=len(run.matches),
            auto_approved_count=len(run.auto_approved),
            manual_review_count=len(run.manual_review),
            unmatched_transaction_count=len(run.unmatched_transactions),
            unmatched_order_count=len(run.unmatched_orders),
            settlement_requested=settlement.requested if settlement else 0,
            settlement_applied=settlement.applied_count if settlement else 0,
            settlement_failed=settlement.failed_count if settlement else 0,
            total_statement_amount=sum(
                (t.amount for t in run.transactions), Decimal("0")
            ),
            matches_by_type=type_counts,
            processing_time_seconds=run.processing_time_seconds,
            config_file_used=run.config_file_used,
            dry_run=settlement is None,
        )
