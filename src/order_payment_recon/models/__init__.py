"""Data models for payment reconciliation."""

from .payment import (
    BankTransaction,
    Order,
    MatchType,
    ReferenceComparison,
    PaymentMatch,
    SettlementFailure,
    SettlementResult,
    ReconciliationRun,
    ReconciliationSummary,
)

__all__ = [
    "BankTransaction",
    "Order",
    "MatchType",
    "ReferenceComparison",
    "PaymentMatch",
    "SettlementFailure",
    "SettlementResult",
    "ReconciliationRun",
    "ReconciliationSummary",
]
