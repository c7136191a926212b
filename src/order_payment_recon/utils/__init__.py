"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    StatementParseError,
    OrderStoreError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "StatementParseError",
    "OrderStoreError",
    "ConfigurationError",
    "ReportGenerationError",
    "setup_logging",
]
