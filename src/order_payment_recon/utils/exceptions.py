"""Custom exceptions for the payment reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class StatementParseError(ReconciliationError):
    """Error parsing a bank statement file."""

    pass


class OrderStoreError(ReconciliationError):
    """Error reading or updating the order store."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
