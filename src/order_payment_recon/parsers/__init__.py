"""Parsers for uploaded bank statements."""

from .statement_parser import BankStatementParser, parse_amount

__all__ = ["BankStatementParser", "parse_amount"]
