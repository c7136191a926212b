"""
Bank statement parser.
Reads an uploaded statement spreadsheet (Excel or CSV), locates its header
row and converts the data rows into bank transactions.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
import csv
import logging
import re

import pandas as pd

from ..config import ReconConfig
from ..models.payment import BankTransaction
from ..utils.exceptions import StatementParseError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}

# Day zero of the Excel 1900 date system (accounts for the 1900 leap bug)
EXCEL_EPOCH = datetime(1899, 12, 30)

_AMOUNT_JUNK = re.compile(r"[^\d.\-]")


def is_blank(value: Any) -> bool:
    """Check whether a cell holds no usable value."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_amount(value: Any) -> Decimal:
    """
    Parse an amount cell.

    Everything but digits, "." and "-" is discarded. Unparseable values
    are read as zero.
    """
    if is_blank(value):
        return Decimal("0")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))

    cleaned = _AMOUNT_JUNK.sub("", str(value))
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def cell_to_text(value: Any) -> str:
    """Render a cell as text, without a trailing ".0" on whole numbers."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class BankStatementParser:
    """
    Parser for bank statement exports.

    Statements from different banks put a few title rows above the
    table and name their columns differently, so the header row is
    detected by banking keywords and columns are looked up by alias.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.statement_config = config.input.statement
        self.header_terms = [t.lower() for t in self.statement_config.header_terms]
        self.column_aliases = self.statement_config.column_aliases

    def parse_file(self, file_path: Path) -> list[BankTransaction]:
        """
        Parse a bank statement file and return its transactions.

        Args:
            file_path: Path to the statement (.xlsx, .xlsm or .csv)

        Returns:
            List of bank transactions (empty if the table has no rows)

        Raises:
            StatementParseError: If the file type is unsupported, the file
                cannot be read or no header row can be found
        """
        logger.info(f"Parsing bank statement: {file_path}")

        raw = self._read_raw(file_path)
        logger.debug(f"Total rows in spreadsheet: {len(raw)}")

        header_idx = self.find_header_row(raw)
        if header_idx is None:
            raise StatementParseError(
                "Could not find header row in bank statement. Headers should "
                'contain terms like "Referencia", "Monto", "Fecha"'
            )
        logger.debug(f"Found header row at row {header_idx + 1}")

        table = self._build_table(raw, header_idx)
        logger.debug(f"Bank statement columns found: {list(table.columns)}")

        transactions: list[BankTransaction] = []
        for idx, row in table.iterrows():
            transactions.append(self._normalize_row(row, int(idx) + 1))

        logger.info(f"Parsed {len(transactions)} transactions from bank statement")
        return transactions

    def _read_raw(self, file_path: Path) -> pd.DataFrame:
        """Read the sheet without headers so the header row can be located."""
        suffix = file_path.suffix.lower()

        try:
            if suffix in EXCEL_SUFFIXES:
                return pd.read_excel(
                    file_path, sheet_name=0, header=None, dtype=object, engine="openpyxl"
                )
            if suffix in CSV_SUFFIXES:
                return pd.read_csv(
                    file_path,
                    header=None,
                    names=list(range(self._csv_width(file_path))),
                    dtype=object,
                    encoding=self.statement_config.encoding,
                    delimiter=self.statement_config.delimiter,
                    skip_blank_lines=False,
                )
        except Exception as e:
            logger.error(f"Failed to read bank statement: {e}")
            raise StatementParseError(f"Error parsing bank statement file: {e}") from e

        raise StatementParseError(
            f"Unsupported statement file type '{file_path.suffix}'. "
            f"Expected one of: {', '.join(sorted(EXCEL_SUFFIXES | CSV_SUFFIXES))}"
        )

    def _csv_width(self, file_path: Path) -> int:
        """Widest row of a CSV file; title rows above the table are narrower."""
        with open(file_path, "r", encoding=self.statement_config.encoding, newline="") as f:
            reader = csv.reader(f, delimiter=self.statement_config.delimiter)
            return max((len(row) for row in reader), default=1)

    def find_header_row(self, raw: pd.DataFrame) -> Optional[int]:
        """
        Locate the header row among the first rows of the sheet.

        Args:
            raw: Sheet read without headers

        Returns:
            Positional index of the header row, or None
        """
        scan_rows = min(len(raw), self.statement_config.header_scan_rows)

        for i in range(scan_rows):
            values = [v for v in raw.iloc[i].tolist() if not is_blank(v)]
            if not values:
                continue

            row_text = "|".join(str(v) for v in values).lower()
            found = [term for term in self.header_terms if term in row_text]
            logger.debug(f"Row {i + 1}: {len(found)} banking terms {found}")

            if len(found) >= self.statement_config.min_header_terms:
                return i

        return None

    def _build_table(self, raw: pd.DataFrame, header_idx: int) -> pd.DataFrame:
        """Slice the data rows below the header and name the columns."""
        header = [
            cell_to_text(v) or f"column_{pos}"
            for pos, v in enumerate(raw.iloc[header_idx].tolist())
        ]
        table = raw.iloc[header_idx + 1 :].copy()
        table.columns = header
        table.index = range(header_idx + 1, header_idx + 1 + len(table))

        # Drop rows without any meaningful data
        has_data = table.apply(lambda row: any(not is_blank(v) for v in row), axis=1)
        return table[has_data] if len(table) else table

    def _first_value(self, row: pd.Series, field: str) -> Any:
        """Return the first non-blank value among the aliases of a field."""
        for column in self.column_aliases.get(field, []):
            if column not in row.index:
                continue
            value = row[column]
            if isinstance(value, pd.Series):
                # Duplicate column names
                value = value.iloc[0]
            if is_blank(value):
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
                continue
            return value
        return None

    def _normalize_row(self, row: pd.Series, row_number: int) -> BankTransaction:
        """
        Convert a statement row to a BankTransaction.

        Args:
            row: Row with header-named cells
            row_number: 1-based spreadsheet row number

        Returns:
            Bank transaction
        """
        reference = cell_to_text(self._first_value(row, "reference"))
        amount = parse_amount(self._first_value(row, "amount"))
        description = cell_to_text(self._first_value(row, "description"))

        txn_date = self._parse_date(self._first_value(row, "date"))
        if txn_date is None:
            logger.warning(f"Row {row_number}: Missing or invalid date, using today")
            txn_date = date.today()

        return BankTransaction(
            reference=reference,
            amount=amount,
            date=txn_date,
            description=description,
            row_number=row_number,
        )

    def _parse_date(self, value: Any) -> Optional[date]:
        """
        Parse a date cell.

        Args:
            value: Excel serial number, datetime or string

        Returns:
            Python date object or None
        """
        if is_blank(value):
            return None

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # Numbers outside the serial range (e.g. 20240815) are not dates
            try:
                return (EXCEL_EPOCH + timedelta(days=float(value))).date()
            except (OverflowError, ValueError):
                return None

        try:
            return pd.to_datetime(
                str(value).strip(), dayfirst=self.statement_config.dayfirst
            ).date()
        except (ValueError, TypeError, OverflowError):
            return None
