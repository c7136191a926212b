"""
CSV-backed order store.
Works on a CSV export of the order table and writes status changes back
to the same file.

Status updates hold an exclusive lock on a sidecar ``<file>.lock`` for the
whole read-check-write sequence, and the table is rewritten through a
temporary file renamed over the original, so concurrent runs neither lose
each other's updates nor leave a truncated table behind.
"""

from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional
import fcntl
import logging
import os
import shutil
import tempfile

import pandas as pd

from ..config import ReconConfig
from ..models.payment import Order
from ..parsers.statement_parser import is_blank, parse_amount
from ..utils.exceptions import OrderStoreError
from .base import OrderStore, apply_status_change, channel_matches

logger = logging.getLogger(__name__)

TRUTHY = {"true", "1", "yes", "y", "si", "sí", "x"}


class CsvOrderStore(OrderStore):
    """
    Order store over a CSV file.

    The file is re-read on every call so that a status update compares
    against what is on disk, not against the state at fetch time.
    """

    def __init__(self, file_path: Path, config: ReconConfig):
        """
        Initialize the store.

        Args:
            file_path: Path to the orders CSV
            config: Application configuration
        """
        self.file_path = file_path
        self.config = config
        self.orders_config = config.input.orders
        self.column_mappings = self.orders_config.column_mappings

    def _column(self, field: str) -> str:
        return self.column_mappings.get(field, field)

    def _load(self) -> pd.DataFrame:
        """Read the whole order table as text."""
        try:
            df = pd.read_csv(
                self.file_path,
                dtype=str,
                keep_default_na=False,
                encoding=self.orders_config.encoding,
                delimiter=self.orders_config.delimiter,
            )
        except Exception as e:
            logger.error(f"Failed to read orders file: {e}")
            raise OrderStoreError(f"Failed to read orders file {self.file_path}: {e}") from e

        for field in ("id", "status"):
            if self._column(field) not in df.columns:
                raise OrderStoreError(
                    f"Orders file {self.file_path} has no '{self._column(field)}' column"
                )
        return df

    @property
    def lock_path(self) -> Path:
        return self.file_path.with_name(f"{self.file_path.name}.lock")

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the exclusive update lock of the orders file."""
        try:
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise OrderStoreError(f"Failed to open lock file {self.lock_path}: {e}") from e

        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _save(self, df: pd.DataFrame) -> None:
        """Write the table to a temporary file and rename it over the original."""
        temp_path: Optional[Path] = None
        try:
            fd, name = tempfile.mkstemp(
                dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
            )
            temp_path = Path(name)
            with os.fdopen(fd, "w", encoding=self.orders_config.encoding, newline="") as f:
                df.to_csv(f, index=False, sep=self.orders_config.delimiter)
            shutil.copymode(self.file_path, temp_path)
            os.replace(temp_path, self.file_path)
        except Exception as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write orders file: {e}")
            raise OrderStoreError(f"Failed to write orders file {self.file_path}: {e}") from e

    def _row_to_order(self, row: pd.Series) -> Order:
        """Convert a CSV row to an Order."""

        def text(field: str) -> str:
            column = self._column(field)
            return str(row[column]).strip() if column in row.index else ""

        freight = text("freight_amount_usd")

        return Order(
            id=text("id"),
            order_number=text("order_number") or text("id"),
            initial_reference=text("reference") or None,
            initial_amount_local=parse_amount(text("amount_local")),
            status=text("status"),
            channel=text("channel"),
            customer_name=text("customer_name"),
            freight_amount_usd=None if is_blank(freight) else parse_amount(freight),
            free_freight=text("free_freight").lower() in TRUTHY,
            freight_status=text("freight_status") or None,
        )

    def list_orders(self) -> list[Order]:
        """Return every order in the file."""
        df = self._load()
        return [self._row_to_order(row) for _, row in df.iterrows()]

    def fetch_open_orders(self, channel: str, status: str) -> list[Order]:
        orders = [
            o
            for o in self.list_orders()
            if channel_matches(o.channel, channel) and o.status == status
        ]
        logger.info(
            f"Fetched {len(orders)} '{channel}' orders in status '{status}' "
            f"from {self.file_path.name}"
        )
        return orders

    def get_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.list_orders() if o.id == order_id), None)

    def advance_status(
        self, order_id: str, expected_status: str, new_status: str
    ) -> bool:
        with self._locked():
            return self._advance_status_locked(order_id, expected_status, new_status)

    def _advance_status_locked(
        self, order_id: str, expected_status: str, new_status: str
    ) -> bool:
        df = self._load()
        id_col = self._column("id")
        positions = df.index[df[id_col].str.strip() == order_id].tolist()

        if not positions:
            logger.warning(f"Order {order_id} not found in {self.file_path.name}")
            return False

        pos = positions[0]
        order = self._row_to_order(df.loc[pos])
        if order.status != expected_status:
            logger.warning(
                f"Order {order.order_number} is '{order.status}', "
                f"expected '{expected_status}'; not updated"
            )
            return False

        apply_status_change(order, new_status, self.config.settlement)

        df.loc[pos, self._column("status")] = order.status
        if order.freight_amount_usd is not None:
            df.loc[pos, self._column("freight_amount_usd")] = _format_decimal(
                order.freight_amount_usd
            )
        if order.freight_status is not None:
            df.loc[pos, self._column("freight_status")] = order.freight_status

        # New freight columns start empty for the other rows
        df = df.fillna("")
        self._save(df)

        logger.debug(f"Order {order.order_number}: {expected_status} -> {new_status}")
        return True


def _format_decimal(value: Decimal) -> str:
    return format(value, "f")
