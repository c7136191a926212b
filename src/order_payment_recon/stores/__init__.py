"""Order stores used to fetch open orders and settle verified payments."""

from .base import OrderStore, apply_status_change
from .csv_store import CsvOrderStore
from .memory import InMemoryOrderStore

__all__ = [
    "OrderStore",
    "CsvOrderStore",
    "InMemoryOrderStore",
    "apply_status_change",
]
