"""In-memory order store."""

from dataclasses import replace
from typing import Iterable, Optional
import logging

from ..config import SettlementConfig
from ..models.payment import Order
from .base import OrderStore, apply_status_change, channel_matches

logger = logging.getLogger(__name__)


class InMemoryOrderStore(OrderStore):
    """
    Order store backed by a dict.

    Orders handed out are copies, so callers cannot change stored state
    except through advance_status.
    """

    def __init__(
        self,
        orders: Iterable[Order] = (),
        settlement: Optional[SettlementConfig] = None,
    ):
        self.settlement = settlement or SettlementConfig()
        self._orders: dict[str, Order] = {o.id: replace(o) for o in orders}

    def fetch_open_orders(self, channel: str, status: str) -> list[Order]:
        return [
            replace(o)
            for o in self._orders.values()
            if channel_matches(o.channel, channel) and o.status == status
        ]

    def get_order(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return replace(order) if order else None

    def advance_status(
        self, order_id: str, expected_status: str, new_status: str
    ) -> bool:
        order = self._orders.get(order_id)
        if order is None or order.status != expected_status:
            return False

        apply_status_change(order, new_status, self.settlement)
        logger.debug(f"Order {order.order_number}: {expected_status} -> {new_status}")
        return True
