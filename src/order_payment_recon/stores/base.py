"""
Order store abstraction.

The order store owns order records. The reconciliation only reads open
orders and asks the store to advance the ones whose payment was verified.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..config import SettlementConfig
from ..models.payment import Order


class OrderStore(ABC):
    """Abstract base class for order stores."""

    @abstractmethod
    def fetch_open_orders(self, channel: str, status: str) -> list[Order]:
        """
        Fetch orders of a sales channel currently in the given status.

        Args:
            channel: Sales channel (compared case-insensitively)
            status: Delivery status the orders must be in

        Returns:
            Matching orders, in store order

        Raises:
            OrderStoreError: If the store cannot be read
        """
        pass

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[Order]:
        """Return the order with the given id, or None."""
        pass

    @abstractmethod
    def advance_status(
        self, order_id: str, expected_status: str, new_status: str
    ) -> bool:
        """
        Move an order to a new status if it is still in the expected one.

        This is a compare-and-set: an order whose status changed since it
        was fetched is left untouched.

        Args:
            order_id: Order identifier
            expected_status: Status the order must currently have
            new_status: Status to set

        Returns:
            True if the order was updated, False if it is missing or no
            longer in the expected status

        Raises:
            OrderStoreError: If the update could not be written
        """
        pass


def channel_matches(order_channel: Optional[str], channel: str) -> bool:
    """Case-insensitive channel comparison."""
    return (order_channel or "").strip().lower() == channel.strip().lower()


def apply_status_change(
    order: Order, new_status: str, settlement: Optional[SettlementConfig] = None
) -> Order:
    """
    Set a new delivery status on an order.

    Orders reaching the verified status without freight information get
    their freight initialised as pending so they show up for freight
    processing.

    Args:
        order: Order to update in place
        new_status: Status to set
        settlement: Settlement configuration (defaults used if omitted)

    Returns:
        The updated order
    """
    settlement = settlement or SettlementConfig()
    order.status = new_status

    if (
        settlement.initialize_freight
        and new_status == settlement.verified_status
        and not order.has_freight_info
    ):
        order.freight_amount_usd = Decimal(str(settlement.pending_freight_amount))
        order.freight_status = settlement.pending_freight_status

    return order
