# refillr/models/order.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID
from .base import GeoPoint, TimeStampedModel

class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DISPATCHED = "dispatched"
    IN_TRANSIT = "in_transit"  # reserved, nothing transitions into it yet
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Statuses in which an order must carry a rider
RIDER_STATUSES = frozenset({
    OrderStatus.ACCEPTED,
    OrderStatus.DISPATCHED,
    OrderStatus.IN_TRANSIT,
    OrderStatus.DELIVERED,
})

class Order(TimeStampedModel):
    """A refill order from a customer to a merchant"""
    order_id: UUID
    customer_id: str
    merchant_id: UUID
    rider_id: Optional[str] = None
    tank_brand: str
    tank_size: str
    quantity: int = 1
    total_price: Decimal
    status: OrderStatus = OrderStatus.PENDING
    delivery_location: GeoPoint
    delivery_address: str
    notes: Optional[str] = None
    accepted_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
