# refillr/services/dispatch_service.py
import logging
from ..models.order import OrderStatus
from ..models.result import ErrorKind, Result
from ..models.schemas import AcceptOrderRequest, OrderRef, parse_request
from .decorators import guarded
from .order_state import transition_changes

class DispatchService:
    """Rider-side claim and delivery progress.

    Riders race each other for pending orders. Each step is one conditional
    update whose predicate carries the expected status (and, after the
    claim, the rider), so for any number of concurrent claims on the same
    order exactly one matches and the rest find it already taken.
    """

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    @guarded("Failed to accept order")
    async def accept_order(self, rider_id: str, order_id) -> Result:
        """Claim a pending order; success carries the order id"""
        request, failure = parse_request(AcceptOrderRequest, {"order_id": order_id})
        if failure is not None:
            return failure

        if not await self.db.riders.exists(rider_id):
            return Result.fail(ErrorKind.MUST_REGISTER_AS_RIDER, "You must register as a rider first")

        order = await self.db.orders.update_where(
            request.order_id,
            {"status": OrderStatus.PENDING},
            transition_changes(OrderStatus.ACCEPTED, rider_id=rider_id)
        )

        if order is None:
            # Either the order doesn't exist or another rider got there first
            if not await self.db.orders.exists(request.order_id):
                return Result.fail(ErrorKind.ORDER_NOT_FOUND, "Order not found")
            return Result.fail(ErrorKind.ORDER_NO_LONGER_AVAILABLE, "Order is no longer available")

        self.logger.info(f"Order {order.order_id} accepted by rider {rider_id}")
        return Result.ok(order.order_id)

    async def _advance(self, rider_id: str, order_id, source: OrderStatus,
                       target: OrderStatus) -> Result:
        request, failure = parse_request(OrderRef, {"order_id": order_id})
        if failure is not None:
            return failure

        order = await self.db.orders.update_where(
            request.order_id,
            {"status": source, "rider_id": rider_id},
            transition_changes(target)
        )
        if order is None:
            return Result.fail(
                ErrorKind.NOT_PERMITTED,
                f"Only the assigned rider can mark a {source.value} order as {target.value}"
            )

        self.logger.info(f"Order {order.order_id} marked {target.value} by rider {rider_id}")
        return Result.ok(order)

    @guarded("Failed to mark order as dispatched")
    async def mark_dispatched(self, rider_id: str, order_id) -> Result:
        return await self._advance(rider_id, order_id, OrderStatus.ACCEPTED, OrderStatus.DISPATCHED)

    @guarded("Failed to mark order as delivered")
    async def mark_delivered(self, rider_id: str, order_id) -> Result:
        return await self._advance(rider_id, order_id, OrderStatus.DISPATCHED, OrderStatus.DELIVERED)
