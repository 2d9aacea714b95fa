# refillr/services/order_service.py
import logging
from typing import Any, Dict, Optional, Set
from ..config import Config
from ..constants import DEFAULT_CANCELLATION_REASON
from ..models.order import Order, OrderStatus
from ..models.result import ErrorKind, Result
from ..models.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    MerchantRef,
    OrderRef,
    PendingOrdersQuery,
    UpdateOrderStatusRequest,
    parse_request,
)
from ..utils.geo import check_service_area
from ..utils.pricing import PricingNotConfigured, compute_total, resolve_unit_price
from .decorators import guarded
from .order_state import ActorRole, plan_transition, roles_for

ORDER_NOT_FOUND = "Order not found"

def check_order_gates(merchant, request: CreateOrderRequest) -> Result:
    """Business gates in order; success carries the unit price"""
    if merchant is None:
        return Result.fail(ErrorKind.MERCHANT_NOT_FOUND, "Merchant not found")

    if not merchant.is_open:
        return Result.fail(ErrorKind.MERCHANT_CLOSED, "This merchant is currently closed")

    if request.tank_brand not in merchant.brands_accepted:
        return Result.fail(
            ErrorKind.BRAND_NOT_CARRIED,
            f"This merchant does not carry {request.tank_brand}"
        )

    if request.tank_size not in merchant.tank_sizes:
        return Result.fail(
            ErrorKind.SIZE_NOT_CARRIED,
            f"This merchant does not carry {request.tank_size} tanks"
        )

    try:
        unit_price = resolve_unit_price(merchant, request.tank_brand, request.tank_size)
    except PricingNotConfigured:
        return Result.fail(
            ErrorKind.PRICING_NOT_CONFIGURED,
            "Pricing not configured for this item. Please contact the merchant."
        )

    area = check_service_area(merchant, request.delivery_location)
    if not area.inside:
        if area.method == "polygon":
            message = "Delivery location is outside this merchant's service area"
        else:
            message = (
                f"Delivery location is {area.distance_meters / 1000:.1f}km away, "
                f"but this merchant only delivers within {area.radius_meters / 1000:.1f}km"
            )
        return Result.fail(ErrorKind.OUTSIDE_SERVICE_AREA, message)

    return Result.ok(unit_price)

class OrderService:
    """Order creation, visibility and status changes"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    @guarded("Failed to create refill request")
    async def create_order(self, customer_id: str, data) -> Result:
        """Validate, gate and persist a new pending order; success carries its id"""
        request, failure = parse_request(CreateOrderRequest, data)
        if failure is not None:
            return failure

        merchant = await self.db.merchants.get(request.merchant_id)
        gate = check_order_gates(merchant, request)
        if not gate:
            return gate

        # The total always comes from the merchant's price table
        total_price = compute_total(gate.value, request.quantity)

        order = await self.db.orders.insert(
            customer_id=customer_id,
            merchant_id=request.merchant_id,
            tank_brand=request.tank_brand,
            tank_size=request.tank_size,
            quantity=request.quantity,
            total_price=total_price,
            delivery_location=request.delivery_location,
            delivery_address=request.delivery_address,
            notes=request.notes
        )
        self.logger.info(
            f"Order {order.order_id} created by {customer_id} "
            f"for merchant {request.merchant_id} ({total_price})"
        )
        return Result.ok(order.order_id)

    async def _roles(self, order: Order, caller_id: str) -> Set[ActorRole]:
        is_owner = await self.db.merchants.exists_owned_by(order.merchant_id, caller_id)
        return roles_for(order, caller_id, is_owner)

    @guarded("Failed to fetch order")
    async def get_order_by_id(self, caller_id: str, order_id) -> Result:
        """The order, for its customer, its rider or the merchant owner only"""
        request, failure = parse_request(OrderRef, {"order_id": order_id})
        if failure is not None:
            return failure

        order = await self.db.orders.get(request.order_id)
        # Existence is not revealed to unrelated callers
        if order is None or not await self._roles(order, caller_id):
            return Result.fail(ErrorKind.ORDER_NOT_FOUND, ORDER_NOT_FOUND)
        return Result.ok(order)

    @guarded("Failed to fetch user orders")
    async def list_orders_for_customer(self, customer_id: str) -> Result:
        orders = await self.db.orders.list_by_customer(customer_id, Config.ORDER_HISTORY_LIMIT)
        return Result.ok(orders)

    @guarded("Failed to fetch merchant orders")
    async def list_orders_for_merchant(self, caller_id: str, merchant_id) -> Result:
        """Orders for a merchant, newest first; the caller must own it"""
        request, failure = parse_request(MerchantRef, {"merchant_id": merchant_id})
        if failure is not None:
            return failure

        if not await self.db.merchants.exists_owned_by(request.merchant_id, caller_id):
            return Result.fail(ErrorKind.NOT_PERMITTED, "You do not manage this merchant")

        orders = await self.db.orders.list_by_merchant(
            request.merchant_id, Config.ORDER_HISTORY_LIMIT
        )
        return Result.ok(orders)

    @guarded("Failed to fetch nearby pending orders")
    async def list_pending_orders_near_rider(self, rider_id: str, location,
                                             radius_meters: Optional[int] = None) -> Result:
        """Claimable orders around a rider, oldest first; empty for non-riders"""
        query: Dict[str, Any] = {"location": location}
        if radius_meters is not None:
            query["radius_meters"] = radius_meters
        request, failure = parse_request(PendingOrdersQuery, query)
        if failure is not None:
            return failure

        if not await self.db.riders.exists(rider_id):
            return Result.ok([])

        orders = await self.db.orders.list_pending_near(
            request.location, request.radius_meters, Config.PENDING_ORDERS_PAGE_SIZE
        )
        return Result.ok(orders)

    @guarded("Failed to update order status")
    async def update_order_status(self, caller_id: str, order_id, status,
                                  rider_id: Optional[str] = None,
                                  cancellation_reason: Optional[str] = None) -> Result:
        """Move an order to `status` on behalf of any party to it.

        Authorization is derived from the order as persisted right now, and
        the write only lands if status and rider are still what that
        decision saw.
        """
        request, failure = parse_request(UpdateOrderStatusRequest, {
            "order_id": order_id,
            "status": status,
            "rider_id": rider_id,
            "cancellation_reason": cancellation_reason,
        })
        if failure is not None:
            return failure

        order = await self.db.orders.get(request.order_id)
        if order is None:
            return Result.fail(ErrorKind.ORDER_NOT_FOUND, ORDER_NOT_FOUND)

        roles = await self._roles(order, caller_id)
        if not roles:
            return Result.fail(ErrorKind.ORDER_NOT_FOUND, ORDER_NOT_FOUND)

        changes = plan_transition(
            order, request.status, roles,
            rider_id=request.rider_id,
            cancellation_reason=request.cancellation_reason
        )
        if changes is None:
            return Result.fail(
                ErrorKind.NOT_PERMITTED,
                f"Order cannot be moved from {order.status.value} to {request.status.value}"
            )

        if "rider_id" in changes and not await self.db.riders.exists(changes["rider_id"]):
            return Result.fail(ErrorKind.RIDER_NOT_FOUND, "Assigned rider is not registered")

        updated = await self.db.orders.update_where(
            order.order_id,
            {"status": order.status, "rider_id": order.rider_id},
            changes
        )
        if updated is None:
            return Result.fail(
                ErrorKind.ORDER_NO_LONGER_AVAILABLE,
                "Order was changed by someone else, please refresh"
            )

        self.logger.info(
            f"Order {order.order_id}: {order.status.value} -> {updated.status.value} by {caller_id}"
        )
        return Result.ok(updated)

    async def cancel_order(self, caller_id: str, order_id,
                           cancellation_reason: Optional[str] = None) -> Result:
        """Cancel through the regular transition rules"""
        request, failure = parse_request(CancelOrderRequest, {
            "order_id": order_id,
            "cancellation_reason": cancellation_reason,
        })
        if failure is not None:
            return failure

        return await self.update_order_status(
            caller_id,
            request.order_id,
            OrderStatus.CANCELLED,
            cancellation_reason=request.cancellation_reason or DEFAULT_CANCELLATION_REASON
        )
