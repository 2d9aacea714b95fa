# refillr/services/merchant_service.py
import logging
from typing import Any, Dict, List, Optional
from ..config import Config
from ..models.merchant import OrderAnalytics, SalesBreakdown
from ..models.order import Order, OrderStatus
from ..models.result import ErrorKind, Result
from ..models.schemas import (
    MerchantRef,
    MerchantsInPolygonQuery,
    NearbyMerchantsQuery,
    OrderAnalyticsQuery,
    parse_request,
)
from ..utils.geo import normalize_ring, point_in_polygon
from .decorators import guarded

def summarize_orders(orders: List[Order]) -> OrderAnalytics:
    """Counts and revenue per brand and size"""
    analytics = OrderAnalytics()
    for order in orders:
        analytics.total_orders += 1
        brand = analytics.by_brand.setdefault(order.tank_brand or "unknown", SalesBreakdown())
        size = analytics.by_size.setdefault(order.tank_size or "unknown", SalesBreakdown())
        brand.count += 1
        size.count += 1

        if order.status == OrderStatus.CANCELLED:
            analytics.cancelled_orders += 1
            continue
        if order.status == OrderStatus.DELIVERED:
            analytics.delivered_orders += 1

        analytics.total_revenue += order.total_price
        brand.revenue += order.total_price
        size.revenue += order.total_price
    return analytics

class MerchantService:
    """Read access to merchants for the order core"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    @guarded("Failed to fetch merchant")
    async def get_merchant(self, merchant_id) -> Result:
        request, failure = parse_request(MerchantRef, {"merchant_id": merchant_id})
        if failure is not None:
            return failure

        merchant = await self.db.merchants.get(request.merchant_id)
        if merchant is None:
            return Result.fail(ErrorKind.MERCHANT_NOT_FOUND, "Merchant not found")
        return Result.ok(merchant)

    @guarded("Failed to fetch merchant")
    async def get_my_merchant(self, owner_id: str) -> Result:
        """The caller's shop, or None"""
        return Result.ok(await self.db.merchants.get_by_owner(owner_id))

    @guarded("Failed to verify merchant ownership")
    async def is_owner(self, merchant_id, owner_id: str) -> Result:
        request, failure = parse_request(MerchantRef, {"merchant_id": merchant_id})
        if failure is not None:
            return failure
        return Result.ok(await self.db.merchants.exists_owned_by(request.merchant_id, owner_id))

    @guarded("Failed to fetch nearby merchants")
    async def get_nearby_merchants(self, location, radius_meters: Optional[int] = None,
                                   brand: Optional[str] = None) -> Result:
        """Merchants around a point, nearest first, optionally carrying `brand`"""
        query: Dict[str, Any] = {"location": location, "brand": brand}
        if radius_meters is not None:
            query["radius_meters"] = radius_meters
        request, failure = parse_request(NearbyMerchantsQuery, query)
        if failure is not None:
            return failure

        merchants = await self.db.merchants.list_near(
            request.location, request.radius_meters, request.brand, Config.MERCHANT_SEARCH_LIMIT
        )
        return Result.ok(merchants)

    @guarded("Failed to fetch merchants in polygon")
    async def get_merchants_in_polygon(self, polygon) -> Result:
        request, failure = parse_request(MerchantsInPolygonQuery, {"polygon": polygon})
        if failure is not None:
            return failure

        ring = normalize_ring(request.polygon)
        if ring is None:
            return Result.fail(ErrorKind.VALIDATION, "polygon: needs at least 3 distinct points")

        # Bounding box in the store, exact containment here
        longitudes = [lng for lng, _ in ring]
        latitudes = [lat for _, lat in ring]
        candidates = await self.db.merchants.list_in_bounds(
            min(longitudes), min(latitudes), max(longitudes), max(latitudes)
        )
        return Result.ok([m for m in candidates if point_in_polygon(m.location, ring)])

    @guarded("Failed to fetch order analytics")
    async def get_order_analytics(self, caller_id: str, merchant_id,
                                  query: Optional[Dict[str, Any]] = None) -> Result:
        """Totals for the caller's merchant, optionally by date window and delivery polygon"""
        ref, failure = parse_request(MerchantRef, {"merchant_id": merchant_id})
        if failure is not None:
            return failure
        request, failure = parse_request(OrderAnalyticsQuery, query or {})
        if failure is not None:
            return failure

        if not await self.db.merchants.exists_owned_by(ref.merchant_id, caller_id):
            return Result.fail(ErrorKind.NOT_PERMITTED, "You do not manage this merchant")

        orders = await self.db.orders.list_for_analytics(
            ref.merchant_id, request.start_date, request.end_date
        )

        ring = normalize_ring(request.polygon)
        if ring is not None:
            orders = [o for o in orders if point_in_polygon(o.delivery_location, ring)]

        return Result.ok(summarize_orders(orders))
