# refillr/utils/messages.py
from typing import List
from ..models.base import GeoPoint
from ..models.merchant import Merchant, OrderAnalytics
from ..models.order import Order, OrderStatus
from ..models.result import Result
from ..utils.formatters import format_price, format_datetime
from ..utils.geo import format_distance

STATUS_EMOJI = {
    OrderStatus.PENDING: "⏳",
    OrderStatus.ACCEPTED: "🤝",
    OrderStatus.DISPATCHED: "🛵",
    OrderStatus.IN_TRANSIT: "🛵",
    OrderStatus.DELIVERED: "📦",
    OrderStatus.CANCELLED: "❌",
}

class Messages:
    @staticmethod
    def format_order(order: Order) -> str:
        """Order summary for chat"""
        lines = [
            f"🛢 Order {order.order_id}",
            f"{order.quantity}x {order.tank_brand} {order.tank_size}",
            f"💰 Total: {format_price(order.total_price)}",
            f"📍 {order.delivery_address}",
            f"📊 Status: {STATUS_EMOJI[order.status]} {order.status.value}",
            f"🕒 Placed: {format_datetime(order.created_at)}",
        ]
        if order.notes:
            lines.append(f"📝 {order.notes}")
        if order.status == OrderStatus.CANCELLED and order.cancellation_reason:
            lines.append(f"Reason: {order.cancellation_reason}")
        return "\n".join(lines)

    @staticmethod
    def format_order_list(orders: List[Order], empty: str) -> str:
        if not orders:
            return empty
        return "\n\n".join(Messages.format_order(order) for order in orders)

    @staticmethod
    def format_nearby_orders(orders: List[Order], origin: GeoPoint) -> str:
        """Pending orders with their distance from the rider"""
        lines = ["🛵 Pending orders near you:"]
        for order in orders:
            lines.append(
                f"- {order.quantity}x {order.tank_brand} {order.tank_size}, "
                f"{format_distance(origin, order.delivery_location)} away: {order.delivery_address}"
            )
        return "\n".join(lines)

    @staticmethod
    def format_merchant_list(merchants: List[Merchant], origin: GeoPoint) -> str:
        """Nearby dealers with their id, distance and prices"""
        if not merchants:
            return "No merchants found near you."
        blocks = []
        for merchant in merchants:
            state = "🟢 open" if merchant.is_open else "🔴 closed"
            lines = [
                f"🏪 {merchant.shop_name} ({state}, {format_distance(origin, merchant.location)})",
                f"ID: {merchant.merchant_id}",
            ]
            for key, price in sorted(merchant.pricing.items()):
                lines.append(f"- {key}: {format_price(price)}")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    @staticmethod
    def format_analytics(analytics: OrderAnalytics) -> str:
        lines = [
            "📈 Order analytics",
            f"Orders: {analytics.total_orders}",
            f"Delivered: {analytics.delivered_orders}",
            f"Cancelled: {analytics.cancelled_orders}",
            f"Revenue: {format_price(analytics.total_revenue)}",
        ]
        for title, breakdown in (("By brand", analytics.by_brand), ("By size", analytics.by_size)):
            if breakdown:
                lines.append(f"\n{title}:")
                for key, sales in sorted(breakdown.items()):
                    lines.append(f"- {key}: {sales.count} ({format_price(sales.revenue)})")
        return "\n".join(lines)

    @staticmethod
    def failure(result: Result) -> str:
        """User-facing text for a failed Result"""
        return f"❌ {result.message or 'Something went wrong, please try again.'}"
