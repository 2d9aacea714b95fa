# refillr/utils/keyboards.py
from typing import List
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..models.order import Order, OrderStatus

class Keyboards:
    @staticmethod
    def pending_orders_menu(orders: List[Order]) -> InlineKeyboardMarkup:
        """One claim button per nearby pending order"""
        keyboard = [
            [InlineKeyboardButton(
                f"✅ Accept {order.quantity}x {order.tank_brand} {order.tank_size}",
                callback_data=f"accept_{order.order_id}"
            )]
            for order in orders
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def rider_order_menu(order: Order) -> InlineKeyboardMarkup:
        """Next step for the assigned rider"""
        keyboard = []
        if order.status == OrderStatus.ACCEPTED:
            keyboard.append([InlineKeyboardButton("🛵 Dispatched", callback_data=f"dispatch_{order.order_id}")])
        elif order.status == OrderStatus.DISPATCHED:
            keyboard.append([InlineKeyboardButton("📦 Delivered", callback_data=f"deliver_{order.order_id}")])
        if not order.is_terminal:
            keyboard.append([InlineKeyboardButton("❌ Cancel", callback_data=f"cancel_{order.order_id}")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def customer_order_menu(order: Order) -> InlineKeyboardMarkup:
        keyboard = []
        if order.status == OrderStatus.PENDING:
            keyboard.append([InlineKeyboardButton("❌ Cancel order", callback_data=f"cancel_{order.order_id}")])
        return InlineKeyboardMarkup(keyboard)
