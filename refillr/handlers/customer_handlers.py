# refillr/handlers/customer_handlers.py
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler
from ..models.base import GeoPoint
from ..models.result import ErrorKind

HELP_TEXT = (
    "🛢 Refillr - LPG refills delivered\n\n"
    "Customers:\n"
    "1. Share your location 📍 to see nearby merchants\n"
    "/merchants [brand] - merchants near your location\n"
    "2. /refill <merchant_id> <brand> <size> <qty> <address>\n"
    "/orders - your orders\n"
    "/order <id> - order details\n"
    "/cancel <id> [reason] - cancel an order\n\n"
    "Riders:\n"
    "/register_rider <first> <last> <phone> <vehicle> [plate]\n"
    "/online, /offline\n"
    "Share your location to see nearby pending orders\n"
    "/accept <id>, /dispatch <id>, /deliver <id>\n\n"
    "Merchants:\n"
    "/merchant_orders, /assign <order_id> [rider_id], /analytics"
)

class CustomerHandler(BaseHandler):
    """Commands used by customers"""

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/start"""
        user = update.effective_user
        await self.users.register_user(
            user_id=self.caller_id(update),
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name
        )
        await update.message.reply_text(
            f"Hi {user.first_name}! 👋\n\n{HELP_TEXT}"
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/help"""
        await update.message.reply_text(HELP_TEXT)

    async def handle_location(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Remember a shared location; customers see nearby merchants, riders nearby pending orders"""
        shared = update.message.location
        location = GeoPoint(longitude=shared.longitude, latitude=shared.latitude)
        context.user_data['location'] = location

        caller_id = self.caller_id(update)
        riding = await self.riders.update_location(caller_id, location)
        if not riding:
            if riding.error != ErrorKind.MUST_REGISTER_AS_RIDER:
                await self.reply_failure(update, riding)
                return
            await self.show_nearby_merchants(update, location)
            return

        result = await self.orders.list_pending_orders_near_rider(caller_id, location)
        if not result:
            await self.reply_failure(update, result)
            return
        if not result.value:
            await update.message.reply_text("No pending orders near you right now.")
            return

        await update.message.reply_text(
            self.messages.format_nearby_orders(result.value, location),
            reply_markup=self.keyboards.pending_orders_menu(result.value)
        )

    async def show_nearby_merchants(self, update: Update, location: GeoPoint, brand=None):
        result = await self.merchants.get_nearby_merchants(location, brand=brand)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(
            self.messages.format_merchant_list(result.value, location)
        )

    async def nearby_merchants(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/merchants [brand]"""
        location = self.saved_location(context)
        if location is None:
            await update.message.reply_text("📍 Please share your location first.")
            return
        brand = context.args[0] if context.args else None
        await self.show_nearby_merchants(update, location, brand)

    async def refill(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/refill <merchant_id> <brand> <size> <qty> <address...>"""
        usage = "/refill <merchant_id> <brand> <size> <qty> <address>"
        if not await self.require_args(update, context, 5, usage):
            return

        location = self.saved_location(context)
        if location is None:
            await update.message.reply_text("📍 Please share your delivery location first.")
            return

        merchant_id, brand, size, quantity = context.args[:4]
        try:
            quantity = int(quantity)
        except ValueError:
            await update.message.reply_text("❌ Quantity must be a whole number.")
            return

        result = await self.orders.create_order(self.caller_id(update), {
            "merchant_id": merchant_id,
            "tank_brand": brand,
            "tank_size": size,
            "quantity": quantity,
            "delivery_location": location,
            "delivery_address": " ".join(context.args[4:]),
        })
        if not result:
            await self.reply_failure(update, result)
            return

        created = await self.orders.get_order_by_id(self.caller_id(update), result.value)
        if not created:
            await update.message.reply_text(f"✅ Order {result.value} placed.")
            return
        await update.message.reply_text(
            "✅ Order placed!\n\n" + self.messages.format_order(created.value),
            reply_markup=self.keyboards.customer_order_menu(created.value)
        )

    async def my_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/orders"""
        result = await self.orders.list_orders_for_customer(self.caller_id(update))
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(
            self.messages.format_order_list(result.value, "You have no orders yet.")
        )

    async def show_order(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/order <id>"""
        if not await self.require_args(update, context, 1, "/order <id>"):
            return

        caller_id = self.caller_id(update)
        result = await self.orders.get_order_by_id(caller_id, context.args[0])
        if not result:
            await self.reply_failure(update, result)
            return

        order = result.value
        if order.rider_id == caller_id:
            markup = self.keyboards.rider_order_menu(order)
        else:
            markup = self.keyboards.customer_order_menu(order)
        await update.message.reply_text(self.messages.format_order(order), reply_markup=markup)

    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/cancel <id> [reason]"""
        if not await self.require_args(update, context, 1, "/cancel <id> [reason]"):
            return

        reason = " ".join(context.args[1:]) or None
        result = await self.orders.cancel_order(self.caller_id(update), context.args[0], reason)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text("❌ Order cancelled.")
