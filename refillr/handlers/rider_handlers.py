# refillr/handlers/rider_handlers.py
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler

class RiderHandler(BaseHandler):
    """Commands used by delivery riders"""

    async def register(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/register_rider <first> <last> <phone> <vehicle> [plate]"""
        usage = "/register_rider <first> <last> <phone> <motorcycle|bicycle|sidecar> [plate]"
        if not await self.require_args(update, context, 4, usage):
            return

        first_name, last_name, phone_number, vehicle_type = context.args[:4]
        result = await self.riders.register_rider(self.caller_id(update), {
            "first_name": first_name,
            "last_name": last_name,
            "phone_number": phone_number,
            "vehicle_type": vehicle_type,
            "plate_number": context.args[4] if len(context.args) > 4 else None,
        })
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(
            "🛵 You are registered as a rider. Use /online and share your location."
        )

    async def go_online(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/online"""
        result = await self.riders.set_online(self.caller_id(update), True)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text("🟢 You are online.")

    async def go_offline(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/offline"""
        result = await self.riders.set_online(self.caller_id(update), False)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text("⚪ You are offline.")

    async def accept_order(self, update: Update, order_id: str):
        result = await self.dispatch.accept_order(self.caller_id(update), order_id)
        if not result:
            await self.reply_failure(update, result)
            return

        order = await self.orders.get_order_by_id(self.caller_id(update), result.value)
        if not order:
            await self.reply(update, f"✅ Order {result.value} is yours.")
            return
        await self.reply(
            update,
            "✅ Order is yours!\n\n" + self.messages.format_order(order.value),
            reply_markup=self.keyboards.rider_order_menu(order.value)
        )

    async def mark_dispatched(self, update: Update, order_id: str):
        result = await self.dispatch.mark_dispatched(self.caller_id(update), order_id)
        if not result:
            await self.reply_failure(update, result)
            return
        await self.reply(
            update,
            self.messages.format_order(result.value),
            reply_markup=self.keyboards.rider_order_menu(result.value)
        )

    async def mark_delivered(self, update: Update, order_id: str):
        result = await self.dispatch.mark_delivered(self.caller_id(update), order_id)
        if not result:
            await self.reply_failure(update, result)
            return
        await self.reply(update, "📦 Delivered. Thank you!\n\n" + self.messages.format_order(result.value))

    async def accept(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/accept <id>"""
        if await self.require_args(update, context, 1, "/accept <id>"):
            await self.accept_order(update, context.args[0])

    async def dispatch_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/dispatch <id>"""
        if await self.require_args(update, context, 1, "/dispatch <id>"):
            await self.mark_dispatched(update, context.args[0])

    async def deliver(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/deliver <id>"""
        if await self.require_args(update, context, 1, "/deliver <id>"):
            await self.mark_delivered(update, context.args[0])
