# refillr/handlers/merchant_handlers.py
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler
from ..models.order import OrderStatus

class MerchantHandler(BaseHandler):
    """Commands used by merchant owners"""

    async def _my_merchant(self, update: Update):
        result = await self.merchants.get_my_merchant(self.caller_id(update))
        if not result:
            await self.reply_failure(update, result)
            return None
        if result.value is None:
            await update.message.reply_text("❌ You do not manage a merchant.")
            return None
        return result.value

    async def merchant_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/merchant_orders"""
        merchant = await self._my_merchant(update)
        if merchant is None:
            return

        result = await self.orders.list_orders_for_merchant(self.caller_id(update), merchant.merchant_id)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(
            self.messages.format_order_list(result.value, "No orders yet.")
        )

    async def assign(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/assign <order_id> [rider_id] - accept a pending order for the shop"""
        if not await self.require_args(update, context, 1, "/assign <order_id> [rider_id]"):
            return

        rider_id = context.args[1] if len(context.args) > 1 else None
        result = await self.orders.update_order_status(
            self.caller_id(update), context.args[0], OrderStatus.ACCEPTED, rider_id=rider_id
        )
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(
            "🤝 Order accepted.\n\n" + self.messages.format_order(result.value)
        )

    async def analytics(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/analytics"""
        merchant = await self._my_merchant(update)
        if merchant is None:
            return

        result = await self.merchants.get_order_analytics(self.caller_id(update), merchant.merchant_id)
        if not result:
            await self.reply_failure(update, result)
            return
        await update.message.reply_text(self.messages.format_analytics(result.value))
