# refillr/handlers/callback_handler.py
from telegram import Update
from telegram.ext import ContextTypes
from .rider_handlers import RiderHandler

class CallbackHandler(RiderHandler):
    """Inline button presses"""

    async def handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        action, _, order_id = query.data.partition('_')
        if action not in ("accept", "dispatch", "deliver", "cancel"):
            await query.answer("⚠️ Unknown action")
            return

        await query.answer()
        if action == "accept":
            await self.accept_order(update, order_id)
        elif action == "dispatch":
            await self.mark_dispatched(update, order_id)
        elif action == "deliver":
            await self.mark_delivered(update, order_id)
        else:
            result = await self.orders.cancel_order(self.caller_id(update), order_id)
            if not result:
                await self.reply_failure(update, result)
                return
            await self.reply(update, "❌ Order cancelled.")
