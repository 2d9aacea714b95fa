# refillr/handlers/base_handler.py
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from ..models.base import GeoPoint
from ..models.result import Result
from ..services import DispatchService, MerchantService, OrderService, RiderService, UserService
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

class BaseHandler:
    """Shared plumbing: services, caller identity, replies"""
    def __init__(self, db):
        self.db = db
        self.orders = OrderService(db)
        self.dispatch = DispatchService(db)
        self.riders = RiderService(db)
        self.merchants = MerchantService(db)
        self.users = UserService(db)
        self.keyboards = Keyboards()
        self.messages = Messages()

    @staticmethod
    def caller_id(update: Update) -> str:
        """Telegram is the identity provider; its user id is the caller id"""
        return str(update.effective_user.id)

    @staticmethod
    def saved_location(context: ContextTypes.DEFAULT_TYPE) -> Optional[GeoPoint]:
        return context.user_data.get('location')

    async def reply(self, update: Update, text: str, reply_markup=None):
        if update.callback_query:
            await update.callback_query.edit_message_text(text, reply_markup=reply_markup)
        else:
            await update.message.reply_text(text, reply_markup=reply_markup)

    async def reply_failure(self, update: Update, result: Result):
        await self.reply(update, self.messages.failure(result))

    async def require_args(self, update: Update, context: ContextTypes.DEFAULT_TYPE,
                           count: int, usage: str) -> bool:
        if len(context.args or []) < count:
            await update.message.reply_text(f"Usage: {usage}")
            return False
        return True
