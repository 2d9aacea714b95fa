# refillr/bot.py
import asyncio
import logging
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    CallbackQueryHandler,
    filters
)
from .config import Config
from .handlers import (
    CustomerHandler,
    RiderHandler,
    MerchantHandler,
    CallbackHandler
)

class RefillrBot:
    def __init__(self, db):
        """Wire the bot to an already constructed database handle"""
        self.db = db
        self.logger = logging.getLogger(__name__)
        self.application = Application.builder().token(Config.TELEGRAM_TOKEN).build()
        self.setup_handlers()

    def setup_handlers(self):
        """Register command, location and callback handlers"""
        customer = CustomerHandler(self.db)
        rider = RiderHandler(self.db)
        merchant = MerchantHandler(self.db)
        callbacks = CallbackHandler(self.db)

        # Customer commands
        self.application.add_handler(CommandHandler("start", customer.start))
        self.application.add_handler(CommandHandler("help", customer.help))
        self.application.add_handler(CommandHandler("merchants", customer.nearby_merchants))
        self.application.add_handler(CommandHandler("refill", customer.refill))
        self.application.add_handler(CommandHandler("orders", customer.my_orders))
        self.application.add_handler(CommandHandler("order", customer.show_order))
        self.application.add_handler(CommandHandler("cancel", customer.cancel))

        # Rider commands
        self.application.add_handler(CommandHandler("register_rider", rider.register))
        self.application.add_handler(CommandHandler("online", rider.go_online))
        self.application.add_handler(CommandHandler("offline", rider.go_offline))
        self.application.add_handler(CommandHandler("accept", rider.accept))
        self.application.add_handler(CommandHandler("dispatch", rider.dispatch_command))
        self.application.add_handler(CommandHandler("deliver", rider.deliver))

        # Merchant commands
        self.application.add_handler(CommandHandler("merchant_orders", merchant.merchant_orders))
        self.application.add_handler(CommandHandler("assign", merchant.assign))
        self.application.add_handler(CommandHandler("analytics", merchant.analytics))

        # Shared location
        self.application.add_handler(MessageHandler(filters.LOCATION, customer.handle_location))

        # Inline buttons
        self.application.add_handler(CallbackQueryHandler(callbacks.handle_callback))

    async def start(self):
        """Connect to the database and poll until cancelled"""
        await self.db.connect()
        try:
            async with self.application:
                await self.application.start()
                await self.application.updater.start_polling()
                self.logger.info("Bot is polling")
                try:
                    await asyncio.Event().wait()
                finally:
                    await self.application.updater.stop()
                    await self.application.stop()
        finally:
            await self.db.close()
