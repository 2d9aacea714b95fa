# main.py
import asyncio
import logging
from refillr.bot import RefillrBot
from refillr.config import Config, setup_logging
from refillr.database import Database

logger = logging.getLogger("refillr")

async def main():
    setup_logging()
    Config.validate()

    bot = RefillrBot(Database(Config.DATABASE_URL))
    logger.info("Starting Refillr bot")
    try:
        await bot.start()
    except Exception as e:
        logger.error(f"Bot stopped with an error: {e}", exc_info=True)
        raise

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down")
