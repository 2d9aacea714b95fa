# refillr/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    """Configuration settings for the service"""

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.getenv("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.getenv("DB_POOL_MAX_SIZE", "10"))

    # Bot settings
    TELEGRAM_TOKEN: str = os.getenv("TELEGRAM_TOKEN", "")

    # Dispatch settings
    DEFAULT_SEARCH_RADIUS_METERS: int = int(os.getenv("DEFAULT_SEARCH_RADIUS_METERS", "5000"))
    EXTENDED_SEARCH_RADIUS_METERS: int = int(os.getenv("EXTENDED_SEARCH_RADIUS_METERS", "10000"))
    PENDING_ORDERS_PAGE_SIZE: int = int(os.getenv("PENDING_ORDERS_PAGE_SIZE", "20"))
    ORDER_HISTORY_LIMIT: int = int(os.getenv("ORDER_HISTORY_LIMIT", "50"))
    MERCHANT_SEARCH_LIMIT: int = int(os.getenv("MERCHANT_SEARCH_LIMIT", "20"))

    # Other settings
    TIMEZONE: str = os.getenv("TZ", "Asia/Manila")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Paths
    LOG_DIR = BASE_DIR / "logs"

    REQUIRED = ("DATABASE_URL", "TELEGRAM_TOKEN")

    @classmethod
    def validate(cls):
        """Fail fast when required settings are missing"""
        missing = [name for name in cls.REQUIRED if not getattr(cls, name)]
        if missing:
            raise ValueError(
                "Missing or invalid environment variables:\n"
                + "\n".join(f"  - {name}" for name in missing)
            )

def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    Config.LOG_DIR.mkdir(exist_ok=True)
    log_file = Config.LOG_DIR / "refillr.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
