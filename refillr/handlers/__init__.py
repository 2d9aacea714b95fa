# refillr/handlers/__init__.py
"""Telegram handlers"""
from .customer_handlers import CustomerHandler
from .rider_handlers import RiderHandler
from .merchant_handlers import MerchantHandler
from .callback_handler import CallbackHandler

__all__ = [
    'CustomerHandler',
    'RiderHandler',
    'MerchantHandler',
    'CallbackHandler',
]
