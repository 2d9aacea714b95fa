# refillr/models/__init__.py
"""Data records shared across services"""
from .base import GeoPoint
from .order import Order, OrderStatus, TERMINAL_STATUSES
from .merchant import Merchant
from .rider import Rider
from .user import User, UserRole
from .result import ErrorKind, Result

__all__ = [
    'GeoPoint',
    'Order',
    'OrderStatus',
    'TERMINAL_STATUSES',
    'Merchant',
    'Rider',
    'User',
    'UserRole',
    'ErrorKind',
    'Result',
]
