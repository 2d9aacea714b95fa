# refillr/models/user.py
from enum import Enum
from typing import Optional
from .base import TimeStampedModel

class UserRole(str, Enum):
    CUSTOMER = "customer"
    MERCHANT = "merchant"
    RIDER = "rider"
    ADMIN = "admin"

class User(TimeStampedModel):
    """Platform user keyed by the identity provider's id"""
    user_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
