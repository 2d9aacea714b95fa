# refillr/models/merchant.py
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel
from uuid import UUID
from .base import GeoPoint, TimeStampedModel

class Merchant(TimeStampedModel):
    """LPG dealer as read by the order core"""
    merchant_id: UUID
    owner_user_id: str
    shop_name: str
    location: GeoPoint
    is_open: bool = True
    is_verified: bool = False
    brands_accepted: List[str] = []
    tank_sizes: List[str] = []
    # "<brand>-<size>" -> unit price
    pricing: Dict[str, Decimal] = {}
    delivery_radius_meters: float = 5000
    # Ring of (longitude, latitude) pairs; takes priority over the radius
    delivery_polygon: Optional[List[GeoPoint]] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None

class SalesBreakdown(BaseModel):
    count: int = 0
    revenue: Decimal = Decimal(0)

class OrderAnalytics(BaseModel):
    """Order totals for one merchant"""
    total_orders: int = 0
    # Cancelled orders never count toward revenue
    total_revenue: Decimal = Decimal(0)
    delivered_orders: int = 0
    cancelled_orders: int = 0
    by_brand: Dict[str, SalesBreakdown] = {}
    by_size: Dict[str, SalesBreakdown] = {}
