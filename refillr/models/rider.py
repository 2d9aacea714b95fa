# refillr/models/rider.py
from typing import Optional
from .base import GeoPoint, TimeStampedModel

class Rider(TimeStampedModel):
    """Delivery rider profile"""
    user_id: str
    first_name: str
    last_name: str
    phone_number: str
    vehicle_type: str
    plate_number: Optional[str] = None
    license_number: Optional[str] = None
    is_online: bool = False
    is_verified: bool = False
    last_location: Optional[GeoPoint] = None
