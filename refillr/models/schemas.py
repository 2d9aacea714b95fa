# refillr/models/schemas.py
"""Request schemas checked before any business logic runs"""
from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from .base import GeoPoint
from .order import OrderStatus
from .result import ErrorKind, Result
from ..config import Config
from ..constants import MAX_SEARCH_RADIUS_METERS

TankBrand = Literal["Gasul", "Solane", "Petron", "other"]
TankSize = Literal["2.7kg", "5kg", "11kg", "22kg", "50kg"]
VehicleType = Literal["motorcycle", "bicycle", "sidecar"]

class RequestModel(BaseModel):
    # Unknown keys (e.g. a client-side total price) are dropped
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

class CreateOrderRequest(RequestModel):
    merchant_id: UUID
    tank_brand: TankBrand
    tank_size: TankSize
    quantity: int = Field(default=1, gt=0, strict=True)
    delivery_location: GeoPoint
    delivery_address: str = Field(min_length=1)
    notes: Optional[str] = None

class UpdateOrderStatusRequest(RequestModel):
    order_id: UUID
    status: OrderStatus
    rider_id: Optional[str] = None
    cancellation_reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def not_initial(cls, value: OrderStatus) -> OrderStatus:
        if value == OrderStatus.PENDING:
            raise ValueError("an order cannot be moved back to pending")
        return value

class CancelOrderRequest(RequestModel):
    order_id: UUID
    cancellation_reason: Optional[str] = None

class OrderRef(RequestModel):
    order_id: UUID

class MerchantRef(RequestModel):
    merchant_id: UUID

class AcceptOrderRequest(OrderRef):
    pass

class PendingOrdersQuery(RequestModel):
    location: GeoPoint
    radius_meters: int = Field(default=Config.EXTENDED_SEARCH_RADIUS_METERS, gt=0, le=MAX_SEARCH_RADIUS_METERS)

class NearbyRidersQuery(RequestModel):
    location: GeoPoint
    radius_meters: int = Field(default=Config.DEFAULT_SEARCH_RADIUS_METERS, gt=0, le=MAX_SEARCH_RADIUS_METERS)

class NearbyMerchantsQuery(RequestModel):
    location: GeoPoint
    radius_meters: int = Field(default=Config.EXTENDED_SEARCH_RADIUS_METERS, gt=0, le=MAX_SEARCH_RADIUS_METERS)
    brand: Optional[TankBrand] = None

class MerchantsInPolygonQuery(RequestModel):
    polygon: List[GeoPoint] = Field(min_length=3)

class RegisterRiderRequest(RequestModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: str = Field(min_length=1, max_length=30)
    vehicle_type: VehicleType
    plate_number: Optional[str] = None
    license_number: Optional[str] = None

class OrderAnalyticsQuery(RequestModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    polygon: Optional[List[GeoPoint]] = None

    @field_validator("polygon")
    @classmethod
    def ring_has_three_points(cls, value):
        if value is not None and len(value) < 3:
            raise ValueError("a polygon needs at least 3 points")
        return value

def describe_validation_error(error: ValidationError) -> str:
    """Turn a pydantic error into 'field: reason' lines"""
    parts = []
    for issue in error.errors():
        field = ".".join(str(loc) for loc in issue["loc"]) or "request"
        parts.append(f"{field}: {issue['msg']}")
    return "; ".join(parts)

def parse_request(schema, data):
    """Validate `data` against `schema`; returns (request, None) or (None, failure)"""
    if isinstance(data, schema):
        return data, None
    try:
        return schema.model_validate(data), None
    except ValidationError as e:
        return None, Result.fail(ErrorKind.VALIDATION, describe_validation_error(e))
