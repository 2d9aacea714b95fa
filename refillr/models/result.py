# refillr/models/result.py
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel

class ErrorKind(str, Enum):
    """Named failure outcomes shared by every service operation"""
    VALIDATION = "validation"
    MERCHANT_NOT_FOUND = "merchant_not_found"
    MERCHANT_CLOSED = "merchant_closed"
    BRAND_NOT_CARRIED = "brand_not_carried"
    SIZE_NOT_CARRIED = "size_not_carried"
    PRICING_NOT_CONFIGURED = "pricing_not_configured"
    OUTSIDE_SERVICE_AREA = "outside_service_area"
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_NO_LONGER_AVAILABLE = "order_no_longer_available"
    MUST_REGISTER_AS_RIDER = "must_register_as_rider"
    ALREADY_HAS_RIDER_PROFILE = "already_has_rider_profile"
    RIDER_NOT_FOUND = "rider_not_found"
    NOT_PERMITTED = "not_permitted"
    INTERNAL = "internal"

class Result(BaseModel):
    """Outcome of a service call: a value on success, a named error otherwise"""
    success: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, value: Any = None) -> "Result":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: ErrorKind, message: Optional[str] = None) -> "Result":
        return cls(success=False, error=error, message=message)
