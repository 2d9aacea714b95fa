# refillr/models/base.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class GeoPoint(BaseModel):
    """A longitude/latitude pair in degrees"""
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_pair(cls, pair) -> "GeoPoint":
        longitude, latitude = pair
        return cls(longitude=longitude, latitude=latitude)

    def as_pair(self) -> tuple:
        return (self.longitude, self.latitude)

class TimeStampedModel(BaseModel):
    """Base model with timestamp fields"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
