# refillr/services/rider_service.py
import asyncpg
import logging
from typing import Any, Dict, Optional
from ..config import Config
from ..models.base import GeoPoint
from ..models.result import ErrorKind, Result
from ..models.schemas import NearbyRidersQuery, RegisterRiderRequest, parse_request
from ..models.user import UserRole
from .decorators import guarded

ALREADY_REGISTERED = "You already have a rider profile"

class RiderService:
    """Rider profiles, availability and location"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    @guarded("Failed to fetch rider profile")
    async def get_my_rider(self, user_id: str) -> Result:
        """The caller's rider profile, or None if they have not registered"""
        return Result.ok(await self.db.riders.get(user_id))

    @guarded("Failed to create rider profile")
    async def register_rider(self, user_id: str, data) -> Result:
        """Create the rider profile and make the user a rider, both or neither"""
        request, failure = parse_request(RegisterRiderRequest, data)
        if failure is not None:
            return failure

        if await self.db.riders.exists(user_id):
            return Result.fail(ErrorKind.ALREADY_HAS_RIDER_PROFILE, ALREADY_REGISTERED)

        try:
            async with self.db.transaction() as conn:
                rider = await self.db.riders.create(user_id, request.model_dump(), conn=conn)
                await self.db.users.set_role(user_id, UserRole.RIDER, conn=conn)
        except asyncpg.UniqueViolationError:
            # A concurrent registration for the same user won
            return Result.fail(ErrorKind.ALREADY_HAS_RIDER_PROFILE, ALREADY_REGISTERED)

        self.logger.info(f"Rider profile created for {user_id}")
        return Result.ok(rider)

    @guarded("Failed to update rider status")
    async def set_online(self, user_id: str, is_online: bool) -> Result:
        if not await self.db.riders.set_online(user_id, is_online):
            return Result.fail(ErrorKind.MUST_REGISTER_AS_RIDER, "You must register as a rider first")
        return Result.ok(is_online)

    @guarded("Failed to update rider location")
    async def update_location(self, user_id: str, location) -> Result:
        request, failure = parse_request(GeoPoint, location)
        if failure is not None:
            return failure

        if not await self.db.riders.set_location(user_id, request):
            return Result.fail(ErrorKind.MUST_REGISTER_AS_RIDER, "You must register as a rider first")
        return Result.ok(request)

    @guarded("Failed to fetch nearby riders")
    async def get_nearby_riders(self, location, radius_meters: Optional[int] = None) -> Result:
        """Online riders near a point, nearest first; rider positions are public map data"""
        query: Dict[str, Any] = {"location": location}
        if radius_meters is not None:
            query["radius_meters"] = radius_meters
        request, failure = parse_request(NearbyRidersQuery, query)
        if failure is not None:
            return failure

        riders = await self.db.riders.list_online_near(
            request.location, request.radius_meters, Config.PENDING_ORDERS_PAGE_SIZE
        )
        return Result.ok(riders)
