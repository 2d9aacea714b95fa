# tests/fakes.py
"""In-memory stand-in for the Database handle and its repositories.

Conditional updates yield to the event loop first, then check and write
without awaiting in between, matching the single-statement guarantee the
PostgreSQL repositories rely on.
"""
import asyncio
import math
import asyncpg
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4
import pytz
from refillr.database.repositories import ORDER_PREDICATE_COLUMNS, UPDATABLE_ORDER_COLUMNS
from refillr.models.base import GeoPoint
from refillr.models.merchant import Merchant
from refillr.models.order import Order, OrderStatus
from refillr.models.rider import Rider
from refillr.models.user import User, UserRole
from refillr.utils.geo import EARTH_RADIUS_METERS, haversine_meters

EPOCH = datetime(2026, 1, 1, tzinfo=pytz.utc)

MERCHANT_OWNER = "merchant-owner"
CUSTOMER = "customer-1"

def offset_north(point: GeoPoint, meters: float) -> GeoPoint:
    """The point `meters` due north of `point` on the haversine sphere"""
    return GeoPoint(
        longitude=point.longitude,
        latitude=point.latitude + math.degrees(meters / EARTH_RADIUS_METERS)
    )

class FakeOrderRepository:
    def __init__(self, db):
        self.db = db

    async def insert(self, customer_id, merchant_id, tank_brand, tank_size, quantity,
                     total_price, delivery_location, delivery_address, notes=None,
                     conn=None) -> Order:
        await self.db.io("orders.insert")
        order = Order(
            order_id=uuid4(),
            customer_id=customer_id,
            merchant_id=merchant_id,
            tank_brand=tank_brand,
            tank_size=tank_size,
            quantity=quantity,
            total_price=total_price,
            status=OrderStatus.PENDING,
            delivery_location=delivery_location,
            delivery_address=delivery_address,
            notes=notes,
            created_at=self.db.tick(),
        )
        self.db.order_rows[order.order_id] = order
        return order

    async def get(self, order_id, conn=None) -> Optional[Order]:
        await self.db.io("orders.get")
        return self.db.order_rows.get(UUID(str(order_id)))

    async def exists(self, order_id, conn=None) -> bool:
        await self.db.io("orders.exists")
        return UUID(str(order_id)) in self.db.order_rows

    async def update_where(self, order_id, expected: Dict[str, Any],
                           changes: Dict[str, Any], conn=None) -> Optional[Order]:
        unknown = (set(changes) - UPDATABLE_ORDER_COLUMNS) | (set(expected) - ORDER_PREDICATE_COLUMNS)
        if unknown:
            raise ValueError(f"Unsupported order columns: {sorted(unknown)}")
        await self.db.io("orders.update_where")

        # No awaits from here on: check and write happen as one step
        self.db.update_attempts += 1
        order = self.db.order_rows.get(UUID(str(order_id)))
        if order is None:
            return None
        for column, value in expected.items():
            if getattr(order, column) != value:
                return None
        updated = order.model_copy(update={**changes, "updated_at": self.db.tick()})
        self.db.order_rows[order.order_id] = updated
        return updated

    async def list_by_customer(self, customer_id, limit) -> List[Order]:
        await self.db.io("orders.list_by_customer")
        orders = [o for o in self.db.order_rows.values() if o.customer_id == customer_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)[:limit]

    async def list_by_merchant(self, merchant_id, limit) -> List[Order]:
        await self.db.io("orders.list_by_merchant")
        orders = [o for o in self.db.order_rows.values() if o.merchant_id == merchant_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)[:limit]

    async def list_pending_near(self, point, radius_meters, limit) -> List[Order]:
        await self.db.io("orders.list_pending_near")
        orders = [
            o for o in self.db.order_rows.values()
            if o.status == OrderStatus.PENDING
            and haversine_meters(point, o.delivery_location) <= radius_meters
        ]
        return sorted(orders, key=lambda o: o.created_at)[:limit]

    async def list_for_analytics(self, merchant_id, start_date=None, end_date=None) -> List[Order]:
        await self.db.io("orders.list_for_analytics")
        return [
            o for o in self.db.order_rows.values()
            if o.merchant_id == merchant_id
            and (start_date is None or o.created_at >= start_date)
            and (end_date is None or o.created_at <= end_date)
        ]

class FakeMerchantRepository:
    def __init__(self, db):
        self.db = db

    async def get(self, merchant_id) -> Optional[Merchant]:
        await self.db.io("merchants.get")
        return self.db.merchant_rows.get(UUID(str(merchant_id)))

    async def get_by_owner(self, owner_user_id) -> Optional[Merchant]:
        await self.db.io("merchants.get_by_owner")
        for merchant in self.db.merchant_rows.values():
            if merchant.owner_user_id == owner_user_id:
                return merchant
        return None

    async def exists_owned_by(self, merchant_id, owner_user_id) -> bool:
        await self.db.io("merchants.exists_owned_by")
        merchant = self.db.merchant_rows.get(UUID(str(merchant_id)))
        return merchant is not None and merchant.owner_user_id == owner_user_id

    async def list_near(self, point, radius_meters, brand, limit) -> List[Merchant]:
        await self.db.io("merchants.list_near")
        nearby = [
            (haversine_meters(point, m.location), m)
            for m in self.db.merchant_rows.values()
            if brand is None or brand in m.brands_accepted
        ]
        nearby = [(d, m) for d, m in nearby if d <= radius_meters]
        return [m for _, m in sorted(nearby, key=lambda item: item[0])][:limit]

    async def list_in_bounds(self, min_longitude, min_latitude,
                             max_longitude, max_latitude) -> List[Merchant]:
        await self.db.io("merchants.list_in_bounds")
        return sorted(
            (m for m in self.db.merchant_rows.values()
             if min_longitude <= m.location.longitude <= max_longitude
             and min_latitude <= m.location.latitude <= max_latitude),
            key=lambda m: m.shop_name
        )

class FakeRiderRepository:
    def __init__(self, db):
        self.db = db

    async def exists(self, user_id, conn=None) -> bool:
        await self.db.io("riders.exists")
        return user_id in self.db.rider_rows

    async def get(self, user_id) -> Optional[Rider]:
        await self.db.io("riders.get")
        return self.db.rider_rows.get(user_id)

    async def create(self, user_id, data, conn=None) -> Rider:
        await self.db.io("riders.create")
        if user_id in self.db.rider_rows:
            raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
        rider = Rider(user_id=user_id, created_at=self.db.tick(), **data)
        self.db.rider_rows[user_id] = rider
        return rider

    async def set_online(self, user_id, is_online) -> bool:
        await self.db.io("riders.set_online")
        rider = self.db.rider_rows.get(user_id)
        if rider is None:
            return False
        self.db.rider_rows[user_id] = rider.model_copy(update={"is_online": is_online})
        return True

    async def set_location(self, user_id, point) -> bool:
        await self.db.io("riders.set_location")
        rider = self.db.rider_rows.get(user_id)
        if rider is None:
            return False
        self.db.rider_rows[user_id] = rider.model_copy(update={"last_location": point})
        return True

    async def list_online_near(self, point, radius_meters, limit) -> List[Rider]:
        await self.db.io("riders.list_online_near")
        nearby = [
            (haversine_meters(point, r.last_location), r)
            for r in self.db.rider_rows.values()
            if r.is_online and r.last_location is not None
        ]
        nearby = [(d, r) for d, r in nearby if d <= radius_meters]
        return [r for _, r in sorted(nearby, key=lambda item: item[0])][:limit]

class FakeUserRepository:
    def __init__(self, db):
        self.db = db

    async def ensure(self, user_id, username=None, first_name=None, last_name=None) -> None:
        await self.db.io("users.ensure")
        existing = self.db.user_rows.get(user_id)
        role = existing.role if existing else UserRole.CUSTOMER
        self.db.user_rows[user_id] = User(
            user_id=user_id, username=username, first_name=first_name,
            last_name=last_name, role=role, created_at=self.db.tick()
        )

    async def get(self, user_id) -> Optional[User]:
        await self.db.io("users.get")
        return self.db.user_rows.get(user_id)

    async def set_role(self, user_id, role, conn=None) -> None:
        await self.db.io("users.set_role")
        existing = self.db.user_rows.get(user_id) or User(user_id=user_id, created_at=self.db.tick())
        self.db.user_rows[user_id] = existing.model_copy(update={"role": role})

class InMemoryDatabase:
    def __init__(self):
        self.order_rows: Dict[UUID, Order] = {}
        self.merchant_rows: Dict[UUID, Merchant] = {}
        self.rider_rows: Dict[str, Rider] = {}
        self.user_rows: Dict[str, User] = {}
        # Operation names that should raise as if the store were down
        self.failing: set = set()
        self.update_attempts = 0
        self._clock = 0

        self.orders = FakeOrderRepository(self)
        self.merchants = FakeMerchantRepository(self)
        self.riders = FakeRiderRepository(self)
        self.users = FakeUserRepository(self)

    def tick(self) -> datetime:
        """Strictly increasing timestamps"""
        self._clock += 1
        return EPOCH + timedelta(seconds=self._clock)

    async def io(self, operation: str):
        await asyncio.sleep(0)
        if operation in self.failing:
            raise ConnectionError(f"store unavailable during {operation}")

    @asynccontextmanager
    async def transaction(self):
        snapshot = (
            dict(self.order_rows), dict(self.merchant_rows),
            dict(self.rider_rows), dict(self.user_rows),
        )
        try:
            yield self
        except BaseException:
            self.order_rows, self.merchant_rows, self.rider_rows, self.user_rows = snapshot
            raise

    # Seeding helpers

    def add_merchant(self, owner_user_id=MERCHANT_OWNER, **overrides) -> Merchant:
        fields = dict(
            merchant_id=uuid4(),
            owner_user_id=owner_user_id,
            shop_name="Cabanatuan Gas Depot",
            location=GeoPoint(longitude=120.9734, latitude=15.4868),
            is_open=True,
            brands_accepted=["Gasul", "Solane"],
            tank_sizes=["11kg", "22kg"],
            pricing={"Gasul-11kg": Decimal("800"), "Solane-22kg": Decimal("1500")},
            delivery_radius_meters=5000,
            created_at=self.tick(),
        )
        fields.update(overrides)
        merchant = Merchant(**fields)
        self.merchant_rows[merchant.merchant_id] = merchant
        return merchant

    def add_rider(self, user_id, **overrides) -> Rider:
        fields = dict(
            user_id=user_id,
            first_name="Juan",
            last_name="Dela Cruz",
            phone_number="09171234567",
            vehicle_type="motorcycle",
            created_at=self.tick(),
        )
        fields.update(overrides)
        rider = Rider(**fields)
        self.rider_rows[user_id] = rider
        return rider

    def add_order(self, merchant: Merchant, customer_id=CUSTOMER, **overrides) -> Order:
        fields = dict(
            order_id=uuid4(),
            customer_id=customer_id,
            merchant_id=merchant.merchant_id,
            tank_brand="Gasul",
            tank_size="11kg",
            quantity=1,
            total_price=Decimal("800"),
            delivery_location=merchant.location,
            delivery_address="123 Burgos Ave",
            created_at=self.tick(),
        )
        fields.update(overrides)
        order = Order(**fields)
        self.order_rows[order.order_id] = order
        return order
