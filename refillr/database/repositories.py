# refillr/database/repositories.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID
from ..models.base import GeoPoint
from ..models.merchant import Merchant
from ..models.order import Order, OrderStatus
from ..models.rider import Rider
from ..models.user import User, UserRole
from ..utils.geo import EARTH_RADIUS_METERS

logger = logging.getLogger(__name__)

# Columns a conditional update may assign or test
UPDATABLE_ORDER_COLUMNS = frozenset({
    "status", "rider_id", "accepted_at", "dispatched_at",
    "delivered_at", "cancelled_at", "cancellation_reason",
})
ORDER_PREDICATE_COLUMNS = frozenset({"status", "rider_id", "customer_id", "merchant_id"})

def _haversine_sql(lon_column: str, lat_column: str) -> str:
    """Distance in meters from ($1 longitude, $2 latitude) to a row's point"""
    return f"""
        2 * {EARTH_RADIUS_METERS} * ASIN(LEAST(1, SQRT(
            POWER(SIN(RADIANS({lat_column} - $2) / 2), 2) +
            COS(RADIANS($2)) * COS(RADIANS({lat_column})) *
            POWER(SIN(RADIANS({lon_column} - $1) / 2), 2)
        )))
    """

def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value

def _order_from_row(row) -> Order:
    data = dict(row)
    data["delivery_location"] = GeoPoint(
        longitude=data.pop("delivery_longitude"),
        latitude=data.pop("delivery_latitude")
    )
    return Order.model_validate(data)

def _polygon_from_json(polygon) -> Optional[List[GeoPoint]]:
    # Accepts a bare ring or a GeoJSON Polygon (outer ring only)
    if not polygon:
        return None
    try:
        if isinstance(polygon, dict):
            rings = polygon.get("coordinates") or []
            polygon = rings[0] if rings else []
        return [GeoPoint.from_pair(pair) for pair in polygon]
    except (TypeError, ValueError, KeyError, IndexError) as e:
        # Unreadable rings fall back to the delivery radius
        logger.warning(f"Ignoring malformed delivery polygon: {e}")
        return None

def _merchant_from_row(row) -> Merchant:
    data = dict(row)
    data["location"] = GeoPoint(
        longitude=data.pop("longitude"),
        latitude=data.pop("latitude")
    )
    data["delivery_polygon"] = _polygon_from_json(data.get("delivery_polygon"))
    data["brands_accepted"] = list(data.get("brands_accepted") or [])
    data["tank_sizes"] = list(data.get("tank_sizes") or [])
    return Merchant.model_validate(data)

def _rider_from_row(row) -> Rider:
    data = dict(row)
    longitude = data.pop("last_longitude", None)
    latitude = data.pop("last_latitude", None)
    if longitude is not None and latitude is not None:
        data["last_location"] = GeoPoint(longitude=longitude, latitude=latitude)
    return Rider.model_validate(data)

class Repository:
    """Base for table access; every method may join a caller's transaction"""

    def __init__(self, db):
        self.db = db

    @asynccontextmanager
    async def _connection(self, conn=None):
        if conn is not None:
            yield conn
            return
        async with self.db.pool.acquire() as acquired:
            yield acquired

class OrderRepository(Repository):

    async def insert(self, customer_id: str, merchant_id: UUID, tank_brand: str,
                     tank_size: str, quantity: int, total_price: Decimal,
                     delivery_location: GeoPoint, delivery_address: str,
                     notes: Optional[str] = None, conn=None) -> Order:
        """Persist a new pending order"""
        async with self._connection(conn) as c:
            row = await c.fetchrow("""
                INSERT INTO orders (
                    customer_id, merchant_id, tank_brand, tank_size, quantity,
                    total_price, status, delivery_longitude, delivery_latitude,
                    delivery_address, notes
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                RETURNING *
            """,
                customer_id, merchant_id, tank_brand, tank_size, quantity,
                total_price, OrderStatus.PENDING.value,
                delivery_location.longitude, delivery_location.latitude,
                delivery_address, notes
            )
            return _order_from_row(row)

    async def get(self, order_id: UUID, conn=None) -> Optional[Order]:
        async with self._connection(conn) as c:
            row = await c.fetchrow(
                "SELECT * FROM orders WHERE order_id = $1", order_id
            )
            return _order_from_row(row) if row else None

    async def exists(self, order_id: UUID, conn=None) -> bool:
        async with self._connection(conn) as c:
            return await c.fetchval(
                "SELECT EXISTS (SELECT 1 FROM orders WHERE order_id = $1)", order_id
            )

    async def update_where(self, order_id: UUID, expected: Dict[str, Any],
                           changes: Dict[str, Any], conn=None) -> Optional[Order]:
        """Apply `changes` only if the row still matches `expected`, in one statement.

        Returns the updated order, or None when the predicate did not match
        (including when the order does not exist). Concurrent callers with the
        same predicate serialise on the row lock and all but the first see a
        non-matching row.
        """
        unknown = (set(changes) - UPDATABLE_ORDER_COLUMNS) | (set(expected) - ORDER_PREDICATE_COLUMNS)
        if unknown:
            raise ValueError(f"Unsupported order columns: {sorted(unknown)}")

        params: List[Any] = [order_id]
        assignments = []
        for column, value in changes.items():
            params.append(_db_value(value))
            assignments.append(f"{column} = ${len(params)}")
        assignments.append("updated_at = CURRENT_TIMESTAMP")

        conditions = ["order_id = $1"]
        for column, value in expected.items():
            if value is None:
                conditions.append(f"{column} IS NULL")
            else:
                params.append(_db_value(value))
                conditions.append(f"{column} = ${len(params)}")

        query = (
            f"UPDATE orders SET {', '.join(assignments)} "
            f"WHERE {' AND '.join(conditions)} RETURNING *"
        )
        async with self._connection(conn) as c:
            row = await c.fetchrow(query, *params)
            return _order_from_row(row) if row else None

    async def list_by_customer(self, customer_id: str, limit: int) -> List[Order]:
        """Newest first"""
        async with self._connection() as c:
            rows = await c.fetch("""
                SELECT * FROM orders
                WHERE customer_id = $1
                ORDER BY created_at DESC
                LIMIT $2
            """, customer_id, limit)
            return [_order_from_row(row) for row in rows]

    async def list_by_merchant(self, merchant_id: UUID, limit: int) -> List[Order]:
        """Newest first"""
        async with self._connection() as c:
            rows = await c.fetch("""
                SELECT * FROM orders
                WHERE merchant_id = $1
                ORDER BY created_at DESC
                LIMIT $2
            """, merchant_id, limit)
            return [_order_from_row(row) for row in rows]

    async def list_pending_near(self, point: GeoPoint, radius_meters: float,
                                limit: int) -> List[Order]:
        """Pending orders within the radius, oldest first"""
        async with self._connection() as c:
            rows = await c.fetch(f"""
                SELECT * FROM (
                    SELECT o.*, {_haversine_sql('o.delivery_longitude', 'o.delivery_latitude')}
                        AS distance_meters
                    FROM orders o
                    WHERE o.status = 'pending'
                ) nearby
                WHERE distance_meters <= $3
                ORDER BY created_at ASC
                LIMIT $4
            """, point.longitude, point.latitude, float(radius_meters), limit)
            orders = []
            for row in rows:
                data = dict(row)
                data.pop("distance_meters", None)
                orders.append(_order_from_row(data))
            return orders

    async def list_for_analytics(self, merchant_id: UUID,
                                 start_date: Optional[datetime] = None,
                                 end_date: Optional[datetime] = None) -> List[Order]:
        query = "SELECT * FROM orders WHERE merchant_id = $1"
        params: List[Any] = [merchant_id]
        if start_date:
            params.append(start_date)
            query += f" AND created_at >= ${len(params)}"
        if end_date:
            params.append(end_date)
            query += f" AND created_at <= ${len(params)}"

        async with self._connection() as c:
            rows = await c.fetch(query, *params)
            return [_order_from_row(row) for row in rows]

class MerchantRepository(Repository):

    async def get(self, merchant_id: UUID) -> Optional[Merchant]:
        async with self._connection() as c:
            row = await c.fetchrow(
                "SELECT * FROM merchants WHERE merchant_id = $1", merchant_id
            )
            return _merchant_from_row(row) if row else None

    async def get_by_owner(self, owner_user_id: str) -> Optional[Merchant]:
        async with self._connection() as c:
            row = await c.fetchrow("""
                SELECT * FROM merchants
                WHERE owner_user_id = $1
                ORDER BY created_at
                LIMIT 1
            """, owner_user_id)
            return _merchant_from_row(row) if row else None

    async def exists_owned_by(self, merchant_id: UUID, owner_user_id: str) -> bool:
        async with self._connection() as c:
            return await c.fetchval("""
                SELECT EXISTS (
                    SELECT 1 FROM merchants
                    WHERE merchant_id = $1 AND owner_user_id = $2
                )
            """, merchant_id, owner_user_id)

    async def list_near(self, point: GeoPoint, radius_meters: float,
                        brand: Optional[str], limit: int) -> List[Merchant]:
        """Merchants within the radius, nearest first, optionally carrying a brand"""
        async with self._connection() as c:
            rows = await c.fetch(f"""
                SELECT * FROM (
                    SELECT m.*, {_haversine_sql('m.longitude', 'm.latitude')} AS distance_meters
                    FROM merchants m
                    WHERE $3::text IS NULL OR $3 = ANY(m.brands_accepted)
                ) nearby
                WHERE distance_meters <= $4
                ORDER BY distance_meters ASC
                LIMIT $5
            """, point.longitude, point.latitude, brand, float(radius_meters), limit)
            merchants = []
            for row in rows:
                data = dict(row)
                data.pop("distance_meters", None)
                merchants.append(_merchant_from_row(data))
            return merchants

    async def list_in_bounds(self, min_longitude: float, min_latitude: float,
                             max_longitude: float, max_latitude: float) -> List[Merchant]:
        """Merchants whose location lies inside a bounding box"""
        async with self._connection() as c:
            rows = await c.fetch("""
                SELECT * FROM merchants
                WHERE longitude BETWEEN $1 AND $3
                  AND latitude BETWEEN $2 AND $4
                ORDER BY shop_name
            """, min_longitude, min_latitude, max_longitude, max_latitude)
            return [_merchant_from_row(row) for row in rows]

class RiderRepository(Repository):

    async def exists(self, user_id: str, conn=None) -> bool:
        async with self._connection(conn) as c:
            return await c.fetchval(
                "SELECT EXISTS (SELECT 1 FROM riders WHERE user_id = $1)", user_id
            )

    async def get(self, user_id: str) -> Optional[Rider]:
        async with self._connection() as c:
            row = await c.fetchrow("SELECT * FROM riders WHERE user_id = $1", user_id)
            return _rider_from_row(row) if row else None

    async def create(self, user_id: str, data: Dict[str, Any], conn=None) -> Rider:
        async with self._connection(conn) as c:
            row = await c.fetchrow("""
                INSERT INTO riders (
                    user_id, first_name, last_name, phone_number,
                    vehicle_type, plate_number, license_number
                ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING *
            """,
                user_id, data['first_name'], data['last_name'], data['phone_number'],
                data['vehicle_type'], data.get('plate_number'), data.get('license_number')
            )
            return _rider_from_row(row)

    async def set_online(self, user_id: str, is_online: bool) -> bool:
        async with self._connection() as c:
            result = await c.execute("""
                UPDATE riders
                SET is_online = $2,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = $1
            """, user_id, is_online)
            return result == "UPDATE 1"

    async def set_location(self, user_id: str, point: GeoPoint) -> bool:
        async with self._connection() as c:
            result = await c.execute("""
                UPDATE riders
                SET last_longitude = $2,
                    last_latitude = $3,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = $1
            """, user_id, point.longitude, point.latitude)
            return result == "UPDATE 1"

    async def list_online_near(self, point: GeoPoint, radius_meters: float,
                               limit: int) -> List[Rider]:
        """Online riders within the radius, nearest first"""
        async with self._connection() as c:
            rows = await c.fetch(f"""
                SELECT * FROM (
                    SELECT r.*, {_haversine_sql('r.last_longitude', 'r.last_latitude')}
                        AS distance_meters
                    FROM riders r
                    WHERE r.is_online AND r.last_longitude IS NOT NULL
                ) nearby
                WHERE distance_meters <= $3
                ORDER BY distance_meters ASC
                LIMIT $4
            """, point.longitude, point.latitude, float(radius_meters), limit)
            riders = []
            for row in rows:
                data = dict(row)
                data.pop("distance_meters", None)
                riders.append(_rider_from_row(data))
            return riders

class UserRepository(Repository):

    async def ensure(self, user_id: str, username: Optional[str] = None,
                     first_name: Optional[str] = None,
                     last_name: Optional[str] = None) -> None:
        """Insert or refresh a user record"""
        async with self._connection() as c:
            await c.execute("""
                INSERT INTO users (user_id, username, first_name, last_name)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (user_id)
                DO UPDATE SET
                    username = EXCLUDED.username,
                    first_name = EXCLUDED.first_name,
                    last_name = EXCLUDED.last_name,
                    updated_at = CURRENT_TIMESTAMP
            """, user_id, username, first_name, last_name)

    async def get(self, user_id: str) -> Optional[User]:
        async with self._connection() as c:
            row = await c.fetchrow("SELECT * FROM users WHERE user_id = $1", user_id)
            return User.model_validate(dict(row)) if row else None

    async def set_role(self, user_id: str, role: UserRole, conn=None) -> None:
        async with self._connection(conn) as c:
            await c.execute("""
                INSERT INTO users (user_id, role)
                VALUES ($1, $2)
                ON CONFLICT (user_id)
                DO UPDATE SET
                    role = EXCLUDED.role,
                    updated_at = CURRENT_TIMESTAMP
            """, user_id, role.value)
