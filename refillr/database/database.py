# refillr/database/database.py
import asyncpg
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from ..config import Config
from .repositories import (
    MerchantRepository,
    OrderRepository,
    RiderRepository,
    UserRepository,
)

class Database:
    """Owns the connection pool and the repositories built on it"""

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

        self.orders = OrderRepository(self)
        self.merchants = MerchantRepository(self)
        self.riders = RiderRepository(self)
        self.users = UserRepository(self)

    async def connect(self):
        """Open the pool and bring the schema up to date"""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=Config.DB_POOL_MIN_SIZE,
                max_size=Config.DB_POOL_MAX_SIZE,
                init=self._init_connection
            )

            await self._run_migrations()

            self.logger.info("Connected to database")
        except Exception as e:
            self.logger.error(f"Database connection failed: {e}")
            raise

    async def close(self):
        """Close the pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("Database connection closed")

    @asynccontextmanager
    async def transaction(self):
        """Yield a connection inside a transaction; any exception rolls it back"""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    @staticmethod
    async def _init_connection(conn):
        await conn.set_type_codec(
            'jsonb',
            encoder=json.dumps,
            decoder=json.loads,
            schema='pg_catalog'
        )

    async def _run_migrations(self):
        """Apply, in file order, every SQL file not yet recorded as applied"""
        migrations_dir = Path(__file__).parent / "migrations"

        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS schema_migrations (
                        filename VARCHAR(255) PRIMARY KEY,
                        applied_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                applied = {
                    row['filename']
                    for row in await conn.fetch("SELECT filename FROM schema_migrations")
                }

                for path in sorted(migrations_dir.glob("*.sql")):
                    if path.name in applied:
                        continue
                    async with conn.transaction():
                        await conn.execute(path.read_text())
                        await conn.execute(
                            "INSERT INTO schema_migrations (filename) VALUES ($1)", path.name
                        )
                    self.logger.info(f"Applied migration {path.name}")

        except Exception as e:
            self.logger.error(f"Migration failed: {e}")
            raise
