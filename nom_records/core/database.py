import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool
from sqlmodel import SQLModel

from nom_records.core.config import Settings
from nom_records.core.exceptions import PoolExhaustedOrTimeout, StorageOperationFailed

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ConnectionPool:
    """
    Bounded set of reusable connections to the relational store.

    Reads go through `query`/`query_one`, single writes through `execute`.
    Multi-statement writes take a dedicated connection with `unit_of_work()`.
    """

    def __init__(
        self,
        database_url: str,
        *,
        max_size: int = 10,
        acquire_timeout: float = 20.0,
        recycle: int = 1800,
        echo: bool = False,
    ):
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=max_size,
            max_overflow=0,
            pool_timeout=acquire_timeout,
            pool_recycle=recycle,
            pool_pre_ping=True,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._key_locks: Dict[str, list] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionPool":
        return cls(
            settings.DATABASE_URL,
            max_size=settings.DB_POOL_SIZE,
            acquire_timeout=settings.DB_POOL_TIMEOUT,
            recycle=settings.DB_POOL_RECYCLE,
            echo=settings.DB_ECHO,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def string_agg_distinct(self, column: str) -> str:
        """SQL for a duplicate-free, order-insensitive join of `column` within a group."""
        if self.dialect == "postgresql":
            return f"STRING_AGG(DISTINCT {column}, ', ')"
        # sqlite cannot combine DISTINCT with a custom separator
        return f"GROUP_CONCAT(DISTINCT {column})"

    async def acquire(self) -> AsyncConnection:
        try:
            return await self.engine.connect()
        except sa_exc.TimeoutError as exc:
            logger.error("Timed out waiting for a database connection")
            raise PoolExhaustedOrTimeout("connection pool exhausted") from exc
        except (sa_exc.OperationalError, sa_exc.InterfaceError, OSError, asyncio.TimeoutError) as exc:
            logger.error("Could not open a database connection: %s", exc)
            raise PoolExhaustedOrTimeout("database unreachable") from exc

    async def release(self, conn: AsyncConnection) -> None:
        # closing an AsyncConnection rolls back anything still open and returns it to the pool
        await conn.close()

    async def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        conn = await self.acquire()
        try:
            result = await conn.execute(text(sql), dict(params or {}))
            return [dict(row) for row in result.mappings().all()]
        except sa_exc.SQLAlchemyError as exc:
            logger.exception("Read query failed")
            raise StorageOperationFailed("read query failed") from exc
        finally:
            await self.release(conn)

    async def query_one(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        rows = await self.query(sql, params)
        return rows[0] if rows else None

    async def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Run one write statement in its own short transaction. Returns the rowcount."""
        conn = await self.acquire()
        try:
            result = await conn.execute(text(sql), dict(params or {}))
            await conn.commit()
            return result.rowcount
        except sa_exc.SQLAlchemyError as exc:
            logger.exception("Write statement failed")
            raise StorageOperationFailed("write statement failed") from exc
        finally:
            await self.release(conn)

    @asynccontextmanager
    async def _serialized(self, lock_key: Optional[str]) -> AsyncIterator[None]:
        """Hold an in-process lock per key; entries go away with their last holder."""
        if lock_key is None:
            yield
            return
        entry = self._key_locks.setdefault(lock_key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._key_locks[lock_key]

    @asynccontextmanager
    async def unit_of_work(self, lock_key: Optional[str] = None) -> AsyncIterator[AsyncConnection]:
        """
        Dedicated connection with an open transaction.

        Commits when the block finishes, rolls back on any exception. Storage
        errors are logged in full and re-raised as StorageOperationFailed;
        other exceptions propagate unchanged after the rollback.

        Units of work sharing a `lock_key` run one at a time until commit:
        within this process through an asyncio lock, and across processes on
        PostgreSQL through a transaction-scoped advisory lock.
        """
        async with self._serialized(lock_key):
            conn = await self.acquire()
            try:
                try:
                    await conn.begin()
                    if lock_key is not None and self.dialect == "postgresql":
                        await conn.execute(
                            text("SELECT pg_advisory_xact_lock(hashtext(:lock_key))"),
                            {"lock_key": lock_key},
                        )
                    yield conn
                    await conn.commit()
                except Exception as exc:
                    await self._rollback(conn)
                    if isinstance(exc, sa_exc.SQLAlchemyError):
                        logger.exception("Unit of work failed, transaction rolled back")
                        raise StorageOperationFailed("unit of work rolled back") from exc
                    raise
            finally:
                await self.release(conn)

    async def _rollback(self, conn: AsyncConnection) -> None:
        try:
            await conn.rollback()
        except sa_exc.SQLAlchemyError:
            logger.exception("Rollback failed")

    async def check_health(self) -> bool:
        """Open a connection, run SELECT 1, release it. Never raises."""
        try:
            conn = await self.acquire()
            try:
                await conn.execute(text("SELECT 1"))
            finally:
                await self.release(conn)
        except Exception as exc:  # noqa: BLE001
            logger.error("Database connection check failed: %s", exc)
            return False
        logger.info("Database connection check succeeded", extra={"dialect": self.dialect})
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Connection pool drained")


async def init_db(pool: ConnectionPool) -> None:
    """Run SQLModel metadata.create_all() using an async connection.
    Note: in production the schema is managed outside this service. This
    helper is useful for local dev / tests when CREATE_TABLES_ON_START is enabled.
    """
    import nom_records.models  # noqa: F401  (register tables on the metadata)

    async with pool.engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_pool(request: Request) -> ConnectionPool:
    """Dependency that returns the application's pool."""
    return request.app.state.pool
