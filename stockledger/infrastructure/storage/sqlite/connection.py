"""
aiosqlite connection pool for the stock ledger.

Writers take the database write lock up front with ``BEGIN IMMEDIATE`` so
movements for the same product are applied one at a time. Readers get a
deferred transaction, which under WAL is a stable snapshot of products and
the movement log. A connection never goes back to the pool with a
transaction still open, even when the task using it was cancelled.
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager, contextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import PersistenceError

logger = get_logger(__name__)

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors from the block as PersistenceError."""
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("storage_operation_failed", operation=operation, error=str(e))
        raise PersistenceError(operation, str(e)) from e


class ConnectionPool:
    """Fixed set of aiosqlite connections handed out one task at a time."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                self._idle.put_nowait(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in PRAGMAS:
            await conn.execute(pragma)
        # Writers wait this long for BEGIN IMMEDIATE instead of failing
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it is cleaned and returned on exit."""
        if not self._initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            await self._release(conn)

    async def _release(self, conn: aiosqlite.Connection) -> None:
        try:
            if conn.in_transaction:
                # Left open by a cancelled or failed writer; it would hold the lock
                logger.warning("stale_transaction_rolled_back", db_path=str(self.db_path))
                await asyncio.shield(conn.rollback())
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def _transaction(self, begin: str) -> AsyncIterator[aiosqlite.Connection]:
        async with self.acquire() as conn:
            try:
                await conn.execute(begin)
                yield conn
                await asyncio.shield(conn.commit())
            except BaseException:
                # Queued behind BEGIN on the driver thread, so it always undoes it
                await asyncio.shield(conn.rollback())
                raise

    def write(self) -> AbstractAsyncContextManager[aiosqlite.Connection]:
        """Transaction holding the write lock from its first statement."""
        return self._transaction("BEGIN IMMEDIATE")

    def read(self) -> AbstractAsyncContextManager[aiosqlite.Connection]:
        """Snapshot transaction for reads that must agree with each other."""
        return self._transaction("BEGIN DEFERRED")

    async def close(self) -> None:
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed")


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Autocommit connection for single-statement reads."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_write_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.write() as conn:
        yield conn


@asynccontextmanager
async def get_read_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.read() as conn:
        yield conn
