"""SQLite implementation of the movement log read side."""

import aiosqlite

from stockledger.core.entities.stock_movement import MovementType, StockMovement, utcnow
from stockledger.core.interfaces.movement_store import IMovementStore
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    storage_errors,
)
from stockledger.infrastructure.storage.sqlite.product_store import from_db_timestamp

CHRONOLOGICAL = "ORDER BY timestamp ASC, created_at ASC, rowid ASC"


class SQLiteMovementStore(IMovementStore):
    """SQLite implementation of stock movement queries."""

    async def list_for_product(self, product_id: str) -> list[StockMovement]:
        """All movements for a product, oldest first."""
        with storage_errors("list_movements"):
            async with get_connection() as conn:
                return await fetch_movements(conn, product_id)

    async def get_recent_movements(
        self, product_id: str, limit: int = 100, offset: int = 0
    ) -> list[StockMovement]:
        """Movements for a product, newest first."""
        with storage_errors("get_recent_movements"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM stock_movements
                    WHERE product_id = ?
                    ORDER BY timestamp DESC, created_at DESC, rowid DESC
                    LIMIT ? OFFSET ?
                    """,
                    (product_id, limit, offset),
                )
                rows = await cursor.fetchall()
        return [row_to_movement(row) for row in rows]

    async def count_for_product(self, product_id: str) -> int:
        with storage_errors("count_movements"):
            async with get_connection() as conn:
                return await count_movements(conn, product_id)


async def fetch_movements(conn: aiosqlite.Connection, product_id: str) -> list[StockMovement]:
    cursor = await conn.execute(
        f"SELECT * FROM stock_movements WHERE product_id = ? {CHRONOLOGICAL}",
        (product_id,),
    )
    rows = await cursor.fetchall()
    return [row_to_movement(row) for row in rows]


async def count_movements(conn: aiosqlite.Connection, product_id: str) -> int:
    cursor = await conn.execute(
        "SELECT COUNT(*) FROM stock_movements WHERE product_id = ?", (product_id,)
    )
    row = await cursor.fetchone()
    return int(row[0])


def row_to_movement(row: aiosqlite.Row) -> StockMovement:
    """Convert a database row to a StockMovement entity."""
    created_at = from_db_timestamp(row["created_at"]) or utcnow()
    timestamp = from_db_timestamp(row["timestamp"]) or created_at

    return StockMovement(
        id=row["id"],
        product_id=row["product_id"],
        shop_id=row["shop_id"],
        movement_type=MovementType(row["movement_type"]),
        quantity=float(row["quantity"]),
        batch_number=row["batch_number"],
        expiry_date=from_db_timestamp(row["expiry_date"]),
        supplier_id=row["supplier_id"],
        customer_id=row["customer_id"],
        reference_id=row["reference_id"],
        notes=row["notes"],
        recorded_by=row["recorded_by"],
        timestamp=timestamp,
        created_at=created_at,
    )
