"""
SQLite stock ledger: the single writer of movements and cached stock.

Every write runs in its own ``BEGIN IMMEDIATE`` transaction, which serializes
writers on the database file. The signed delta is applied inside SQL, so there
is no read-modify-write window on ``stock_quantity`` in Python.
"""

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.ledger import LedgerSnapshot, StockChange
from stockledger.core.entities.stock_movement import StockMovement, utcnow
from stockledger.core.exceptions import ProductNotFoundError, ValidationError
from stockledger.core.interfaces.stock_ledger import IStockLedger
from stockledger.infrastructure.storage.sqlite.connection import (
    get_read_transaction,
    get_write_transaction,
    storage_errors,
)
from stockledger.infrastructure.storage.sqlite.movement_store import (
    count_movements,
    fetch_movements,
)
from stockledger.infrastructure.storage.sqlite.product_store import (
    row_to_product,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteStockLedger(IStockLedger):
    """Unit of work over the products and stock_movements tables."""

    async def apply_movement(self, movement: StockMovement) -> StockChange:
        """Insert the movement and apply its delta, floored at zero, atomically."""
        with storage_errors("apply_movement"):
            async with get_write_transaction() as conn:
                previous = await self._current_stock(conn, movement.product_id)

                await conn.execute(
                    """
                    INSERT INTO stock_movements (
                        id, product_id, shop_id, movement_type, quantity,
                        batch_number, expiry_date, supplier_id, customer_id,
                        reference_id, notes, recorded_by, timestamp, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        movement.id,
                        movement.product_id,
                        movement.shop_id,
                        movement.movement_type.value,
                        movement.quantity,
                        movement.batch_number,
                        to_db_timestamp(movement.expiry_date) if movement.expiry_date else None,
                        movement.supplier_id,
                        movement.customer_id,
                        movement.reference_id,
                        movement.notes,
                        movement.recorded_by,
                        to_db_timestamp(movement.timestamp),
                        to_db_timestamp(movement.created_at),
                    ),
                )
                await conn.execute(
                    """
                    UPDATE products SET
                        stock_quantity = MAX(0.0, stock_quantity + ?),
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        movement.signed_quantity,
                        to_db_timestamp(utcnow()),
                        movement.product_id,
                    ),
                )
                new_stock = await self._current_stock(conn, movement.product_id)

        logger.info(
            "stock_movement_recorded",
            movement_id=movement.id,
            product_id=movement.product_id,
            type=movement.movement_type.value,
            qty=movement.quantity,
            new_stock=new_stock,
        )
        return StockChange(movement=movement, previous_stock=previous, new_stock=new_stock)

    async def read_snapshot(self, product_id: str) -> LedgerSnapshot:
        """Read the product row and its full log inside one read transaction."""
        with storage_errors("read_snapshot"):
            async with get_read_transaction() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE id = ?", (product_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise ProductNotFoundError(product_id)
                movements = await fetch_movements(conn, product_id)

        return LedgerSnapshot(product=row_to_product(row), movements=movements)

    async def overwrite_stock(
        self, product_id: str, quantity: float, expected_movement_count: int
    ) -> bool:
        """Compare-and-set the cached stock against the log length."""
        if quantity < 0:
            raise ValidationError("stock_quantity", "Stock cannot be negative", quantity)

        with storage_errors("overwrite_stock"):
            async with get_write_transaction() as conn:
                count = await count_movements(conn, product_id)
                if count != expected_movement_count:
                    logger.info(
                        "stock_overwrite_stale",
                        product_id=product_id,
                        expected_movements=expected_movement_count,
                        actual_movements=count,
                    )
                    return False

                cursor = await conn.execute(
                    "UPDATE products SET stock_quantity = ?, updated_at = ? WHERE id = ?",
                    (quantity, to_db_timestamp(utcnow()), product_id),
                )
                if cursor.rowcount == 0:
                    raise ProductNotFoundError(product_id)

        logger.info("stock_overwritten", product_id=product_id, stock_quantity=quantity)
        return True

    @staticmethod
    async def _current_stock(conn: aiosqlite.Connection, product_id: str) -> float:
        cursor = await conn.execute(
            "SELECT stock_quantity FROM products WHERE id = ?", (product_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise ProductNotFoundError(product_id)
        return float(row["stock_quantity"])
