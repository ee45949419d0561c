"""SQLite implementation of product storage."""

from datetime import datetime

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.product import Product, UnitType
from stockledger.core.entities.stock_movement import as_utc, utcnow
from stockledger.core.interfaces.product_store import IProductStore
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_write_transaction,
    storage_errors,
)

logger = get_logger(__name__)


def to_db_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO string, so lexical order is chronological."""
    return as_utc(value).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(value))
    except (ValueError, TypeError):
        return None


class SQLiteProductStore(IProductStore):
    """SQLite implementation of product storage."""

    async def create_product(self, product: Product) -> Product:
        """Insert a product and return the stored copy with fresh timestamps."""
        now = utcnow()
        product = product.model_copy(update={"created_at": now, "updated_at": now})
        with storage_errors("create_product"):
            async with get_write_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO products (
                        id, shop_id, name, sku, barcode, category,
                        unit_type, base_unit, purchase_unit, purchase_unit_size,
                        selling_unit, unit_conversion_factor,
                        cost_price_per_base, selling_price_per_base, wholesale_price_per_base,
                        low_stock_threshold, is_active, is_perishable,
                        stock_quantity, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        product.id,
                        product.shop_id,
                        product.name,
                        product.sku,
                        product.barcode,
                        product.category,
                        product.unit_type.value,
                        product.base_unit,
                        product.purchase_unit,
                        product.purchase_unit_size,
                        product.selling_unit,
                        product.unit_conversion_factor,
                        product.cost_price_per_base,
                        product.selling_price_per_base,
                        product.wholesale_price_per_base,
                        product.low_stock_threshold,
                        int(product.is_active),
                        int(product.is_perishable),
                        product.stock_quantity,
                        to_db_timestamp(product.created_at),
                        to_db_timestamp(product.updated_at),
                    ),
                )

        logger.info(
            "product_created",
            product_id=product.id,
            shop_id=product.shop_id,
            stock_quantity=product.stock_quantity,
        )
        return product

    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        with storage_errors("get_product"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE id = ?", (product_id,)
                )
                row = await cursor.fetchone()
        return row_to_product(row) if row is not None else None

    async def list_products(
        self,
        shop_id: str,
        include_inactive: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Product]:
        """List a shop's products with pagination."""
        query = "SELECT * FROM products WHERE shop_id = ?"
        if not include_inactive:
            query += " AND is_active = 1"
        query += " ORDER BY name, id LIMIT ? OFFSET ?"
        with storage_errors("list_products"):
            async with get_connection() as conn:
                cursor = await conn.execute(query, (shop_id, limit, offset))
                rows = await cursor.fetchall()
        return [row_to_product(row) for row in rows]

    async def list_low_stock(
        self, shop_id: str, limit: int = 100, offset: int = 0
    ) -> list[Product]:
        """List active products with some stock left, at or below their threshold."""
        with storage_errors("list_low_stock"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM products
                    WHERE shop_id = ?
                      AND is_active = 1
                      AND stock_quantity > 0
                      AND stock_quantity <= low_stock_threshold
                    ORDER BY stock_quantity ASC, name
                    LIMIT ? OFFSET ?
                    """,
                    (shop_id, limit, offset),
                )
                rows = await cursor.fetchall()
        return [row_to_product(row) for row in rows]


def row_to_product(row: aiosqlite.Row) -> Product:
    """Convert a database row to a Product entity."""
    created_at = from_db_timestamp(row["created_at"]) or utcnow()
    updated_at = from_db_timestamp(row["updated_at"]) or created_at

    return Product(
        id=row["id"],
        shop_id=row["shop_id"],
        name=row["name"],
        sku=row["sku"] or "",
        barcode=row["barcode"] or "",
        category=row["category"] or "Uncategorized",
        unit_type=UnitType(row["unit_type"]),
        base_unit=row["base_unit"],
        purchase_unit=row["purchase_unit"] or row["base_unit"],
        purchase_unit_size=row["purchase_unit_size"],
        selling_unit=row["selling_unit"] or row["base_unit"],
        unit_conversion_factor=row["unit_conversion_factor"],
        cost_price_per_base=float(row["cost_price_per_base"]),
        selling_price_per_base=float(row["selling_price_per_base"]),
        wholesale_price_per_base=float(row["wholesale_price_per_base"] or 0.0),
        low_stock_threshold=float(row["low_stock_threshold"]),
        is_active=bool(row["is_active"]),
        is_perishable=bool(row["is_perishable"]),
        stock_quantity=float(row["stock_quantity"]),
        created_at=created_at,
        updated_at=updated_at,
    )
