"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_read_transaction,
    get_write_transaction,
)
from stockledger.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore
from stockledger.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from stockledger.infrastructure.storage.sqlite.stock_ledger import SQLiteStockLedger

# Type aliases for convenience
ProductStore = SQLiteProductStore
MovementStore = SQLiteMovementStore
StockLedger = SQLiteStockLedger

# Singleton instances
_product_store: SQLiteProductStore | None = None
_movement_store: SQLiteMovementStore | None = None
_stock_ledger: SQLiteStockLedger | None = None


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


async def get_movement_store() -> SQLiteMovementStore:
    """Get singleton movement store instance."""
    global _movement_store
    if _movement_store is None:
        _movement_store = SQLiteMovementStore()
    return _movement_store


async def get_stock_ledger() -> SQLiteStockLedger:
    """Get singleton stock ledger instance."""
    global _stock_ledger
    if _stock_ledger is None:
        _stock_ledger = SQLiteStockLedger()
    return _stock_ledger


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_read_transaction",
    "get_write_transaction",
    # Store classes
    "SQLiteProductStore",
    "SQLiteMovementStore",
    "SQLiteStockLedger",
    # Type aliases
    "ProductStore",
    "MovementStore",
    "StockLedger",
    # Factory functions
    "get_product_store",
    "get_movement_store",
    "get_stock_ledger",
]
