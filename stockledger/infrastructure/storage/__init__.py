"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    SQLiteMovementStore,
    SQLiteProductStore,
    SQLiteStockLedger,
    close_pool,
    get_connection,
    get_pool,
    get_read_transaction,
    get_write_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteProductStore",
    "SQLiteMovementStore",
    "SQLiteStockLedger",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_read_transaction",
    "get_write_transaction",
]
