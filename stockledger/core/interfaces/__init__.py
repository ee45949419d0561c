"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.movement_store import IMovementStore
from stockledger.core.interfaces.product_store import IProductStore
from stockledger.core.interfaces.stock_ledger import IStockLedger

__all__ = [
    "IProductStore",
    "IMovementStore",
    "IStockLedger",
]
