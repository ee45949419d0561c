"""Core domain entities."""

from stockledger.core.entities.ledger import LedgerSnapshot, StockChange
from stockledger.core.entities.product import Product, StockStatus, UnitType
from stockledger.core.entities.stock_movement import (
    MovementType,
    StockMovement,
    parse_movement_type,
)

__all__ = [
    # Product
    "Product",
    "StockStatus",
    "UnitType",
    # Movements
    "MovementType",
    "StockMovement",
    "parse_movement_type",
    # Ledger
    "LedgerSnapshot",
    "StockChange",
]
