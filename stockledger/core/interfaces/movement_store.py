"""Abstract interface for stock movement queries."""

from abc import ABC, abstractmethod

from stockledger.core.entities.stock_movement import StockMovement


class IMovementStore(ABC):
    """Read side of the append-only movement log.

    Movements are appended only through :meth:`IStockLedger.apply_movement`.
    """

    @abstractmethod
    async def list_for_product(self, product_id: str) -> list[StockMovement]:
        """All movements for a product, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_movements(
        self, product_id: str, limit: int = 100, offset: int = 0
    ) -> list[StockMovement]:
        """Movements for a product, newest first."""
        pass

    @abstractmethod
    async def count_for_product(self, product_id: str) -> int:
        """Number of movements recorded for a product."""
        pass
