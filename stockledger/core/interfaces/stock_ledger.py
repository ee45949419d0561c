"""Abstract interface for the stock ledger unit of work."""

from abc import ABC, abstractmethod

from stockledger.core.entities.ledger import LedgerSnapshot, StockChange
from stockledger.core.entities.stock_movement import StockMovement


class IStockLedger(ABC):
    """
    Atomic writer of the movement log and the cached stock counter.

    This is the only component allowed to change ``Product.stock_quantity``.
    """

    @abstractmethod
    async def apply_movement(self, movement: StockMovement) -> StockChange:
        """
        Append a movement and apply its signed delta, floored at zero.

        Both happen in one transaction. Raises ProductNotFoundError if the
        product does not exist and PersistenceError if the write fails; in
        both cases nothing is applied.
        """
        pass

    @abstractmethod
    async def read_snapshot(self, product_id: str) -> LedgerSnapshot:
        """Read a product and all of its movements consistently.

        Raises ProductNotFoundError for an unknown product.
        """
        pass

    @abstractmethod
    async def overwrite_stock(
        self, product_id: str, quantity: float, expected_movement_count: int
    ) -> bool:
        """
        Set the cached stock if the log still has ``expected_movement_count`` rows.

        Returns False (and writes nothing) when a movement was appended since
        the snapshot the caller computed ``quantity`` from.
        """
        pass
