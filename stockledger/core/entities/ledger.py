"""Value objects exchanged with the stock ledger unit of work."""

from dataclasses import dataclass, field

from stockledger.core.entities.product import Product
from stockledger.core.entities.stock_movement import StockMovement


@dataclass
class StockChange:
    """Outcome of applying one movement to the cached stock counter."""

    movement: StockMovement
    previous_stock: float
    new_stock: float

    @property
    def requested_delta(self) -> float:
        return self.movement.signed_quantity

    @property
    def applied_delta(self) -> float:
        return self.new_stock - self.previous_stock

    @property
    def clamped(self) -> bool:
        """True when the zero floor absorbed part of an outbound movement."""
        return self.previous_stock + self.requested_delta < 0


@dataclass
class LedgerSnapshot:
    """A product and all of its movements, read at one point in time."""

    product: Product
    movements: list[StockMovement] = field(default_factory=list)

    @property
    def movement_count(self) -> int:
        return len(self.movements)
