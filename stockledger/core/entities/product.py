"""Product entity: unit metadata, prices and the cached stock projection."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from stockledger.core.entities.stock_movement import utcnow


class UnitType(str, Enum):
    """Families of units a product can be measured in."""

    PIECE = "piece"
    WEIGHT = "weight"
    VOLUME = "volume"
    LENGTH = "length"
    PACK = "pack"


class StockStatus(str, Enum):
    """Coarse stock level classification."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class Product(BaseModel):
    """
    A sellable product owned by a shop.

    ``stock_quantity`` is always in base units and is a projection of the
    product's movement log, not the source of truth. Conversion factors are
    not validated here: bad factors are a data-entry defect reported when a
    conversion is attempted.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    shop_id: str
    name: str
    sku: str = ""
    barcode: str = ""
    category: str = "Uncategorized"

    # Unit system
    unit_type: UnitType = UnitType.PIECE
    base_unit: str = "piece"
    purchase_unit: str = "piece"
    purchase_unit_size: float | None = 1.0  # base units per purchase unit
    selling_unit: str = "piece"
    unit_conversion_factor: float | None = 1.0  # base units per selling unit

    # Pricing (per base unit)
    cost_price_per_base: float = 0.0
    selling_price_per_base: float = 0.0
    wholesale_price_per_base: float = 0.0

    # Inventory control
    low_stock_threshold: float = 10.0
    is_active: bool = True
    is_perishable: bool = False

    stock_quantity: float = Field(default=0.0, ge=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.sku})" if self.sku else self.name

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock_quantity == 0

    @property
    def is_low_stock(self) -> bool:
        """Some stock left, but at or below the threshold."""
        return 0 < self.stock_quantity <= self.low_stock_threshold

    @property
    def is_critical(self) -> bool:
        """Out of stock and perishable."""
        return self.is_out_of_stock and self.is_perishable

    @property
    def stock_status(self) -> StockStatus:
        if self.is_out_of_stock:
            return StockStatus.OUT_OF_STOCK
        if self.is_low_stock:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK
