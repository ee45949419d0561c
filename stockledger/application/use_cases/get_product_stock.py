"""Get Product Stock Use Case: current stock, status, valuation and history."""

from dataclasses import dataclass, field

from stockledger.application.dto.responses import (
    ProductStockResponse,
    StockValuationResponse,
)
from stockledger.application.use_cases.record_movement import movement_to_response
from stockledger.config import get_logger
from stockledger.core.entities.product import Product
from stockledger.core.entities.stock_movement import StockMovement
from stockledger.core.exceptions import InvalidUnitConfigurationError, ProductNotFoundError
from stockledger.core.interfaces.movement_store import IMovementStore
from stockledger.core.interfaces.product_store import IProductStore
from stockledger.core.services.valuation import StockValuation, value_stock

logger = get_logger(__name__)


@dataclass
class ProductStockView:
    """A product's cached stock with derived figures."""

    product: Product
    valuation: StockValuation | None  # None when unit factors are unusable
    recent_movements: list[StockMovement] = field(default_factory=list)


class GetProductStockUseCase:
    """Read the cached stock of a product together with its valuation."""

    def __init__(
        self,
        product_store: IProductStore | None = None,
        movement_store: IMovementStore | None = None,
    ):
        self._product_store = product_store
        self._movement_store = movement_store

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from stockledger.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from stockledger.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    async def execute(self, product_id: str, history: int = 10) -> ProductStockView:
        products = await self._get_product_store()
        product = await products.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        try:
            valuation = value_stock(product)
        except InvalidUnitConfigurationError as e:
            # Stock is still readable; only the unit-derived figures are not
            logger.warning("valuation_unavailable", product_id=product_id, error=e.message)
            valuation = None

        recent: list[StockMovement] = []
        if history > 0:
            movements = await self._get_movement_store()
            recent = await movements.get_recent_movements(product_id, limit=history)

        return ProductStockView(product=product, valuation=valuation, recent_movements=recent)

    def to_response(self, view: ProductStockView) -> ProductStockResponse:
        """Convert view to response DTO."""
        product = view.product
        valuation = None
        if view.valuation is not None:
            valuation = StockValuationResponse(
                stock_in_selling_units=view.valuation.stock_in_selling_units,
                stock_in_purchase_units=view.valuation.stock_in_purchase_units,
                stock_value=view.valuation.stock_value,
                potential_revenue=view.valuation.potential_revenue,
                potential_profit=view.valuation.potential_profit,
                profit_margin=view.valuation.profit_margin,
            )
        return ProductStockResponse(
            product_id=product.id,
            shop_id=product.shop_id,
            name=product.name,
            base_unit=product.base_unit,
            selling_unit=product.selling_unit,
            purchase_unit=product.purchase_unit,
            stock_quantity=product.stock_quantity,
            stock_status=product.stock_status.value,
            is_low_stock=product.is_low_stock,
            is_critical=product.is_critical,
            valuation=valuation,
            recent_movements=[movement_to_response(m) for m in view.recent_movements],
        )
