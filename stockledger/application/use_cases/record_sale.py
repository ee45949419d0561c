"""Record Sale Use Case: selling units in, SALE movement in base units out."""

import time
from dataclasses import dataclass

from stockledger.application.dto.requests import RecordMovementRequest, RecordSaleRequest
from stockledger.application.dto.responses import RecordSaleResponse
from stockledger.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
    movement_to_response,
    validate_quantity,
)
from stockledger.config import get_logger
from stockledger.core.entities.stock_movement import MovementType
from stockledger.core.exceptions import ProductNotFoundError
from stockledger.core.interfaces.product_store import IProductStore
from stockledger.core.interfaces.stock_ledger import IStockLedger
from stockledger.core.services.unit_conversion import convert_selling_to_base
from stockledger.core.services.valuation import selling_price

logger = get_logger(__name__)


@dataclass
class RecordSaleResult:
    """Result of recording a sale."""

    recorded: RecordMovementResult
    quantity_in_selling_units: float
    sale_value: float  # at the product's current selling price


class RecordSaleUseCase:
    """Record a customer sale given in the product's selling unit."""

    def __init__(
        self,
        product_store: IProductStore | None = None,
        stock_ledger: IStockLedger | None = None,
    ):
        self._product_store = product_store
        self._record_movement = RecordMovementUseCase(stock_ledger=stock_ledger)

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from stockledger.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, request: RecordSaleRequest) -> RecordSaleResult:
        """Execute record sale use case."""
        quantity = validate_quantity(request.quantity_in_selling_units)

        store = await self._get_product_store()
        product = await store.get_product(request.product_id)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        quantity_in_base = convert_selling_to_base(quantity, product)
        logger.info(
            "record_sale_started",
            product_id=product.id,
            selling_qty=quantity,
            selling_unit=product.selling_unit,
            base_qty=quantity_in_base,
        )

        recorded = await self._record_movement.execute(
            RecordMovementRequest(
                product_id=request.product_id,
                shop_id=request.shop_id,
                quantity=quantity_in_base,
                movement_type=MovementType.SALE.value,
                customer_id=request.customer_id,
                batch_number=request.batch_number,
                expiry_date=request.expiry_date,
                reference_id=request.reference_id or f"sale-{int(time.time() * 1000)}",
                notes=request.notes,
                recorded_by=request.recorded_by,
                timestamp=request.timestamp,
            )
        )

        return RecordSaleResult(
            recorded=recorded,
            quantity_in_selling_units=quantity,
            sale_value=selling_price(product, quantity),
        )

    def to_response(self, result: RecordSaleResult) -> RecordSaleResponse:
        """Convert result to response DTO."""
        recorded = result.recorded
        return RecordSaleResponse(
            movement=movement_to_response(recorded.movement),
            previous_stock=recorded.previous_stock,
            new_stock=recorded.new_stock,
            requested_delta=recorded.requested_delta,
            applied_delta=recorded.applied_delta,
            clamped=recorded.clamped,
            quantity_in_selling_units=result.quantity_in_selling_units,
            sale_value=result.sale_value,
        )
