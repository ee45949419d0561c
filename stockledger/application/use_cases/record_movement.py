"""Record Movement Use Case: append a movement and move the stock counter."""

import math
from dataclasses import dataclass

from stockledger.application.dto.requests import RecordMovementRequest
from stockledger.application.dto.responses import (
    RecordMovementResponse,
    StockMovementResponse,
)
from stockledger.config import get_logger, ledger_context
from stockledger.core.entities.ledger import StockChange
from stockledger.core.entities.stock_movement import (
    StockMovement,
    parse_movement_type,
    utcnow,
)
from stockledger.core.exceptions import NonPositiveQuantityError, ValidationError
from stockledger.core.interfaces.stock_ledger import IStockLedger

logger = get_logger(__name__)


def validate_quantity(quantity: float, field: str = "quantity") -> float:
    """Reject zero, negative, NaN and infinite quantities before any write."""
    if math.isnan(quantity) or quantity <= 0:
        raise NonPositiveQuantityError(quantity)
    if math.isinf(quantity):
        raise ValidationError(field, "Quantity must be finite", quantity)
    return float(quantity)


@dataclass
class RecordMovementResult:
    """Result of recording a movement."""

    movement: StockMovement
    previous_stock: float
    new_stock: float
    requested_delta: float
    applied_delta: float
    clamped: bool = False  # True if the zero floor absorbed part of the delta

    @classmethod
    def from_change(cls, change: StockChange) -> "RecordMovementResult":
        return cls(
            movement=change.movement,
            previous_stock=change.previous_stock,
            new_stock=change.new_stock,
            requested_delta=change.requested_delta,
            applied_delta=change.applied_delta,
            clamped=change.clamped,
        )


def movement_to_response(movement: StockMovement) -> StockMovementResponse:
    return StockMovementResponse(
        id=movement.id,
        product_id=movement.product_id,
        shop_id=movement.shop_id,
        movement_type=movement.movement_type.value,
        quantity=movement.quantity,
        batch_number=movement.batch_number,
        expiry_date=movement.expiry_date,
        supplier_id=movement.supplier_id,
        customer_id=movement.customer_id,
        reference_id=movement.reference_id,
        notes=movement.notes,
        recorded_by=movement.recorded_by,
        timestamp=movement.timestamp,
        created_at=movement.created_at,
    )


class RecordMovementUseCase:
    """Record one stock movement in base units, atomically with its stock delta."""

    def __init__(self, stock_ledger: IStockLedger | None = None):
        self._stock_ledger = stock_ledger

    async def _get_stock_ledger(self) -> IStockLedger:
        if self._stock_ledger is None:
            from stockledger.infrastructure.storage.sqlite import get_stock_ledger

            self._stock_ledger = await get_stock_ledger()
        return self._stock_ledger

    async def execute(self, request: RecordMovementRequest) -> RecordMovementResult:
        """Execute record movement use case."""
        quantity = validate_quantity(request.quantity)
        movement_type = parse_movement_type(request.movement_type)

        logger.info(
            "record_movement_started",
            product_id=request.product_id,
            type=movement_type.value,
            quantity=quantity,
        )

        movement = StockMovement(
            product_id=request.product_id,
            shop_id=request.shop_id,
            movement_type=movement_type,
            quantity=quantity,
            batch_number=request.batch_number,
            expiry_date=request.expiry_date,
            supplier_id=request.supplier_id,
            customer_id=request.customer_id,
            reference_id=request.reference_id,
            notes=request.notes,
            recorded_by=request.recorded_by,
            timestamp=request.timestamp or utcnow(),
            created_at=utcnow(),
        )

        ledger = await self._get_stock_ledger()
        with ledger_context(
            product_id=movement.product_id,
            shop_id=movement.shop_id,
            movement_id=movement.id,
        ):
            change = await ledger.apply_movement(movement)

            if change.clamped:
                # Saturation, not an error: reconciliation restores the log value
                logger.warning(
                    "stock_clamped_at_zero",
                    product_id=movement.product_id,
                    movement_id=movement.id,
                    previous_stock=change.previous_stock,
                    requested_delta=change.requested_delta,
                    applied_delta=change.applied_delta,
                )

            logger.info(
                "record_movement_complete",
                product_id=movement.product_id,
                movement_id=movement.id,
                new_stock=change.new_stock,
            )

        return RecordMovementResult.from_change(change)

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        """Convert result to response DTO."""
        return RecordMovementResponse(
            movement=movement_to_response(result.movement),
            previous_stock=result.previous_stock,
            new_stock=result.new_stock,
            requested_delta=result.requested_delta,
            applied_delta=result.applied_delta,
            clamped=result.clamped,
        )
