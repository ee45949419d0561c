"""Stock movement entity and the movement sign table."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from stockledger.core.exceptions import InvalidMovementTypeError


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class MovementType(str, Enum):
    """Types of stock movements. Direction is carried by the type, never the sign."""

    IN = "IN"
    SALE = "SALE"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    ADJUSTMENT_IN = "ADJUSTMENT_IN"
    ADJUSTMENT_OUT = "ADJUSTMENT_OUT"
    RETURN = "RETURN"
    WASTE = "WASTE"

    @property
    def is_inbound(self) -> bool:
        return self in _INBOUND

    @property
    def sign(self) -> int:
        """+1 for types that add stock, -1 for types that remove it."""
        return 1 if self.is_inbound else -1


_INBOUND = frozenset(
    {
        MovementType.IN,
        MovementType.TRANSFER_IN,
        MovementType.RETURN,
        MovementType.ADJUSTMENT_IN,
    }
)


class StockMovement(BaseModel):
    """Records a single, immutable stock movement in base units."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    product_id: str  # FK -> products.id
    shop_id: str
    movement_type: MovementType
    quantity: float = Field(gt=0)  # always positive, base units

    # Batch & inventory control
    batch_number: str | None = None
    expiry_date: datetime | None = None

    # Traceability
    supplier_id: str | None = None
    customer_id: str | None = None
    reference_id: str | None = None  # e.g. sale id, purchase order id

    notes: str | None = None
    recorded_by: str | None = None

    timestamp: datetime = Field(default_factory=utcnow)  # logical event time
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("timestamp", "created_at", "expiry_date")
    @classmethod
    def normalize_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @property
    def signed_quantity(self) -> float:
        """Quantity with the direction of its movement type applied."""
        return self.movement_type.sign * self.quantity


def parse_movement_type(value: "MovementType | str") -> MovementType:
    """Validate a movement type at the boundary; accepts any letter case."""
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(str(value).strip().upper())
    except ValueError:
        raise InvalidMovementTypeError(
            str(value), [t.value for t in MovementType]
        ) from None
