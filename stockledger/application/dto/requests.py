"""Request DTOs for ledger use cases.

Pydantic v2 models. Quantity sign and movement type are checked by the use
cases, which raise the ledger's own error types; the DTOs only enforce shape.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class MovementDetails(BaseModel):
    """Optional traceability fields shared by every movement request."""

    batch_number: str | None = Field(default=None, description="Supplier batch / lot")
    expiry_date: datetime | None = Field(default=None, description="Batch expiry")
    reference_id: str | None = Field(
        default=None, description="Sale id, purchase order id, ..."
    )
    notes: str | None = Field(default=None, description="Free-text notes")
    recorded_by: str | None = Field(default=None, description="User who recorded it")
    timestamp: datetime | None = Field(
        default=None,
        description="Logical event time (defaults to now)",
    )


class RecordMovementRequest(MovementDetails):
    """Request to record a movement already expressed in base units."""

    product_id: str = Field(..., description="Product ID")
    shop_id: str = Field(..., description="Shop ID")
    quantity: float = Field(..., description="Quantity in base units, must be > 0")
    movement_type: str = Field(..., description="IN, SALE, TRANSFER_IN, ...")
    supplier_id: str | None = Field(default=None, description="Supplier contact ID")
    customer_id: str | None = Field(default=None, description="Customer contact ID")


class RecordSaleRequest(MovementDetails):
    """Request to record a sale expressed in selling units."""

    product_id: str = Field(..., description="Product ID")
    shop_id: str = Field(..., description="Shop ID")
    quantity_in_selling_units: float = Field(..., description="Quantity sold")
    customer_id: str | None = Field(default=None, description="Customer contact ID")


class RecordReceiptRequest(MovementDetails):
    """Request to record a receipt expressed in purchase units."""

    product_id: str = Field(..., description="Product ID")
    shop_id: str = Field(..., description="Shop ID")
    quantity_in_purchase_units: float = Field(..., description="Quantity received")
    supplier_id: str | None = Field(default=None, description="Supplier contact ID")
