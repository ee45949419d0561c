"""Response DTOs for ledger use cases.

Serializable views handed back to collaborators (screens, CLI).
"""

from datetime import datetime

from pydantic import BaseModel


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: str
    product_id: str
    shop_id: str
    movement_type: str
    quantity: float
    batch_number: str | None = None
    expiry_date: datetime | None = None
    supplier_id: str | None = None
    customer_id: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    timestamp: datetime
    created_at: datetime


class RecordMovementResponse(BaseModel):
    """Response for a recorded movement."""

    movement: StockMovementResponse
    previous_stock: float
    new_stock: float
    requested_delta: float
    applied_delta: float
    clamped: bool = False


class RecordSaleResponse(RecordMovementResponse):
    """Response for a recorded sale."""

    quantity_in_selling_units: float
    sale_value: float


class RecordReceiptResponse(RecordMovementResponse):
    """Response for a recorded receipt."""

    quantity_in_purchase_units: float
    purchase_cost: float


class ReconciliationResponse(BaseModel):
    """Result of reconciling one product."""

    product_id: str
    cached_stock: float
    recomputed_stock: float
    discrepancy: float
    corrected: bool


class ShopReconciliationResponse(BaseModel):
    """Result of reconciling every product of a shop."""

    shop_id: str
    checked: int
    corrected: list[ReconciliationResponse]


class StockValuationResponse(BaseModel):
    """Valuation of a product's current stock."""

    stock_in_selling_units: float
    stock_in_purchase_units: float
    stock_value: float
    potential_revenue: float
    potential_profit: float
    profit_margin: float


class ProductStockResponse(BaseModel):
    """Current stock, status and valuation of a product."""

    product_id: str
    shop_id: str
    name: str
    base_unit: str
    selling_unit: str
    purchase_unit: str
    stock_quantity: float
    stock_status: str
    is_low_stock: bool
    is_critical: bool
    valuation: StockValuationResponse | None = None
    recent_movements: list[StockMovementResponse] = []


class ErrorResponse(BaseModel):
    """Error payload built from a StockLedgerError."""

    error: str
    message: str
    details: dict = {}
