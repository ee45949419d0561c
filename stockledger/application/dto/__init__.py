"""Data Transfer Objects for the application layer.

Request DTOs: Validate and parse incoming requests.
Response DTOs: Structure and serialize results.
"""

from stockledger.application.dto.requests import (
    MovementDetails,
    RecordMovementRequest,
    RecordReceiptRequest,
    RecordSaleRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    ProductStockResponse,
    ReconciliationResponse,
    RecordMovementResponse,
    RecordReceiptResponse,
    RecordSaleResponse,
    ShopReconciliationResponse,
    StockMovementResponse,
    StockValuationResponse,
)

__all__ = [
    # Requests
    "MovementDetails",
    "RecordMovementRequest",
    "RecordSaleRequest",
    "RecordReceiptRequest",
    # Responses
    "StockMovementResponse",
    "RecordMovementResponse",
    "RecordSaleResponse",
    "RecordReceiptResponse",
    "ReconciliationResponse",
    "ShopReconciliationResponse",
    "StockValuationResponse",
    "ProductStockResponse",
    "ErrorResponse",
]
