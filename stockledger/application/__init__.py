"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for collaborator contracts
2. Implementing use cases that coordinate core services and stores

Use cases are the only entry point for screens, seed loaders and the CLI.
"""

from stockledger.application.dto.requests import (
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
)
from stockledger.application.use_cases import (
    GetProductStockUseCase,
    ReconcileProductUseCase,
    ReconcileShopUseCase,
    RecomputeStockUseCase,
    RecordMovementUseCase,
    RecordReceiptUseCase,
    RecordSaleUseCase,
)

__all__ = [
    # Request DTOs
    "RecordMovementRequest",
    "RecordSaleRequest",
    "RecordReceiptRequest",
    # Response DTOs
    "RecordMovementResponse",
    "RecordSaleResponse",
    "RecordReceiptResponse",
    "ReconciliationResponse",
    "ShopReconciliationResponse",
    "ProductStockResponse",
    "ErrorResponse",
    # Use Cases
    "RecordMovementUseCase",
    "RecordSaleUseCase",
    "RecordReceiptUseCase",
    "RecomputeStockUseCase",
    "ReconcileProductUseCase",
    "ReconcileShopUseCase",
    "GetProductStockUseCase",
]
