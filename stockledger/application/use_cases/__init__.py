"""Application use cases."""

from stockledger.application.use_cases.get_product_stock import (
    GetProductStockUseCase,
    ProductStockView,
)
from stockledger.application.use_cases.reconcile_stock import (
    ReconcileProductUseCase,
    ReconcileShopUseCase,
    ReconciliationResult,
    RecomputeStockUseCase,
    ShopReconciliationReport,
)
from stockledger.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from stockledger.application.use_cases.record_receipt import (
    RecordReceiptResult,
    RecordReceiptUseCase,
)
from stockledger.application.use_cases.record_sale import RecordSaleResult, RecordSaleUseCase

__all__ = [
    "RecordMovementUseCase",
    "RecordMovementResult",
    "RecordSaleUseCase",
    "RecordSaleResult",
    "RecordReceiptUseCase",
    "RecordReceiptResult",
    "RecomputeStockUseCase",
    "ReconcileProductUseCase",
    "ReconcileShopUseCase",
    "ReconciliationResult",
    "ShopReconciliationReport",
    "GetProductStockUseCase",
    "ProductStockView",
]
