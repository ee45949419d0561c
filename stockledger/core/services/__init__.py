"""
Core business logic services.

Layer-pure functions that depend only on:
- stockledger/core/entities/*
- stockledger/core/exceptions.py

NO infrastructure imports.
"""

from stockledger.core.services.stock_fold import (
    exceeds_tolerance,
    fold_movements,
    replay_clamped,
)
from stockledger.core.services.unit_conversion import (
    convert_base_to_purchase,
    convert_base_to_selling,
    convert_purchase_to_base,
    convert_selling_to_base,
    convert_to_base,
    metric_factor,
)
from stockledger.core.services.valuation import (
    StockValuation,
    profit_margin,
    purchase_cost,
    selling_price,
    value_stock,
)

__all__ = [
    # Unit conversion
    "convert_purchase_to_base",
    "convert_selling_to_base",
    "convert_base_to_selling",
    "convert_base_to_purchase",
    "convert_to_base",
    "metric_factor",
    # Fold
    "fold_movements",
    "replay_clamped",
    "exceeds_tolerance",
    # Valuation
    "StockValuation",
    "value_stock",
    "profit_margin",
    "purchase_cost",
    "selling_price",
]
