"""
Unit conversion between a product's purchase, base and selling units.

Pure functions: no I/O, no shared state, safe to call from any task.
Stock is always stored in base units; quantities arriving in purchase or
selling units are normalized here before they reach the ledger.
"""

import math

from stockledger.core.entities.product import Product, UnitType
from stockledger.core.exceptions import InvalidUnitConfigurationError

# Each metric family is scaled to its smallest unit so ratios stay exact.
METRIC_SCALES: dict[UnitType, dict[str, int]] = {
    UnitType.WEIGHT: {"mg": 1, "g": 1_000, "kg": 1_000_000},
    UnitType.VOLUME: {"ml": 1, "cl": 10, "l": 1_000},
    UnitType.LENGTH: {"mm": 1, "cm": 10, "m": 1_000},
}


def _positive_factor(product: Product, field: str) -> float:
    value = getattr(product, field)
    if (
        value is None
        or isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value <= 0
    ):
        raise InvalidUnitConfigurationError(product.id, field, value)
    return float(value)


def metric_factor(from_unit: str, to_unit: str, unit_type: UnitType) -> float | None:
    """
    Factor turning ``from_unit`` quantities into ``to_unit`` quantities.

    Returns None when the units are not both members of the metric family
    of ``unit_type`` (pieces and packs have no metric family).
    """
    scales = METRIC_SCALES.get(unit_type)
    if scales is None or from_unit not in scales or to_unit not in scales:
        return None
    return scales[from_unit] / scales[to_unit]


def convert_to_base(quantity: float, from_unit: str, product: Product) -> float:
    """Convert a quantity expressed in ``from_unit`` to the product's base unit."""
    if from_unit == product.base_unit:
        return quantity
    factor = metric_factor(from_unit, product.base_unit, product.unit_type)
    if factor is not None:
        return quantity * factor
    return quantity * _positive_factor(product, "unit_conversion_factor")


def convert_purchase_to_base(quantity: float, product: Product) -> float:
    """Purchase units -> base units via ``purchase_unit_size``."""
    return quantity * _positive_factor(product, "purchase_unit_size")


def convert_selling_to_base(quantity: float, product: Product) -> float:
    """Selling units -> base units (identity when both units are the same)."""
    return convert_to_base(quantity, product.selling_unit, product)


def convert_base_to_selling(quantity: float, product: Product) -> float:
    """Base units -> selling units."""
    if product.selling_unit == product.base_unit:
        return quantity
    factor = metric_factor(product.base_unit, product.selling_unit, product.unit_type)
    if factor is not None:
        return quantity * factor
    return quantity / _positive_factor(product, "unit_conversion_factor")


def convert_base_to_purchase(quantity: float, product: Product) -> float:
    """Base units -> purchase units."""
    return quantity / _positive_factor(product, "purchase_unit_size")
