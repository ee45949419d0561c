"""Stock valuation figures derived from a product's cached stock and prices."""

from dataclasses import dataclass

from stockledger.core.entities.product import Product
from stockledger.core.services.unit_conversion import (
    convert_base_to_purchase,
    convert_base_to_selling,
    convert_purchase_to_base,
    convert_to_base,
)


@dataclass(frozen=True)
class StockValuation:
    """Valuation of a product's current stock (prices are per base unit)."""

    product_id: str
    stock_quantity: float
    stock_in_selling_units: float
    stock_in_purchase_units: float
    stock_value: float  # cost basis
    potential_revenue: float
    potential_profit: float
    profit_margin: float  # percent over cost


def profit_margin(product: Product) -> float:
    """Margin over cost in percent; 0 when the product has no cost price."""
    if product.cost_price_per_base <= 0:
        return 0.0
    return (
        (product.selling_price_per_base - product.cost_price_per_base)
        / product.cost_price_per_base
        * 100
    )


def purchase_cost(product: Product, purchase_quantity: float) -> float:
    """Cost of buying ``purchase_quantity`` purchase units."""
    return convert_purchase_to_base(purchase_quantity, product) * product.cost_price_per_base


def cost_price(product: Product, quantity: float, unit: str | None = None) -> float:
    """Cost of ``quantity`` expressed in ``unit`` (defaults to the purchase unit)."""
    unit = unit or product.purchase_unit
    if unit == product.purchase_unit and unit != product.base_unit:
        return purchase_cost(product, quantity)
    return convert_to_base(quantity, unit, product) * product.cost_price_per_base


def selling_price(product: Product, quantity: float, unit: str | None = None) -> float:
    """Price of ``quantity`` expressed in ``unit`` (defaults to the selling unit)."""
    base_quantity = convert_to_base(quantity, unit or product.selling_unit, product)
    return base_quantity * product.selling_price_per_base


def value_stock(product: Product) -> StockValuation:
    stock = product.stock_quantity
    stock_value = stock * product.cost_price_per_base
    revenue = stock * product.selling_price_per_base
    return StockValuation(
        product_id=product.id,
        stock_quantity=stock,
        stock_in_selling_units=convert_base_to_selling(stock, product),
        stock_in_purchase_units=convert_base_to_purchase(stock, product),
        stock_value=stock_value,
        potential_revenue=revenue,
        potential_profit=revenue - stock_value,
        profit_margin=profit_margin(product),
    )
