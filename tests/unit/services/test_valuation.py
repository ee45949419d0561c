"""Tests for stock valuation."""

import pytest

from stockledger.core.exceptions import InvalidUnitConfigurationError
from stockledger.core.services.valuation import (
    cost_price,
    profit_margin,
    purchase_cost,
    selling_price,
    value_stock,
)


class TestValueStock:
    """Tests for value_stock()."""

    def test_carton_product(self, carton_product):
        carton_product.stock_quantity = 60
        valuation = value_stock(carton_product)

        assert valuation.product_id == "PRD-001"
        assert valuation.stock_in_selling_units == 60
        assert valuation.stock_in_purchase_units == 5
        assert valuation.stock_value == 2400
        assert valuation.potential_revenue == 3000
        assert valuation.potential_profit == 600
        assert valuation.profit_margin == pytest.approx(25.0)

    def test_weighed_product(self, weighed_product):
        weighed_product.stock_quantity = 50_000
        valuation = value_stock(weighed_product)

        assert valuation.stock_in_selling_units == 50
        assert valuation.stock_in_purchase_units == 2
        assert valuation.stock_value == pytest.approx(5000)
        assert valuation.potential_revenue == pytest.approx(7500)

    def test_empty_stock(self, carton_product):
        valuation = value_stock(carton_product)
        assert valuation.stock_value == 0
        assert valuation.potential_profit == 0

    def test_invalid_factors_propagate(self, carton_product):
        carton_product.purchase_unit_size = 0
        with pytest.raises(InvalidUnitConfigurationError):
            value_stock(carton_product)


class TestPricing:
    """Tests for price helpers."""

    def test_profit_margin(self, carton_product):
        assert profit_margin(carton_product) == pytest.approx(25.0)

    def test_profit_margin_without_cost(self, carton_product):
        carton_product.cost_price_per_base = 0
        assert profit_margin(carton_product) == 0.0

    def test_purchase_cost(self, carton_product):
        assert purchase_cost(carton_product, 5) == 2400

    def test_selling_price_in_selling_units(self, weighed_product):
        assert selling_price(weighed_product, 2) == pytest.approx(300)

    def test_selling_price_in_explicit_unit(self, weighed_product):
        assert selling_price(weighed_product, 500, unit="g") == pytest.approx(75)

    def test_cost_price_defaults_to_purchase_unit(self, carton_product):
        assert cost_price(carton_product, 2) == 960

    def test_cost_price_in_explicit_unit(self, weighed_product):
        assert cost_price(weighed_product, 3, unit="kg") == pytest.approx(300)
        assert cost_price(weighed_product, 500, unit="g") == pytest.approx(50)

    def test_cost_price_matches_selling_price_basis(self, carton_product):
        """Same quantity and unit: the ratio is the price ratio."""
        cost = cost_price(carton_product, 6, unit="bottle")
        assert selling_price(carton_product, 6, unit="bottle") / cost == pytest.approx(1.25)
