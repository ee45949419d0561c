"""Tests for RecordMovementUseCase."""

import math
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from stockledger.application.dto.requests import RecordMovementRequest
from stockledger.application.use_cases.record_movement import RecordMovementUseCase
from stockledger.core.entities import MovementType, StockChange
from stockledger.core.exceptions import (
    InvalidMovementTypeError,
    NonPositiveQuantityError,
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
)


def _apply_from(previous: float):
    """Fake ledger write that floors at zero like the real one."""

    async def apply(movement):
        new_stock = max(0.0, previous + movement.signed_quantity)
        return StockChange(movement=movement, previous_stock=previous, new_stock=new_stock)

    return apply


@pytest.fixture
def mock_stock_ledger():
    return AsyncMock()


@pytest.fixture
def use_case(mock_stock_ledger):
    return RecordMovementUseCase(stock_ledger=mock_stock_ledger)


def _request(**overrides) -> RecordMovementRequest:
    data = {
        "product_id": "PRD-001",
        "shop_id": "SHOP-1",
        "quantity": 10,
        "movement_type": "SALE",
    }
    data.update(overrides)
    return RecordMovementRequest(**data)


class TestRecordMovementUseCase:
    async def test_successful_sale(self, use_case, mock_stock_ledger):
        """Test SALE movement lowers the stock by its quantity."""
        mock_stock_ledger.apply_movement.side_effect = _apply_from(60.0)

        result = await use_case.execute(_request(reference_id="sale-1"))

        assert result.previous_stock == 60.0
        assert result.new_stock == 50.0
        assert result.requested_delta == -10
        assert result.applied_delta == -10
        assert result.clamped is False

        movement = mock_stock_ledger.apply_movement.call_args[0][0]
        assert movement.movement_type == MovementType.SALE
        assert movement.quantity == 10
        assert movement.reference_id == "sale-1"

    async def test_lowercase_type_accepted(self, use_case, mock_stock_ledger):
        """Test movement type is parsed case-insensitively."""
        mock_stock_ledger.apply_movement.side_effect = _apply_from(0.0)

        result = await use_case.execute(_request(movement_type="return", quantity=2))

        assert result.movement.movement_type == MovementType.RETURN
        assert result.new_stock == 2.0

    @pytest.mark.parametrize("quantity", [0, -5])
    async def test_non_positive_quantity(self, use_case, mock_stock_ledger, quantity):
        """Test zero and negative quantities are rejected before any write."""
        with pytest.raises(NonPositiveQuantityError):
            await use_case.execute(_request(quantity=quantity))
        mock_stock_ledger.apply_movement.assert_not_called()

    async def test_nan_quantity(self, use_case, mock_stock_ledger):
        with pytest.raises(NonPositiveQuantityError):
            await use_case.execute(_request(quantity=math.nan))
        mock_stock_ledger.apply_movement.assert_not_called()

    async def test_infinite_quantity(self, use_case, mock_stock_ledger):
        with pytest.raises(ValidationError):
            await use_case.execute(_request(quantity=math.inf))
        mock_stock_ledger.apply_movement.assert_not_called()

    async def test_invalid_movement_type(self, use_case, mock_stock_ledger):
        """Test unknown movement type is rejected before any write."""
        with pytest.raises(InvalidMovementTypeError):
            await use_case.execute(_request(movement_type="GIFT"))
        mock_stock_ledger.apply_movement.assert_not_called()

    async def test_oversell_clamps_and_warns(self, use_case, mock_stock_ledger):
        """Test an oversell floors the stock at zero and logs a warning."""
        mock_stock_ledger.apply_movement.side_effect = _apply_from(5.0)

        with patch("stockledger.application.use_cases.record_movement.logger") as log:
            result = await use_case.execute(_request(quantity=20))

        assert result.new_stock == 0.0
        assert result.requested_delta == -20
        assert result.applied_delta == -5
        assert result.clamped is True
        log.warning.assert_called_once()
        assert log.warning.call_args[0][0] == "stock_clamped_at_zero"

    async def test_exact_sellout_is_not_clamped(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = _apply_from(10.0)

        result = await use_case.execute(_request(quantity=10))

        assert result.new_stock == 0.0
        assert result.clamped is False

    async def test_default_timestamp_is_utc(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = _apply_from(0.0)

        result = await use_case.execute(_request(movement_type="IN"))

        assert result.movement.timestamp.tzinfo is not None

    async def test_explicit_timestamp_kept(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = _apply_from(0.0)
        when = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)

        result = await use_case.execute(_request(movement_type="IN", timestamp=when))

        assert result.movement.timestamp == when

    async def test_product_not_found_propagates(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = ProductNotFoundError("PRD-404")

        with pytest.raises(ProductNotFoundError):
            await use_case.execute(_request(product_id="PRD-404"))

    async def test_persistence_error_propagates(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = PersistenceError(
            "apply_movement", "database is locked",
        )

        with pytest.raises(PersistenceError):
            await use_case.execute(_request())

    async def test_to_response(self, use_case, mock_stock_ledger):
        mock_stock_ledger.apply_movement.side_effect = _apply_from(60.0)

        result = await use_case.execute(_request())
        response = use_case.to_response(result)

        assert response.movement.movement_type == "SALE"
        assert response.new_stock == 50.0
        assert response.clamped is False
