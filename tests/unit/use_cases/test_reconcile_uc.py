"""Tests for the reconciliation use cases."""

from unittest.mock import AsyncMock

import pytest

from stockledger.application.use_cases.reconcile_stock import (
    ReconcileProductUseCase,
    ReconcileShopUseCase,
    ReconciliationResult,
    RecomputeStockUseCase,
)
from stockledger.core.entities import LedgerSnapshot, MovementType, Product, StockMovement
from stockledger.core.exceptions import ProductNotFoundError, StockConflictError


def _movement(movement_type: MovementType, quantity: float) -> StockMovement:
    return StockMovement(
        product_id="PRD-001", shop_id="SHOP-1",
        movement_type=movement_type, quantity=quantity,
    )


class FakeLedger:
    """In-memory ledger holding one product and its log."""

    def __init__(self, product: Product, movements: list[StockMovement]):
        self.product = product
        self.movements = movements
        self.overwrites: list[float] = []

    async def read_snapshot(self, product_id: str) -> LedgerSnapshot:
        if product_id != self.product.id:
            raise ProductNotFoundError(product_id)
        return LedgerSnapshot(
            product=self.product.model_copy(), movements=list(self.movements),
        )

    async def overwrite_stock(
        self, product_id: str, quantity: float, expected_movement_count: int,
    ) -> bool:
        if expected_movement_count != len(self.movements):
            return False
        self.product.stock_quantity = quantity
        self.overwrites.append(quantity)
        return True


@pytest.fixture
def ledger(carton_product):
    carton_product.stock_quantity = 50
    return FakeLedger(
        carton_product,
        [_movement(MovementType.IN, 60), _movement(MovementType.SALE, 10)],
    )


@pytest.fixture
def use_case(ledger):
    return ReconcileProductUseCase(
        stock_ledger=ledger, tolerance=1e-6, max_attempts=3, retry_delay=0,
    )


class TestRecomputeStockUseCase:
    async def test_folds_log(self, ledger):
        ledger.product.stock_quantity = 999
        use_case = RecomputeStockUseCase(stock_ledger=ledger)

        assert await use_case.execute("PRD-001") == 50
        assert ledger.overwrites == []

    async def test_unknown_product(self, ledger):
        use_case = RecomputeStockUseCase(stock_ledger=ledger)

        with pytest.raises(ProductNotFoundError):
            await use_case.execute("PRD-404")

    async def test_empty_log(self, carton_product):
        use_case = RecomputeStockUseCase(stock_ledger=FakeLedger(carton_product, []))

        assert await use_case.execute("PRD-001") == 0.0


class TestReconcileProductUseCase:
    async def test_consistent_stock_not_written(self, use_case, ledger):
        """Test no write happens when cached stock matches the log."""
        result = await use_case.execute("PRD-001")

        assert result.corrected is False
        assert result.discrepancy == 0
        assert ledger.overwrites == []

    async def test_float_noise_within_tolerance(self, use_case, ledger):
        ledger.product.stock_quantity = 50 + 1e-9

        result = await use_case.execute("PRD-001")

        assert result.corrected is False
        assert ledger.overwrites == []

    async def test_drift_corrected(self, use_case, ledger):
        """Test a corrupted counter is overwritten with the log value."""
        ledger.product.stock_quantity = 999

        result = await use_case.execute("PRD-001")

        assert result.corrected is True
        assert result.cached_stock == 999
        assert result.recomputed_stock == 50
        assert result.discrepancy == -949
        assert ledger.overwrites == [50]

    async def test_idempotent(self, use_case, ledger):
        """Test a second call with no new movements writes nothing."""
        ledger.product.stock_quantity = 999

        first = await use_case.execute("PRD-001")
        second = await use_case.execute("PRD-001")

        assert first.corrected is True
        assert second.corrected is False
        assert ledger.overwrites == [50]

    async def test_retries_after_concurrent_movement(self, use_case, ledger):
        """Test a movement landing mid-reconcile forces a fresh snapshot."""
        ledger.product.stock_quantity = 999
        original_overwrite = ledger.overwrite_stock
        calls = 0

        async def racing_overwrite(product_id, quantity, expected_movement_count):
            nonlocal calls
            calls += 1
            if calls == 1:
                ledger.movements.append(_movement(MovementType.SALE, 5))
            return await original_overwrite(product_id, quantity, expected_movement_count)

        ledger.overwrite_stock = racing_overwrite

        result = await use_case.execute("PRD-001")

        assert calls == 2
        assert result.recomputed_stock == 45
        assert ledger.overwrites == [45]

    async def test_gives_up_with_conflict(self, ledger):
        """Test StockConflictError once every attempt lost the race."""
        ledger.product.stock_quantity = 999
        ledger.overwrite_stock = AsyncMock(return_value=False)
        use_case = ReconcileProductUseCase(
            stock_ledger=ledger, tolerance=1e-6, max_attempts=3, retry_delay=0,
        )

        with pytest.raises(StockConflictError) as exc_info:
            await use_case.execute("PRD-001")

        assert ledger.overwrite_stock.await_count == 3
        assert exc_info.value.details["attempts"] == 3

    async def test_clamped_oversell_converges(self, carton_product):
        """Test counter and log agree after reconciling a clamped oversell."""
        # Counter went 5 -> 0 (clamped) -> 10; the log says -5 -> floor 0
        carton_product.stock_quantity = 10
        ledger = FakeLedger(carton_product, [
            _movement(MovementType.IN, 5),
            _movement(MovementType.SALE, 20),
            _movement(MovementType.IN, 10),
        ])
        use_case = ReconcileProductUseCase(
            stock_ledger=ledger, tolerance=1e-6, max_attempts=1, retry_delay=0,
        )

        result = await use_case.execute("PRD-001")

        assert result.corrected is True
        assert ledger.product.stock_quantity == 0.0

    async def test_unknown_product(self, use_case):
        with pytest.raises(ProductNotFoundError):
            await use_case.execute("PRD-404")

    async def test_to_response(self, use_case, ledger):
        ledger.product.stock_quantity = 999

        response = use_case.to_response(await use_case.execute("PRD-001"))

        assert response.product_id == "PRD-001"
        assert response.discrepancy == -949
        assert response.corrected is True


class TestReconcileShopUseCase:
    async def test_reconciles_every_product(self):
        store = AsyncMock()
        store.list_products.return_value = [
            Product(id="P1", shop_id="SHOP-1", name="A"),
            Product(id="P2", shop_id="SHOP-1", name="B", is_active=False),
        ]
        reconcile = AsyncMock()
        reconcile.execute.side_effect = [
            ReconciliationResult("P1", 5, 5),
            ReconciliationResult("P2", 9, 3, corrected=True),
        ]
        use_case = ReconcileShopUseCase(product_store=store, reconcile_product=reconcile)

        report = await use_case.execute("SHOP-1")

        assert report.checked == 2
        assert [r.product_id for r in report.corrected] == ["P2"]
        store.list_products.assert_awaited_once_with(
            "SHOP-1", include_inactive=True, limit=100, offset=0,
        )

        response = use_case.to_response(report)
        assert response.checked == 2
        assert response.corrected[0].discrepancy == -6

    async def test_pages_through_large_shops(self):
        store = AsyncMock()
        first_page = [
            Product(id=f"P{i}", shop_id="SHOP-1", name=f"Item {i}") for i in range(100)
        ]
        store.list_products.side_effect = [
            first_page,
            [Product(id="P100", shop_id="SHOP-1", name="Last")],
        ]
        reconcile = AsyncMock()
        reconcile.execute.side_effect = lambda pid: ReconciliationResult(pid, 0, 0)
        use_case = ReconcileShopUseCase(product_store=store, reconcile_product=reconcile)

        report = await use_case.execute("SHOP-1")

        assert report.checked == 101
        assert store.list_products.await_args_list[1].kwargs["offset"] == 100

    async def test_failure_propagates(self):
        store = AsyncMock()
        store.list_products.return_value = [Product(id="P1", shop_id="SHOP-1", name="A")]
        reconcile = AsyncMock()
        reconcile.execute.side_effect = StockConflictError("P1", 3)
        use_case = ReconcileShopUseCase(product_store=store, reconcile_product=reconcile)

        with pytest.raises(StockConflictError):
            await use_case.execute("SHOP-1")
