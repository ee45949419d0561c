"""
Reconciliation use cases: rebuild cached stock from the movement log.

The log is authoritative. ``RecomputeStockUseCase`` only reads; the
reconcile use cases overwrite the cached counter when it has drifted by more
than the configured tolerance (clamped oversells, imports, manual edits).
"""

from dataclasses import dataclass, field

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from stockledger.application.dto.responses import (
    ReconciliationResponse,
    ShopReconciliationResponse,
)
from stockledger.config import get_logger, get_settings, ledger_context
from stockledger.core.exceptions import StockConflictError
from stockledger.core.interfaces.product_store import IProductStore
from stockledger.core.interfaces.stock_ledger import IStockLedger
from stockledger.core.services.stock_fold import (
    exceeds_tolerance,
    fold_movements,
    replay_clamped,
)

logger = get_logger(__name__)


@dataclass
class ReconciliationResult:
    """Outcome of reconciling one product."""

    product_id: str
    cached_stock: float
    recomputed_stock: float
    corrected: bool = False  # True if the cached counter was overwritten

    @property
    def discrepancy(self) -> float:
        return self.recomputed_stock - self.cached_stock


@dataclass
class ShopReconciliationReport:
    """Outcome of reconciling every product of a shop."""

    shop_id: str
    results: list[ReconciliationResult] = field(default_factory=list)

    @property
    def checked(self) -> int:
        return len(self.results)

    @property
    def corrected(self) -> list[ReconciliationResult]:
        return [r for r in self.results if r.corrected]


def result_to_response(result: ReconciliationResult) -> ReconciliationResponse:
    return ReconciliationResponse(
        product_id=result.product_id,
        cached_stock=result.cached_stock,
        recomputed_stock=result.recomputed_stock,
        discrepancy=result.discrepancy,
        corrected=result.corrected,
    )


class _LedgerUseCase:
    def __init__(self, stock_ledger: IStockLedger | None = None):
        self._stock_ledger = stock_ledger

    async def _get_stock_ledger(self) -> IStockLedger:
        if self._stock_ledger is None:
            from stockledger.infrastructure.storage.sqlite import get_stock_ledger

            self._stock_ledger = await get_stock_ledger()
        return self._stock_ledger


class RecomputeStockUseCase(_LedgerUseCase):
    """Fold a product's full movement log into a stock level. Read-only."""

    async def execute(self, product_id: str) -> float:
        ledger = await self._get_stock_ledger()
        snapshot = await ledger.read_snapshot(product_id)
        return fold_movements(snapshot.movements)


class ReconcileProductUseCase(_LedgerUseCase):
    """Correct a product's cached stock when it disagrees with its log."""

    def __init__(
        self,
        stock_ledger: IStockLedger | None = None,
        tolerance: float | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        super().__init__(stock_ledger)
        if None in (tolerance, max_attempts, retry_delay):
            settings = get_settings().ledger
            if tolerance is None:
                tolerance = settings.reconcile_tolerance
            if max_attempts is None:
                max_attempts = settings.reconcile_max_attempts
            if retry_delay is None:
                retry_delay = settings.reconcile_retry_delay
        self.tolerance = tolerance
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    async def execute(self, product_id: str) -> ReconciliationResult:
        """
        Reconcile one product.

        A movement recorded between the snapshot and the write makes the
        compare-and-set fail; the whole attempt is then redone from a fresh
        snapshot, up to ``max_attempts`` times, before StockConflictError.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(StockConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )

        with ledger_context(product_id=product_id):
            async for attempt in retrying:
                with attempt:
                    return await self._attempt(product_id, attempt.retry_state.attempt_number)
        raise StockConflictError(product_id, self.max_attempts)

    async def _attempt(self, product_id: str, attempt_number: int) -> ReconciliationResult:
        ledger = await self._get_stock_ledger()
        snapshot = await ledger.read_snapshot(product_id)

        cached = snapshot.product.stock_quantity
        recomputed = fold_movements(snapshot.movements)

        if not exceeds_tolerance(cached, recomputed, self.tolerance):
            logger.debug("stock_consistent", product_id=product_id, stock=cached)
            return ReconciliationResult(
                product_id=product_id,
                cached_stock=cached,
                recomputed_stock=recomputed,
            )

        logger.warning(
            "stock_mismatch_detected",
            product_id=product_id,
            product_name=snapshot.product.name,
            cached=cached,
            recomputed=recomputed,
            discrepancy=recomputed - cached,
            clamped_replay=replay_clamped(snapshot.movements),
            movements=snapshot.movement_count,
        )

        written = await ledger.overwrite_stock(
            product_id, recomputed, snapshot.movement_count
        )
        if not written:
            raise StockConflictError(product_id, attempt_number)

        logger.info(
            "stock_reconciled",
            product_id=product_id,
            previous=cached,
            stock=recomputed,
        )
        return ReconciliationResult(
            product_id=product_id,
            cached_stock=cached,
            recomputed_stock=recomputed,
            corrected=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "reconcile_retry",
            attempt=retry_state.attempt_number,
            error=str(exception) if exception else None,
        )

    def to_response(self, result: ReconciliationResult) -> ReconciliationResponse:
        """Convert result to response DTO."""
        return result_to_response(result)


class ReconcileShopUseCase:
    """Reconcile every product (active or not) of a shop, one at a time."""

    PAGE_SIZE = 100

    def __init__(
        self,
        product_store: IProductStore | None = None,
        reconcile_product: ReconcileProductUseCase | None = None,
    ):
        self._product_store = product_store
        self._reconcile_product = reconcile_product or ReconcileProductUseCase()

    async def _get_product_store(self) -> IProductStore:
        if self._product_store is None:
            from stockledger.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, shop_id: str) -> ShopReconciliationReport:
        """Execute shop reconciliation. A failure on any product propagates."""
        store = await self._get_product_store()
        report = ShopReconciliationReport(shop_id=shop_id)

        with ledger_context(shop_id=shop_id):
            offset = 0
            while True:
                products = await store.list_products(
                    shop_id, include_inactive=True, limit=self.PAGE_SIZE, offset=offset
                )
                for product in products:
                    report.results.append(await self._reconcile_product.execute(product.id))
                if len(products) < self.PAGE_SIZE:
                    break
                offset += self.PAGE_SIZE

        logger.info(
            "shop_reconciled",
            shop_id=shop_id,
            checked=report.checked,
            corrected=len(report.corrected),
        )
        return report

    def to_response(self, report: ShopReconciliationReport) -> ShopReconciliationResponse:
        """Convert report to response DTO."""
        return ShopReconciliationResponse(
            shop_id=report.shop_id,
            checked=report.checked,
            corrected=[result_to_response(r) for r in report.corrected],
        )
