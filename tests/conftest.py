"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
import stockledger.infrastructure.storage.sqlite.migrations.migrator as migrator_module
from stockledger.core.entities import Product, UnitType
from stockledger.infrastructure.storage.sqlite.connection import close_pool
from stockledger.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    mock.ledger.reconcile_tolerance = 1e-6
    mock.ledger.reconcile_max_attempts = 3
    mock.ledger.reconcile_retry_delay = 0.0
    return mock


@pytest.fixture
async def migrated_db(temp_db_path: Path, mock_settings) -> Path:
    """Temp database with every migration applied."""
    with patch.object(migrator_module, "get_settings", return_value=mock_settings):
        results = await initialize_database(temp_db_path)
    assert results and all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def ledger_db(migrated_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated database wired into the global connection pool."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        yield migrated_db
        await close_pool()


@pytest.fixture
def carton_product() -> Product:
    """Bottles bought by the carton of 12 and sold one at a time."""
    return Product(
        id="PRD-001",
        shop_id="SHOP-1",
        name="Mineral Water 1.5L",
        sku="WAT-15",
        unit_type=UnitType.PIECE,
        base_unit="bottle",
        purchase_unit="carton",
        purchase_unit_size=12,
        selling_unit="bottle",
        unit_conversion_factor=1,
        cost_price_per_base=40.0,
        selling_price_per_base=50.0,
        low_stock_threshold=10,
    )


@pytest.fixture
def weighed_product() -> Product:
    """Rice stocked in grams, bought in 25 kg sacks and sold by the kg."""
    return Product(
        id="PRD-002",
        shop_id="SHOP-1",
        name="Rice",
        unit_type=UnitType.WEIGHT,
        base_unit="g",
        purchase_unit="sack",
        purchase_unit_size=25_000,
        selling_unit="kg",
        unit_conversion_factor=1000,
        cost_price_per_base=0.1,
        selling_price_per_base=0.15,
        low_stock_threshold=5_000,
        is_perishable=True,
    )
