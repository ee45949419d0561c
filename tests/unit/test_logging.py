"""Tests for logging helpers."""

import structlog

from stockledger.config.logging import ledger_context, service_tagger


class TestServiceTagger:
    def test_tags_event(self):
        tag = service_tagger("Stock Ledger", "production")

        event = tag(None, "info", {"event": "stock_reconciled"})

        assert event == {
            "event": "stock_reconciled",
            "service": "Stock Ledger",
            "environment": "production",
        }

    def test_keeps_explicit_values(self):
        tag = service_tagger("Stock Ledger", "production")
        event = tag(None, "info", {"event": "x", "environment": "staging"})
        assert event["environment"] == "staging"


class TestLedgerContext:
    """ledger_context() binds ids for the duration of the block."""

    def test_binds_and_unbinds(self):
        with ledger_context(product_id="PRD-001", shop_id="SHOP-1"):
            assert structlog.contextvars.get_contextvars() == {
                "product_id": "PRD-001",
                "shop_id": "SHOP-1",
            }

        assert "product_id" not in structlog.contextvars.get_contextvars()

    def test_skips_missing_ids(self):
        with ledger_context(product_id="PRD-001", movement_id=None):
            assert "movement_id" not in structlog.contextvars.get_contextvars()

    def test_nested_blocks_restore_outer(self):
        with ledger_context(shop_id="SHOP-1"):
            with ledger_context(product_id="PRD-001"):
                assert structlog.contextvars.get_contextvars() == {
                    "shop_id": "SHOP-1",
                    "product_id": "PRD-001",
                }
            assert structlog.contextvars.get_contextvars() == {"shop_id": "SHOP-1"}
