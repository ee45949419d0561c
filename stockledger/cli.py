"""
Stock ledger command line.

Usage:
    python -m stockledger migrate                 Apply pending schema migrations
    python -m stockledger status                  Show migration status
    python -m stockledger verify                  Check schema and stock projection integrity
    python -m stockledger stock PRODUCT_ID        Show cached stock, valuation and history
    python -m stockledger recompute PRODUCT_ID    Fold the movement log (read-only)
    python -m stockledger reconcile PRODUCT_ID    Correct one product's cached stock
    python -m stockledger reconcile-shop SHOP_ID  Correct every product of a shop
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from stockledger.application.dto.responses import ErrorResponse
from stockledger.application.use_cases import (
    GetProductStockUseCase,
    ReconcileProductUseCase,
    ReconcileShopUseCase,
    RecomputeStockUseCase,
)
from stockledger.config import configure_logging
from stockledger.core.exceptions import StockLedgerError
from stockledger.infrastructure.storage.sqlite import close_pool
from stockledger.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


async def _migrate(args: argparse.Namespace) -> int:
    results = await initialize_database(args.db_path)
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    if not results:
        print("Database is up to date")
    return 0 if all(r.success for r in results) else 1


async def _status(args: argparse.Namespace) -> int:
    status = await get_migration_status(args.db_path)
    print(f"Database exists: {status.exists}")
    print(f"Current version: {status.current_version or 'N/A'}")
    print(f"Applied migrations: {status.applied}")
    print(f"Pending migrations: {status.pending}")
    if status.modified:
        print(f"Edited after apply: {status.modified}")
    return 0 if status.up_to_date else 1


async def _verify(args: argparse.Namespace) -> int:
    checks = await verify_schema_integrity(args.db_path)
    for check in checks:
        print(f"[{'PASS' if check.passed else 'FAIL'}] {check.check}")
        if not check.passed:
            for key, value in check.details.items():
                print(f"       {key}: {value}")
    return 0 if all(c.passed for c in checks) else 1


async def _stock(args: argparse.Namespace) -> int:
    use_case = GetProductStockUseCase()
    view = await use_case.execute(args.product_id, history=args.history)
    print(use_case.to_response(view).model_dump_json(indent=2))
    return 0


async def _recompute(args: argparse.Namespace) -> int:
    stock = await RecomputeStockUseCase().execute(args.product_id)
    print(json.dumps({"product_id": args.product_id, "recomputed_stock": stock}))
    return 0


async def _reconcile(args: argparse.Namespace) -> int:
    use_case = ReconcileProductUseCase()
    result = await use_case.execute(args.product_id)
    print(use_case.to_response(result).model_dump_json(indent=2))
    return 0


async def _reconcile_shop(args: argparse.Namespace) -> int:
    use_case = ReconcileShopUseCase()
    report = await use_case.execute(args.shop_id)
    print(use_case.to_response(report).model_dump_json(indent=2))
    return 0


async def _run(command: Callable[[argparse.Namespace], Awaitable[int]], args: argparse.Namespace) -> int:
    try:
        return await command(args)
    except StockLedgerError as e:
        print(ErrorResponse(**e.to_dict()).model_dump_json(), file=sys.stderr)
        return 1
    finally:
        await close_pool()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stockledger",
        description="Stock ledger management",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL for this run",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending schema migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.set_defaults(func=_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=_status)

    # verify
    p_verify = sub.add_parser("verify", help="Check schema and stock projection integrity")
    p_verify.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_verify.set_defaults(func=_verify)

    # stock
    p_stock = sub.add_parser("stock", help="Show a product's stock and valuation")
    p_stock.add_argument("product_id")
    p_stock.add_argument("--history", type=int, default=10, help="Recent movements to show (default: 10)")
    p_stock.set_defaults(func=_stock)

    # recompute
    p_recompute = sub.add_parser("recompute", help="Fold a product's movement log")
    p_recompute.add_argument("product_id")
    p_recompute.set_defaults(func=_recompute)

    # reconcile
    p_reconcile = sub.add_parser("reconcile", help="Correct one product's cached stock")
    p_reconcile.add_argument("product_id")
    p_reconcile.set_defaults(func=_reconcile)

    # reconcile-shop
    p_shop = sub.add_parser("reconcile-shop", help="Correct every product of a shop")
    p_shop.add_argument("shop_id")
    p_shop.set_defaults(func=_reconcile_shop)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(_run(args.func, args))


if __name__ == "__main__":
    sys.exit(main())
