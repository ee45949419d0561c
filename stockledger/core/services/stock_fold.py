"""
Folding a movement log into a stock level.

Two folds exist. ``fold_movements`` is the authoritative one used by
reconciliation: the signed sum of every movement, floored at zero once at the
end. ``replay_clamped`` mimics how the cached counter evolved, flooring after
every movement; the two differ exactly when an outbound movement exceeded the
stock available at the time.
"""

import math
from collections.abc import Iterable

from stockledger.core.entities.stock_movement import StockMovement


def fold_movements(movements: Iterable[StockMovement]) -> float:
    """Signed sum of all movements, floored at zero after the full fold."""
    total = math.fsum(m.signed_quantity for m in movements)
    return max(0.0, total)


def replay_clamped(movements: Iterable[StockMovement]) -> float:
    """Replay movements in order, flooring the running total at every step."""
    stock = 0.0
    for movement in movements:
        stock = max(0.0, stock + movement.signed_quantity)
    return stock


def exceeds_tolerance(cached: float, recomputed: float, tolerance: float) -> bool:
    return abs(recomputed - cached) > tolerance
