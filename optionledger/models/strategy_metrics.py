"""
Strategy Metrics Engine
Aggregates the open legs of one strategy into display-ready totals and a
single unrealized P&L figure.

Two paths:
- reconciled: a Strategy record is available, so P&L is its recorded
  opening credit/debit minus what it would cost to close every leg now
- naive: no Strategy record (e.g. an ungrouped single leg), so P&L is the
  sum of per-leg unrealized P&L

The reconciled path is authoritative whenever a Strategy record exists.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from functools import reduce
from math import gcd
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from optionledger.schemas import CONTRACT_MULTIPLIER, Position, Strategy

logger = logging.getLogger(__name__)

__all__ = [
    "StrategyMetricsResult",
    "compute_strategy_metrics",
    "compute_group_metrics",
    "gcd_quantities",
    "leg_market_value",
    "leg_unrealized_pl",
]


@dataclass(frozen=True)
class StrategyMetricsResult:
    """Consolidated metrics for one strategy group"""
    strategy_id: Optional[str]
    total_contracts: int
    strategy_units: int        # "how many spreads", GCD of leg quantities
    market_value: float
    unrealized_pl: float
    unrealized_pl_percent: float
    reference_cost: float      # denominator of the percentage
    has_calls: bool
    has_puts: bool
    is_reconciled: bool        # True when computed from the Strategy record


def gcd_quantities(quantities: Iterable[int]) -> int:
    """GCD of leg quantities. Empty or all-zero input gives 0."""
    return reduce(gcd, (abs(int(q)) for q in quantities), 0)


def leg_market_value(position: Position) -> float:
    """Current (unsigned) market value of a leg.

    Prefers an explicit market_value, then current_price, and falls back to
    the opening price when no quote has been supplied.
    """
    if position.market_value is not None:
        return position.market_value

    price = position.current_price if position.current_price is not None else position.price
    return abs(position.current_quantity) * price * CONTRACT_MULTIPLIER


def leg_unrealized_pl(position: Position, market_value: Optional[float] = None) -> float:
    """Per-leg unrealized P&L. Uses the stored figure when present.

    Long: value now minus what was paid. Short: what was received minus the
    value now. Both sides cover only the contracts still open.
    """
    if position.unrealized_pl is not None:
        return position.unrealized_pl

    if market_value is None:
        market_value = leg_market_value(position)

    cost = abs(position.total_cost_basis)
    if position.is_long:
        return market_value - cost
    return cost - market_value


def compute_strategy_metrics(
    legs: Sequence[Position],
    strategy: Optional[Strategy] = None,
    strategy_id: Optional[str] = None,
) -> StrategyMetricsResult:
    """Compute consolidated metrics for the open legs of one strategy.

    Args:
        legs: Open positions of the group (a consistent snapshot).
        strategy: The group's Strategy record, if there is one. Its
                  total_opening_cost is read, never modified.
        strategy_id: Id to report. Defaults to the record's id, then to the
                     first leg's strategy_id.

    Returns:
        StrategyMetricsResult. Pure: the same inputs always give the same output.
    """
    total_contracts = 0
    market_value = 0.0
    long_legs_value = 0.0
    short_legs_value = 0.0
    total_cost_basis = 0.0
    total_leg_pl = 0.0
    has_calls = False
    has_puts = False

    for leg in legs:
        value = leg_market_value(leg)

        total_contracts += abs(leg.current_quantity)
        market_value += value
        if leg.is_long:
            long_legs_value += value
        else:
            short_legs_value += value
        total_cost_basis += abs(leg.total_cost_basis)
        total_leg_pl += leg_unrealized_pl(leg, value)

        if leg.is_call:
            has_calls = True
        else:
            has_puts = True

    strategy_units = gcd_quantities(leg.current_quantity for leg in legs)

    if strategy is not None:
        cost_to_close = short_legs_value - long_legs_value
        final_pl = strategy.total_opening_cost - cost_to_close
        reference_cost = abs(strategy.total_opening_cost)
    else:
        logger.debug("No strategy record, using per-leg P&L sum")
        final_pl = total_leg_pl
        reference_cost = total_cost_basis

    unrealized_pl_percent = (final_pl / reference_cost) * 100 if reference_cost > 0 else 0.0

    if strategy_id is None:
        if strategy is not None and strategy.strategy_id is not None:
            strategy_id = strategy.strategy_id
        elif legs:
            strategy_id = legs[0].strategy_id

    return StrategyMetricsResult(
        strategy_id=strategy_id,
        total_contracts=total_contracts,
        strategy_units=strategy_units,
        market_value=market_value,
        unrealized_pl=final_pl,
        unrealized_pl_percent=unrealized_pl_percent,
        reference_cost=reference_cost,
        has_calls=has_calls,
        has_puts=has_puts,
        is_reconciled=strategy is not None,
    )


def compute_group_metrics(
    positions: Iterable[Position],
    strategies: Optional[Mapping[str, Strategy]] = None,
) -> List[StrategyMetricsResult]:
    """Compute metrics for every strategy group in a snapshot of positions.

    Open positions are grouped by strategy_id and each group is reconciled
    against its Strategy record when `strategies` has one. Positions with no
    strategy_id are reported one per result on the naive path.

    Results keep the order in which groups first appear in `positions`.
    """
    strategies = strategies or {}
    groups: Dict[str, List[Position]] = defaultdict(list)
    order: List[object] = []

    for position in positions:
        if not position.is_open:
            continue
        if position.strategy_id is None:
            order.append(position)
            continue
        if position.strategy_id not in groups:
            order.append(position.strategy_id)
        groups[position.strategy_id].append(position)

    results = []
    for entry in order:
        if isinstance(entry, Position):
            results.append(compute_strategy_metrics([entry]))
            continue

        strategy = strategies.get(entry)
        if strategy is None:
            logger.debug(f"Strategy {entry} not found, falling back to per-leg P&L")
        results.append(compute_strategy_metrics(groups[entry], strategy, strategy_id=entry))

    return results
