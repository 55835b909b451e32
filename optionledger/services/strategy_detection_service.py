"""Strategy detection service: propose strategy groups for ungrouped option positions.

Nothing is persisted; callers decide whether to create the proposed records.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from optionledger.pipeline.strategy_engine import STRATEGIES, classify
from optionledger.schemas import (
    MAX_LEGS, MIN_LEGS, Direction, OptionLeg, OptionType, Position, StrategyType,
)

_CROSS_EXPIRATION_TYPES = (StrategyType.CALENDAR_SPREAD, StrategyType.DIAGONAL_SPREAD)


@dataclass(frozen=True)
class StrategyGroupProposal:
    """A suggested grouping of positions into one strategy record."""
    symbol: str
    strategy_type: StrategyType
    position_ids: Tuple[Optional[str], ...]
    direction: Optional[Direction]
    confidence: Optional[float]   # None for single_option
    total_opening_cost: float     # signed sum of the legs' cost bases


def propose_strategy_groups(positions: Iterable[Position]) -> List[StrategyGroupProposal]:
    """Propose strategy groups for open positions that have no strategy_id.

    Per underlying symbol, in order:
    1. cross-expiration pass: the first pair (input order) that classifies
       as a calendar or diagonal spread is grouped and removed
    2. the rest is bucketed by expiration; a bucket of 2-8 legs that
       classifies as anything but custom is grouped
    3. otherwise same-type buckets holding both sides become vertical spreads
    4. leftovers become single_option proposals
    """
    by_symbol: Dict[str, List[Position]] = OrderedDict()
    for position in positions:
        if not position.is_open or position.strategy_id is not None:
            continue
        by_symbol.setdefault(position.symbol or "", []).append(position)

    proposals = []
    for symbol, group in by_symbol.items():
        symbol_proposals = _propose_for_symbol(symbol, group)
        logger.info(
            f"{symbol or '(no symbol)'}: {len(group)} ungrouped positions -> "
            f"{len(symbol_proposals)} proposals"
        )
        proposals.extend(symbol_proposals)

    return proposals


def _propose_for_symbol(symbol: str, positions: List[Position]) -> List[StrategyGroupProposal]:
    proposals = []
    remaining = list(positions)

    pair = _find_cross_expiration_pair(remaining)
    if pair is not None:
        pair_positions, result = pair
        proposals.append(_proposal(symbol, pair_positions, result.suggested_type,
                                   result.direction, result.confidence))
        remaining = [p for p in remaining if all(p is not q for q in pair_positions)]

    for expiration, bucket in _bucket_by_expiration(remaining).items():
        if MIN_LEGS <= len(bucket) <= MAX_LEGS:
            result = classify([_as_leg(p) for p in bucket])
            if result.suggested_type != StrategyType.CUSTOM:
                proposals.append(_proposal(symbol, bucket, result.suggested_type,
                                           result.direction, result.confidence))
                continue

        leftovers = []
        for option_type, same_type in _bucket_by_type(bucket).items():
            if _is_similar_spread(same_type):
                logger.debug(
                    f"{symbol} {expiration}: grouping {len(same_type)} {option_type.value}s as a vertical"
                )
                proposals.append(_proposal(
                    symbol,
                    same_type,
                    StrategyType.VERTICAL_SPREAD,
                    _credit_debit_direction(option_type, same_type),
                    STRATEGIES[StrategyType.VERTICAL_SPREAD].confidence,
                ))
            else:
                leftovers.extend(same_type)

        for position in leftovers:
            proposals.append(_proposal(symbol, [position], StrategyType.SINGLE_OPTION, None, None))

    return proposals


def _find_cross_expiration_pair(positions: Sequence[Position]):
    for first, second in combinations(positions, 2):
        if first.expiration == second.expiration:
            continue
        result = classify([_as_leg(first), _as_leg(second)])
        if result.suggested_type in _CROSS_EXPIRATION_TYPES:
            return [first, second], result
    return None


def _bucket_by_expiration(positions: Iterable[Position]) -> Dict[date, List[Position]]:
    buckets: Dict[date, List[Position]] = OrderedDict()
    for position in positions:
        buckets.setdefault(position.expiration, []).append(position)
    return buckets


def _bucket_by_type(positions: Iterable[Position]) -> Dict[OptionType, List[Position]]:
    buckets: Dict[OptionType, List[Position]] = OrderedDict()
    for position in positions:
        buckets.setdefault(position.option_type, []).append(position)
    return buckets


def _is_similar_spread(positions: List[Position]) -> bool:
    """Both sides present, and either different strikes or exactly one pair."""
    if len(positions) < 2:
        return False
    sides = {p.side for p in positions}
    if len(sides) < 2:
        return False
    strikes = {p.strike for p in positions}
    return len(strikes) > 1 or len(positions) == 2


def _credit_debit_direction(option_type: OptionType, positions: List[Position]) -> Direction:
    """Credit call spreads are bearish, debit call spreads bullish; puts the reverse."""
    is_credit = sum(p.total_cost_basis for p in positions) > 0
    if option_type == OptionType.CALL:
        return Direction.BEARISH if is_credit else Direction.BULLISH
    return Direction.BULLISH if is_credit else Direction.BEARISH


def _as_leg(position: Position) -> OptionLeg:
    """The position's open remainder as a classifier leg."""
    return OptionLeg(
        strike=position.strike,
        expiration=position.expiration,
        option_type=position.option_type,
        side=position.side,
        quantity=position.current_quantity,
        price=position.price,
    )


def _proposal(
    symbol: str,
    positions: Sequence[Position],
    strategy_type: StrategyType,
    direction: Optional[Direction],
    confidence: Optional[float],
) -> StrategyGroupProposal:
    return StrategyGroupProposal(
        symbol=symbol,
        strategy_type=strategy_type,
        position_ids=tuple(p.position_id for p in positions),
        direction=direction,
        confidence=confidence,
        total_opening_cost=sum((p.total_cost_basis for p in positions), 0.0),
    )
