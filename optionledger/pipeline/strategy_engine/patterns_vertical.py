"""Vertical and ratio spread patterns (2-leg, same expiry, same option type)."""

from typing import List, Optional

from optionledger.schemas import Direction, OptionLeg, StrategyType
from .types import Match


def match_vertical(legs: List[OptionLeg]) -> Optional[Match]:
    """Identify a vertical or ratio spread from exactly 2 option legs.

    Same type, same expiration, different strikes, opposite sides. Equal
    quantities make a vertical; unequal quantities a ratio spread.
    """
    if len(legs) != 2:
        return None

    a, b = legs
    if a.option_type != b.option_type:
        return None
    if a.expiration != b.expiration:
        return None
    if a.strike == b.strike:
        return None
    if a.side == b.side:
        return None

    direction = spread_direction(legs)

    if a.quantity != b.quantity:
        return Match(StrategyType.RATIO_SPREAD, direction)
    return Match(StrategyType.VERTICAL_SPREAD, direction)


def spread_direction(legs: List[OptionLeg]) -> Direction:
    """Directional bias of a long/short pair of the same option type.

    For both calls and puts, owning the lower strike is bullish:
    bull call (debit) and bull put (credit) are long the low strike,
    bear call (credit) and bear put (debit) are long the high strike.
    """
    long_leg = next(l for l in legs if l.is_long)
    short_leg = next(l for l in legs if not l.is_long)

    if long_leg.strike == short_leg.strike:
        return Direction.NEUTRAL
    if long_leg.strike < short_leg.strike:
        return Direction.BULLISH
    return Direction.BEARISH
