"""Calendar and diagonal spread patterns (2-leg, different expirations)."""

from typing import List, Optional

from optionledger.schemas import Direction, OptionLeg, StrategyType
from .patterns_vertical import spread_direction
from .types import Match


def match_calendar(legs: List[OptionLeg]) -> Optional[Match]:
    """Identify calendar-family strategies from 2 legs with different expirations.

    Both rules need the same option type and opposite sides:
    - same strike      -> Calendar Spread (neutral)
    - different strike -> Diagonal Spread (biased like the vertical it resembles)
    """
    if len(legs) != 2:
        return None

    a, b = legs
    if a.option_type != b.option_type:
        return None
    if a.expiration == b.expiration:
        return None
    if a.side == b.side:
        return None

    if a.strike == b.strike:
        return Match(StrategyType.CALENDAR_SPREAD, Direction.NEUTRAL)

    return Match(StrategyType.DIAGONAL_SPREAD, spread_direction(legs))
