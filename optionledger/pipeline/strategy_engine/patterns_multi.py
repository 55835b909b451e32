"""Multi-leg patterns: Straddles, Strangles, Iron Butterfly, Iron Condor."""

from typing import List, Optional

from optionledger.schemas import OptionLeg, OptionType, Side, StrategyType
from .types import Match


def match_two_leg(legs: List[OptionLeg]) -> Optional[Match]:
    """Match 2-leg same-expiry put/call pairs: Straddle, Strangle.

    Only matches when legs are different option types held on the same side.
    Same-type pairs are verticals (handled elsewhere).
    """
    if len(legs) != 2:
        return None

    a, b = legs
    if a.option_type == b.option_type:
        return None
    if a.expiration != b.expiration:
        return None
    if a.side != b.side:
        return None

    if a.strike == b.strike:
        return Match(StrategyType.STRADDLE)
    return Match(StrategyType.STRANGLE)


def match_four_leg(legs: List[OptionLeg]) -> Optional[Match]:
    """Match 4-leg strategies: Iron Butterfly, then Iron Condor.

    Legs are sorted by strike (stable, so equal strikes keep input order).
    The butterfly needs the exact wing pattern
        long put < short put == short call < long call
    and any other 2-call/2-put single-expiry set is called a condor.
    """
    if len(legs) != 4:
        return None

    calls = [l for l in legs if l.option_type == OptionType.CALL]
    puts = [l for l in legs if l.option_type == OptionType.PUT]
    if len(calls) != 2 or len(puts) != 2:
        return None

    if len({l.expiration for l in legs}) != 1:
        return None

    l1, l2, l3, l4 = sorted(legs, key=lambda l: l.strike)

    if (_is(l1, OptionType.PUT, Side.LONG)
            and _is(l2, OptionType.PUT, Side.SHORT)
            and l2.strike == l3.strike
            and _is(l3, OptionType.CALL, Side.SHORT)
            and _is(l4, OptionType.CALL, Side.LONG)):
        return Match(StrategyType.IRON_BUTTERFLY)

    return Match(StrategyType.IRON_CONDOR)


def _is(leg: OptionLeg, option_type: OptionType, side: Side) -> bool:
    return leg.option_type == option_type and leg.side == side
