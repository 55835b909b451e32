"""Three-leg butterfly pattern."""

from typing import List, Optional

from optionledger.schemas import OptionLeg, StrategyType
from .types import Match


def match_butterfly(legs: List[OptionLeg]) -> Optional[Match]:
    """Butterfly: 3 strikes of one type and expiry in a 1-2-1 quantity ratio.

    Sides are not checked; the 1-2-1 body is what identifies the shape.
    """
    if len(legs) != 3:
        return None

    l1, l2, l3 = sorted(legs, key=lambda l: l.strike)

    if len({l.option_type for l in legs}) != 1:
        return None
    if len({l.expiration for l in legs}) != 1:
        return None

    if l1.quantity == l3.quantity and l2.quantity == 2 * l1.quantity:
        return Match(StrategyType.BUTTERFLY)

    return None
