"""Main strategy recognition dispatcher."""

import logging
from typing import Any, Iterable, List, Optional

from optionledger.models.transaction_codes import opening_amount
from optionledger.schemas import OptionLeg, StrategyType, validate_leg_set
from .constants import STRATEGIES
from .patterns_butterfly import match_butterfly
from .patterns_calendar import match_calendar
from .patterns_multi import match_four_leg, match_two_leg
from .patterns_vertical import match_vertical
from .types import Match, StrategyDetectionResult, StrategyResult

logger = logging.getLogger(__name__)


def classify(legs: Iterable[Any]) -> StrategyResult:
    """Classify a leg set into a strategy shape with a confidence score.

    Algorithm (first match wins):
    1. Validate the set: 2-8 legs, each leg well formed
    2. 2 legs: calendar/diagonal, then vertical/ratio, then straddle/strangle
    3. 3 legs: 1-2-1 butterfly
    4. 4 legs: iron butterfly wing pattern, then iron condor
    5. Fall back to Custom

    Raises:
        ValidationError: If the leg set is invalid. Unmatched but valid sets
                         never raise; they come back as custom at 0.5.
    """
    legs = validate_leg_set(legs)

    match = _match(legs)
    if match is None:
        logger.debug(f"No pattern matched {len(legs)} legs, falling back to custom")
        return _custom_result()

    return _result(match)


def detect(legs: Iterable[Any]) -> StrategyDetectionResult:
    """Classify a leg set and price the net debit/credit of opening it."""
    legs = validate_leg_set(legs)
    result = classify(legs)
    net_debit = sum((opening_amount(leg) for leg in legs), 0.0)

    return StrategyDetectionResult(
        suggested_type=result.suggested_type,
        confidence=result.confidence,
        net_debit=net_debit,
        direction=result.direction,
    )


def _match(legs: List[OptionLeg]) -> Optional[Match]:
    if len(legs) == 2:
        return (
            match_calendar(legs)
            or match_vertical(legs)
            or match_two_leg(legs)
        )
    if len(legs) == 3:
        return match_butterfly(legs)
    if len(legs) == 4:
        return match_four_leg(legs)
    return None


def _result(match: Match) -> StrategyResult:
    """Build a StrategyResult from a pattern match using the registry."""
    defn = STRATEGIES[match.strategy_type]
    return StrategyResult(
        suggested_type=defn.strategy_type,
        confidence=defn.confidence,
        direction=match.direction,
    )


def _custom_result() -> StrategyResult:
    """Build the fallback Custom result."""
    defn = STRATEGIES[StrategyType.CUSTOM]
    return StrategyResult(
        suggested_type=defn.strategy_type,
        confidence=defn.confidence,
        direction=None,
    )
