"""Strategy registry: single source of truth for rule confidences."""

from optionledger.schemas import CONTRACT_MULTIPLIER, MAX_LEGS, MIN_LEGS, StrategyType
from .types import StrategyDef

__all__ = ["STRATEGIES", "CONTRACT_MULTIPLIER", "MIN_LEGS", "MAX_LEGS"]

STRATEGIES: dict[StrategyType, StrategyDef] = {
    # -- Cross-expiration --
    StrategyType.CALENDAR_SPREAD: StrategyDef(StrategyType.CALENDAR_SPREAD, 0.9,  2, "calendar"),
    StrategyType.DIAGONAL_SPREAD: StrategyDef(StrategyType.DIAGONAL_SPREAD, 0.9,  2, "calendar"),
    # -- Same expiration, same type --
    StrategyType.VERTICAL_SPREAD: StrategyDef(StrategyType.VERTICAL_SPREAD, 0.8,  2, "vertical"),
    StrategyType.RATIO_SPREAD:    StrategyDef(StrategyType.RATIO_SPREAD,    0.85, 2, "vertical"),
    # -- Same expiration, mixed type --
    StrategyType.STRADDLE:        StrategyDef(StrategyType.STRADDLE,        0.9,  2, "multi"),
    StrategyType.STRANGLE:        StrategyDef(StrategyType.STRANGLE,        0.9,  2, "multi"),
    StrategyType.BUTTERFLY:       StrategyDef(StrategyType.BUTTERFLY,       0.85, 3, "butterfly"),
    StrategyType.IRON_BUTTERFLY:  StrategyDef(StrategyType.IRON_BUTTERFLY,  0.85, 4, "multi"),
    # Looser match than the butterfly wing pattern, so lower confidence
    StrategyType.IRON_CONDOR:     StrategyDef(StrategyType.IRON_CONDOR,     0.7,  4, "multi"),
    # -- Fallback --
    StrategyType.CUSTOM:          StrategyDef(StrategyType.CUSTOM,          0.5,  None, "fallback"),
}
