"""Data types for the strategy engine."""

from dataclasses import dataclass
from typing import Optional

from optionledger.schemas import Direction, StrategyType


@dataclass(frozen=True)
class StrategyDef:
    """Registry entry: how confident a rule match is and what it means."""
    strategy_type: StrategyType
    confidence: float           # 0.0-1.0
    leg_count: Optional[int]    # None when any count applies
    category: str               # "calendar", "vertical", "multi", "butterfly", "fallback"


@dataclass(frozen=True)
class Match:
    """What a pattern function returns when its shape fits the legs."""
    strategy_type: StrategyType
    direction: Optional[Direction] = Direction.NEUTRAL


@dataclass(frozen=True)
class StrategyResult:
    """Result of strategy classification."""
    suggested_type: StrategyType
    confidence: float
    direction: Optional[Direction] = None


@dataclass(frozen=True)
class StrategyDetectionResult:
    """Classification plus the signed net debit/credit of opening the legs.

    net_debit is negative when the legs cost money to open and positive when
    they bring in a credit.
    """
    suggested_type: StrategyType
    confidence: float
    net_debit: float
    direction: Optional[Direction] = None

    @property
    def is_credit(self) -> bool:
        return self.net_debit > 0
