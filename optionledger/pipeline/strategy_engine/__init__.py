"""Strategy Engine: leg-set strategy classification.

Public API:
    classify(legs) -> StrategyResult
    detect(legs) -> StrategyDetectionResult
    validate_leg_set(legs) -> List[OptionLeg]
    positions_to_legs(positions) -> List[OptionLeg]
"""

from optionledger.schemas import validate_leg_set
from .recognizer import classify, detect
from .adapters import positions_to_legs
from .types import Match, StrategyDef, StrategyResult, StrategyDetectionResult
from .constants import STRATEGIES

__all__ = [
    "classify",
    "detect",
    "validate_leg_set",
    "positions_to_legs",
    "Match",
    "StrategyDef",
    "StrategyResult",
    "StrategyDetectionResult",
    "STRATEGIES",
]
