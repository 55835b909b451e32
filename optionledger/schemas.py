"""Pydantic records shared by the OptionLedger strategy engine.

OptionLeg is the validated, normalized input to classification and cost
computation. Position and Strategy mirror the persisted records that callers
hand in as read-only snapshots; nothing here writes them back.
"""

from datetime import date
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from optionledger.errors import ValidationError

# Options are always valued at 100 shares per contract
CONTRACT_MULTIPLIER = 100

# Bounds on a leg set submitted for classification
MIN_LEGS = 2
MAX_LEGS = 8


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"


class Side(str, Enum):
    LONG = "long"
    SHORT = "short"


class PositionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    EXPIRED = "expired"
    ASSIGNED = "assigned"
    EXERCISED = "exercised"


class CloseStatus(str, Enum):
    """How a closing action happened. Anything but CLOSED has no market trade."""
    CLOSED = "closed"
    EXPIRED = "expired"
    ASSIGNED = "assigned"
    EXERCISED = "exercised"


class StrategyStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Direction(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class StrategyType(str, Enum):
    VERTICAL_SPREAD = "vertical_spread"
    RATIO_SPREAD = "ratio_spread"
    CALENDAR_SPREAD = "calendar_spread"
    DIAGONAL_SPREAD = "diagonal_spread"
    STRADDLE = "straddle"
    STRANGLE = "strangle"
    BUTTERFLY = "butterfly"
    IRON_BUTTERFLY = "iron_butterfly"
    IRON_CONDOR = "iron_condor"
    SINGLE_OPTION = "single_option"
    CUSTOM = "custom"


class OptionLeg(BaseModel):
    """One option leg: strike, expiration, type, side, quantity and premium."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    strike: float
    expiration: date
    option_type: OptionType
    side: Side
    quantity: int
    price: float = 0.0
    fee: float = 0.0  # informational only, never part of P&L

    @field_validator("option_type", mode="before")
    @classmethod
    def _normalize_option_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("c", "call"):
                return OptionType.CALL
            if text in ("p", "put"):
                return OptionType.PUT
        return value

    @field_validator("side", mode="before")
    @classmethod
    def _normalize_side(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("strike")
    @classmethod
    def _check_strike(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("quantity")
    @classmethod
    def _check_quantity(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of contracts")
        return value

    @field_validator("price", "fee")
    @classmethod
    def _check_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @property
    def is_long(self) -> bool:
        return self.side == Side.LONG

    @property
    def is_call(self) -> bool:
        return self.option_type == OptionType.CALL

    @property
    def notional(self) -> float:
        """Unsigned premium value: quantity x price x 100."""
        return self.quantity * self.price * CONTRACT_MULTIPLIER


class Position(OptionLeg):
    """A persisted leg once opened. `quantity` is the opening quantity."""

    position_id: Optional[str] = None
    symbol: Optional[str] = None
    opening_quantity: int
    current_quantity: int
    total_cost_basis: float = 0.0      # open contracts only; negative = paid, positive = received
    total_closing_amount: float = 0.0  # signed sum of closing amounts
    realized_pl: float = 0.0
    unrealized_pl: Optional[float] = None
    market_value: Optional[float] = None
    current_price: Optional[float] = None
    status: PositionStatus = PositionStatus.OPEN
    strategy_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_quantities(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key in ("opening_quantity", "current_quantity"):
                if data.get(key) is None:
                    data[key] = data.get("quantity")
        return data

    @field_validator("current_quantity")
    @classmethod
    def _check_current_quantity(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("market_value", "current_price")
    @classmethod
    def _check_quote(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise ValueError("must not be negative")
        return value

    @model_validator(mode="after")
    def _check_quantity_bounds(self) -> "Position":
        if self.opening_quantity <= 0:
            raise ValueError("opening_quantity must be positive")
        if self.current_quantity > self.opening_quantity:
            raise ValueError(
                f"current_quantity {self.current_quantity} exceeds opening_quantity {self.opening_quantity}"
            )
        return self

    @property
    def is_open(self) -> bool:
        return self.status == PositionStatus.OPEN and self.current_quantity > 0


class Strategy(BaseModel):
    """A persisted strategy record. total_opening_cost is fixed at creation."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    strategy_id: Optional[str] = None
    strategy_type: StrategyType = StrategyType.CUSTOM
    underlying_symbol: Optional[str] = None
    direction: Optional[Direction] = None
    leg_count: int = 0
    expiration_date: Optional[date] = None
    total_opening_cost: float = 0.0
    total_closing_proceeds: float = 0.0
    realized_pl: float = 0.0
    unrealized_pl: float = 0.0
    status: StrategyStatus = StrategyStatus.OPEN
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Validation entry points
# ---------------------------------------------------------------------------

def validate_leg(data: Any, index: Optional[int] = None) -> OptionLeg:
    """Validate and normalize one leg.

    Args:
        data: An OptionLeg, a mapping, or any object exposing the leg fields
              as attributes.
        index: 1-based position of the leg in its set, used in messages.

    Raises:
        ValidationError: If a field is missing or out of range.
    """
    if isinstance(data, OptionLeg):
        return data

    try:
        return OptionLeg.model_validate(data, from_attributes=True)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e, index)) from e


def validate_leg_set(legs: Iterable[Any]) -> List[OptionLeg]:
    """Validate a leg set for classification: 2 to 8 valid legs."""
    legs = list(legs)

    if len(legs) < MIN_LEGS:
        raise ValidationError(
            f"At least {MIN_LEGS} legs are required, got {len(legs)}"
        )
    if len(legs) > MAX_LEGS:
        raise ValidationError(
            f"Maximum {MAX_LEGS} legs allowed, got {len(legs)}"
        )

    return [validate_leg(leg, index=i) for i, leg in enumerate(legs, start=1)]


def _describe(error: PydanticValidationError, index: Optional[int]) -> str:
    """Flatten pydantic's error list into one readable message."""
    parts = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"]) or "leg"
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{field}: {msg}")

    prefix = f"Leg {index}: " if index is not None else ""
    return prefix + "; ".join(parts)
