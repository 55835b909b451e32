"""
Transaction Code Resolver
Turns one leg plus its action context into a signed cash amount and a
BTO/STO/BTC/STC transaction code.

Sign convention: negative = money paid (debit), positive = money received
(credit). Every sign decision goes through _CODE_TABLE.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from optionledger.errors import UnknownTransactionCodeError, ValidationError
from optionledger.schemas import CONTRACT_MULTIPLIER, CloseStatus, Side, validate_leg

logger = logging.getLogger(__name__)

__all__ = [
    "Action",
    "TransactionCode",
    "LegTransaction",
    "resolve_leg_transaction",
    "opening_amount",
    "parse_transaction_code",
    "net_amount",
    "coerce_close_status",
]


class Action(str, Enum):
    OPEN = "open"
    CLOSE = "close"


class TransactionCode(str, Enum):
    BTO = "BTO"  # Buy to Open
    STO = "STO"  # Sell to Open
    BTC = "BTC"  # Buy to Close
    STC = "STC"  # Sell to Close

    @property
    def is_opening(self) -> bool:
        return self in (TransactionCode.BTO, TransactionCode.STO)

    @property
    def is_debit(self) -> bool:
        return self in (TransactionCode.BTO, TransactionCode.BTC)


# (action, original side of the position) -> (code, sign of amount)
_CODE_TABLE: Dict[Tuple[Action, Side], Tuple[TransactionCode, int]] = {
    (Action.OPEN, Side.LONG): (TransactionCode.BTO, -1),
    (Action.OPEN, Side.SHORT): (TransactionCode.STO, 1),
    (Action.CLOSE, Side.LONG): (TransactionCode.STC, 1),
    (Action.CLOSE, Side.SHORT): (TransactionCode.BTC, -1),
}

_CODE_ALIASES: Dict[str, TransactionCode] = {
    "BTO": TransactionCode.BTO,
    "BUY TO OPEN": TransactionCode.BTO,
    "STO": TransactionCode.STO,
    "SELL TO OPEN": TransactionCode.STO,
    "BTC": TransactionCode.BTC,
    "BUY TO CLOSE": TransactionCode.BTC,
    "STC": TransactionCode.STC,
    "SELL TO CLOSE": TransactionCode.STC,
}


@dataclass(frozen=True)
class LegTransaction:
    """Cash effect of opening or closing one leg."""
    transaction_code: TransactionCode
    amount: float  # signed dollars
    quantity: int
    price: float   # per-contract premium actually used (0 for non-market closes)


def resolve_leg_transaction(
    leg: Any,
    is_opening: bool,
    is_long: Optional[bool] = None,
    close_status: CloseStatus = CloseStatus.CLOSED,
) -> LegTransaction:
    """Resolve the transaction code and signed amount for one leg.

    Args:
        leg: OptionLeg (or anything validate_leg accepts) with quantity/price.
        is_opening: True for an opening action, False for a closing one.
        is_long: Whether the position's original side is long. A close is
                 always the opposite trade of how the position was opened, so
                 the closing leg's own `side` field is ignored when this is
                 given. None falls back to the leg's side.
        close_status: How a close happened. expired/assigned/exercised carry
                      no market trade, so the price is forced to 0.

    Raises:
        ValidationError: On an invalid leg or a special close status used
                         with an opening action.
    """
    leg = validate_leg(leg)
    close_status = coerce_close_status(close_status)

    if is_opening and close_status != CloseStatus.CLOSED:
        raise ValidationError(
            f"Close status '{close_status.value}' cannot be used when opening a position"
        )

    action = Action.OPEN if is_opening else Action.CLOSE
    if is_long is None:
        side = leg.side
    else:
        side = Side.LONG if is_long else Side.SHORT

    code, sign = _CODE_TABLE[(action, side)]

    price = leg.price if close_status == CloseStatus.CLOSED else 0.0
    notional = leg.quantity * price * CONTRACT_MULTIPLIER
    amount = sign * notional if notional else 0.0

    logger.debug(
        f"Resolved {action.value} {side.value} x{leg.quantity} @ {price} "
        f"-> {code.value} {amount:+.2f}"
    )

    return LegTransaction(
        transaction_code=code,
        amount=amount,
        quantity=leg.quantity,
        price=price,
    )


def opening_amount(leg: Any) -> float:
    """Signed amount of opening one leg: long pays, short receives."""
    return resolve_leg_transaction(leg, is_opening=True).amount


def parse_transaction_code(text: str) -> TransactionCode:
    """Parse 'BTO', 'Buy to Open', 'BUY_TO_OPEN' and friends.

    Raises:
        UnknownTransactionCodeError: For anything that is not one of the
                                     four option codes.
    """
    key = " ".join(str(text or "").replace("_", " ").replace("-", " ").upper().split())
    code = _CODE_ALIASES.get(key)
    if code is None:
        raise UnknownTransactionCodeError(
            f"Unknown options transaction code: '{text}'. Expected BTO, STO, BTC, or STC."
        )
    return code


def net_amount(transactions: Iterable[LegTransaction]) -> float:
    """Signed total of a batch: negative = net debit, positive = net credit."""
    return sum((t.amount for t in transactions), 0.0)


def coerce_close_status(value: Any) -> CloseStatus:
    if isinstance(value, str) and not isinstance(value, CloseStatus):
        value = value.strip().lower()
    try:
        return CloseStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown close status: '{value}'. Expected closed, expired, assigned, or exercised."
        ) from None
