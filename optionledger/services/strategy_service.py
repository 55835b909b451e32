"""Strategy service: strategy record pre-fill and opening/closing transaction batches."""

import uuid as _uuid
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from optionledger.errors import ValidationError
from optionledger.models.transaction_codes import (
    LegTransaction, TransactionCode, coerce_close_status, net_amount, resolve_leg_transaction,
)
from optionledger.pipeline.strategy_engine import StrategyDetectionResult, detect
from optionledger.schemas import (
    CloseStatus, OptionLeg, Position, Strategy, StrategyType, validate_leg, validate_leg_set,
)


@dataclass(frozen=True)
class LedgerEntry:
    """One leg's transaction plus the line a journal would show for it."""
    transaction: LegTransaction
    description: str
    symbol: str
    position_id: Optional[str] = None

    @property
    def transaction_code(self) -> TransactionCode:
        return self.transaction.transaction_code

    @property
    def amount(self) -> float:
        return self.transaction.amount


def describe_leg(code: TransactionCode, symbol: str, leg: OptionLeg) -> str:
    """Journal line for a leg, e.g. 'BTO 1 AAPL 2026-03-20 CALL $150'."""
    return (
        f"{code.value} {leg.quantity} {symbol} {leg.expiration.isoformat()} "
        f"{leg.option_type.value.upper()} ${leg.strike:g}"
    )


def build_strategy(
    underlying_symbol: str,
    legs: Iterable[Any],
    strategy_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Tuple[Strategy, StrategyDetectionResult]:
    """Pre-fill a Strategy record from a composed leg set.

    The record's total_opening_cost is the detected net debit/credit and is
    never recomputed afterwards. A two-leg set the classifier cannot place is
    recorded as a vertical spread.

    Raises:
        ValidationError: On a blank symbol or an invalid leg set.
    """
    symbol = _normalize_symbol(underlying_symbol)
    legs = validate_leg_set(legs)
    detection = detect(legs)

    strategy_type = detection.suggested_type
    if strategy_type == StrategyType.CUSTOM and len(legs) == 2:
        strategy_type = StrategyType.VERTICAL_SPREAD

    strategy = Strategy(
        strategy_id=strategy_id or str(_uuid.uuid4()),
        strategy_type=strategy_type,
        underlying_symbol=symbol,
        direction=detection.direction,
        leg_count=len(legs),
        expiration_date=legs[0].expiration,
        total_opening_cost=detection.net_debit,
        notes=notes,
    )

    logger.info(
        f"Built {strategy.strategy_type.value} {symbol} ({len(legs)} legs, "
        f"confidence {detection.confidence}) opening {detection.net_debit:+.2f}"
    )
    return strategy, detection


def opening_transactions(underlying_symbol: str, legs: Iterable[Any]) -> List[LedgerEntry]:
    """One opening entry per leg: BTO for long legs, STO for short legs."""
    symbol = _normalize_symbol(underlying_symbol)
    legs = validate_leg_set(legs)

    entries = []
    for leg in legs:
        txn = resolve_leg_transaction(leg, is_opening=True)
        entries.append(LedgerEntry(
            transaction=txn,
            description=describe_leg(txn.transaction_code, symbol, leg),
            symbol=symbol,
        ))

    net = net_amount(e.transaction for e in entries)
    logger.debug(f"Opening batch for {symbol}: {len(entries)} legs, net {net:+.2f}")
    return entries


def closing_transactions(
    positions: Iterable[Position],
    prices: Optional[Mapping[str, float]] = None,
    close_status: CloseStatus = CloseStatus.CLOSED,
) -> List[LedgerEntry]:
    """One closing entry per open position.

    The code follows the position's original side (long -> STC, short -> BTC).
    `prices` maps position_id to the closing premium; a position missing from
    it closes at its current_price. Expired, assigned and exercised closes
    carry no premium at all.

    Raises:
        ValidationError: If a market close has no price for a position.
    """
    prices = prices or {}
    close_status = coerce_close_status(close_status)
    is_market_close = close_status == CloseStatus.CLOSED

    entries = []
    for position in positions:
        if not position.is_open:
            logger.debug(f"Skipping {position.position_id}: not open")
            continue

        price = prices.get(position.position_id) if position.position_id else None
        if price is None:
            price = position.current_price
        if price is None:
            if is_market_close:
                raise ValidationError(
                    f"No closing price for position {position.position_id or position.strike}"
                )
            price = 0.0

        closing_leg = validate_leg({
            "strike": position.strike,
            "expiration": position.expiration,
            "option_type": position.option_type,
            "side": position.side,
            "quantity": position.current_quantity,
            "price": price,
        })
        txn = resolve_leg_transaction(
            closing_leg,
            is_opening=False,
            is_long=position.is_long,
            close_status=close_status,
        )
        symbol = position.symbol or ""
        entries.append(LedgerEntry(
            transaction=txn,
            description=describe_leg(txn.transaction_code, symbol, closing_leg),
            symbol=symbol,
            position_id=position.position_id,
        ))

    logger.info(f"Closing batch: {len(entries)} positions ({close_status.value})")
    return entries


def _normalize_symbol(symbol: Optional[str]) -> str:
    text = (symbol or "").strip().upper()
    if not text:
        raise ValidationError("Underlying symbol is required")
    return text
