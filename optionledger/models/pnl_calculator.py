"""
P&L Calculator
Realized P&L for closing transactions and strategy-level roll-ups.

Realized P&L is always opening amount + closing amount with the signs the
transaction code resolver produces, so a short opened for a credit and bought
back for less shows a gain, and a long sold for more than it cost does too.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from optionledger.errors import ValidationError
from optionledger.models.strategy_metrics import compute_strategy_metrics
from optionledger.models.transaction_codes import (
    LegTransaction, TransactionCode, coerce_close_status,
)
from optionledger.schemas import (
    CloseStatus, PositionStatus, Position, Strategy, StrategyStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class PnLResult:
    """Result of P&L calculation"""
    realized_pnl: float
    unrealized_pnl: float
    total_pnl: float = 0.0

    def __post_init__(self):
        self.total_pnl = self.realized_pnl + self.unrealized_pnl


@dataclass(frozen=True)
class StrategyCloseSummary:
    """Strategy-level totals derived from its legs"""
    status: StrategyStatus
    closed_at_status: Optional[PositionStatus]  # closed / expired / assigned, None while open
    realized_pl: float
    unrealized_pl: float
    total_opening_cost: float               # copied from the record, never recomputed
    total_closing_proceeds: float


def realized_pl_for_close(position: Position, closing: LegTransaction) -> float:
    """Realized P&L of one closing transaction against its position.

    `total_cost_basis` is the cost of the contracts still open, so it is
    prorated by the share of current_quantity being closed, then the signed
    closing amount is added.

    Raises:
        ValidationError: If the transaction is an opening code, does not match
                         the position's original side, or closes more
                         contracts than are open.
    """
    cost_share = _closed_cost_share(position, closing)
    realized = cost_share + closing.amount

    logger.debug(
        f"Realized P&L for {position.position_id or 'position'}: "
        f"cost share {cost_share:.2f} + close {closing.amount:.2f} = {realized:.2f}"
    )
    return realized


def apply_close(
    position: Position,
    closing: LegTransaction,
    close_status: CloseStatus = CloseStatus.CLOSED,
) -> Position:
    """The position as it stands after `closing`.

    The closed share of the cost basis leaves total_cost_basis, so the
    remainder stays the cost of the contracts still open. Stored quotes are
    cleared.
    """
    close_status = coerce_close_status(close_status)
    cost_share = _closed_cost_share(position, closing)
    remaining = position.current_quantity - closing.quantity

    if remaining > 0:
        status = PositionStatus.OPEN
    else:
        status = PositionStatus(close_status.value)

    return position.model_copy(update={
        "current_quantity": remaining,
        "total_cost_basis": position.total_cost_basis - cost_share,
        "total_closing_amount": position.total_closing_amount + closing.amount,
        "realized_pl": position.realized_pl + cost_share + closing.amount,
        "unrealized_pl": None,
        "market_value": None,
        "status": status,
    })


def _closed_cost_share(position: Position, closing: LegTransaction) -> float:
    if closing.transaction_code.is_opening:
        raise ValidationError(
            f"{closing.transaction_code.value} is an opening code, not a close"
        )

    expected = TransactionCode.STC if position.is_long else TransactionCode.BTC
    if closing.transaction_code != expected:
        raise ValidationError(
            f"A {position.side.value} position closes with {expected.value}, "
            f"got {closing.transaction_code.value}"
        )

    if position.current_quantity <= 0:
        raise ValidationError(
            f"Position {position.position_id or position.strike} has no open contracts"
        )
    if closing.quantity > position.current_quantity:
        raise ValidationError(
            f"Cannot close {closing.quantity} contracts, only {position.current_quantity} open"
        )

    return position.total_cost_basis * closing.quantity / position.current_quantity


def summarize_strategy(strategy: Strategy, positions: Iterable[Position]) -> StrategyCloseSummary:
    """Roll the strategy's legs up into strategy-level P&L and status.

    The strategy is closed only once no leg is open. While open, unrealized
    P&L comes from the reconciled metrics of the remaining open legs.
    """
    positions = list(positions)
    open_legs = [p for p in positions if p.is_open]

    realized = sum((p.realized_pl for p in positions), 0.0)
    proceeds = sum((p.total_closing_amount for p in positions), 0.0)

    if open_legs or not positions:
        metrics = compute_strategy_metrics(open_legs, strategy)
        return StrategyCloseSummary(
            status=StrategyStatus.OPEN,
            closed_at_status=None,
            realized_pl=realized,
            unrealized_pl=metrics.unrealized_pl if open_legs else 0.0,
            total_opening_cost=strategy.total_opening_cost,
            total_closing_proceeds=proceeds,
        )

    return StrategyCloseSummary(
        status=StrategyStatus.CLOSED,
        closed_at_status=_closed_at_status(positions),
        realized_pl=realized,
        unrealized_pl=0.0,
        total_opening_cost=strategy.total_opening_cost,
        total_closing_proceeds=proceeds,
    )


def calculate_strategy_pnl(strategy: Strategy, positions: Iterable[Position]) -> PnLResult:
    """Realized + unrealized P&L for a strategy."""
    summary = summarize_strategy(strategy, positions)
    return PnLResult(
        realized_pnl=summary.realized_pl,
        unrealized_pnl=summary.unrealized_pl,
    )


def _closed_at_status(positions: List[Position]) -> PositionStatus:
    statuses = {p.status for p in positions}
    if PositionStatus.EXPIRED in statuses:
        return PositionStatus.EXPIRED
    if PositionStatus.ASSIGNED in statuses or PositionStatus.EXERCISED in statuses:
        return PositionStatus.ASSIGNED
    return PositionStatus.CLOSED
