"""
Shared pytest fixtures and record factory helpers for OptionLedger tests.

Everything under test is pure, so there is no database: factories build
pydantic records directly.
"""

import pytest
from datetime import date

from loguru import logger

from optionledger.schemas import OptionLeg, Position, Strategy


EXP = date(2026, 3, 20)
EXP_LATER = date(2026, 4, 17)


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def log_messages():
    """Capture loguru output emitted during a test."""
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


# ---------------------------------------------------------------------------
# Record factory helpers
# ---------------------------------------------------------------------------

def make_leg(
    *,
    option_type="call",
    strike=150.0,
    side="long",
    quantity=1,
    price=2.50,
    expiration=EXP,
    fee=0.0,
):
    """Build a validated OptionLeg."""
    return OptionLeg(
        option_type=option_type,
        strike=strike,
        side=side,
        quantity=quantity,
        price=price,
        expiration=expiration,
        fee=fee,
    )


def make_position(
    *,
    position_id="pos-001",
    symbol="AAPL",
    option_type="call",
    strike=150.0,
    side="long",
    quantity=1,
    current_quantity=None,
    price=2.50,
    expiration=EXP,
    total_cost_basis=None,
    total_closing_amount=0.0,
    realized_pl=0.0,
    unrealized_pl=None,
    market_value=None,
    current_price=None,
    status="open",
    strategy_id=None,
):
    """Build a Position. Cost basis defaults to the signed opening amount."""
    if total_cost_basis is None:
        sign = -1 if side == "long" else 1
        total_cost_basis = sign * quantity * price * 100
    return Position(
        position_id=position_id,
        symbol=symbol,
        option_type=option_type,
        strike=strike,
        side=side,
        quantity=quantity,
        opening_quantity=quantity,
        current_quantity=quantity if current_quantity is None else current_quantity,
        price=price,
        expiration=expiration,
        total_cost_basis=total_cost_basis,
        total_closing_amount=total_closing_amount,
        realized_pl=realized_pl,
        unrealized_pl=unrealized_pl,
        market_value=market_value,
        current_price=current_price,
        status=status,
        strategy_id=strategy_id,
    )


def make_strategy(
    *,
    strategy_id="strat-001",
    strategy_type="vertical_spread",
    underlying_symbol="AAPL",
    direction=None,
    leg_count=2,
    expiration_date=EXP,
    total_opening_cost=0.0,
    status="open",
):
    """Build a Strategy record."""
    return Strategy(
        strategy_id=strategy_id,
        strategy_type=strategy_type,
        underlying_symbol=underlying_symbol,
        direction=direction,
        leg_count=leg_count,
        expiration_date=expiration_date,
        total_opening_cost=total_opening_cost,
        status=status,
    )
