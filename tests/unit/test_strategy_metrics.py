"""Unit tests for strategy metrics reconciliation."""

import pytest

from optionledger.models.strategy_metrics import (
    compute_group_metrics,
    compute_strategy_metrics,
    gcd_quantities,
    leg_market_value,
    leg_unrealized_pl,
)

from tests.conftest import make_position, make_strategy


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _vertical(qty=1, long_value=100.0, short_value=140.0, strategy_id="strat-001"):
    """Bear call credit spread legs with explicit market values."""
    return [
        make_position(position_id="long", strike=155, side="long", quantity=qty,
                      price=0.80, market_value=long_value, strategy_id=strategy_id),
        make_position(position_id="short", strike=150, side="short", quantity=qty,
                      price=2.00, market_value=short_value, strategy_id=strategy_id),
    ]


# ---------------------------------------------------------------------------
# Strategy units
# ---------------------------------------------------------------------------

class TestStrategyUnits:
    def test_butterfly_two_units(self):
        assert gcd_quantities([2, 4, 2]) == 2

    def test_one_three_one(self):
        assert gcd_quantities([1, 3, 1]) == 1

    def test_empty(self):
        assert gcd_quantities([]) == 0

    def test_units_reported(self):
        legs = [
            make_position(position_id="a", strike=95, quantity=2),
            make_position(position_id="b", strike=100, side="short", quantity=4),
            make_position(position_id="c", strike=105, quantity=2),
        ]
        result = compute_strategy_metrics(legs)
        assert result.strategy_units == 2
        assert result.total_contracts == 8


# ---------------------------------------------------------------------------
# Leg-level values
# ---------------------------------------------------------------------------

class TestLegValues:
    def test_market_value_prefers_explicit(self):
        p = make_position(market_value=321.0, current_price=9.0)
        assert leg_market_value(p) == 321.0

    def test_market_value_from_current_price(self):
        p = make_position(quantity=2, current_price=1.5)
        assert leg_market_value(p) == pytest.approx(300.0)

    def test_market_value_falls_back_to_opening_price(self):
        p = make_position(quantity=1, price=2.5)
        assert leg_market_value(p) == pytest.approx(250.0)

    def test_long_leg_pl(self):
        p = make_position(side="long", price=2.0, current_price=3.0)
        assert leg_unrealized_pl(p) == pytest.approx(100.0)

    def test_short_leg_pl(self):
        p = make_position(side="short", price=2.0, current_price=3.0)
        assert leg_unrealized_pl(p) == pytest.approx(-100.0)

    def test_stored_pl_wins(self):
        p = make_position(unrealized_pl=42.0, current_price=99.0)
        assert leg_unrealized_pl(p) == 42.0


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

class TestReconciled:
    def test_opening_cost_minus_cost_to_close(self):
        strategy = make_strategy(total_opening_cost=120.0)
        result = compute_strategy_metrics(_vertical(), strategy)

        assert result.is_reconciled
        assert result.unrealized_pl == pytest.approx(80.0)
        assert result.reference_cost == pytest.approx(120.0)
        assert result.unrealized_pl_percent == pytest.approx(80.0 / 120.0 * 100)

    def test_debit_strategy(self):
        # Paid 200 to open; long leg now worth 300, short 50 -> +50
        legs = [
            make_position(position_id="l", side="long", market_value=300.0),
            make_position(position_id="s", strike=160, side="short", market_value=50.0),
        ]
        result = compute_strategy_metrics(legs, make_strategy(total_opening_cost=-200.0))
        assert result.unrealized_pl == pytest.approx(50.0)
        assert result.reference_cost == pytest.approx(200.0)

    def test_zero_opening_cost_gives_zero_percent(self):
        result = compute_strategy_metrics(_vertical(), make_strategy(total_opening_cost=0.0))
        assert result.unrealized_pl == pytest.approx(-40.0)
        assert result.unrealized_pl_percent == 0.0

    def test_opening_cost_is_not_modified(self):
        strategy = make_strategy(total_opening_cost=120.0)
        compute_strategy_metrics(_vertical(), strategy)
        assert strategy.total_opening_cost == 120.0

    def test_idempotent(self):
        legs = _vertical()
        strategy = make_strategy(total_opening_cost=120.0)
        assert compute_strategy_metrics(legs, strategy) == compute_strategy_metrics(legs, strategy)

    def test_strategy_id_defaults_to_record(self):
        result = compute_strategy_metrics(_vertical(), make_strategy(strategy_id="s-9"))
        assert result.strategy_id == "s-9"

    def test_call_and_put_flags(self):
        legs = _vertical() + [make_position(position_id="p", option_type="put", strike=140)]
        result = compute_strategy_metrics(legs, make_strategy())
        assert result.has_calls
        assert result.has_puts


class TestNaive:
    def test_sum_of_leg_pl(self):
        result = compute_strategy_metrics(_vertical())

        # long: 100 - 80 = 20; short: 200 - 140 = 60
        assert not result.is_reconciled
        assert result.unrealized_pl == pytest.approx(80.0)
        assert result.reference_cost == pytest.approx(280.0)

    def test_empty_group(self):
        result = compute_strategy_metrics([])
        assert result.total_contracts == 0
        assert result.unrealized_pl == 0.0
        assert result.unrealized_pl_percent == 0.0
        assert result.strategy_id is None


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

class TestGroupMetrics:
    def test_groups_by_strategy_id(self):
        positions = _vertical(strategy_id="s1") + [
            make_position(position_id="solo", strike=200),
        ]
        results = compute_group_metrics(positions, {"s1": make_strategy(strategy_id="s1", total_opening_cost=120.0)})

        assert [r.strategy_id for r in results] == ["s1", None]
        assert results[0].is_reconciled
        assert results[0].unrealized_pl == pytest.approx(80.0)
        assert not results[1].is_reconciled

    def test_missing_strategy_falls_back(self):
        results = compute_group_metrics(_vertical(strategy_id="s1"), {})
        assert len(results) == 1
        assert results[0].strategy_id == "s1"
        assert not results[0].is_reconciled

    def test_closed_positions_ignored(self):
        positions = [
            make_position(position_id="a", strategy_id="s1"),
            make_position(position_id="b", strategy_id="s1", status="expired", current_quantity=0),
        ]
        results = compute_group_metrics(positions)
        assert results[0].total_contracts == 1
