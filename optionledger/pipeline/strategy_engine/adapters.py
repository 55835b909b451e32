"""Adapters that bridge persisted Position records to the engine's OptionLeg type."""

from collections import defaultdict
from typing import Iterable, List

from optionledger.schemas import OptionLeg, Position


def positions_to_legs(positions: Iterable[Position]) -> List[OptionLeg]:
    """Convert open positions to aggregated OptionLeg objects.

    Positions sharing the same structural identity are merged:
    (option_type, strike, expiration, side)

    Only open positions with remaining quantity are included. The merged
    leg's price is the quantity-weighted average opening price.
    """
    quantities: dict[tuple, int] = defaultdict(int)
    premiums: dict[tuple, float] = defaultdict(float)
    order: list[tuple] = []

    for position in positions:
        if not position.is_open:
            continue

        key = (position.option_type, position.strike, position.expiration, position.side)
        if key not in quantities:
            order.append(key)
        quantities[key] += position.current_quantity
        premiums[key] += position.price * position.current_quantity

    legs = []
    for key in order:
        option_type, strike, expiration, side = key
        qty = quantities[key]
        legs.append(OptionLeg(
            option_type=option_type,
            strike=strike,
            expiration=expiration,
            side=side,
            quantity=qty,
            price=premiums[key] / qty,
        ))

    return legs
