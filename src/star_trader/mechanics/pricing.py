"""Market pricing mechanics: pure calculations, no I/O."""
from __future__ import annotations

import math
import random
from typing import Iterable

from star_trader.models.commodity import Commodity, LegalStatus
from star_trader.models.event import EconomicEvent
from star_trader.models.market import DemandLevel, Market, SupplyLevel

# Final price band as a multiple of the commodity's base price.
PRICE_FLOOR = 0.2
PRICE_CEILING = 4.0

# Combined event multiplier band.
EVENT_MULT_MIN = 0.5
EVENT_MULT_MAX = 2.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def clamp_price(price: float, base_price: int) -> int:
    """Clamp to [0.2x, 4x] base price, round half up, and never go below 1."""
    bounded = max(base_price * PRICE_FLOOR, min(base_price * PRICE_CEILING, price))
    return max(1, round_half_up(bounded))


def legal_premium(legal_status: LegalStatus, security_factor: float) -> float:
    """Premium for contraband. Grows as security drops.

    Illegal goods range from 1.5x (max security) to 2.5x (lawless);
    restricted goods from 1.1x to 1.5x.
    """
    if legal_status == LegalStatus.ILLEGAL:
        return 1.5 + (1.0 - security_factor) * 1.0
    if legal_status == LegalStatus.RESTRICTED:
        return 1.1 + (1.0 - security_factor) * 0.4
    return 1.0


def volatility_factor(volatility: float, roll: float) -> float:
    """Jitter multiplier for a uniform *roll* in [0, 1)."""
    return 1.0 + (roll - 0.5) * volatility * 0.5


def event_price_multiplier(events: Iterable[EconomicEvent], commodity_id: str, station_id: str) -> float:
    """Product of the price multipliers of every event touching this commodity at this station."""
    multiplier = 1.0
    for event in events:
        if event.applies_to(commodity_id, station_id):
            multiplier *= event.effects.price_multiplier
    return multiplier


def event_availability_multiplier(events: Iterable[EconomicEvent], commodity_id: str, station_id: str) -> float:
    multiplier = 1.0
    for event in events:
        if event.applies_to(commodity_id, station_id):
            multiplier *= event.effects.availability_multiplier
    return multiplier


def calculate_price(
    commodity: Commodity,
    market: Market,
    rng: random.Random | None = None,
    event_multiplier: float = 1.0,
    actor_multiplier: float | None = None,
) -> int:
    """Calculate the current unit price of *commodity* at *market*.

    Args:
        commodity: Catalog entry for the commodity.
        market: Market whose demand factors shape the price.
        rng: Random source for the volatility jitter.
        event_multiplier: Raw product of active event price multipliers;
            capped to [0.5, 2.0] here.
        actor_multiplier: Discount/markup computed by an external
            collaborator (trading skill, faction standing).

    Returns:
        Integer price within [0.2x, 4x] base price, minimum 1.
    """
    rng = rng or random
    factors = market.demand_factors

    price = float(commodity.base_price)
    price *= factors.station_type_modifier
    price *= 0.5 + factors.population_factor
    price *= 0.8 + factors.security_level_factor * 0.4
    price *= legal_premium(commodity.legal_status, factors.security_level_factor)
    price *= volatility_factor(commodity.volatility, rng.random())
    price *= min(EVENT_MULT_MAX, max(EVENT_MULT_MIN, event_multiplier))
    if actor_multiplier is not None:
        price *= actor_multiplier
    return clamp_price(price, commodity.base_price)


def supply_demand_ratio(available: int, demand: int) -> float:
    return available / max(1, demand)


def supply_demand_multiplier(available: int, demand: int) -> float:
    """Price multiplier from current stock vs. demand.

    Oversupply → cheaper. Shortage → pricier.
    Returns a multiplier between 0.7 and 1.8.
    """
    ratio = supply_demand_ratio(available, demand)
    if ratio > 2.0:
        return 0.7  # Oversupply
    elif ratio > 1.5:
        return 0.85
    elif ratio < 0.3:
        return 1.8  # Critical shortage
    elif ratio < 0.7:
        return 1.3  # Shortage
    return 1.0


def classify_supply(available: int, demand: int) -> SupplyLevel:
    ratio = supply_demand_ratio(available, demand)
    if ratio > 3.0:
        return SupplyLevel.OVERSUPPLY
    elif ratio < 0.2:
        return SupplyLevel.CRITICAL
    elif ratio < 0.7:
        return SupplyLevel.SHORTAGE
    return SupplyLevel.NORMAL


def classify_demand(available: int, demand: int) -> DemandLevel:
    if demand > available * 3:
        return DemandLevel.DESPERATE
    elif demand > available * 1.5:
        return DemandLevel.HIGH
    elif demand < available * 0.3:
        return DemandLevel.NONE
    elif demand < available * 0.7:
        return DemandLevel.LOW
    return DemandLevel.NORMAL
