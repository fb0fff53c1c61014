"""Trade route math: distance, travel time, risk and profit. Pure functions, no I/O."""
from __future__ import annotations

import math
import random
from typing import Iterable

from star_trader.models.route import TradeRoute
from star_trader.models.station import Position

SHIP_SPEED = 100.0  # distance units per hour
MIN_TRAVEL_HOURS = 0.5

BASE_RISK = 0.10
MAX_DISTANCE_RISK = 0.30
RISK_FLOOR = 0.05
RISK_CEILING = 0.90

# Station type risk adjustments: patrols make military space safer, mining
# outposts sit in contested belts.
MILITARY_RISK_ADJUSTMENT = -0.05
MINING_RISK_ADJUSTMENT = 0.10

MIN_RISK_DIVISOR = 0.1


def euclidean_distance(a: Position, b: Position) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def travel_time(distance: float, rng: random.Random | None = None) -> float:
    """Hours to cover *distance*, with ±20% variation and a 30-minute floor."""
    rng = rng or random
    variation = 0.8 + rng.random() * 0.4
    return max(MIN_TRAVEL_HOURS, distance / SHIP_SPEED * variation)


def station_type_risk(origin_type: str, destination_type: str) -> float:
    adjustment = 0.0
    types = (origin_type, destination_type)
    if "military" in types:
        adjustment += MILITARY_RISK_ADJUSTMENT
    if "mining" in types:
        adjustment += MINING_RISK_ADJUSTMENT
    return adjustment


def route_risk(
    distance: float,
    origin_type: str,
    destination_type: str,
    rng: random.Random | None = None,
) -> float:
    """Piracy/incident risk in [0.05, 0.90]."""
    rng = rng or random
    risk = BASE_RISK
    risk += min(MAX_DISTANCE_RISK, distance / 1000)
    risk += station_type_risk(origin_type, destination_type)
    risk += rng.random() * 0.1
    return max(RISK_FLOOR, min(RISK_CEILING, risk))


def profit_per_unit(buy_price: float, sell_price: float, gate_cost: float = 0.0, available: int = 1) -> float:
    """Unit margin after amortizing the gate toll over the origin's stock."""
    return sell_price - buy_price - gate_cost / max(1, available)


def profit_margin(unit_profit: float, buy_price: float) -> float:
    """Margin as a percentage of the buy price."""
    return unit_profit / max(1, buy_price) * 100


def route_volume(available: int, demand: int) -> int:
    return max(0, min(available, demand))


def profit_per_hour(unit_profit: float, volume: int, hours: float) -> float:
    return unit_profit * volume / max(1.0, hours)


def risk_adjusted_profit(route: TradeRoute) -> float:
    return route.profit_per_hour / max(MIN_RISK_DIVISOR, route.risk)


def top_by_profit(routes: Iterable[TradeRoute], limit: int) -> list[TradeRoute]:
    return sorted(routes, key=lambda r: r.profit_per_hour, reverse=True)[:limit]


def top_by_risk_adjusted(routes: Iterable[TradeRoute], limit: int) -> list[TradeRoute]:
    return sorted(routes, key=risk_adjusted_profit, reverse=True)[:limit]
