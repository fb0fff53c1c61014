"""Economic event generation and expiry: pure functions, no I/O."""
from __future__ import annotations

import random
from typing import Sequence

from star_trader.mechanics.sim_clock import hours_to_ms
from star_trader.models.event import EconomicEvent, EconomicEventType, EventEffects

EVENT_PROBABILITY = 0.01
MAX_AFFECTED_STATIONS = 3

SEVERITY_RANGE = (0.3, 0.8)
DURATION_HOURS_RANGE = (4.0, 24.0)

EVENT_EFFECTS: dict[EconomicEventType, EventEffects] = {
    EconomicEventType.SUPPLY_SHORTAGE: EventEffects(price_multiplier=1.0, availability_multiplier=0.3),
    EconomicEventType.DEMAND_SPIKE: EventEffects(price_multiplier=1.5, availability_multiplier=1.0),
    EconomicEventType.PRICE_CRASH: EventEffects(price_multiplier=0.5, availability_multiplier=1.0),
}


def purge_expired(events: Sequence[EconomicEvent], now: int) -> list[EconomicEvent]:
    """Drop events whose end_time has passed."""
    return [e for e in events if e.is_active(now)]


def generate_event(
    commodity_ids: Sequence[str],
    station_ids: Sequence[str],
    now: int,
    rng: random.Random | None = None,
    event_id: str | None = None,
) -> EconomicEvent | None:
    """Create one random event touching one commodity at up to three stations.

    Returns None when there is nothing to affect.
    """
    rng = rng or random
    if not commodity_ids or not station_ids:
        return None

    event_type = rng.choice(list(EconomicEventType))
    severity = rng.uniform(*SEVERITY_RANGE)
    duration = rng.uniform(*DURATION_HOURS_RANGE)
    commodity_id = rng.choice(list(commodity_ids))
    stations = rng.sample(list(station_ids), min(MAX_AFFECTED_STATIONS, len(station_ids)))

    return EconomicEvent(
        id=event_id or f"event-{now}",
        type=event_type,
        affected_commodities=[commodity_id],
        affected_stations=stations,
        severity=severity,
        duration=duration,
        start_time=now,
        end_time=now + hours_to_ms(duration),
        description=f"Market {event_type.value} affecting regional trade in {commodity_id}",
        effects=EVENT_EFFECTS[event_type].model_copy(),
    )


def roll_for_event(
    commodity_ids: Sequence[str],
    station_ids: Sequence[str],
    now: int,
    probability: float = EVENT_PROBABILITY,
    rng: random.Random | None = None,
    event_id: str | None = None,
) -> EconomicEvent | None:
    """Roll once per economic cycle; returns a new event or None."""
    rng = rng or random
    if rng.random() >= probability:
        return None
    return generate_event(commodity_ids, station_ids, now, rng=rng, event_id=event_id)
