"""Market engine: owns every station market, runs the hourly economic cycle and executes trades."""
from __future__ import annotations

import json
import logging
import random
from typing import Any, Mapping

from star_trader.config import EconomyConfig
from star_trader.content.loader import load_all_commodities, load_station_types
from star_trader.mechanics import events as event_mechanics
from star_trader.mechanics.pricing import (
    calculate_price,
    clamp_price,
    classify_demand,
    classify_supply,
    event_availability_multiplier,
    event_price_multiplier,
    round_half_up,
    supply_demand_multiplier,
)
from star_trader.mechanics.sim_clock import MS_PER_HOUR, SimClock, hours_to_ms
from star_trader.mechanics.station_profiles import (
    DEFAULT_SECURITY_LEVEL,
    ProfileBook,
    StationProfile,
    admitted_commodities,
    build_demand_factors,
    determine_wealth_level,
    initial_availability,
    initial_demand,
    roll_credits,
    roll_economic_factors,
    roll_population,
    roll_restock_time,
)
from star_trader.models.commodity import Commodity
from star_trader.models.event import EconomicEvent
from star_trader.models.market import Market, MarketCommodity, PricePoint, TradeResult
from star_trader.models.station import StarSystem, Station, StationEconomics

logger = logging.getLogger(__name__)

# Stations want to restock after buying from a trader.
SELL_DEMAND_FACTOR = 0.8


class MarketEngine:
    """Explicit store of markets, station economics and active events.

    Driven by an external game loop calling ``update(delta_ms)`` once per tick.
    Not thread-safe: ``update`` and ``execute_trade`` must not interleave.
    """

    def __init__(
        self,
        catalog: Mapping[str, Commodity] | None = None,
        profiles: ProfileBook | None = None,
        config: EconomyConfig | None = None,
        rng: random.Random | None = None,
        clock: SimClock | None = None,
    ) -> None:
        self.config = config or EconomyConfig()
        self.catalog: dict[str, Commodity] = dict(catalog) if catalog is not None else load_all_commodities()
        self.profiles = profiles or ProfileBook(load_station_types())
        self.rng = rng or random.Random(self.config.seed)
        self.clock = clock or SimClock()

        self._markets: dict[str, Market] = {}
        self._economics: dict[str, StationEconomics] = {}
        self._events: list[EconomicEvent] = []
        self._event_counter = 0
        self.last_update = self.clock.now()

    @property
    def now(self) -> int:
        return self.clock.now()

    @property
    def update_interval_ms(self) -> int:
        return hours_to_ms(self.config.update_interval_hours)

    # -- Initialization --

    def initialize_station_economics(
        self,
        station: Station,
        system: StarSystem | Mapping[str, Any] | None = None,
    ) -> StationEconomics:
        """Create (or replace) the economy and market for *station*."""
        profile = self.profiles.get(station.type)
        population = roll_population(profile, self.rng)
        security_level = _security_level(system)

        economics = StationEconomics(
            station_id=station.id,
            station_type=station.type,
            population=population,
            wealth_level=determine_wealth_level(profile, self.rng),
            produces=self.profiles.production(station.type),
            consumes=self.profiles.consumption(station.type),
            economic_factors=roll_economic_factors(self.rng),
            credits=roll_credits(profile, self.rng),
        )
        self._economics[station.id] = economics
        self._markets[station.id] = self._initialize_market(station, profile, economics, security_level)

        logger.debug(
            f"Initialized {station.type} station {station.id}: pop={population}, "
            f"security={security_level}, commodities={len(self._markets[station.id].commodities)}"
        )
        return economics

    def _initialize_market(
        self,
        station: Station,
        profile: StationProfile,
        economics: StationEconomics,
        security_level: int,
    ) -> Market:
        now = self.now
        previous = self._markets.get(station.id)
        market = Market(
            station_id=station.id,
            last_update=now,
            demand_factors=build_demand_factors(profile, economics.population, security_level),
            version=previous.version + 1 if previous else 0,
        )
        for commodity in admitted_commodities(self.catalog, security_level, self.rng):
            production = economics.production_for(commodity.id)
            market.commodities[commodity.id] = MarketCommodity(
                commodity_id=commodity.id,
                available=initial_availability(commodity, station.type, self.rng),
                demand=initial_demand(commodity, station.type, self.rng),
                current_price=self.calculate_price(commodity, market),
                price_history=[PricePoint(timestamp=now, price=commodity.base_price, volume=0)],
                production_rate=production.base_rate * production.efficiency if production else 0.0,
                restock_time=roll_restock_time(self.rng),
            )
        return market

    # -- Pricing --

    def calculate_price(
        self,
        commodity: Commodity,
        market: Market,
        actor_multiplier: float | None = None,
    ) -> int:
        """Price *commodity* at *market* with the currently active events applied."""
        return calculate_price(
            commodity,
            market,
            rng=self.rng,
            event_multiplier=event_price_multiplier(self._active_events(), commodity.id, market.station_id),
            actor_multiplier=actor_multiplier,
        )

    def quote_price(
        self,
        station_id: str,
        commodity_id: str,
        actor_multiplier: float | None = None,
    ) -> int | None:
        """Fresh quote for a trader whose skills/standing yield *actor_multiplier*.

        Returns None when the station has no market or does not stock the commodity.
        """
        market = self._markets.get(station_id)
        commodity = self.catalog.get(commodity_id)
        if market is None or commodity is None or commodity_id not in market.commodities:
            return None
        return self.calculate_price(commodity, market, actor_multiplier)

    # -- Simulation --

    def update(self, delta_ms: int | float) -> bool:
        """Advance simulated time; run an economic cycle once per update interval.

        Returns True when a cycle ran.
        """
        now = self.clock.advance(delta_ms)
        elapsed = now - self.last_update
        if elapsed < self.update_interval_ms:
            return False

        hours = elapsed / MS_PER_HOUR
        for market in self._markets.values():
            economics = self._economics.get(market.station_id)
            if economics is None:
                continue
            self._update_market(market, economics, hours, now)
        self._update_events(now)
        self.last_update = now

        logger.debug(f"Economic cycle at {now}: {len(self._markets)} markets, {hours:.2f}h elapsed")
        return True

    def _update_market(self, market: Market, economics: StationEconomics, hours: float, now: int) -> None:
        for commodity_id, entry in market.commodities.items():
            commodity = self.catalog.get(commodity_id)
            if commodity is None:
                continue
            self._update_supply(entry, economics, market.station_id, hours)
            self._update_demand(entry, economics, hours)
            self._update_price(entry, commodity, market, now)
            self._update_levels(entry)
        market.touch(now)

    def _update_supply(self, entry: MarketCommodity, economics: StationEconomics, station_id: str, hours: float) -> None:
        production = economics.production_for(entry.commodity_id)
        if production is None:
            return
        availability = event_availability_multiplier(self._active_events(), entry.commodity_id, station_id)
        produced = (
            production.base_rate
            * production.efficiency
            * economics.economic_factors.efficiency
            * hours
            * availability
        )
        entry.available += max(0, round_half_up(produced))
        entry.production_rate = production.base_rate * production.efficiency

    def _update_demand(self, entry: MarketCommodity, economics: StationEconomics, hours: float) -> None:
        consumption = economics.consumption_for(entry.commodity_id)
        if consumption is None:
            return
        consumed = consumption.base_rate * hours
        entry.demand += round_half_up(consumed)
        # The station draws on its own stock first.
        entry.available = max(0, entry.available - round_half_up(min(consumed, entry.available)))

    def _update_price(self, entry: MarketCommodity, commodity: Commodity, market: Market, now: int) -> None:
        multiplier = supply_demand_multiplier(entry.available, entry.demand)
        price = clamp_price(self.calculate_price(commodity, market) * multiplier, commodity.base_price)

        entry.price_history.append(PricePoint(timestamp=now, price=price, volume=0))
        limit = self.config.price_history_limit
        if len(entry.price_history) > limit:
            entry.price_history = entry.price_history[-limit:]
        entry.current_price = price

    @staticmethod
    def _update_levels(entry: MarketCommodity) -> None:
        entry.supply_level = classify_supply(entry.available, entry.demand)
        entry.demand_level = classify_demand(entry.available, entry.demand)

    def _update_events(self, now: int) -> None:
        before = len(self._events)
        self._events = event_mechanics.purge_expired(self._events, now)
        if len(self._events) < before:
            logger.debug(f"Expired {before - len(self._events)} economic event(s)")

        event = event_mechanics.roll_for_event(
            list(self.catalog),
            list(self._economics),
            now,
            probability=self.config.event_probability,
            rng=self.rng,
            event_id=f"event-{now}-{self._event_counter}",
        )
        if event is not None:
            self._event_counter += 1
            self._events.append(event)
            logger.info(
                f"Economic event {event.type.value}: {event.affected_commodities} at "
                f"{event.affected_stations} for {event.duration:.1f}h"
            )

    def _active_events(self) -> list[EconomicEvent]:
        now = self.now
        return [e for e in self._events if e.is_active(now)]

    def add_event(self, event: EconomicEvent) -> None:
        """Register an externally scripted event (e.g. from a quest or news system)."""
        self._events.append(event)

    # -- Trading --

    def execute_trade(self, station_id: str, commodity_id: str, quantity: int, is_buying: bool) -> TradeResult:
        """Buy from (``is_buying``) or sell to a station at its current price."""
        market = self._markets.get(station_id)
        if market is None:
            return TradeResult(success=False, error="Market not found")

        entry = market.commodities.get(commodity_id)
        if entry is None:
            return TradeResult(success=False, error="Commodity not available")

        if quantity <= 0:
            return TradeResult(success=False, error="Invalid quantity")

        price = entry.current_price
        if is_buying:
            if quantity > entry.available:
                return TradeResult(success=False, error="Insufficient supply")
            entry.available -= quantity
            entry.demand = max(0, entry.demand - quantity)
        else:
            entry.available += quantity
            entry.demand += round_half_up(quantity * SELL_DEMAND_FACTOR)

        if entry.price_history:
            entry.price_history[-1].volume += quantity
        self._update_levels(entry)
        market.bump()

        economics = self._economics.get(station_id)
        if economics is not None:
            economics.trade_volume += quantity

        return TradeResult(success=True, total_cost=price * quantity, price_per_unit=price)

    # -- Accessors --

    def get_market(self, station_id: str) -> Market | None:
        return self._markets.get(station_id)

    def get_station_economics(self, station_id: str) -> StationEconomics | None:
        return self._economics.get(station_id)

    def get_active_events(self) -> list[EconomicEvent]:
        return list(self._events)

    def get_all_markets(self) -> dict[str, Market]:
        return dict(self._markets)

    def snapshot_markets(self) -> dict[str, Market]:
        """Deep copy of every market, for analyses that must not see later trades."""
        return {station_id: market.model_copy(deep=True) for station_id, market in self._markets.items()}

    # -- Save/load --

    def export_state(self) -> dict[str, Any]:
        """Plain, JSON-compatible state for the external save system."""
        return {
            "now": self.now,
            "last_update": self.last_update,
            "markets": {k: m.model_dump(mode="json") for k, m in self._markets.items()},
            "station_economics": {k: e.model_dump(mode="json") for k, e in self._economics.items()},
            "active_events": [e.model_dump(mode="json") for e in self._events],
        }

    def load_state(self, state: dict[str, Any] | str) -> None:
        """Replace engine state with a previously exported dict (or its JSON string).

        Everything is parsed and validated before any state is replaced, so a
        malformed save raises and leaves the current economy untouched.

        Raises:
            json.JSONDecodeError: *state* is a string that is not valid JSON.
            ValueError: the decoded state is not an object.
            pydantic.ValidationError: a market, economics or event record is invalid.
        """
        data = json.loads(state) if isinstance(state, str) else state
        if not isinstance(data, Mapping):
            raise ValueError(f"Economy state must be an object, got {type(data).__name__}")
        markets = {k: Market.model_validate(v) for k, v in data.get("markets", {}).items()}
        economics = {k: StationEconomics.model_validate(v) for k, v in data.get("station_economics", {}).items()}
        events = [EconomicEvent.model_validate(e) for e in data.get("active_events", [])]

        # Loaded versions must never collide with versions a route cache has already seen.
        for station_id, market in markets.items():
            current = self._markets.get(station_id)
            market.version = max(market.version, current.version if current else 0) + 1

        self._markets = markets
        self._economics = economics
        self._events = events
        self.clock.set(data.get("now", self.now))
        self.last_update = data.get("last_update", self.now)
        logger.info(f"Loaded economy state: {len(markets)} markets, {len(events)} active events")


def _security_level(system: StarSystem | Mapping[str, Any] | None) -> int:
    if system is None:
        return DEFAULT_SECURITY_LEVEL
    if isinstance(system, StarSystem):
        return system.security_level
    return system.get("security_level", DEFAULT_SECURITY_LEVEL)
