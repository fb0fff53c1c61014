"""Shared fixtures for the Star Trader test suite."""
from __future__ import annotations

import random

import pytest

from star_trader.config import EconomyConfig
from star_trader.content.loader import load_all_commodities, load_galaxy, load_station_types
from star_trader.mechanics.sim_clock import SimClock
from star_trader.mechanics.station_profiles import ProfileBook
from star_trader.models.commodity import Commodity
from star_trader.models.market import DemandFactors, Market, MarketCommodity
from star_trader.models.station import Position, Station
from star_trader.systems.market_engine import MarketEngine
from star_trader.systems.topology import SectorTopology


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


@pytest.fixture(scope="session")
def catalog() -> dict[str, Commodity]:
    return load_all_commodities()


@pytest.fixture(scope="session")
def profiles() -> ProfileBook:
    return ProfileBook(load_station_types())


@pytest.fixture
def clock() -> SimClock:
    return SimClock()


@pytest.fixture
def config() -> EconomyConfig:
    # No random events unless a test asks for them.
    return EconomyConfig(event_probability=0.0)


@pytest.fixture
def engine(catalog, profiles, config, seeded_rng, clock) -> MarketEngine:
    return MarketEngine(catalog=catalog, profiles=profiles, config=config, rng=seeded_rng, clock=clock)


@pytest.fixture
def topology() -> SectorTopology:
    return SectorTopology.from_galaxy(load_galaxy("frontier"))


@pytest.fixture
def trade_station() -> Station:
    return Station(id="alpha-trade", name="Alpha Exchange", type="trade", position=Position(x=0, y=0))


@pytest.fixture
def iron_ore() -> Commodity:
    return Commodity(id="iron-ore", name="Iron Ore", category="raw-materials", base_price=45, volatility=0.1)


def make_market(station_id: str, version: int = 0, **entries: tuple[int, int, int]) -> Market:
    """Build a market from ``commodity=(available, demand, price)`` keyword triples.

    Underscores in keyword names become dashes (``iron_ore`` -> ``iron-ore``).
    """
    market = Market(station_id=station_id, demand_factors=DemandFactors(), version=version)
    for key, (available, demand, price) in entries.items():
        commodity_id = key.replace("_", "-")
        market.commodities[commodity_id] = MarketCommodity(
            commodity_id=commodity_id, available=available, demand=demand, current_price=price
        )
    return market


@pytest.fixture
def market_factory():
    return make_market
