"""Tests for src/star_trader/systems/route_analyzer.py."""
from __future__ import annotations

import math
import random

import pytest
from pydantic import ValidationError

from star_trader.config import EconomyConfig
from star_trader.mechanics.sim_clock import MS_PER_MINUTE, SimClock
from star_trader.models.station import Position, Station
from star_trader.systems.route_analyzer import RouteAnalyzer


@pytest.fixture
def stations() -> dict[str, Station]:
    return {
        "origin": Station(id="origin", type="trade", position=Position(x=0, y=0)),
        "dest": Station(id="dest", type="trade", position=Position(x=500, y=0)),
    }


@pytest.fixture
def iron_markets(market_factory):
    return {
        "origin": market_factory("origin", iron_ore=(100, 10, 100)),
        "dest": market_factory("dest", iron_ore=(0, 50, 125)),
    }


@pytest.fixture
def analyzer(clock, seeded_rng) -> RouteAnalyzer:
    return RouteAnalyzer(config=EconomyConfig(), rng=seeded_rng, clock=clock)


class TestIronOreScenario:
    def test_single_profitable_route(self, analyzer, iron_markets, stations):
        analysis = analyzer.analyze_routes(iron_markets, stations)
        assert len(analysis.routes) == 1
        route = analysis.routes[0]

        assert route.id == "origin-dest-iron-ore"
        assert route.profit_per_unit == 25
        assert route.profit_margin == pytest.approx(25.0)
        assert route.volume == 50
        assert route.total_profit == 1250
        assert route.distance == pytest.approx(500.0)
        assert 4.0 <= route.travel_time <= 6.0
        assert route.profit_per_hour == pytest.approx(1250 / route.travel_time)
        assert 200 <= route.profit_per_hour <= 312.5
        assert 0.05 <= route.risk <= 0.90
        assert route.requires_gate is False
        assert route.gate_id is None
        assert analysis.complete is True

    def test_no_route_without_stock(self, analyzer, market_factory, stations):
        markets = {
            "origin": market_factory("origin", iron_ore=(0, 10, 100)),
            "dest": market_factory("dest", iron_ore=(0, 50, 125)),
        }
        assert analyzer.analyze_routes(markets, stations).routes == ()

    def test_no_route_without_margin(self, analyzer, market_factory, stations):
        markets = {
            "origin": market_factory("origin", iron_ore=(100, 10, 100)),
            "dest": market_factory("dest", iron_ore=(100, 50, 100)),
        }
        assert analyzer.analyze_routes(markets, stations).routes == ()

    def test_commodity_must_trade_at_both_ends(self, analyzer, market_factory, stations):
        markets = {
            "origin": market_factory("origin", iron_ore=(100, 10, 100)),
            "dest": market_factory("dest", electronics=(0, 50, 900)),
        }
        assert analyzer.analyze_routes(markets, stations).routes == ()

    def test_markets_not_mutated(self, analyzer, iron_markets, stations):
        before = {k: m.model_dump() for k, m in iron_markets.items()}
        analyzer.analyze_routes(iron_markets, stations)
        assert {k: m.model_dump() for k, m in iron_markets.items()} == before

    def test_station_iterable_accepted(self, analyzer, iron_markets, stations):
        analysis = analyzer.analyze_routes(iron_markets, list(stations.values()))
        assert len(analysis.routes) == 1

    def test_missing_station_record_skips_pair(self, analyzer, market_factory, iron_markets, stations):
        iron_markets["ghost"] = market_factory("ghost", iron_ore=(0, 50, 500))
        analysis = analyzer.analyze_routes(iron_markets, stations)
        assert [r.id for r in analysis.routes] == ["origin-dest-iron-ore"]


class TestRanking:
    @pytest.fixture
    def many(self, market_factory):
        stations, markets = {}, {}
        rng = random.Random(3)
        for i in range(6):
            sid = f"s{i}"
            stations[sid] = Station(id=sid, type="trade", position=Position(x=rng.uniform(0, 900), y=rng.uniform(0, 900)))
            markets[sid] = market_factory(
                sid,
                iron_ore=(rng.randint(0, 200), rng.randint(0, 200), rng.randint(30, 90)),
                electronics=(rng.randint(0, 200), rng.randint(0, 200), rng.randint(200, 400)),
            )
        return markets, stations

    def test_no_unprofitable_routes(self, analyzer, many):
        analysis = analyzer.analyze_routes(*many)
        assert analysis.routes
        assert all(r.profit_per_unit > 0 for r in analysis.routes)

    def test_top_routes_sorted(self, analyzer, many):
        top = analyzer.analyze_routes(*many).top_routes
        values = [r.profit_per_hour for r in top]
        assert values == sorted(values, reverse=True)

    def test_risk_adjusted_sorted(self, analyzer, many):
        ranked = analyzer.analyze_routes(*many).risk_adjusted_routes
        values = [r.profit_per_hour / max(0.1, r.risk) for r in ranked]
        assert values == sorted(values, reverse=True)

    def test_top_count_limit(self, clock, seeded_rng, many):
        analyzer = RouteAnalyzer(config=EconomyConfig(top_route_count=3), rng=seeded_rng, clock=clock)
        analysis = analyzer.analyze_routes(*many)
        assert len(analysis.routes) > 3
        assert len(analysis.top_routes) == 3
        assert len(analysis.risk_adjusted_routes) == 3

    def test_recommendations_by_commodity(self, analyzer, many):
        picks = analyzer.get_route_recommendations("electronics", *many, limit=2)
        assert 0 < len(picks) <= 2
        assert all(r.commodity == "electronics" for r in picks)
        assert picks[0].profit_per_hour >= picks[-1].profit_per_hour

    def test_routes_from_station(self, analyzer, many):
        analysis = analyzer.analyze_routes(*many)
        origin = analysis.top_routes[0].origin
        picks = analyzer.get_routes_from_station(origin, *many)
        assert picks[0].id == analysis.top_routes[0].id
        assert all(r.origin == origin for r in picks)
        assert len(picks) <= 10

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_returns_nothing(self, analyzer, many, limit):
        assert analyzer.get_route_recommendations("electronics", *many, limit=limit) == []
        assert analyzer.get_routes_from_station("s0", *many, limit=limit) == []

    def test_default_limit_from_config(self, clock, seeded_rng, many):
        analyzer = RouteAnalyzer(config=EconomyConfig(recommendation_limit=1), rng=seeded_rng, clock=clock)
        assert len(analyzer.get_route_recommendations("electronics", *many)) == 1

    def test_queries_reuse_cached_analysis(self, analyzer, many):
        analyzer.analyze_routes(*many)
        analyzer.get_route_recommendations("iron-ore", *many)
        analyzer.get_routes_from_station("s0", *many)
        assert analyzer.analysis_count == 1


class TestCache:
    def test_identical_object_within_ttl(self, analyzer, iron_markets, stations, clock):
        first = analyzer.analyze_routes(iron_markets, stations)
        clock.advance(29 * MS_PER_MINUTE)
        second = analyzer.analyze_routes(iron_markets, stations)
        assert second is first
        assert analyzer.analysis_count == 1

    def test_expires_after_ttl(self, analyzer, iron_markets, stations, clock):
        first = analyzer.analyze_routes(iron_markets, stations)
        clock.advance(30 * MS_PER_MINUTE)
        assert analyzer.get_cached_analysis() is None
        second = analyzer.analyze_routes(iron_markets, stations)
        assert second is not first
        assert second.updated == 30 * MS_PER_MINUTE
        assert analyzer.analysis_count == 2

    def test_version_change_invalidates(self, analyzer, iron_markets, stations):
        first = analyzer.analyze_routes(iron_markets, stations)
        iron_markets["dest"].bump()
        assert analyzer.analyze_routes(iron_markets, stations) is not first
        assert analyzer.analysis_count == 2

    def test_clear_cache(self, analyzer, iron_markets, stations):
        first = analyzer.analyze_routes(iron_markets, stations)
        analyzer.clear_cache()
        assert analyzer.get_cached_analysis() is None
        assert analyzer.analyze_routes(iron_markets, stations) is not first

    def test_cached_analysis(self, analyzer, iron_markets, stations):
        assert analyzer.get_cached_analysis() is None
        analysis = analyzer.analyze_routes(iron_markets, stations)
        assert analyzer.get_cached_analysis() is analysis

    def test_analysis_is_frozen(self, analyzer, iron_markets, stations):
        analysis = analyzer.analyze_routes(iron_markets, stations)
        with pytest.raises(ValidationError):
            analysis.updated = 5

    def test_for_engine_shares_clock(self, engine, iron_markets, stations):
        analyzer = RouteAnalyzer.for_engine(engine)
        assert analyzer.clock is engine.clock
        assert analyzer.config is engine.config
        first = analyzer.analyze_routes(iron_markets, stations)
        engine.update(29 * MS_PER_MINUTE)
        assert analyzer.get_cached_analysis() is first
        engine.update(MS_PER_MINUTE)
        assert analyzer.get_cached_analysis() is None
        assert analyzer.analyze_routes(iron_markets, stations).updated == 30 * MS_PER_MINUTE

    def test_private_clock_only_moves_when_advanced(self, seeded_rng, iron_markets, stations):
        analyzer = RouteAnalyzer(rng=seeded_rng)
        first = analyzer.analyze_routes(iron_markets, stations)
        assert analyzer.analyze_routes(iron_markets, stations) is first
        analyzer.clock.advance(30 * MS_PER_MINUTE)
        assert analyzer.analyze_routes(iron_markets, stations) is not first

    def test_time_budget_truncates_and_skips_cache(self, clock, seeded_rng, iron_markets, stations):
        analyzer = RouteAnalyzer(config=EconomyConfig(time_budget_seconds=1e-9), rng=seeded_rng, clock=clock)
        analysis = analyzer.analyze_routes(iron_markets, stations)
        assert analysis.complete is False
        assert analyzer.get_cached_analysis() is None
        analyzer.analyze_routes(iron_markets, stations)
        assert analyzer.analysis_count == 2


class TestGateRouting:
    @pytest.fixture
    def cross_markets(self, market_factory):
        return {
            "ceres-mine": market_factory("ceres-mine", iron_ore=(100, 10, 40)),
            "tau-exchange": market_factory("tau-exchange", iron_ore=(0, 80, 100)),
        }

    def _analyzer(self, topology, **config) -> RouteAnalyzer:
        return RouteAnalyzer(topology, EconomyConfig(**config), rng=random.Random(1), clock=SimClock())

    def test_cross_sector_uses_gate(self, topology, cross_markets):
        analysis = self._analyzer(topology).analyze_routes(cross_markets, topology.stations)
        assert len(analysis.routes) == 1
        route = analysis.routes[0]
        assert route.requires_gate is True
        assert route.gate_id == "helix-gate"
        assert route.gate_cost == 500
        assert route.profit_per_unit == pytest.approx(55.0)  # 100 - 40 - 500 / 100
        assert route.distance == pytest.approx(math.hypot(280, 40) + math.hypot(40, 20))

    def test_inactive_gate_excluded_by_default(self, topology, cross_markets):
        topology.set_gate_active("helix-gate", False)
        analysis = self._analyzer(topology).analyze_routes(cross_markets, topology.stations)
        assert analysis.routes == ()

    def test_inactive_gate_direct_fallback(self, topology, cross_markets):
        topology.set_gate_active("helix-gate", False)
        analysis = self._analyzer(topology, gate_fallback="direct").analyze_routes(cross_markets, topology.stations)
        route = analysis.routes[0]
        assert route.requires_gate is False
        assert route.gate_cost is None
        assert route.profit_per_unit == 60
        assert route.distance == pytest.approx(math.hypot(1420, 880))

    def test_same_sector_is_direct(self, topology, market_factory):
        markets = {
            "ceres-mine": market_factory("ceres-mine", iron_ore=(100, 10, 40)),
            "luna-refinery": market_factory("luna-refinery", iron_ore=(0, 80, 60)),
        }
        route = self._analyzer(topology).analyze_routes(markets, topology.stations).routes[0]
        assert route.requires_gate is False
        assert route.distance == pytest.approx(math.hypot(140, 120))

    def test_no_topology_treats_galaxy_as_one_sector(self, topology, cross_markets):
        analyzer = RouteAnalyzer(config=EconomyConfig(), rng=random.Random(1), clock=SimClock())
        route = analyzer.analyze_routes(cross_markets, topology.stations).routes[0]
        assert route.requires_gate is False
        assert route.distance == pytest.approx(math.hypot(1420, 880))
