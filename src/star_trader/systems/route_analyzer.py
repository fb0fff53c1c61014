"""Route analyzer: enumerates station pairs, scores commodity arbitrage and caches ranked results."""
from __future__ import annotations

import logging
import random
import time
from typing import TYPE_CHECKING, Iterable, Mapping

from star_trader.config import EconomyConfig, GateFallback
from star_trader.mechanics import routes as route_math
from star_trader.mechanics.sim_clock import SimClock, minutes_to_ms
from star_trader.models.market import Market
from star_trader.models.route import RouteAnalysis, TradeRoute
from star_trader.models.station import Station
from star_trader.systems.topology import GateRouteProvider

if TYPE_CHECKING:
    from star_trader.systems.market_engine import MarketEngine

logger = logging.getLogger(__name__)

Fingerprint = tuple[tuple[str, int], ...]


class RouteAnalyzer:
    """Computes trade routes from market snapshots.

    Never mutates a Market. Analyses are keyed on the markets' versions and
    reused for ``route_cache_ttl_minutes`` of simulated time.

    Pass the MarketEngine's ``clock`` so the cache ages with the simulation.
    Without one the analyzer keeps a private SimClock that only moves when
    the caller advances it; until then cached analyses never expire and only
    a market version change or ``clear_cache()`` forces a recompute.
    """

    def __init__(
        self,
        topology: GateRouteProvider | None = None,
        config: EconomyConfig | None = None,
        rng: random.Random | None = None,
        clock: SimClock | None = None,
    ) -> None:
        self.topology = topology
        self.config = config or EconomyConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.clock = clock or SimClock()

        self._cache: dict[Fingerprint, RouteAnalysis] = {}
        self.analysis_count = 0

    @classmethod
    def for_engine(cls, engine: MarketEngine, topology: GateRouteProvider | None = None) -> RouteAnalyzer:
        """Analyzer sharing *engine*'s clock, config and rng."""
        return cls(topology, config=engine.config, rng=engine.rng, clock=engine.clock)

    def _limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.recommendation_limit
        return max(0, limit)

    @property
    def ttl_ms(self) -> int:
        return minutes_to_ms(self.config.route_cache_ttl_minutes)

    def _is_fresh(self, analysis: RouteAnalysis) -> bool:
        return self.clock.now() - analysis.updated < self.ttl_ms

    # -- Analysis --

    def analyze_routes(
        self,
        markets: Mapping[str, Market],
        stations: Mapping[str, Station] | Iterable[Station],
    ) -> RouteAnalysis:
        """Rank every profitable (origin, destination, commodity) combination.

        Args:
            markets: Market per station id. Pass ``engine.snapshot_markets()``
                for a view that later trades cannot disturb.
            stations: Station records, as a mapping by id or a plain iterable.

        Returns:
            A frozen RouteAnalysis. Returned from cache when no market changed
            and the cached analysis is younger than the TTL.
        """
        station_index = _index_stations(stations)
        fingerprint = _fingerprint(markets)

        cached = self._cache.get(fingerprint)
        if cached is not None and self._is_fresh(cached):
            return cached

        now = self.clock.now()
        budget = self.config.time_budget_seconds
        started = time.perf_counter()
        complete = True

        routes: list[TradeRoute] = []
        for origin_id, origin_market in markets.items():
            if budget is not None and time.perf_counter() - started > budget:
                complete = False
                break
            for destination_id, destination_market in markets.items():
                if origin_id == destination_id:
                    continue
                origin = station_index.get(origin_id)
                destination = station_index.get(destination_id)
                if origin is None or destination is None:
                    logger.debug(f"Skipping {origin_id} -> {destination_id}: no station record")
                    continue
                routes.extend(self._routes_between(origin, destination, origin_market, destination_market, now))

        limit = self.config.top_route_count
        analysis = RouteAnalysis(
            routes=tuple(routes),
            top_routes=tuple(route_math.top_by_profit(routes, limit)),
            risk_adjusted_routes=tuple(route_math.top_by_risk_adjusted(routes, limit)),
            updated=now,
            complete=complete,
        )
        self.analysis_count += 1

        if complete:
            self._cache = {fingerprint: analysis}
            logger.info(f"Route analysis #{self.analysis_count}: {len(routes)} routes across {len(markets)} markets")
        else:
            logger.warning(
                f"Route analysis stopped after {budget}s budget with {len(routes)} routes; result not cached"
            )
        return analysis

    def _routes_between(
        self,
        origin: Station,
        destination: Station,
        origin_market: Market,
        destination_market: Market,
        now: int,
    ) -> list[TradeRoute]:
        leg = self._resolve_leg(origin, destination)
        if leg is None:
            return []
        distance, gate_id, gate_cost = leg

        found: list[TradeRoute] = []
        for commodity_id, supply in origin_market.commodities.items():
            target = destination_market.commodities.get(commodity_id)
            if target is None or supply.available <= 0:
                continue

            unit_profit = route_math.profit_per_unit(
                supply.current_price, target.current_price, gate_cost or 0.0, supply.available
            )
            if unit_profit <= 0:
                continue

            hours = route_math.travel_time(distance, self.rng)
            volume = route_math.route_volume(supply.available, target.demand)
            found.append(
                TradeRoute(
                    id=f"{origin.id}-{destination.id}-{commodity_id}",
                    origin=origin.id,
                    destination=destination.id,
                    commodity=commodity_id,
                    profit_per_unit=unit_profit,
                    profit_margin=route_math.profit_margin(unit_profit, supply.current_price),
                    distance=distance,
                    travel_time=hours,
                    profit_per_hour=route_math.profit_per_hour(unit_profit, volume, hours),
                    risk=route_math.route_risk(distance, origin.type, destination.type, self.rng),
                    volume=volume,
                    last_calculated=now,
                    gate_id=gate_id,
                    gate_cost=gate_cost,
                    requires_gate=gate_id is not None,
                )
            )
        return found

    def _resolve_leg(self, origin: Station, destination: Station) -> tuple[float, str | None, float | None] | None:
        """Distance plus gate details for a pair, or None when the pair is unreachable."""
        direct = route_math.euclidean_distance(origin.position, destination.position)
        if self.topology is None or self.topology.same_sector(origin.id, destination.id):
            return direct, None, None

        gate_route = self.topology.find_gate_route(origin.id, destination.id)
        if gate_route is not None:
            return gate_route.distance, gate_route.gate_id, gate_route.gate_cost

        if self.config.gate_fallback == GateFallback.DIRECT:
            return direct, None, None
        logger.debug(f"Skipping {origin.id} -> {destination.id}: no active gate")
        return None

    # -- Queries --

    def get_route_recommendations(
        self,
        commodity_id: str,
        markets: Mapping[str, Market],
        stations: Mapping[str, Station] | Iterable[Station],
        limit: int | None = None,
    ) -> list[TradeRoute]:
        """Best routes for one commodity, by profit per hour."""
        analysis = self.analyze_routes(markets, stations)
        matching = [r for r in analysis.routes if r.commodity == commodity_id]
        return route_math.top_by_profit(matching, self._limit(limit))

    def get_routes_from_station(
        self,
        station_id: str,
        markets: Mapping[str, Market],
        stations: Mapping[str, Station] | Iterable[Station],
        limit: int | None = None,
    ) -> list[TradeRoute]:
        """Best routes departing *station_id*, by profit per hour."""
        analysis = self.analyze_routes(markets, stations)
        matching = [r for r in analysis.routes if r.origin == station_id]
        return route_math.top_by_profit(matching, self._limit(limit))

    def get_cached_analysis(self) -> RouteAnalysis | None:
        """Newest unexpired analysis, or None."""
        fresh = [a for a in self._cache.values() if self._is_fresh(a)]
        return max(fresh, key=lambda a: a.updated) if fresh else None

    def clear_cache(self) -> None:
        """Drop cached analyses (call after topology changes such as gate toggles)."""
        self._cache.clear()


def _fingerprint(markets: Mapping[str, Market]) -> Fingerprint:
    return tuple(sorted((station_id, market.version) for station_id, market in markets.items()))


def _index_stations(stations: Mapping[str, Station] | Iterable[Station]) -> dict[str, Station]:
    if isinstance(stations, Mapping):
        return dict(stations)
    return {station.id: station for station in stations}
