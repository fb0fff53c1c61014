"""Station economy setup: declarative per-type profiles plus the random rolls
that turn a profile into a concrete StationEconomics/Market. No I/O."""
from __future__ import annotations

import math
import random
from typing import Any, Optional

from pydantic import BaseModel, Field

from star_trader.mechanics.pricing import round_half_up
from star_trader.models.commodity import Commodity, CommodityCategory, LegalStatus
from star_trader.models.market import DemandFactors
from star_trader.models.station import (
    Consumption,
    EconomicFactors,
    Production,
    WealthLevel,
)

# Security thresholds for market admission.
ILLEGAL_BAN_SECURITY = 8
RESTRICTED_LIMIT_SECURITY = 5
RESTRICTED_ADMIT_CHANCE = 0.3

DEFAULT_SECURITY_LEVEL = 5


class WealthBias(BaseModel):
    level: WealthLevel
    above: Optional[float] = None
    below: Optional[float] = None

    def matches(self, roll: float) -> bool:
        if self.above is not None and roll > self.above:
            return True
        if self.below is not None and roll < self.below:
            return True
        return False


class StationProfile(BaseModel):
    base_population: int = 30000
    base_credits: int = 500000
    price_modifier: float = 1.0
    wealth_bias: Optional[WealthBias] = None
    produces: list[Production] = Field(default_factory=list)
    consumes: list[Consumption] = Field(default_factory=list)


class ProfileBook:
    """Lookup from station type to profile, with a default for unlisted types."""

    def __init__(self, table: dict[str, Any]) -> None:
        default = table.get("default", {})
        self.default = StationProfile.model_validate(default)
        self.baseline_consumption = [
            Consumption.model_validate(c) for c in table.get("baseline", {}).get("consumes", [])
        ]
        self.profiles: dict[str, StationProfile] = {}
        for station_type, data in table.get("types", {}).items():
            merged = {**default, **data}
            self.profiles[station_type] = StationProfile.model_validate(merged)

    def get(self, station_type: str) -> StationProfile:
        return self.profiles.get(station_type, self.default)

    def production(self, station_type: str) -> list[Production]:
        return [p.model_copy() for p in self.get(station_type).produces]

    def consumption(self, station_type: str) -> list[Consumption]:
        """Baseline needs followed by the type's own consumption."""
        own = [c.model_copy() for c in self.get(station_type).consumes]
        return [c.model_copy() for c in self.baseline_consumption] + own


def roll_population(profile: StationProfile, rng: random.Random | None = None) -> int:
    rng = rng or random
    return round_half_up(profile.base_population * (0.5 + rng.random()))


def roll_credits(profile: StationProfile, rng: random.Random | None = None) -> int:
    rng = rng or random
    return round_half_up(profile.base_credits * (0.5 + rng.random()))


def determine_wealth_level(profile: StationProfile, rng: random.Random | None = None) -> WealthLevel:
    """Weighted wealth draw; the type's bias rule wins over the generic bands."""
    rng = rng or random
    roll = rng.random()
    if profile.wealth_bias and profile.wealth_bias.matches(roll):
        return profile.wealth_bias.level
    if roll < 0.2:
        return WealthLevel.POOR
    if roll > 0.8:
        return WealthLevel.WEALTHY
    return WealthLevel.AVERAGE


def roll_economic_factors(rng: random.Random | None = None) -> EconomicFactors:
    rng = rng or random
    return EconomicFactors(
        efficiency=0.8 + rng.random() * 0.4,
        corruption=rng.random() * 0.3,
        stability=0.7 + rng.random() * 0.3,
        infrastructure=0.6 + rng.random() * 0.4,
    )


def build_demand_factors(profile: StationProfile, population: int, security_level: int) -> DemandFactors:
    return DemandFactors(
        station_type_modifier=profile.price_modifier,
        population_factor=math.log10(max(1, population)) / 6,
        security_level_factor=security_level / 10,
        faction_control_factor=1.0,
    )


def admitted_commodities(
    catalog: dict[str, Commodity],
    security_level: int,
    rng: random.Random | None = None,
) -> list[Commodity]:
    """Filter the catalog by the system's security level.

    Illegal goods never appear at security >= 8. At security >= 5 each
    restricted good is stocked with a 30% chance.
    """
    rng = rng or random
    admitted: list[Commodity] = []
    for commodity in catalog.values():
        if commodity.legal_status == LegalStatus.ILLEGAL and security_level >= ILLEGAL_BAN_SECURITY:
            continue
        if commodity.legal_status == LegalStatus.RESTRICTED and security_level >= RESTRICTED_LIMIT_SECURITY:
            if rng.random() >= RESTRICTED_ADMIT_CHANCE:
                continue
        admitted.append(commodity)
    return admitted


def initial_availability(commodity: Commodity, station_type: str, rng: random.Random | None = None) -> int:
    rng = rng or random
    base = rng.random() * 100 + 50
    multiplier = 1.0
    if station_type == "trade":
        multiplier = 2.0
    if station_type == "industrial" and commodity.category == CommodityCategory.MANUFACTURED:
        multiplier = 1.5
    if station_type == "mining" and commodity.category == CommodityCategory.RAW_MATERIALS:
        multiplier = 3.0
    return round_half_up(base * multiplier)


def initial_demand(commodity: Commodity, station_type: str, rng: random.Random | None = None) -> int:
    rng = rng or random
    base = rng.random() * 50 + 25
    multiplier = 1.0
    if commodity.category == CommodityCategory.FOOD:
        multiplier = 2.0
    if commodity.category == CommodityCategory.ENERGY:
        multiplier = 1.5
    if station_type == "industrial" and commodity.category == CommodityCategory.RAW_MATERIALS:
        multiplier = 2.5
    return round_half_up(base * multiplier)


def roll_restock_time(rng: random.Random | None = None) -> float:
    """Hours until restock, 8-24."""
    rng = rng or random
    return 8 + rng.random() * 16
