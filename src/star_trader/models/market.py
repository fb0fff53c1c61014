from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SupplyLevel(str, Enum):
    OVERSUPPLY = "oversupply"
    NORMAL = "normal"
    SHORTAGE = "shortage"
    CRITICAL = "critical"


class DemandLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    DESPERATE = "desperate"


class PricePoint(BaseModel):
    timestamp: int
    price: int
    volume: int = 0


class MarketCommodity(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    commodity_id: str
    available: int = Field(default=0, ge=0)
    demand: int = Field(default=0, ge=0)
    current_price: int = Field(default=1, ge=1)
    price_history: list[PricePoint] = Field(default_factory=list)
    supply_level: SupplyLevel = SupplyLevel.NORMAL
    demand_level: DemandLevel = DemandLevel.NORMAL
    production_rate: float = 0.0
    restock_time: float = 8.0


class DemandFactors(BaseModel):
    station_type_modifier: float = 1.0
    population_factor: float = 0.5
    security_level_factor: float = 0.5
    faction_control_factor: float = 1.0


class Market(BaseModel):
    """Per-station market state.

    ``version`` is bumped on every mutation and is what the route analyzer
    keys its cache on.
    """

    station_id: str
    commodities: dict[str, MarketCommodity] = Field(default_factory=dict)
    last_update: int = 0
    demand_factors: DemandFactors = Field(default_factory=DemandFactors)
    version: int = 0

    def bump(self) -> None:
        self.version += 1

    def touch(self, now: int) -> None:
        """Record a full market update at *now*."""
        self.last_update = now
        self.bump()


class TradeResult(BaseModel):
    success: bool = False
    total_cost: int | None = None
    price_per_unit: int | None = None
    error: str | None = None
