from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class Station(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    type: str = "trade"
    position: Position = Field(default_factory=Position)
    faction: str = ""
    sector_id: Optional[str] = None
    system_id: Optional[str] = None


class Gate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    position: Position = Field(default_factory=Position)
    destination_sector_id: str
    destination_system_id: Optional[str] = None
    energy_cost: float = 0.0
    is_active: bool = True


class StarSystem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    sector_id: str = ""
    position: Position = Field(default_factory=Position)
    security_level: int = Field(default=5, ge=0, le=10)
    stations: list[Station] = Field(default_factory=list)
    gates: list[Gate] = Field(default_factory=list)


class Sector(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    systems: list[StarSystem] = Field(default_factory=list)
    controlling_faction: Optional[str] = None


class WealthLevel(str, Enum):
    POOR = "poor"
    AVERAGE = "average"
    WEALTHY = "wealthy"
    ELITE = "elite"


class Necessity(str, Enum):
    LUXURY = "luxury"
    NORMAL = "normal"
    ESSENTIAL = "essential"
    CRITICAL = "critical"


class Production(BaseModel):
    commodity_id: str
    base_rate: float
    efficiency: float = 1.0
    capacity: float = 0.0


class Consumption(BaseModel):
    commodity_id: str
    base_rate: float
    necessity: Necessity = Necessity.NORMAL


class EconomicFactors(BaseModel):
    efficiency: float = 1.0
    corruption: float = 0.0
    stability: float = 1.0
    infrastructure: float = 1.0


class StationEconomics(BaseModel):
    station_id: str
    station_type: str
    population: int
    wealth_level: WealthLevel = WealthLevel.AVERAGE
    produces: list[Production] = Field(default_factory=list)
    consumes: list[Consumption] = Field(default_factory=list)
    economic_factors: EconomicFactors = Field(default_factory=EconomicFactors)
    credits: int = 0
    trade_volume: int = 0

    def production_for(self, commodity_id: str) -> Production | None:
        return next((p for p in self.produces if p.commodity_id == commodity_id), None)

    def consumption_for(self, commodity_id: str) -> Consumption | None:
        return next((c for c in self.consumes if c.commodity_id == commodity_id), None)
