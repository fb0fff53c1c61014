from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class EconomicEventType(str, Enum):
    SUPPLY_SHORTAGE = "supply-shortage"
    DEMAND_SPIKE = "demand-spike"
    PRICE_CRASH = "price-crash"


class EventEffects(BaseModel):
    price_multiplier: float = 1.0
    availability_multiplier: float = 1.0


class EconomicEvent(BaseModel):
    id: str
    type: EconomicEventType
    affected_commodities: list[str] = Field(default_factory=list)
    affected_stations: list[str] = Field(default_factory=list)
    severity: float = 0.5
    duration: float = 0.0
    start_time: int = 0
    end_time: int = 0
    description: str = ""
    effects: EventEffects = Field(default_factory=EventEffects)

    def is_active(self, now: int) -> bool:
        return now < self.end_time

    def applies_to(self, commodity_id: str, station_id: str) -> bool:
        return commodity_id in self.affected_commodities and station_id in self.affected_stations
