from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class GateRoute(BaseModel):
    model_config = ConfigDict(frozen=True)

    gate_id: str
    gate_cost: float
    distance: float


class TradeRoute(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    origin: str
    destination: str
    commodity: str
    profit_per_unit: float
    profit_margin: float
    distance: float
    travel_time: float
    profit_per_hour: float
    risk: float
    volume: int
    last_calculated: int
    gate_id: Optional[str] = None
    gate_cost: Optional[float] = None
    requires_gate: bool = False

    @computed_field
    @property
    def risk_adjusted_profit(self) -> float:
        return self.profit_per_hour / max(0.1, self.risk)

    @property
    def total_profit(self) -> float:
        return self.profit_per_unit * self.volume


class RouteAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    routes: tuple[TradeRoute, ...] = Field(default_factory=tuple)
    top_routes: tuple[TradeRoute, ...] = Field(default_factory=tuple)
    risk_adjusted_routes: tuple[TradeRoute, ...] = Field(default_factory=tuple)
    updated: int = 0
    complete: bool = True
