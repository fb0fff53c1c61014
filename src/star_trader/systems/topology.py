"""Read-only sector/system/gate topology and the gate-route capability used by the route analyzer."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from star_trader.mechanics.routes import euclidean_distance
from star_trader.models.route import GateRoute
from star_trader.models.station import Gate, Position, Sector, StarSystem, Station

logger = logging.getLogger(__name__)


class GateRouteProvider(Protocol):
    """The narrow slice of topology the route analyzer depends on."""

    def same_sector(self, origin_id: str, destination_id: str) -> bool: ...

    def find_gate_route(self, origin_id: str, destination_id: str) -> GateRoute | None: ...


class SectorTopology:
    """Indexes a galaxy of sectors -> systems -> stations/gates for fast lookups."""

    def __init__(self, sectors: list[Sector]) -> None:
        self.sectors = sectors
        self._stations: dict[str, Station] = {}
        self._systems: dict[str, StarSystem] = {}
        self._station_system: dict[str, str] = {}
        self._gate_active: dict[str, bool] = {}
        self._index()

    @classmethod
    def from_galaxy(cls, galaxy: dict[str, Any]) -> SectorTopology:
        """Build from a plain galaxy dict (e.g. a loaded TOML layout)."""
        sectors: list[Sector] = []
        for sector_data in galaxy.get("sectors", []):
            systems = []
            for system_data in sector_data.get("systems", []):
                systems.append({**system_data, "sector_id": sector_data["id"]})
            sectors.append(Sector.model_validate({**sector_data, "systems": systems}))
        return cls(sectors)

    def _index(self) -> None:
        for sector in self.sectors:
            for system in sector.systems:
                self._systems[system.id] = system
                for station in system.stations:
                    self._stations[station.id] = station.model_copy(
                        update={"sector_id": sector.id, "system_id": system.id}
                    )
                    self._station_system[station.id] = system.id
                for gate in system.gates:
                    self._gate_active[gate.id] = gate.is_active

    # -- Lookups --

    @property
    def stations(self) -> dict[str, Station]:
        return dict(self._stations)

    def get_station(self, station_id: str) -> Station | None:
        return self._stations.get(station_id)

    def get_system(self, system_id: str) -> StarSystem | None:
        return self._systems.get(system_id)

    def system_for(self, station_id: str) -> StarSystem | None:
        system_id = self._station_system.get(station_id)
        return self._systems.get(system_id) if system_id else None

    def sector_of(self, station_id: str) -> str | None:
        station = self._stations.get(station_id)
        return station.sector_id if station else None

    def gates(self) -> list[Gate]:
        return [gate for system in self._systems.values() for gate in system.gates]

    def is_gate_active(self, gate_id: str) -> bool:
        return self._gate_active.get(gate_id, False)

    def set_gate_active(self, gate_id: str, active: bool) -> None:
        """Open or close a gate. Callers must clear the route analyzer cache afterwards."""
        if gate_id not in self._gate_active:
            raise KeyError(f"Unknown gate: {gate_id}")
        self._gate_active[gate_id] = active
        logger.info(f"Gate {gate_id} {'activated' if active else 'deactivated'}")

    # -- GateRouteProvider --

    def same_sector(self, origin_id: str, destination_id: str) -> bool:
        """True when both stations are known and share a sector."""
        origin_sector = self.sector_of(origin_id)
        return origin_sector is not None and origin_sector == self.sector_of(destination_id)

    def find_gate_route(self, origin_id: str, destination_id: str) -> GateRoute | None:
        """Cheapest-distance active gate into the destination's sector.

        Distance is origin -> gate plus the gate's arrival system -> destination.
        Returns None for same-sector pairs, unknown stations, or when no active
        gate leads into the destination sector.
        """
        origin = self._stations.get(origin_id)
        destination = self._stations.get(destination_id)
        if origin is None or destination is None:
            return None
        if origin.sector_id == destination.sector_id:
            return None

        best: GateRoute | None = None
        for gate in self.gates():
            if gate.destination_sector_id != destination.sector_id or not self.is_gate_active(gate.id):
                continue
            arrival = self._arrival_position(gate, destination.sector_id)
            total = euclidean_distance(origin.position, gate.position) + euclidean_distance(
                arrival, destination.position
            )
            if best is None or total < best.distance:
                best = GateRoute(gate_id=gate.id, gate_cost=gate.energy_cost, distance=total)
        return best

    def _arrival_position(self, gate: Gate, sector_id: str | None) -> Position:
        """Position of the system a gate drops ships into."""
        system = self._systems.get(gate.destination_system_id) if gate.destination_system_id else None
        if system is None:
            sector = next((s for s in self.sectors if s.id == sector_id), None)
            system = sector.systems[0] if sector and sector.systems else None
        return system.position if system else Position()
