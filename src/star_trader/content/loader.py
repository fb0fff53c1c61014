"""Content loading: commodity catalog, station type table and galaxy layouts from TOML."""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from star_trader.models.commodity import Commodity

CONTENT_DIR = Path(__file__).parent


def load_toml(filepath: Path) -> dict[str, Any]:
    with open(filepath, "rb") as f:
        return tomllib.load(f)


def load_all_commodities() -> dict[str, Commodity]:
    """Load the commodity catalog from content/commodities/*.toml, keyed by id."""
    commodities: dict[str, Commodity] = {}
    commodity_dir = CONTENT_DIR / "commodities"
    for f in sorted(commodity_dir.glob("*.toml")):
        data = load_toml(f)
        for entry in data.get("commodities", []):
            commodity = Commodity.model_validate(entry)
            commodities[commodity.id] = commodity
    return commodities


def load_station_types() -> dict[str, Any]:
    """Load the per-type station profile table.

    Returns the raw TOML document with ``default``, ``baseline`` and ``types``
    keys; see mechanics.station_profiles for how it is interpreted.
    """
    return load_toml(CONTENT_DIR / "stations" / "station_types.toml")


def load_galaxy(name: str = "frontier") -> dict[str, Any]:
    """Load a galaxy layout (sectors -> systems -> stations/gates) from content/galaxies/."""
    galaxy_file = CONTENT_DIR / "galaxies" / f"{name}.toml"
    if not galaxy_file.exists():
        raise FileNotFoundError(f"Unknown galaxy layout: {name}")
    return load_toml(galaxy_file)


def list_galaxies() -> list[str]:
    galaxy_dir = CONTENT_DIR / "galaxies"
    if not galaxy_dir.exists():
        return []
    return sorted(f.stem for f in galaxy_dir.glob("*.toml"))
