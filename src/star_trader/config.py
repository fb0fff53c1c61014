"""Economy configuration loaded from config.toml."""
from __future__ import annotations

import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"


class GateFallback(str, Enum):
    """What to do with a cross-sector pair that no active gate connects."""

    EXCLUDE = "exclude"
    DIRECT = "direct"


class EconomyConfig(BaseModel):
    update_interval_hours: float = Field(default=1.0, gt=0)
    event_probability: float = Field(default=0.01, ge=0.0, le=1.0)
    price_history_limit: int = Field(default=100, ge=1)
    route_cache_ttl_minutes: float = Field(default=30.0, ge=0)
    top_route_count: int = Field(default=20, ge=1)
    recommendation_limit: int = Field(default=10, ge=1)
    gate_fallback: GateFallback = GateFallback.EXCLUDE
    time_budget_seconds: Optional[float] = Field(default=None, gt=0)
    seed: Optional[int] = None


def _load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load config.toml from project root."""
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def load_economy_config(config_path: Path | None = None) -> EconomyConfig:
    """Read the [economy] table, falling back to defaults for anything missing."""
    data = _load_config(config_path).get("economy", {})
    config = EconomyConfig.model_validate(data)
    logger.debug(f"Economy config: {config.model_dump()}")
    return config
