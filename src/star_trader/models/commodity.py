from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommodityCategory(str, Enum):
    RAW_MATERIALS = "raw-materials"
    MANUFACTURED = "manufactured"
    LUXURY = "luxury"
    TECHNOLOGY = "technology"
    FOOD = "food"
    ENERGY = "energy"


class LegalStatus(str, Enum):
    LEGAL = "legal"
    RESTRICTED = "restricted"
    ILLEGAL = "illegal"


class Commodity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: CommodityCategory
    description: str = ""
    base_price: int = Field(gt=0)
    unit_size: int = 1
    unit_mass: float = 1.0
    volatility: float = Field(default=0.2, ge=0.0, le=1.0)
    legal_status: LegalStatus = LegalStatus.LEGAL
    perishable: bool = False
    shelf_life: Optional[int] = None
