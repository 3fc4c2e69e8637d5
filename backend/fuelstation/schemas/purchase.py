from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseCreate(BaseModel):
    tank_id: int
    litres: Decimal = Field(..., gt=0)
    unit_cost: Decimal = Field(..., gt=0)
    purchase_date: Optional[date] = None


class PurchaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    purchase_id: int
    tank_id: int
    litres: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    status: str
    purchase_date: date
    unloaded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UnloadResult(BaseModel):
    purchase_id: int
    tank_id: int
    tank_name: str
    old_level: Decimal
    new_level: Decimal
    added_litres: Decimal
    avg_unit_cost: Decimal


class PurchasePriceSet(BaseModel):
    prices: Dict[int, Decimal] = Field(..., examples=[{1: 92.5, 2: 84.0}])
