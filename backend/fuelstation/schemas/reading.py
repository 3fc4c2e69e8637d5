from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReadingCreate(BaseModel):
    pump_id: int
    reading_date: date
    opening_litres: Decimal = Field(..., ge=0)
    closing_litres: Decimal = Field(..., ge=0)
    price_per_litre: Optional[Decimal] = Field(default=None, gt=0)


class ReadingBulkCreate(BaseModel):
    readings: List[ReadingCreate] = Field(..., min_length=1)


class ReadingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reading_id: int
    pump_id: int
    reading_date: date
    opening_litres: Decimal
    closing_litres: Decimal
    price_per_litre: Decimal
    revenue: Decimal
    updated_at: Optional[datetime] = None


class ReadingResult(BaseModel):
    """A saved reading plus the inventory effect it had."""

    reading: ReadingOut
    fuel_sold: Decimal
    net_delta: Decimal
    tank_id: int
    tank_level: Decimal
    updated: bool


class TankAdjustment(BaseModel):
    fuel_type_id: int
    tank_id: int
    net_delta: Decimal
    tank_level: Decimal


class BulkReadingResult(BaseModel):
    count: int
    readings: List[ReadingOut]
    tank_adjustments: List[TankAdjustment]


class ReadingDaySummary(BaseModel):
    day: date
    litres: Decimal
    revenue: Decimal
    readings: int
