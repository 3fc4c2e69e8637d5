from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FuelTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Petrol"])


class FuelTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fuel_type_id: int
    name: str


class TankCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Tank A"])
    fuel_type_id: int
    capacity_lit: Decimal = Field(..., gt=0)
    current_level: Decimal = Field(default=Decimal("0"), ge=0)


class TankUpdate(BaseModel):
    name: Optional[str] = None
    current_level: Optional[Decimal] = None
    capacity_lit: Optional[Decimal] = None
    reason: Optional[str] = None


class TankOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tank_id: int
    name: str
    fuel_type_id: int
    capacity_lit: Decimal
    current_level: Decimal
    avg_unit_cost: Decimal
    is_active: bool
    fuel_type: Optional[FuelTypeOut] = None


class TankWithPriceOut(TankOut):
    current_price: Optional[Decimal] = None


class TankCheck(BaseModel):
    """Outcome of a guard pre-check, returned for caller display."""

    tank_id: int
    current_level: Decimal
    capacity: Decimal
    available_fuel: Decimal
    available_space: Decimal


class TankStatus(BaseModel):
    tank_id: int
    name: str
    fuel_type: Optional[str] = None
    current_level: Decimal
    capacity: Decimal
    available_space: Decimal
    percentage: float
    can_sell: bool
    can_unload: bool


class CapacityUpdateItem(BaseModel):
    tank_id: int
    new_capacity: Decimal
    reason: Optional[str] = None


class CapacityUpdateRequest(BaseModel):
    updates: List[CapacityUpdateItem] = Field(..., min_length=1)


class CapacityUpdateResult(BaseModel):
    tank_id: int
    tank_name: str
    fuel_type: Optional[str] = None
    old_capacity: Decimal
    new_capacity: Decimal
    current_level: Decimal
    old_percentage: float
    new_percentage: float
    reason: Optional[str] = None


class CapacitySkipped(BaseModel):
    tank_id: int
    error: str
    message: str


class CapacityUpdateResponse(BaseModel):
    results: List[CapacityUpdateResult] = []
    skipped: List[CapacitySkipped] = []
    total_requested: int
    total_updated: int


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    log_id: int
    action: str
    entity_type: str
    entity_id: int
    old_values: Optional[dict] = None
    new_values: Optional[dict] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class TankCapacityStat(BaseModel):
    tank_id: int
    name: str
    fuel_type: Optional[str] = None
    current_level: Decimal
    capacity: Decimal
    percentage: float
    available_capacity: Decimal
    status: str  # high/medium/low


class CapacityStatsSummary(BaseModel):
    total_tanks: int
    total_capacity: Decimal
    total_current_level: Decimal
    overall_percentage: float
    high_level_tanks: int
    medium_level_tanks: int
    low_level_tanks: int


class CapacityStatsOut(BaseModel):
    tanks: List[TankCapacityStat]
    summary: CapacityStatsSummary


class PumpCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Pump 1"])
    fuel_type_id: int
    is_active: bool = True


class PumpUpdate(BaseModel):
    name: Optional[str] = None
    is_active: Optional[bool] = None


class PumpOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pump_id: int
    name: str
    fuel_type_id: int
    is_active: bool
    fuel_type: Optional[FuelTypeOut] = None


class PriceCreate(BaseModel):
    fuel_type_id: int
    per_litre: Decimal = Field(..., gt=0)


class PriceSetRequest(BaseModel):
    prices: Dict[str, Decimal] = Field(..., examples=[{"petrol": 100, "diesel": 90}])
    effective_date: Optional[date] = None


class PriceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    price_id: int
    fuel_type_id: int
    per_litre: Decimal
    is_active: bool
    created_at: Optional[datetime] = None


class CurrentPriceOut(BaseModel):
    fuel_type_id: int
    name: str
    key: str
    price: Optional[Decimal] = None
    updated_at: Optional[datetime] = None
