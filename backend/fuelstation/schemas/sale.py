from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fuelstation.models.enums import SaleMethod


class SaleCreate(BaseModel):
    tank_id: int
    pump_id: Optional[int] = None
    litres: Decimal = Field(..., gt=0)
    method: SaleMethod = SaleMethod.CASH
    client_id: Optional[int] = None
    sale_date: Optional[date] = None
    note: Optional[str] = None


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sale_id: int
    tank_id: int
    pump_id: Optional[int] = None
    client_id: Optional[int] = None
    litres: Decimal
    price_per_litre: Decimal
    total_amount: Decimal
    cost_per_litre: Decimal
    profit: Decimal
    method: str
    sale_date: date
    note: Optional[str] = None
    created_at: Optional[datetime] = None
