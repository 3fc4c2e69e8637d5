from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fuelstation.models.enums import PaymentMethod


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Sharma Transport"])
    owner_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=3)
    email: Optional[str] = None
    address: Optional[str] = None
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(ClientBase):
    is_active: bool = True


class ClientOut(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    client_id: int
    balance: Decimal
    is_active: bool
    created_at: Optional[datetime] = None


class CreditCreate(BaseModel):
    fuel_type_id: int
    litres: Decimal = Field(..., gt=0)
    price_per_litre: Decimal = Field(..., ge=0)
    total_amount: Optional[Decimal] = Field(default=None, gt=0)
    credit_date: Optional[date] = None
    note: Optional[str] = None


class CreditCreateForClient(CreditCreate):
    client_id: int


class MarkPaidRequest(BaseModel):
    payment_method: PaymentMethod


class CreditOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    credit_id: int
    client_id: int
    fuel_type_id: int
    litres: Decimal
    price_per_litre: Decimal
    total_amount: Decimal
    credit_date: date
    note: Optional[str] = None
    status: str
    payment_method: Optional[str] = None
    paid_date: Optional[datetime] = None


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.WORKER
    memo: Optional[str] = None


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: int
    client_id: int
    amount: Decimal
    memo: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
