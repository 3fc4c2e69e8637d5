from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CashReceiptCreate(BaseModel):
    pump_id: int
    receipt_date: date
    amount: Decimal = Field(..., ge=0)


class CashReceiptBulk(BaseModel):
    receipts: List[CashReceiptCreate] = Field(..., min_length=1)


class CashReceiptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    receipt_id: int
    pump_id: int
    receipt_date: date
    amount: Decimal


class OnlinePaymentCreate(BaseModel):
    payment_date: date
    amount: Decimal = Field(..., gt=0)
    method: str = Field(..., min_length=1, examples=["UPI"])
    reference: Optional[str] = None
    description: Optional[str] = None


class OnlinePaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: int
    payment_date: date
    amount: Decimal
    method: str
    reference: Optional[str] = None
    description: Optional[str] = None
