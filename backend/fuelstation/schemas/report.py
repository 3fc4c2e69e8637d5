from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class Reconciliation(BaseModel):
    start: date
    end: date
    gross_sales: Decimal
    cash_receipts: Decimal
    online_payments: Decimal
    credit_payments: Decimal
    owner_settled: Decimal
    credit_sales: Decimal
    total_received: Decimal
    expected_total: Decimal
    difference: Decimal
    is_balanced: bool


class FuelBreakdownItem(BaseModel):
    fuel_type_id: int
    fuel_type: str
    litres: Decimal
    revenue: Decimal
    selling_price: Decimal
    cost_per_litre: Decimal
    cost_source: str  # purchase_price/default_margin
    profit: Decimal


class ReportTotals(BaseModel):
    litres: Decimal
    revenue: Decimal
    profit: Decimal


class SummaryReport(BaseModel):
    period: str
    start: date
    end: date
    totals: ReportTotals
    fuel_types: List[FuelBreakdownItem]
    reconciliation: Reconciliation


class DayValidation(Reconciliation):
    day: date
