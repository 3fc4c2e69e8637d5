"""
Read-only reconciliation and sales reporting.

Conventions:
- fuel sold on a reading is ``closing - opening``; negative deltas never
  count toward revenue;
- money received is cash + online + payments against client balances made
  through UPI or a worker, taken from the ledger by payment date. Owner
  settlements are reported but not counted, the owner already holds that
  money;
- a window balances when received + credit extended matches gross sales
  within ``BALANCE_EPSILON``.
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from fuelstation.core.config import settings
from fuelstation.core.errors import InvalidInput
from fuelstation.models.client import ClientCredit, LedgerEntry
from fuelstation.models.enums import (
    RECEIVED_PAYMENT_METHODS,
    PaymentMethod,
    ReportPeriod,
    SaleMethod,
)
from fuelstation.models.operations import CashReceipt, DailyReading, OnlinePayment, Sale
from fuelstation.models.station import FuelType, Pump, PurchasePrice, Tank
from fuelstation.schemas.report import (
    DayValidation,
    FuelBreakdownItem,
    Reconciliation,
    ReportTotals,
    SummaryReport,
)
from fuelstation.utils.numbers import ZERO, money, to_decimal

logger = logging.getLogger(__name__)


def period_window(
    period: ReportPeriod,
    anchor: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Tuple[date, date]:
    """Inclusive (start, end) dates for a reporting period around ``anchor``."""
    period = ReportPeriod(period)
    if period == ReportPeriod.CUSTOM:
        if start is None or end is None:
            raise InvalidInput("start and end are required for a custom period")
        if start > end:
            raise InvalidInput("start must be on or before end", {"start": str(start), "end": str(end)})
        return start, end

    anchor = anchor or date.today()
    if period == ReportPeriod.DAILY:
        return anchor, anchor
    if period == ReportPeriod.WEEKLY:
        monday = anchor - timedelta(days=anchor.weekday())
        return monday, monday + timedelta(days=6)
    if period == ReportPeriod.MONTHLY:
        last_day = calendar.monthrange(anchor.year, anchor.month)[1]
        return anchor.replace(day=1), anchor.replace(day=last_day)
    return date(anchor.year, 1, 1), date(anchor.year, 12, 31)


def _day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def _sold_expr():
    return DailyReading.closing_litres - DailyReading.opening_litres


def gross_sales(db: Session, start: date, end: date) -> Decimal:
    sold = _sold_expr()
    value = (
        db.query(func.coalesce(func.sum(case((sold > 0, sold * DailyReading.price_per_litre), else_=0)), 0))
        .filter(DailyReading.reading_date >= start, DailyReading.reading_date <= end)
        .scalar()
    )
    return money(value)


def _sum(db: Session, column, *filters) -> Decimal:
    return money(db.query(func.coalesce(func.sum(column), 0)).filter(*filters).scalar())


def _settled(db: Session, start: date, end: date, methods) -> Decimal:
    """Money collected against client balances in the window, by payment method."""
    window_start, window_end = _day_bounds(start, end)
    return _sum(
        db,
        -LedgerEntry.amount,
        LedgerEntry.amount < 0,
        LedgerEntry.payment_method.in_(methods),
        LedgerEntry.created_at >= window_start,
        LedgerEntry.created_at < window_end,
    )


def reconcile(db: Session, start: date, end: date) -> Reconciliation:
    gross = gross_sales(db, start, end)
    cash = _sum(db, CashReceipt.amount, CashReceipt.receipt_date >= start, CashReceipt.receipt_date <= end)
    online = _sum(db, OnlinePayment.amount, OnlinePayment.payment_date >= start, OnlinePayment.payment_date <= end)
    credit_payments = _settled(db, start, end, RECEIVED_PAYMENT_METHODS)
    owner_settled = _settled(db, start, end, (PaymentMethod.OWNER.value,))
    credit_sales = _sum(
        db,
        ClientCredit.total_amount,
        ClientCredit.credit_date >= start,
        ClientCredit.credit_date <= end,
    ) + _sum(
        db,
        Sale.total_amount,
        Sale.method == SaleMethod.CREDIT.value,
        Sale.sale_date >= start,
        Sale.sale_date <= end,
    )

    total_received = cash + online + credit_payments
    expected_total = total_received + credit_sales
    difference = expected_total - gross
    is_balanced = abs(difference) < Decimal(str(settings.BALANCE_EPSILON))

    if not is_balanced:
        logger.info(
            "Reconciliation out of balance",
            extra={"start": str(start), "end": str(end), "difference": str(difference)},
        )
    return Reconciliation(
        start=start,
        end=end,
        gross_sales=gross,
        cash_receipts=cash,
        online_payments=online,
        credit_payments=credit_payments,
        owner_settled=owner_settled,
        credit_sales=credit_sales,
        total_received=total_received,
        expected_total=expected_total,
        difference=difference,
        is_balanced=is_balanced,
    )


def _latest_purchase_cost(db: Session, fuel_type_id: int) -> Optional[Decimal]:
    row = (
        db.query(PurchasePrice.price)
        .join(Tank, Tank.tank_id == PurchasePrice.tank_id)
        .filter(Tank.fuel_type_id == fuel_type_id)
        .order_by(PurchasePrice.created_at.desc(), PurchasePrice.purchase_price_id.desc())
        .first()
    )
    return to_decimal(row.price) if row else None


def fuel_breakdown(db: Session, start: date, end: date) -> List[FuelBreakdownItem]:
    """Per fuel type litres, revenue and profit for the window."""
    sold = _sold_expr()
    rows = (
        db.query(
            FuelType.fuel_type_id,
            FuelType.name,
            func.coalesce(func.sum(case((sold > 0, sold), else_=0)), 0).label("litres"),
            func.coalesce(
                func.sum(case((sold > 0, sold * DailyReading.price_per_litre), else_=0)), 0
            ).label("revenue"),
        )
        .select_from(DailyReading)
        .join(Pump, Pump.pump_id == DailyReading.pump_id)
        .join(FuelType, FuelType.fuel_type_id == Pump.fuel_type_id)
        .filter(DailyReading.reading_date >= start, DailyReading.reading_date <= end)
        .group_by(FuelType.fuel_type_id, FuelType.name)
        .order_by(FuelType.fuel_type_id)
        .all()
    )

    margin = Decimal(str(settings.DEFAULT_MARGIN_FRACTION))
    items = []
    for row in rows:
        litres = to_decimal(row.litres)
        revenue = money(row.revenue)
        selling_price = (revenue / litres).quantize(Decimal("0.0001")) if litres > 0 else ZERO

        cost = _latest_purchase_cost(db, row.fuel_type_id)
        source = "purchase_price"
        if cost is None:
            cost = (selling_price * (1 - margin)).quantize(Decimal("0.0001"))
            source = "default_margin"

        items.append(
            FuelBreakdownItem(
                fuel_type_id=row.fuel_type_id,
                fuel_type=row.name,
                litres=litres,
                revenue=revenue,
                selling_price=selling_price,
                cost_per_litre=cost,
                cost_source=source,
                profit=money(revenue - litres * cost),
            )
        )
    return items


def summary_report(
    db: Session,
    period: ReportPeriod = ReportPeriod.DAILY,
    anchor: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> SummaryReport:
    window_start, window_end = period_window(period, anchor, start, end)
    breakdown = fuel_breakdown(db, window_start, window_end)
    totals = ReportTotals(
        litres=sum((item.litres for item in breakdown), ZERO),
        revenue=sum((item.revenue for item in breakdown), ZERO),
        profit=sum((item.profit for item in breakdown), ZERO),
    )
    return SummaryReport(
        period=ReportPeriod(period).value,
        start=window_start,
        end=window_end,
        totals=totals,
        fuel_types=breakdown,
        reconciliation=reconcile(db, window_start, window_end),
    )


def validate_day(db: Session, day: date) -> DayValidation:
    result = reconcile(db, day, day)
    return DayValidation(day=day, **result.model_dump())
