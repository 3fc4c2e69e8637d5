import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from fuelstation.core.config import settings
from fuelstation.core.errors import InvalidInput, NoActiveTank, NotFound, StationError
from fuelstation.models.operations import DailyReading
from fuelstation.models.station import Pump, Tank
from fuelstation.schemas.reading import (
    BulkReadingResult,
    ReadingCreate,
    ReadingDaySummary,
    ReadingOut,
    ReadingResult,
    TankAdjustment,
)
from fuelstation.services.price_service import get_active_price
from fuelstation.services.tank_guard import apply_level_delta, validate_purchase, validate_sale
from fuelstation.utils.numbers import ZERO, as_float, money, to_decimal
from fuelstation.utils.text_cleaner import normalize_header, normalize_name

logger = logging.getLogger(__name__)


@dataclass
class _PreparedReading:
    payload: ReadingCreate
    pump: Pump
    tank: Tank
    price: Decimal
    fuel_sold: Decimal
    existing: Optional[DailyReading]
    net_delta: Decimal


def fuel_sold(opening_litres, closing_litres) -> Decimal:
    """Meter runs forward: fuel sold is closing minus opening, never negative."""
    opening = to_decimal(opening_litres)
    closing = to_decimal(closing_litres)
    if closing < opening:
        raise InvalidInput(
            "Closing litres must be greater than or equal to opening litres",
            {"opening_litres": as_float(opening), "closing_litres": as_float(closing)},
        )
    return closing - opening


def active_tank_for_fuel(db: Session, fuel_type_id: int) -> Tank:
    tank = (
        db.query(Tank)
        .filter(Tank.fuel_type_id == fuel_type_id, Tank.is_active.is_(True))
        .order_by(Tank.tank_id)
        .first()
    )
    if not tank:
        raise NoActiveTank(
            f"No active tank for fuel type {fuel_type_id}",
            {"fuel_type_id": fuel_type_id},
        )
    return tank


def _precheck(db: Session, tank_id: int, net_delta: Decimal) -> None:
    if net_delta > 0:
        validate_sale(db, tank_id, net_delta)
    elif net_delta < 0:
        # A downward correction hands fuel back to the tank.
        validate_purchase(db, tank_id, -net_delta)


def _prepare(db: Session, payload: ReadingCreate) -> _PreparedReading:
    pump = db.query(Pump).filter(Pump.pump_id == payload.pump_id).first()
    if not pump:
        raise NotFound(f"Pump with ID {payload.pump_id} not found", {"pump_id": payload.pump_id})

    sold = fuel_sold(payload.opening_litres, payload.closing_litres)

    price = payload.price_per_litre
    if price is None:
        active = get_active_price(db, pump.fuel_type_id)
        if not active:
            raise InvalidInput(
                "No price given and no active price for the pump's fuel type",
                {"pump_id": pump.pump_id, "fuel_type_id": pump.fuel_type_id},
            )
        price = to_decimal(active.per_litre)

    tank = active_tank_for_fuel(db, pump.fuel_type_id)

    existing = (
        db.query(DailyReading)
        .filter(
            DailyReading.pump_id == pump.pump_id,
            DailyReading.reading_date == payload.reading_date,
        )
        .first()
    )
    previous_sold = ZERO
    if existing:
        previous_sold = to_decimal(existing.closing_litres) - to_decimal(existing.opening_litres)

    return _PreparedReading(
        payload=payload,
        pump=pump,
        tank=tank,
        price=price,
        fuel_sold=sold,
        existing=existing,
        net_delta=sold - previous_sold,
    )


def _stage(db: Session, entry: _PreparedReading) -> DailyReading:
    reading = entry.existing
    if reading is None:
        reading = DailyReading(pump_id=entry.pump.pump_id, reading_date=entry.payload.reading_date)
        db.add(reading)
    reading.opening_litres = entry.payload.opening_litres
    reading.closing_litres = entry.payload.closing_litres
    reading.price_per_litre = entry.price
    reading.revenue = money(entry.fuel_sold * entry.price)
    return reading


def record_reading(db: Session, payload: ReadingCreate) -> ReadingResult:
    """
    Upsert the reading for (pump, date) and move the tank by the change in
    fuel sold, so an edited reading is only charged the difference.
    """
    entry = _prepare(db, payload)
    _precheck(db, entry.tank.tank_id, entry.net_delta)

    try:
        reading = _stage(db, entry)
        db.flush()
        level = apply_level_delta(db, entry.tank.tank_id, -entry.net_delta)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(reading)
    logger.info(
        "Reading recorded",
        extra={
            "pump_id": entry.pump.pump_id,
            "reading_date": str(payload.reading_date),
            "fuel_sold": str(entry.fuel_sold),
            "net_delta": str(entry.net_delta),
            "tank_id": entry.tank.tank_id,
        },
    )
    return ReadingResult(
        reading=ReadingOut.model_validate(reading),
        fuel_sold=entry.fuel_sold,
        net_delta=entry.net_delta,
        tank_id=entry.tank.tank_id,
        tank_level=level,
        updated=entry.existing is not None,
    )


def record_readings_bulk(
    db: Session,
    readings: List[ReadingCreate],
    max_items: Optional[int] = None,
) -> BulkReadingResult:
    """
    Validate every reading before writing any, then apply one net tank change
    per fuel type and commit everything together.
    """
    limit = max_items or settings.MAX_BULK_READINGS
    if not readings:
        raise InvalidInput("readings array is required")
    if len(readings) > limit:
        raise InvalidInput(
            f"Too many readings in one request ({len(readings)} > {limit})",
            {"count": len(readings), "max": limit},
        )

    seen = set()
    prepared: List[_PreparedReading] = []
    deltas: Dict[int, Decimal] = OrderedDict()
    tanks: Dict[int, Tank] = {}
    for index, payload in enumerate(readings):
        key = (payload.pump_id, payload.reading_date)
        if key in seen:
            raise InvalidInput(
                f"Duplicate reading for pump {payload.pump_id} on {payload.reading_date}",
                {"index": index, "pump_id": payload.pump_id},
            )
        seen.add(key)

        try:
            entry = _prepare(db, payload)
        except StationError as exc:
            exc.details.setdefault("index", index)
            raise
        prepared.append(entry)

        fuel_type_id = entry.pump.fuel_type_id
        tanks[fuel_type_id] = entry.tank
        deltas[fuel_type_id] = deltas.get(fuel_type_id, ZERO) + entry.net_delta

    for fuel_type_id, delta in deltas.items():
        _precheck(db, tanks[fuel_type_id].tank_id, delta)

    try:
        saved = [_stage(db, entry) for entry in prepared]
        db.flush()
        adjustments = []
        for fuel_type_id, delta in deltas.items():
            tank_id = tanks[fuel_type_id].tank_id
            level = apply_level_delta(db, tank_id, -delta)
            adjustments.append(
                TankAdjustment(fuel_type_id=fuel_type_id, tank_id=tank_id, net_delta=delta, tank_level=level)
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    for reading in saved:
        db.refresh(reading)
    logger.info(
        "Bulk readings recorded",
        extra={"count": len(saved), "fuel_types": list(deltas.keys())},
    )
    return BulkReadingResult(
        count=len(saved),
        readings=[ReadingOut.model_validate(reading) for reading in saved],
        tank_adjustments=adjustments,
    )


READING_HEADER_ALIASES = {
    "pump": "pump",
    "pump_id": "pump",
    "pump_name": "pump",
    "nozzle": "pump",
    "date": "reading_date",
    "reading_date": "reading_date",
    "day": "reading_date",
    "opening": "opening_litres",
    "opening_litres": "opening_litres",
    "open": "opening_litres",
    "opening_reading": "opening_litres",
    "closing": "closing_litres",
    "closing_litres": "closing_litres",
    "close": "closing_litres",
    "closing_reading": "closing_litres",
    "price": "price_per_litre",
    "price_per_litre": "price_per_litre",
    "rate": "price_per_litre",
}
MAX_UPLOAD_READINGS = 5000
REQUIRED_READING_FIELDS = {"pump", "reading_date", "opening_litres", "closing_litres"}


def _resolve_pump_id(pumps_by_name: Dict[str, int], pump_ids: set, value) -> Optional[int]:
    text = str(value).strip() if value is not None else ""
    if not text or text.lower() == "nan":
        return None
    try:
        numeric = int(float(text))
    except ValueError:
        numeric = None
    if numeric is not None and numeric in pump_ids:
        return numeric
    return pumps_by_name.get(normalize_name(text))


def import_readings_from_frame(db: Session, df: pd.DataFrame) -> BulkReadingResult:
    """
    Turn an uploaded reading sheet into bulk readings. Pumps may be given by
    id or by name; price may be left blank to use the active price.
    """
    col_map: Dict[int, str] = {}
    for idx, header in enumerate(df.columns):
        target = READING_HEADER_ALIASES.get(normalize_header(header))
        if target:
            col_map[idx] = target

    missing = REQUIRED_READING_FIELDS - set(col_map.values())
    if missing:
        raise InvalidInput(f"Missing required columns for readings: {sorted(missing)}")

    pumps = db.query(Pump).all()
    pumps_by_name = {normalize_name(pump.name): pump.pump_id for pump in pumps}
    pump_ids = {pump.pump_id for pump in pumps}

    payloads: List[ReadingCreate] = []
    for row_no, (_, row) in enumerate(df.iterrows(), start=2):
        row_data = {field: row.iloc[idx] for idx, field in col_map.items()}

        pump_id = _resolve_pump_id(pumps_by_name, pump_ids, row_data.get("pump"))
        if pump_id is None:
            raise InvalidInput(f"Row {row_no}: unknown pump {row_data.get('pump')!r}", {"row": row_no})

        reading_date = pd.to_datetime(row_data.get("reading_date"), errors="coerce")
        if pd.isna(reading_date):
            raise InvalidInput(f"Row {row_no}: invalid date", {"row": row_no})

        price = row_data.get("price_per_litre")
        if price is None or (isinstance(price, float) and pd.isna(price)) or str(price).strip() == "":
            price = None

        try:
            payloads.append(
                ReadingCreate(
                    pump_id=pump_id,
                    reading_date=reading_date.date(),
                    opening_litres=row_data.get("opening_litres"),
                    closing_litres=row_data.get("closing_litres"),
                    price_per_litre=price,
                )
            )
        except ValidationError as exc:
            raise InvalidInput(f"Row {row_no}: {exc.errors()[0]['msg']}", {"row": row_no})

    return record_readings_bulk(db, payloads, max_items=MAX_UPLOAD_READINGS)


def list_readings(db: Session, day: date) -> List[DailyReading]:
    return (
        db.query(DailyReading)
        .filter(DailyReading.reading_date == day)
        .order_by(DailyReading.pump_id)
        .all()
    )


def day_summary(db: Session, day: date) -> ReadingDaySummary:
    sold = DailyReading.closing_litres - DailyReading.opening_litres
    row = (
        db.query(
            func.count(DailyReading.reading_id).label("readings"),
            func.coalesce(func.sum(sold), 0).label("litres"),
            func.coalesce(func.sum(DailyReading.revenue), 0).label("revenue"),
        )
        .filter(DailyReading.reading_date == day)
        .one()
    )
    return ReadingDaySummary(
        day=day,
        litres=to_decimal(row.litres),
        revenue=to_decimal(row.revenue),
        readings=row.readings,
    )
