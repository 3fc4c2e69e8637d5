from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from fuelstation.core.errors import InvalidInput, NotFound
from fuelstation.models.station import FuelType, Pump
from fuelstation.schemas.station import FuelTypeCreate, PumpCreate, PumpUpdate
from fuelstation.utils.text_cleaner import normalize_whitespace


def list_fuel_types(db: Session) -> List[FuelType]:
    return db.query(FuelType).order_by(FuelType.fuel_type_id).all()


def create_fuel_type(db: Session, payload: FuelTypeCreate) -> FuelType:
    fuel_type = FuelType(name=normalize_whitespace(payload.name))
    try:
        db.add(fuel_type)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidInput(f"Fuel type {payload.name!r} already exists")
    db.refresh(fuel_type)
    return fuel_type


def list_pumps(db: Session) -> List[Pump]:
    return (
        db.query(Pump)
        .options(joinedload(Pump.fuel_type))
        .join(FuelType, FuelType.fuel_type_id == Pump.fuel_type_id)
        .order_by(FuelType.name, Pump.name)
        .all()
    )


def get_pump(db: Session, pump_id: int) -> Pump:
    pump = db.query(Pump).filter(Pump.pump_id == pump_id).first()
    if not pump:
        raise NotFound(f"Pump with ID {pump_id} not found", {"pump_id": pump_id})
    return pump


def create_pump(db: Session, payload: PumpCreate) -> Pump:
    if not db.query(FuelType).filter(FuelType.fuel_type_id == payload.fuel_type_id).first():
        raise NotFound(
            f"Fuel type with ID {payload.fuel_type_id} not found",
            {"fuel_type_id": payload.fuel_type_id},
        )
    pump = Pump(
        name=normalize_whitespace(payload.name),
        fuel_type_id=payload.fuel_type_id,
        is_active=payload.is_active,
    )
    db.add(pump)
    db.commit()
    db.refresh(pump)
    return pump


def update_pump(db: Session, pump_id: int, payload: PumpUpdate) -> Pump:
    pump = get_pump(db, pump_id)
    if payload.name is not None:
        pump.name = normalize_whitespace(payload.name)
    if payload.is_active is not None:
        pump.is_active = payload.is_active
    db.commit()
    db.refresh(pump)
    return pump
