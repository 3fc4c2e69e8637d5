import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.station import FuelTypeCreate, FuelTypeOut, PumpCreate, PumpOut, PumpUpdate
from fuelstation.services.pump_service import (
    create_fuel_type,
    create_pump,
    list_fuel_types,
    list_pumps,
    update_pump,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/fuel-types", response_model=List[FuelTypeOut], summary="List fuel types")
def get_fuel_types(db: Session = Depends(get_db)):
    return list_fuel_types(db)


@router.post(
    "/fuel-types",
    response_model=FuelTypeOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a fuel type",
)
def post_fuel_type(payload: FuelTypeCreate, db: Session = Depends(get_db)):
    try:
        return create_fuel_type(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.get("/pumps", response_model=List[PumpOut], summary="List pumps with their fuel type")
def get_pumps(db: Session = Depends(get_db)):
    return list_pumps(db)


@router.post(
    "/pumps",
    response_model=PumpOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a pump",
)
def post_pump(payload: PumpCreate, db: Session = Depends(get_db)):
    try:
        return create_pump(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.patch("/pumps/{pump_id}", response_model=PumpOut, summary="Rename or (de)activate a pump")
def patch_pump(pump_id: int, payload: PumpUpdate, db: Session = Depends(get_db)):
    try:
        return update_pump(db, pump_id, payload)
    except StationError as exc:
        raise http_error(exc)
