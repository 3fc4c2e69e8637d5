import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.station import CurrentPriceOut, PriceCreate, PriceOut, PriceSetRequest
from fuelstation.services.price_service import (
    current_prices,
    list_prices,
    price_history,
    set_price,
    set_prices,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[PriceOut], summary="Price rows, newest first")
def get_prices(limit: int = Query(200, ge=1, le=1000), db: Session = Depends(get_db)):
    return list_prices(db, limit=limit)


@router.get("/current", response_model=List[CurrentPriceOut], summary="Active price per fuel type")
def get_current_prices(db: Session = Depends(get_db)):
    return current_prices(db)


@router.get("/combined", summary="Price history pivoted by snapshot")
def get_combined_prices(limit: int = Query(200, ge=1, le=1000), db: Session = Depends(get_db)):
    return price_history(db, limit=limit)


@router.post(
    "",
    response_model=PriceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Set the price of one fuel type",
)
def post_price(payload: PriceCreate, db: Session = Depends(get_db)):
    try:
        return set_price(db, payload.fuel_type_id, payload.per_litre)
    except StationError as exc:
        raise http_error(exc)


@router.post(
    "/set",
    response_model=List[PriceOut],
    status_code=status.HTTP_201_CREATED,
    summary="Snapshot prices for several fuel types",
)
def post_price_snapshot(payload: PriceSetRequest, db: Session = Depends(get_db)):
    try:
        return set_prices(db, payload.prices, effective_date=payload.effective_date)
    except StationError as exc:
        raise http_error(exc)
