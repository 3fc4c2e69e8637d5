import logging
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.models.enums import PurchaseStatus
from fuelstation.schemas.purchase import PurchaseCreate, PurchaseOut, PurchasePriceSet, UnloadResult
from fuelstation.services.purchase_service import (
    create_purchase,
    latest_purchase_prices,
    list_purchases,
    set_purchase_prices,
    unload_purchase,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/purchases", response_model=List[PurchaseOut], summary="List purchases (paged)")
def get_purchases(
    purchase_status: Optional[PurchaseStatus] = None,
    limit: int = 200,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    limit = min(max(limit, 1), 500)
    offset = max(offset, 0)
    return list_purchases(db, status=purchase_status, limit=limit, offset=offset)


@router.post(
    "/purchases",
    response_model=PurchaseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a pending fuel delivery",
)
def post_purchase(payload: PurchaseCreate, db: Session = Depends(get_db)):
    try:
        return create_purchase(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.put(
    "/purchases/{purchase_id}/unload",
    response_model=UnloadResult,
    summary="Unload a delivery into its tank",
)
def put_unload(purchase_id: int, db: Session = Depends(get_db)):
    try:
        return unload_purchase(db, purchase_id)
    except StationError as exc:
        raise http_error(exc)


@router.get(
    "/purchase-prices",
    response_model=Dict[int, Decimal],
    summary="Latest purchase price per tank",
)
def get_purchase_prices(db: Session = Depends(get_db)):
    return latest_purchase_prices(db)


@router.post(
    "/purchase-prices",
    status_code=status.HTTP_201_CREATED,
    summary="Record purchase prices per tank",
)
def post_purchase_prices(payload: PurchasePriceSet, db: Session = Depends(get_db)):
    try:
        entries = set_purchase_prices(db, payload.prices)
    except StationError as exc:
        raise http_error(exc)
    return {
        "status": "success",
        "message": "Purchase prices updated successfully",
        "count": len(entries),
    }
