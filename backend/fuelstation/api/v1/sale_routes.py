import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.sale import SaleCreate, SaleOut
from fuelstation.services.sale_service import list_sales, record_sale

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[SaleOut], summary="List direct sales (paged)")
def get_sales(limit: int = 100, offset: int = 0, db: Session = Depends(get_db)):
    limit = min(max(limit, 1), 500)
    offset = max(offset, 0)
    return list_sales(db, limit=limit, offset=offset)


@router.post(
    "",
    response_model=SaleOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a direct sale from a tank",
)
def post_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    try:
        return record_sale(db, payload)
    except StationError as exc:
        raise http_error(exc)
