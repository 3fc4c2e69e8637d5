import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.receipt import (
    CashReceiptBulk,
    CashReceiptCreate,
    CashReceiptOut,
    OnlinePaymentCreate,
    OnlinePaymentOut,
)
from fuelstation.services.receipt_service import (
    create_online_payment,
    list_cash_receipts,
    list_online_payments,
    upsert_cash_receipt,
    upsert_cash_receipts,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/cash-receipts", response_model=List[CashReceiptOut], summary="Cash receipts for a day")
def get_cash_receipts(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    return list_cash_receipts(db, day or date.today())


@router.post(
    "/cash-receipts",
    response_model=CashReceiptOut,
    status_code=status.HTTP_201_CREATED,
    summary="Save the cash collected at a pump",
)
def post_cash_receipt(payload: CashReceiptCreate, db: Session = Depends(get_db)):
    try:
        return upsert_cash_receipt(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.post(
    "/cash-receipts/bulk",
    response_model=List[CashReceiptOut],
    status_code=status.HTTP_201_CREATED,
    summary="Save cash receipts for several pumps",
)
def post_cash_receipts_bulk(payload: CashReceiptBulk, db: Session = Depends(get_db)):
    try:
        return upsert_cash_receipts(db, payload.receipts)
    except StationError as exc:
        raise http_error(exc)


@router.get("/online-payments", response_model=List[OnlinePaymentOut], summary="Online payments for a day")
def get_online_payments(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    return list_online_payments(db, day or date.today())


@router.post(
    "/online-payments",
    response_model=OnlinePaymentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record an online payment",
)
def post_online_payment(payload: OnlinePaymentCreate, db: Session = Depends(get_db)):
    return create_online_payment(db, payload)
