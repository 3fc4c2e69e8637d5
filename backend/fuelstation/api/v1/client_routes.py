import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.models.enums import CreditStatus
from fuelstation.schemas.client import (
    ClientCreate,
    ClientOut,
    ClientUpdate,
    CreditCreate,
    CreditCreateForClient,
    CreditOut,
    LedgerEntryOut,
    MarkPaidRequest,
    PaymentCreate,
)
from fuelstation.services.credit_service import (
    client_ledger,
    create_client,
    create_credit,
    get_client,
    list_clients,
    list_credits,
    mark_paid,
    record_payment,
    update_client,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/clients", response_model=List[ClientOut], summary="List credit clients")
def get_clients(active_only: bool = False, db: Session = Depends(get_db)):
    return list_clients(db, active_only=active_only)


@router.post(
    "/clients",
    response_model=ClientOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a credit client",
)
def post_client(payload: ClientCreate, db: Session = Depends(get_db)):
    try:
        return create_client(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.put("/clients/{client_id}", response_model=ClientOut, summary="Update client details")
def put_client(client_id: int, payload: ClientUpdate, db: Session = Depends(get_db)):
    try:
        return update_client(db, client_id, payload)
    except StationError as exc:
        raise http_error(exc)


@router.post(
    "/clients/{client_id}/credit",
    response_model=CreditOut,
    status_code=status.HTTP_201_CREATED,
    summary="Extend fuel on credit to a client",
)
def post_client_credit(client_id: int, payload: CreditCreate, db: Session = Depends(get_db)):
    try:
        return create_credit(db, client_id, payload)
    except StationError as exc:
        raise http_error(exc)


@router.get("/clients/{client_id}/credits", response_model=List[CreditOut], summary="Credits of one client")
def get_client_credits(
    client_id: int,
    credit_status: Optional[CreditStatus] = None,
    db: Session = Depends(get_db),
):
    try:
        get_client(db, client_id)
    except StationError as exc:
        raise http_error(exc)
    return list_credits(db, client_id=client_id, status=credit_status)


@router.get("/clients/{client_id}/ledger", response_model=List[LedgerEntryOut], summary="Client ledger entries")
def get_client_ledger(client_id: int, db: Session = Depends(get_db)):
    try:
        return client_ledger(db, client_id)
    except StationError as exc:
        raise http_error(exc)


@router.post("/clients/{client_id}/payment", response_model=ClientOut, summary="Record a payment against the balance")
def post_client_payment(client_id: int, payload: PaymentCreate, db: Session = Depends(get_db)):
    try:
        return record_payment(db, client_id, payload.amount, payload.payment_method, memo=payload.memo)
    except StationError as exc:
        raise http_error(exc)


@router.get("/credits", response_model=List[CreditOut], summary="List credits with filters")
def get_credits(
    client_id: Optional[int] = None,
    fuel_type_id: Optional[int] = None,
    credit_status: Optional[CreditStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return list_credits(
        db,
        client_id=client_id,
        fuel_type_id=fuel_type_id,
        status=credit_status,
        start_date=start_date,
        end_date=end_date,
    )


@router.post(
    "/credits",
    response_model=CreditOut,
    status_code=status.HTTP_201_CREATED,
    summary="Extend fuel on credit",
)
def post_credit(payload: CreditCreateForClient, db: Session = Depends(get_db)):
    try:
        return create_credit(db, payload.client_id, payload)
    except StationError as exc:
        raise http_error(exc)


@router.put("/credits/{credit_id}/mark-paid", response_model=CreditOut, summary="Settle an unpaid credit")
def put_mark_paid(credit_id: int, payload: MarkPaidRequest, db: Session = Depends(get_db)):
    try:
        return mark_paid(db, credit_id, payload.payment_method)
    except StationError as exc:
        raise http_error(exc)
