import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuelstation.core.errors import (
    AlreadyProcessed,
    CreditLimitExceeded,
    InvalidInput,
    InvalidPaymentMethod,
    NotFound,
)
from fuelstation.models.client import Client, ClientCredit, LedgerEntry
from fuelstation.models.enums import CreditStatus, PaymentMethod
from fuelstation.models.station import FuelType
from fuelstation.schemas.client import ClientCreate, ClientUpdate, CreditCreate
from fuelstation.utils.numbers import as_float, money, to_decimal

logger = logging.getLogger(__name__)

BALANCE_SCALE = 2


def get_client(db: Session, client_id: int) -> Client:
    client = db.query(Client).filter(Client.client_id == client_id).first()
    if not client:
        raise NotFound(f"Client with ID {client_id} not found", {"client_id": client_id})
    return client


def list_clients(db: Session, active_only: bool = False) -> List[Client]:
    query = db.query(Client)
    if active_only:
        query = query.filter(Client.is_active.is_(True))
    return query.order_by(Client.client_id).all()


def create_client(db: Session, payload: ClientCreate) -> Client:
    client = Client(
        name=payload.name.strip(),
        owner_name=payload.owner_name.strip(),
        phone=payload.phone.strip(),
        email=payload.email,
        address=payload.address,
        credit_limit=payload.credit_limit,
        balance=Decimal("0"),
        is_active=True,
    )
    try:
        db.add(client)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidInput("Phone or email already registered", {"phone": payload.phone})
    db.refresh(client)
    logger.info("Client created", extra={"client_id": client.client_id})
    return client


def update_client(db: Session, client_id: int, payload: ClientUpdate) -> Client:
    client = get_client(db, client_id)
    client.name = payload.name.strip()
    client.owner_name = payload.owner_name.strip()
    client.phone = payload.phone.strip()
    client.email = payload.email
    client.address = payload.address
    client.credit_limit = payload.credit_limit
    client.is_active = payload.is_active
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidInput("Phone or email already registered", {"phone": payload.phone})
    db.refresh(client)
    return client


def create_credit(db: Session, client_id: int, payload: CreditCreate) -> ClientCredit:
    """
    Extend fuel on credit. The client's balance grows by the credit total in
    the same transaction, and never past the credit limit.
    """
    client = get_client(db, client_id)
    if not client.is_active:
        raise InvalidInput("Client is inactive", {"client_id": client_id})
    if not db.query(FuelType).filter(FuelType.fuel_type_id == payload.fuel_type_id).first():
        raise NotFound(
            f"Fuel type with ID {payload.fuel_type_id} not found",
            {"fuel_type_id": payload.fuel_type_id},
        )

    total = money(payload.total_amount if payload.total_amount is not None else payload.litres * payload.price_per_litre)
    if total <= 0:
        raise InvalidInput("Credit total must be greater than 0", {"total_amount": as_float(total)})

    credit = ClientCredit(
        client_id=client_id,
        fuel_type_id=payload.fuel_type_id,
        litres=payload.litres,
        price_per_litre=payload.price_per_litre,
        total_amount=total,
        credit_date=payload.credit_date or date.today(),
        note=payload.note,
        status=CreditStatus.UNPAID.value,
    )
    try:
        charge_balance(db, client, total)
        db.add(credit)
        db.add(LedgerEntry(client_id=client_id, amount=total, memo="Fuel on credit"))
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(credit)
    logger.info(
        "Credit extended",
        extra={"client_id": client_id, "credit_id": credit.credit_id, "total_amount": str(total)},
    )
    return credit


def charge_balance(db: Session, client: Client, amount: Decimal) -> None:
    """Raise the client's balance by ``amount`` only while it stays within the credit limit."""
    new_balance = func.round(Client.balance + amount, BALANCE_SCALE)
    result = db.execute(
        update(Client)
        .where(
            Client.client_id == client.client_id,
            new_balance <= func.round(Client.credit_limit, BALANCE_SCALE),
        )
        .values(balance=new_balance)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.refresh(client)
        balance = to_decimal(client.balance)
        limit = to_decimal(client.credit_limit)
        logger.warning(
            "Credit rejected: limit exceeded",
            extra={"client_id": client.client_id, "balance": str(balance), "amount": str(amount)},
        )
        raise CreditLimitExceeded(
            f"Credit limit exceeded. Balance: {balance}, credit: {amount}, limit: {limit}",
            {
                "client_id": client.client_id,
                "balance": as_float(balance),
                "amount": as_float(amount),
                "credit_limit": as_float(limit),
            },
        )
    db.expire(client, ["balance"])


def _current_balance(db: Session, client_id: int) -> Decimal:
    balance = db.execute(select(Client.balance).where(Client.client_id == client_id)).scalar_one_or_none()
    if balance is None:
        raise NotFound(f"Client with ID {client_id} not found", {"client_id": client_id})
    return money(balance)


def _release_balance(db: Session, client_id: int, amount: Decimal) -> bool:
    """Lower the balance by ``amount`` unless that would take it below zero."""
    new_balance = func.round(Client.balance - amount, BALANCE_SCALE)
    result = db.execute(
        update(Client)
        .where(Client.client_id == client_id, new_balance >= 0)
        .values(balance=new_balance)
        .execution_options(synchronize_session=False)
    )
    cached = db.get(Client, client_id)
    if cached is not None:
        db.expire(cached, ["balance"])
    return result.rowcount == 1


def _payment_method(payment_method) -> PaymentMethod:
    try:
        return PaymentMethod(payment_method)
    except ValueError:
        raise InvalidPaymentMethod(
            f"Invalid payment method {payment_method!r}",
            {"allowed": [m.value for m in PaymentMethod]},
        )


def _flip_paid(db: Session, credit_id: int, method: PaymentMethod, paid_at: datetime) -> bool:
    flipped = db.execute(
        update(ClientCredit)
        .where(
            ClientCredit.credit_id == credit_id,
            ClientCredit.status == CreditStatus.UNPAID.value,
        )
        .values(status=CreditStatus.PAID.value, payment_method=method.value, paid_date=paid_at)
        .execution_options(synchronize_session=False)
    )
    return flipped.rowcount == 1


def get_credit(db: Session, credit_id: int) -> ClientCredit:
    credit = db.query(ClientCredit).filter(ClientCredit.credit_id == credit_id).first()
    if not credit:
        raise NotFound(f"Credit with ID {credit_id} not found", {"credit_id": credit_id})
    return credit


def mark_paid(db: Session, credit_id: int, payment_method) -> ClientCredit:
    """
    Settle an unpaid credit through UPI, a worker, or the owner.

    Payments recorded against the balance earlier already lowered it, so the
    amount collected here is whatever of the credit is still outstanding.
    """
    method = _payment_method(payment_method)

    credit = get_credit(db, credit_id)
    if credit.status == CreditStatus.PAID.value:
        raise AlreadyProcessed("Credit already marked as paid", {"credit_id": credit_id})

    total = to_decimal(credit.total_amount)
    paid_at = datetime.now(timezone.utc)
    try:
        if not _flip_paid(db, credit_id, method, paid_at):
            raise AlreadyProcessed("Credit already marked as paid", {"credit_id": credit_id})
        collected = min(total, _current_balance(db, credit.client_id))
        if collected > 0:
            if not _release_balance(db, credit.client_id, collected):
                raise InvalidInput(
                    "Client balance changed during settlement, try again",
                    {"client_id": credit.client_id, "credit_id": credit_id},
                )
            db.add(
                LedgerEntry(
                    client_id=credit.client_id,
                    amount=-collected,
                    memo=f"Credit payment received ({method.value})",
                    payment_method=method.value,
                    created_at=paid_at,
                )
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(credit)
    logger.info(
        "Credit marked paid",
        extra={
            "credit_id": credit_id,
            "client_id": credit.client_id,
            "payment_method": method.value,
            "collected": str(collected),
        },
    )
    return credit


def record_payment(
    db: Session,
    client_id: int,
    amount: Decimal,
    payment_method=PaymentMethod.WORKER,
    memo: Optional[str] = None,
) -> Client:
    """
    Payment against a client's running balance. Unpaid credits the payment
    covers in full are settled oldest first; any remainder stays on account
    and is netted off when the next credit is marked paid.
    """
    client = get_client(db, client_id)
    method = _payment_method(payment_method)
    amount = money(amount)
    if amount <= 0:
        raise InvalidInput("Payment amount must be greater than 0", {"amount": as_float(amount)})

    paid_at = datetime.now(timezone.utc)
    settled = []
    try:
        if not _release_balance(db, client_id, amount):
            balance = _current_balance(db, client_id)
            raise InvalidInput(
                f"Payment ({amount}) exceeds outstanding balance ({balance})",
                {"amount": as_float(amount), "balance": as_float(balance)},
            )

        remaining = amount
        unpaid = (
            db.query(ClientCredit)
            .filter(
                ClientCredit.client_id == client_id,
                ClientCredit.status == CreditStatus.UNPAID.value,
            )
            .order_by(ClientCredit.credit_date, ClientCredit.credit_id)
            .all()
        )
        for credit in unpaid:
            total = to_decimal(credit.total_amount)
            if total > remaining:
                break
            if _flip_paid(db, credit.credit_id, method, paid_at):
                remaining -= total
                settled.append(credit.credit_id)

        db.add(
            LedgerEntry(
                client_id=client_id,
                amount=-amount,
                memo=memo or "Payment",
                payment_method=method.value,
                created_at=paid_at,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.expire_all()
    db.refresh(client)
    logger.info(
        "Client payment recorded",
        extra={"client_id": client_id, "amount": str(amount), "settled_credits": settled},
    )
    return client


def list_credits(
    db: Session,
    client_id: Optional[int] = None,
    fuel_type_id: Optional[int] = None,
    status: Optional[CreditStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[ClientCredit]:
    query = db.query(ClientCredit)
    if client_id is not None:
        query = query.filter(ClientCredit.client_id == client_id)
    if fuel_type_id is not None:
        query = query.filter(ClientCredit.fuel_type_id == fuel_type_id)
    if status is not None:
        query = query.filter(ClientCredit.status == status.value)
    if start_date is not None:
        query = query.filter(ClientCredit.credit_date >= start_date)
    if end_date is not None:
        query = query.filter(ClientCredit.credit_date <= end_date)
    return query.order_by(ClientCredit.credit_date.desc(), ClientCredit.credit_id.desc()).all()


def client_ledger(db: Session, client_id: int) -> List[LedgerEntry]:
    get_client(db, client_id)
    return (
        db.query(LedgerEntry)
        .filter(LedgerEntry.client_id == client_id)
        .order_by(LedgerEntry.entry_id.desc())
        .all()
    )
