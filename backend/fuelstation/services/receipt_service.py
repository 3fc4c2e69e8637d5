import logging
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from fuelstation.core.errors import NotFound
from fuelstation.models.operations import CashReceipt, OnlinePayment
from fuelstation.models.station import Pump
from fuelstation.schemas.receipt import CashReceiptCreate, OnlinePaymentCreate

logger = logging.getLogger(__name__)


def _stage_cash_receipt(db: Session, payload: CashReceiptCreate) -> CashReceipt:
    if not db.query(Pump).filter(Pump.pump_id == payload.pump_id).first():
        raise NotFound(f"Pump with ID {payload.pump_id} not found", {"pump_id": payload.pump_id})

    receipt = (
        db.query(CashReceipt)
        .filter(
            CashReceipt.pump_id == payload.pump_id,
            CashReceipt.receipt_date == payload.receipt_date,
        )
        .first()
    )
    if receipt is None:
        receipt = CashReceipt(pump_id=payload.pump_id, receipt_date=payload.receipt_date)
        db.add(receipt)
    receipt.amount = payload.amount
    return receipt


def upsert_cash_receipt(db: Session, payload: CashReceiptCreate) -> CashReceipt:
    """One cash figure per pump per day; re-submitting replaces the amount."""
    try:
        receipt = _stage_cash_receipt(db, payload)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(receipt)
    logger.info(
        "Cash receipt saved",
        extra={"pump_id": payload.pump_id, "receipt_date": str(payload.receipt_date), "amount": str(payload.amount)},
    )
    return receipt


def upsert_cash_receipts(db: Session, receipts: List[CashReceiptCreate]) -> List[CashReceipt]:
    try:
        saved = []
        for payload in receipts:
            saved.append(_stage_cash_receipt(db, payload))
            db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise
    for receipt in saved:
        db.refresh(receipt)
    logger.info("Cash receipts saved", extra={"count": len(saved)})
    return saved


def list_cash_receipts(db: Session, day: date) -> List[CashReceipt]:
    return (
        db.query(CashReceipt)
        .filter(CashReceipt.receipt_date == day)
        .order_by(CashReceipt.pump_id)
        .all()
    )


def create_online_payment(db: Session, payload: OnlinePaymentCreate) -> OnlinePayment:
    payment = OnlinePayment(
        payment_date=payload.payment_date,
        amount=payload.amount,
        method=payload.method,
        reference=payload.reference,
        description=payload.description,
    )
    try:
        db.add(payment)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)
    logger.info("Online payment saved", extra={"payment_id": payment.payment_id, "amount": str(payment.amount)})
    return payment


def list_online_payments(db: Session, day: date) -> List[OnlinePayment]:
    return (
        db.query(OnlinePayment)
        .filter(OnlinePayment.payment_date == day)
        .order_by(OnlinePayment.payment_id.desc())
        .all()
    )
