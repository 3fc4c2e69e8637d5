import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from fuelstation.core.errors import AlreadyProcessed, InvalidInput, NotFound
from fuelstation.models.enums import PurchaseStatus
from fuelstation.models.operations import Purchase
from fuelstation.models.station import PurchasePrice, Tank
from fuelstation.schemas.purchase import PurchaseCreate, UnloadResult
from fuelstation.services.tank_guard import apply_level_delta, get_tank, validate_purchase
from fuelstation.utils.numbers import ZERO, money, to_decimal

logger = logging.getLogger(__name__)

AVG_COST_PLACES = Decimal("0.0001")


def weighted_average_cost(avg_unit_cost, current_level, unit_cost, litres) -> Decimal:
    """Blend the cost of fuel on hand with the cost of a delivery, by volume."""
    avg_unit_cost = to_decimal(avg_unit_cost)
    current_level = to_decimal(current_level)
    unit_cost = to_decimal(unit_cost)
    litres = to_decimal(litres)
    total_litres = current_level + litres
    if total_litres <= 0:
        return unit_cost
    blended = (avg_unit_cost * current_level + unit_cost * litres) / total_litres
    return blended.quantize(AVG_COST_PLACES)


def create_purchase(db: Session, payload: PurchaseCreate) -> Purchase:
    """
    Record a delivery as pending paperwork. The tank is not touched until the
    fuel is confirmed unloaded.
    """
    # Early feedback only; unload re-checks against the level at that time.
    validate_purchase(db, payload.tank_id, payload.litres)

    purchase = Purchase(
        tank_id=payload.tank_id,
        litres=payload.litres,
        unit_cost=payload.unit_cost,
        total_cost=money(payload.litres * payload.unit_cost),
        status=PurchaseStatus.PENDING.value,
        purchase_date=payload.purchase_date or date.today(),
    )
    try:
        db.add(purchase)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(purchase)
    logger.info(
        "Purchase recorded as pending",
        extra={"purchase_id": purchase.purchase_id, "tank_id": purchase.tank_id, "litres": str(purchase.litres)},
    )
    return purchase


def get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = db.query(Purchase).filter(Purchase.purchase_id == purchase_id).first()
    if not purchase:
        raise NotFound(f"Purchase with ID {purchase_id} not found", {"purchase_id": purchase_id})
    return purchase


def unload_purchase(db: Session, purchase_id: int) -> UnloadResult:
    """
    Apply a pending delivery to its tank exactly once: flip the status, raise
    the level and re-blend the average unit cost in one transaction.
    """
    purchase = get_purchase(db, purchase_id)
    if purchase.status == PurchaseStatus.UNLOADED.value:
        raise AlreadyProcessed(
            "Purchase already marked as unloaded",
            {"purchase_id": purchase_id},
        )

    tank = get_tank(db, purchase.tank_id)
    litres = to_decimal(purchase.litres)
    validate_purchase(db, tank.tank_id, litres)
    old_level = to_decimal(tank.current_level)

    try:
        flipped = db.execute(
            update(Purchase)
            .where(
                Purchase.purchase_id == purchase_id,
                Purchase.status == PurchaseStatus.PENDING.value,
            )
            .values(status=PurchaseStatus.UNLOADED.value, unloaded_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if flipped.rowcount == 0:
            raise AlreadyProcessed(
                "Purchase already marked as unloaded",
                {"purchase_id": purchase_id},
            )

        new_level = apply_level_delta(db, tank.tank_id, litres)
        # Blend against the level the delivery actually landed on.
        level_before = new_level - litres
        avg_cost = weighted_average_cost(tank.avg_unit_cost, level_before, purchase.unit_cost, litres)
        db.execute(
            update(Tank)
            .where(Tank.tank_id == tank.tank_id)
            .values(avg_unit_cost=avg_cost)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    db.refresh(tank)
    logger.info(
        "Purchase unloaded",
        extra={
            "purchase_id": purchase_id,
            "tank_id": tank.tank_id,
            "old_level": str(old_level),
            "new_level": str(new_level),
            "avg_unit_cost": str(avg_cost),
        },
    )
    return UnloadResult(
        purchase_id=purchase_id,
        tank_id=tank.tank_id,
        tank_name=tank.name,
        old_level=level_before,
        new_level=new_level,
        added_litres=litres,
        avg_unit_cost=avg_cost,
    )


def list_purchases(
    db: Session,
    status: Optional[PurchaseStatus] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[Purchase]:
    query = db.query(Purchase)
    if status is not None:
        query = query.filter(Purchase.status == status.value)
    return (
        query.order_by(Purchase.purchase_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def set_purchase_prices(db: Session, prices: Dict[int, Decimal]) -> List[PurchasePrice]:
    """Append one purchase price per tank; the newest row is the current one."""
    if not prices:
        raise InvalidInput("Prices data required")

    entries = []
    for tank_id, price in prices.items():
        get_tank(db, tank_id)
        amount = to_decimal(price)
        if amount <= ZERO:
            raise InvalidInput(f"Purchase price for tank {tank_id} must be greater than 0", {"tank_id": tank_id})
        entries.append(PurchasePrice(tank_id=tank_id, price=amount, created_at=datetime.now(timezone.utc)))

    try:
        db.add_all(entries)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Purchase prices saved", extra={"tanks": list(prices.keys())})
    return entries


def latest_purchase_prices(db: Session) -> Dict[int, Decimal]:
    latest: Dict[int, Decimal] = {}
    rows = (
        db.query(PurchasePrice)
        .order_by(PurchasePrice.created_at.desc(), PurchasePrice.purchase_price_id.desc())
        .all()
    )
    for row in rows:
        latest.setdefault(row.tank_id, to_decimal(row.price))
    return latest
