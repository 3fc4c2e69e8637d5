import logging
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from fuelstation.core.errors import InvalidInput, NotFound
from fuelstation.models.client import LedgerEntry
from fuelstation.models.enums import SaleMethod
from fuelstation.models.operations import Sale
from fuelstation.models.station import Pump
from fuelstation.schemas.sale import SaleCreate
from fuelstation.services.credit_service import charge_balance, get_client
from fuelstation.services.price_service import get_active_price
from fuelstation.services.tank_guard import apply_level_delta, get_tank, validate_sale
from fuelstation.utils.numbers import money, to_decimal

logger = logging.getLogger(__name__)


def record_sale(db: Session, payload: SaleCreate) -> Sale:
    """
    Sell fuel straight from a tank at the active price. Credit sales charge
    the client's balance in the same transaction as the tank withdrawal.
    """
    tank = get_tank(db, payload.tank_id)
    if not tank.is_active:
        raise InvalidInput("Tank is inactive", {"tank_id": tank.tank_id})
    if payload.pump_id is not None:
        pump = db.query(Pump).filter(Pump.pump_id == payload.pump_id).first()
        if not pump:
            raise NotFound(f"Pump with ID {payload.pump_id} not found", {"pump_id": payload.pump_id})
        if pump.fuel_type_id != tank.fuel_type_id:
            raise InvalidInput("Pump and tank dispense different fuel types", {"pump_id": pump.pump_id})

    validate_sale(db, tank.tank_id, payload.litres)

    price = get_active_price(db, tank.fuel_type_id)
    if not price:
        raise InvalidInput("No active price for this fuel type", {"fuel_type_id": tank.fuel_type_id})

    litres = to_decimal(payload.litres)
    per_litre = to_decimal(price.per_litre)
    total = money(litres * per_litre)
    cost_per_litre = to_decimal(tank.avg_unit_cost)
    profit = money(total - cost_per_litre * litres)

    client = None
    if payload.method == SaleMethod.CREDIT:
        if payload.client_id is None:
            raise InvalidInput("client_id required for credit sales")
        client = get_client(db, payload.client_id)

    sale = Sale(
        tank_id=tank.tank_id,
        pump_id=payload.pump_id,
        client_id=payload.client_id,
        litres=litres,
        price_per_litre=per_litre,
        total_amount=total,
        cost_per_litre=cost_per_litre,
        profit=profit,
        method=payload.method.value,
        sale_date=payload.sale_date or date.today(),
        note=payload.note,
    )
    try:
        if client is not None:
            charge_balance(db, client, total)
            db.add(LedgerEntry(client_id=client.client_id, amount=total, memo="Fuel on credit"))
        apply_level_delta(db, tank.tank_id, -litres)
        db.add(sale)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sale)
    logger.info(
        "Sale recorded",
        extra={"sale_id": sale.sale_id, "tank_id": tank.tank_id, "litres": str(litres), "method": sale.method},
    )
    return sale


def list_sales(db: Session, limit: int = 100, offset: int = 0) -> List[Sale]:
    return (
        db.query(Sale)
        .order_by(Sale.sale_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
