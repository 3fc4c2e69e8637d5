import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from fuelstation.core.errors import InvalidInput, NotFound
from fuelstation.models.enums import AuditAction
from fuelstation.models.station import FuelType, Price
from fuelstation.schemas.station import CurrentPriceOut
from fuelstation.services.audit_log_service import write_audit
from fuelstation.utils.numbers import to_decimal
from fuelstation.utils.text_cleaner import fuel_key

logger = logging.getLogger(__name__)


def get_active_price(db: Session, fuel_type_id: int) -> Optional[Price]:
    return (
        db.query(Price)
        .filter(Price.fuel_type_id == fuel_type_id, Price.is_active.is_(True))
        .order_by(Price.created_at.desc(), Price.price_id.desc())
        .first()
    )


def _snapshot_time(effective_date: Optional[date]) -> datetime:
    if effective_date is None:
        return datetime.now(timezone.utc)
    return datetime.combine(effective_date, time.min, tzinfo=timezone.utc)


def set_price(db: Session, fuel_type_id: int, per_litre: Decimal) -> Price:
    """Deactivate the current price of one fuel type and insert the new one."""
    if not db.query(FuelType).filter(FuelType.fuel_type_id == fuel_type_id).first():
        raise NotFound(f"Fuel type with ID {fuel_type_id} not found", {"fuel_type_id": fuel_type_id})
    per_litre = to_decimal(per_litre)
    if per_litre <= 0:
        raise InvalidInput("Price per litre must be greater than 0", {"per_litre": float(per_litre)})

    try:
        db.query(Price).filter(
            Price.fuel_type_id == fuel_type_id,
            Price.is_active.is_(True),
        ).update({Price.is_active: False}, synchronize_session=False)
        price = Price(
            fuel_type_id=fuel_type_id,
            per_litre=per_litre,
            is_active=True,
            created_at=_snapshot_time(None),
        )
        db.add(price)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(price)
    logger.info("Price set", extra={"fuel_type_id": fuel_type_id, "per_litre": str(per_litre)})
    return price


def set_prices(
    db: Session,
    prices: Dict[str, Decimal],
    effective_date: Optional[date] = None,
) -> List[Price]:
    """
    Snapshot new prices for several fuel types at once.

    Keys are fuel type names in ``fuel_key`` form ("premiumpetrol"). Only the
    named fuel types change; each ends with exactly one active price, all
    sharing the same ``created_at``.
    """
    if not prices:
        raise InvalidInput("prices object is required")

    fuel_types = {fuel_key(ft.name): ft for ft in db.query(FuelType).all()}
    unknown = sorted(key for key in prices if fuel_key(key) not in fuel_types)
    if unknown:
        raise InvalidInput(f"Unknown fuel types: {', '.join(unknown)}", {"unknown": unknown})

    resolved: Dict[int, Decimal] = {}
    for key, value in prices.items():
        amount = to_decimal(value, default=None)
        if amount is None or amount <= 0:
            raise InvalidInput(f"Missing or invalid price for: {key}", {"fuel_type": key})
        resolved[fuel_types[fuel_key(key)].fuel_type_id] = amount

    created_at = _snapshot_time(effective_date)
    try:
        previous = {
            price.fuel_type_id: str(price.per_litre)
            for price in db.query(Price).filter(
                Price.fuel_type_id.in_(resolved.keys()),
                Price.is_active.is_(True),
            )
        }
        db.query(Price).filter(
            Price.fuel_type_id.in_(resolved.keys()),
            Price.is_active.is_(True),
        ).update({Price.is_active: False}, synchronize_session=False)

        new_prices = []
        for fuel_type_id, amount in resolved.items():
            price = Price(
                fuel_type_id=fuel_type_id,
                per_litre=amount,
                is_active=True,
                created_at=created_at,
            )
            db.add(price)
            new_prices.append(price)
            write_audit(
                db,
                AuditAction.PRICE_SET,
                "FuelType",
                fuel_type_id,
                old_values={"per_litre": previous.get(fuel_type_id)},
                new_values={"per_litre": str(amount)},
                reason="Price snapshot",
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    for price in new_prices:
        db.refresh(price)
    logger.info("Price snapshot saved", extra={"fuel_types": list(resolved.keys())})
    return new_prices


def list_prices(db: Session, limit: int = 200) -> List[Price]:
    return (
        db.query(Price)
        .order_by(Price.created_at.desc(), Price.price_id.desc())
        .limit(limit)
        .all()
    )


def current_prices(db: Session) -> List[CurrentPriceOut]:
    results = []
    for fuel_type in db.query(FuelType).order_by(FuelType.fuel_type_id).all():
        price = get_active_price(db, fuel_type.fuel_type_id)
        results.append(
            CurrentPriceOut(
                fuel_type_id=fuel_type.fuel_type_id,
                name=fuel_type.name,
                key=fuel_key(fuel_type.name),
                price=price.per_litre if price else None,
                updated_at=price.created_at if price else None,
            )
        )
    return results


def price_history(db: Session, limit: int = 200) -> List[dict]:
    """
    Price timeline pivoted to one row per snapshot timestamp:
    ``{"date": ..., "petrol": 100.0, "diesel": 90.0}``, newest first.
    """
    rows = (
        db.query(Price.created_at, Price.per_litre, FuelType.name)
        .join(FuelType, FuelType.fuel_type_id == Price.fuel_type_id)
        .order_by(Price.created_at.desc())
        .limit(limit)
        .all()
    )
    if not rows:
        return []

    df = pd.DataFrame(
        [
            {"date": row.created_at, "fuel": fuel_key(row.name), "price": float(row.per_litre)}
            for row in rows
        ]
    )
    pivot = df.pivot_table(index="date", columns="fuel", values="price", aggfunc="last")
    pivot = pivot.sort_index(ascending=False)

    history = []
    for timestamp, series in pivot.iterrows():
        entry = {"date": pd.Timestamp(timestamp).isoformat()}
        entry.update({fuel: value for fuel, value in series.items() if not pd.isna(value)})
        history.append(entry)
    return history
