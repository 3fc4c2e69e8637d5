import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from fuelstation.core.errors import BelowCurrentLevel, InvalidInput, NotFound, StationError
from fuelstation.models.audit import AuditLog
from fuelstation.models.enums import AuditAction
from fuelstation.models.station import FuelType, Tank
from fuelstation.schemas.station import (
    CapacitySkipped,
    CapacityStatsOut,
    CapacityStatsSummary,
    CapacityUpdateItem,
    CapacityUpdateResponse,
    CapacityUpdateResult,
    TankCapacityStat,
    TankCreate,
    TankUpdate,
    TankWithPriceOut,
)
from fuelstation.services.audit_log_service import write_audit
from fuelstation.services.price_service import get_active_price
from fuelstation.services.tank_guard import get_tank, set_tank_bounds, validate_capacity_update
from fuelstation.utils.numbers import ZERO, as_float, to_decimal

logger = logging.getLogger(__name__)


def _percentage(level: Decimal, capacity: Decimal) -> float:
    if not capacity:
        return 0.0
    return round(float(level / capacity * 100), 2)


def _snapshot(tank: Tank) -> dict:
    level = to_decimal(tank.current_level)
    capacity = to_decimal(tank.capacity_lit)
    return {
        "capacity": str(capacity),
        "level": str(level),
        "percentage": _percentage(level, capacity),
    }


def list_tanks(db: Session, include_inactive: bool = False) -> List[TankWithPriceOut]:
    query = db.query(Tank).options(joinedload(Tank.fuel_type))
    if not include_inactive:
        query = query.filter(Tank.is_active.is_(True))
    tanks = query.order_by(Tank.tank_id).all()

    prices = {}
    results = []
    for tank in tanks:
        if tank.fuel_type_id not in prices:
            active = get_active_price(db, tank.fuel_type_id)
            prices[tank.fuel_type_id] = active.per_litre if active else None
        out = TankWithPriceOut.model_validate(tank)
        out.current_price = prices[tank.fuel_type_id]
        results.append(out)
    return results


def create_tank(db: Session, payload: TankCreate) -> Tank:
    if not db.query(FuelType).filter(FuelType.fuel_type_id == payload.fuel_type_id).first():
        raise NotFound(
            f"Fuel type with ID {payload.fuel_type_id} not found",
            {"fuel_type_id": payload.fuel_type_id},
        )
    if payload.current_level > payload.capacity_lit:
        raise InvalidInput(
            "Current level cannot exceed capacity",
            {"current_level": as_float(payload.current_level), "capacity": as_float(payload.capacity_lit)},
        )

    tank = Tank(
        name=payload.name.strip(),
        fuel_type_id=payload.fuel_type_id,
        capacity_lit=payload.capacity_lit,
        current_level=payload.current_level,
        avg_unit_cost=ZERO,
        is_active=True,
    )
    try:
        db.add(tank)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(tank)
    logger.info("Tank created", extra={"tank_id": tank.tank_id, "fuel_type_id": tank.fuel_type_id})
    return tank


def update_tank(db: Session, tank_id: int, payload: TankUpdate) -> Tank:
    """
    Administrative edit of name, level or capacity. The resulting tank must
    still satisfy 0 <= level <= capacity; every change is audited.
    """
    tank = get_tank(db, tank_id)
    if payload.name is None and payload.current_level is None and payload.capacity_lit is None:
        raise InvalidInput("No valid fields to update")

    level = to_decimal(tank.current_level)
    capacity = to_decimal(tank.capacity_lit)
    if payload.current_level is not None:
        level = to_decimal(payload.current_level)
        if level < 0:
            raise InvalidInput("Current level must be a positive number", {"current_level": as_float(level)})
    if payload.capacity_lit is not None:
        capacity = to_decimal(payload.capacity_lit)
        if capacity <= 0:
            raise InvalidInput("Capacity must be a positive number", {"capacity_lit": as_float(capacity)})
    if capacity < level:
        raise BelowCurrentLevel(
            f"Capacity ({capacity}L) cannot be less than current level ({level}L)",
            {"tank_id": tank_id, "current_level": as_float(level), "capacity": as_float(capacity)},
        )

    old_values = _snapshot(tank)
    old_values["name"] = tank.name
    new_values = {
        "capacity": str(capacity),
        "level": str(level),
        "percentage": _percentage(level, capacity),
        "name": payload.name.strip() if payload.name is not None else tank.name,
    }
    try:
        if payload.name is not None:
            tank.name = new_values["name"]
        set_tank_bounds(
            db,
            tank_id,
            capacity=capacity if payload.capacity_lit is not None else None,
            level=level if payload.current_level is not None else None,
        )
        write_audit(
            db,
            AuditAction.TANK_UPDATE,
            "Tank",
            tank.tank_id,
            old_values=old_values,
            new_values=new_values,
            reason=payload.reason or "Manual tank update",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(tank)
    logger.info("Tank updated", extra={"tank_id": tank_id, "old": old_values, "new": new_values})
    return tank


def deactivate_tank(db: Session, tank_id: int, reason: Optional[str] = None) -> Tank:
    """Tanks are never deleted; they are switched off."""
    tank = get_tank(db, tank_id)
    if not tank.is_active:
        return tank
    try:
        tank.is_active = False
        write_audit(
            db,
            AuditAction.TANK_DEACTIVATE,
            "Tank",
            tank.tank_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
            reason=reason or "Tank deactivated",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(tank)
    logger.info("Tank deactivated", extra={"tank_id": tank_id})
    return tank


def update_capacities(db: Session, updates: List[CapacityUpdateItem]) -> CapacityUpdateResponse:
    """
    Apply a batch of capacity corrections. Items that fail the guard are
    reported as skipped; the rest are audited and committed together.
    """
    logger.info("Starting tank capacity updates", extra={"update_count": len(updates)})
    results: List[CapacityUpdateResult] = []
    skipped: List[CapacitySkipped] = []

    try:
        for item in updates:
            new_capacity = to_decimal(item.new_capacity)
            try:
                validate_capacity_update(db, item.tank_id, new_capacity)
                tank = get_tank(db, item.tank_id)
                old_values = _snapshot(tank)
                old_capacity = to_decimal(tank.capacity_lit)
                set_tank_bounds(db, item.tank_id, capacity=new_capacity)
            except StationError as exc:
                logger.warning(
                    "Capacity update skipped",
                    extra={"tank_id": item.tank_id, "error": exc.code},
                )
                skipped.append(CapacitySkipped(tank_id=item.tank_id, error=exc.code, message=exc.message))
                continue

            level = to_decimal(tank.current_level)
            write_audit(
                db,
                AuditAction.TANK_CAPACITY_UPDATE,
                "Tank",
                tank.tank_id,
                old_values=old_values,
                new_values=_snapshot(tank),
                reason=item.reason or "Capacity update",
            )
            results.append(
                CapacityUpdateResult(
                    tank_id=tank.tank_id,
                    tank_name=tank.name,
                    fuel_type=tank.fuel_type.name if tank.fuel_type else None,
                    old_capacity=old_capacity,
                    new_capacity=new_capacity,
                    current_level=level,
                    old_percentage=_percentage(level, old_capacity),
                    new_percentage=_percentage(level, new_capacity),
                    reason=item.reason,
                )
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "All tank capacity updates completed",
        extra={"success_count": len(results), "total_updates": len(updates)},
    )
    return CapacityUpdateResponse(
        results=results,
        skipped=skipped,
        total_requested=len(updates),
        total_updated=len(results),
    )


def capacity_history(db: Session, tank_id: Optional[int] = None, limit: int = 50) -> List[AuditLog]:
    query = db.query(AuditLog).filter(AuditLog.action == AuditAction.TANK_CAPACITY_UPDATE.value)
    if tank_id is not None:
        query = query.filter(AuditLog.entity_id == tank_id)
    return query.order_by(AuditLog.log_id.desc()).limit(limit).all()


def _level_status(percentage: float) -> str:
    if percentage > 90:
        return "high"
    if percentage > 70:
        return "medium"
    return "low"


def capacity_stats(db: Session) -> CapacityStatsOut:
    tanks = (
        db.query(Tank)
        .options(joinedload(Tank.fuel_type))
        .filter(Tank.is_active.is_(True))
        .order_by(Tank.tank_id)
        .all()
    )

    stats = []
    total_capacity = ZERO
    total_level = ZERO
    for tank in tanks:
        level = to_decimal(tank.current_level)
        capacity = to_decimal(tank.capacity_lit)
        percentage = _percentage(level, capacity)
        total_capacity += capacity
        total_level += level
        stats.append(
            TankCapacityStat(
                tank_id=tank.tank_id,
                name=tank.name,
                fuel_type=tank.fuel_type.name if tank.fuel_type else None,
                current_level=level,
                capacity=capacity,
                percentage=percentage,
                available_capacity=capacity - level,
                status=_level_status(percentage),
            )
        )

    return CapacityStatsOut(
        tanks=stats,
        summary=CapacityStatsSummary(
            total_tanks=len(stats),
            total_capacity=total_capacity,
            total_current_level=total_level,
            overall_percentage=_percentage(total_level, total_capacity),
            high_level_tanks=sum(1 for s in stats if s.status == "high"),
            medium_level_tanks=sum(1 for s in stats if s.status == "medium"),
            low_level_tanks=sum(1 for s in stats if s.status == "low"),
        ),
    )
