"""
Tank inventory guard.

The ``validate_*`` functions are read-then-decide pre-checks with no side
effects; they exist to reject bad requests early with useful detail. The
level itself only ever moves through ``apply_level_delta``, a single
conditional UPDATE that re-checks ``0 <= level <= capacity`` in the database,
so two requests racing on the same tank cannot both commit past the limits.
Administrative edits go through ``set_tank_bounds`` under the same rule.
"""
import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from fuelstation.core.errors import (
    BelowCurrentLevel,
    InsufficientCapacity,
    InsufficientStock,
    InvalidInput,
    NotFound,
)
from fuelstation.models.station import Tank
from fuelstation.schemas.station import TankCheck, TankStatus
from fuelstation.utils.numbers import ZERO, as_float, to_decimal

logger = logging.getLogger(__name__)

LEVEL_SCALE = 2


def get_tank(db: Session, tank_id: int) -> Tank:
    tank = db.query(Tank).filter(Tank.tank_id == tank_id).first()
    if not tank:
        raise NotFound(f"Tank with ID {tank_id} not found", {"tank_id": tank_id})
    return tank


def _check(tank: Tank) -> TankCheck:
    level = to_decimal(tank.current_level)
    capacity = to_decimal(tank.capacity_lit)
    return TankCheck(
        tank_id=tank.tank_id,
        current_level=level,
        capacity=capacity,
        available_fuel=level,
        available_space=capacity - level,
    )


def _details(check: TankCheck, **extra: Any) -> dict:
    details = {
        "tank_id": check.tank_id,
        "current_level": as_float(check.current_level),
        "capacity": as_float(check.capacity),
        "available_fuel": as_float(check.available_fuel),
        "available_space": as_float(check.available_space),
    }
    details.update({key: as_float(value) for key, value in extra.items()})
    return details


def validate_sale(db: Session, tank_id: int, litres_to_sell: Any) -> TankCheck:
    """Check the tank holds at least ``litres_to_sell``."""
    tank = get_tank(db, tank_id)
    litres = to_decimal(litres_to_sell)
    if litres <= 0:
        raise InvalidInput("Litres to sell must be greater than 0", {"litres": as_float(litres)})

    check = _check(tank)
    if litres > check.available_fuel:
        logger.warning(
            "Sale rejected: insufficient fuel",
            extra={"tank_id": tank_id, "available": str(check.available_fuel), "requested": str(litres)},
        )
        raise InsufficientStock(
            f"Insufficient fuel in tank. Available: {check.available_fuel}L, trying to sell: {litres}L",
            _details(check, requested=litres),
        )
    return check


def validate_purchase(db: Session, tank_id: int, litres_to_unload: Any) -> TankCheck:
    """Check the tank has headroom for ``litres_to_unload``."""
    tank = get_tank(db, tank_id)
    litres = to_decimal(litres_to_unload)
    if litres <= 0:
        raise InvalidInput("Litres to unload must be greater than 0", {"litres": as_float(litres)})

    check = _check(tank)
    if litres > check.available_space:
        logger.warning(
            "Unload rejected: insufficient space",
            extra={"tank_id": tank_id, "available_space": str(check.available_space), "requested": str(litres)},
        )
        raise InsufficientCapacity(
            f"Insufficient space in tank. Available space: {check.available_space}L, "
            f"trying to unload: {litres}L. Tank capacity: {check.capacity}L, "
            f"current level: {check.current_level}L",
            _details(check, requested=litres),
        )
    return check


def validate_capacity_update(db: Session, tank_id: int, new_capacity: Any) -> TankCheck:
    """Capacity must stay positive and never drop below the fuel already in the tank."""
    tank = get_tank(db, tank_id)
    capacity = to_decimal(new_capacity)
    if capacity <= 0:
        raise InvalidInput("New capacity must be greater than 0", {"new_capacity": as_float(capacity)})

    level = to_decimal(tank.current_level)
    if capacity < level:
        raise BelowCurrentLevel(
            f"New capacity ({capacity}L) cannot be less than current level ({level}L)",
            {"tank_id": tank_id, "current_level": as_float(level), "new_capacity": as_float(capacity)},
        )
    return TankCheck(
        tank_id=tank.tank_id,
        current_level=level,
        capacity=capacity,
        available_fuel=level,
        available_space=capacity - level,
    )


def tank_status(db: Session, tank_id: int) -> TankStatus:
    tank = get_tank(db, tank_id)
    check = _check(tank)
    percentage = float(check.current_level / check.capacity * 100) if check.capacity else 0.0
    return TankStatus(
        tank_id=tank.tank_id,
        name=tank.name,
        fuel_type=tank.fuel_type.name if tank.fuel_type else None,
        current_level=check.current_level,
        capacity=check.capacity,
        available_space=check.available_space,
        percentage=round(percentage, 2),
        can_sell=check.current_level > 0,
        can_unload=check.available_space > 0,
    )


def apply_level_delta(db: Session, tank_id: int, delta: Any) -> Decimal:
    """
    Move the tank level by ``delta`` litres (negative = fuel out) inside the
    caller's transaction and return the new level.

    The bounds are part of the UPDATE's WHERE clause; if no row matches, the
    tank is missing or the move would leave [0, capacity].
    """
    delta = to_decimal(delta)
    # Numeric columns are floats on SQLite; compare and store at the column scale.
    new_level = func.round(Tank.current_level + delta, LEVEL_SCALE)
    if delta != ZERO:
        result = db.execute(
            update(Tank)
            .where(
                Tank.tank_id == tank_id,
                new_level >= 0,
                new_level <= func.round(Tank.capacity_lit, LEVEL_SCALE),
            )
            .values(current_level=new_level)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            _raise_rejected_delta(db, tank_id, delta)

        cached = db.get(Tank, tank_id)
        if cached is not None:
            db.expire(cached, ["current_level"])

    level = db.execute(select(Tank.current_level).where(Tank.tank_id == tank_id)).scalar_one_or_none()
    if level is None:
        raise NotFound(f"Tank with ID {tank_id} not found", {"tank_id": tank_id})
    return to_decimal(level)


def _raise_rejected_delta(db: Session, tank_id: int, delta: Decimal) -> None:
    row = db.execute(
        select(Tank.current_level, Tank.capacity_lit).where(Tank.tank_id == tank_id)
    ).first()
    if row is None:
        raise NotFound(f"Tank with ID {tank_id} not found", {"tank_id": tank_id})

    level, capacity = to_decimal(row.current_level), to_decimal(row.capacity_lit)
    details = {
        "tank_id": tank_id,
        "current_level": as_float(level),
        "capacity": as_float(capacity),
        "delta": as_float(delta),
    }
    logger.warning("Tank level change rejected", extra=details)
    if delta < 0:
        raise InsufficientStock(
            f"Insufficient fuel in tank. Available: {level}L, trying to remove: {-delta}L",
            details,
        )
    raise InsufficientCapacity(
        f"Insufficient space in tank. Available space: {capacity - level}L, trying to add: {delta}L",
        details,
    )


def set_tank_bounds(db: Session, tank_id: int, capacity: Any = None, level: Any = None) -> None:
    """
    Write an absolute capacity and/or level inside the caller's transaction.

    ``level <= capacity`` is re-checked against the row as it is at UPDATE
    time, so a level moved by a concurrent sale or unload is never left above
    a newly written capacity.
    """
    values = {}
    conditions = [Tank.tank_id == tank_id]
    if capacity is not None:
        capacity = to_decimal(capacity)
        values["capacity_lit"] = capacity
    if level is not None:
        level = to_decimal(level)
        values["current_level"] = level
    if not values:
        return

    if capacity is not None and level is not None:
        if capacity < level:
            raise BelowCurrentLevel(
                f"Capacity ({capacity}L) cannot be less than current level ({level}L)",
                {"tank_id": tank_id, "current_level": as_float(level), "capacity": as_float(capacity)},
            )
    elif capacity is not None:
        conditions.append(func.round(Tank.current_level, LEVEL_SCALE) <= capacity)
    else:
        conditions.append(func.round(Tank.capacity_lit, LEVEL_SCALE) >= level)

    result = db.execute(
        update(Tank)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        row = db.execute(
            select(Tank.current_level, Tank.capacity_lit).where(Tank.tank_id == tank_id)
        ).first()
        if row is None:
            raise NotFound(f"Tank with ID {tank_id} not found", {"tank_id": tank_id})
        live_level = to_decimal(row.current_level) if level is None else level
        live_capacity = to_decimal(row.capacity_lit) if capacity is None else capacity
        logger.warning(
            "Tank bounds change rejected",
            extra={"tank_id": tank_id, "current_level": str(live_level), "capacity": str(live_capacity)},
        )
        raise BelowCurrentLevel(
            f"Capacity ({live_capacity}L) cannot be less than current level ({live_level}L)",
            {"tank_id": tank_id, "current_level": as_float(live_level), "capacity": as_float(live_capacity)},
        )

    cached = db.get(Tank, tank_id)
    if cached is not None:
        db.expire(cached, list(values))
