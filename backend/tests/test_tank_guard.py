from decimal import Decimal

import pytest

from fuelstation.core.errors import (
    BelowCurrentLevel,
    InsufficientCapacity,
    InsufficientStock,
    InvalidInput,
    NotFound,
)
from fuelstation.models.station import Tank
from fuelstation.services.tank_guard import (
    apply_level_delta,
    set_tank_bounds,
    tank_status,
    validate_capacity_update,
    validate_purchase,
    validate_sale,
)


def _level(db, tank_id):
    db.expire_all()
    return db.get(Tank, tank_id).current_level


@pytest.mark.parametrize("litres", ["0.01", "1", "250", "500"])
def test_validate_sale_accepts_up_to_current_level(db, seed, litres):
    check = validate_sale(db, seed["petrol_tank"], Decimal(litres))
    assert check.available_fuel == Decimal("500")


@pytest.mark.parametrize("litres", ["500.01", "501", "10000"])
def test_validate_sale_rejects_more_than_current_level(db, seed, litres):
    with pytest.raises(InsufficientStock) as exc_info:
        validate_sale(db, seed["petrol_tank"], Decimal(litres))
    assert exc_info.value.details["available_fuel"] == 500.0
    assert exc_info.value.details["requested"] == float(litres)


@pytest.mark.parametrize("litres", ["0", "-5"])
def test_validate_sale_rejects_non_positive(db, seed, litres):
    with pytest.raises(InvalidInput):
        validate_sale(db, seed["petrol_tank"], Decimal(litres))


def test_validate_sale_unknown_tank(db, seed):
    with pytest.raises(NotFound):
        validate_sale(db, 999, Decimal("1"))


def test_validate_purchase_checks_headroom(db, seed):
    check = validate_purchase(db, seed["petrol_tank"], Decimal("500"))
    assert check.available_space == Decimal("500")

    with pytest.raises(InsufficientCapacity) as exc_info:
        validate_purchase(db, seed["petrol_tank"], Decimal("600"))
    assert exc_info.value.details["available_space"] == 500.0
    assert exc_info.value.code == "InsufficientCapacity"


def test_validate_capacity_update(db, seed):
    check = validate_capacity_update(db, seed["petrol_tank"], Decimal("500"))
    assert check.available_space == Decimal("0")

    with pytest.raises(BelowCurrentLevel):
        validate_capacity_update(db, seed["petrol_tank"], Decimal("499"))
    with pytest.raises(InvalidInput):
        validate_capacity_update(db, seed["petrol_tank"], Decimal("0"))


def test_apply_level_delta_moves_level(db, seed):
    level = apply_level_delta(db, seed["petrol_tank"], Decimal("-120"))
    db.commit()
    assert level == Decimal("380")
    assert _level(db, seed["petrol_tank"]) == Decimal("380")

    level = apply_level_delta(db, seed["petrol_tank"], Decimal("620"))
    db.commit()
    assert level == Decimal("1000")


def test_apply_level_delta_refuses_to_go_below_zero(db, seed):
    with pytest.raises(InsufficientStock):
        apply_level_delta(db, seed["petrol_tank"], Decimal("-500.01"))
    db.rollback()
    assert _level(db, seed["petrol_tank"]) == Decimal("500")


def test_apply_level_delta_refuses_to_overfill(db, seed):
    with pytest.raises(InsufficientCapacity):
        apply_level_delta(db, seed["petrol_tank"], Decimal("500.01"))
    db.rollback()
    assert _level(db, seed["petrol_tank"]) == Decimal("500")


def test_apply_level_delta_unknown_tank(db, seed):
    with pytest.raises(NotFound):
        apply_level_delta(db, 999, Decimal("1"))


def test_level_stays_in_bounds_after_mixed_operations(db, seed):
    tank_id = seed["petrol_tank"]
    for delta in ["-300", "+700", "-1000", "+1000", "-0.5", "+0.5", "-2000", "+5"]:
        try:
            apply_level_delta(db, tank_id, Decimal(delta))
            db.commit()
        except (InsufficientStock, InsufficientCapacity):
            db.rollback()
        level = _level(db, tank_id)
        assert Decimal("0") <= level <= Decimal("1000")


def test_tank_status(db, seed):
    status = tank_status(db, seed["petrol_tank"])
    assert status.percentage == 50.0
    assert status.fuel_type == "Petrol"
    assert status.can_sell is True
    assert status.can_unload is True


def _set_level(db, tank_id, level):
    db.get(Tank, tank_id).current_level = Decimal(level)
    db.commit()


def test_apply_level_delta_drains_fractional_litres_to_exactly_zero(db, seed):
    tank_id = seed["petrol_tank"]
    _set_level(db, tank_id, "0.30")

    apply_level_delta(db, tank_id, Decimal("-0.10"))
    db.commit()
    level = apply_level_delta(db, tank_id, Decimal("-0.20"))
    db.commit()
    assert level == Decimal("0")
    assert _level(db, tank_id) == Decimal("0")


def test_apply_level_delta_fills_fractional_litres_to_exactly_capacity(db, seed):
    tank_id = seed["petrol_tank"]
    _set_level(db, tank_id, "999.70")

    apply_level_delta(db, tank_id, Decimal("0.10"))
    db.commit()
    level = apply_level_delta(db, tank_id, Decimal("0.20"))
    db.commit()
    assert level == Decimal("1000")

    with pytest.raises(InsufficientCapacity):
        apply_level_delta(db, tank_id, Decimal("0.01"))
    db.rollback()


def test_validated_sale_of_whole_fractional_level_goes_through(db, seed):
    tank_id = seed["petrol_tank"]
    _set_level(db, tank_id, "0.30")
    apply_level_delta(db, tank_id, Decimal("-0.10"))
    db.commit()

    check = validate_sale(db, tank_id, Decimal("0.20"))
    level = apply_level_delta(db, tank_id, -check.available_fuel)
    db.commit()
    assert level == Decimal("0")


def test_capacity_write_rechecks_level_moved_after_validation(db, seed):
    tank_id = seed["petrol_tank"]
    validate_capacity_update(db, tank_id, Decimal("600"))

    # A delivery lands between the check and the write.
    apply_level_delta(db, tank_id, Decimal("300"))
    db.commit()

    with pytest.raises(BelowCurrentLevel) as exc_info:
        set_tank_bounds(db, tank_id, capacity=Decimal("600"))
    db.rollback()
    assert exc_info.value.details["current_level"] == 800.0

    db.expire_all()
    tank = db.get(Tank, tank_id)
    assert tank.capacity_lit == Decimal("1000")
    assert tank.current_level == Decimal("800")


def test_level_write_rechecks_live_capacity(db, seed):
    tank_id = seed["petrol_tank"]
    with pytest.raises(BelowCurrentLevel):
        set_tank_bounds(db, tank_id, level=Decimal("1000.01"))
    db.rollback()

    set_tank_bounds(db, tank_id, level=Decimal("1000"))
    db.commit()
    assert _level(db, tank_id) == Decimal("1000")

    set_tank_bounds(db, tank_id, capacity=Decimal("1200"), level=Decimal("1100"))
    db.commit()
    assert _level(db, tank_id) == Decimal("1100")
    with pytest.raises(BelowCurrentLevel):
        set_tank_bounds(db, tank_id, capacity=Decimal("900"), level=Decimal("950"))
