import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.station import (
    AuditLogOut,
    CapacityStatsOut,
    CapacityUpdateRequest,
    CapacityUpdateResponse,
    TankCreate,
    TankOut,
    TankStatus,
    TankUpdate,
    TankWithPriceOut,
)
from fuelstation.services.tank_guard import tank_status
from fuelstation.services.tank_service import (
    capacity_history,
    capacity_stats,
    create_tank,
    deactivate_tank,
    list_tanks,
    update_capacities,
    update_tank,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[TankWithPriceOut], summary="List tanks with fuel type and current price")
def get_tanks(include_inactive: bool = False, db: Session = Depends(get_db)):
    return list_tanks(db, include_inactive=include_inactive)


@router.post("", response_model=TankOut, status_code=status.HTTP_201_CREATED, summary="Create a tank")
def post_tank(payload: TankCreate, db: Session = Depends(get_db)):
    try:
        return create_tank(db, payload)
    except StationError as exc:
        raise http_error(exc)


# Static paths are declared before /{tank_id} so they are not captured as IDs.
@router.post(
    "/update-capacity",
    response_model=CapacityUpdateResponse,
    summary="Batch capacity corrections with reasons",
)
def post_capacity_updates(payload: CapacityUpdateRequest, db: Session = Depends(get_db)):
    result = update_capacities(db, payload.updates)
    logger.info(
        "Capacity batch processed",
        extra={"requested": result.total_requested, "updated": result.total_updated},
    )
    return result


@router.get(
    "/capacity-history",
    response_model=List[AuditLogOut],
    summary="Audit trail of capacity changes",
)
def get_capacity_history(
    tank_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return capacity_history(db, tank_id=tank_id, limit=limit)


@router.get("/stats", response_model=CapacityStatsOut, summary="Fill percentage per tank and totals")
def get_capacity_stats(db: Session = Depends(get_db)):
    return capacity_stats(db)


@router.get("/{tank_id}/status", response_model=TankStatus, summary="Level, space and sell/unload flags")
def get_tank_status(tank_id: int, db: Session = Depends(get_db)):
    try:
        return tank_status(db, tank_id)
    except StationError as exc:
        raise http_error(exc)


@router.put("/{tank_id}", response_model=TankOut, summary="Edit tank name, level or capacity")
def put_tank(tank_id: int, payload: TankUpdate, db: Session = Depends(get_db)):
    try:
        return update_tank(db, tank_id, payload)
    except StationError as exc:
        raise http_error(exc)


@router.delete("/{tank_id}", response_model=TankOut, summary="Deactivate a tank")
def delete_tank(tank_id: int, reason: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        return deactivate_tank(db, tank_id, reason=reason)
    except StationError as exc:
        raise http_error(exc)
