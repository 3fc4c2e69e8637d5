import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fuelstation.core.config import settings
from fuelstation.deps import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/status", summary="Service and database status")
def service_status(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database ping failed: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "DatabaseUnavailable", "message": "Database is not reachable", "details": {}},
        )
    return {"status": "ok", "database": "ok", "environment": settings.ENVIRONMENT}
