import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.models.enums import ReportPeriod
from fuelstation.schemas.report import DayValidation, SummaryReport
from fuelstation.services.report_service import summary_report, validate_day

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/reports/summary", response_model=SummaryReport, summary="Sales, profit and reconciliation for a period")
def get_summary_report(
    period: ReportPeriod = ReportPeriod.DAILY,
    anchor: Optional[date] = Query(None, alias="date"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db),
):
    try:
        return summary_report(db, period=period, anchor=anchor, start=start, end=end)
    except StationError as exc:
        raise http_error(exc)


@router.get("/validation", response_model=DayValidation, summary="Reconcile one day")
def get_validation(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    return validate_day(db, day or date.today())
