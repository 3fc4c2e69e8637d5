import logging
from datetime import date
from io import BytesIO
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError
from fuelstation.deps import get_db, http_error
from fuelstation.schemas.reading import (
    BulkReadingResult,
    ReadingBulkCreate,
    ReadingCreate,
    ReadingDaySummary,
    ReadingOut,
    ReadingResult,
)
from fuelstation.services.reading_service import (
    day_summary,
    import_readings_from_frame,
    list_readings,
    record_reading,
    record_readings_bulk,
)

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_ROWS = 5000
MAX_COLUMNS = 20
ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".xlsm", ".csv")


def _load_df(content: bytes, filename: str) -> pd.DataFrame:
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only Excel/CSV files are allowed.",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    try:
        if filename.lower().endswith(".csv"):
            df = pd.read_csv(BytesIO(content), dtype=str)
        else:
            df = pd.read_excel(BytesIO(content), dtype=str)
        df = df.apply(lambda col: col.str.strip() if col.dtype == "object" else col)
    except Exception as exc:
        logger.error("Unable to read reading upload %s: %s", filename, exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unable to read file: {exc}",
        )

    if df.empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file has no data rows.",
        )
    if len(df) > MAX_ROWS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded file exceeds row limit ({MAX_ROWS}).",
        )
    if len(df.columns) > MAX_COLUMNS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded file exceeds column limit ({MAX_COLUMNS}).",
        )
    return df


@router.get("", response_model=List[ReadingOut], summary="Readings for a day")
def get_readings(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    return list_readings(db, day or date.today())


@router.get("/summary", response_model=ReadingDaySummary, summary="Litres and revenue for a day")
def get_reading_summary(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    return day_summary(db, day or date.today())


@router.post(
    "",
    response_model=ReadingResult,
    status_code=status.HTTP_201_CREATED,
    summary="Record or correct one pump reading",
)
def post_reading(payload: ReadingCreate, db: Session = Depends(get_db)):
    try:
        return record_reading(db, payload)
    except StationError as exc:
        raise http_error(exc)


@router.post(
    "/bulk",
    response_model=BulkReadingResult,
    status_code=status.HTTP_201_CREATED,
    summary="Record several readings in one transaction",
)
def post_readings_bulk(payload: ReadingBulkCreate, db: Session = Depends(get_db)):
    try:
        return record_readings_bulk(db, payload.readings)
    except StationError as exc:
        raise http_error(exc)


@router.post(
    "/upload-excel",
    response_model=BulkReadingResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a reading sheet (Excel/CSV)",
)
async def upload_readings(file: UploadFile = File(...), db: Session = Depends(get_db)):
    content = await file.read()
    df = _load_df(content, file.filename)
    try:
        result = import_readings_from_frame(db, df)
    except StationError as exc:
        raise http_error(exc)
    logger.info("Reading sheet imported", extra={"upload": file.filename, "count": result.count})
    return result
