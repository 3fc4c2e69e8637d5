from typing import Generator

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from fuelstation.core.errors import StationError


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session from the factory the app was created with."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def http_error(exc: StationError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_dict())
