import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from fuelstation.api.v1.router import api_router
from fuelstation.core.config import settings
from fuelstation.core.database import create_session_factory
from fuelstation.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(session_factory: Optional[sessionmaker] = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME)
    app.state.session_factory = session_factory or create_session_factory(settings.DATABASE_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"error": "DatabaseError", "message": "Internal database error", "details": {}}},
        )

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fuelstation.main:app", host="0.0.0.0", port=settings.PORT)
