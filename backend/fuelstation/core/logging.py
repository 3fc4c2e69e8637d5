import logging
from logging.config import dictConfig
from typing import Optional

from fuelstation.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route the back-office loggers to the console.

    Everything under ``fuelstation`` logs at ``LOG_LEVEL`` (tank rejections,
    unbalanced reconciliations, uploads). SQLAlchemy's engine logger stays at
    WARNING unless the service itself runs at DEBUG, so SQL echo never floods
    normal runs.
    """
    level = (level or settings.LOG_LEVEL).upper()
    sql_level = "INFO" if level == "DEBUG" else "WARNING"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "station": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "station",
                }
            },
            "loggers": {
                "fuelstation": {"level": level},
                "sqlalchemy.engine": {"level": sql_level},
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"log_level": level, "sql_level": sql_level, "environment": settings.ENVIRONMENT},
    )
