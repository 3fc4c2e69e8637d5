from typing import Any, Dict, Optional


class StationError(ValueError):
    """Base class for business rule violations raised by the services."""

    status_code = 400
    code = "StationError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class NotFound(StationError):
    status_code = 404
    code = "NotFound"


class InvalidInput(StationError):
    code = "InvalidInput"


class InsufficientStock(StationError):
    code = "InsufficientStock"


class InsufficientCapacity(StationError):
    code = "InsufficientCapacity"


class BelowCurrentLevel(StationError):
    code = "BelowCurrentLevel"


class NoActiveTank(StationError):
    code = "NoActiveTank"


class AlreadyProcessed(StationError):
    status_code = 409
    code = "AlreadyProcessed"


class CreditLimitExceeded(StationError):
    code = "CreditLimitExceeded"


class InvalidPaymentMethod(StationError):
    code = "InvalidPaymentMethod"
