from __future__ import annotations


class TrainBuilderError(Exception):
    """Base class for errors that are reported back to API callers."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        return {"error": self.message}


class ValidationError(TrainBuilderError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(TrainBuilderError):
    status_code = 404
    code = "NOT_FOUND"


class InsufficientBudgetError(TrainBuilderError):
    """
    Raised when a construction costs more than the network can afford.

    Carries both amounts so the client can render "need X, have Y" verbatim.
    """

    status_code = 403
    code = "INSUFFICIENT_BUDGET"

    def __init__(self, *, required: int, available: int) -> None:
        super().__init__(f"Insufficient budget: required {required}, available {available}")
        self.required = int(required)
        self.available = int(available)

    def to_payload(self) -> dict[str, object]:
        return {
            "error": self.code,
            "message": self.message,
            "required": self.required,
            "available": self.available,
        }


class InternalError(TrainBuilderError):
    status_code = 500
    code = "INTERNAL_ERROR"


class StorageError(InternalError):
    code = "STORAGE_ERROR"
