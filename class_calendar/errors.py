"""Domain errors raised by the scheduling engine.

Routers never build error responses for these by hand; main.py maps them
to JSON responses with the status code attached to each error code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    SCHEDULE_CONFLICT = "SCHEDULE_CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    TRANSACTION_FAILURE = "TRANSACTION_FAILURE"


HTTP_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.SCHEDULE_CONFLICT: 409,
    ErrorCode.TRANSACTION_FAILURE: 500,
}


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code, user-safe message and structured details."""

    code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]


class ScheduleValidationError(DomainError):
    """Malformed input rejected before any mutation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR, message=message, details=details
        )


class ScheduleConflictError(DomainError):
    """A conflict check reported a collision and the caller refuses the write."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULE_CONFLICT, message=message, details=details
        )


class RecordNotFoundError(DomainError):
    def __init__(self, record: str, record_id: Any) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{record} with ID {record_id} not found",
            details={"record": record, "id": record_id},
        )


class TransactionFailure(DomainError):
    """The unit of work aborted; nothing from it was persisted."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.TRANSACTION_FAILURE, message=message)
