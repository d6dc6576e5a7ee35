"""Error models returned in API response envelopes."""

from enum import Enum

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Error payload sent to clients."""

    code: ErrorCode
    message: str = Field(..., description="Technical description of the failure")
    user_message: str = Field(..., description="Message safe to show to end users")


class AppException(Exception):
    """Raised by route handlers to short-circuit with an error envelope."""

    def __init__(self, error: AppError, status_code: int = 400) -> None:
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code
