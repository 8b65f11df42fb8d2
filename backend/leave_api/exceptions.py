from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Lifecycle failures
# ---------------------------------------------------------------------------


class ValidationError(AppError):
    """Input rejected before any state is read."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class InvalidDateRange(ValidationError):
    def __init__(self, message: str = "end_date must not be before start_date") -> None:
        super().__init__(message)


class InsufficientBalance(AppError):
    def __init__(self, requested_days: int, remaining_days: int) -> None:
        self.requested_days = requested_days
        self.remaining_days = remaining_days
        super().__init__(
            f"Insufficient leave balance: requested {requested_days} day(s), {remaining_days} remaining",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class LeaveNotFound(NotFoundError):
    """Also raised for a leave owned by another tenant, so existence never leaks."""

    def __init__(self) -> None:
        super().__init__("Leave not found")


class EmployeeNotFound(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Employee not found")


class NotificationNotFound(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Notification not found")


class AlreadyProcessed(AppError):
    def __init__(self, current_status: str) -> None:
        self.current_status = current_status
        super().__init__(f"Leave already processed (status {current_status})", status_code=status.HTTP_409_CONFLICT)


class NotApproved(AppError):
    def __init__(self) -> None:
        super().__init__("Only approved leaves can be cancelled", status_code=status.HTTP_400_BAD_REQUEST)


class AlreadyStarted(AppError):
    def __init__(self) -> None:
        super().__init__("Cannot cancel a leave that has already started", status_code=status.HTTP_400_BAD_REQUEST)


class ConcurrencyConflict(AppError):
    """A concurrent writer changed the row first. Safe to retry."""

    def __init__(self, message: str = "Concurrent update detected, please retry") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class LedgerInvariantError(AppError):
    """A balance mutation would break 0 <= used_leave <= total_leave_balance."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
