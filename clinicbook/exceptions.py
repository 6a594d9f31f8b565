from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class SchedulingError(Exception):
    """Base class for every error the scheduling and booking services report to callers."""

    status_code: int = 400
    retryable: bool = False

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(SchedulingError):
    status_code = 404


class ConflictError(SchedulingError):
    status_code = 409


class DuplicateBookingError(ConflictError):
    pass


class InvalidRangeError(SchedulingError):
    status_code = 400


class InvalidParameterError(SchedulingError):
    status_code = 400


class SlotUnavailableError(SchedulingError):
    status_code = 409


class InvalidTransitionError(SchedulingError):
    status_code = 409


class ForbiddenError(SchedulingError):
    status_code = 403


class BusyError(SchedulingError):
    """Transient lock contention. The only kind a caller may retry automatically."""

    status_code = 503
    retryable = True


class DependencyFailureError(SchedulingError):
    status_code = 502


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
