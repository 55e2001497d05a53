"""
Translation of core outcomes and exceptions into HTTP error responses.

Every error status carries the same ErrorResponse body:
timestamp, status, path, message and a list of details.
"""
# Standard library imports
import logging
from typing import Dict, List, Optional

# External package imports
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Local application imports
from ...application.dto.device_dto import ErrorResponse
from ...domain.results import DeviceError, ErrorKind, StorageFaultError
from ...utils.datetime_utils import to_iso, utc_now

logger = logging.getLogger(__name__)


ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ILLEGAL_OPERATION: status.HTTP_409_CONFLICT,
    ErrorKind.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_FAULT: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

RETRY_HINT = "The device was modified by another request; fetch it again and retry"


def build_error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[List[str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        timestamp=to_iso(utc_now()),
        status=status_code,
        path=request.url.path,
        message=message,
        details=details or [],
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


def failure_response(request: Request, error: DeviceError) -> JSONResponse:
    """Map a core Failure to its HTTP representation"""
    status_code = ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if error.kind == ErrorKind.VERSION_CONFLICT:
        return build_error_response(
            request,
            status_code,
            error.message,
            details=[RETRY_HINT],
            headers={"Retry-After": "0"},
        )
    return build_error_response(request, status_code, error.message)


def _format_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(location) or "request"
    return f"{field}: {error.get('msg', 'invalid value')}"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [_format_validation_error(error) for error in exc.errors()]
    if any(error.get("type") == "json_invalid" for error in exc.errors()):
        return build_error_response(request, status.HTTP_400_BAD_REQUEST, "Malformed JSON request", details)
    return build_error_response(request, status.HTTP_400_BAD_REQUEST, "Validation failed", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    headers = getattr(exc, "headers", None)
    return build_error_response(request, exc.status_code, str(exc.detail), headers=headers)


async def storage_fault_handler(request: Request, exc: StorageFaultError) -> JSONResponse:
    logger.error(f"Storage fault during {exc.operation or 'request'} on {request.url.path}: {exc.message}", exc_info=exc)
    return build_error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Storage unavailable",
        details=[exc.message],
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return build_error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Unexpected error occurred",
        details=[str(exc)],
    )


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(StorageFaultError, storage_fault_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)
