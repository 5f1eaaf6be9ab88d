# backend/inkmatch/errors.py
"""
Exception handlers rendering every failure in one envelope.

    {"error": {"code": "...", "message": "..."}, "success": false, "request_id": "..."}

Domain exceptions keep their status and code. Request validation failures are
400 VALIDATION_ERROR. Anything unexpected is a 500 INTERNAL_ERROR whose
message never includes internals.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .core.constants import REQUEST_ID_HEADER
from .core.exceptions import DomainException, SearchExecutionError
from .core.request_context import current_request_id
from .schemas.base_responses import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

_HTTP_STATUS_CODES: Dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    request_id = current_request_id()
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None),
        request_id=request_id,
    )
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if isinstance(exc, SearchExecutionError):
        # The underlying reason stays in server logs.
        logger.warning("Search failed for %s: %s", request.url.path, exc.reason)
    elif exc.status_code >= 500:
        logger.error("Service error on %s: %s", request.url.path, exc.message)
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = []
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ()) if part not in ("query", "body")]
        fields.append({"field": ".".join(location), "message": err.get("msg", "")})
    message = fields[0]["message"] if fields else "Invalid request"
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        message,
        {"fields": fields},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        code = str(detail.get("code") or _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"))
        message = str(detail.get("message") or "Request failed")
    else:
        code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        message = str(detail) if detail else "Request failed"
    return error_response(exc.status_code, code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
