from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from booktrack.schemas.response import ErrorBody, ErrorResponse

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[list[dict[str, Any]]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details or None))
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
        headers=headers,
    )


def _status_code_name(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "HTTP_ERROR"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "code" in detail:
        code = str(detail["code"])
        message = str(detail.get("message", ""))
        details = detail.get("details")
    elif exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        code = "NOT_FOUND"
        message = f"Route {request.method} {request.url.path} not found"
        details = None
    else:
        code = _status_code_name(exc.status_code)
        message = str(detail)
        details = None
    return error_response(exc.status_code, code, message, details, headers=getattr(exc, "headers", None))


def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    details = []
    for error in exc.errors():
        location = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        details.append({"field": location[-1] if location else None, "message": message})
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Invalid input data",
        _validation_details(exc),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    message = str(exc.orig).lower()
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    if "unique" in message or "duplicate" in message:
        return error_response(status.HTTP_409_CONFLICT, "DUPLICATE_ENTRY", "Resource already exists")
    if "foreign key" in message:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "FOREIGN_KEY_VIOLATION",
            "Referenced resource does not exist",
        )
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "CONSTRAINT_VIOLATION",
        "Unable to process the request with the provided data",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
