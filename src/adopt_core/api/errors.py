"""
Exception handlers that render every error in the standard envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import (
    AdoptCoreException,
    ValidationException,
    create_error_response,
    format_validation_errors,
)

logger = logging.getLogger(__name__)


async def handle_adopt_core_exception(request: Request, exc: AdoptCoreException) -> JSONResponse:
    if exc.status_code >= 500:
        exc.log_error(logger)
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    exc = ValidationException(
        "Request validation failed",
        validation_errors=format_validation_errors(list(exc.errors())),
    )
    return JSONResponse(status_code=422, content=create_error_response(exc))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "type": "InternalServerError",
                "code": "INTERNAL_ERROR",
                "message": "Internal server error",
            },
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AdoptCoreException, handle_adopt_core_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
