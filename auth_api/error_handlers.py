"""
Custom error handlers for FastAPI application
Every failure leaves the API as {"error": ...}, plus "details" for 500s
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth_api.errors import AuthAPIError

logger = logging.getLogger(__name__)

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(debug: bool = False) -> None:
    """Install one stream handler on the package logger"""
    package_logger = logging.getLogger("auth_api")
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        package_logger.addHandler(handler)


async def auth_api_error_handler(request: Request, exc: AuthAPIError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Unparseable or wrongly typed bodies are client errors, not 422s"""
    fields = [".".join(str(x) for x in error.get("loc", [])) for error in exc.errors()]
    logger.info(f"[VALIDATION_ERROR] {request.method} {request.url.path} - fields: {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for any unhandled exceptions"""
    logger.error(f"[UNCAUGHT_EXCEPTION] {request.method} {request.url.path} {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error", "details": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all custom exception handlers with FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AuthAPIError, auth_api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
