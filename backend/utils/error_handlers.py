"""
Error handling decorators and utilities for API endpoints.

This module centralizes the mapping from application exceptions to HTTP
responses so every endpoint reports errors the same way: a JSON body of the
form {"error": "<message>"} with no stack traces or internal paths.
"""

from functools import wraps
from typing import Callable
import inspect
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from constants import HTTPStatus
from exceptions import (
    ApplicationError,
    AuthError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ProcessingError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _to_http_exception(operation_name: str, e: Exception) -> HTTPException:
    """Translate an exception raised inside an endpoint into an HTTPException"""
    if isinstance(e, ValidationError):
        logger.warning(f"{operation_name} - Validation error: {e.message}")
        return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=e.message)
    if isinstance(e, AuthError):
        logger.warning(f"{operation_name} - Authentication error: {e.message}")
        return HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": e.challenge},
        )
    if isinstance(e, NotFoundError):
        logger.info(f"{operation_name} - Not found: {e.details}")
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=e.message)
    if isinstance(e, ConflictError):
        logger.warning(f"{operation_name} - Conflict: {e.message}")
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=e.message)
    if isinstance(e, ProcessingError):
        logger.error(f"{operation_name} - Processing error: {e.message} {e.details}", exc_info=True)
        return HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=e.message)
    if isinstance(e, UpstreamError):
        logger.error(f"{operation_name} - Upstream error: {e.message}", exc_info=True)
        return HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail=f"{e.details.get('service', 'Upstream service')} is unavailable"
        )
    if isinstance(e, DatabaseError):
        logger.error(f"{operation_name} - Database error: {e.message}", exc_info=True)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail="Database operation failed"
        )
    if isinstance(e, ConfigurationError):
        logger.error(f"{operation_name} - Configuration error: {e.message}")
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"{operation_name} is not available"
        )
    if isinstance(e, ApplicationError):
        logger.error(f"{operation_name} - Application error: {e.message}", exc_info=True)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"{operation_name} failed"
        )
    logger.error(f"{operation_name} - Unexpected error: {e}", exc_info=True)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        detail=f"{operation_name} failed. Please check server logs or contact support."
    )


def handle_api_errors(operation_name: str):
    """
    Decorator to handle common API errors consistently across endpoints.

    Catches application exceptions and converts them to HTTPException
    responses with consistent status codes and messages.

    Args:
        operation_name: Human-readable name of the operation (e.g., "Create product")

    Returns:
        Decorated function that handles errors uniformly

    Example:
        @router.post("/products")
        @handle_api_errors("Create product")
        def create_product(...):
            return repo.create(payload)
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                # Re-raise HTTPException as-is to preserve status code and detail
                raise
            except Exception as e:
                raise _to_http_exception(operation_name, e) from e

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                raise _to_http_exception(operation_name, e) from e

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = err.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error as {"error": <message>}.

    Request-schema failures become 400 rather than FastAPI's default 422,
    and anything that escapes the endpoint decorators becomes a generic 500.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        logger.warning(f"{request.method} {request.url.path} - Invalid request: {message}")
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"error": message})

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        http_exc = _to_http_exception(f"{request.method} {request.url.path}", exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"error": http_exc.detail},
            headers=http_exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} - Unhandled error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
