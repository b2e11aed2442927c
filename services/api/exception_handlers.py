"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exception_handlers import http_exception_handler as default_http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import MethodNotAllowedFailure, RequestFailure, S3WebError
from services.api.translator import translate_failure


async def s3web_exception_handler(request: Request, exc: S3WebError) -> Response:
    """Handle errors raised outside the dispatcher."""
    if isinstance(exc, RequestFailure):
        return translate_failure(exc)

    logger.error(
        "S3 web server exception: {type} - {message}",
        type=type(exc).__name__,
        message=exc.message,
        details=exc.details,
    )
    return PlainTextResponse(
        f"An internal error occurred: {type(exc).__name__} = {exc.message}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer methods the router does not route with the dispatcher's 405."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return translate_failure(MethodNotAllowedFailure(request.method.upper()))
    return await default_http_exception_handler(request, exc)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected exceptions so every request gets an answer."""
    logger.opt(exception=exc).error("Unhandled exception on {method} {path}", method=request.method, path=request.url.path)
    return PlainTextResponse(
        f"An internal error occurred: {exc}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
