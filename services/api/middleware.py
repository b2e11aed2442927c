"""Request logging middleware."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its status and latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        client_ip = request.client.host if request.client else "unknown"
        logger.info(
            "{status} | {elapsed:.3f}ms | {client} | {method} {path}",
            status=response.status_code,
            elapsed=elapsed_ms,
            client=client_ip,
            method=request.method,
            path=request.url.path,
        )
        return response
