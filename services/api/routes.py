from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from core.paths import resolve
from services.api.context import AppContext
from services.api.dispatcher import RequestDescriptor
from services.api.translator import translate


# Extra methods reach the dispatcher for its 405; anything else gets the
# same answer from the HTTPException handler.
ROUTED_METHODS = ["GET", "HEAD", "PUT", "DELETE", "POST", "PATCH", "OPTIONS"]

router = APIRouter()


def describe(request: Request) -> RequestDescriptor:
    method = request.method.upper()
    return RequestDescriptor(
        method=method,
        raw_path=request.scope["path"],
        body=request.stream() if method == "PUT" else None,
        if_none_match=request.headers.get("if-none-match"),
        content_type=request.headers.get("content-type"),
    )


@router.api_route("/{path:path}", methods=ROUTED_METHODS, include_in_schema=False)
async def serve_object(request: Request, path: str) -> Response:
    """Serve any path from the configured bucket."""
    context: AppContext = request.app.state.context
    descriptor = describe(request)
    # A path-resolution failure is rendered by the RequestFailure handler.
    resolved = resolve(descriptor.raw_path, context.settings.homepage)
    result = await context.dispatcher.dispatch(descriptor, resolved)
    return translate(result, descriptor.method)
