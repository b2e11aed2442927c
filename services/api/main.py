from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from core.exceptions import S3WebError
from core.settings import Settings
from core.storage import ObjectStorage
from services.api.context import AppContext, build_store
from services.api.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    s3web_exception_handler,
)
from services.api.middleware import AccessLogMiddleware
from services.api.routes import router


try:
    __version__ = version("s3-web-server")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"


def create_app(settings: Settings, store: ObjectStorage | None = None) -> FastAPI:
    """Build the ASGI application serving ``settings.s3_bucket``.

    ``store`` overrides the backend built from the settings.
    """
    context = AppContext(settings=settings, store=store if store is not None else build_store(settings))

    # Every path is an object key, so the generated docs routes are disabled.
    app = FastAPI(
        title="S3 Web Server",
        version=__version__,
        description="Serves the objects of a bucket over plain HTTP",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.context = context

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(AccessLogMiddleware)

    app.add_exception_handler(S3WebError, s3web_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router)

    logger.debug(
        "Application ready for bucket={bucket} homepage={homepage!r}",
        bucket=settings.s3_bucket,
        homepage=settings.homepage,
    )
    return app


__all__ = ["create_app", "__version__"]
