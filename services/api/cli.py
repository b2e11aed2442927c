"""Command line entry point: load the configuration and serve the bucket."""

from __future__ import annotations

import argparse
import os
import platform
import sys
from pathlib import Path

import uvicorn
from loguru import logger

from core.exceptions import S3WebError
from core.logging_config import setup_logging
from core.settings import DEFAULT_CONFIG_PATH, Settings
from services.api.main import __version__, create_app


def show_version() -> str:
    return (
        f"{__version__} ({platform.python_implementation()} {platform.python_version()} "
        f"on {platform.system().lower()}/{platform.machine()})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="s3webserver", description="Serve an S3 bucket over HTTP")
    parser.add_argument(
        "-config", "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Configuration file (.yaml, .yml, .json or .toml)",
    )
    parser.add_argument("-debug", "--debug", action="store_true", help="Debug logging")
    parser.add_argument("-version", "--version", action="version", version=f"%(prog)s {show_version()}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = "DEBUG" if args.debug else os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"},
        log_file=Path(log_file) if log_file else None,
    )
    logger.info("S3WebServer {version}", version=show_version())

    try:
        settings = Settings.load(args.config)
        app = create_app(settings)
    except S3WebError as exc:
        logger.error("Failed to load configuration: {message}", message=exc.message, details=exc.details)
        return 1

    logger.info("Listening on port {port}", port=settings.port)
    # uvicorn handles SIGINT/SIGTERM: it stops accepting connections and waits
    # up to graceful_timeout seconds for in-flight requests.
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=log_level.lower(),
        access_log=False,
        timeout_graceful_shutdown=settings.graceful_timeout,
    )
    logger.info("Server exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
