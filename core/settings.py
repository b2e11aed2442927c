from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Callable

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = Path("config.toml")
DEFAULT_PORT = 8000
DEFAULT_REGION = "eu-west-1"
DEFAULT_GRACEFUL_TIMEOUT = 1.0
DEFAULT_ENV_PATH = Path(".env")


def load_env_file(path: Path = DEFAULT_ENV_PATH) -> bool:
    """Load variables from a `.env` file without overriding the environment."""
    if not path.exists():
        return False
    logger.debug("Loading environment from {path}", path=path)
    return load_dotenv(path)


# Picked up before AWS_REGION and the logging variables are read.
load_env_file()


PARSERS: dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
    ".toml": tomllib.loads,
}


def env_or_default(name: str, default: str) -> str:
    value = os.getenv(name)
    if not value:
        logger.debug("Using default {name} : {value}", name=name, value=default)
        return default
    logger.debug("{name} : {value}", name=name, value=value)
    return value


class Settings(BaseModel):
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    s3_bucket: str = Field(..., alias="s3bucket")
    aws_region: str = Field("", alias="awsRegion", validate_default=True)
    homepage: str = ""
    endpoint_url: str | None = Field(None, alias="endpointUrl")
    local_root: Path | None = Field(None, alias="localRoot")
    graceful_timeout: float = Field(DEFAULT_GRACEFUL_TIMEOUT, alias="gracefulTimeout", ge=0.0)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("port", mode="before")
    @classmethod
    def _default_port(cls, value: Any) -> Any:  # noqa: D401
        if value is None or value == "":
            return DEFAULT_PORT
        return value

    @field_validator("s3_bucket")
    @classmethod
    def _require_bucket(cls, value: str) -> str:  # noqa: D401
        if not value or not value.strip():
            raise ValueError("s3bucket must be a non-empty string")
        return value.strip()

    @field_validator("aws_region", mode="before")
    @classmethod
    def _default_region(cls, value: Any) -> str:  # noqa: D401
        if value:
            return value
        return env_or_default("AWS_REGION", DEFAULT_REGION)

    @field_validator("homepage", mode="before")
    @classmethod
    def _normalize_homepage(cls, value: Any) -> str:  # noqa: D401
        if value is None:
            return ""
        return str(value)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from a YAML, JSON or TOML configuration file.

        The format is chosen from the file extension.

        Args:
            path: Path to the configuration file. Defaults to ``config.toml``
                in the working directory.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            ConfigurationError: If the file cannot be read, has an unknown
                extension, cannot be parsed, or is invalid.
        """
        config_path = path or DEFAULT_CONFIG_PATH
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"failed to read configuration file: {exc}",
                {"path": str(config_path)},
            ) from exc

        extension = config_path.suffix.lower()
        parser = PARSERS.get(extension)
        if parser is None:
            raise ConfigurationError(
                f"Unknown configuration file format {extension or '<none>'} (supported: yaml, json, toml)",
                {"path": str(config_path)},
            )

        try:
            payload = parser(text) or {}
        except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(
                f"failed to parse configuration file: {exc}",
                {"path": str(config_path)},
            ) from exc
        if not isinstance(payload, dict):
            raise ConfigurationError(
                "failed to parse configuration file: top level must be a mapping",
                {"path": str(config_path)},
            )

        try:
            settings = cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc
        logger.debug("config = {settings}", settings=settings)
        return settings


__all__ = [
    "Settings",
    "DEFAULT_CONFIG_PATH",
    "env_or_default",
]
