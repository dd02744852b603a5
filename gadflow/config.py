"""Application configuration read from a dotenv file and the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

DEFAULT_PORT = "8081"
DEFAULT_ADDRESS = "0.0.0.0"


@dataclass(frozen=True)
class AppConfig:
    env: str = ""


@dataclass(frozen=True)
class HttpConfig:
    port: str = DEFAULT_PORT
    address: str = DEFAULT_ADDRESS


@dataclass(frozen=True)
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    http: HttpConfig = field(default_factory=HttpConfig)


def configure(
    env_file: Union[str, os.PathLike, None] = ".env",
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Build the configuration; environment variables take precedence over the file."""
    file_values: dict[str, str] = {}
    if env_file is not None:
        path = Path(env_file)
        if path.is_file():
            file_values = {k: v for k, v in dotenv_values(path).items() if v is not None}
        else:
            logger.error("reading .env file error: %s not found", path)

    live = os.environ if environ is None else environ
    values = {**file_values, **live}

    def lookup(key: str, default: str) -> str:
        return values.get(key) or default

    return Config(
        app=AppConfig(env=values.get("APP_ENV", "")),
        http=HttpConfig(
            port=lookup("HTTP_PORT", DEFAULT_PORT),
            address=lookup("HTTP_ADDRESS", DEFAULT_ADDRESS),
        ),
    )