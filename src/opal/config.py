"""Opal configuration."""

import logging
from typing import Literal, get_args

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class OpalSettings(BaseSettings):
    """Settings for the ``opal`` command line.

    Loads from environment variables automatically:
        OPAL_LOG_LEVEL, OPAL_OUTPUT, OPAL_RECURSIVE
    """

    log_level: LogLevel = Field(default="WARNING", description="Level for the opal logger")
    output: Literal["table", "json"] = Field(default="table", description="Catalog output format")
    recursive: bool = Field(default=False, description="Scan submodules of package targets")

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="OPAL_",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the ``opal`` logger.

    Calling it again replaces the handler installed by a previous call.
    """
    logger = logging.getLogger("opal")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console or Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
