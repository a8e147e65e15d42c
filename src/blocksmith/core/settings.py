"""Centralized engine configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed engine configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `BLOCKSMITH_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    max_depth : int
        Deepest nesting of paragraphs the materializer accepts.
    rich_text_format : str
        Format tag applied to rich text values that do not carry one.
    default_layout : str
        Layout template id used when a section spec omits `layout`.
    target_section : str
        Section label targeted by append mode when a config omits one.
    site_file : str
        JSON site file the CLI reads and writes.
    """

    environment: EnvName = Field(default="dev", alias="BLOCKSMITH_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    max_depth: int = Field(default=8, ge=1, alias="BLOCKSMITH_MAX_DEPTH")
    rich_text_format: str = Field(default="basic_html", alias="BLOCKSMITH_RICH_TEXT_FORMAT")
    default_layout: str = Field(default="layout_onecol", alias="BLOCKSMITH_DEFAULT_LAYOUT")
    target_section: str = Field(default="Content Section", alias="BLOCKSMITH_TARGET_SECTION")
    site_file: str = Field(default="site.json", alias="BLOCKSMITH_SITE_FILE")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("BLOCKSMITH_ENV", "dev")
    return Settings()


settings: Settings = load_settings()


def get_logger(name: str = "blocksmith") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = ["Settings", "get_logger", "load_settings", "settings"]
