"""
Day Planner: centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from dayplanner/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_BACKENDS = ("sqlite", "memory")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Key/value storage
    PLANNER_DATABASE_PATH: str = "data/planner.db"
    PLANNER_STORAGE_BACKEND: str = "sqlite"   # "sqlite" | "memory"
    PLANNER_STORAGE_QUOTA_BYTES: int = 5 * 1024 * 1024  # 0 disables the quota

    # Planner session write-back quiet period
    PLANNER_DEBOUNCE_MS: int = 500

    LOG_LEVEL: str = "INFO"

    @field_validator("PLANNER_STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v: str) -> str:
        backend = str(v).strip().lower()
        if backend not in _BACKENDS:
            raise ValueError(f"Unknown storage backend: {v!r}")
        return backend

    @field_validator("PLANNER_STORAGE_QUOTA_BYTES", "PLANNER_DEBOUNCE_MS", mode="before")
    @classmethod
    def parse_non_negative(cls, v: str | int) -> int:
        value = int(v)
        if value < 0:
            raise ValueError(f"Expected a non-negative integer, got {value}")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        PLANNER_DATABASE_PATH=os.getenv("PLANNER_DATABASE_PATH", "data/planner.db"),
        PLANNER_STORAGE_BACKEND=os.getenv("PLANNER_STORAGE_BACKEND", "sqlite"),
        PLANNER_STORAGE_QUOTA_BYTES=os.getenv("PLANNER_STORAGE_QUOTA_BYTES", "5242880"),
        PLANNER_DEBOUNCE_MS=os.getenv("PLANNER_DEBOUNCE_MS", "500"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


def configure_logging(level: str | None = None) -> None:
    """Apply the project log format to the root logger."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
    )


# Singleton, imported by all other modules as:
#   from dayplanner.config import settings
settings = _load_settings()
