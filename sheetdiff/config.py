"""Configuration management for the comparison service.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SHEETDIFF_ prefix, or via a .env file in the project root.

Only the transport layers (REST API and MCP server) read these settings;
the comparison core receives the values it needs through its constructors.

Environment Variables:
    SHEETDIFF_LOG_LEVEL: Logging level (default: INFO)
    SHEETDIFF_DEBUG: Enable debug mode (default: false)
    SHEETDIFF_READER_ENGINE: Workbook reader, calamine or openpyxl (default: calamine)
    SHEETDIFF_NUMERIC_TOLERANCE: Absolute tolerance for numeric equality (default: 0.0001)
    SHEETDIFF_MAX_UPLOAD_SIZE_MB: Maximum size of an uploaded workbook (default: 25)
    SHEETDIFF_STORAGE_DIR: Root directory of the local blob store
    SHEETDIFF_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SHEETDIFF_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SHEETDIFF_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SHEETDIFF_LOG_LEVEL=DEBUG
        SHEETDIFF_READER_ENGINE=openpyxl
        SHEETDIFF_STORAGE_DIR=/var/lib/sheetdiff
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETDIFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    debug: bool = False
    """Enable debug mode with verbose logging."""

    # =========================================================================
    # Comparison Settings
    # =========================================================================

    reader_engine: Literal["calamine", "openpyxl"] = "calamine"
    """Library used to read uploaded workbooks."""

    numeric_tolerance: float = 0.0001
    """Absolute tolerance when both compared values are numeric."""

    # =========================================================================
    # Upload and Storage Settings
    # =========================================================================

    max_upload_size_mb: int = 25
    """Maximum size of an uploaded workbook in megabytes."""

    storage_dir: str = "/tmp/sheetdiff_storage"
    """Root directory of the local blob store used for saved exports."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins."""

    server_host: str = "0.0.0.0"
    """Host the API server binds to."""

    server_port: int = 8000
    """Port the API server listens on."""

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is a valid logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("numeric_tolerance")
    @classmethod
    def validate_numeric_tolerance(cls, v: float) -> float:
        """Ensure the tolerance is not negative."""
        if v < 0:
            raise ValueError("numeric_tolerance must be >= 0")
        return v

    @field_validator("max_upload_size_mb")
    @classmethod
    def validate_max_upload_size(cls, v: int) -> int:
        """Ensure the upload limit is positive."""
        if v <= 0:
            raise ValueError("max_upload_size_mb must be > 0")
        return v

    @property
    def max_upload_size_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list."""
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def effective_log_level(self) -> int:
        """Log level as an int, forced to DEBUG in debug mode."""
        if self.debug:
            return logging.DEBUG
        return getattr(logging, self.log_level)


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings."""
    return Settings()
