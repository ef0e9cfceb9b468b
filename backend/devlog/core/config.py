# devlog/core/config.py
"""
Central configuration for the device log reporting backend.

This module defines a single `settings` object (Pydantic BaseSettings) that reads
configuration from environment variables and a local `.env` file.

Guiding principles:
- DRY: config is declared once, imported everywhere.
- KISS: sensible defaults for local dev.
- Settings are read-only at runtime; request-scoped values are passed explicitly.
"""

from __future__ import annotations

from typing import List

from dateutil import tz
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFLICT_POLICIES = ("last", "first", "concat")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and optional `.env`.

    `.env` location:
      - uvicorn is run from `backend/`, so `.env` should live in `backend/.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = Field(default="dev", description="Environment: dev|test|prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (e.g., INFO, DEBUG)")

    # -----------------------
    # API / CORS
    # -----------------------
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins for the dashboard",
    )

    # -----------------------
    # Request limits
    # -----------------------
    MAX_BODY_KB: int = Field(
        default=256,
        ge=1,
        le=10240,
        description="Max request body size in kilobytes (log entries are small JSON documents)",
    )

    @property
    def MAX_BODY_BYTES(self) -> int:
        """Derived body size limit in bytes."""
        return int(self.MAX_BODY_KB) * 1024

    # -----------------------
    # Database
    # -----------------------
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/devlog.db",
        description="SQLAlchemy async database URL",
    )
    DB_INIT_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times schema creation is attempted at startup",
    )
    STORE_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Upper bound for a single store query before StoreError is raised",
    )

    # -----------------------
    # Pagination
    # -----------------------
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1, description="Page size when none is requested")
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, description="Requested page sizes are clamped to this")

    # -----------------------
    # Reports
    # -----------------------
    ERROR_REPORT_LIMIT: int = Field(
        default=1000,
        ge=1,
        description="Max error entries returned by the error report (totals stay exact)",
    )
    REPORT_TIMEZONE: str = Field(
        default="UTC",
        description="Time zone that defines calendar days for day-partitioned reports",
    )
    MAX_REPORT_DAYS: int = Field(
        default=90,
        ge=1,
        le=3660,
        description="Max number of calendar days a day-partitioned report may cover",
    )
    MATRIX_CONFLICT_POLICY: str = Field(
        default="last",
        description="Resolution for repeated keys within a session: last|first|concat",
    )
    MATRIX_CONCAT_SEPARATOR: str = Field(
        default="; ",
        description="Separator used when MATRIX_CONFLICT_POLICY=concat",
    )

    # -----------------------
    # Validators / normalizers
    # -----------------------
    @field_validator("ENV")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "dev").strip().lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("CORS_ALLOW_ORIGINS")
    @classmethod
    def _clean_cors_origins(cls, v: List[str]) -> List[str]:
        cleaned = []
        for origin in v or []:
            o = (origin or "").strip()
            if o:
                cleaned.append(o)
        return cleaned

    @field_validator("DATABASE_URL", "REPORT_TIMEZONE")
    @classmethod
    def _strip_strings(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("MATRIX_CONFLICT_POLICY")
    @classmethod
    def _check_conflict_policy(cls, v: str) -> str:
        policy = (v or "last").strip().lower()
        if policy not in CONFLICT_POLICIES:
            raise ValueError(f"MATRIX_CONFLICT_POLICY must be one of {', '.join(CONFLICT_POLICIES)}")
        return policy

    @field_validator("REPORT_TIMEZONE")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        if tz.gettz(v or "UTC") is None:
            raise ValueError(f"Unknown REPORT_TIMEZONE: {v}")
        return v or "UTC"

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "Settings":
        if self.MAX_PAGE_SIZE < self.DEFAULT_PAGE_SIZE:
            raise ValueError(
                f"MAX_PAGE_SIZE must be >= DEFAULT_PAGE_SIZE, got: {self.MAX_PAGE_SIZE} < {self.DEFAULT_PAGE_SIZE}"
            )
        return self


# Singleton instance imported across the codebase.
settings = Settings()
