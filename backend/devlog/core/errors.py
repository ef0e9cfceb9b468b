# devlog/core/errors.py
"""
Error taxonomy shared by the store, the report engine and the HTTP layer.

- ValidationError: malformed or contradictory input, raised before any store access
- NotFoundError: referenced log / project / session does not exist
- StoreError: persistence failure or timeout; fatal for the current request

The HTTP layer maps `code` and `status_code` onto the error envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DevlogError(Exception):
    """Base class for errors surfaced to callers."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DevlogError):
    """Raised when request parameters are invalid."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(DevlogError):
    """Raised when a referenced resource does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class StoreError(DevlogError):
    """Raised for persistence failures (driver errors, timeouts)."""

    code = "STORE_ERROR"
    status_code = 503
