"""
Exception hierarchy for Jrrp.

Every error carries a machine-readable `code` so the cog can branch on it
without parsing English messages.
"""
from __future__ import annotations

from typing import Any


class JrrpError(Exception):
    """Base class for all ledger errors."""
    code: str = "JRRP_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(JrrpError):
    code = "VALIDATION_ERROR"


class InvalidDayError(ValidationError):
    code = "INVALID_DAY"

    def __init__(self, value: Any, expected: str = "YYYY-MM-DD"):
        super().__init__(
            message=f"{value!r} is not a valid date, expected {expected}.",
            details={"value": str(value), "expected": expected},
        )


class WindowLengthError(ValidationError):
    code = "WINDOW_TOO_LARGE"

    def __init__(self, window: int, length: int):
        if window <= 0:
            self.code = "INVALID_WINDOW"
            message = f"Window length must be a positive integer, got {window}."
        else:
            message = f"Window exceeds history length ({window} > {length})."
        super().__init__(
            message=message,
            details={"window": window, "length": length},
        )


class NotFoundError(JrrpError):
    code = "NOT_FOUND"


class ConflictError(JrrpError):
    code = "CONFLICT"

    def __init__(self, uid: str, day: str):
        super().__init__(
            message=f"A luck record for {uid} on {day} already exists.",
            details={"uid": uid, "day": day},
        )


class UpstreamError(JrrpError):
    code = "UPSTREAM_ERROR"
