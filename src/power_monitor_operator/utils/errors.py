"""Operator error types and sanitization utilities."""

from __future__ import annotations

import re
from typing import Any


class OperatorError(Exception):
    """Base class for errors raised by the reconciliation engine."""

    retryable = True


# Statuses for a request the server rejects outright
_PERMANENT_STATUSES = frozenset({400, 422})


class StoreError(OperatorError):
    """A resource store call failed.

    ``status`` is the HTTP status when the server answered, None for
    transport failures.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status not in _PERMANENT_STATUSES


class NotFoundError(StoreError):
    """The requested object does not exist in the store."""


class ConflictError(StoreError):
    """The object's resource version no longer matches the store."""


class AlreadyExistsError(StoreError):
    """A create call found an object with the same identity."""


class ReconcilerError(OperatorError):
    """A reconciler step failed; ``cause`` holds the underlying error."""

    def __init__(self, message: str, cause: BaseException):
        super().__init__(message)
        self.cause = cause

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return getattr(self.cause, "retryable", True)


class ReconcileCancelled(OperatorError):
    """The invocation was cancelled or ran past its deadline."""


class DeletionTimeoutError(OperatorError):
    """An object did not disappear from the store within its wait timeout."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"bearer\s+([A-Za-z0-9\-_\.=]+)",
    r"authorization[:\s]+([^\s,;\)]+)",
    r"client[_\-\s]?key[_\-\s]?data[:\s]+([A-Za-z0-9/+=]+)",
    r"client[_\-\s]?certificate[_\-\s]?data[:\s]+([A-Za-z0-9/+=]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "password",
    "secret",
    "token",
    "credentials",
    "apikey",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: m.group(0).replace(m.group(1), "[REDACTED]"),
            sanitized,
            flags=re.IGNORECASE,
        )

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:=\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
