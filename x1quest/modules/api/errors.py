"""
Error taxonomy and error message normalization.

Exceptions defined here never leave the module that raises them: the
executor, authenticator and wallet gateway translate them into tagged
Result values before returning to callers.
"""

import json
from enum import Enum
from typing import Any

UNKNOWN_ERROR = "Unknown error occurred"


class ErrorKind(str, Enum):
    """Tag carried by failed Results."""

    AUTHENTICATION_FAILED = "authentication_failed"
    REQUEST_FAILED = "request_failed"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"
    INVALID_RESPONSE = "invalid_response"
    WALLET = "wallet"


class X1Error(Exception):
    """Base class for all x1quest errors."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class NetworkError(X1Error):
    """Transport failure or timeout."""


class AuthExpiredError(X1Error):
    """The remote service rejected the session token (HTTP 401)."""


class AuthenticationFailedError(X1Error):
    """The sign-in exchange itself failed."""


class RemoteServiceError(X1Error):
    """Non-401 error response from the remote service."""

    def __init__(self, message: str, status_code: int, payload: Any = None):
        super().__init__(message, payload)
        self.status_code = status_code


class MalformedTokenError(X1Error):
    """Session token could not be decoded."""


def format_error(error: Any) -> str:
    """
    Normalize an error payload or exception into one readable message.

    Tried in order: an ``errors`` list, ``message``, ``error``, ``code``,
    a JSON dump of the whole payload, then a generic fallback.

    Args:
        error: Response body, exception or plain string

    Returns:
        Human-readable error message
    """
    if isinstance(error, str):
        return error or UNKNOWN_ERROR

    if isinstance(error, X1Error):
        if error.payload is not None:
            return format_error(error.payload)
        return str(error) or UNKNOWN_ERROR

    if isinstance(error, BaseException):
        return str(error) or type(error).__name__

    if isinstance(error, dict):
        errors = error.get("errors")
        if isinstance(errors, list) and errors:
            messages = ", ".join(_sub_message(e) for e in errors)
            return f"Multiple errors: {messages}"

        for key in ("message", "error"):
            value = error.get(key)
            if value:
                return value if isinstance(value, str) else format_error(value)

        if error.get("code") is not None:
            return f"Error Code: {error['code']}"

        return json.dumps(error, default=str)

    if error is not None:
        try:
            return json.dumps(error, default=str)
        except (TypeError, ValueError):
            pass

    return UNKNOWN_ERROR


def _sub_message(entry: Any) -> str:
    """Message of one element of an ``errors`` list."""
    if isinstance(entry, dict) and entry.get("message"):
        return str(entry["message"])
    return str(entry)

