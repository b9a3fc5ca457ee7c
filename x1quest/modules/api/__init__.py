"""
API Module - Shared models and error taxonomy

Purpose: Define every structure passed between modules
Interface: Credential, Quest, BatchResult, RequestSpec, Result, format_error()
Hidden: Nothing - this module is pure data
"""

from .errors import (
    AuthenticationFailedError,
    AuthExpiredError,
    ErrorKind,
    MalformedTokenError,
    NetworkError,
    RemoteServiceError,
    X1Error,
    format_error,
)
from .models import (
    ApiRoot,
    AuthSession,
    BatchResult,
    BatchStatus,
    BatchSummary,
    Credential,
    Quest,
    RequestSpec,
    Result,
)

__all__ = [
    # Models
    "ApiRoot",
    "AuthSession",
    "BatchResult",
    "BatchStatus",
    "BatchSummary",
    "Credential",
    "Quest",
    "RequestSpec",
    "Result",
    # Errors
    "AuthenticationFailedError",
    "AuthExpiredError",
    "ErrorKind",
    "MalformedTokenError",
    "NetworkError",
    "RemoteServiceError",
    "X1Error",
    "format_error",
]
