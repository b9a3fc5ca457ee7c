"""
Executor Module - Black Box Interface

Purpose: Execute authenticated requests against the X1 services
Interface: execute(RequestSpec) -> Result
Hidden: Header layout, retry/backoff policy, 401 re-authentication

Can be replaced with different transports without affecting callers.
"""

from .request_executor import RequestExecutor

__all__ = ["RequestExecutor"]
