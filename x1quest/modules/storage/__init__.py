"""
Storage Module - Black Box Interface

Purpose: Persist the session credential across process restarts
Interface: load(), save(), clear()
Hidden: File format, atomic replacement, error recovery

Can be replaced with any storage backend without affecting other modules.
"""

from .token_store import TokenStore

__all__ = ["TokenStore"]
