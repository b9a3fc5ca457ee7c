"""
Authentication Module - Black Box Interface

Purpose: Obtain and validate wallet-signed session tokens
Interface: get_valid_token(), authenticate(), is_expired(), is_usable()
Hidden: Challenge format, sign-in handshake, token decoding

This module can be completely replaced with any other sign-in scheme
without affecting other modules.
"""

from .authenticator import SessionAuthenticator
from .interfaces import CredentialStore, SignedChallenge, Signer
from .signer import EthAccountSigner
from .validator import TokenValidator

__all__ = [
    "CredentialStore",
    "EthAccountSigner",
    "SessionAuthenticator",
    "SignedChallenge",
    "Signer",
    "TokenValidator",
]
