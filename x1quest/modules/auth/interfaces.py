"""Authentication interfaces following Black Box Design principles."""
from dataclasses import dataclass
from typing import Optional, Protocol

from ..api.models import Credential


class Signer(Protocol):
    """Protocol for wallet signing - allows swappable implementations."""

    def address_of(self, private_key: str) -> str:
        """
        Derive the public address for a private key.

        Args:
            private_key: Hex-encoded private key

        Returns:
            Checksummed address
        """
        ...

    def sign_message(self, private_key: str, message: str) -> str:
        """
        Sign a text message (personal sign).

        Returns:
            0x-prefixed hex signature
        """
        ...


class CredentialStore(Protocol):
    """Protocol for credential persistence."""

    def load(self) -> Optional[Credential]:
        ...

    def save(self, credential: Credential) -> None:
        ...


@dataclass(frozen=True)
class SignedChallenge:
    """Signature over the sign-in challenge."""
    signature: str
    address: str
    message: str
