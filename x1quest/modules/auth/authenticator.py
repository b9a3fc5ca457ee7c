"""
Session authenticator for the X1 quest API.

This module performs the wallet sign-in handshake and is the only
writer of the persisted credential. It's designed as a black box that
can be replaced with any sign-in scheme without affecting other modules.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Optional

import httpx

from ..api.errors import AuthenticationFailedError, format_error
from ..api.http import decode_body
from ..api.models import Credential
from .interfaces import CredentialStore, SignedChallenge, Signer
from .validator import TokenValidator

logger = logging.getLogger(__name__)

# The sign-in endpoint sits behind bot detection that expects a browser
SIGNIN_HEADERS: Dict[str, str] = {
    "Origin": "https://testnet.x1ecochain.com",
    "Referer": "https://testnet.x1ecochain.com/",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36"
    ),
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "sec-ch-ua": '"Brave";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "cross-site",
    "sec-gpc": "1",
}


class SessionAuthenticator:
    """
    Orchestrates wallet sign-in.

    Signs the challenge, exchanges the signature for a session token,
    persists it, and hands out cached tokens while they remain usable.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        signer: Signer,
        store: CredentialStore,
        validator: TokenValidator,
        challenge_template: str,
    ):
        """
        Initialize with injected dependencies.

        Args:
            http_client: Async client whose base URL is the primary API root
            signer: Wallet signer
            store: Credential persistence
            validator: Token validator
            challenge_template: Challenge message; ``{address}`` is replaced
                with the signing address
        """
        self.http = http_client
        self.signer = signer
        self.store = store
        self.validator = validator
        self.challenge_template = challenge_template

    def identity_for(self, private_key: str) -> str:
        """Derive the identity (address) for a private key."""
        try:
            return self.signer.address_of(private_key)
        except ValueError as e:
            raise AuthenticationFailedError(f"Invalid private key: {e}") from e

    def sign_challenge(self, private_key: str) -> SignedChallenge:
        """
        Sign the protocol challenge message.

        Args:
            private_key: Wallet private key

        Returns:
            SignedChallenge with signature, address and the signed message
        """
        address = self.identity_for(private_key)
        message = self.challenge_template.format(address=address)

        logger.info(f"Signing challenge with wallet {address}")
        logger.debug(f"Challenge message: {message}")

        try:
            signature = self.signer.sign_message(private_key, message)
        except ValueError as e:
            raise AuthenticationFailedError(f"Could not sign challenge: {e}") from e
        return SignedChallenge(signature=signature, address=address, message=message)

    async def authenticate(self, private_key: str) -> str:
        """
        Run the sign-in handshake and persist the resulting credential.

        Args:
            private_key: Wallet private key

        Returns:
            Fresh session token

        Raises:
            AuthenticationFailedError: If sign-in fails or returns no token

        Logic:
        1. Sign the challenge
        2. GET /signin handshake (best effort)
        3. POST /signin with the signature
        4. Warn on identity mismatch, persist, return token
        """
        challenge = self.sign_challenge(private_key)

        await self._handshake(challenge.address)

        logger.info("Requesting token from API...")
        body = await self._submit_signature(challenge.signature)

        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise AuthenticationFailedError("No token in response", payload=body)

        self._check_identity(body, challenge.address)

        self.store.save(
            Credential(token=token, identity=challenge.address, issued_at=datetime.now(UTC))
        )
        logger.info("New session token generated and saved")

        return token

    async def get_valid_token(self, private_key: str) -> str:
        """
        Return a usable token, reusing the cached one when possible.

        Args:
            private_key: Wallet private key

        Returns:
            Session token

        Raises:
            AuthenticationFailedError: If a fresh token is needed and sign-in fails
        """
        expected_identity = self.identity_for(private_key)
        cached = self.store.load()

        if self.validator.is_usable(cached, expected_identity):
            logger.info("Token valid (cached)")
            return cached.token

        if cached is None:
            logger.info("No token found - generating new one...")
        elif cached.identity.lower() != expected_identity.lower():
            logger.info("Cached token is for different address - regenerating...")
        else:
            logger.info("Token expired - generating new one...")

        return await self.authenticate(private_key)

    async def _handshake(self, address: str) -> None:
        """Unauthenticated GET /signin; failures are logged, not raised."""
        try:
            response = await self.http.get(
                "/signin", params={"address": address}, headers=SIGNIN_HEADERS
            )
            response.raise_for_status()
            logger.debug("GET /signin handshake successful")
        except httpx.HTTPError as e:
            logger.warning(f"GET /signin handshake failed: {e}")

    async def _submit_signature(self, signature: str) -> Any:
        """POST /signin and return the decoded body."""
        headers = {"Content-Type": "application/json", **SIGNIN_HEADERS}
        try:
            response = await self.http.post(
                "/signin", json={"signature": signature}, headers=headers
            )
        except httpx.HTTPError as e:
            raise AuthenticationFailedError(f"Sign-in request failed: {e}") from e

        body = decode_body(response)
        if response.is_error:
            message = format_error(body)
            logger.error(f"Sign-in rejected ({response.status_code}): {message}")
            raise AuthenticationFailedError(message, payload=body)

        return body

    @staticmethod
    def _check_identity(body: Dict[str, Any], address: str) -> None:
        """Warn when the service reports a different address than we signed with."""
        user = body.get("user")
        api_address: Optional[str] = user.get("address") if isinstance(user, dict) else None
        if not api_address:
            return

        if api_address.lower() == address.lower():
            logger.info(f"Address verified: {api_address}")
        else:
            logger.warning(f"API returned different address: {api_address}")
