"""
Session token validator.

Decides whether a cached token can be reused. Only the payload
segment is decoded; the header and signature belong to the remote
service and are never parsed here.
"""

import binascii
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from jwt.utils import base64url_decode

from ..api.errors import MalformedTokenError
from ..api.models import Credential

logger = logging.getLogger(__name__)

SAFETY_MARGIN_SECONDS = 60


class TokenValidator:
    """
    Validates cached session tokens.

    A token is treated as expired once the current time is within the
    safety margin of its ``exp`` claim, and as expired whenever it cannot
    be decoded at all.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        safety_margin: int = SAFETY_MARGIN_SECONDS,
    ):
        """
        Initialize validator.

        Args:
            clock: Returns the current time in seconds since epoch
            safety_margin: Seconds before ``exp`` at which a token counts as expired
        """
        self.clock = clock
        self.safety_margin = safety_margin

    def decode_claims(self, token: str) -> Dict[str, Any]:
        """
        Decode the middle (payload) segment of the token.

        Args:
            token: Session token

        Returns:
            Claims dictionary containing a numeric ``exp``

        Raises:
            MalformedTokenError: If the token cannot be decoded
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("Token must have exactly three segments")

        payload = token.split(".")[1]
        try:
            claims = json.loads(base64url_decode(payload))
        except (binascii.Error, ValueError) as e:
            raise MalformedTokenError(f"Invalid token payload: {e}") from e

        if not isinstance(claims, dict):
            raise MalformedTokenError("Token payload is not an object")

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise MalformedTokenError("Token payload has no numeric exp claim")

        return claims

    def is_expired(self, token: str) -> bool:
        """
        Check whether a token is expired or about to expire.

        Args:
            token: Session token

        Returns:
            True if expired, within the safety margin, or malformed
        """
        try:
            claims = self.decode_claims(token)
        except MalformedTokenError as e:
            logger.debug(f"Treating malformed token as expired: {e}")
            return True

        now_ms = self.clock() * 1000
        return now_ms >= claims["exp"] * 1000 - self.safety_margin * 1000

    def is_usable(self, credential: Optional[Credential], expected_identity: str) -> bool:
        """
        Check whether a cached credential can be used for an identity.

        Args:
            credential: Cached credential or None
            expected_identity: Address derived from the current private key

        Returns:
            True if the credential belongs to the identity and is not expired
        """
        if credential is None:
            return False

        if credential.identity.lower() != expected_identity.lower():
            return False

        return not self.is_expired(credential.token)
