"""
Resilient request executor for the X1 services.

Every outbound call goes through RequestExecutor.execute(), which:
- attaches the current session token
- refills the token proactively when it is missing or about to expire
- retries transient failures with exponential backoff
- re-authenticates exactly once on HTTP 401 and retries the call once

No exception crosses execute(); every outcome is a tagged Result.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ..api.errors import (
    AuthenticationFailedError,
    AuthExpiredError,
    ErrorKind,
    NetworkError,
    RemoteServiceError,
    X1Error,
    format_error,
)
from ..api.http import decode_body
from ..api.models import ApiRoot, AuthSession, RequestSpec, Result
from ..auth.authenticator import SessionAuthenticator
from ..auth.validator import TokenValidator
from ...config.provider import RetryConfig

logger = logging.getLogger(__name__)

TOKEN_REFRESH_FAILED = "Token refresh failed"

DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "areyouahuman": "true",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class RequestExecutor:
    """
    Executes authenticated requests against the primary and faucet APIs.

    The executor exclusively owns the AuthSession; the authenticator is the
    only component that produces new tokens for it.
    """

    def __init__(
        self,
        clients: Dict[ApiRoot, httpx.AsyncClient],
        authenticator: SessionAuthenticator,
        validator: TokenValidator,
        session: AuthSession,
        retry: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize with injected dependencies.

        Args:
            clients: One async HTTP client per API root
            authenticator: Produces session tokens
            validator: Detects expired tokens before they are sent
            session: Session state owned by this executor
            retry: Retry bounds and backoff base
            sleep: Awaitable delay, replaceable in tests
        """
        self.clients = clients
        self.authenticator = authenticator
        self.validator = validator
        self.session = session
        self.retry = retry or RetryConfig()
        self.sleep = sleep

        # Serializes token replacement so concurrent callers never race a refresh
        self._token_lock = asyncio.Lock()

    @property
    def identity(self) -> str:
        """Address of the wallet this executor acts for."""
        if self.session.identity is None:
            self.session.identity = self.authenticator.identity_for(self.session.private_key)
        return self.session.identity

    async def execute(self, spec: RequestSpec) -> Result:
        """
        Execute a request with retry and re-authentication.

        Args:
            spec: Request description

        Returns:
            Result with the decoded response body, or a failure with a
            readable error and its ErrorKind
        """
        try:
            await self._ensure_token()
        except AuthenticationFailedError as e:
            message = format_error(e)
            logger.error(f"Could not obtain session token: {message}")
            return Result.failure(message, ErrorKind.AUTHENTICATION_FAILED)

        try:
            data = await self._send_with_backoff(spec)
        except AuthExpiredError:
            return await self._refresh_and_retry(spec)
        except X1Error as e:
            message = format_error(e)
            logger.error(f"{spec.method} {spec.path} error: {message}")
            return Result.failure(message, ErrorKind.REQUEST_FAILED)

        return Result.success(data)

    async def _ensure_token(self) -> None:
        """Load or refill the session token if it is missing or expiring."""
        async with self._token_lock:
            token = self.session.token
            if token and not self.validator.is_expired(token):
                return

            self.session.token = await self.authenticator.get_valid_token(
                self.session.private_key
            )

    async def _refresh_token(self, stale_token: Optional[str]) -> None:
        """Re-authenticate unless another caller already replaced the stale token."""
        async with self._token_lock:
            if self.session.token != stale_token:
                return
            self.session.token = await self.authenticator.authenticate(
                self.session.private_key
            )

    async def _send_with_backoff(self, spec: RequestSpec) -> Any:
        """
        Send a request, retrying everything except authorization failures.

        Delays grow as base * 2^attempt: 2000ms, 4000ms, 8000ms...
        """
        attempts = max(1, self.retry.max_attempts)

        for attempt in range(attempts):
            try:
                return await self._send(spec)
            except AuthExpiredError:
                raise
            except (NetworkError, RemoteServiceError) as e:
                if attempt == attempts - 1:
                    raise

                delay = self.retry.backoff_base * (2 ** attempt)
                logger.warning(
                    f"Request failed ({format_error(e)}), retrying in {int(delay * 1000)}ms... "
                    f"({attempt + 1}/{attempts})"
                )
                await self.sleep(delay)

    async def _refresh_and_retry(self, spec: RequestSpec) -> Result:
        """Re-authenticate once and retry the request once."""
        logger.info("API returned 401 - refreshing token...")
        stale_token = self.session.token

        try:
            await self._refresh_token(stale_token)
            data = await self._send(spec)
        except X1Error as e:
            logger.error(f"Failed to refresh token: {format_error(e)}")
            return Result.failure(TOKEN_REFRESH_FAILED, ErrorKind.TOKEN_REFRESH_FAILED)

        logger.info("Retry after token refresh - success!")
        return Result.success(data)

    async def _send(self, spec: RequestSpec) -> Any:
        """
        Send one request and map the outcome onto the error taxonomy.

        Raises:
            NetworkError: On transport failure or timeout
            AuthExpiredError: On HTTP 401
            RemoteServiceError: On any other non-2xx response
        """
        client = self.clients[spec.api]
        headers = {**DEFAULT_HEADERS, "Authorization": self.session.token or ""}

        try:
            response = await client.request(
                spec.method,
                spec.path,
                params=spec.params,
                json=spec.json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"{spec.method} {spec.path} failed: {e}") from e

        body = decode_body(response)

        if response.status_code == 401:
            raise AuthExpiredError("Unauthorized", payload=body)

        if response.status_code == 403:
            logger.warning("Request blocked (403) - bot protection may be active")

        if response.is_error:
            raise RemoteServiceError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                payload=body or None,
            )

        return body
