"""
Shared pytest fixtures for x1quest tests.

This module provides common fixtures including:
- ServiceMocker: Mock the X1 HTTP services with canned, scripted responses
- FakeSigner: Deterministic stand-in for the wallet signer
- SleepRecorder: Captures backoff and pacing delays without waiting
- Token helpers for building session tokens with a chosen expiry
"""

import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import jwt
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from x1quest.modules.api import ApiRoot, AuthSession
from x1quest.modules.auth import SessionAuthenticator, TokenValidator
from x1quest.modules.executor import RequestExecutor
from x1quest.modules.storage import TokenStore
from x1quest.config.provider import RetryConfig

WALLET_ADDRESS = "0xAbC0000000000000000000000000000000000001"
OTHER_ADDRESS = "0xdEf0000000000000000000000000000000000002"
PRIVATE_KEY = "0x" + "11" * 32
PRIMARY_URL = "https://api.test"
FAUCET_URL = "https://faucet.test"


def make_token(expires_in: float = 3600, now: Optional[float] = None, **claims: Any) -> str:
    """Build a signed-looking session token expiring ``expires_in`` seconds from now."""
    now = time.time() if now is None else now
    payload = {"exp": int(now + expires_in), "sub": WALLET_ADDRESS, **claims}
    return jwt.encode(payload, "x1quest-test-secret-of-at-least-32-bytes", algorithm="HS256")


# =============================================================================
# HTTP Service Mocking Infrastructure
# =============================================================================

MockReply = Union[httpx.Response, Exception]


@dataclass
class ServiceCall:
    """Record of an HTTP call made during testing."""
    method: str
    host: str
    path: str
    params: Dict[str, str]
    headers: Dict[str, str]
    body: bytes = b""


class ServiceMocker:
    """
    Mock the X1 HTTP services with scripted responses.

    Responses are registered per (method, path). Each registration is a
    queue: successive calls consume successive replies, and the last reply
    repeats once the queue is down to one. A reply may be an exception
    instance, which is raised as a transport failure.

    Usage:
        def test_profile(service_mocker):
            service_mocker.register("GET", "/me", httpx.Response(200, json={...}))
            ...
            assert service_mocker.was_called_with("GET", "/me")
    """

    def __init__(self):
        self._replies: Dict[Tuple[str, str], List[MockReply]] = {}
        self._call_history: List[ServiceCall] = []

    def register(self, method: str, path: str, *replies: MockReply) -> "ServiceMocker":
        """
        Register replies for a method and path.

        Returns:
            self for chaining
        """
        self._replies[(method.upper(), path)] = list(replies)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        """MockTransport handler."""
        call = ServiceCall(
            method=request.method,
            host=request.url.host,
            path=request.url.path,
            params=dict(request.url.params),
            headers=dict(request.headers),
            body=request.content,
        )
        self._call_history.append(call)

        queue = self._replies.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"No mock for {request.method} {request.url.path}"})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        # Fresh copy so a repeated reply is never consumed twice
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> List[ServiceCall]:
        """Get all calls made during the test."""
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def was_called_with(self, method: str, path: str) -> bool:
        return any(c.method == method and c.path == path for c in self._call_history)

    def get_calls_matching(self, method: str, path: str) -> List[ServiceCall]:
        return [c for c in self._call_history if c.method == method and c.path == path]


@pytest.fixture
def service_mocker():
    """Fixture that provides a fresh ServiceMocker."""
    return ServiceMocker()


# =============================================================================
# Wallet and timing doubles
# =============================================================================

@dataclass
class FakeSigner:
    """Deterministic signer recording the messages it signs."""
    address: str = WALLET_ADDRESS
    signed_messages: List[str] = field(default_factory=list)

    def address_of(self, private_key: str) -> str:
        if private_key != PRIVATE_KEY:
            raise ValueError("Unknown private key")
        return self.address

    def sign_message(self, private_key: str, message: str) -> str:
        self.signed_messages.append(message)
        return "0x" + "ab" * 65


class SleepRecorder:
    """Awaitable replacement for asyncio.sleep that records delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def token_store(tmp_path):
    """TokenStore backed by a temporary file."""
    return TokenStore(tmp_path / "tokens.json")


# =============================================================================
# Assembled components
# =============================================================================

@pytest.fixture
def http_clients(service_mocker):
    """Async clients for both API roots routed through the mocker."""
    transport = service_mocker.transport
    return {
        ApiRoot.PRIMARY: httpx.AsyncClient(base_url=PRIMARY_URL, transport=transport),
        ApiRoot.FAUCET: httpx.AsyncClient(base_url=FAUCET_URL, transport=transport),
    }


@pytest.fixture
def authenticator(http_clients, fake_signer, token_store):
    """SessionAuthenticator wired to the mocked primary API."""
    return SessionAuthenticator(
        http_client=http_clients[ApiRoot.PRIMARY],
        signer=fake_signer,
        store=token_store,
        validator=TokenValidator(),
        challenge_template="X1 AuthMessage, Address {address}",
    )


@pytest.fixture
def executor(http_clients, authenticator, sleep_recorder):
    """RequestExecutor with recorded (instant) backoff delays."""
    return RequestExecutor(
        clients=http_clients,
        authenticator=authenticator,
        validator=TokenValidator(),
        session=AuthSession(private_key=PRIVATE_KEY),
        retry=RetryConfig(),
        sleep=sleep_recorder,
    )


def signin_reply(token: str, address: str = WALLET_ADDRESS) -> httpx.Response:
    """Successful POST /signin response."""
    return httpx.Response(200, json={"token": token, "user": {"address": address}})


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring network access"
    )
