"""
Unit tests for the session authenticator and wallet signer.

Tests cover:
- Challenge formatting and signing
- The GET/POST /signin exchange and credential persistence
- Cached-token reuse in get_valid_token
"""

import json
from datetime import UTC, datetime

import httpx
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from x1quest.modules.api import AuthenticationFailedError, Credential
from x1quest.modules.auth import EthAccountSigner

from conftest import OTHER_ADDRESS, PRIVATE_KEY, WALLET_ADDRESS, make_token, signin_reply


# =============================================================================
# Challenge Tests
# =============================================================================


class TestChallenge:
    """Tests for sign_challenge and identity derivation."""

    def test_sign_challenge_formats_message(self, authenticator, fake_signer):
        """Challenge message embeds the signing address verbatim."""
        challenge = authenticator.sign_challenge(PRIVATE_KEY)

        assert challenge.address == WALLET_ADDRESS
        assert challenge.message == f"X1 AuthMessage, Address {WALLET_ADDRESS}"
        assert fake_signer.signed_messages == [challenge.message]
        assert challenge.signature.startswith("0x")

    def test_sign_challenge_uses_configured_template(self, authenticator):
        authenticator.challenge_template = "X1 Testnet Auth"
        challenge = authenticator.sign_challenge(PRIVATE_KEY)
        assert challenge.message == "X1 Testnet Auth"

    def test_invalid_private_key_raises_authentication_error(self, authenticator):
        with pytest.raises(AuthenticationFailedError):
            authenticator.identity_for("0xnot-a-key")


class TestEthAccountSigner:
    """Tests for the eth-account backed signer."""

    def test_signature_recovers_address(self):
        """Signatures from the real signer recover to the derived address."""
        signer = EthAccountSigner()
        address = signer.address_of(PRIVATE_KEY)
        message = f"X1 AuthMessage, Address {address}"

        signature = signer.sign_message(PRIVATE_KEY, message)

        assert signature.startswith("0x")
        assert Account.recover_message(encode_defunct(text=message), signature=signature) == address

    def test_rejects_bad_key(self):
        with pytest.raises(ValueError):
            EthAccountSigner().address_of("0x1234")


# =============================================================================
# Sign-in Tests
# =============================================================================


class TestAuthenticate:
    """Tests for the sign-in exchange."""

    @pytest.mark.asyncio
    async def test_success(self, authenticator, service_mocker, token_store):
        """Successful sign-in returns and persists the token."""
        token = make_token()
        service_mocker.register("GET", "/signin", httpx.Response(200, json={"nonce": "n"}))
        service_mocker.register("POST", "/signin", signin_reply(token))

        result = await authenticator.authenticate(PRIVATE_KEY)

        assert result == token
        stored = token_store.load()
        assert stored.token == token
        assert stored.identity == WALLET_ADDRESS
        assert (datetime.now(UTC) - stored.issued_at).total_seconds() < 60

    @pytest.mark.asyncio
    async def test_sends_handshake_then_signature(self, authenticator, service_mocker):
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", signin_reply(make_token()))

        await authenticator.authenticate(PRIVATE_KEY)

        assert [(c.method, c.path) for c in service_mocker.calls] == [
            ("GET", "/signin"),
            ("POST", "/signin"),
        ]
        handshake, submit = service_mocker.calls
        assert handshake.params == {"address": WALLET_ADDRESS}
        assert handshake.headers["origin"] == "https://testnet.x1ecochain.com"
        assert "sec-fetch-mode" in submit.headers
        assert json.loads(submit.body) == {"signature": "0x" + "ab" * 65}

    @pytest.mark.asyncio
    async def test_handshake_failure_is_not_fatal(self, authenticator, service_mocker):
        """GET /signin may fail without aborting sign-in."""
        token = make_token()
        service_mocker.register("GET", "/signin", httpx.ConnectError("handshake down"))
        service_mocker.register("POST", "/signin", signin_reply(token))

        assert await authenticator.authenticate(PRIVATE_KEY) == token

    @pytest.mark.asyncio
    async def test_handshake_error_status_is_not_fatal(self, authenticator, service_mocker):
        token = make_token()
        service_mocker.register("GET", "/signin", httpx.Response(405, text="Method Not Allowed"))
        service_mocker.register("POST", "/signin", signin_reply(token))

        assert await authenticator.authenticate(PRIVATE_KEY) == token

    @pytest.mark.asyncio
    async def test_without_token_fails(self, authenticator, service_mocker, token_store):
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", httpx.Response(200, json={"user": {}}))

        with pytest.raises(AuthenticationFailedError, match="No token in response"):
            await authenticator.authenticate(PRIVATE_KEY)

        assert token_store.load() is None

    @pytest.mark.asyncio
    async def test_rejected_signature(self, authenticator, service_mocker):
        """Non-2xx sign-in surfaces the normalized service message."""
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", httpx.Response(400, json={"message": "Invalid signature"}))

        with pytest.raises(AuthenticationFailedError, match="Invalid signature"):
            await authenticator.authenticate(PRIVATE_KEY)

    @pytest.mark.asyncio
    async def test_network_failure(self, authenticator, service_mocker):
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", httpx.ReadTimeout("timed out"))

        with pytest.raises(AuthenticationFailedError):
            await authenticator.authenticate(PRIVATE_KEY)

    @pytest.mark.asyncio
    async def test_identity_mismatch_still_accepts_token(self, authenticator, service_mocker, token_store, caplog):
        """The service is authoritative; a mismatch is only a warning."""
        token = make_token()
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", signin_reply(token, address=OTHER_ADDRESS))

        assert await authenticator.authenticate(PRIVATE_KEY) == token
        assert "different address" in caplog.text
        assert token_store.load().identity == WALLET_ADDRESS


# =============================================================================
# Cached Token Tests
# =============================================================================


class TestGetValidToken:
    """Tests for cached-token reuse."""

    @pytest.mark.asyncio
    async def test_reuses_cached(self, authenticator, service_mocker, token_store):
        """A usable cached token is returned without any network call."""
        token = make_token()
        token_store.save(Credential(token=token, identity=WALLET_ADDRESS.lower()))

        assert await authenticator.get_valid_token(PRIVATE_KEY) == token
        assert service_mocker.call_count == 0

    @pytest.mark.asyncio
    async def test_refreshes_expired(self, authenticator, service_mocker, token_store):
        fresh = make_token()
        token_store.save(Credential(token=make_token(-100), identity=WALLET_ADDRESS))
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", signin_reply(fresh))

        assert await authenticator.get_valid_token(PRIVATE_KEY) == fresh
        assert token_store.load().token == fresh

    @pytest.mark.asyncio
    async def test_refreshes_for_other_identity(self, authenticator, service_mocker, token_store):
        """A fresh token cached for another wallet is replaced."""
        fresh = make_token(7200)
        token_store.save(Credential(token=make_token(), identity=OTHER_ADDRESS))
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", signin_reply(fresh))

        assert await authenticator.get_valid_token(PRIVATE_KEY) == fresh
        assert token_store.load().identity == WALLET_ADDRESS

    @pytest.mark.asyncio
    async def test_without_cache(self, authenticator, service_mocker):
        fresh = make_token()
        service_mocker.register("GET", "/signin", httpx.Response(200, json={}))
        service_mocker.register("POST", "/signin", signin_reply(fresh))

        assert await authenticator.get_valid_token(PRIVATE_KEY) == fresh
        assert service_mocker.was_called_with("POST", "/signin")
