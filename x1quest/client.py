"""
x1quest - Caller-facing client

This is the thin facade a presentation layer (chat bot, CLI) calls into:
1. Builds request descriptions
2. Delegates to the executor, orchestrator and wallet gateway
3. Returns tagged Results only

All retry, authentication and pacing logic lives in the modules.
"""

import logging
from decimal import Decimal
from typing import Any, List, Optional, Union

import httpx
from pydantic import ValidationError

from x1quest.config.provider import ConfigProvider, EnvConfigProvider, X1Config
from x1quest.modules.api import (
    ApiRoot,
    AuthenticationFailedError,
    AuthSession,
    BatchResult,
    BatchSummary,
    ErrorKind,
    Quest,
    RequestSpec,
    Result,
)
from x1quest.modules.auth import EthAccountSigner, SessionAuthenticator, TokenValidator
from x1quest.modules.executor import RequestExecutor
from x1quest.modules.quests import (
    QuestOrchestrator,
    QuestPredicate,
    complete_quest_request,
    is_daily_pending,
    is_social_pending,
)
from x1quest.modules.storage import TokenStore
from x1quest.modules.wallet import WalletGateway

logger = logging.getLogger(__name__)


class X1Client:
    """Caller-facing operations. Every method returns a Result."""

    def __init__(
        self,
        executor: RequestExecutor,
        orchestrator: QuestOrchestrator,
        wallet: Optional[WalletGateway] = None,
    ):
        self.executor = executor
        self.orchestrator = orchestrator
        self.wallet = wallet

    async def __aenter__(self) -> "X1Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP clients and the wallet RPC session."""
        for client in self.executor.clients.values():
            await client.aclose()
        if self.wallet is not None:
            await self.wallet.aclose()

    # Profile and quests

    async def get_profile(self) -> Result:
        return await self.executor.execute(RequestSpec(method="GET", path="/me"))

    async def list_quests(self) -> Result:
        """List all quests, parsed into Quest models."""
        result = await self.executor.execute(RequestSpec(method="GET", path="/quests"))
        if not result.ok:
            return result

        payload = result.data
        if isinstance(payload, dict):
            payload = payload.get("quests", payload.get("data"))
        if not isinstance(payload, list):
            return Result.failure("Unexpected quest list format", ErrorKind.INVALID_RESPONSE)

        try:
            quests = [Quest.model_validate(item) for item in payload]
        except ValidationError as e:
            logger.error(f"Could not parse quest list: {e}")
            return Result.failure("Unexpected quest list format", ErrorKind.INVALID_RESPONSE)

        return Result.success(quests)

    async def complete_quest(self, quest_id: Union[int, str]) -> Result:
        return await self.executor.execute(complete_quest_request(quest_id))

    async def list_daily_pending(self) -> Result:
        return await self._list_pending(is_daily_pending)

    async def complete_all_daily(self) -> Result:
        return await self._complete_all(is_daily_pending, "daily")

    async def list_social_pending(self) -> Result:
        return await self._list_pending(is_social_pending)

    async def complete_all_social(self) -> Result:
        return await self._complete_all(is_social_pending, "social")

    @staticmethod
    def summarize(results: List[BatchResult]) -> BatchSummary:
        return BatchSummary.from_results(results)

    # Faucet and wallet

    async def claim_faucet(self) -> Result:
        """Claim testnet funds for this wallet."""
        try:
            address = self.executor.identity
        except AuthenticationFailedError as e:
            return Result.failure(str(e), ErrorKind.AUTHENTICATION_FAILED)

        return await self.executor.execute(
            RequestSpec(
                method="GET",
                path="/testnet/faucet",
                api=ApiRoot.FAUCET,
                params={"address": address},
            )
        )

    async def get_balance(self) -> Result:
        if self.wallet is None:
            return Result.failure("Wallet RPC is not configured", ErrorKind.WALLET)
        return await self.wallet.get_balance()

    async def send_transfer(self, to_address: str, amount: Union[str, int, float, Decimal]) -> Result:
        if self.wallet is None:
            return Result.failure("Wallet RPC is not configured", ErrorKind.WALLET)
        return await self.wallet.send_transfer(to_address, amount)

    async def _list_pending(self, predicate: QuestPredicate) -> Result:
        result = await self.list_quests()
        if not result.ok:
            return result
        return Result.success(self.orchestrator.list_pending(result.data, predicate))

    async def _complete_all(self, predicate: QuestPredicate, label: str) -> Result:
        pending = await self._list_pending(predicate)
        if not pending.ok:
            return pending

        if not pending.data:
            return Result.success([], message=f"No pending {label} quests")

        results = await self.orchestrator.complete_all(pending.data)
        summary = self.summarize(results)
        logger.info(
            f"{label.capitalize()} batch done: {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {summary.skipped} skipped, +{summary.total_reward}"
        )
        return Result.success(results)


class ClientFactory:
    """
    Factory for building the client stack.

    This is the composition root that:
    - Creates all components
    - Wires them together via dependency injection
    - Returns only the public facade
    """

    @staticmethod
    def build(config_provider: Optional[ConfigProvider] = None, **overrides: Any) -> X1Client:
        """
        Build the complete client stack.

        Args:
            config_provider: Configuration provider (environment by default)
            **overrides: Component overrides (``signer``, ``store``,
                ``validator``, ``transport``, ``wallet``, ``sleep``)

        Returns:
            X1Client facade
        """
        config = (config_provider or EnvConfigProvider()).get_x1_config()
        return ClientFactory.from_config(config, **overrides)

    @staticmethod
    def from_config(config: X1Config, **overrides: Any) -> X1Client:
        """Build the client stack from an explicit configuration."""
        transport = overrides.get("transport")
        clients = {
            ApiRoot.PRIMARY: httpx.AsyncClient(
                base_url=config.api_base_url, timeout=config.request_timeout, transport=transport
            ),
            ApiRoot.FAUCET: httpx.AsyncClient(
                base_url=config.faucet_base_url, timeout=config.request_timeout, transport=transport
            ),
        }

        signer = overrides.get("signer") or EthAccountSigner()
        store = overrides.get("store") or TokenStore(config.token_file)
        validator = overrides.get("validator") or TokenValidator()

        authenticator = SessionAuthenticator(
            http_client=clients[ApiRoot.PRIMARY],
            signer=signer,
            store=store,
            validator=validator,
            challenge_template=config.challenge_template,
        )

        sleep_kwargs = {"sleep": overrides["sleep"]} if "sleep" in overrides else {}
        executor = RequestExecutor(
            clients=clients,
            authenticator=authenticator,
            validator=validator,
            session=AuthSession(private_key=config.private_key),
            retry=config.retry,
            **sleep_kwargs,
        )
        orchestrator = QuestOrchestrator(
            executor, pacing=config.retry.quest_pacing, **sleep_kwargs
        )

        wallet = overrides.get("wallet")
        if wallet is None and config.rpc_url:
            wallet = WalletGateway.from_private_key(
                config.rpc_url, config.private_key, config.chain_id
            )

        logger.info(f"Client built for API {config.api_base_url}")
        return X1Client(executor, orchestrator, wallet)
