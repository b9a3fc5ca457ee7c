"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import Protocol

DEFAULT_API_BASE_URL = "https://testnet-api.x1.one"
DEFAULT_FAUCET_BASE_URL = "https://nft-api.x1.one"
DEFAULT_RPC_URL = "https://maculatus-rpc.x1eco.com/"
DEFAULT_CHAIN_ID = 10778
DEFAULT_CHALLENGE_TEMPLATE = "X1 AuthMessage, Address {address}"


@dataclass
class RetryConfig:
    """Retry and pacing configuration."""
    max_attempts: int = 3
    backoff_base_ms: int = 2000
    quest_pacing_ms: int = 1000

    @property
    def backoff_base(self) -> float:
        """Backoff base delay in seconds."""
        return self.backoff_base_ms / 1000

    @property
    def quest_pacing(self) -> float:
        """Pause between quest completions in seconds."""
        return self.quest_pacing_ms / 1000


@dataclass
class X1Config:
    """X1 service configuration."""
    private_key: str = field(repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL
    faucet_base_url: str = DEFAULT_FAUCET_BASE_URL
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    token_file: str = "tokens.json"
    challenge_template: str = DEFAULT_CHALLENGE_TEMPLATE
    request_timeout: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_x1_config(self) -> X1Config:
        """Get X1 service configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration from environment variables."""
        return RetryConfig(
            max_attempts=int(os.getenv("X1_MAX_ATTEMPTS", "3")),
            backoff_base_ms=int(os.getenv("X1_BACKOFF_BASE_MS", "2000")),
            quest_pacing_ms=int(os.getenv("X1_QUEST_PACING_MS", "1000")),
        )

    def get_x1_config(self) -> X1Config:
        """Get X1 service configuration from environment variables."""
        # The wallet key is required - there is nothing to act on without it
        private_key = os.getenv("WALLET_PRIVATE_KEY")
        if not private_key:
            raise ValueError(
                "WALLET_PRIVATE_KEY environment variable is required. "
                "Set it to the hex private key of the wallet that owns the quests."
            )

        return X1Config(
            private_key=private_key.strip(),
            api_base_url=os.getenv("X1_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            faucet_base_url=os.getenv("X1_FAUCET_BASE_URL", DEFAULT_FAUCET_BASE_URL).rstrip("/"),
            rpc_url=os.getenv("X1_RPC_URL", DEFAULT_RPC_URL),
            chain_id=int(os.getenv("X1_CHAIN_ID", str(DEFAULT_CHAIN_ID))),
            token_file=os.getenv("X1_TOKEN_FILE", "tokens.json"),
            challenge_template=os.getenv("X1_CHALLENGE_TEMPLATE", DEFAULT_CHALLENGE_TEMPLATE),
            request_timeout=float(os.getenv("X1_REQUEST_TIMEOUT", "30")),
            retry=self.get_retry_config(),
        )
