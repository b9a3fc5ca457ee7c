"""
Wallet gateway for the X1 EcoChain.

Reads the native balance and sends native-token transfers. Transaction
construction, signing and broadcasting are delegated to web3's
sign-and-send middleware; this module only validates input and turns
the outcome into a tagged Result.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.providers import AsyncHTTPProvider

from ..api.errors import ErrorKind
from ..api.models import Result

logger = logging.getLogger(__name__)

# Substring of the RPC error -> message shown to the caller
KNOWN_FAILURES = (
    ("insufficient funds", "Insufficient balance for transfer"),
    ("invalid address", "Invalid recipient address"),
    ("nonce", "Transaction nonce error - try again"),
    ("network_error", "Network connection error - RPC unavailable"),
    ("cannot connect", "Network connection error - RPC unavailable"),
)


class WalletGateway:
    """Native-token wallet operations for one private key."""

    def __init__(self, web3: AsyncWeb3, address: str, chain_id: Optional[int] = None):
        """
        Initialize wallet gateway.

        Args:
            web3: Async web3 instance able to sign for ``address``
            address: Sending wallet address
            chain_id: Expected chain id, added to every transaction
        """
        self.web3 = web3
        self.address = address
        self.chain_id = chain_id

    @classmethod
    def from_private_key(
        cls, rpc_url: str, private_key: str, chain_id: Optional[int] = None
    ) -> "WalletGateway":
        """Build a gateway whose web3 instance signs with ``private_key``."""
        account = Account.from_key(private_key)
        web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
        return cls(web3, account.address, chain_id)

    async def aclose(self) -> None:
        """Close the RPC provider session."""
        await self.web3.provider.disconnect()

    async def get_balance(self) -> Result:
        """
        Get the native balance of the wallet.

        Returns:
            Result with ``address`` and ``balance`` (ether units, as string)
        """
        try:
            balance_wei = await self.web3.eth.get_balance(self.address)
        except Exception as e:
            logger.error(f"Error getting balance: {e}")
            return Result.failure(str(e), ErrorKind.WALLET)

        balance = Web3.from_wei(balance_wei, "ether")
        return Result.success({"address": self.address, "balance": str(balance)})

    async def send_transfer(self, to_address: str, amount: Union[str, int, float, Decimal]) -> Result:
        """
        Send native tokens and wait for the receipt.

        Args:
            to_address: Recipient address
            amount: Amount in ether units

        Returns:
            Result with transaction details, or a failure with a readable reason
        """
        if not Web3.is_address(to_address):
            return Result.failure("Invalid recipient address", ErrorKind.WALLET)

        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            return Result.failure(f"Invalid amount: {amount}", ErrorKind.WALLET)
        if not value.is_finite():
            return Result.failure(f"Invalid amount: {amount}", ErrorKind.WALLET)
        if value <= 0:
            return Result.failure("Amount must be positive", ErrorKind.WALLET)

        try:
            value_wei = Web3.to_wei(value, "ether")
        except ValueError:
            return Result.failure(f"Invalid amount: {amount}", ErrorKind.WALLET)
        if value_wei == 0:
            return Result.failure("Amount must be positive", ErrorKind.WALLET)

        recipient = Web3.to_checksum_address(to_address)
        transaction = {
            "from": self.address,
            "to": recipient,
            "value": value_wei,
        }
        if self.chain_id is not None:
            transaction["chainId"] = self.chain_id

        logger.info(f"Sending {value} from {self.address} to {recipient}")

        try:
            tx_hash = await self.web3.eth.send_transaction(transaction)
            tx_hash_hex = Web3.to_hex(tx_hash)
            logger.info(f"Transaction hash: {tx_hash_hex}, waiting for confirmation...")
            receipt = await self.web3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            logger.error(f"Transfer error: {e}")
            return Result.failure(_friendly_message(e), ErrorKind.WALLET)

        if not receipt or receipt["status"] != 1:
            return Result.failure("Transaction failed or reverted", ErrorKind.WALLET)

        logger.info("Transaction confirmed")
        return Result.success({
            "tx_hash": tx_hash_hex,
            "from": self.address,
            "to": recipient,
            "amount": str(value),
            "block": receipt["blockNumber"],
            "message": "Transfer completed successfully",
        })


def _friendly_message(error: Exception) -> str:
    """Map known RPC failures to short messages."""
    text = str(error)
    lowered = text.lower()
    for needle, message in KNOWN_FAILURES:
        if needle in lowered:
            return message
    return text or type(error).__name__
