"""
Wallet signer backed by eth-account.

Implements the Signer protocol with EIP-191 personal signatures, the
same scheme browser wallets use for sign-in challenges.
"""

from eth_account import Account
from eth_account.messages import encode_defunct


class EthAccountSigner:
    """Signs challenge messages with a local private key."""

    def address_of(self, private_key: str) -> str:
        return Account.from_key(private_key).address

    def sign_message(self, private_key: str, message: str) -> str:
        signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
        signature = signed.signature.hex()
        if not signature.startswith("0x"):
            signature = "0x" + signature
        return signature
