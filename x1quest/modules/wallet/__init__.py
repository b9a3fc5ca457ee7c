"""
Wallet Module - Black Box Interface

Purpose: Native balance and transfers on the X1 EcoChain
Interface: get_balance(), send_transfer()
Hidden: RPC provider, signing middleware, error mapping

Can be replaced with any chain client returning the same Result shapes.
"""

from .gateway import WalletGateway

__all__ = ["WalletGateway"]
