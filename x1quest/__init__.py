"""
x1quest - X1 Testnet Quest Automation

Drives the X1 quest-and-reward API on behalf of a single wallet key.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All outcomes cross module boundaries as tagged Result values

Modules:
- api: Shared data models, error taxonomy and error formatting
- storage: Session credential persistence
- auth: Challenge signing, sign-in handshake and token validation
- executor: Resilient request execution (retry, backoff, re-auth)
- quests: Quest filtering and paced batch completion
- wallet: Native balance and transfers over JSON-RPC
"""

__version__ = "1.0.0"
