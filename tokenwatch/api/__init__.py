"""
API Package
===========

External API clients.

Components:
- base.py: AsyncAPIClient (session, retries, rate limiting)
- etherscan.py: EtherscanClient (transfers, internal/normal txs, creators, ETH price)
- honeypot.py: HoneypotClient (token metadata, honeypot simulation)
- chainbase.py: ChainbaseClient (top holders)
- alchemy.py: AlchemyClient (gas, balances; charges the compute budget)
"""

from .base import AsyncAPIClient
from .etherscan import EtherscanClient
from .honeypot import HoneypotClient, parse_token_meta
from .chainbase import ChainbaseClient
from .alchemy import AlchemyClient, TokenBalance, COMPUTE_UNITS

__all__ = [
    "AsyncAPIClient",
    "EtherscanClient",
    "HoneypotClient",
    "parse_token_meta",
    "ChainbaseClient",
    "AlchemyClient",
    "TokenBalance",
    "COMPUTE_UNITS",
]
