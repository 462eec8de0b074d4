"""
Alchemy API Client

Single responsibility: JSON-RPC reads against an Alchemy node, with every
call charged to the shared compute budget.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, TYPE_CHECKING

from ..config import config
from ..utils import hex_to_decimal, to_eth, to_gwei
from .base import AsyncAPIClient

if TYPE_CHECKING:
    from ..core.budget import ComputeBudget

logger = logging.getLogger(__name__)

# Compute units charged by Alchemy per method
COMPUTE_UNITS = {
    "eth_gasPrice": 20,
    "eth_getBalance": 19,
    "alchemy_getTokenBalances": 26,
}


@dataclass
class TokenBalance:
    """Raw ERC-20 balance of a wallet."""
    contract_address: str
    raw_balance: int

    @property
    def is_zero(self) -> bool:
        return self.raw_balance == 0


class AlchemyClient(AsyncAPIClient):
    """
    Async JSON-RPC client for Alchemy.

    Handles:
    - Gas price
    - ETH balance
    - ERC-20 token balances
    """

    name = "alchemy"

    def __init__(self, budget: "ComputeBudget" = None, api_key: str = None, url: str = None, **kwargs):
        super().__init__(**kwargs)
        self.budget = budget
        self.api_key = api_key or config.alchemy_api_key
        self.url = url or config.alchemy_url

    async def _rpc(self, method: str, params: List[Any] = None) -> Optional[Any]:
        payload = {
            "id": 1,
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
        }

        if self.budget is not None:
            self.budget.add_units(COMPUTE_UNITS.get(method, 0))

        data = await self._request("POST", f"{self.url}/{self.api_key}", json=payload)
        if not isinstance(data, dict):
            return None

        if "error" in data:
            logger.error(f"Alchemy {method} error: {data['error']}")
            return None

        return data.get("result")

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    async def get_gas_price_gwei(self) -> Optional[float]:
        """Current gas price in gwei."""
        result = await self._rpc("eth_gasPrice")
        if not isinstance(result, str):
            return None
        return to_gwei(result)

    async def get_eth_balance(self, address: str) -> Optional[float]:
        """ETH balance of an address."""
        result = await self._rpc("eth_getBalance", [address, "latest"])
        if not isinstance(result, str):
            return None
        return to_eth(result)

    async def get_token_balances(self, address: str) -> Optional[List[TokenBalance]]:
        """
        ERC-20 balances of an address.

        Args:
            address: Wallet address

        Returns:
            List of TokenBalance (including zero balances) or None on failure
        """
        result = await self._rpc("alchemy_getTokenBalances", [address])
        if not isinstance(result, dict):
            return None

        balances = []
        for entry in result.get("tokenBalances", []):
            try:
                balances.append(TokenBalance(
                    contract_address=entry["contractAddress"].lower(),
                    raw_balance=hex_to_decimal(entry.get("tokenBalance") or "0x0"),
                ))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skipping token balance entry {entry!r}: {e}")
                continue

        return balances
