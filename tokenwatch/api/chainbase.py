"""
Chainbase API Client

Single responsibility: top token holders.
"""

import logging
from typing import List, Optional

from ..config import config
from .base import AsyncAPIClient

logger = logging.getLogger(__name__)


class ChainbaseClient(AsyncAPIClient):
    """Async client for the Chainbase token API."""

    name = "chainbase"

    def __init__(self, api_key: str = None, url: str = None, chain_id: int = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or config.chainbase_api_key
        self.url = url or config.chainbase_url
        self.chain_id = chain_id or config.chainbase_chain_id

    async def get_top_holders(self, contract: str, limit: int = None) -> Optional[List[str]]:
        """
        Get the largest holders of a token.

        Args:
            contract: Token contract address
            limit: Number of holders (default from config)

        Returns:
            Lowercased holder addresses, largest first, or None on failure
        """
        data = await self._request(
            "GET",
            f"{self.url}/token/top-holders",
            params={
                "chain_id": self.chain_id,
                "contract_address": contract,
                "limit": limit or config.top_holders_limit,
            },
            headers={"x-api-key": self.api_key or ""},
        )
        if not isinstance(data, dict):
            return None

        if data.get("code") not in (0, None):
            logger.error(f"Chainbase top-holders failed for {contract}: {data.get('message')}")
            return None

        holders = data.get("data") or []
        return [
            h["wallet_address"].lower()
            for h in holders
            if isinstance(h, dict) and h.get("wallet_address")
        ]
