"""
Etherscan API Client

Single responsibility: account and contract lookups on Etherscan.
"""

import logging
from typing import List, Optional, Sequence

from ..config import config
from ..models import ActivityRecord, ContractCreation
from .base import AsyncAPIClient

logger = logging.getLogger(__name__)

# Etherscan answers an empty list with status "0" and one of these messages
EMPTY_RESULT_MESSAGES = {
    "No transactions found",
    "No records found",
    "No data found",
}

MAX_CREATION_BATCH = 5


class EtherscanClient(AsyncAPIClient):
    """
    Async client for the Etherscan V2 API.

    Handles:
    - ERC-20 transfer, normal and internal transaction lists (newest-first)
    - Contract creator lookups (batched, max 5 addresses per call)
    - ETH price
    """

    name = "etherscan"

    def __init__(self, api_key: str = None, url: str = None, chain_id: int = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or config.etherscan_api_key
        self.url = url or config.etherscan_url
        self.chain_id = chain_id or config.etherscan_chain_id

    async def _call(self, module: str, action: str, **params) -> Optional[object]:
        """
        Call an Etherscan module/action and unwrap "result".

        Returns:
            The result payload, [] for Etherscan's "nothing found" answers,
            or None on failure
        """
        query = {
            "chainid": self.chain_id,
            "module": module,
            "action": action,
            "apikey": self.api_key,
        }
        query.update(params)

        data = await self._request("GET", self.url, params=query)
        if not isinstance(data, dict):
            return None

        if data.get("status") == "1":
            return data.get("result")

        message = data.get("message", "")
        if message in EMPTY_RESULT_MESSAGES:
            return []

        logger.error(f"Etherscan {module}/{action} failed: {message} ({data.get('result')})")
        return None

    async def _account_list(self, action: str, address: str, page_size: int) -> Optional[List[ActivityRecord]]:
        result = await self._call(
            "account",
            action,
            address=address,
            startblock=0,
            endblock=99999999,
            page=1,
            offset=page_size,
            sort="desc",
        )
        if result is None:
            return None
        if not isinstance(result, list):
            logger.error(f"Etherscan account/{action} returned unexpected result: {result!r}")
            return None

        return [ActivityRecord.from_etherscan(row) for row in result if isinstance(row, dict)]

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    async def get_token_transfers(self, address: str, page_size: int = None) -> Optional[List[ActivityRecord]]:
        """
        Get the most recent ERC-20 transfers of an address, newest-first.

        Args:
            address: Wallet address (0x...)
            page_size: Number of transfers (default from config)

        Returns:
            List of ActivityRecord or None on failure
        """
        return await self._account_list("tokentx", address, page_size or config.transfers_page_size)

    async def get_internal_transactions(self, address: str, count: int = None) -> Optional[List[ActivityRecord]]:
        """Get the most recent internal transactions of an address, newest-first."""
        return await self._account_list("txlistinternal", address, count or config.discovery_fetch_count)

    async def get_transactions(self, address: str, page_size: int = None) -> Optional[List[ActivityRecord]]:
        """Get the most recent normal transactions of an address, newest-first."""
        return await self._account_list("txlist", address, page_size or config.renounce_scan_page_size)

    async def get_contract_creation(self, addresses: Sequence[str]) -> Optional[List[ContractCreation]]:
        """
        Get deployer and deployment tx for up to 5 contracts.

        Args:
            addresses: Contract addresses (at most 5)

        Returns:
            List of ContractCreation or None on failure
        """
        if not addresses:
            return []
        if len(addresses) > MAX_CREATION_BATCH:
            raise ValueError(f"getcontractcreation accepts at most {MAX_CREATION_BATCH} addresses")

        result = await self._call(
            "contract",
            "getcontractcreation",
            contractaddresses=",".join(addresses),
        )
        if result is None:
            return None

        return [ContractCreation.from_etherscan(row) for row in result if isinstance(row, dict)]

    async def get_eth_price(self) -> Optional[float]:
        """Get the current ETH/USD price."""
        result = await self._call("stats", "ethprice")
        if not isinstance(result, dict):
            return None

        try:
            return float(result["ethusd"])
        except (KeyError, TypeError, ValueError):
            logger.error(f"Etherscan ethprice returned unexpected result: {result!r}")
            return None
