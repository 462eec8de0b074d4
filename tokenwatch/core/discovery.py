"""
Token Discovery

Finds newly created pairs by watching the factory's internal transactions
and turns each one into a CandidateToken for risk classification.

Discovery only looks forward: the first fetch sets a baseline at the
newest pair creation and only creations after it are ever evaluated.
"""

import logging
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from ..config import config
from ..models import ActivityRecord, CandidateToken, ContractCreation
from .cursor import newer_than

if TYPE_CHECKING:
    from ..api.etherscan import EtherscanClient
    from ..api.honeypot import HoneypotClient

logger = logging.getLogger(__name__)


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    """Split items into lists of at most size elements."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class TokenDiscovery:
    """
    Pair-creation scanner.

    Keeps a high-water mark (timestamp of the newest processed creation)
    and returns candidates for creations strictly newer than it.
    """

    def __init__(
        self,
        etherscan: "EtherscanClient",
        honeypot: "HoneypotClient",
        factory_address: str = None,
        fetch_count: int = None,
        batch_size: int = None,
    ):
        self.etherscan = etherscan
        self.honeypot = honeypot
        self.factory_address = factory_address or config.factory_address
        self.fetch_count = fetch_count or config.discovery_fetch_count
        self.batch_size = batch_size or config.creation_lookup_batch_size

        # Baseline: newest pair creation seen so far
        self.last_created_at: Optional[int] = None
        self.last_pair_address: Optional[str] = None

    @property
    def is_seeded(self) -> bool:
        return self.last_created_at is not None

    async def discover(self) -> List[CandidateToken]:
        """
        Fetch factory activity and build candidates for new pairs.

        Returns:
            New candidates in creation order (oldest first); empty on the
            seeding call or when the fetch fails
        """
        records = await self.etherscan.get_internal_transactions(self.factory_address, self.fetch_count)
        if records is None:
            logger.warning("Factory internal transaction fetch failed, skipping discovery")
            return []

        creations = [r for r in records if r.creates_contract]
        if not creations:
            return []

        if not self.is_seeded:
            self._set_baseline(creations[0])
            logger.info(f"Discovery baseline set at pair {creations[0].contract_address} "
                        f"({creations[0].timestamp})")
            return []

        fresh = newer_than(creations, self.last_created_at)
        if not fresh:
            return []

        self._set_baseline(fresh[0])
        fresh.reverse()

        candidates = await self._resolve(fresh)
        logger.info(f"Discovered {len(candidates)} new pairs")
        return candidates

    def _set_baseline(self, record: ActivityRecord):
        self.last_created_at = record.timestamp
        self.last_pair_address = record.contract_address

    async def _resolve(self, records: List[ActivityRecord]) -> List[CandidateToken]:
        """
        Resolve token contract, creator and creation tx for each new pair.

        A lookup failure leaves the affected fields empty; the candidate
        is still created.
        """
        candidates = []
        for record in records:
            pair_address = record.contract_address
            meta = await self.honeypot.get_token_meta(pair_address)
            if meta is None:
                logger.warning(f"Could not resolve token for pair {pair_address}")

            candidates.append(CandidateToken(
                pair_address=pair_address,
                contract_address=meta.contract_address if meta else "",
                creator="",
                creation_tx_hash="",
                created_at=record.timestamp,
                name=meta.name if meta else "",
                symbol=meta.symbol if meta else "",
                meta=meta,
            ))

        creations = await self._lookup_creators(
            [c.contract_address for c in candidates if c.contract_address]
        )
        for candidate in candidates:
            creation = creations.get(candidate.contract_address)
            if creation:
                candidate.creator = creation.creator
                candidate.creation_tx_hash = creation.tx_hash

        return candidates

    async def _lookup_creators(self, contracts: List[str]) -> Dict[str, ContractCreation]:
        """Batched getcontractcreation; failed batches are skipped."""
        found: Dict[str, ContractCreation] = {}
        unique = list(dict.fromkeys(contracts))

        for batch in chunked(unique, self.batch_size):
            result = await self.etherscan.get_contract_creation(batch)
            if result is None:
                logger.warning(f"Creator lookup failed for {len(batch)} contracts")
                continue
            for creation in result:
                found[creation.contract_address] = creation

        return found
