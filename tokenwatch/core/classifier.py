"""
Risk Classifier
===============

Runs the per-candidate risk checks and reduces them to a verdict.

Checks (each TRUE / FALSE / UNKNOWN):
- Honeypot: flagged by honeypot.is, or buy/sell tax above the limit
- Liquidity: a top holder is a known locker or burn address
- Renouncement: the creator called renounceOwnership

Reduction order:
1. Not renounced -> PENDING, or EXPIRED once older than the TTL
2. Renounced + honeypot -> REJECTED
3. Renounced + liquidity locked -> BUY
4. Otherwise -> PENDING, or EXPIRED once older than the TTL
"""

import logging
from typing import Iterable, List, Optional, Set, TYPE_CHECKING

from ..config import config
from ..models import ActivityRecord, CandidateToken, CheckOutcome, TokenMeta, Verdict

if TYPE_CHECKING:
    from ..api.chainbase import ChainbaseClient
    from ..api.etherscan import EtherscanClient
    from ..api.honeypot import HoneypotClient

logger = logging.getLogger(__name__)

RENOUNCE_FUNCTION = "renounceOwnership"


# =============================================================================
# CHECKS
# =============================================================================

def honeypot_outcome(meta: Optional[TokenMeta], max_tax: float = None) -> CheckOutcome:
    """Honeypot if flagged or either tax exceeds max_tax percent."""
    if meta is None:
        return CheckOutcome.UNKNOWN

    limit = config.max_tax_pct if max_tax is None else max_tax
    flagged = meta.is_honeypot or meta.buy_tax > limit or meta.sell_tax > limit
    return CheckOutcome.from_bool(flagged)


def liquidity_outcome(holders: Optional[List[str]], lockers: Iterable[str] = None) -> CheckOutcome:
    """Locked or burned if any top holder is in the locker allow-list."""
    if holders is None:
        return CheckOutcome.UNKNOWN

    allow = {a.lower() for a in (config.liquidity_lockers if lockers is None else lockers)}
    return CheckOutcome.from_bool(any(h.lower() in allow for h in holders))


def renounce_outcome(transactions: Optional[List[ActivityRecord]]) -> CheckOutcome:
    """TRUE if any transaction called renounceOwnership."""
    if transactions is None:
        return CheckOutcome.UNKNOWN

    return CheckOutcome.from_bool(
        any(RENOUNCE_FUNCTION in tx.function_name for tx in transactions)
    )


def reduce_candidate(candidate: CandidateToken, now: float, ttl: float = None) -> Verdict:
    """
    Reduce a candidate's check outcomes to a verdict.

    Args:
        candidate: Candidate with refreshed check outcomes
        now: Current unix time
        ttl: Seconds a candidate may stay pending (default from config)

    Returns:
        Verdict for this cycle
    """
    ttl = config.candidate_ttl_sec if ttl is None else ttl
    expired = candidate.age(now) > ttl

    if not candidate.renounced.is_true:
        return Verdict.EXPIRED if expired else Verdict.PENDING

    if candidate.honeypot.is_true:
        return Verdict.REJECTED

    if candidate.liquidity_locked.is_true:
        return Verdict.BUY

    # Renounced but liquidity never confirmed
    return Verdict.EXPIRED if expired else Verdict.PENDING


# =============================================================================
# CLASSIFIER
# =============================================================================

class RiskClassifier:
    """Refreshes the check outcomes of a candidate from upstream data."""

    def __init__(
        self,
        etherscan: "EtherscanClient",
        honeypot: "HoneypotClient",
        chainbase: "ChainbaseClient",
        max_tax: float = None,
        lockers: Set[str] = None,
        holders_limit: int = None,
        scan_page_size: int = None,
    ):
        self.etherscan = etherscan
        self.honeypot = honeypot
        self.chainbase = chainbase
        self.max_tax = config.max_tax_pct if max_tax is None else max_tax
        self.lockers = config.liquidity_lockers if lockers is None else lockers
        self.holders_limit = holders_limit or config.top_holders_limit
        self.scan_page_size = scan_page_size or config.renounce_scan_page_size

    async def evaluate(self, candidate: CandidateToken) -> CandidateToken:
        """
        Run all checks for one candidate and store the outcomes on it.

        Upstream failures yield UNKNOWN for the affected check only.
        """
        lookup = candidate.contract_address or candidate.pair_address
        meta = await self.honeypot.get_token_meta(lookup)
        if meta is not None:
            candidate.meta = meta
            if not candidate.name:
                candidate.name = meta.name
            if not candidate.symbol:
                candidate.symbol = meta.symbol
        candidate.honeypot = honeypot_outcome(meta, self.max_tax)

        if candidate.contract_address:
            holders = await self.chainbase.get_top_holders(candidate.contract_address, self.holders_limit)
            candidate.liquidity_locked = liquidity_outcome(holders, self.lockers)
        else:
            candidate.liquidity_locked = CheckOutcome.UNKNOWN

        if not candidate.renounced.is_true:
            if candidate.creator:
                txs = await self.etherscan.get_transactions(candidate.creator, self.scan_page_size)
                candidate.renounced = renounce_outcome(txs)
            else:
                candidate.renounced = CheckOutcome.UNKNOWN

        logger.debug(
            f"{candidate.display_name}: honeypot={candidate.honeypot.value} "
            f"liquidity={candidate.liquidity_locked.value} renounced={candidate.renounced.value}"
        )
        return candidate
