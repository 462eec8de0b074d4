"""
Candidate Monitor
=================

Owns the set of monitored candidate tokens.

Each tick:
1. Adds newly discovered pairs
2. Refreshes the risk checks of every pending candidate
3. Applies the verdicts: rejected and expired candidates are dropped,
   buy candidates are announced to auto-snipe subscribers and dropped
"""

import asyncio
import logging
import time
from collections import Counter
from typing import Callable, List, TYPE_CHECKING

from ..config import config
from ..models import CandidateToken, Verdict
from .classifier import RiskClassifier, reduce_candidate
from .discovery import TokenDiscovery
from .subscribers import SubscriberRegistry

if TYPE_CHECKING:
    from ..alerts.telegram import TelegramAlerts

logger = logging.getLogger(__name__)


class CandidateMonitor:
    """
    Discovery + classification loop body.

    The candidate list is only touched from tick(), so it needs no lock.
    """

    def __init__(
        self,
        discovery: TokenDiscovery,
        classifier: RiskClassifier,
        registry: SubscriberRegistry,
        notifier: "TelegramAlerts",
        clock: Callable[[], float] = time.time,
        ttl: float = None,
    ):
        self.discovery = discovery
        self.classifier = classifier
        self.registry = registry
        self.notifier = notifier
        self.clock = clock
        self.ttl = config.candidate_ttl_sec if ttl is None else ttl

        self.candidates: List[CandidateToken] = []
        self.stats: Counter = Counter()

    def add(self, candidates: List[CandidateToken]) -> int:
        """Append candidates whose pair is not already monitored."""
        known = {c.pair_address for c in self.candidates}
        added = 0
        for candidate in candidates:
            if candidate.pair_address in known:
                logger.debug(f"Pair {candidate.pair_address} already monitored, skipping")
                continue
            self.candidates.append(candidate)
            known.add(candidate.pair_address)
            added += 1
        return added

    async def tick(self) -> List[CandidateToken]:
        """
        Run one discovery + classification cycle.

        Returns:
            Candidates that reached the BUY verdict this cycle
        """
        new = await self.discovery.discover()
        if new:
            self.add(new)

        for candidate in self.candidates:
            await self.classifier.evaluate(candidate)

        return await self._apply_verdicts(self.clock())

    async def _apply_verdicts(self, now: float) -> List[CandidateToken]:
        retained = []
        to_buy = []

        for candidate in self.candidates:
            verdict = reduce_candidate(candidate, now, self.ttl)
            self.stats[verdict.value] += 1

            if verdict is Verdict.PENDING:
                retained.append(candidate)
            elif verdict is Verdict.BUY:
                candidate.to_buy = True
                to_buy.append(candidate)
            elif verdict is Verdict.REJECTED:
                logger.info(f"Rejected {candidate.display_name}: honeypot")
            else:
                logger.info(f"Expired {candidate.display_name}: renounced={candidate.renounced.value}, "
                            f"liquidity locked={candidate.liquidity_locked.value} after "
                            f"{candidate.age(now):.0f}s")

        self.candidates = retained

        if to_buy:
            await self._announce(to_buy)

        return to_buy

    async def _announce(self, candidates: List[CandidateToken]):
        subscribers = await self.registry.auto_snipe_subscribers()
        if not subscribers:
            logger.info(f"{len(candidates)} buy candidates, no auto-snipe subscribers")
            return

        for candidate in candidates:
            logger.info(f"Buy candidate {candidate.display_name} -> {len(subscribers)} subscribers")
            for subscriber in subscribers:
                try:
                    message_id = await asyncio.to_thread(
                        self.notifier.notify_candidate_to_buy, subscriber, candidate
                    )
                except Exception as e:
                    logger.error(f"Failed to notify {subscriber} about {candidate.pair_address}: {e}")
                    continue

                if message_id is None:
                    logger.error(f"Buy alert to {subscriber} about {candidate.pair_address} was not delivered")
                else:
                    self.stats["notified"] += 1
