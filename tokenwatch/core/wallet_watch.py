"""
Wallet Watcher

Each tick:
1. Snapshots every subscriber's watch list
2. Fetches recent token transfers per watched address
3. Diffs them against the stored cursor
4. Sends one notification per new transfer, oldest first
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from .cursor import CursorStore
from .subscribers import SubscriberRegistry

if TYPE_CHECKING:
    from ..alerts.telegram import TelegramAlerts
    from ..api.etherscan import EtherscanClient

logger = logging.getLogger(__name__)


class WalletWatcher:
    """
    Turns repeated transfer-list snapshots into new-activity alerts.

    A failed fetch skips that address for this tick without touching its
    cursor, so the next successful fetch still reports everything newer
    than the last reported transfer.
    """

    def __init__(
        self,
        etherscan: "EtherscanClient",
        registry: SubscriberRegistry,
        notifier: "TelegramAlerts",
        cursors: CursorStore = None,
        page_size: int = None,
    ):
        self.etherscan = etherscan
        self.registry = registry
        self.notifier = notifier
        # CursorStore defines __len__, so an empty injected store is falsy
        self.cursors = cursors if cursors is not None else CursorStore()
        self.page_size = page_size

    async def tick(self) -> int:
        """
        Run one watch cycle.

        Returns:
            Number of notifications delivered
        """
        watched = await self.registry.snapshot_watch_lists()
        if not watched:
            return 0

        await self.cursors.prune(watched)

        emitted = 0
        failures = 0

        for subscriber, addresses in watched.items():
            for address in addresses:
                records = await self.etherscan.get_token_transfers(address, self.page_size)
                if records is None:
                    failures += 1
                    logger.warning(f"Transfer fetch failed for {address[:10]}... (subscriber {subscriber}), skipping")
                    continue

                new_records, cursor = await self.cursors.advance(subscriber, address, records)

                for record in new_records:
                    try:
                        message_id = await asyncio.to_thread(
                            self.notifier.notify_wallet_activity, subscriber, address, record
                        )
                    except Exception as e:
                        logger.error(f"Failed to notify {subscriber} about {record.hash}: {e}")
                        continue

                    if message_id is None:
                        logger.error(f"Notification to {subscriber} about {record.hash} was not delivered")
                    else:
                        emitted += 1

                if new_records:
                    logger.info(f"{len(new_records)} new transfers for {address[:10]}... "
                                f"(subscriber {subscriber}, cursor {cursor})")

        total = sum(len(a) for a in watched.values())
        logger.debug(f"Watch tick: {total} addresses, {emitted} notifications, {failures} failures")
        return emitted
