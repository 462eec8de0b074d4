"""
Subscriber Registry

Watch lists and settings per chat. Shared between the command front-end
(writes) and the monitoring loops (snapshots).
"""

import asyncio
import logging
from typing import Dict, Iterable, List

from ..models import SubscriberSettings
from ..utils import is_valid_address, normalize_address

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """Lock-protected subscriber -> (watch list, settings) maps."""

    def __init__(self):
        self._watch_lists: Dict[str, List[str]] = {}
        self._settings: Dict[str, SubscriberSettings] = {}
        self._lock = asyncio.Lock()

    async def set_watch_list(self, subscriber: str, addresses: Iterable[str]) -> List[str]:
        """
        Replace a subscriber's watch list.

        Invalid addresses are dropped and duplicates collapsed, keeping
        the submitted order.

        Returns:
            The accepted addresses (may be empty)
        """
        accepted = []
        for address in addresses:
            if not is_valid_address(address):
                logger.debug(f"Rejected watch address {address!r}")
                continue
            normalized = normalize_address(address)
            if normalized not in accepted:
                accepted.append(normalized)

        async with self._lock:
            self._watch_lists[subscriber] = list(accepted)
            self._settings.setdefault(subscriber, SubscriberSettings())

        logger.info(f"Subscriber {subscriber} now watching {len(accepted)} addresses")
        return accepted

    async def set_auto_snipe(self, subscriber: str, enabled: bool):
        async with self._lock:
            self._settings.setdefault(subscriber, SubscriberSettings()).auto_snipe = enabled
        logger.info(f"Subscriber {subscriber} auto-snipe {'on' if enabled else 'off'}")

    async def set_hide_zero_balances(self, subscriber: str, enabled: bool):
        async with self._lock:
            self._settings.setdefault(subscriber, SubscriberSettings()).hide_zero_balances = enabled

    async def get_settings(self, subscriber: str) -> SubscriberSettings:
        """Copy of the subscriber's settings (defaults if unknown)."""
        async with self._lock:
            current = self._settings.get(subscriber, SubscriberSettings())
            return SubscriberSettings(
                hide_zero_balances=current.hide_zero_balances,
                auto_snipe=current.auto_snipe,
            )

    async def get_watch_list(self, subscriber: str) -> List[str]:
        async with self._lock:
            return list(self._watch_lists.get(subscriber, []))

    async def snapshot_watch_lists(self) -> Dict[str, List[str]]:
        """Copy of all non-empty watch lists."""
        async with self._lock:
            return {
                subscriber: list(addresses)
                for subscriber, addresses in self._watch_lists.items()
                if addresses
            }

    async def auto_snipe_subscribers(self) -> List[str]:
        async with self._lock:
            return [s for s, settings in self._settings.items() if settings.auto_snipe]
