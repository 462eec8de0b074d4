"""
Cursor Store

Per (subscriber, address) high-water marks that turn repeated snapshot
queries into a stream of records that are new since the last look.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import ActivityRecord

logger = logging.getLogger(__name__)

CursorKey = Tuple[str, str]  # (subscriber, address)


def newer_than(records: Sequence[ActivityRecord], cursor: int) -> List[ActivityRecord]:
    """
    Return the leading run of records with timestamp strictly above cursor.

    Records must be newest-first; scanning stops at the first record at or
    below the cursor.
    """
    prefix = []
    for record in records:
        if record.timestamp <= cursor:
            break
        prefix.append(record)
    return prefix


class CursorStore:
    """
    Last-seen timestamps for watched addresses.

    The lock is only held for dictionary access, never across a fetch.
    """

    def __init__(self):
        self._cursors: Dict[CursorKey, int] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._cursors)

    async def get(self, subscriber: str, address: str) -> Optional[int]:
        async with self._lock:
            return self._cursors.get((subscriber, address))

    async def advance(
        self,
        subscriber: str,
        address: str,
        fresh_records: Sequence[ActivityRecord],
    ) -> Tuple[List[ActivityRecord], Optional[int]]:
        """
        Diff a freshly fetched, newest-first list against the stored cursor.

        The first call for a pair only seeds the cursor with the newest
        timestamp and reports nothing; history that existed before the
        address was watched is never announced.

        Args:
            subscriber: Subscriber id
            address: Watched address
            fresh_records: Records fetched this cycle, newest-first

        Returns:
            Tuple of (new records oldest-first, cursor after the call)
        """
        key = (subscriber, address)

        async with self._lock:
            cursor = self._cursors.get(key)

            if not fresh_records:
                return [], cursor

            if cursor is None:
                self._cursors[key] = fresh_records[0].timestamp
                logger.debug(f"Seeded cursor for {address[:10]}... at {fresh_records[0].timestamp}")
                return [], self._cursors[key]

            prefix = newer_than(fresh_records, cursor)
            if not prefix:
                return [], cursor

            new_cursor = max(cursor, max(r.timestamp for r in prefix))
            self._cursors[key] = new_cursor

        prefix.reverse()
        return prefix, new_cursor

    async def prune(self, watched: Dict[str, Iterable[str]]) -> int:
        """
        Drop cursors for pairs that are no longer watched.

        Args:
            watched: Current subscriber -> addresses mapping

        Returns:
            Number of cursors removed
        """
        keep = {
            (subscriber, address)
            for subscriber, addresses in watched.items()
            for address in addresses
        }
        async with self._lock:
            stale = [key for key in self._cursors if key not in keep]
            for key in stale:
                del self._cursors[key]

        if stale:
            logger.debug(f"Pruned {len(stale)} stale cursors")
        return len(stale)
