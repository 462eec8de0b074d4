"""
Async API Client Base

Session lifecycle, concurrency limit, retries and rate-limit backoff shared
by the provider clients.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import config

logger = logging.getLogger(__name__)


class AsyncAPIClient:
    """
    Base class for async JSON-over-HTTP clients.

    Handles:
    - Lazy aiohttp session creation (usable with `async with`)
    - Concurrency control with a semaphore
    - Rate limiting (HTTP 429) with exponential backoff
    - Retries on connection errors

    Failures are logged and reported as None; callers treat None as
    "skip this unit of work for now".
    """

    name = "api"

    def __init__(
        self,
        max_concurrent: int = None,
        request_delay: float = None,
        max_retries: int = None,
        timeout: float = None,
    ):
        self.max_concurrent = max_concurrent or config.max_concurrent_requests
        self.request_delay = request_delay if request_delay is not None else config.request_delay_sec
        self.max_retries = max_retries if max_retries is not None else config.max_retries
        self.timeout = timeout or config.request_timeout_sec
        self._session: Optional[aiohttp.ClientSession] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Create session and semaphore if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._semaphore = asyncio.Semaphore(self.max_concurrent)

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] = None,
        json: Any = None,
        headers: Dict[str, str] = None,
    ) -> Optional[Any]:
        """
        Make a request with retry logic.

        Args:
            method: "GET" or "POST"
            url: Endpoint URL
            params: Query string parameters
            json: JSON body
            headers: Extra headers

        Returns:
            Decoded JSON response or None on failure
        """
        await self._ensure_session()

        for attempt in range(self.max_retries + 1):
            try:
                async with self._semaphore:
                    async with self._session.request(
                        method,
                        url,
                        params=params,
                        json=json,
                        headers=headers,
                    ) as response:
                        if response.status == 429:
                            backoff = config.rate_limit_backoff_sec * (2 ** attempt)
                            logger.warning(f"[{self.name}] Rate limited, backing off {backoff}s")
                            await asyncio.sleep(backoff)
                            continue

                        if response.status != 200:
                            logger.error(f"[{self.name}] API error {response.status}: {await response.text()}")
                            return None

                        result = await response.json(content_type=None)

                    # Delay after the request completes but still inside the semaphore
                    if self.request_delay:
                        await asyncio.sleep(self.request_delay)

                    return result

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"[{self.name}] Request error (attempt {attempt + 1}): {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(config.rate_limit_backoff_sec)
                continue
            except ValueError as e:
                # Body was not JSON
                logger.error(f"[{self.name}] Invalid JSON response: {e}")
                return None

        return None
