"""
Per-client cache of currency network decimals.

Decimals never change for a deployed network, so a fetched value is kept for
the lifetime of the owning client. Concurrent lookups of the same uncached
network share one in-flight request.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict

from ..engine.exceptions import DecimalsUnavailable
from ..schemas.bases import DecimalsObject

logger = logging.getLogger(__name__)

DecimalsFetcher = Callable[[str], Awaitable[DecimalsObject]]


class DecimalsCache:
    """
    Memoized, single-flight decimals lookup.

    A failed fetch is not cached: every caller waiting on it receives
    ``DecimalsUnavailable`` and the next call issues a fresh request.
    Cancelling one waiter does not cancel the shared fetch; it is cancelled
    only when every waiter has gone.

    Example:
        cache = DecimalsCache(relay.get_network_decimals)
        decimals = await cache.get("0xNetwork")
    """

    def __init__(self, fetcher: DecimalsFetcher) -> None:
        """
        Args:
            fetcher: Coroutine function returning the decimals of a network,
                typically ``RelayProvider.get_network_decimals``.
        """
        self._fetcher = fetcher
        self._cache: Dict[str, DecimalsObject] = {}
        self._in_flight: Dict[str, "asyncio.Task[DecimalsObject]"] = {}
        self._waiters: Dict["asyncio.Task[DecimalsObject]", int] = {}

    async def get(self, network_address: str) -> DecimalsObject:
        """
        Return the decimals of ``network_address``.

        Raises:
            DecimalsUnavailable: If the fetch fails. The error carries no
                stage; the pipeline running the lookup tags it.
        """
        key = network_address.lower()
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, network_address))
            self._in_flight[key] = task

        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # the last waiter leaving takes the request with it
            if self._waiters[task] == 1 and not task.done():
                task.cancel()
            raise
        except DecimalsUnavailable as e:
            # one error per waiter, so each pipeline tags its own stage
            raise DecimalsUnavailable(e.message, cause=e.cause) from e.cause
        finally:
            self._waiters[task] -= 1
            if not self._waiters[task]:
                del self._waiters[task]

    def cached(self, network_address: str) -> bool:
        return network_address.lower() in self._cache

    async def _fetch(self, key: str, network_address: str) -> DecimalsObject:
        try:
            logger.debug(f"fetching decimals of {network_address}")
            decimals = await self._fetcher(network_address)
        except Exception as e:
            raise DecimalsUnavailable(
                f"error while fetching decimals of {network_address}: {e}",
                cause=e,
            ) from e
        else:
            self._cache[key] = decimals
            return decimals
        finally:
            self._in_flight.pop(key, None)
