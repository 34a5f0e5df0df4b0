"""In-memory, whole-table cache in front of a :class:`TableLoader`."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pricebook.models import Dataset

from .loader import TableLoader

logger = logging.getLogger(__name__)


class DatasetCache:
    """Hold one loaded :class:`Dataset` until explicitly invalidated.

    The cache has two states, empty and populated. A miss starts exactly one
    load; callers arriving while it is in flight await the same task and
    share its outcome. A failed load leaves the cache empty so the next
    :meth:`get` retries.

    Example:
        >>> import asyncio
        >>> from pricebook.data import DatasetCache, TableLoader
        >>> from pricebook.models import Dataset
        >>> class _Loader(TableLoader):
        ...     def load(self):
        ...         return Dataset(rows=(), symbols=())
        >>> cache = DatasetCache(_Loader())
        >>> asyncio.run(cache.get()).is_empty
        True
        >>> cache.is_populated
        True
    """

    def __init__(self, loader: TableLoader) -> None:
        self.loader = loader
        self._dataset: Optional[Dataset] = None
        self._pending: Optional[asyncio.Task[Dataset]] = None
        self._load_count = 0
        self._generation = 0

    @property
    def is_populated(self) -> bool:
        return self._dataset is not None

    @property
    def load_count(self) -> int:
        """Number of loads started since construction."""

        return self._load_count

    async def get(self) -> Dataset:
        """Return the cached dataset, loading it on the first call.

        Raises:
            SourceUnavailable: Propagated from the loader.
            ParseFailure: Propagated from the loader.
        """

        if self._dataset is not None:
            return self._dataset

        if self._pending is None:
            self._load_count += 1
            logger.debug("Cache miss, starting load #%s via %r", self._load_count, self.loader)
            self._pending = asyncio.ensure_future(self._load(self._generation))
        else:
            logger.debug("Cache miss, joining in-flight load")

        # shield() keeps one cancelled waiter from cancelling the shared load.
        return await asyncio.shield(self._pending)

    async def _load(self, generation: int) -> Dataset:
        try:
            dataset = await asyncio.to_thread(self.loader.load)
        except Exception as exc:
            logger.error("Price table load failed via %r: %s", self.loader, exc)
            raise
        finally:
            if generation == self._generation:
                self._pending = None

        # A load detached by invalidate() still answers its own waiters.
        if generation == self._generation:
            self._dataset = dataset
        return dataset

    def invalidate(self) -> None:
        """Drop the cached dataset; a no-op when already empty.

        A load still in flight is detached: its waiters receive its result
        but it is not stored, and the next :meth:`get` starts a fresh load.
        """

        self._generation += 1
        self._pending = None
        if self._dataset is not None:
            logger.info("Invalidating cached price table (%s rows)", len(self._dataset))
        self._dataset = None


__all__ = ["DatasetCache"]
