"""
In-process slug → bookshop id index.

The index is built by scanning the active store once.  Several bookshops
may share a name and therefore a slug; the record with the highest id
owns the slug.  ``canonical_slug_map`` applies that rule, and the sitemap
feed uses the same function, so both always agree on which record a
shared slug points to.

The map is only ever replaced as a whole by ``build`` (normally on
refresh) and patched by ``remember`` after a successful direct lookup.
It never expires on its own.
"""

import asyncio
import logging
from collections import Counter
from typing import Dict, Optional

from ..core.inflight import SingleFlight
from ..core.slugs import canonical_slug_map, slugify
from ..storage.base import StorageAdapter

logger = logging.getLogger(__name__)


class SlugIndex:
    def __init__(self, adapter: StorageAdapter, build_timeout: Optional[float] = None) -> None:
        self.adapter = adapter
        self.build_timeout = build_timeout
        self._slugs: Dict[str, int] = {}
        self._ready = False
        self._flight = SingleFlight()

    @property
    def ready(self) -> bool:
        return self._ready

    def __len__(self) -> int:
        return len(self._slugs)

    async def build(self) -> int:
        """Rebuild the whole index from ``adapter.list()``.

        Returns the number of slugs indexed.  The new map replaces the old
        one in a single assignment; readers never see a half-built index.
        """
        records = await self.adapter.list()
        mapping = canonical_slug_map(records)

        counts = Counter(slugify(r.name) for r in records)
        for slug, count in counts.items():
            if slug and count > 1:
                logger.info("Slug '%s' shared by %d bookshops; id %s is canonical", slug, count, mapping[slug])
        empty = counts.get("", 0)
        if empty:
            logger.warning("%d bookshops have names that produce an empty slug", empty)

        self._slugs = mapping
        self._ready = True
        logger.info("Slug index built with %d entries from %d bookshops", len(mapping), len(records))
        return len(mapping)

    async def _bounded_build(self) -> int:
        if self.build_timeout is None:
            return await self.build()
        return await asyncio.wait_for(self.build(), timeout=self.build_timeout)

    async def ensure_ready(self) -> None:
        """Build the index once; concurrent callers share a single build.

        A failed or timed-out build propagates to every waiting caller and
        leaves the index not ready, so the next call tries again.
        """
        if self._ready:
            return
        await self._flight.run(self._bounded_build)

    def resolve(self, slug: str) -> Optional[int]:
        return self._slugs.get(slug)

    def remember(self, slug: str, bookshop_id: int) -> None:
        """Record a slug found by a direct store lookup.

        The direct lookup already applied the highest-id rule against the
        current store, so its answer replaces any existing entry.
        """
        if not slug:
            return
        self._slugs[slug] = bookshop_id
        logger.debug("Remembered slug '%s' -> %s", slug, bookshop_id)
