"""
The bookshop directory as seen by the HTTP layer.

``DirectoryService`` is the composition root: it picks the storage
backend once from ``Settings`` and wires the slug index, the county
enricher and the refresh controller around it.  Every public read goes
through here so that county enrichment, liveness and the slug fallback
rules are applied in one place.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..core.config import Settings
from ..core.errors import DirectoryError
from ..core.slugs import canonical_slug_map, matches
from ..core.states import same_state
from ..schemas.bookshop import Bookshop, BookshopCreate, BookshopFilters
from ..schemas.feature import Feature
from ..schemas.refresh import RefreshStatus
from ..storage import build_adapter
from ..storage.base import StorageAdapter, county_matches
from .county_service import CountyEnricher
from .refresh_service import RefreshController
from .slug_index import SlugIndex

logger = logging.getLogger(__name__)


class DirectoryService:
    def __init__(
        self,
        adapter: StorageAdapter,
        index: SlugIndex,
        enricher: CountyEnricher,
        refresh: RefreshController,
    ) -> None:
        self.adapter = adapter
        self.index = index
        self.enricher = enricher
        self.refresh = refresh

    @classmethod
    def from_settings(cls, settings: Settings, adapter: Optional[StorageAdapter] = None) -> "DirectoryService":
        """Build the service for the configured backend.

        ``adapter`` overrides backend selection; tests pass an
        ``InMemoryStore`` or a fake here.
        """
        adapter = adapter or build_adapter(settings)
        index = SlugIndex(adapter, build_timeout=settings.initial_load_timeout)
        refresh = RefreshController(adapter, index, settings)
        logger.info("Bookshop directory using %s storage", adapter.kind.value)
        return cls(adapter, index, CountyEnricher(), refresh)

    @property
    def backend(self) -> str:
        return self.adapter.kind.value

    async def _before_read(self) -> None:
        await self.refresh.refresh_if_due()

    async def _ensure_index(self) -> None:
        try:
            await self.index.ensure_ready()
        except (DirectoryError, asyncio.TimeoutError) as exc:
            logger.warning("Slug index unavailable (%r); using direct lookups", exc)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list(self) -> List[Bookshop]:
        await self._before_read()
        return self.enricher.enrich_many(await self.adapter.list())

    async def get_by_id(self, bookshop_id: int) -> Optional[Bookshop]:
        await self._before_read()
        record = await self.adapter.get_by_id(bookshop_id)
        if record is None or not record.live:
            return None
        return self.enricher.enrich(record)

    async def get_by_slug(self, slug: str) -> Optional[Bookshop]:
        """Resolve a slug through the index, falling back to the store.

        An index hit is re-read by id and only trusted if the record is
        still live and its current name still produces ``slug``.  On a
        miss or a stale hit the store's own slug lookup runs; what it
        finds is re-read by id, so both paths return the full record, and
        remembered in the index.
        """
        await self._before_read()
        if not slug:
            return None
        await self._ensure_index()

        bookshop_id = self.index.resolve(slug)
        if bookshop_id is not None:
            record = await self.adapter.get_by_id(bookshop_id)
            if record is not None and record.live and matches(slug, record):
                return self.enricher.enrich(record)
            logger.info("Slug index entry '%s' -> %s is stale; looking up directly", slug, bookshop_id)
        else:
            logger.debug("Slug '%s' not in index; looking up directly", slug)

        found = await self.adapter.get_by_slug(slug)
        # Scans may return a trimmed projection; serve the same detail record an index hit would.
        record = await self.adapter.get_by_id(found.id) if found is not None and found.live else None
        if record is None or not record.live or not matches(slug, record):
            logger.info("No bookshop found for slug '%s'", slug)
            return None
        self.index.remember(slug, record.id)
        return self.enricher.enrich(record)

    async def filter(self, criteria: BookshopFilters) -> List[Bookshop]:
        await self._before_read()
        # County is matched after enrichment so derived counties count.
        records = self.enricher.enrich_many(await self.adapter.filter(criteria.without_county()))
        if criteria.county:
            records = [r for r in records if county_matches(r, criteria.county)]
        return records

    async def counties(self, state: Optional[str] = None) -> List[str]:
        records = await self.list()
        names = {
            r.county.strip()
            for r in records
            if r.county and r.county.strip() and (not state or same_state(r.state, state))
        }
        return sorted(names, key=str.lower)

    async def canonical_slugs(self) -> Dict[str, int]:
        """Slug → id for every live bookshop, highest id first on collisions."""
        return canonical_slug_map(await self.list())

    async def list_features(self) -> List[Feature]:
        return await self.adapter.list_features()

    async def get_feature(self, feature_id: int) -> Optional[Feature]:
        return await self.adapter.get_feature(feature_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create(self, draft: BookshopCreate) -> Bookshop:
        return await self.adapter.create(draft)

    # ------------------------------------------------------------------
    # Refresh administration
    # ------------------------------------------------------------------
    def status(self) -> RefreshStatus:
        return self.refresh.status()

    async def manual_refresh(self) -> bool:
        return await self.refresh.manual_refresh()

    def set_enabled(self, enabled: bool) -> None:
        self.refresh.set_enabled(enabled)

    async def warm_up(self) -> None:
        """Build the slug index ahead of the first request."""
        await self._ensure_index()
