"""
In-memory storage used when no external backend is configured.

Records live in a dict keyed by id and are seeded from
``storage.seed`` at construction, as is the feature catalogue.  The
store honours the full adapter contract, including ``create``, which
makes it the backend of choice for local development and tests.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..core.config import BackendKind
from ..schemas.bookshop import Bookshop, BookshopCreate
from ..schemas.feature import Feature
from .base import RefreshCapability, StorageAdapter, sort_by_name
from .seed import SEED_BOOKSHOPS, SEED_FEATURES

logger = logging.getLogger(__name__)


class InMemoryStore(StorageAdapter):
    kind = BackendKind.MEMORY
    refresh_capability = RefreshCapability.ALWAYS_CURRENT

    def __init__(
        self,
        seed: Optional[Iterable[Dict[str, Any]]] = None,
        features: Optional[Iterable[str]] = None,
    ) -> None:
        self._records: Dict[int, Bookshop] = {}
        self._next_id = 1
        for row in SEED_BOOKSHOPS if seed is None else seed:
            self._insert(row)
        self._features: Dict[int, Feature] = {}
        for feature_id, name in enumerate(SEED_FEATURES if features is None else features, start=1):
            self._features[feature_id] = Feature(id=feature_id, name=name)
        logger.info(
            "In-memory store seeded with %d bookshops and %d features", len(self._records), len(self._features)
        )

    def _insert(self, row: Dict[str, Any]) -> Bookshop:
        data = dict(row)
        bookshop_id = data.pop("id", None) or self._next_id
        record = Bookshop(id=bookshop_id, **data)
        self._records[record.id] = record
        self._next_id = max(self._next_id, record.id + 1)
        return record

    async def list(self) -> List[Bookshop]:
        return sort_by_name(b for b in self._records.values() if b.live)

    async def get_by_id(self, bookshop_id: int) -> Optional[Bookshop]:
        record = self._records.get(bookshop_id)
        return record if record is not None and record.live else None

    async def list_features(self) -> List[Feature]:
        return sort_by_name(self._features.values())

    async def get_feature(self, feature_id: int) -> Optional[Feature]:
        return self._features.get(feature_id)

    async def create(self, draft: BookshopCreate) -> Bookshop:
        record = self._insert({**draft.model_dump(), "live": False})
        logger.info("Created bookshop '%s' (ID: %s) pending review", record.name, record.id)
        return record
