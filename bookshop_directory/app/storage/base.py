"""
Common contract for the storage backends.

A ``StorageAdapter`` exposes the same asynchronous read/write surface
over one physical data source, including the feature tag catalogue
that ``Bookshop.feature_ids`` refers to.  Reads only ever return live
records and degrade to empty results when the backend is unavailable;
``create`` raises instead, because a lost write cannot be hidden from
its caller.

Each adapter declares whether it keeps a cached view that can be
reloaded (``RefreshCapability.REFRESH_CAPABLE``) or always reads the
current backend state (``RefreshCapability.ALWAYS_CURRENT``).  The
refresh controller branches on that declaration.

The filter predicates at the bottom of this module are shared by all
adapters so that ``filter`` behaves identically whichever backend is
active.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional, TypeVar, Union

from ..core.config import BackendKind
from ..core.slugs import pick_canonical
from ..core.states import same_state
from ..schemas.bookshop import Bookshop, BookshopCreate, BookshopFilters
from ..schemas.feature import Feature

T = TypeVar("T", bound=Union[Bookshop, Feature])


class RefreshCapability(str, Enum):
    REFRESH_CAPABLE = "refresh_capable"
    ALWAYS_CURRENT = "always_current"


class StorageAdapter(ABC):
    """Uniform read/write surface over one backing store."""

    kind: BackendKind
    refresh_capability: RefreshCapability = RefreshCapability.ALWAYS_CURRENT

    @property
    def refresh_capable(self) -> bool:
        return self.refresh_capability is RefreshCapability.REFRESH_CAPABLE

    @abstractmethod
    async def list(self) -> List[Bookshop]:
        """All live records, name-ascending."""

    @abstractmethod
    async def get_by_id(self, bookshop_id: int) -> Optional[Bookshop]:
        """The live record with this id, or ``None``."""

    @abstractmethod
    async def create(self, draft: BookshopCreate) -> Bookshop:
        """Persist a draft as a not-live record and return it with its id."""

    async def get_by_slug(self, slug: str) -> Optional[Bookshop]:
        """Find a live record by its name-derived slug.

        The default implementation scans ``list()``; adapters with an
        indexed slug column try that first and then call this.
        """
        return pick_canonical(await self.list(), slug)

    async def filter(self, criteria: BookshopFilters) -> List[Bookshop]:
        return [b for b in await self.list() if matches_filters(b, criteria)]

    async def list_features(self) -> List[Feature]:
        """The feature tag catalogue, name-ascending.

        Stores without a catalogue return an empty list.
        """
        return []

    async def get_feature(self, feature_id: int) -> Optional[Feature]:
        for feature in await self.list_features():
            if feature.id == feature_id:
                return feature
        return None

    async def reload(self) -> None:
        """Re-read the backend into the cached view.

        Always-current adapters have nothing to reload.
        """


def sort_by_name(records: Iterable[T]) -> List[T]:
    return sorted(records, key=lambda b: (b.name.lower(), b.id))


# ---------------------------------------------------------------------------
# Filter predicates
# ---------------------------------------------------------------------------

def state_matches(record: Bookshop, state: Optional[str]) -> bool:
    """Two-letter code and full name are equivalent, case-insensitively."""
    if not state:
        return True
    return same_state(record.state, state)


def city_matches(record: Bookshop, city: Optional[str]) -> bool:
    if not city:
        return True
    return (record.city or "").strip().lower() == city.strip().lower()


def _normalise_county(county: str) -> str:
    value = county.strip().lower()
    if value.endswith(" county"):
        value = value[: -len(" county")].rstrip()
    return value


def county_matches(record: Bookshop, county: Optional[str]) -> bool:
    """Tolerates a trailing "County" and substring containment either way."""
    if not county:
        return True
    if not record.county:
        return False
    wanted = _normalise_county(county)
    actual = _normalise_county(record.county)
    if not wanted or not actual:
        return False
    return wanted == actual or wanted in actual or actual in wanted


def features_match(record: Bookshop, feature_ids: Optional[List[int]]) -> bool:
    """True when the record shares at least one feature with the filter."""
    if not feature_ids:
        return True
    return not set(feature_ids).isdisjoint(record.feature_ids or [])


def matches_filters(record: Bookshop, criteria: BookshopFilters) -> bool:
    return (
        record.live
        and state_matches(record, criteria.state)
        and city_matches(record, criteria.city)
        and county_matches(record, criteria.county)
        and features_match(record, criteria.feature_ids)
    )
