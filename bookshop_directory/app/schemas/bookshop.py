"""
Pydantic models for bookshop data.

``Bookshop`` is the record every store produces and every read
operation returns.  ``BookshopCreate`` is the draft accepted by
``create``; drafts always land in the store as not live so that an
administrator can review them first.  ``BookshopFilters`` carries the
criteria accepted by ``filter``.

Provider enrichment fields (``google_*`` and friends) are passed through
untouched; the directory never interprets them.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Bookshop(BaseModel):
    """A bookshop as returned by the storage layer."""

    id: int
    name: str = Field(..., examples=["Powell's Books"])
    street: str = ""
    city: str = Field("", examples=["Portland"])
    state: str = Field("", examples=["OR"])
    zip: str = ""
    county: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    hours: Optional[Union[Dict[str, Any], str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    feature_ids: List[int] = Field(default_factory=list)
    live: bool = True
    # Slug column persisted by some stores.  Only ever used as a lookup
    # hint; the slug derived from ``name`` is authoritative.
    slug: Optional[str] = None

    google_place_id: Optional[str] = None
    google_rating: Optional[Union[float, str]] = None
    google_review_count: Optional[int] = None
    google_description: Optional[str] = None
    google_photos: Optional[List[Any]] = None
    google_maps_url: Optional[str] = None
    formatted_phone: Optional[str] = None
    business_status: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }

    @field_validator("feature_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("live", mode="before")
    @classmethod
    def _missing_live_is_live(cls, value: Any) -> Any:
        # Only an explicit false hides a record.
        return True if value is None else value

    @field_validator("street", "city", "state", "zip", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class BookshopCreate(BaseModel):
    """Draft submitted for a new bookshop."""

    name: str = Field(..., min_length=2, max_length=200, examples=["Fables Books"])
    street: str = Field(..., min_length=2, max_length=300, examples=["215 W 5th St"])
    city: str = Field(..., min_length=2, max_length=100, examples=["Goshen"])
    state: str = Field(..., min_length=2, max_length=50, examples=["IN"])
    zip: str = Field(..., min_length=5, max_length=10, examples=["46526"])
    county: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=20)
    hours: Optional[Dict[str, str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    feature_ids: List[int] = Field(default_factory=list)

    model_config = {
        "str_strip_whitespace": True,
    }

    @field_validator("website", "phone", "county", mode="after")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class BookshopFilters(BaseModel):
    """Criteria for ``filter``.  Unset fields do not constrain the result."""

    state: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    feature_ids: Optional[List[int]] = None

    def without_county(self) -> "BookshopFilters":
        return self.model_copy(update={"county": None})
