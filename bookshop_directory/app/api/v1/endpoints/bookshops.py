"""
Bookshop endpoints for API v1.

Read routes never fail because the backend is down; they return empty
lists or 404 instead.  Only ``POST /bookshops/`` reports a backend
failure (503), since a lost submission must not look like a success.

Route order matters: the fixed paths (``/filter``, ``/counties``,
``/canonical-slugs``, ``/slug/{slug}``) are declared before
``/{bookshop_id}``.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bookshop_directory.app.api.deps import get_directory
from bookshop_directory.app.core.errors import BackendUnavailable
from bookshop_directory.app.schemas.bookshop import Bookshop, BookshopCreate, BookshopFilters
from bookshop_directory.app.services.directory_service import DirectoryService

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_features(features: Optional[str]) -> Optional[List[int]]:
    if not features:
        return None
    try:
        return [int(part) for part in features.split(",") if part.strip()]
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="features must be a comma-separated list of integers",
        ) from e


@router.get("/", response_model=List[Bookshop])
async def list_bookshops(directory: DirectoryService = Depends(get_directory)) -> List[Bookshop]:
    """All live bookshops, sorted by name."""
    return await directory.list()


@router.get("/filter", response_model=List[Bookshop])
async def filter_bookshops(
    state: Optional[str] = Query(None, description="Two-letter code or full state name"),
    city: Optional[str] = Query(None),
    county: Optional[str] = Query(None, description="With or without the 'County' suffix"),
    features: Optional[str] = Query(None, description="Comma-separated feature ids, e.g. 1,2"),
    directory: DirectoryService = Depends(get_directory),
) -> List[Bookshop]:
    """Filter live bookshops.

    - **state** matches ``CA`` and ``California`` alike.
    - **city** is a case-insensitive exact match.
    - **county** tolerates a trailing "County" and partial names.
    - **features** matches bookshops that have at least one of the ids.
    """
    criteria = BookshopFilters(state=state, city=city, county=county, feature_ids=_parse_features(features))
    return await directory.filter(criteria)


@router.get("/counties", response_model=List[str])
async def list_counties(
    state: Optional[str] = Query(None),
    directory: DirectoryService = Depends(get_directory),
) -> List[str]:
    return await directory.counties(state)


@router.get("/canonical-slugs", response_model=Dict[str, int])
async def canonical_slugs(directory: DirectoryService = Depends(get_directory)) -> Dict[str, int]:
    """Slug to bookshop id for every live bookshop, as used by the sitemap."""
    return await directory.canonical_slugs()


@router.get("/slug/{slug}", response_model=Bookshop)
async def get_bookshop_by_slug(slug: str, directory: DirectoryService = Depends(get_directory)) -> Bookshop:
    bookshop = await directory.get_by_slug(slug)
    if bookshop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bookshop not found")
    return bookshop


@router.get("/{bookshop_id}", response_model=Bookshop)
async def get_bookshop(bookshop_id: int, directory: DirectoryService = Depends(get_directory)) -> Bookshop:
    bookshop = await directory.get_by_id(bookshop_id)
    if bookshop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bookshop not found")
    return bookshop


@router.post("/", response_model=Bookshop, status_code=status.HTTP_201_CREATED)
async def submit_bookshop(
    draft: BookshopCreate,
    directory: DirectoryService = Depends(get_directory),
) -> Bookshop:
    """Submit a new bookshop.

    The record is stored as not live and stays hidden until an
    administrator publishes it.
    """
    try:
        return await directory.create(draft)
    except BackendUnavailable as e:
        logger.error("Bookshop submission '%s' failed: %s", draft.name, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bookshop storage is unavailable, please try again later",
        ) from e
