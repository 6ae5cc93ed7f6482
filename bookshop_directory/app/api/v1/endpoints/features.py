"""
Feature tag endpoints for API v1.

Feature ids appear in ``Bookshop.feature_ids`` and in the ``features``
filter; these routes give them names.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from bookshop_directory.app.api.deps import get_directory
from bookshop_directory.app.schemas.feature import Feature
from bookshop_directory.app.services.directory_service import DirectoryService

router = APIRouter()


@router.get("/", response_model=List[Feature])
async def list_features(directory: DirectoryService = Depends(get_directory)) -> List[Feature]:
    """All feature tags, sorted by name."""
    return await directory.list_features()


@router.get("/{feature_id}", response_model=Feature)
async def get_feature(feature_id: int, directory: DirectoryService = Depends(get_directory)) -> Feature:
    feature = await directory.get_feature(feature_id)
    if feature is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feature not found")
    return feature
