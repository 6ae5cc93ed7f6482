"""
Pydantic model for feature tags.

A feature is a label such as "Used Books" or "Café".  Bookshops refer to
features by id through ``Bookshop.feature_ids``; the catalogue served
from ``/features`` gives those ids their names.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Feature(BaseModel):
    id: int
    name: str = Field(..., examples=["Used Books"])
    slug: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[Union[List[str], str]] = None
    icon: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }

    @field_validator("name", mode="after")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("feature name must not be blank")
        return value
