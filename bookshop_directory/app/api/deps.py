"""
Shared FastAPI dependencies.

The ``DirectoryService`` is created once by ``create_app`` and stored on
``app.state``; handlers receive it through ``get_directory`` so tests
can swap it with ``app.dependency_overrides``.
"""

from fastapi import Request

from ..services.directory_service import DirectoryService


def get_directory(request: Request) -> DirectoryService:
    return request.app.state.directory
