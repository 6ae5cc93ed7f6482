"""
Main entrypoint for the Bookshop Directory API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds
and configures the app, which is then instantiated at module
import time as ``app``.  Importing the app here makes it easy to
run with uvicorn or another ASGI server, e.g.::

    uvicorn bookshop_directory.app.main:app --reload

Settings are read from the environment once, here; the storage backend
is chosen from them exactly once and the resulting ``DirectoryService``
lives on ``app.state`` for the lifetime of the process.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.logging_config import setup_logging
from .services.directory_service import DirectoryService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    directory: Optional[DirectoryService] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Explicit configuration.  Defaults to the settings read from the
        environment at import time.
    directory : Optional[DirectoryService]
        Pre-built service, mainly for tests.  Built from ``settings``
        when omitted.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the backend
    # selection below is logged.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings
    app.state.directory = directory or DirectoryService.from_settings(settings)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "backend": app.state.directory.backend}

    # Build the slug index before the first request arrives.
    @app.on_event("startup")
    async def startup_event() -> None:
        await app.state.directory.warm_up()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
