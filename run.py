"""Entry point for the Bookshop Directory API.

Starts the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration is read from environment variables; see
``bookshop_directory/app/core/config.py`` for the supported names.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from bookshop_directory.app.main import app


async def main() -> None:
    """Serve the API.

    Host and port are read from environment variables `HOST` and
    `PORT`. Defaults are `0.0.0.0` and `8000`.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
