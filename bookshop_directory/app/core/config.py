"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with the in-memory store when nothing is configured.
Tests and embedding code can construct ``Settings(...)`` explicitly and
pass it to ``create_app``; nothing below the composition root reads the
environment on its own.

Intervals for the refresh controller are expressed in milliseconds to
match the values operators already use for ``MIN_REFRESH_INTERVAL`` and
friends; timeouts are in seconds.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

# PostgREST answers at most this many rows per request by default.  A
# larger page would come back short and end pagination early.
MAX_PAGE_SIZE = 1000


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def _default_initial_delay() -> int:
    # Five minutes in production, one minute elsewhere.
    if os.getenv("ENVIRONMENT", "development").lower() == "production":
        return 5 * 60 * 1000
    return 60 * 1000


class BackendKind(str, Enum):
    """Which storage backend serves the directory."""

    PRIMARY = "primary"
    SPREADSHEET = "spreadsheet"
    MEMORY = "memory"


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Bookshop Directory API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Primary store: a PostgREST endpoint (Supabase).  Both the URL and
    # the service role key must be present for it to be selected.
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_service_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    supabase_table: str = os.getenv("SUPABASE_TABLE", "bookstores")
    supabase_features_table: str = os.getenv("SUPABASE_FEATURES_TABLE", "features")

    # Forces the spreadsheet store even when the primary store is configured.
    use_google_sheets: bool = _env_flag("USE_GOOGLE_SHEETS")

    # Spreadsheet store: a Google Sheet read through a service account.
    # ``google_credentials`` holds the service account JSON document.
    google_sheets_id: str = os.getenv("GOOGLE_SHEETS_ID", "")
    google_credentials: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS", "")
    google_sheets_tab: str = os.getenv("GOOGLE_SHEETS_TAB", "Bookstores")
    google_sheets_features_tab: str = os.getenv("GOOGLE_SHEETS_FEATURES_TAB", "Features")

    # Pagination around the backend's per-request row cap.  Values above
    # MAX_PAGE_SIZE are clamped to it.
    page_size: int = int(os.getenv("PAGE_SIZE", "1000"))
    max_pages: int = int(os.getenv("MAX_PAGES", "50"))

    # Refresh controller (milliseconds).
    min_refresh_interval_ms: int = int(os.getenv("MIN_REFRESH_INTERVAL", str(15 * 60 * 1000)))
    max_refresh_interval_ms: int = int(os.getenv("MAX_REFRESH_INTERVAL", str(24 * 60 * 60 * 1000)))
    initial_delay_ms: int = field(
        default_factory=lambda: int(os.getenv("INITIAL_DELAY", str(_default_initial_delay())))
    )
    disable_auto_refresh: bool = _env_flag("DISABLE_AUTO_REFRESH")

    # Timeouts (seconds).  ``initial_load_timeout`` bounds the first
    # spreadsheet load and every slug index build.
    initial_load_timeout: float = float(os.getenv("INITIAL_LOAD_TIMEOUT", "30"))
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "15"))

    # Shared secret for the administrative refresh endpoints.  When empty
    # the endpoints refuse every request.
    refresh_api_key: str = os.getenv("REFRESH_API_KEY", "")

    def __post_init__(self) -> None:
        if self.page_size > MAX_PAGE_SIZE:
            logger.warning("PAGE_SIZE %d exceeds the server row cap; using %d", self.page_size, MAX_PAGE_SIZE)
            self.page_size = MAX_PAGE_SIZE

    @property
    def primary_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def spreadsheet_configured(self) -> bool:
        return bool(self.google_sheets_id and self.google_credentials)


def select_backend(settings: Settings) -> BackendKind:
    """Choose the storage backend by precedence.

    Primary store when configured (unless ``USE_GOOGLE_SHEETS`` forces the
    spreadsheet), then the spreadsheet when its credentials are present,
    otherwise the in-memory store.  Called once by the composition root.
    """
    if settings.primary_configured and not settings.use_google_sheets:
        return BackendKind.PRIMARY
    if settings.spreadsheet_configured:
        return BackendKind.SPREADSHEET
    return BackendKind.MEMORY


# Instantiate settings once so the application entry point can import it
# without repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
