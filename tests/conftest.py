"""
Shared pytest fixtures for the bookshop directory tests.

Settings are always built explicitly so that the environment of the
machine running the tests cannot change which backend is selected or
how the refresh controller behaves.
"""

from typing import Any, Callable, Dict, List

import pytest

from bookshop_directory.app.core.config import Settings
from bookshop_directory.app.schemas.bookshop import Bookshop
from tests._support.fakes import FakeClock

BASE_SETTINGS: Dict[str, Any] = dict(
    environment="test",
    log_level="WARNING",
    log_file="",
    supabase_url="",
    supabase_service_key="",
    supabase_table="bookstores",
    supabase_features_table="features",
    use_google_sheets=False,
    google_sheets_id="",
    google_credentials="",
    google_sheets_tab="Bookstores",
    google_sheets_features_tab="Features",
    page_size=1000,
    max_pages=50,
    min_refresh_interval_ms=15 * 60 * 1000,
    max_refresh_interval_ms=24 * 60 * 60 * 1000,
    initial_delay_ms=60 * 1000,
    disable_auto_refresh=False,
    initial_load_timeout=5.0,
    request_timeout=5.0,
    refresh_api_key="",
)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values = dict(BASE_SETTINGS)
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fables_records() -> List[Bookshop]:
    return [
        Bookshop(id=42, name="Fables Books", city="Goshen", state="IN"),
        Bookshop(id=108, name="Fables Books", city="Dallas", state="TX"),
        Bookshop(id=7, name="Powell's Books", city="Portland", state="OR"),
    ]
