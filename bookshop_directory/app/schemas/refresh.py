"""
Pydantic models for the data refresh controller.

``RefreshStatus`` is the read-only snapshot returned by the admin status
endpoint.  ``RefreshOutcome`` records why the last refresh attempt did
or did not reload the backend.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel


class RefreshOutcome(str, Enum):
    REFRESHED = "refreshed"
    DISABLED = "disabled"
    ALWAYS_CURRENT = "always_current"
    THROTTLED = "throttled"
    FAILED = "failed"


class RefreshStatus(BaseModel):
    enabled: bool
    backend: str
    refresh_capable: bool
    last_refresh_at: Optional[str] = None
    time_since_last_refresh_ms: Optional[int] = None
    failed_attempts: int = 0
    last_outcome: Optional[RefreshOutcome] = None
    configured_intervals: Dict[str, int]


class RefreshConfigUpdate(BaseModel):
    """Body of ``POST /admin/refresh/config``."""

    enabled: bool


class RefreshResponse(BaseModel):
    success: bool
    message: str
    status: Optional[RefreshStatus] = None
