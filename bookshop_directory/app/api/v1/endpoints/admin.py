"""
Administrative endpoints for the data refresh controller.

Every route requires the ``X-Refresh-API-Key`` header (see
``core.security``).
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from bookshop_directory.app.api.deps import get_directory
from bookshop_directory.app.core.security import require_refresh_key
from bookshop_directory.app.schemas.refresh import (
    RefreshConfigUpdate,
    RefreshOutcome,
    RefreshResponse,
    RefreshStatus,
)
from bookshop_directory.app.services.directory_service import DirectoryService

router = APIRouter(dependencies=[Depends(require_refresh_key)])

_SKIP_MESSAGES = {
    RefreshOutcome.DISABLED: "Refresh skipped: automatic refresh is disabled",
    RefreshOutcome.ALWAYS_CURRENT: "Refresh skipped: the active backend is always current",
    RefreshOutcome.THROTTLED: "Refresh skipped: the minimum refresh interval has not elapsed",
    RefreshOutcome.FAILED: "Refresh failed; see server logs",
}


@router.get("/refresh/status", response_model=RefreshStatus)
async def refresh_status(directory: DirectoryService = Depends(get_directory)) -> RefreshStatus:
    return directory.status()


@router.post("/refresh", response_model=RefreshResponse)
async def trigger_refresh(directory: DirectoryService = Depends(get_directory)):
    """Reload the data now.

    Answers 429 when the refresh was skipped or failed, with the reason
    in ``message`` and the controller status attached.
    """
    refreshed = await directory.manual_refresh()
    current = directory.status()
    if refreshed:
        return RefreshResponse(success=True, message="Data refresh completed", status=current)
    message = _SKIP_MESSAGES.get(current.last_outcome, "Refresh skipped")
    body = RefreshResponse(success=False, message=message, status=current)
    return JSONResponse(status_code=status.HTTP_429_TOO_MANY_REQUESTS, content=body.model_dump(mode="json"))


@router.post("/refresh/config", response_model=RefreshResponse)
async def update_refresh_config(
    update: RefreshConfigUpdate,
    directory: DirectoryService = Depends(get_directory),
) -> RefreshResponse:
    directory.set_enabled(update.enabled)
    state = "enabled" if update.enabled else "disabled"
    return RefreshResponse(success=True, message=f"Automatic refresh {state}", status=directory.status())
