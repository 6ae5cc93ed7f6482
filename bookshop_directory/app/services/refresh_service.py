"""
Data refresh controller.

Reloads the active store's cached view and rebuilds the slug index.
There is no background timer: a refresh happens when an administrator
asks for one, or opportunistically on a read once the service has been
up for ``initial_delay`` and the data is older than
``max_refresh_interval``.  Either way ``min_refresh_interval`` throttles
how often the backend is actually hit.

Stores that always read the current backend state have nothing to
reload; the controller skips them based on the store's declared
``refresh_capability``.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.config import Settings
from ..core.inflight import SingleFlight
from ..schemas.refresh import RefreshOutcome, RefreshStatus
from ..storage.base import StorageAdapter
from .slug_index import SlugIndex

logger = logging.getLogger(__name__)


class RefreshController:
    """Gatekeeper for full reloads of the active store.

    Parameters
    ----------
    adapter : StorageAdapter
        The active store.
    index : SlugIndex
        Rebuilt after every successful reload.
    settings : Settings
        Supplies the intervals (milliseconds) and the initial enabled flag.
    clock : Callable[[], float]
        Returns the current time in seconds.  Injected by tests.
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        index: SlugIndex,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.adapter = adapter
        self.index = index
        self.min_refresh_interval_ms = settings.min_refresh_interval_ms
        self.max_refresh_interval_ms = settings.max_refresh_interval_ms
        self.initial_delay_ms = settings.initial_delay_ms
        self.enabled = not settings.disable_auto_refresh
        self.failed_attempts = 0
        self.last_outcome: Optional[RefreshOutcome] = None
        self._clock = clock
        self._started_at = clock()
        self._last_refresh_at: Optional[float] = None
        self._last_attempt_at: Optional[float] = None
        self._flight = SingleFlight()
        if not self.enabled:
            logger.info("Automatic data refresh is disabled")

    @property
    def last_refresh_at(self) -> Optional[float]:
        return self._last_refresh_at

    def _ms_since(self, moment: float) -> int:
        return int((self._clock() - moment) * 1000)

    def _throttled(self) -> bool:
        return self._last_refresh_at is not None and self._ms_since(self._last_refresh_at) < self.min_refresh_interval_ms

    async def _refresh(self) -> RefreshOutcome:
        if not self.enabled:
            outcome = RefreshOutcome.DISABLED
        elif not self.adapter.refresh_capable:
            outcome = RefreshOutcome.ALWAYS_CURRENT
        elif self._throttled():
            outcome = RefreshOutcome.THROTTLED
        else:
            self._last_attempt_at = self._clock()
            try:
                await self.adapter.reload()
                await self.index.build()
            except Exception:
                self.failed_attempts += 1
                logger.exception("Data refresh failed (attempt %d)", self.failed_attempts)
                outcome = RefreshOutcome.FAILED
            else:
                self._last_refresh_at = self._clock()
                self.failed_attempts = 0
                outcome = RefreshOutcome.REFRESHED
                logger.info("Data refresh completed; %d slugs indexed", len(self.index))
        if outcome not in (RefreshOutcome.REFRESHED, RefreshOutcome.FAILED):
            logger.info("Data refresh skipped: %s", outcome.value)
        self.last_outcome = outcome
        return outcome

    async def manual_refresh(self) -> bool:
        """Reload now unless disabled, always current or throttled.

        Returns True only when the store was actually reloaded.
        Concurrent callers share one reload.
        """
        outcome = await self._flight.run(self._refresh)
        return outcome is RefreshOutcome.REFRESHED

    def due(self) -> bool:
        """Whether an opportunistic refresh should run now."""
        if not self.enabled or not self.adapter.refresh_capable:
            return False
        if self._ms_since(self._started_at) < self.initial_delay_ms:
            return False
        # A failed attempt also waits out the minimum interval before reads retry it.
        if self._last_attempt_at is not None and self._ms_since(self._last_attempt_at) < self.min_refresh_interval_ms:
            return False
        if self._last_refresh_at is None:
            return True
        return self._ms_since(self._last_refresh_at) >= self.max_refresh_interval_ms

    async def refresh_if_due(self) -> bool:
        if not self.due():
            return False
        logger.info("Data is due for a refresh")
        return await self.manual_refresh()

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)
        logger.info("Automatic data refresh %s", "enabled" if self.enabled else "disabled")

    def status(self) -> RefreshStatus:
        last = self._last_refresh_at
        return RefreshStatus(
            enabled=self.enabled,
            backend=self.adapter.kind.value,
            refresh_capable=self.adapter.refresh_capable,
            last_refresh_at=datetime.fromtimestamp(last, tz=timezone.utc).isoformat() if last is not None else None,
            time_since_last_refresh_ms=self._ms_since(last) if last is not None else None,
            failed_attempts=self.failed_attempts,
            last_outcome=self.last_outcome,
            configured_intervals={
                "min_refresh_interval_ms": self.min_refresh_interval_ms,
                "max_refresh_interval_ms": self.max_refresh_interval_ms,
                "initial_delay_ms": self.initial_delay_ms,
            },
        )
