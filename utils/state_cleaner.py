"""Periodic eviction of expired sessions and idle rate-limit records."""

import asyncio
import logging

from services.ingestion_coordinator import IngestionCoordinator

logger = logging.getLogger(__name__)


class StateCleaner:
    """Sweep the coordinator's in-memory maps on a fixed interval."""

    def __init__(self, coordinator: IngestionCoordinator, interval_seconds: float = 300.0) -> None:
        """
        Args:
            coordinator: Shared coordinator whose maps are swept.
            interval_seconds: Seconds to sleep between sweeps.
        """
        self._coordinator = coordinator
        self.interval_seconds = interval_seconds

    def sweep_once(self) -> int:
        removed = self._coordinator.sweep()
        if removed:
            logger.debug("State cleaner removed %d stale entries", removed)
        return removed

    async def run_periodic_cleanup(self) -> None:
        """Repeatedly sweep until cancelled."""
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                # Keep the loop alive; the next tick retries.
                logger.warning("State cleanup failed: %s", exc)
