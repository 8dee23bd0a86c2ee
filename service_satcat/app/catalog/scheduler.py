"""
Periodic refresh of the satellite catalog.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

from shared.config import DEFAULT_CATALOG_REFRESH_INTERVAL_SECONDS
from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .database import SatelliteDatabase


class CatalogRefresher:
    """Loads the catalog once up front, then refreshes it on a fixed interval."""

    def __init__(
        self,
        database: "SatelliteDatabase",
        *,
        interval_seconds: float = DEFAULT_CATALOG_REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self.database = database
        self.interval_seconds = interval_seconds
        self.logger = get_logger("satcat.catalog.refresher")
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Run the initial refresh (errors propagate) and start the loop."""
        if self.running:
            return
        await self.database.refresh()
        self._task = asyncio.create_task(self._run(), name="catalog-refresh")
        self.logger.info("Catalog refresh loop started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the refresh loop and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Catalog refresh loop stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.database.refresh()
            except Exception as exc:
                # The previous snapshot keeps serving until the next attempt.
                self.logger.error("Scheduled catalog refresh failed", error=str(exc))
