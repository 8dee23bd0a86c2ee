"""
Time-bounded cache of per-object orbital element payloads.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional, Union

from shared.config import DEFAULT_PERTURBATION_MAX_AGE_SECONDS
from shared.errors import ValidationError
from shared.logging import get_logger

from service_satcat.app.adapters.spacetrack_client import perturbation_path

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_satcat.app.adapters.spacetrack_client import SpaceTrackClient
    from shared.metrics import MetricsCollector


@dataclass(frozen=True)
class CacheEntry:
    """A fetched payload and the clock reading taken when the fetch completed."""

    payload: str
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


def normalize_object_id(value: Union[int, str]) -> int:
    """Coerce a caller-supplied catalog number into the cache key form."""
    if isinstance(value, bool):
        raise ValidationError("Object id must be numeric", details={"object_id": value})

    if isinstance(value, int):
        object_id = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError("Object id must be numeric", details={"object_id": value})
        object_id = int(text)

    if object_id <= 0:
        raise ValidationError("Object id must be positive", details={"object_id": value})
    return object_id


class PerturbationCache:
    """
    Serves orbital element payloads, fetching through Space-Track at most once
    per object per staleness window.

    Concurrent misses for the same object share one in-flight fetch. A failed
    fetch leaves the stored entry (if any) untouched and is raised to every
    waiter; the next call fetches again. Stale entries are only replaced, never
    swept.
    """

    def __init__(
        self,
        client: "SpaceTrackClient",
        *,
        max_age_seconds: float = DEFAULT_PERTURBATION_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self.client = client
        self.max_age_seconds = max_age_seconds
        self.logger = get_logger("satcat.perturbation_cache")
        self.metrics = metrics
        self._clock = clock
        self._entries: Dict[int, CacheEntry] = {}
        self._inflight: Dict[int, "asyncio.Future[str]"] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, object_id: Union[int, str]) -> Optional[CacheEntry]:
        """Return the stored entry without fetching, fresh or not."""
        return self._entries.get(normalize_object_id(object_id))

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age(self._clock()) < self.max_age_seconds

    async def get_or_fetch(self, object_id: Union[int, str]) -> str:
        """Return the cached payload for ``object_id`` or fetch a fresh one."""
        object_id = normalize_object_id(object_id)

        async with self._lock:
            entry = self._entries.get(object_id)
            if entry is not None and self.is_fresh(entry):
                self._record("hit")
                return entry.payload

            fetch = self._inflight.get(object_id)
            if fetch is None:
                self._record("miss")
                fetch = asyncio.ensure_future(self._fetch_and_store(object_id))
                self._inflight[object_id] = fetch
                fetch.add_done_callback(lambda done, key=object_id: self._clear_inflight(key, done))
            else:
                self._record("coalesced")

        # Shielded so a cancelled waiter does not abort the fetch others wait on.
        return await asyncio.shield(fetch)

    async def fetch(self, object_id: int) -> str:
        """Fetch the current orbital elements for one object, bypassing the cache."""
        return await self.client.query(perturbation_path(object_id))

    async def _fetch_and_store(self, object_id: int) -> str:
        try:
            payload = await self.fetch(object_id)
        except Exception as exc:
            self.logger.warning(
                "Perturbation fetch failed",
                object_id=object_id,
                error=str(exc),
                stale_entry=object_id in self._entries,
            )
            raise

        entry = CacheEntry(payload=payload, fetched_at=self._clock())
        async with self._lock:
            self._entries[object_id] = entry

        self.logger.debug("Perturbation cached", object_id=object_id, size=len(payload))
        return payload

    def _clear_inflight(self, object_id: int, fetch: "asyncio.Future[str]") -> None:
        if self._inflight.get(object_id) is fetch:
            del self._inflight[object_id]
        if not fetch.cancelled():
            # Mark the outcome retrieved even if every waiter went away.
            fetch.exception()

    def _record(self, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("perturbation_cache_requests_total", result=result)
