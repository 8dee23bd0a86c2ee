"""
In-memory satellite catalog with exact and fuzzy lookup.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Collection, Dict, List, Mapping, Optional

from shared.config import DEFAULT_SEARCH_MIN_QUERY_LENGTH, DEFAULT_SEARCH_RESULT_LIMIT
from shared.errors import ParseError
from shared.logging import get_logger

from service_satcat.app.adapters.spacetrack_client import CATALOG_QUERY_PATH
from .models import ObjectType, TrackedObject
from .search import rank_matches

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_satcat.app.adapters.spacetrack_client import SpaceTrackClient
    from shared.metrics import MetricsCollector


@dataclass(frozen=True)
class CatalogSnapshot:
    """A complete, read-only set of tracked objects keyed by object id."""

    objects: Mapping[int, TrackedObject] = field(default_factory=lambda: MappingProxyType({}))
    refreshed_at: Optional[float] = None
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.objects)


class SatelliteDatabase:
    """
    Holds the published catalog snapshot and answers searches against it.

    ``refresh`` builds a whole new snapshot before publishing it with a single
    reference assignment, so a reader sees either the old or the new catalog.
    Searches read the reference once and never touch the network.
    """

    def __init__(
        self,
        client: "SpaceTrackClient",
        *,
        result_limit: int = DEFAULT_SEARCH_RESULT_LIMIT,
        min_query_length: int = DEFAULT_SEARCH_MIN_QUERY_LENGTH,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self.client = client
        self.result_limit = result_limit
        self.min_query_length = min_query_length
        self.metrics = metrics
        self.logger = get_logger("satcat.catalog")
        self._snapshot = CatalogSnapshot()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.refreshed_at is not None

    def __len__(self) -> int:
        return len(self._snapshot)

    def get(self, object_id: int) -> Optional[TrackedObject]:
        return self._snapshot.objects.get(object_id)

    async def refresh(self) -> CatalogSnapshot:
        """Fetch the full catalog and publish it as the new snapshot."""
        self.logger.info("Updating satellite catalog")
        started = time.monotonic()

        try:
            body = await self.client.query(CATALOG_QUERY_PATH)
            snapshot = self._build_snapshot(body)
        except Exception as exc:
            self.logger.error(
                "Satellite catalog refresh failed, keeping previous snapshot",
                error=str(exc),
                entries=len(self._snapshot),
            )
            self._record_refresh("error")
            raise

        self._snapshot = snapshot

        self._record_refresh("ok", duration=time.monotonic() - started, entries=len(snapshot))
        self.logger.info(
            "Updated satellite catalog",
            entries=len(snapshot),
            skipped=snapshot.skipped,
        )
        return snapshot

    def search(self, query: str, allowed_types: Collection[ObjectType]) -> List[TrackedObject]:
        """
        Look up objects by catalog number or fuzzy name.

        Queries shorter than ``min_query_length`` return nothing. A numeric
        query naming a catalogued object returns exactly that object,
        regardless of ``allowed_types``. Otherwise the best fuzzy name matches
        among the allowed types are returned.
        """
        if len(query) < self.min_query_length:
            return []

        snapshot = self._snapshot

        if query.isascii() and query.isdigit():
            tracked = snapshot.objects.get(int(query))
            if tracked is not None:
                return [tracked]

        return rank_matches(query, snapshot.objects.values(), allowed_types, self.result_limit)

    def _build_snapshot(self, body: str) -> CatalogSnapshot:
        try:
            records = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ParseError("Satellite catalog is not valid JSON", details={"error": str(exc)}) from exc

        if not isinstance(records, list):
            raise ParseError(
                "Satellite catalog is not a JSON array",
                details={"type": type(records).__name__},
            )

        self.logger.info("Ingesting satellite list", records=len(records))

        objects: Dict[int, TrackedObject] = {}
        skipped = 0
        for index, record in enumerate(records):
            try:
                tracked = TrackedObject.from_wire(record)
            except ParseError as exc:
                skipped += 1
                self.logger.warning(
                    "Skipping malformed catalog record",
                    index=index,
                    error=exc.message,
                    details=exc.details,
                )
                continue

            if tracked.object_id in objects:
                self.logger.warning("Duplicate catalog id, keeping latest record", object_id=tracked.object_id)
            objects[tracked.object_id] = tracked

        return CatalogSnapshot(
            objects=MappingProxyType(objects),
            refreshed_at=time.time(),
            skipped=skipped,
        )

    def _record_refresh(self, status: str, duration: Optional[float] = None, entries: Optional[int] = None) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("catalog_refresh_total", status=status)
        if duration is not None:
            self.metrics.observe_histogram("catalog_refresh_duration_seconds", duration)
        if entries is not None:
            self.metrics.set_gauge("catalog_entries", entries)
