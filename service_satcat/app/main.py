"""
Satellite catalog gateway service.
"""

from typing import Any, Dict, List, Optional

import httpx
from fastapi import HTTPException, Query
from fastapi.responses import PlainTextResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, SpaceTrackCredentials
from shared.errors import SatcatException, ValidationError

from service_satcat.app.adapters.spacetrack_client import SpaceTrackClient
from service_satcat.app.caching.perturbation_cache import PerturbationCache
from service_satcat.app.catalog.database import SatelliteDatabase
from service_satcat.app.catalog.models import ObjectType
from service_satcat.app.catalog.scheduler import CatalogRefresher


DEFAULT_OBJECT_TYPES = (
    ObjectType.PAYLOAD,
    ObjectType.ROCKET_BODY,
    ObjectType.UNKNOWN,
)


class SatcatService(BaseService):
    """Space-Track mirror service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__("satcat", 3000, config=config)
        self._transport = transport

        # Built on startup: the client must complete its login handshake first.
        self.client: Optional[SpaceTrackClient] = None
        self.cache: Optional[PerturbationCache] = None
        self.database: Optional[SatelliteDatabase] = None
        self.refresher: Optional[CatalogRefresher] = None

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_satcat_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.satcat_service = self

    async def start(self) -> None:
        """Authenticate, build the core components and load the catalog."""
        credentials = SpaceTrackCredentials.from_config(self.config)
        self.client = await SpaceTrackClient.connect(
            credentials,
            base_url=self.config.spacetrack_base_url,
            timeout=self.config.spacetrack_timeout_seconds,
            transport=self._transport,
            metrics=self.metrics,
        )
        self.cache = PerturbationCache(
            self.client,
            max_age_seconds=self.config.perturbation_max_age_seconds,
            metrics=self.metrics,
        )
        self.database = SatelliteDatabase(
            self.client,
            result_limit=self.config.search_result_limit,
            min_query_length=self.config.search_min_query_length,
            metrics=self.metrics,
        )
        self.refresher = CatalogRefresher(
            self.database,
            interval_seconds=self.config.catalog_refresh_interval_seconds,
        )
        await self.refresher.start()

    async def stop(self) -> None:
        """Stop background refreshes and close the Space-Track session."""
        if self.refresher:
            await self.refresher.stop()
        if self.client:
            await self.client.close()

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Report catalog, cache and session state."""
        snapshot = self.database.snapshot if self.database else None
        return {
            "catalog": {
                "loaded": bool(self.database and self.database.is_loaded),
                "entries": len(snapshot) if snapshot else 0,
                "refreshed_at": snapshot.refreshed_at if snapshot else None,
                "skipped": snapshot.skipped if snapshot else 0,
            },
            "perturbation_cache": {"entries": len(self.cache) if self.cache else 0},
            "spacetrack": {
                "authenticated": bool(self.client and self.client.last_authenticated_at is not None),
            },
        }

    def _setup_satcat_routes(self):
        """Set up Space-Track mirror routes."""

        @self.app.get("/current/{object_id}", response_class=PlainTextResponse)
        async def current(object_id: str):
            """Current orbital elements for one object."""
            cache = self._require(self.cache)
            try:
                return PlainTextResponse(await cache.get_or_fetch(object_id))
            except ValidationError:
                raise
            except SatcatException as exc:
                self.logger.error("Perturbation lookup failed", object_id=object_id, code=exc.code, error=str(exc))
                self.metrics.record_error(exc.code)
                return PlainTextResponse(str(exc), status_code=500)

        @self.app.get("/search")
        async def search(
            q: str = Query(..., description="Catalog number or object name"),
            types: Optional[str] = Query(None, description="Comma-separated object types"),
        ) -> List[Dict[str, Any]]:
            """Search the satellite catalog."""
            database = self._require(self.database)
            allowed_types = self._parse_types(types)
            return [tracked.to_dict() for tracked in database.search(q, allowed_types)]

    def _parse_types(self, types: Optional[str]) -> tuple:
        if not types:
            return DEFAULT_OBJECT_TYPES
        return tuple(ObjectType.parse(name) for name in types.split(",") if name.strip())

    def _require(self, component):
        if component is None:
            raise HTTPException(status_code=503, detail="Service is starting")
        return component


def create_app():
    """Create FastAPI application."""
    service = SatcatService()
    return service.app


if __name__ == "__main__":
    service = SatcatService()
    service.run()
