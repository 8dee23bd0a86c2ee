"""
End-to-end integration tests for the satcat gateway against a fake Space-Track.
"""

import asyncio

import httpx
import pytest

from service_satcat.app.adapters.spacetrack_client import CATALOG_QUERY_PATH, perturbation_path
from service_satcat.app.caching.perturbation_cache import PerturbationCache
from service_satcat.app.main import SatcatService
from shared.config import ServiceConfig
from shared.errors import UpstreamError
from shared.test_helpers import CatalogDataFactory, FakeClock, FakeSpaceTrack


FOUR_HOURS = 4 * 60 * 60
ISS_PATH = perturbation_path(25544)
STARLINK_PATH = perturbation_path(44713)


class TestSatcatFlow:
    """Requests flowing through routes, cache, catalog and session client."""

    @pytest.fixture
    def spacetrack(self):
        fake = FakeSpaceTrack()
        fake.set_route(CATALOG_QUERY_PATH, (200, CatalogDataFactory.create_catalog_records()))
        fake.set_route(ISS_PATH, (200, "iss-elements-v1"))
        fake.set_route(STARLINK_PATH, (200, "starlink-elements"))
        return fake

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    async def service(self, spacetrack, clock):
        config = ServiceConfig(
            service_name="satcat",
            spacetrack_user=spacetrack.identity,
            spacetrack_pass=spacetrack.password,
        )
        service = SatcatService(config, transport=spacetrack.transport)
        await service.start()
        service.cache = PerturbationCache(service.client, clock=clock, metrics=service.metrics)
        yield service
        await service.stop()

    @pytest.fixture
    async def http(self, service):
        transport = httpx.ASGITransport(app=service.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://satcat") as client:
            yield client

    @pytest.mark.asyncio
    async def test_startup_logs_in_once_and_loads_catalog(self, service, spacetrack):
        assert spacetrack.logins == 1
        assert len(spacetrack.requests_for(CATALOG_QUERY_PATH)) == 1
        assert len(service.database) == 8

    @pytest.mark.asyncio
    async def test_expired_session_renewed_transparently(self, http, spacetrack):
        """A 401 mid-session costs one login and one resend, invisible to the caller."""
        spacetrack.expire_session()

        response = await http.get("/current/25544")

        assert response.status_code == 200
        assert response.text == "iss-elements-v1"
        assert spacetrack.logins == 2
        assert len(spacetrack.requests_for(ISS_PATH)) == 2

    @pytest.mark.asyncio
    async def test_cached_payload_refetched_after_four_hours(self, http, spacetrack, clock):
        first = await http.get("/current/25544")
        spacetrack.set_route(ISS_PATH, (200, "iss-elements-v2"))

        clock.advance(FOUR_HOURS - 1)
        cached = await http.get("/current/25544")
        clock.advance(1)
        refreshed = await http.get("/current/25544")

        assert [first.text, cached.text, refreshed.text] == ["iss-elements-v1", "iss-elements-v1", "iss-elements-v2"]
        assert len(spacetrack.requests_for(ISS_PATH)) == 2

    @pytest.mark.asyncio
    async def test_stale_entry_and_expired_session_together(self, http, spacetrack, clock):
        await http.get("/current/25544")
        clock.advance(FOUR_HOURS)
        spacetrack.expire_session()
        spacetrack.set_route(ISS_PATH, (200, "iss-elements-v2"))

        response = await http.get("/current/25544")

        assert response.text == "iss-elements-v2"
        assert spacetrack.logins == 2

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_fetch(self, http, spacetrack):
        responses = await asyncio.gather(*(http.get("/current/44713") for _ in range(5)))

        assert {response.text for response in responses} == {"starlink-elements"}
        assert len(spacetrack.requests_for(STARLINK_PATH)) == 1

    @pytest.mark.asyncio
    async def test_persistent_unauthorized_is_server_error(self, http, spacetrack, service):
        spacetrack.always_unauthorized = True

        response = await http.get("/current/25544")

        assert response.status_code == 500
        assert spacetrack.logins == 2
        assert service.cache.peek(25544) is None

    @pytest.mark.asyncio
    async def test_upstream_outage_is_server_error_then_recovers(self, http, spacetrack):
        spacetrack.transport_down = True
        failed = await http.get("/current/25544")
        spacetrack.transport_down = False
        recovered = await http.get("/current/25544")

        assert failed.status_code == 500
        assert recovered.text == "iss-elements-v1"

    @pytest.mark.asyncio
    async def test_search_by_name_and_number(self, http):
        by_name = await http.get("/search", params={"q": "starlink"})
        by_number = await http.get("/search", params={"q": "34454"})
        filtered = await http.get("/search", params={"q": "FALCON 9", "types": "Payload"})

        assert [item["NORAD_CAT_ID"] for item in by_name.json()] == [44714, 44713]
        assert [item["OBJECT_TYPE"] for item in by_number.json()] == ["Debris"]
        assert filtered.json() == []

    @pytest.mark.asyncio
    async def test_refreshed_catalog_replaces_search_results(self, http, service, spacetrack):
        spacetrack.set_route(
            CATALOG_QUERY_PATH,
            (200, [CatalogDataFactory.record("58000", "STARLINK-6000", launch="2023-09-01")]),
        )

        await service.database.refresh()
        response = await http.get("/search", params={"q": "starlink"})

        assert [item["NORAD_CAT_ID"] for item in response.json()] == [58000]

    @pytest.mark.asyncio
    async def test_failed_catalog_refresh_keeps_serving(self, http, service, spacetrack):
        spacetrack.set_route(CATALOG_QUERY_PATH, (500, "Internal Server Error"))

        with pytest.raises(UpstreamError):
            await service.database.refresh()
        response = await http.get("/search", params={"q": "25544"})

        assert [item["OBJECT_NAME"] for item in response.json()] == ["ISS (ZARYA)"]
