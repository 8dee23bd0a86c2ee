"""
Authenticated Space-Track client for the satellite catalog gateway.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

import httpx

from shared.config import DEFAULT_SPACETRACK_BASE_URL, SpaceTrackCredentials
from shared.errors import AuthError, TransportError, UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector


LOGIN_PATH = "/ajaxauth/login"
PERTURBATION_QUERY_PATH = "/basicspacedata/query/class/gp/NORAD_CAT_ID"
CATALOG_QUERY_PATH = "/basicspacedata/query/class/satcat/orderby/NORAD_CAT_ID%20asc/emptyresult/show"


def perturbation_path(object_id: int) -> str:
    """Path of the current orbital elements for a single object."""
    return f"{PERTURBATION_QUERY_PATH}/{object_id}"


class SpaceTrackClient:
    """
    Keeps one cookie-authenticated session with Space-Track alive.

    Use :meth:`connect` to build an instance; it performs the initial login
    handshake so a constructed client is always authenticated. ``query`` sends
    a request and, on a 401, renews the session once and resends once.
    """

    def __init__(
        self,
        credentials: SpaceTrackCredentials,
        *,
        base_url: str = DEFAULT_SPACETRACK_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = get_logger("satcat.spacetrack")
        self.metrics = metrics
        self._credentials = credentials
        self._clock = clock
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
        self.last_authenticated_at: Optional[float] = None

    @classmethod
    async def connect(
        cls,
        credentials: SpaceTrackCredentials,
        **kwargs,
    ) -> "SpaceTrackClient":
        """Create a client and perform the initial login handshake."""
        client = cls(credentials, **kwargs)
        try:
            await client.authenticate()
        except Exception:
            await client.close()
            raise
        return client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def authenticate(self) -> None:
        """Run the login handshake; the session cookies land in the client jar."""
        try:
            response = await self._client.post(
                LOGIN_PATH,
                data={"identity": self._credentials.identity, "password": self._credentials.password},
            )
        except httpx.TransportError as exc:
            self._count("spacetrack_logins_total", status="transport_error")
            self.logger.error("Space-Track login transport failure", error=str(exc))
            raise TransportError(f"Space-Track login failed: {exc}", details={"path": LOGIN_PATH}) from exc

        if response.status_code != 200 or _login_rejected(response.text):
            self._count("spacetrack_logins_total", status="rejected")
            self.logger.error("Space-Track login rejected", status_code=response.status_code)
            raise AuthError(
                f"Space-Track rejected credentials (HTTP {response.status_code})",
                details={"status_code": response.status_code},
            )

        self.last_authenticated_at = self._clock()
        self._count("spacetrack_logins_total", status="ok")
        self.logger.info("Authenticated with Space-Track", identity=self._credentials.identity)

    async def query(self, path: str) -> str:
        """
        GET ``path`` over the authenticated session and return the body text.

        Two steps at most: send; on 401 renew and send again. A second 401 is
        an AuthError. Other non-2xx statuses raise UpstreamError.
        """
        sent_at = self._clock()
        response = await self._send(path)
        if response.status_code != 401:
            return self._payload(path, response)

        # Another caller may have renewed the session after this request went out.
        if self.last_authenticated_at is None or self.last_authenticated_at <= sent_at:
            self.logger.info("Space-Track session expired, re-authenticating", path=path)
            await self.authenticate()
        else:
            self.logger.debug("Space-Track session renewed concurrently, resending", path=path)

        response = await self._send(path)
        if response.status_code == 401:
            self._count("spacetrack_requests_total", outcome="unauthorized")
            raise AuthError(
                "Space-Track still unauthorized after re-authentication",
                details={"path": path},
            )
        return self._payload(path, response)

    async def _send(self, path: str) -> httpx.Response:
        try:
            return await self._client.get(path)
        except httpx.TransportError as exc:
            self._count("spacetrack_requests_total", outcome="transport_error")
            self.logger.error("Space-Track request transport failure", path=path, error=str(exc))
            raise TransportError(f"Space-Track request failed: {exc}", details={"path": path}) from exc

    def _payload(self, path: str, response: httpx.Response) -> str:
        if response.is_success:
            self._count("spacetrack_requests_total", outcome="ok")
            return response.text

        self._count("spacetrack_requests_total", outcome="upstream_error")
        self.logger.error(
            "Space-Track request failed",
            path=path,
            status_code=response.status_code,
        )
        raise UpstreamError(
            response.status_code,
            f"Space-Track returned HTTP {response.status_code} for {path}",
            details={"path": path},
        )

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)


def _login_rejected(body: str) -> bool:
    """Space-Track answers 200 with {"Login":"Failed"} on bad credentials."""
    return "failed" in body.lower()
