"""
Async client for the Yandex Cloud status API.

A StatusClient is constructed with everything it needs (API URL, user
agent, rate limit, timeout) and used as an async context manager:

    async with StatusClient(app="my-bot", version="1.0", rate_limit=2) as client:
        incident = await client.get_incident(972, LANG_EN)
        print(incident.report_markdown())

Each call is a single GET. Failures are never retried; they surface as
one of the APIError subclasses, prefixed with the operation that failed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import aiohttp

import ycs
from ycs.models import (
    API_URL,
    LANG_RU,
    ClientSettings,
    Incident,
    Incidents,
    IncidentsRequest,
    Service,
    Services,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Library token appended to every User-Agent
USER_AGENT = f"ycs.py/{ycs.__version__}"


# ─── Errors ───────────────────────────────────────────────────


class APIError(Exception):
    """
    Base class for all client failures.

    Attributes:
        message: What went wrong.
        operation: What the client was trying to do, e.g. "Can't get incidents".
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation = ""

    def during(self, operation: str) -> APIError:
        """Attach the failed operation and return self for re-raising."""
        self.operation = operation
        return self

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class TransportError(APIError):
    """Connection failure or timeout."""


class HTTPStatusError(APIError):
    """The API answered with a status code above 299."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"API returned non-ok status code {status_code}")
        self.status_code = status_code


class DecodeError(APIError):
    """The response body could not be decoded into records."""


# ─── Rate limiting ────────────────────────────────────────────


class RateLimiter:
    """
    Spaces request starts at least 1/rps seconds apart.

    A non-positive rps disables the limit.
    """

    def __init__(self, rps: float = 0) -> None:
        self.interval = 1.0 / rps if rps > 0 else 0.0
        self._lock = asyncio.Lock()
        self._next_slot = 0.0

    async def wait(self) -> None:
        if not self.interval:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            if self._next_slot > now:
                await asyncio.sleep(self._next_slot - now)
                now = loop.time()
            self._next_slot = now + self.interval


# ─── Client ───────────────────────────────────────────────────


class StatusClient:
    """
    Status API client.

    Args:
        api_url: Base API URL.
        app: Application name for the User-Agent header.
        version: Application version for the User-Agent header.
        rate_limit: Max requests per second (0 = unlimited).
        timeout: Total request timeout in seconds (0 = no timeout).
        session: Optional aiohttp session to borrow instead of owning one.
    """

    def __init__(
        self,
        api_url: str = API_URL,
        app: str = "",
        version: str = "",
        rate_limit: float = 0,
        timeout: float = 0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.user_agent = _build_user_agent(app, version)
        self.timeout = timeout
        self._limiter = RateLimiter(rate_limit)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, settings: ClientSettings, session: Optional[aiohttp.ClientSession] = None) -> StatusClient:
        """Build a client from loaded settings."""
        return cls(
            api_url=settings.api_url,
            app=settings.app,
            version=settings.version,
            rate_limit=settings.rate_limit,
            timeout=settings.timeout,
            session=session,
        )

    async def __aenter__(self) -> StatusClient:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the owned session; a borrowed session is left open."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    # ── Public API ───────────────────────────────────────────

    async def get_services(self, lang: str = "") -> Services:
        """Status of all services, with their incidents."""
        query = [("incidents", "all"), ("lang", lang or LANG_RU)]
        try:
            data = await self._get("/services", query)
            return _decode(lambda: Services(Service.from_dict(s) for s in data))
        except APIError as exc:
            raise exc.during("Can't get services status")

    async def get_incidents(self, request: Optional[IncidentsRequest] = None) -> Incidents:
        """Incidents matching the request filters."""
        request = request or IncidentsRequest()
        try:
            data = await self._get("/incidents", request.to_query())
            return _decode(
                lambda: Incidents(Incident.from_dict(i) for i in data.get("items") or [])
            )
        except APIError as exc:
            raise exc.during("Can't get incidents")

    async def get_incident(self, incident_id: int, lang: str = "") -> Incident:
        """A single incident with its comments."""
        try:
            data = await self._get(f"/incidents/{incident_id}", [("lang", lang or LANG_RU)])
            return _decode(lambda: Incident.from_dict(data))
        except APIError as exc:
            raise exc.during(f"Can't get incident {incident_id}")

    # ── Internals ────────────────────────────────────────────

    async def _get(self, endpoint: str, query: List[Tuple[str, str]]) -> Any:
        """Send a GET request and return the decoded JSON body."""
        if self._session is None:
            raise RuntimeError(
                "StatusClient must be used as an async context manager: "
                "async with StatusClient() as client: ..."
            )

        await self._limiter.wait()

        url = self.api_url + endpoint
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        timeout = aiohttp.ClientTimeout(total=self.timeout if self.timeout > 0 else None)

        logger.debug("GET %s %s", url, query)

        try:
            async with self._session.get(url, params=query, headers=headers, timeout=timeout) as resp:
                logger.debug("GET %s -> %d", url, resp.status)
                if resp.status > 299:
                    raise HTTPStatusError(resp.status)
                body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"Can't send request to API: {str(exc) or type(exc).__name__}") from exc

        return _decode(lambda: json.loads(body))


def _build_user_agent(app: str, version: str) -> str:
    if not app:
        return USER_AGENT
    if version:
        return f"{app}/{version} {USER_AGENT}"
    return f"{app} {USER_AGENT}"


def _decode(build: Callable[[], T]) -> T:
    """Run a decoding step, turning malformed data into DecodeError."""
    try:
        return build()
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        raise DecodeError(f"Can't decode API response: {exc}") from exc
