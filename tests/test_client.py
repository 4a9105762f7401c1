"""
Tests for the async API client.

Runs StatusClient against an in-process aiohttp application that
mimics the status API, covering successful fetches, query building,
headers, rate limiting, and each failure class.
"""

import asyncio
import json

import aiohttp
import pytest
from aiohttp import test_utils, web

from ycs.client import (
    APIError,
    DecodeError,
    HTTPStatusError,
    RateLimiter,
    StatusClient,
    TransportError,
)
from ycs.models import (
    LANG_EN,
    REGION_RU,
    STATUS_OPEN,
    ZONE_RU_A,
    ClientSettings,
    IncidentsRequest,
)

from tests.test_models import SAMPLE_INCIDENT


# ─── Fake API ─────────────────────────────────────────────────

SAMPLE_SERVICES = [
    {"id": 1, "name": "Compute Cloud", "installationCode": "ru", "status": "available"},
    {"id": 2, "name": "Object Storage", "installationCode": "ru", "status": "available"},
    {"id": 3, "name": "Compute Cloud", "installationCode": "kz", "status": "available"},
]

SAMPLE_INCIDENTS = {
    "items": [
        {"id": 971, "title": "Degraded API", "status": "open", "startDate": "2025-01-08T10:00:00Z"},
        {"id": 970, "title": "Old one", "status": "resolved", "startDate": "2024-12-01T10:00:00Z"},
    ]
}


def _error_response(request):
    """Pick a failure mode from the User-Agent header."""
    agent = request.headers.get("User-Agent", "")
    if "http-error" in agent:
        return web.Response(status=503)
    if "data-error" in agent:
        return web.Response(status=200, text="FFFF")
    return None


def _make_app(requests):
    async def services(request):
        requests.append(request)
        error = _error_response(request)
        return error if error is not None else web.json_response(SAMPLE_SERVICES)

    async def incidents(request):
        requests.append(request)
        error = _error_response(request)
        return error if error is not None else web.json_response(SAMPLE_INCIDENTS)

    async def incident(request):
        requests.append(request)
        if request.match_info["id"] != "972":
            return web.Response(status=404)
        error = _error_response(request)
        return error if error is not None else web.json_response(SAMPLE_INCIDENT)

    async def bad_shape(request):
        return web.json_response([{"id": 1, "createdAt": "not a date"}])

    async def slow(request):
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/services", services)
    app.router.add_get("/incidents", incidents)
    app.router.add_get("/incidents/{id}", incident)
    app.router.add_get("/broken/services", bad_shape)
    app.router.add_get("/slow/incidents/{id}", slow)
    return app


def run_with_api(scenario):
    """Start the fake API, run scenario(base_url, requests) and return its result."""

    async def runner():
        requests = []
        async with test_utils.TestServer(_make_app(requests)) as server:
            base_url = str(server.make_url("/")).rstrip("/")
            return await scenario(base_url, requests)

    return asyncio.run(runner())


# ─── Tests ────────────────────────────────────────────────────


class TestGetServices:
    def test_returns_services(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                return await client.get_services()

        services = run_with_api(scenario)
        assert len(services) == 3
        assert services.in_region(REGION_RU).ids() == [1, 2]
        assert services.names() == ["Compute Cloud", "Object Storage", "Compute Cloud"]

    def test_query(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                await client.get_services(LANG_EN)
            return requests

        requests = run_with_api(scenario)
        assert requests[0].query["incidents"] == "all"
        assert requests[0].query["lang"] == "en"

    def test_default_language(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                await client.get_services()
            return requests

        assert run_with_api(scenario)[0].query["lang"] == "ru"


class TestGetIncidents:
    def test_returns_incidents(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                return await client.get_incidents(
                    IncidentsRequest(
                        lang=LANG_EN,
                        status=STATUS_OPEN,
                        region="all",
                        zones=[ZONE_RU_A],
                    )
                )

        incidents = run_with_api(scenario)
        assert len(incidents) == 2
        assert incidents.has_open() is True

    def test_query(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                await client.get_incidents(
                    IncidentsRequest(status=STATUS_OPEN, zones=["ru-central1-a", "ru-central1-b"])
                )
            return requests

        query = run_with_api(scenario)[0].query
        assert query["lang"] == "ru"
        assert query["installation"] == "all"
        assert query["status"] == "open"
        assert query.getall("zones[]") == ["ru-central1-a", "ru-central1-b"]
        assert "from" not in query

    def test_without_request(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                return await client.get_incidents()

        assert len(run_with_api(scenario)) == 2


class TestGetIncident:
    def test_returns_incident(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                return await client.get_incident(972, LANG_EN)

        incident = run_with_api(scenario)
        assert incident.is_resolved() is True
        assert str(incident.duration()) == "7:02:00"
        assert incident.url(LANG_EN) == "https://status.yandex.cloud/en/incidents/972"
        assert incident.report_markdown() != ""
        assert incident.region_list() == ["ru"]
        assert incident.zone_list() == ["ru-central1-a"]
        assert incident.service_list() == ["Compute Cloud", "Virtual Private Cloud"]
        assert incident.comments.get(0).markdown() != ""
        assert incident.comments.get(5) is None

    def test_not_found(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                await client.get_incident(1)

        with pytest.raises(HTTPStatusError) as excinfo:
            run_with_api(scenario)
        assert excinfo.value.status_code == 404
        assert str(excinfo.value) == "Can't get incident 1: API returned non-ok status code 404"


class TestHeaders:
    def test_default_user_agent(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url) as client:
                await client.get_services()
            return requests

        headers = run_with_api(scenario)[0].headers
        assert headers["User-Agent"].startswith("ycs.py/")
        assert headers["Accept"] == "application/json"

    def test_app_user_agent(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url, app="Test", version="1.2.3") as client:
                await client.get_services()
            return requests

        assert run_with_api(scenario)[0].headers["User-Agent"].startswith("Test/1.2.3 ycs.py/")


class TestErrors:
    def test_http_error(self):
        async def scenario(url, requests):
            errors = []
            async with StatusClient(api_url=url, app="http-error", version="1") as client:
                for call in (
                    client.get_services(),
                    client.get_incidents(IncidentsRequest()),
                    client.get_incident(972, LANG_EN),
                ):
                    try:
                        await call
                    except APIError as exc:
                        errors.append(exc)
            return errors

        errors = run_with_api(scenario)
        assert [str(e) for e in errors] == [
            "Can't get services status: API returned non-ok status code 503",
            "Can't get incidents: API returned non-ok status code 503",
            "Can't get incident 972: API returned non-ok status code 503",
        ]
        assert all(isinstance(e, HTTPStatusError) and e.status_code == 503 for e in errors)

    def test_decode_error(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url, app="data-error", version="1") as client:
                await client.get_incident(972, LANG_EN)

        with pytest.raises(DecodeError) as excinfo:
            run_with_api(scenario)
        assert str(excinfo.value).startswith("Can't get incident 972: Can't decode API response: ")
        assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)

    def test_bad_record_is_decode_error(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url + "/broken") as client:
                await client.get_services()

        with pytest.raises(DecodeError, match="^Can't get services status: Can't decode API response"):
            run_with_api(scenario)

    def test_transport_error(self):
        async def scenario():
            async with StatusClient(api_url="http://127.0.0.1:9") as client:
                await client.get_incident(972, LANG_EN)

        with pytest.raises(TransportError, match="^Can't get incident 972: Can't send request to API"):
            asyncio.run(scenario())

    def test_timeout_is_transport_error(self):
        async def scenario(url, requests):
            async with StatusClient(api_url=url + "/slow", timeout=0.1) as client:
                await client.get_incident(972)

        with pytest.raises(TransportError):
            run_with_api(scenario)

    def test_requires_context_manager(self):
        client = StatusClient()
        with pytest.raises(RuntimeError):
            asyncio.run(client.get_services())


class TestSession:
    def test_borrowed_session_stays_open(self):
        async def scenario(url, requests):
            async with aiohttp.ClientSession() as session:
                async with StatusClient(api_url=url, session=session) as client:
                    await client.get_services()
                return session.closed

        assert run_with_api(scenario) is False

    def test_from_settings(self):
        settings = ClientSettings(api_url="http://example.test/api/", app="bot", version="2", rate_limit=4, timeout=3)
        client = StatusClient.from_settings(settings)
        assert client.api_url == "http://example.test/api"
        assert client.user_agent.startswith("bot/2 ")
        assert client.timeout == 3


class TestRateLimiter:
    def test_disabled(self):
        assert RateLimiter(0).interval == 0
        assert RateLimiter(-1).interval == 0

    def test_spacing(self):
        async def scenario():
            limiter = RateLimiter(20)
            loop = asyncio.get_running_loop()
            started = loop.time()
            await asyncio.gather(*(limiter.wait() for _ in range(4)))
            return loop.time() - started

        # 4 requests at 20 rps: the last one starts >= 3 intervals after the first
        assert asyncio.run(scenario()) >= 0.15 - 0.01

    def test_client_respects_limit(self):
        async def scenario(url, requests):
            loop = asyncio.get_running_loop()
            async with StatusClient(api_url=url, rate_limit=10) as client:
                started = loop.time()
                await asyncio.gather(client.get_services(), client.get_services(), client.get_services())
                return loop.time() - started

        assert run_with_api(scenario) >= 0.2 - 0.01
