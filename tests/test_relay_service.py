import httpx
import pytest
from fastapi import FastAPI, Request

from conftest import RecordingLogger, StubBackend, assert_cors
from core.resolver import ProxyTarget, TargetResolver
from services.routing_service import RelayService
from services.upstream import UpstreamClient


def make_app(service: RelayService) -> FastAPI:
    app = FastAPI()

    @app.api_route("/{full_path:path}", methods=["GET", "POST", "OPTIONS"])
    async def relay(request: Request):
        return await service.handle(request)

    return app


async def call(app, method, path) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://relay.test") as ac:
        return await ac.request(method, path)


def make_service(backend, logger, public_prefix="/api") -> RelayService:
    target = ProxyTarget(origin="https://backend.test", public_prefix=public_prefix)
    upstream = UpstreamClient(httpx.AsyncClient(transport=httpx.MockTransport(backend)))
    return RelayService(TargetResolver(target), upstream, logger)


@pytest.mark.asyncio
async def test_resolution_failure_becomes_json_error():
    backend, logger = StubBackend(), RecordingLogger()
    service = make_service(backend, logger, public_prefix="/other")

    resp = await call(make_app(service), "GET", "/api/users")

    assert resp.status_code == 500
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {
        "error": "Invalid API path",
        "message": "Path '/api/users' is not under '/other'",
    }
    assert_cors(resp)
    assert backend.requests == []
    assert logger.errors == [("/api/users", 500, "Path '/api/users' is not under '/other'")]


@pytest.mark.asyncio
async def test_unexpected_failure_is_contained(monkeypatch):
    backend, logger = StubBackend(), RecordingLogger()
    service = make_service(backend, logger)

    def broken(request):
        raise RuntimeError("resolver exploded")

    monkeypatch.setattr(service, "prepare", broken)
    resp = await call(make_app(service), "POST", "/api/users")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Proxy error", "message": "resolver exploded"}
    assert_cors(resp)


@pytest.mark.asyncio
async def test_preflight_skips_resolution():
    backend, logger = StubBackend(), RecordingLogger()
    service = make_service(backend, logger, public_prefix="/other")

    resp = await call(make_app(service), "OPTIONS", "/api/users")

    assert resp.status_code == 200
    assert resp.content == b""
    assert_cors(resp)
    assert logger.errors == []
