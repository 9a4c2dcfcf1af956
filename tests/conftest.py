from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from app import create_app
from core.config import Config, load_config

BACKEND_ORIGIN = "https://backend.test"

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, Authorization",
}


class RecordingLogger:
    def __init__(self):
        self.relays: list[tuple[str, str, int]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_relay(self, method, target, status, *, elapsed_ms, headers=None):
        self.relays.append((method, target, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class ChunkStream(httpx.AsyncByteStream):
    """Backend body delivered in chunks, not read ahead of time."""

    def __init__(self, *chunks: bytes, error: Exception | None = None):
        self._chunks = chunks
        self._error = error

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


class StubBackend:
    """httpx.MockTransport handler that records every request it sees."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"ok": True}
        )
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.respond(request)


class CountingStaticFallback:
    def __init__(self):
        self.paths: list[str] = []

    async def __call__(self, request: Request) -> Response:
        self.paths.append(request.url.path)
        return PlainTextResponse("static", status_code=200)


def assert_cors(response: httpx.Response) -> None:
    for key, value in CORS_HEADERS.items():
        assert response.headers.get(key) == value


@pytest.fixture
def config() -> Config:
    return load_config(
        {
            "API_BASE_URL": "/api",
            "API_TARGET": BACKEND_ORIGIN,
            "API_PREFIX": "/api_backend_ai",
        }
    )


@pytest.fixture
def backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def request_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def static_fallback() -> CountingStaticFallback:
    return CountingStaticFallback()


@pytest.fixture
async def client(config, backend, request_logger, static_fallback) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(
        config,
        request_logger,
        static_fallback=static_fallback,
        transport=httpx.MockTransport(backend),
    )
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://relay.test") as ac:
            yield ac
