"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_request
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger, StaticFallback
from core.resolver import ProxyTarget, TargetResolver
from core.router import RouteDecider
from services.routing_service import RelayService
from services.static_assets import StaticAssetFallback
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    static_fallback: StaticFallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    decider = RouteDecider(config.api.public_prefix)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        backend_client = httpx.AsyncClient(
            timeout=config.backend.timeout,
            limits=limits,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        app.state.relay_service = RelayService(
            resolver=TargetResolver(ProxyTarget.from_config(config)),
            upstream=UpstreamClient(backend_client, config.backend.timeout, header_builder),
            request_logger=logger,
            header_builder=header_builder,
        )
        app.state.static_fallback = static_fallback or StaticAssetFallback(
            config.static.directory
        )
        try:
            yield
        finally:
            await backend_client.aclose()

    app = FastAPI(
        title="CORS Relay",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def relay(request: Request):
        return await handle_request(request, decider)

    # No method filter: every verb reaches the relay.
    app.add_route("/{full_path:path}", relay, methods=None, include_in_schema=False)

    return app
