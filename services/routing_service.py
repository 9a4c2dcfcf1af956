"""Relay orchestration: preflight, resolution, forwarding and error mapping."""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.cors import DEFAULT_CORS_POLICY, CorsPolicy
from core.exceptions import ForwardingError, ProxyError
from core.headers import HeaderBuilder, method_has_body
from core.protocols import RequestLogger
from core.request_types import OutboundRequest
from core.resolver import TargetResolver
from services.upstream import UpstreamClient

logger = logging.getLogger(__name__)


def request_path(request: Request) -> str:
    """Path as received on the wire, percent-escapes intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return request.url.path


class RelayService:
    """Relay API requests to the backend and stamp CORS headers on the way out."""

    def __init__(
        self,
        resolver: TargetResolver,
        upstream: UpstreamClient,
        request_logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
        cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
    ) -> None:
        self._resolver = resolver
        self._upstream = upstream
        self._logger = request_logger
        self._headers = header_builder or HeaderBuilder()
        self._cors = cors_policy

    async def handle(self, request: Request) -> Response:
        """Answer one API request. Every branch goes through the CORS policy once."""
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await self._relay(request)
        return self._cors.apply(response)

    def prepare(self, request: Request) -> OutboundRequest:
        """Build the outbound request; raises ResolutionError for foreign paths."""
        target_url = self._resolver.resolve(request_path(request), request.url.query)
        declares_body = (
            "content-length" in request.headers or "transfer-encoding" in request.headers
        )
        return OutboundRequest(
            method=request.method,
            target_url=target_url,
            headers=self._headers.build_forward_headers(request.headers.raw, request.method),
            has_body=method_has_body(request.method) and declares_body,
        )

    async def _relay(self, request: Request) -> Response:
        try:
            outbound = self.prepare(request)
            body = request.stream() if outbound.has_body else None
            return await self._upstream.forward(outbound, body, self._logger)
        except ProxyError as e:
            if not isinstance(e, ForwardingError):
                self._logger.log_error(request_path(request), 500, str(e))
            return self._error_response(e.category, str(e))
        except Exception as e:
            logger.exception("Unexpected failure relaying %s %s", request.method, request.url.path)
            self._logger.log_error(request_path(request), 500, str(e))
            return self._error_response(ProxyError.category, str(e))

    @staticmethod
    def _error_response(category: str, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": category, "message": message},
        )
