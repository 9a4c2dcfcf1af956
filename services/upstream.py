"""HTTP forwarding of relayed requests to the backend."""

import time
from collections.abc import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import ForwardingError, ForwardingTimeoutError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import OutboundRequest


class UpstreamClient:
    """Forward requests to the backend with streaming support."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._headers = header_builder or HeaderBuilder()

    async def forward(
        self,
        outbound: OutboundRequest,
        body: AsyncIterator[bytes] | None,
        logger: RequestLogger,
    ) -> StreamingResponse:
        """Send one request upstream and stream the answer back.

        Non-2xx statuses are relayed like any other response. Transport
        failures raise ForwardingError; nothing is retried.
        """
        req = self._client.build_request(
            outbound.method,
            outbound.target_url,
            headers=outbound.headers,
            content=body if outbound.has_body else None,
            timeout=self._timeout,
        )

        started = time.perf_counter()
        try:
            response = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            message = str(e) or f"No response within {self._timeout:g}s"
            logger.log_error(outbound.target_url, 504, message)
            raise ForwardingTimeoutError(message, target=outbound.target_url) from e
        except httpx.RequestError as e:
            message = str(e) or type(e).__name__
            logger.log_error(outbound.target_url, 502, message)
            raise ForwardingError(message, target=outbound.target_url) from e

        logger.log_relay(
            outbound.method,
            outbound.target_url,
            response.status_code,
            elapsed_ms=(time.perf_counter() - started) * 1000,
            headers=dict(outbound.headers),
        )

        relayed = StreamingResponse(
            self._relay_body(response, outbound.target_url, logger),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        for key, value in self._headers.build_response_headers(response.headers.raw):
            relayed.headers.append(key, value)
        return relayed

    async def _relay_body(
        self,
        response: httpx.Response,
        target: str,
        logger: RequestLogger,
    ) -> AsyncIterator[bytes]:
        """Yield the backend body as raw bytes, without decoding.

        Transports that hand back an already-read response are relayed from
        the buffered content.
        """
        try:
            if response.is_stream_consumed:
                yield response.content
                return
            async for chunk in response.aiter_raw():
                yield chunk
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.log_error(target, response.status_code, f"Stream interrupted: {e}")
            raise

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
