"""Shared protocol definitions."""

from typing import Protocol

from starlette.requests import Request
from starlette.responses import Response


class RequestLogger(Protocol):
    """Protocol for relay logging (Dashboard)."""

    def log_relay(
        self,
        method: str,
        target: str,
        status: int,
        *,
        elapsed_ms: float,
        headers: dict[str, str] | None = None,
    ) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...


class StaticFallback(Protocol):
    """Serves anything outside the API surface."""

    async def __call__(self, request: Request) -> Response: ...
