"""Custom exception hierarchy for the CORS relay."""

from typing import Any


class ProxyError(Exception):
    """Base exception for all relay errors."""

    category = "Proxy error"


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class ResolutionError(ProxyError):
    """Raised when a path cannot be mapped onto the backend prefix."""

    category = "Invalid API path"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ForwardingError(ProxyError):
    """Raised when the backend cannot be reached.

    Attributes:
        message: Error message from the transport
        target: Backend URL the request was sent to (optional)
    """

    category = "Error connecting to the backend"

    def __init__(self, message: str, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class ForwardingTimeoutError(ForwardingError):
    """Raised when the backend does not answer within the configured timeout."""

    category = "Backend timeout"


class BackendApplicationError(ProxyError):
    """Raised by the API client when the backend answers with a non-2xx status.

    The relay itself never raises this; it passes such responses through.
    """

    category = "Backend error"

    def __init__(self, message: str, status_code: int, data: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.data = data
