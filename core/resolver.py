"""Backend target resolution: public prefix -> backend prefix."""

from dataclasses import dataclass

from core.config import Config
from core.exceptions import ResolutionError


@dataclass(frozen=True)
class ProxyTarget:
    """Backend origin plus the public -> backend prefix mapping."""

    origin: str
    public_prefix: str = "/api"
    backend_prefix: str = "/api_backend_ai"

    @classmethod
    def from_config(cls, config: Config) -> "ProxyTarget":
        return cls(
            origin=config.backend.origin,
            public_prefix=config.api.public_prefix,
            backend_prefix=config.backend.prefix,
        )


class TargetResolver:
    """Compute backend URLs for API paths."""

    def __init__(self, target: ProxyTarget) -> None:
        self._target = target

    @property
    def target(self) -> ProxyTarget:
        return self._target

    def resolve(self, path: str, query: str = "") -> str:
        """Replace the leading public prefix and prepend the backend origin.

        Everything after the prefix, query string included, is kept verbatim.
        """
        prefix = self._target.public_prefix
        if not path.startswith(prefix):
            raise ResolutionError(f"Path {path!r} is not under {prefix!r}", path=path)

        url = f"{self._target.origin}{self._target.backend_prefix}{path[len(prefix):]}"
        if query:
            url = f"{url}?{query}"
        return url
