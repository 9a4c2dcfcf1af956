"""Cross-origin header policy stamped onto every relayed response."""

from collections.abc import Iterable
from dataclasses import dataclass

from starlette.responses import Response


@dataclass(frozen=True)
class CorsPolicy:
    """Fixed set of CORS headers."""

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization")

    def headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
        }

    def merge(self, headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Return a new header list with the policy headers overwriting same-named ones."""
        policy = self.headers()
        names = {name.lower() for name in policy}
        merged = [(key, value) for key, value in headers if key.lower() not in names]
        merged.extend(policy.items())
        return merged

    def apply(self, response: Response) -> Response:
        """Stamp the policy headers onto a freshly built response and return it."""
        current = (
            (key.decode("latin-1"), value.decode("latin-1"))
            for key, value in response.raw_headers
        )
        response.raw_headers = [
            (key.lower().encode("latin-1"), value.encode("latin-1"))
            for key, value in self.merge(current)
        ]
        return response


DEFAULT_CORS_POLICY = CorsPolicy()
