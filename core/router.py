"""Request routing logic - determines API relay vs static assets."""

from dataclasses import dataclass


def is_api_path(path: str, public_prefix: str) -> bool:
    """Return True when the path belongs to the API surface."""
    return path.startswith(public_prefix)


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision for a request."""

    route: str


class RouteDecider:
    """Decide whether a request is relayed to the backend or served statically."""

    def __init__(self, public_prefix: str = "/api"):
        self.public_prefix = public_prefix

    def decide(self, path: str) -> RouteDecision:
        """Return the route based on the path prefix."""
        if is_api_path(path, self.public_prefix):
            return RouteDecision(route="api")
        return RouteDecision(route="static")
