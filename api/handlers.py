"""FastAPI route handlers."""

from fastapi import Request, Response

from core.router import RouteDecider
from services.routing_service import request_path


async def handle_request(request: Request, decider: RouteDecider) -> Response:
    """Relay API paths to the backend; hand everything else to the static fallback."""
    decision = decider.decide(request_path(request))
    if decision.route == "api":
        return await request.app.state.relay_service.handle(request)
    return await request.app.state.static_fallback(request)
