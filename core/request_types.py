"""Shared request data types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for a backend request."""

    method: str
    target_url: str
    headers: list[tuple[str, str]]
    has_body: bool
