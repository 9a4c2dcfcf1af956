"""Header filtering for relayed requests and responses."""

from collections.abc import Iterable

HOP_BY_HOP = frozenset(
    {
        "host",
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})

RawHeaders = Iterable[tuple[bytes, bytes]] | Iterable[tuple[str, str]]


def _text(value: bytes | str) -> str:
    return value.decode("latin-1") if isinstance(value, bytes) else value


def method_has_body(method: str) -> bool:
    """Whether a request body is relayed for this method."""
    return method.upper() not in BODYLESS_METHODS


class HeaderBuilder:
    """Build the header lists sent upstream and returned downstream."""

    def build_forward_headers(self, headers: RawHeaders, method: str) -> list[tuple[str, str]]:
        """Pass through every request header except hop-by-hop ones.

        Bodyless methods also lose their content-length.
        """
        drop = HOP_BY_HOP if method_has_body(method) else HOP_BY_HOP | {"content-length"}
        forwarded: list[tuple[str, str]] = []
        for key, value in headers:
            key, value = _text(key), _text(value)
            if key.lower() not in drop:
                forwarded.append((key, value))
        return forwarded

    def build_response_headers(self, headers: RawHeaders) -> list[tuple[str, str]]:
        """Pass through backend response headers, duplicates included."""
        return [
            (_text(key), _text(value))
            for key, value in headers
            if _text(key).lower() not in HOP_BY_HOP
        ]
