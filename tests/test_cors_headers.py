import dataclasses

import pytest
from fastapi.responses import JSONResponse

from core.cors import DEFAULT_CORS_POLICY, CorsPolicy
from core.headers import HeaderBuilder, method_has_body


def test_policy_headers():
    assert DEFAULT_CORS_POLICY.headers() == {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
    }


def test_policy_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CORS_POLICY.allow_origin = "https://evil.test"


def test_merge_overwrites_case_insensitively_and_keeps_others():
    original = [
        ("content-type", "text/plain"),
        ("access-control-allow-origin", "https://elsewhere.test"),
        ("set-cookie", "a=1"),
        ("set-cookie", "b=2"),
    ]

    merged = CorsPolicy().merge(original)

    assert ("content-type", "text/plain") in merged
    assert [v for k, v in merged if k.lower() == "set-cookie"] == ["a=1", "b=2"]
    assert [v for k, v in merged if k.lower() == "access-control-allow-origin"] == ["*"]
    assert original[1] == ("access-control-allow-origin", "https://elsewhere.test")


def test_apply_stamps_response():
    response = DEFAULT_CORS_POLICY.apply(JSONResponse({"error": "x"}, status_code=500))

    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-type"] == "application/json"


def test_forward_headers_drop_hop_by_hop():
    raw = [
        (b"host", b"relay.test"),
        (b"connection", b"keep-alive"),
        (b"transfer-encoding", b"chunked"),
        (b"authorization", b"Token abc"),
        (b"content-length", b"3"),
        (b"accept", b"*/*"),
    ]

    forwarded = HeaderBuilder().build_forward_headers(raw, "POST")

    assert forwarded == [
        ("authorization", "Token abc"),
        ("content-length", "3"),
        ("accept", "*/*"),
    ]


def test_forward_headers_drop_content_length_for_get():
    forwarded = HeaderBuilder().build_forward_headers([("Content-Length", "4")], "GET")
    assert forwarded == []


def test_response_headers_keep_duplicates():
    raw = [(b"set-cookie", b"a=1"), (b"set-cookie", b"b=2"), (b"connection", b"close")]
    assert HeaderBuilder().build_response_headers(raw) == [
        ("set-cookie", "a=1"),
        ("set-cookie", "b=2"),
    ]


@pytest.mark.parametrize(
    "method, expected",
    [("GET", False), ("head", False), ("POST", True), ("PUT", True), ("DELETE", True)],
)
def test_method_has_body(method, expected):
    assert method_has_body(method) is expected
