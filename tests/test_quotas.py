# tests/test_quotas.py

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from app import quotas
from app.usage_db import get_window_count, init_db

pytestmark = pytest.mark.unit


def _make_request(client_ip: str, forwarded: str | None = None) -> Request:
    headers = []
    if forwarded is not None:
        headers.append((b"x-forwarded-for", forwarded.encode("utf-8")))
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/identify",
        "headers": headers,
        "client": (client_ip, 1234),
    }
    return Request(scope)


def test_get_client_ip_uses_hop_appended_by_trusted_proxy() -> None:
    """
    ARRANGE: client-written forwarded entry followed by the proxy's entry
    ACT:     resolve the client IP
    ASSERT:  returns the last forwarded address
    """
    request = _make_request("10.0.0.1", forwarded="203.0.113.7, 198.51.100.9")

    assert quotas.get_client_ip(request) == "198.51.100.9"


def test_enforce_rate_limit_ignores_spoofed_forwarded_entries(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """
    ARRANGE: limit of two, client varying its own forwarded entry each call
    ACT:     enforce the limit three times
    ASSERT:  third call raises 429 because the proxy-appended hop is constant
    """
    init_db()
    monkeypatch.setattr(quotas, "RATE_LIMIT_MAX_REQUESTS", 2)

    for i in range(2):
        quotas.enforce_rate_limit(
            _make_request("10.0.0.1", forwarded=f"1.2.3.{i}, 192.0.2.77"),
        )

    with pytest.raises(HTTPException) as exc_info:
        quotas.enforce_rate_limit(
            _make_request("10.0.0.1", forwarded="1.2.3.99, 192.0.2.77"),
        )

    assert exc_info.value.status_code == 429


def test_get_client_ip_falls_back_to_peer() -> None:
    """
    ARRANGE: request without forwarding headers
    ACT:     resolve the client IP
    ASSERT:  returns the socket peer address
    """
    request = _make_request("198.51.100.4")

    assert quotas.get_client_ip(request) == "198.51.100.4"


def test_current_window_groups_by_window_length(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    ARRANGE: 900 second windows
    ACT:     compute windows either side of a boundary
    ASSERT:  timestamps inside one window share a key
    """
    monkeypatch.setattr(quotas, "RATE_LIMIT_WINDOW_SECONDS", 900)

    assert quotas.current_window(900) == quotas.current_window(1799)
    assert quotas.current_window(1800) == quotas.current_window(900) + 1


def test_enforce_rate_limit_counts_requests() -> None:
    """
    ARRANGE: fresh client
    ACT:     enforce the rate limit once
    ASSERT:  the window counter is incremented
    """
    init_db()
    request = _make_request("192.0.2.10")

    quotas.enforce_rate_limit(request)

    assert get_window_count("ip:192.0.2.10", quotas.current_window()) == 1


def test_enforce_rate_limit_rejects_over_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    ARRANGE: limit of two requests per window
    ACT:     enforce the limit three times
    ASSERT:  third call raises 429
    """
    init_db()
    monkeypatch.setattr(quotas, "RATE_LIMIT_MAX_REQUESTS", 2)
    request = _make_request("192.0.2.20")

    quotas.enforce_rate_limit(request)
    quotas.enforce_rate_limit(request)

    with pytest.raises(HTTPException) as exc_info:
        quotas.enforce_rate_limit(request)

    assert exc_info.value.status_code == 429
    assert exc_info.value.detail == quotas.RATE_LIMIT_MESSAGE
