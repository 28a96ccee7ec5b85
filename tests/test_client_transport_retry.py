from __future__ import annotations

import threading

import httpx
import pytest

from vidos.core.http import TransportError

URL = "https://example.com/test"


def test_transport_error_retried_up_to_cap_then_surfaced(make_client, sleeps) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("network down", request=request)

    with pytest.raises(TransportError) as exc_info:
        make_client(handler).execute("GET", URL)

    assert calls["count"] == 5
    assert len(sleeps) == 4
    assert "GET https://example.com/test failed" in str(exc_info.value)
    assert "network down" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_transport_then_retryable_status_share_one_attempt_counter(make_client, sleeps) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] % 2:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(TransportError):
        make_client(handler).execute("GET", URL)

    assert calls["count"] == 5
    assert len(sleeps) == 4


def test_cancelled_operation_stops_without_sleeping(make_client, sleeps) -> None:
    cancel = threading.Event()
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        cancel.set()
        raise httpx.ConnectError("network down", request=request)

    with pytest.raises(TransportError):
        make_client(handler).execute("GET", URL, cancel=cancel)

    assert calls["count"] == 1
    assert sleeps == []
