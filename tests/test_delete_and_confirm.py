from __future__ import annotations

import logging
import threading

import httpx
import pytest

from vidos.core.http import APIStatusError, DeletionUnconfirmedError, delete_and_confirm

URL = "https://resolver.management.eu.example.com/instances/i-1"


def _scripted(get_statuses: list[int], calls: list[str], delete_status: int = 204):
    remaining = list(get_statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        if request.method == "DELETE":
            return httpx.Response(delete_status)
        status = remaining.pop(0) if remaining else 200
        if status == 200:
            return httpx.Response(200, json={"instance": {"resourceId": "i-1"}})
        return httpx.Response(status, json={"code": "NotFound", "message": "gone"})

    return handler


def test_delete_confirmed_once_resource_disappears(make_client, sleeps) -> None:
    calls: list[str] = []

    result = delete_and_confirm(make_client(_scripted([200, 200, 404], calls)), URL)

    assert result.found is True
    assert result.status_code == 204
    assert calls == ["DELETE", "GET", "GET", "GET"]
    assert len(sleeps) == 2


def test_delete_of_missing_resource_still_confirms(make_client, sleeps) -> None:
    calls: list[str] = []

    result = delete_and_confirm(make_client(_scripted([404], calls, delete_status=404)), URL)

    assert result.found is False
    assert calls == ["DELETE", "GET"]
    assert sleeps == []


def test_resource_still_visible_after_bound_is_unconfirmed(make_client, sleeps) -> None:
    calls: list[str] = []

    with pytest.raises(DeletionUnconfirmedError) as exc_info:
        delete_and_confirm(make_client(_scripted([200] * 8, calls)), URL)

    assert calls.count("GET") == 8
    assert len(sleeps) == 7
    assert exc_info.value.attempts == 8
    assert "still visible after 8 attempts" in str(exc_info.value)


def test_failed_delete_skips_confirmation(make_client) -> None:
    calls: list[str] = []

    with pytest.raises(APIStatusError):
        delete_and_confirm(make_client(_scripted([], calls, delete_status=409)), URL)

    assert calls == ["DELETE"]


def test_cancellation_during_confirmation_is_best_effort_success(make_client, sleeps, caplog) -> None:
    cancel = threading.Event()
    calls: list[str] = []
    scripted = _scripted([200] * 8, calls)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            cancel.set()
        return scripted(request)

    with caplog.at_level(logging.WARNING, logger="vidos.core.http.deletion"):
        result = delete_and_confirm(make_client(handler), URL, cancel=cancel)

    assert result.found is True
    assert calls == ["DELETE", "GET"]
    assert sleeps == []
    assert "not confirmed before cancellation" in caplog.text
