from __future__ import annotations

from vidos.core.http.classify import FriendlyError, OpaqueError, render_error, truncate_for_error

URL = "https://example.invalid/test"


def test_render_friendly_uses_type_when_code_empty() -> None:
    error = FriendlyError(message="missing", code="", type="NotFound")
    assert render_error("GET", URL, error) == f"GET {URL} failed: missing (NotFound)"


def test_render_friendly_omits_parenthetical_without_code_or_type() -> None:
    error = FriendlyError(message="nope")
    assert render_error("POST", URL, error) == f"POST {URL} failed: nope"


def test_render_opaque_includes_body_when_present() -> None:
    error = OpaqueError(status_code=503, body="service unavailable\n")
    assert render_error("GET", URL, error) == f"GET {URL} failed: status=503 body=service unavailable"


def test_render_opaque_omits_blank_body() -> None:
    error = OpaqueError(status_code=500, body="   ")
    assert render_error("GET", URL, error) == f"GET {URL} failed: status=500"


def test_truncate_for_error_trims_and_marks_truncation() -> None:
    assert truncate_for_error("  hi  ", 10) == "hi"
    assert truncate_for_error("abcdef", 3) == "abc…"


def test_render_opaque_truncates_long_bodies_at_1024_characters() -> None:
    exact = "x" * 1024
    long_body = "y" * 1500

    assert render_error("GET", URL, OpaqueError(500, f"  {exact}  ")).endswith(f"body={exact}")
    rendered = render_error("GET", URL, OpaqueError(500, long_body))
    assert rendered.endswith("body=" + "y" * 1024 + "…")
