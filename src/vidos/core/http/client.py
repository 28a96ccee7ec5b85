from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from vidos.core.config import ProviderConfig
from vidos.core.logging import get_log_context, log_context, redact_headers, redact_string

from .backoff import RetryTiming
from .classify import classify_response
from .errors import APIStatusError, RequestBuildError, ResponseDecodeError, TransportError, VidosHTTPError
from .urls import GLOBAL_REGION, build_management_base_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
_DEFAULT_CONNECT_TIMEOUT_S = 10.0
_USER_AGENT = "terraform-provider-vidos"
_API_VERSION = "1.0"
_METHOD_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


@dataclass(frozen=True)
class JSONResult:
    found: bool
    status_code: int
    value: Any = None


def _build_timeout(total_s: float) -> httpx.Timeout:
    total = max(0.1, total_s)
    return httpx.Timeout(total, connect=min(_DEFAULT_CONNECT_TIMEOUT_S, total))


def _validate_target(method: str, url: str) -> None:
    if not _METHOD_TOKEN_RE.match(method):
        raise RequestBuildError(f"Request build error: invalid method {method!r}", method=method, url=url)
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise RequestBuildError(f"Invalid URL {url!r}: {exc}", method=method, url=url) from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise RequestBuildError(f"Invalid URL {url!r}: expected an absolute http(s) URL", method=method, url=url)
    try:
        httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise RequestBuildError(f"Invalid URL {url!r}: {exc}", method=method, url=url) from exc


def _encode_body(method: str, url: str, body: Any) -> bytes | None:
    if body is None:
        return None
    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True).encode("utf-8")
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise RequestBuildError(f"JSON encode error: {exc}", method=method, url=url) from exc


class VidosAPIClient:
    """Authenticated JSON client for the management API with retry and backoff.

    One instance may be shared across threads; every call keeps its attempt
    counter locally and the only shared collaborators are the httpx client and
    the injected :class:`RetryTiming`.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.Client | None = None,
        timing: RetryTiming | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.config = config
        self.http_client = http_client or httpx.Client(timeout=_build_timeout(config.http_timeout_s))
        self.timing = timing or RetryTiming()
        self.max_attempts = max(1, max_attempts)

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> "VidosAPIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def iam_base_url(self) -> str:
        return build_management_base_url("iam", GLOBAL_REGION, self.config.domain)

    def resolver_base_url(self) -> str:
        return build_management_base_url("resolver", self.config.default_region, self.config.domain)

    def verifier_base_url(self) -> str:
        return build_management_base_url("verifier", self.config.default_region, self.config.domain)

    def validator_base_url(self) -> str:
        return build_management_base_url("validator", self.config.default_region, self.config.domain)

    def authorizer_base_url(self) -> str:
        return build_management_base_url("authorizer", self.config.default_region, self.config.domain)

    def gateway_base_url(self) -> str:
        return build_management_base_url("gateway", self.config.default_region, self.config.domain)

    def do_json(
        self,
        method: str,
        url: str,
        body: Any = None,
        out: Any = None,
        *,
        cancel: threading.Event | None = None,
    ) -> Any:
        return self.execute(method, url, body, out, cancel=cancel).value

    def do_json_allow_not_found(
        self,
        method: str,
        url: str,
        body: Any = None,
        out: Any = None,
        *,
        cancel: threading.Event | None = None,
    ) -> tuple[bool, Any]:
        result = self.execute(method, url, body, out, allow_not_found=True, cancel=cancel)
        return result.found, result.value

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key_secret}",
            "Accept": "application/json",
            "User-Agent": _USER_AGENT,
            "X-Vidos-Api-Version": _API_VERSION,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _wait_before_retry(
        self,
        attempt: int,
        retry_after: str | None,
        cancel: threading.Event | None,
        **log_fields: object,
    ) -> bool:
        delay_s, proceed = self.timing.delay(attempt, retry_after, cancel)
        if not proceed:
            return False
        logger.debug(
            "Retrying request",
            extra={"extra_fields": {"attempt": attempt, "sleep_s": round(delay_s, 3), **log_fields}},
        )
        self.timing.sleep(delay_s, cancel)
        return not (cancel is not None and cancel.is_set())

    def execute(
        self,
        method: str,
        url: str,
        body: Any = None,
        out: Any = None,
        *,
        allow_not_found: bool = False,
        cancel: threading.Event | None = None,
    ) -> JSONResult:
        """Send one logical request, retrying transient failures.

        ``out`` is any type pydantic can validate (a model class, ``dict``,
        ``list[Model]``, ``Any``...). When it is None, or the response body is
        empty, the result carries no value. A 404 is returned as
        ``found=False`` when ``allow_not_found`` is set; every other failure is
        raised as a :class:`VidosHTTPError` subclass.
        """
        operation = get_log_context().get("operation") or method
        with log_context(operation=operation, resource_url=url):
            return self._send_with_retry(method, url, body, out, allow_not_found=allow_not_found, cancel=cancel)

    def _send_with_retry(
        self,
        method: str,
        url: str,
        body: Any,
        out: Any,
        *,
        allow_not_found: bool,
        cancel: threading.Event | None,
    ) -> JSONResult:
        _validate_target(method, url)
        content = _encode_body(method, url, body)
        headers = self._headers(content is not None)

        for attempt in range(1, self.max_attempts + 1):
            logger.debug(
                "Sending request",
                extra={"extra_fields": {"method": method, "url": url, "attempt": attempt, "headers": redact_headers(headers)}},
            )
            try:
                response = self.http_client.request(method, url, headers=headers, content=content)
            except httpx.TransportError as exc:
                if attempt < self.max_attempts and self._wait_before_retry(
                    attempt, None, cancel, method=method, url=url, error=exc.__class__.__name__
                ):
                    continue
                raise TransportError(
                    f"{method} {url} failed: request error: {exc.__class__.__name__}: {exc}",
                    method=method,
                    url=url,
                ) from exc

            status = response.status_code
            if not 200 <= status <= 299:
                if allow_not_found and status == 404:
                    return JSONResult(found=False, status_code=status)

                error, retryable = classify_response(status, response.content)
                if (
                    retryable
                    and attempt < self.max_attempts
                    and self._wait_before_retry(
                        attempt, response.headers.get("Retry-After"), cancel, method=method, url=url, status=status
                    )
                ):
                    continue
                raise APIStatusError(method, url, status, error, retryable=retryable)

            if out is None or not response.content:
                return JSONResult(found=True, status_code=status)

            try:
                value = TypeAdapter(out).validate_json(response.content)
            except ValidationError as exc:
                logger.debug("Response body", extra={"extra_fields": {"url": url, "body": redact_string(response.text)}})
                raise ResponseDecodeError(
                    f"{method} {url} failed: JSON decode error: {exc}",
                    method=method,
                    url=url,
                    status_code=status,
                ) from exc
            return JSONResult(found=True, status_code=status, value=value)

        raise VidosHTTPError(f"{method} {url} failed: no attempts made", method=method, url=url)
