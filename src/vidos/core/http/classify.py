from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})
ERROR_BODY_LIMIT = 1024
TRUNCATION_MARKER = "…"


class _FriendlyBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Any = None
    type: Any = None
    message: Any = None
    action: Any = None


@dataclass(frozen=True)
class FriendlyError:
    """Structured error reported by the API itself."""

    message: str
    code: str = ""
    type: str = ""
    action: str = ""

    @property
    def code_or_type(self) -> str:
        return self.code.strip() or self.type.strip()


@dataclass(frozen=True)
class OpaqueError:
    """Error body that did not match the friendly shape."""

    status_code: int
    body: str = ""


ClassifiedError = FriendlyError | OpaqueError


def truncate_for_error(text: str, limit: int = ERROR_BODY_LIMIT) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def _decode_body(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_friendly_error(body: bytes | str) -> FriendlyError | None:
    """Return the friendly error in ``body`` or None when it is not one.

    A body is friendly only when it is a JSON object whose ``message`` is
    non-blank and at least one of ``code``/``type`` is non-blank. Fields holding
    non-string values count as empty; they do not disqualify the other fields.
    """
    try:
        parsed = _FriendlyBody.model_validate_json(body or b"null")
    except ValidationError:
        return None

    message = _text(parsed.message)
    code = _text(parsed.code)
    type_ = _text(parsed.type)
    if not message.strip() or not (code.strip() or type_.strip()):
        return None
    return FriendlyError(message=message, code=code, type=type_, action=_text(parsed.action))


def classify_response(status_code: int, body: bytes | str) -> tuple[ClassifiedError, bool]:
    retryable = status_code in RETRYABLE_STATUS_CODES
    friendly = parse_friendly_error(body)
    if friendly is not None:
        return friendly, retryable
    return OpaqueError(status_code=status_code, body=_decode_body(body)), retryable


def render_error(method: str, url: str, error: ClassifiedError) -> str:
    if isinstance(error, FriendlyError):
        code = error.code_or_type
        if code:
            return f"{method} {url} failed: {error.message} ({code})"
        return f"{method} {url} failed: {error.message}"
    if error.body.strip():
        return f"{method} {url} failed: status={error.status_code} body={truncate_for_error(error.body)}"
    return f"{method} {url} failed: status={error.status_code}"
