from __future__ import annotations

import re
from collections.abc import Mapping

_SECRET_HEADER_RE = re.compile(r"(AUTHORIZATION|TOKEN|KEY|SECRET)", re.IGNORECASE)
_SECRET_VALUE_RE = re.compile(r"(?i)(token|api_key|secret)(\"?\s*[=:]\s*\"?)([^\s,;\"]+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([^\s\"]+)")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return redacted


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {key: ("***" if _SECRET_HEADER_RE.search(key) else value) for key, value in headers.items()}
