from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
operation_var: ContextVar[str | None] = ContextVar("operation", default=None)
resource_url_var: ContextVar[str | None] = ContextVar("resource_url", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "correlation_id": correlation_id_var,
    "operation": operation_var,
    "resource_url": resource_url_var,
}


def set_context(**kwargs: str | None) -> dict[str, Token[str | None]]:
    """Set the given fields; None leaves the enclosing value in place."""
    tokens: dict[str, Token[str | None]] = {}
    for key, value in kwargs.items():
        var = _CONTEXT_VARS.get(key)
        if var is None or value is None:
            continue
        tokens[key] = var.set(value)
    return tokens


def reset_context(tokens: dict[str, Token[str | None]]) -> None:
    for key, token in tokens.items():
        var = _CONTEXT_VARS.get(key)
        if var is not None:
            var.reset(token)


@contextmanager
def log_context(
    correlation_id: str | None = None,
    operation: str | None = None,
    resource_url: str | None = None,
) -> Iterator[None]:
    tokens = set_context(correlation_id=correlation_id, operation=operation, resource_url=resource_url)
    try:
        yield
    finally:
        reset_context(tokens)


def get_log_context() -> dict[str, str]:
    values = {key: var.get() for key, var in _CONTEXT_VARS.items()}
    return {key: value for key, value in values.items() if value is not None}
