from .backoff import RetryTiming, backoff_seconds, parse_retry_after
from .classify import ClassifiedError, FriendlyError, OpaqueError, classify_response, render_error, truncate_for_error
from .client import JSONResult, VidosAPIClient
from .deletion import delete_and_confirm
from .errors import (
    APIStatusError,
    DeletionUnconfirmedError,
    RequestBuildError,
    ResponseDecodeError,
    TransportError,
    VidosHTTPError,
)
from .urls import build_management_base_url, join_url, join_url_with_query

__all__ = [
    "RetryTiming",
    "backoff_seconds",
    "parse_retry_after",
    "ClassifiedError",
    "FriendlyError",
    "OpaqueError",
    "classify_response",
    "render_error",
    "truncate_for_error",
    "JSONResult",
    "VidosAPIClient",
    "delete_and_confirm",
    "APIStatusError",
    "DeletionUnconfirmedError",
    "RequestBuildError",
    "ResponseDecodeError",
    "TransportError",
    "VidosHTTPError",
    "build_management_base_url",
    "join_url",
    "join_url_with_query",
]
