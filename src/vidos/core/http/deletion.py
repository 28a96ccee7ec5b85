from __future__ import annotations

import logging
import threading

from vidos.core.logging import log_context

from .client import JSONResult, VidosAPIClient
from .errors import DeletionUnconfirmedError

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_ATTEMPTS = 8


def delete_and_confirm(
    client: VidosAPIClient,
    url: str,
    *,
    cancel: threading.Event | None = None,
    max_attempts: int = DEFAULT_CONFIRM_ATTEMPTS,
) -> JSONResult:
    """DELETE ``url`` and poll it with GET until the backend reports 404.

    Deletes are eventually consistent; returning only once the resource is gone
    keeps dependent deletes from racing. If ``cancel`` stops the wait the delete
    is reported as successful since the backend already accepted it.
    """
    with log_context(operation="delete_and_confirm", resource_url=url):
        deleted = client.execute("DELETE", url, allow_not_found=True, cancel=cancel)

        for attempt in range(1, max_attempts + 1):
            check = client.execute("GET", url, allow_not_found=True, cancel=cancel)
            if not check.found:
                logger.debug("Deletion confirmed", extra={"extra_fields": {"attempt": attempt}})
                return JSONResult(found=deleted.found, status_code=deleted.status_code)

            delay_s, proceed = client.timing.delay(attempt, cancel=cancel)
            if not proceed:
                logger.warning(
                    "Deletion accepted but not confirmed before cancellation",
                    extra={"extra_fields": {"url": url, "attempt": attempt}},
                )
                return JSONResult(found=deleted.found, status_code=deleted.status_code)
            if attempt == max_attempts:
                break
            client.timing.sleep(delay_s, cancel)

        raise DeletionUnconfirmedError(url, max_attempts)
