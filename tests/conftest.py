from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import pytest

from vidos.core.config import ProviderConfig
from vidos.core.http import RetryTiming, VidosAPIClient

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clear_vidos_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VIDOS_API_KEY", "VIDOS_REGION", "VIDOS_DOMAIN", "VIDOS_HTTP_TIMEOUT_S", "VIDOS_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VIDOS_LOG_TO_FILE", "off")


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def timing(sleeps: list[float]) -> RetryTiming:
    return RetryTiming(
        clock=lambda: FIXED_NOW,
        sleep=lambda seconds, cancel=None: sleeps.append(seconds),
        rand=lambda: 0.5,
    )


@pytest.fixture
def make_client(timing: RetryTiming) -> Callable[[Callable[[httpx.Request], httpx.Response]], VidosAPIClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> VidosAPIClient:
        config = ProviderConfig(domain="example.com", default_region="eu", api_key_secret="secret")
        return VidosAPIClient(config, http_client=httpx.Client(transport=httpx.MockTransport(handler)), timing=timing)

    return factory
