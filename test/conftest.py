from __future__ import annotations

import os
from typing import Tuple

import httpx
import pytest

# Settings are read when the application modules are first imported
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH__JWT_SECRET", "test-secret")
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")
os.environ.setdefault("MONITORING__LOGFIRE_ENABLED", "false")

# Relative URLs are what ASGITransport sees for in-process requests;
# TestClient WebSocket sessions go through httpx with ws://testserver
LOCAL_URL_PREFIXES: Tuple[str, ...] = ("http://test", "ws://test", "http://localhost", "http://127.0.0.1", "/")


def _check_local(url) -> None:
    if not str(url).startswith(LOCAL_URL_PREFIXES):
        raise RuntimeError(f"Tests must not reach the network, blocked request to {url}")


@pytest.fixture(autouse=True)
def _block_external_http(monkeypatch: pytest.MonkeyPatch):
    """Fail any httpx request that would leave the test process."""
    sync_request = httpx.Client.request
    async_request = httpx.AsyncClient.request

    def guarded_sync(self, method, url, *args, **kwargs):
        _check_local(url)
        return sync_request(self, method, url, *args, **kwargs)

    async def guarded_async(self, method, url, *args, **kwargs):
        _check_local(url)
        return await async_request(self, method, url, *args, **kwargs)

    monkeypatch.setattr(httpx.Client, "request", guarded_sync)
    monkeypatch.setattr(httpx.AsyncClient, "request", guarded_async)
