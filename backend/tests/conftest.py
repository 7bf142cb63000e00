from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

TEST_API_KEY = "test-steam-key"
TEST_TURNSTILE_SECRET = "test-turnstile-secret"

os.environ["STEAM_API_KEY"] = TEST_API_KEY
os.environ["STEAM_SYNC_ENV"] = "development"
os.environ["ENV_FILE"] = str(Path(__file__).parent / ".env.missing")
os.environ.pop("TURNSTILE_SECRET_KEY", None)

from steam_sync.config import Settings, get_settings  # noqa: E402
from steam_sync.telemetry import clear_listeners  # noqa: E402


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {"STEAM_API_KEY": TEST_API_KEY}
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))


class FakeUpstream:
    """Routes outbound calls to canned responses by URL path and records them."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, path_suffix: str, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        if isinstance(response, httpx.Response):
            self.routes[path_suffix] = lambda _request, canned=response: canned
        else:
            self.routes[path_suffix] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, responder in self.routes.items():
            if request.url.path.endswith(suffix):
                return responder(request)
        return httpx.Response(404, text="no route")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def last(self, path_suffix: str) -> Optional[httpx.Request]:
        for request in reversed(self.requests):
            if request.url.path.endswith(path_suffix):
                return request
        return None


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture(autouse=True)
def _reset_state():
    get_settings.cache_clear()
    clear_listeners()
    yield
    get_settings.cache_clear()
    clear_listeners()
