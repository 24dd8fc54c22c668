"""Shared fixtures: isolated settings and an httpx MockTransport recorder."""

import json

import httpx
import pytest

from adapters.paperless_api import PaperlessApiClient
from core.config import AppSettings

BASE_URL = "https://paperless.example.com"
TOKEN = "test-token-123"

_ENV_VARS = (
    "PAPERLESS_URL",
    "PAPERLESS_TOKEN",
    "PAPERLESS_AUTH_SCHEME",
    "PAPERLESS_REQUEST_TIMEOUT_SECONDS",
    "PAPERLESS_LOG_LEVEL",
    "PAPERLESS_MCP_TRANSPORT",
    "PAPERLESS_MCP_HOST",
    "PAPERLESS_MCP_PORT",
    "TRANSPORT",
    "HOST",
    "PORT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides) -> AppSettings:
    values = {"url": BASE_URL, "token": TOKEN}
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def unconfigured_settings():
    return AppSettings(_env_file=None)


class Recorder:
    """Collects requests seen by a MockTransport and replies via `handler`."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def make_client(settings):
    """Factory: `make_client(handler)` -> (client, recorder)."""

    def _make(handler, client_settings=None):
        recorder = Recorder(handler)
        client = PaperlessApiClient(
            client_settings or settings, transport=httpx.MockTransport(recorder)
        )
        return client, recorder

    return _make
