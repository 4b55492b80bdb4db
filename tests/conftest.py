"""Pytest fixtures for cloud-mcp.

Provider traffic never leaves the process: every account client is wired to
``FakeLinode`` through ``httpx.MockTransport``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest

from cloud_mcp.accounts import AccountEntry, AccountManager
from cloud_mcp.dispatcher import Dispatcher
from cloud_mcp.observability import ObservabilityContext
from cloud_mcp.tools import build_registry

PROFILE = {
    "uid": 12345,
    "username": "testuser",
    "email": "test@example.com",
    "restricted": False,
}

INSTANCE = {
    "id": 123456,
    "label": "test-instance-1",
    "status": "running",
    "region": "us-east",
    "type": "g6-nanode-1",
    "image": "linode/ubuntu22.04",
    "ipv4": ["192.168.1.1"],
    "ipv6": "2600:3c01::f03c:91ff:fe24:3a2f/128",
    "specs": {"vcpus": 1, "memory": 1024, "disk": 25600, "transfer": 1000},
    "backups": {"enabled": False},
    "watchdog_enabled": True,
    "tags": ["web"],
    "created": "2024-01-01T00:00:00",
    "updated": "2024-01-02T12:30:00",
}


def not_found() -> httpx.Response:
    return httpx.Response(404, json={"errors": [{"reason": "Not found"}]})


class FakeLinode:
    """Minimal in-memory Linode API.

    Routes are keyed by (method, path) with the ``/v4/`` prefix stripped. A
    route value is either a JSON body (served with 200) or a callable taking
    the request and returning a JSON body or an ``httpx.Response``; callables
    may be coroutines. ``fallback``, when set, answers requests that match no
    route.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []
        self.fallback: Any = None
        self.transport = httpx.MockTransport(self.handle)
        self.route("GET", "profile", PROFILE)

    def route(self, method: str, path: str, body: Any) -> None:
        self.routes[(method, path)] = body

    def collection(self, path: str, items: list[dict], page_size: int | None = None) -> None:
        """Serve ``items`` from a paginated GET endpoint."""

        def serve(request: httpx.Request) -> dict:
            size = page_size or int(request.url.params.get("page_size", 100))
            page = int(request.url.params.get("page", 1))
            pages = max(1, -(-len(items) // size))
            chunk = items[(page - 1) * size : page * size]
            return {"data": chunk, "page": page, "pages": pages, "results": len(items)}

        self.route("GET", path, serve)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and self._path(r) == path
        ]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/v4/").strip("/")

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, self._path(request)))
        if route is None:
            route = self.fallback
        if route is None:
            return not_found()
        body = route(request) if callable(route) else route
        if hasattr(body, "__await__"):
            body = await body
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)


@pytest.fixture
def fake() -> FakeLinode:
    return FakeLinode()


@pytest.fixture
def make_entry(fake: FakeLinode):
    def _make(name: str, label: str = "", token: str = "", api_url: str = "") -> AccountEntry:
        return AccountEntry.create(
            name,
            label or name.title(),
            token or f"token-{name}-0123456789",
            api_url,
            transport=fake.transport,
        )

    return _make


@pytest.fixture
def accounts(fake: FakeLinode, make_entry) -> AccountManager:
    return AccountManager(
        [
            make_entry("integration", "HTTP Test Integration Account"),
            make_entry("secondary", "Secondary", api_url="https://api.secondary.test/v4"),
        ],
        current="integration",
        transport=fake.transport,
    )


@pytest.fixture
def instance_data() -> dict:
    return dict(INSTANCE)


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def obs() -> ObservabilityContext:
    return ObservabilityContext()


@pytest.fixture
def dispatcher(registry, accounts, obs) -> Dispatcher:
    return Dispatcher(registry, accounts, obs, call_timeout=5.0)


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write a TOML config and keep the environment from leaking into it."""
    for var in (
        "CLOUD_MCP_CONFIG",
        "CLOUD_MCP_LOG_LEVEL",
        "CLOUD_MCP_LOG_FORMAT",
        "CLOUD_MCP_CALL_TIMEOUT",
        "CLOUD_MCP_DEFAULT_ACCOUNT",
        "LINODE_TOKEN",
        "LINODE_LABEL",
        "LINODE_API_URL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)

    def _write(text: str) -> Path:
        path = tmp_path / "cloudmcp.toml"
        path.write_text(text)
        return path

    return _write
