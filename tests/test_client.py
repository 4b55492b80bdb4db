"""Tests for the Linode HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from cloud_mcp.linode.client import (
    USER_AGENT,
    LinodeAPIError,
    LinodeClient,
    LinodeTransportError,
)


def _client(fake, **kwargs) -> LinodeClient:
    return LinodeClient("test-token-123", transport=fake.transport, **kwargs)


@pytest.mark.asyncio
async def test_sends_auth_and_user_agent(fake):
    client = _client(fake)
    profile = await client.get("profile")

    assert profile["username"] == "testuser"
    request = fake.requests[-1]
    assert request.headers["Authorization"] == "Bearer test-token-123"
    assert request.headers["User-Agent"] == USER_AGENT
    assert request.url.host == "api.linode.com"
    assert request.url.path == "/v4/profile"


@pytest.mark.asyncio
async def test_custom_base_url(fake):
    client = _client(fake, base_url="http://localhost:8080/v4/")
    await client.get("/profile")
    assert str(fake.requests[-1].url).startswith("http://localhost:8080/v4/profile")


@pytest.mark.asyncio
async def test_paginate_follows_pages(fake):
    items = [{"id": i} for i in range(1, 8)]
    fake.collection("linode/instances", items, page_size=3)

    result = await _client(fake).paginate("linode/instances")

    assert [i["id"] for i in result] == list(range(1, 8))
    pages = [int(r.url.params["page"]) for r in fake.calls("GET", "linode/instances")]
    assert pages == [1, 2, 3]


@pytest.mark.asyncio
async def test_paginate_sends_page_size_and_filter(fake):
    fake.collection("linode/stackscripts", [])
    await _client(fake, page_size=25).paginate("linode/stackscripts", filters={"mine": True})

    request = fake.requests[-1]
    assert request.url.params["page_size"] == "25"
    assert json.loads(request.headers["X-Filter"]) == {"mine": True}


@pytest.mark.asyncio
async def test_api_error_reasons(fake):
    fake.route(
        "POST",
        "volumes",
        httpx.Response(
            400,
            json={"errors": [{"field": "size", "reason": "too small"}, {"reason": "bad region"}]},
        ),
    )
    with pytest.raises(LinodeAPIError) as exc:
        await _client(fake).post("volumes", {"size": 1})
    assert exc.value.status_code == 400
    assert str(exc.value) == "[400] size: too small; bad region"


@pytest.mark.asyncio
async def test_api_error_not_found(fake):
    with pytest.raises(LinodeAPIError) as exc:
        await _client(fake).get("linode/instances/999999")
    assert str(exc.value) == "[404] Not found"


@pytest.mark.asyncio
async def test_api_error_plain_text_body(fake):
    fake.route("GET", "regions", httpx.Response(502, text="Bad Gateway from proxy"))
    with pytest.raises(LinodeAPIError, match=r"\[502\] Bad Gateway from proxy"):
        await _client(fake).get("regions")


@pytest.mark.asyncio
async def test_empty_response_body(fake):
    fake.route("DELETE", "volumes/5", httpx.Response(200))
    assert await _client(fake).delete("volumes/5") == {}


@pytest.mark.asyncio
async def test_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = LinodeClient("test-token-123", transport=httpx.MockTransport(refuse))
    with pytest.raises(LinodeTransportError, match="connection refused"):
        await client.get("profile")


@pytest.mark.asyncio
async def test_timeout_is_transport_error():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = LinodeClient("test-token-123", transport=httpx.MockTransport(slow))
    with pytest.raises(LinodeTransportError, match="request timed out: GET profile"):
        await client.get("profile")
