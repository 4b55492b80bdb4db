"""Async HTTP client for the Linode API v4."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from cloud_mcp import __version__

logger = logging.getLogger("cloud-mcp.linode")

DEFAULT_API_URL = "https://api.linode.com/v4"
USER_AGENT = f"cloud-mcp/{__version__}"


class LinodeError(Exception):
    """Base error for provider calls."""


class LinodeAPIError(LinodeError):
    """The API answered with an HTTP error status."""

    def __init__(self, status_code: int, reasons: list[str]):
        self.status_code = status_code
        self.reasons = reasons
        super().__init__(f"[{status_code}] {'; '.join(reasons) or 'unknown error'}")


class LinodeTransportError(LinodeError):
    """The API could not be reached (connection failure, timeout)."""


def _error_reasons(response: httpx.Response) -> list[str]:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = response.text.strip()
        return [text] if text else [response.reason_phrase]
    errors = body.get("errors") if isinstance(body, dict) else None
    if not errors:
        return [response.reason_phrase]
    reasons = []
    for err in errors:
        reason = err.get("reason", "")
        if err.get("field"):
            reason = f"{err['field']}: {reason}"
        reasons.append(reason)
    return reasons


class LinodeClient:
    """Authenticated client bound to one token and base URL.

    Safe to share between concurrent tool calls; one instance per account.
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self.page_size = page_size
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        filters: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"X-Filter": json.dumps(filters)} if filters else None
        logger.debug(f"{method} {path}")
        try:
            response = await self._http.request(
                method, path.lstrip("/"), params=params, json=json_body, headers=headers
            )
        except httpx.TimeoutException as e:
            raise LinodeTransportError(f"request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise LinodeTransportError(f"request failed: {e}") from e

        if response.status_code >= 400:
            raise LinodeAPIError(response.status_code, _error_reasons(response))
        if response.status_code == 204 or not response.content:
            return {}
        logger.debug(f"{method} {path} -> {response.status_code} ({len(response.content)} bytes)")
        return response.json()

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, json_body=body or {})

    async def put(self, path: str, body: dict[str, Any]) -> Any:
        return await self.request("PUT", path, json_body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def paginate(self, path: str, *, filters: dict[str, Any] | None = None) -> list[dict]:
        """Fetch every page of a collection endpoint and return all items."""
        items: list[dict] = []
        page = 1
        while True:
            body = await self.get(
                path, params={"page": page, "page_size": self.page_size}, filters=filters
            )
            items.extend(body.get("data", []))
            pages = body.get("pages", 1) or 1
            if page >= pages:
                return items
            page += 1

    async def aclose(self) -> None:
        await self._http.aclose()
