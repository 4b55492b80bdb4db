"""
Dispatcher - runs the per-call pipeline and emits exactly one MCP result.

    lookup -> decode -> resolve account -> invoke (under deadline) -> classify -> emit

Unknown tools and bad arguments short-circuit before any account is touched.
Deadline expiry cancels the in-flight provider request and surfaces as an
upstream failure; host cancellation propagates and emits nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import logging
import time
from typing import Any

from mcp.types import CallToolResult, TextContent

from cloud_mcp.accounts import AccountManager
from cloud_mcp.classifier import ToolCallError, classify, error_text
from cloud_mcp.errors import AccountError, ParameterError
from cloud_mcp.observability import ObservabilityContext
from cloud_mcp.outcome import ToolOutcome
from cloud_mcp.registry import CallContext, ToolRegistry, qualifier_for

logger = logging.getLogger("cloud-mcp.dispatch")

DEFAULT_CALL_TIMEOUT = 30.0


def _loggable(arguments: Mapping[str, Any]) -> dict[str, Any]:
    return {k: ("***" if k == "token" else v) for k, v in arguments.items()}


class Dispatcher:
    """Sole producer of tool-call results."""

    def __init__(
        self,
        registry: ToolRegistry,
        accounts: AccountManager,
        observability: ObservabilityContext | None = None,
        *,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
    ):
        self.registry = registry
        self.accounts = accounts
        self.obs = observability or ObservabilityContext()
        self.call_timeout = call_timeout

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None) -> CallToolResult:
        """Run one tool call.

        Returns:
            CallToolResult for ok, parameter and account outcomes.

        Raises:
            ToolCallError: for upstream and internal outcomes.
            asyncio.CancelledError: when the host cancels the call.
        """
        cid = self.obs.correlation_id()
        start = time.monotonic()
        arguments = arguments or {}
        account_name = ""

        logger.info(f"call_tool: {name}", extra={"correlation_id": cid, "tool": name})
        logger.debug(
            f"call_tool args: {_loggable(arguments)}",
            extra={"correlation_id": cid, "tool": name},
        )

        try:
            outcome, account_name = await self._run(cid, name, arguments)
        except asyncio.CancelledError:
            logger.info(f"call_tool cancelled: {name}", extra={"correlation_id": cid, "tool": name})
            raise

        latency_ms = (time.monotonic() - start) * 1000
        self.obs.record(name, latency_ms, outcome.category)
        extra: dict[str, Any] = {
            "correlation_id": cid,
            "tool": name,
            "account": account_name,
            "category": outcome.category,
            "latency_ms": round(latency_ms, 2),
        }
        if outcome.is_ok:
            logger.info(f"call_tool done: {name}", extra=extra)
        else:
            extra["error"] = error_text(outcome)
            logger.warning(f"call_tool failed: {name} ({outcome.category})", extra=extra)

        return classify(outcome)

    async def _run(
        self, cid: str, name: str, arguments: Mapping[str, Any]
    ) -> tuple[ToolOutcome, str]:
        qual = qualifier_for(name)

        registration = self.registry.get(name)
        if registration is None:
            return ToolOutcome.parameter(qual, f"unknown tool {name}"), ""

        try:
            params = registration.decode(arguments)
        except ParameterError as e:
            return ToolOutcome.parameter(qual, e.message), ""

        try:
            account = self.accounts.get_current()
        except AccountError as e:
            return ToolOutcome.account(qual, e.message), ""

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.call_timeout
        ctx = CallContext(
            tool=name,
            arguments=arguments,
            params=params,
            account=account,
            deadline=deadline,
            correlation_id=cid,
            accounts=self.accounts,
            observability=self.obs,
        )
        try:
            async with asyncio.timeout_at(deadline):
                outcome = await registration.handler(ctx, account.client)
        except TimeoutError:
            outcome = ToolOutcome.upstream(
                qual, "deadline exceeded", f"no response within {self.call_timeout:g}s"
            )
        return outcome, account.name

    async def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> CallToolResult:
        """Like ``dispatch`` but never raises ToolCallError; used by the CLI."""
        try:
            return await self.dispatch(name, arguments)
        except ToolCallError as e:
            return CallToolResult(
                content=[TextContent(type="text", text=e.error.message)],
                isError=True,
            )
