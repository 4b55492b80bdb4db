"""Server introspection tools: version and metrics."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata
import json
import platform
from typing import Any

from cloud_mcp import __version__
from cloud_mcp import decoder as p
from cloud_mcp.linode.client import DEFAULT_API_URL, LinodeClient
from cloud_mcp.registry import CallContext, tool


@dataclass(frozen=True)
class VersionParams:
    format: str = p.string("Output format", choices=("text", "json"), default="text")


def _package_version(name: str) -> str:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return "unknown"


def version_info(ctx: CallContext) -> dict[str, Any]:
    # Imported here: this module is itself part of the tool package.
    from cloud_mcp.tools import all_registrations

    return {
        "version": __version__,
        "python": platform.python_version(),
        "platform": f"{platform.system().lower()}/{platform.machine()}",
        "mcp": _package_version("mcp"),
        "httpx": _package_version("httpx"),
        "api": DEFAULT_API_URL,
        "tools": len(all_registrations()),
        "accounts": len(ctx.accounts),
        "current_account": f"{ctx.account.name} ({ctx.account.label})",
    }


@tool(
    "cloudmcp_version_get",
    "Get cloud-mcp version, runtime and current account information.",
    VersionParams,
)
async def version_get(ctx: CallContext, client: LinodeClient, params: VersionParams) -> str:
    info = version_info(ctx)
    if params.format == "json":
        return json.dumps(info, indent=2)
    return (
        "cloud-mcp Version Information:\n\n"
        f"Version: {info['version']}\n"
        f"API: {info['api']}\n"
        f"Python: {info['python']}\n"
        f"Platform: {info['platform']}\n"
        f"MCP SDK: {info['mcp']}\n"
        f"httpx: {info['httpx']}\n\n"
        f"Tools: {info['tools']}\n"
        f"Configured Accounts: {info['accounts']}\n"
        f"Current Account: {info['current_account']}"
    )


@tool("cloudmcp_metrics_get", "Get per-tool call metrics for this server process.", p.NoParams)
async def metrics_get(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    if not ctx.observability.enabled:
        return (
            "Observability is disabled in config (observability.enabled = false); "
            "no metrics are collected."
        )
    return json.dumps(ctx.observability.get_stats(), indent=2)


TOOLS = [version_get, metrics_get]
