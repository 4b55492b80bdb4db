#!/usr/bin/env python3
"""
cloud-mcp server - Model Context Protocol interface for the Linode API.

Supports stdio transport for Claude Desktop and other MCP hosts.
Run with: python -m cloud_mcp.server

The server owns no tool logic. tools/list comes straight from the registry;
tools/call goes to the dispatcher, which returns a CallToolResult for
successful and tool-level failures and raises ToolCallError (an McpError) for
provider and internal failures so the SDK answers with a JSON-RPC error.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from cloud_mcp import __version__
from cloud_mcp.accounts import AccountManager
from cloud_mcp.config import LOG_LEVELS, CloudMcpConfig, load_config
from cloud_mcp.dispatcher import Dispatcher
from cloud_mcp.errors import ConfigError
from cloud_mcp.linode.client import LinodeError
from cloud_mcp.linode.models import Profile
from cloud_mcp.observability import ObservabilityContext, setup_logging
from cloud_mcp.registry import ToolRegistry
from cloud_mcp.tools import build_registry

logger = logging.getLogger("cloud-mcp")


class CloudMcpServer:
    """cloud-mcp MCP server implementation."""

    def __init__(
        self,
        config: CloudMcpConfig,
        accounts: AccountManager,
        registry: ToolRegistry | None = None,
        obs: ObservabilityContext | None = None,
    ):
        self.config = config
        self.accounts = accounts
        self.registry = registry or build_registry()
        self.obs = obs or ObservabilityContext(config.observability)
        self.dispatcher = Dispatcher(
            self.registry,
            accounts,
            self.obs,
            call_timeout=config.server.call_timeout,
        )
        self.server = Server(config.server.name, version=__version__)

        self._register_handlers()
        logger.info(
            f"cloud-mcp server initialized ({__version__}, {len(self.registry)} tools, "
            f"{len(accounts)} account(s))"
        )

    def _register_handlers(self):
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.registry.mcp_tools()

        # Installed directly: the SDK's call_tool decorator would turn every
        # raised error into an isError result.
        async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
            result = await self.dispatcher.dispatch(req.params.name, req.params.arguments)
            return types.ServerResult(result)

        self.server.request_handlers[types.CallToolRequest] = call_tool

    async def verify_default_account(self) -> Profile:
        """Prove the current account's token works before serving.

        Raises:
            AccountError: no current account.
            LinodeError: the provider rejected the token or was unreachable.
        """
        entry = self.accounts.get_current()
        profile = Profile.from_api(await entry.client.get("profile"))
        logger.info(f"Verified account {entry.name} ({entry.label}) as {profile.username}")
        return profile

    async def run(self, verify: bool = True):
        """Run the server with stdio transport."""
        try:
            if verify:
                await self.verify_default_account()
            logger.info("Starting cloud-mcp server (stdio transport)")
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.accounts.aclose()


def main():
    """Entry point for the cloud-mcp server."""
    import argparse

    parser = argparse.ArgumentParser(description="cloud-mcp server")
    parser.add_argument(
        "--config",
        "-c",
        help="Path to cloudmcp.toml config file",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        "-l",
        choices=list(LOG_LEVELS),
        default=None,
        help="Override log level",
    )
    parser.add_argument(
        "--skip-verify",
        action="store_true",
        help="Do not verify the default account against the API at startup",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        if args.log_level:
            config.server.log_level = args.log_level
        global logger  # noqa: PLW0603
        logger = setup_logging(config)

        logger.info(f"Config loaded from {config.source or 'environment'}")
        logger.info(
            f"Linode: accounts={sorted(config.linode.accounts)}, "
            f"default={config.linode.default_account}, page_size={config.linode.page_size}"
        )
        logger.info(
            f"Observability: enabled={config.observability.enabled}, "
            f"log_format={config.observability.log_format}"
        )
        accounts = AccountManager.from_config(config)
    except ConfigError as e:
        print(f"cloud-mcp: configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    server = CloudMcpServer(config, accounts)
    try:
        asyncio.run(server.run(verify=not args.skip_verify))
    except LinodeError as e:
        logger.error(f"Failed to verify default account: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
