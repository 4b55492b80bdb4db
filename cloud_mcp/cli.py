"""CLI for managing the cloud-mcp server."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text
import typer

app = typer.Typer(
    name="cloud-mcp",
    help="cloud-mcp server management CLI",
    add_completion=False,
)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to cloudmcp.toml config file")


def _load(config: Path | None):
    from cloud_mcp.config import load_config
    from cloud_mcp.errors import ConfigError

    try:
        return load_config(config)
    except ConfigError as e:
        console.print(f"[red]✗[/] Configuration error: {e}")
        raise typer.Exit(2) from None


@app.command()
def serve(
    config: Path | None = ConfigOption,
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Override log level"),
    skip_verify: bool = typer.Option(
        False, "--skip-verify", help="Do not verify the default account at startup"
    ),
) -> None:
    """Run the MCP server on stdio."""
    from cloud_mcp.accounts import AccountManager
    from cloud_mcp.config import LOG_LEVELS
    from cloud_mcp.errors import ConfigError
    from cloud_mcp.linode.client import LinodeError
    from cloud_mcp.observability import setup_logging
    from cloud_mcp.server import CloudMcpServer

    cfg = _load(config)
    if log_level:
        if log_level.lower() not in LOG_LEVELS:
            console.print(f"[red]✗[/] Invalid log level: {log_level}")
            raise typer.Exit(2)
        cfg.server.log_level = log_level.lower()
    logger = setup_logging(cfg)

    try:
        accounts = AccountManager.from_config(cfg)
    except ConfigError as e:
        console.print(f"[red]✗[/] Configuration error: {e}")
        raise typer.Exit(2) from None

    server = CloudMcpServer(cfg, accounts)
    try:
        asyncio.run(server.run(verify=not skip_verify))
    except LinodeError as e:
        logger.error(f"Failed to verify default account: {e}")
        raise typer.Exit(1) from None


@app.command()
def tools() -> None:
    """List every tool the server exposes."""
    from cloud_mcp.tools import build_registry

    registry = build_registry()
    table = Table(title=f"{len(registry)} tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name in registry.names():
        reg = registry.get(name)
        table.add_row(name, reg.description if reg else "")
    console.print(table)


@app.command()
def accounts(config: Path | None = ConfigOption) -> None:
    """Show configured accounts (tokens are never printed)."""
    cfg = _load(config)

    table = Table()
    table.add_column("", no_wrap=True)
    table.add_column("Account", style="cyan")
    table.add_column("Label")
    table.add_column("Token from")
    table.add_column("API URL")
    for name in sorted(cfg.linode.accounts):
        acct = cfg.linode.accounts[name]
        marker = "[green]●[/]" if name == cfg.linode.default_account else ""
        source = f"${acct.token_env}" if acct.token_env and not acct.token else "config"
        table.add_row(marker, name, acct.label, source, acct.api_url or "(default)")
    console.print(table)
    if cfg.source:
        console.print(f"[dim]Config: {cfg.source}[/dim]")


async def _check_all(cfg) -> list[tuple[str, str, str | None]]:
    from cloud_mcp.accounts import AccountManager
    from cloud_mcp.linode.client import LinodeError
    from cloud_mcp.linode.models import Profile

    manager = AccountManager.from_config(cfg)
    results: list[tuple[str, str, str | None]] = []
    try:
        for summary in manager.list():
            entry = manager.get(summary.name)
            try:
                profile = Profile.from_api(await entry.client.get("profile"))
            except LinodeError as e:
                results.append((summary.name, "", str(e)))
            else:
                results.append((summary.name, profile.username, None))
    finally:
        await manager.aclose()
    return results


@app.command()
def check(config: Path | None = ConfigOption) -> None:
    """Verify every configured account against the API (exit code 0 = all healthy)."""
    from cloud_mcp.errors import ConfigError

    cfg = _load(config)
    try:
        results = asyncio.run(_check_all(cfg))
    except ConfigError as e:
        console.print(f"[red]✗[/] Configuration error: {e}")
        raise typer.Exit(2) from None

    failed = 0
    for name, username, error in results:
        if error is None:
            console.print(f"[green]✓[/] {name}: authenticated as {username}")
        else:
            failed += 1
            console.print(f"[red]✗[/] {name}: {error}")
    if failed:
        raise typer.Exit(1)


@app.command()
def call(
    tool: str = typer.Argument(..., help="Tool name, e.g. linode_instances_list"),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object"),
    config: Path | None = ConfigOption,
) -> None:
    """Invoke a single tool against the default account and print its result."""
    from cloud_mcp.accounts import AccountManager
    from cloud_mcp.dispatcher import Dispatcher
    from cloud_mcp.errors import ConfigError
    from cloud_mcp.observability import ObservabilityContext
    from cloud_mcp.tools import build_registry

    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]✗[/] --args is not valid JSON: {e}")
        raise typer.Exit(2) from None
    if not isinstance(arguments, dict):
        console.print("[red]✗[/] --args must be a JSON object")
        raise typer.Exit(2)

    cfg = _load(config)
    try:
        manager = AccountManager.from_config(cfg)
    except ConfigError as e:
        console.print(f"[red]✗[/] Configuration error: {e}")
        raise typer.Exit(2) from None

    async def run():
        dispatcher = Dispatcher(
            build_registry(),
            manager,
            ObservabilityContext(cfg.observability),
            call_timeout=cfg.server.call_timeout,
        )
        try:
            return await dispatcher.call(tool, arguments)
        finally:
            await manager.aclose()

    result = asyncio.run(run())
    text = "\n".join(c.text for c in result.content if c.type == "text")
    if result.isError:
        console.print(Text.assemble(("✗ ", "red"), text))
        raise typer.Exit(1)
    console.print(text, markup=False, highlight=False)


def main() -> None:
    """Entry point for cloud-mcp CLI."""
    app()


if __name__ == "__main__":
    main()
