"""Configuration loader - reads cloudmcp.toml with ENV overrides."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any, cast

import httpx

from cloud_mcp.errors import ConfigError

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def check_api_url(url: str) -> None:
    """Reject base URLs that are not absolute http(s) URLs with a host."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigError(f"malformed api url {url!r}: {e}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigError(f"malformed api url {url!r}: expected http(s)://host[/path]")


@dataclass
class ServerConfig:
    """MCP server settings."""

    name: str = "cloud-mcp"
    log_level: str = "info"
    call_timeout: float = 30.0  # seconds, per tool call

    def validate(self) -> None:
        if self.log_level.lower() not in LOG_LEVELS:
            raise ConfigError(f"Invalid log level: {self.log_level}")
        if self.call_timeout <= 0:
            raise ConfigError("call_timeout must be positive")


@dataclass
class ObservabilityConfig:
    """Logging and metrics settings."""

    enabled: bool = True
    log_format: str = "text"  # "json" | "text"
    include_correlation_id: bool = True

    def validate(self) -> None:
        if self.log_format not in ("json", "text"):
            raise ConfigError(f"Invalid log format: {self.log_format}")


@dataclass
class AccountConfig:
    """One Linode account. The token comes from ``token`` or the ``token_env`` variable."""

    name: str
    label: str = ""
    token: str = field(default="", repr=False)
    token_env: str = ""
    api_url: str = ""

    def resolve_token(self) -> str:
        if self.token:
            return self.token
        if self.token_env:
            return os.getenv(self.token_env, "")
        return ""

    def validate(self) -> None:
        if not self.name:
            raise ConfigError("account name must not be empty")
        if not self.resolve_token():
            source = f" (env {self.token_env} is unset)" if self.token_env else ""
            raise ConfigError(f"account {self.name}: no token configured{source}")
        if self.api_url:
            check_api_url(self.api_url)


@dataclass
class LinodeConfig:
    """Linode provider settings."""

    default_account: str = ""
    request_timeout: float = 30.0
    page_size: int = 100
    accounts: dict[str, AccountConfig] = field(default_factory=dict)

    def validate(self) -> None:
        if not self.accounts:
            raise ConfigError("no Linode accounts configured")
        if self.default_account not in self.accounts:
            raise ConfigError(f"default account {self.default_account!r} is not configured")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if not (1 <= self.page_size <= 500):
            raise ConfigError(f"Invalid page_size: {self.page_size}")
        for account in self.accounts.values():
            account.validate()


@dataclass
class CloudMcpConfig:
    """Root configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    linode: LinodeConfig = field(default_factory=LinodeConfig)
    source: Path | None = None

    def validate(self) -> None:
        self.server.validate()
        self.observability.validate()
        self.linode.validate()


def _env_float(name: str, current: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return current
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _apply_env_overrides(cfg: CloudMcpConfig) -> CloudMcpConfig:
    """Apply environment variable overrides. ENV beats TOML."""
    if os.getenv("CLOUD_MCP_LOG_LEVEL"):
        cfg.server.log_level = os.getenv("CLOUD_MCP_LOG_LEVEL", cfg.server.log_level)
    if os.getenv("CLOUD_MCP_LOG_FORMAT"):
        cfg.observability.log_format = os.getenv(
            "CLOUD_MCP_LOG_FORMAT", cfg.observability.log_format
        )
    cfg.server.call_timeout = _env_float("CLOUD_MCP_CALL_TIMEOUT", cfg.server.call_timeout)
    if os.getenv("CLOUD_MCP_DEFAULT_ACCOUNT"):
        cfg.linode.default_account = os.getenv(
            "CLOUD_MCP_DEFAULT_ACCOUNT", cfg.linode.default_account
        )

    # Single-account setup straight from the environment
    if not cfg.linode.accounts and os.getenv("LINODE_TOKEN"):
        cfg.linode.accounts["default"] = AccountConfig(
            name="default",
            label=os.getenv("LINODE_LABEL", "Default"),
            token_env="LINODE_TOKEN",
            api_url=os.getenv("LINODE_API_URL", ""),
        )

    if not cfg.linode.default_account and len(cfg.linode.accounts) == 1:
        cfg.linode.default_account = next(iter(cfg.linode.accounts))

    return cfg


def _find_config_file(config_path: str | Path | None) -> Path:
    if config_path is not None:
        return Path(config_path)
    if os.getenv("CLOUD_MCP_CONFIG"):
        return Path(cast(str, os.getenv("CLOUD_MCP_CONFIG")))
    xdg = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    user_config = Path(xdg) / "cloudmcp" / "config.toml"
    if user_config.exists():
        return user_config
    return Path("cloudmcp.toml")


_TYPE_NAMES = {str: "a string", bool: "a boolean", int: "an integer", float: "a number"}


def _typed(table: dict[str, Any], section: str, key: str, default: Any, kind: type) -> Any:
    """Read ``key`` from a TOML table, rejecting values of the wrong type."""
    if key not in table:
        return default
    value = table[key]
    # TOML booleans are ints in Python; integers are acceptable numbers.
    if kind is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise ConfigError(f"[{section}] {key} must be {_TYPE_NAMES[kind]}, got {value!r}")
    return float(value) if kind is float else value


def _table(data: dict[str, Any], key: str, section: str = "") -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{section or key}] must be a table")
    return value


def _parse_accounts(tables: dict[str, Any]) -> dict[str, AccountConfig]:
    accounts = {}
    for name, acct in tables.items():
        section = f"linode.accounts.{name}"
        if not isinstance(acct, dict):
            raise ConfigError(f"[{section}] must be a table")
        accounts[name] = AccountConfig(
            name=name,
            label=_typed(acct, section, "label", name, str),
            token=_typed(acct, section, "token", "", str),
            token_env=_typed(acct, section, "token_env", "", str),
            api_url=_typed(acct, section, "api_url", "", str),
        )
    return accounts


def load_config(config_path: str | Path | None = None) -> CloudMcpConfig:
    """
    Load config from TOML with ENV overrides.

    Precedence: ENV → TOML → defaults

    Args:
        config_path: Path to a TOML file. If None, searches:
            1. CLOUD_MCP_CONFIG env var
            2. $XDG_CONFIG_HOME/cloudmcp/config.toml
            3. ./cloudmcp.toml

    Returns:
        CloudMcpConfig with merged, validated settings.

    Raises:
        ConfigError: when the merged configuration is unusable.
    """
    path = _find_config_file(config_path)
    if config_path is not None and not path.exists():
        raise ConfigError(f"config file not found: {path}")

    cfg = CloudMcpConfig()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML in {path}: {e}") from e
        cfg.source = path

        srv = _table(data, "server")
        cfg.server.name = _typed(srv, "server", "name", cfg.server.name, str)
        cfg.server.log_level = _typed(srv, "server", "log_level", cfg.server.log_level, str)
        cfg.server.call_timeout = _typed(
            srv, "server", "call_timeout", cfg.server.call_timeout, float
        )

        obs = _table(data, "observability")
        cfg.observability.enabled = _typed(
            obs, "observability", "enabled", cfg.observability.enabled, bool
        )
        cfg.observability.log_format = _typed(
            obs, "observability", "log_format", cfg.observability.log_format, str
        )
        cfg.observability.include_correlation_id = _typed(
            obs,
            "observability",
            "include_correlation_id",
            cfg.observability.include_correlation_id,
            bool,
        )

        linode = _table(data, "linode")
        cfg.linode.default_account = _typed(
            linode, "linode", "default_account", cfg.linode.default_account, str
        )
        cfg.linode.request_timeout = _typed(
            linode, "linode", "request_timeout", cfg.linode.request_timeout, float
        )
        cfg.linode.page_size = _typed(linode, "linode", "page_size", cfg.linode.page_size, int)
        cfg.linode.accounts = _parse_accounts(_table(linode, "accounts", "linode.accounts"))

    cfg = _apply_env_overrides(cfg)

    cfg.validate()

    return cfg
