"""
Error taxonomy for cloud-mcp.

Every failure a tool call can surface belongs to exactly one category:
parameter, account, upstream or internal. Handlers raise these exceptions;
the tool wrapper turns them into ToolOutcome values and the classifier
decides which MCP surface carries them.
"""

from __future__ import annotations


class CloudMcpError(Exception):
    """Base error for tool calls."""

    category: str = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParameterError(CloudMcpError):
    """Tool arguments are missing, ill-typed or out of range."""

    category = "parameter"


class AccountError(CloudMcpError):
    """No usable account (none configured, unknown name, duplicate add)."""

    category = "account"


class UpstreamError(CloudMcpError):
    """The provider API failed or could not be reached."""

    category = "upstream"

    def __init__(
        self, service: str, tool: str, message: str, cause: BaseException | str | None = None
    ):
        super().__init__(message)
        self.service = service
        self.tool = tool
        self.cause = cause

    @property
    def qualifier(self) -> str:
        return f"{self.service}/{self.tool}"

    def __str__(self) -> str:
        if self.cause is None:
            return f"[{self.qualifier}] {self.message}"
        return f"[{self.qualifier}] {self.message}: {self.cause}"


class InternalError(CloudMcpError):
    """Programmer error inside a handler."""

    category = "internal"


class ConfigError(ValueError):
    """Invalid configuration; raised at startup only."""
