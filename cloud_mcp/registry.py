"""
Tool registry.

Tools are plain async functions ``(ctx, client, params) -> str`` turned into
``ToolRegistration`` objects by the ``@tool`` decorator. The registry is built
once at startup and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from cloud_mcp.decoder import decode, schema_for
from cloud_mcp.errors import (
    AccountError,
    CloudMcpError,
    InternalError,
    ParameterError,
    UpstreamError,
)
from cloud_mcp.linode.client import LinodeClient, LinodeError
from cloud_mcp.outcome import ToolOutcome

if TYPE_CHECKING:
    from cloud_mcp.accounts import AccountEntry, AccountManager
    from cloud_mcp.observability import ObservabilityContext

logger = logging.getLogger("cloud-mcp.registry")

VERBS = frozenset(
    {
        "list", "get", "create", "update", "delete", "attach",
        "detach", "boot", "shutdown", "reboot", "switch",
    }
)  # fmt: skip
_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+){2,}$")

ToolBody = Callable[["CallContext", LinodeClient, Any], Awaitable[str]]


def qualifier_for(name: str) -> str:
    """``linode_instance_get`` -> ``linode/instance_get``."""
    provider, _, rest = name.partition("_")
    return f"{provider}/{rest}" if rest else provider


@dataclass
class CallContext:
    """Everything a tool body may use for one call.

    ``account`` is the entry resolved when the call started; it is not
    re-read if the current account changes mid-call.
    """

    tool: str
    arguments: Mapping[str, Any]
    params: Any
    account: AccountEntry
    deadline: float  # event-loop time
    correlation_id: str
    accounts: AccountManager
    observability: ObservabilityContext

    @property
    def qualifier(self) -> str:
        return qualifier_for(self.tool)

    @contextmanager
    def upstream(self, message: str) -> Iterator[None]:
        """Turn provider failures inside the block into ``UpstreamError(message)``."""
        try:
            yield
        except LinodeError as e:
            service, _, tool = self.qualifier.partition("/")
            raise UpstreamError(service, tool, message, e) from e


@dataclass(frozen=True)
class ToolRegistration:
    name: str
    description: str
    params: type
    body: ToolBody = field(repr=False, compare=False)

    @property
    def qualifier(self) -> str:
        return qualifier_for(self.name)

    @property
    def input_schema(self) -> dict[str, Any]:
        return schema_for(self.params)

    def to_mcp_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def decode(self, arguments: Mapping[str, Any] | None) -> Any:
        return decode(self.params, arguments)

    async def handler(self, ctx: CallContext, client: LinodeClient) -> ToolOutcome:
        """Run the body and fold every failure into a ToolOutcome."""
        qual = self.qualifier
        try:
            text = await self.body(ctx, client, ctx.params)
        except ParameterError as e:
            return ToolOutcome.parameter(qual, e.message)
        except AccountError as e:
            return ToolOutcome.account(qual, e.message)
        except UpstreamError as e:
            return ToolOutcome.upstream(e.qualifier, e.message, e.cause)
        except LinodeError as e:
            return ToolOutcome.upstream(qual, "provider request failed", e)
        except InternalError as e:
            logger.error(
                f"{qual}: {e.message}",
                extra={"correlation_id": ctx.correlation_id, "tool": self.name},
            )
            return ToolOutcome.internal(qual, e.message)
        except CloudMcpError as e:
            return ToolOutcome.internal(qual, e.message)
        except Exception as e:
            logger.exception(
                f"Tool {self.name} crashed",
                extra={"correlation_id": ctx.correlation_id, "tool": self.name},
            )
            return ToolOutcome.internal(qual, f"unexpected {type(e).__name__}: {e}", e)
        if not text:
            return ToolOutcome.internal(qual, "handler produced an empty response")
        return ToolOutcome.ok(text)


def tool(name: str, description: str, params: type) -> Callable[[ToolBody], ToolRegistration]:
    """Decorator: register an async tool body under ``name``."""

    def wrap(body: ToolBody) -> ToolRegistration:
        return ToolRegistration(name=name, description=description, params=params, body=body)

    return wrap


def validate_tool_name(name: str) -> None:
    if not _NAME_RE.match(name):
        raise ValueError(
            f"invalid tool name {name!r}: expected <provider>_<resource>[_<sub>]_<verb>"
        )
    verb = name.rsplit("_", 1)[1]
    if verb not in VERBS:
        raise ValueError(f"invalid tool name {name!r}: verb {verb!r} not in {sorted(VERBS)}")


class ToolRegistry:
    """Read-only mapping of tool name to registration."""

    def __init__(self, registrations: list[ToolRegistration]):
        tools: dict[str, ToolRegistration] = {}
        for reg in registrations:
            validate_tool_name(reg.name)
            if reg.name in tools:
                raise ValueError(f"duplicate tool name {reg.name!r}")
            if not reg.description:
                raise ValueError(f"tool {reg.name!r} has no description")
            tools[reg.name] = reg
        self._tools: Mapping[str, ToolRegistration] = MappingProxyType(tools)

    def get(self, name: str) -> ToolRegistration | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolRegistration]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return sorted(self._tools)

    def mcp_tools(self) -> list[Tool]:
        return [reg.to_mcp_tool() for reg in self._tools.values()]
