"""
Error classifier: the only place a ToolOutcome becomes an MCP surface.

- ok                  -> CallToolResult(isError=False)
- parameter, account  -> CallToolResult(isError=True); the host fixes arguments
                         or switches account and carries on
- upstream, internal  -> failed MCP call (ToolCallError); the host retries or
                         escalates
"""

from __future__ import annotations

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, CallToolResult, ErrorData, TextContent

from cloud_mcp.outcome import OutcomeKind, ToolOutcome

# JSON-RPC server-defined error range; used for provider failures.
UPSTREAM_ERROR = -32000


class ToolCallError(McpError):
    """A tool call that fails at the MCP protocol level."""

    def __init__(self, code: int, message: str, category: str):
        super().__init__(ErrorData(code=code, message=message, data={"category": category}))
        self.category = category


def _text_result(text: str, is_error: bool) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def error_text(outcome: ToolOutcome) -> str:
    """Render the user-visible error string for a failed outcome."""
    qual = outcome.qualifier
    if outcome.kind is OutcomeKind.UPSTREAM:
        if outcome.cause is None:
            return f"{qual}: {outcome.text}"
        return f"{qual}: {outcome.text}: {outcome.cause}"
    if outcome.kind is OutcomeKind.INTERNAL:
        return f"internal: {qual}: {outcome.text}"
    return f"{qual}: {outcome.text}" if qual else outcome.text


def classify(outcome: ToolOutcome) -> CallToolResult:
    """Map an outcome to its MCP surface.

    Returns the CallToolResult for ok/parameter/account outcomes.

    Raises:
        ToolCallError: for upstream and internal outcomes.
    """
    if outcome.kind is OutcomeKind.OK:
        return _text_result(outcome.text, is_error=False)
    if outcome.kind in (OutcomeKind.PARAMETER, OutcomeKind.ACCOUNT):
        return _text_result(error_text(outcome), is_error=True)
    if outcome.kind is OutcomeKind.UPSTREAM:
        raise ToolCallError(UPSTREAM_ERROR, error_text(outcome), outcome.category)
    raise ToolCallError(INTERNAL_ERROR, error_text(outcome), outcome.category)
