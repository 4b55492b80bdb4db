"""
Text formatting shared by every tool.

Layout contract:
- listings start with ``Found N <resource>(s):`` and a blank line, or read
  ``No <resources> found.`` when empty
- each record starts with ``ID: <n> | <label>`` followed by indented lines
- peer fields on a line are joined with `` | ``, list elements with ``, ``
- timestamps are ISO-8601 with seconds precision
- operational flags read Enabled/Disabled, informational flags true/false
- units are always spelled out
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, TypeVar

T = TypeVar("T")

INDENT = "  "


def listing(
    items: Sequence[T],
    resource: str,
    render: Callable[[T], str],
    *,
    plural: str | None = None,
) -> str:
    """``Found N <resource>(s):`` followed by one rendered block per item.

    ``plural`` overrides the noun used in the empty message
    (default ``<resource>s``).
    """
    if not items:
        return f"No {plural or resource + 's'} found."
    blocks = [render(item) for item in items]
    return f"Found {len(items)} {resource}(s):\n\n" + "\n\n".join(blocks)


def record_header(ident: Any, label: str) -> str:
    return f"ID: {ident} | {label}"


def fields(*pairs: tuple[str, Any], indent: int = 1) -> str:
    """One indented line of ``Key: value`` pairs joined by `` | ``."""
    return INDENT * indent + " | ".join(f"{key}: {value}" for key, value in pairs)


def record(header: str, *lines: str) -> str:
    return "\n".join([header, *[line for line in lines if line]])


def joined(values: Iterable[Any]) -> str:
    return ", ".join(str(v) for v in values)


def bracketed(values: Iterable[Any]) -> str:
    return f"[{joined(values)}]"


def timestamp(value: str | datetime | None) -> str:
    """ISO-8601 at seconds precision; the API sends ``2023-01-01T00:00:00``."""
    if not value:
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.replace(microsecond=0).isoformat()


def enabled(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


def flag(value: bool) -> str:
    return "true" if value else "false"


def gb(value: float) -> str:
    return f"{_number(value)} GB"


def mb(value: float) -> str:
    return f"{_number(value)} MB"


def mb_to_gb(value_mb: float) -> str:
    return gb(value_mb / 1024)


def conn_per_sec(value: int) -> str:
    return f"{value} conn/sec"


def size_bytes(value: int) -> str:
    """Human size for raw byte counts (object storage)."""
    size = float(value)
    for unit in ("bytes", "KB", "MB", "GB"):
        if size < 1024:
            return f"{_number(size)} {unit}"
        size /= 1024
    return f"{_number(size)} TB"


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def details(title: str, *sections: str) -> str:
    """``<Resource> Details:`` block made of pre-rendered sections."""
    return "\n".join([f"{title} Details:", *[s for s in sections if s]])


def section(title: str, *lines: str) -> str:
    """Titled sub-block with its lines indented one level."""
    body = [INDENT + line for line in lines if line]
    return "\n".join([f"\n{title}:", *body])


def or_dash(value: Any) -> str:
    return str(value) if value not in (None, "", []) else "-"
