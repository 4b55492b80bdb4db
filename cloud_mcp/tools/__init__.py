"""Tool modules. Each exposes ``TOOLS``; ``build_registry`` collects them once at startup."""

from __future__ import annotations

from cloud_mcp.registry import ToolRegistration, ToolRegistry
from cloud_mcp.tools import (
    account,
    databases,
    domains,
    firewalls,
    images,
    instances,
    lke,
    longview,
    networking,
    nodebalancers,
    objectstorage,
    stackscripts,
    support,
    system,
    volumes,
)

MODULES = (
    account,
    instances,
    volumes,
    networking,
    images,
    firewalls,
    nodebalancers,
    domains,
    stackscripts,
    lke,
    longview,
    databases,
    objectstorage,
    support,
    system,
)


def all_registrations() -> list[ToolRegistration]:
    return [reg for module in MODULES for reg in module.TOOLS]


def build_registry() -> ToolRegistry:
    """Build the immutable registry of every tool."""
    return ToolRegistry(all_registrations())
