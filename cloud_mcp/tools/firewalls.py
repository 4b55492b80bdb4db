"""Cloud Firewall tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Firewall, FirewallDevice
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.firewalls")

POLICIES = ("ACCEPT", "DROP")


@dataclass(frozen=True)
class FirewallIdParams:
    firewall_id: int = p.identifier("The ID of the firewall", required=True)


@dataclass(frozen=True)
class FirewallCreateParams:
    label: str = p.string("Label for the firewall", required=True)
    inbound_policy: str = p.string(
        "Default action for inbound traffic", choices=POLICIES, default="ACCEPT"
    )
    outbound_policy: str = p.string(
        "Default action for outbound traffic", choices=POLICIES, default="ACCEPT"
    )
    tags: list[str] = p.string_list("Tags to apply")


@dataclass(frozen=True)
class FirewallUpdateParams:
    firewall_id: int = p.identifier("The ID of the firewall", required=True)
    label: str = p.string("New label")
    status: str = p.string("Enable or disable the firewall", choices=("enabled", "disabled"))
    tags: list[str] = p.string_list("Replacement tag list")


@dataclass(frozen=True)
class FirewallRulesParams:
    firewall_id: int = p.identifier("The ID of the firewall", required=True)
    inbound_policy: str = p.string("Default action for inbound traffic", choices=POLICIES)
    outbound_policy: str = p.string("Default action for outbound traffic", choices=POLICIES)
    inbound: list[dict] = p.mapping_list(
        "Inbound rules: objects with action, protocol, ports, addresses and label"
    )
    outbound: list[dict] = p.mapping_list(
        "Outbound rules: objects with action, protocol, ports, addresses and label"
    )


@dataclass(frozen=True)
class FirewallDeviceCreateParams:
    firewall_id: int = p.identifier("The ID of the firewall", required=True)
    device_id: int = p.identifier("The ID of the Linode or NodeBalancer", required=True)
    device_type: str = p.string(
        "Kind of device", choices=("linode", "nodebalancer"), default="linode"
    )


@dataclass(frozen=True)
class FirewallDeviceDeleteParams:
    firewall_id: int = p.identifier("The ID of the firewall", required=True)
    device_id: int = p.identifier("The firewall device ID (not the Linode ID)", required=True)


def _rule_line(rule: dict[str, Any]) -> str:
    addresses = rule.get("addresses") or {}
    targets = [*(addresses.get("ipv4") or []), *(addresses.get("ipv6") or [])]
    return " | ".join(
        [
            f"{rule.get('action', '-')} {rule.get('protocol', '-')}",
            f"Ports: {rule.get('ports') or 'all'}",
            f"Addresses: {fmt.bracketed(targets)}",
            f"Label: {rule.get('label') or '-'}",
        ]
    )


def _summary(fw: Firewall) -> str:
    return "\n".join(
        [
            fmt.record_header(fw.id, fw.label),
            fmt.fields(
                ("Status", fw.status),
                ("Inbound", f"{len(fw.inbound_rules)} rules ({fw.inbound_policy})"),
                ("Outbound", f"{len(fw.outbound_rules)} rules ({fw.outbound_policy})"),
                ("Devices", len(fw.entities)),
            ),
        ]
    )


def _detail(fw: Firewall) -> str:
    inbound = [_rule_line(r) for r in fw.inbound_rules] or ["(none)"]
    outbound = [_rule_line(r) for r in fw.outbound_rules] or ["(none)"]
    devices = [
        f"{e.get('type', '-')} {e.get('id', '-')} ({e.get('label') or '-'})" for e in fw.entities
    ] or ["(none)"]
    text = fmt.details(
        "Firewall",
        f"ID: {fw.id}",
        f"Label: {fw.label}",
        f"Status: {fw.status}",
        f"Created: {fmt.timestamp(fw.created)}",
        f"Updated: {fmt.timestamp(fw.updated)}",
        fmt.section(f"Inbound Rules (policy {fw.inbound_policy})", *inbound),
        fmt.section(f"Outbound Rules (policy {fw.outbound_policy})", *outbound),
        fmt.section("Devices", *devices),
    )
    if fw.tags:
        text += f"\n\nTags: {fmt.joined(fw.tags)}"
    return text


@tool("linode_firewalls_list", "List all Cloud Firewalls.", p.NoParams)
async def firewalls_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list firewalls"):
        firewalls = [Firewall.from_api(d) for d in await client.paginate("networking/firewalls")]
    return fmt.listing(firewalls, "firewall", _summary)


@tool("linode_firewall_get", "Get a firewall with its rules and devices.", FirewallIdParams)
async def firewall_get(ctx: CallContext, client: LinodeClient, params: FirewallIdParams) -> str:
    with ctx.upstream(f"failed to get firewall {params.firewall_id}"):
        fw = Firewall.from_api(await client.get(f"networking/firewalls/{params.firewall_id}"))
    return _detail(fw)


@tool(
    "linode_firewall_create",
    "Create a Cloud Firewall with default policies.",
    FirewallCreateParams,
)
async def firewall_create(
    ctx: CallContext, client: LinodeClient, params: FirewallCreateParams
) -> str:
    body: dict[str, Any] = {
        "label": params.label,
        "rules": {
            "inbound_policy": params.inbound_policy,
            "outbound_policy": params.outbound_policy,
            "inbound": [],
            "outbound": [],
        },
    }
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream("failed to create firewall"):
        fw = Firewall.from_api(await client.post("networking/firewalls", body))

    logger.info(f"Created firewall {fw.id} ({fw.label})")
    return (
        "Firewall created successfully!\n\n"
        f"ID: {fw.id}\n"
        f"Label: {fw.label}\n"
        f"Status: {fw.status}\n"
        f"Inbound Policy: {fw.inbound_policy}\n"
        f"Outbound Policy: {fw.outbound_policy}"
    )


@tool("linode_firewall_update", "Update a firewall's label, status or tags.", FirewallUpdateParams)
async def firewall_update(
    ctx: CallContext, client: LinodeClient, params: FirewallUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.label:
        body["label"] = params.label
    if params.status:
        body["status"] = params.status
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError("at least one of label, status or tags must be provided")

    with ctx.upstream(f"failed to update firewall {params.firewall_id}"):
        fw = Firewall.from_api(await client.put(f"networking/firewalls/{params.firewall_id}", body))
    return (
        "Firewall updated successfully!\n\n"
        f"ID: {fw.id}\n"
        f"Label: {fw.label}\n"
        f"Status: {fw.status}"
    )


@tool("linode_firewall_delete", "Delete a Cloud Firewall.", FirewallIdParams)
async def firewall_delete(ctx: CallContext, client: LinodeClient, params: FirewallIdParams) -> str:
    path = f"networking/firewalls/{params.firewall_id}"
    with ctx.upstream(f"failed to get firewall {params.firewall_id}"):
        fw = Firewall.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete firewall {params.firewall_id}"):
        await client.delete(path)

    logger.info(f"Deleted firewall {fw.id} ({fw.label})")
    return f"Firewall deleted successfully!\n\nDeleted Firewall: {fw.label} (ID: {fw.id})"


@tool(
    "linode_firewall_rules_update",
    "Replace a firewall's rule set. Omitted directions keep their current rules.",
    FirewallRulesParams,
)
async def firewall_rules_update(
    ctx: CallContext, client: LinodeClient, params: FirewallRulesParams
) -> str:
    path = f"networking/firewalls/{params.firewall_id}/rules"
    with ctx.upstream(f"failed to get rules for firewall {params.firewall_id}"):
        current = await client.get(path)

    body = {
        "inbound_policy": params.inbound_policy or current.get("inbound_policy", "ACCEPT"),
        "outbound_policy": params.outbound_policy or current.get("outbound_policy", "ACCEPT"),
        "inbound": params.inbound or current.get("inbound", []),
        "outbound": params.outbound or current.get("outbound", []),
    }
    with ctx.upstream(f"failed to update rules for firewall {params.firewall_id}"):
        rules = await client.put(path, body)

    return (
        "Firewall rules updated successfully!\n\n"
        f"Firewall ID: {params.firewall_id}\n"
        f"Inbound: {len(rules.get('inbound', []))} rules "
        f"(policy {rules.get('inbound_policy', '-')})\n"
        f"Outbound: {len(rules.get('outbound', []))} rules "
        f"(policy {rules.get('outbound_policy', '-')})"
    )


@tool(
    "linode_firewall_device_create",
    "Assign a Linode or NodeBalancer to a firewall.",
    FirewallDeviceCreateParams,
)
async def firewall_device_create(
    ctx: CallContext, client: LinodeClient, params: FirewallDeviceCreateParams
) -> str:
    body = {"id": params.device_id, "type": params.device_type}
    with ctx.upstream(
        f"failed to add {params.device_type} {params.device_id} to firewall {params.firewall_id}"
    ):
        device = FirewallDevice.from_api(
            await client.post(f"networking/firewalls/{params.firewall_id}/devices", body)
        )
    return (
        "Firewall device created successfully!\n\n"
        f"Device ID: {device.id}\n"
        f"Entity: {device.entity_type} {device.entity_id} ({device.entity_label or '-'})\n"
        f"Firewall ID: {params.firewall_id}"
    )


@tool(
    "linode_firewall_device_delete",
    "Remove a device from a firewall.",
    FirewallDeviceDeleteParams,
)
async def firewall_device_delete(
    ctx: CallContext, client: LinodeClient, params: FirewallDeviceDeleteParams
) -> str:
    with ctx.upstream(
        f"failed to remove device {params.device_id} from firewall {params.firewall_id}"
    ):
        await client.delete(
            f"networking/firewalls/{params.firewall_id}/devices/{params.device_id}"
        )
    return (
        "Firewall device deleted successfully!\n\n"
        f"Device {params.device_id} removed from firewall {params.firewall_id}."
    )


TOOLS = [
    firewalls_list,
    firewall_get,
    firewall_create,
    firewall_update,
    firewall_delete,
    firewall_rules_update,
    firewall_device_create,
    firewall_device_delete,
]
