"""IP address, reserved IP, IPv6 range and VLAN tools."""

from __future__ import annotations

from dataclasses import dataclass

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import VLAN, IPAddress, IPv6Range
from cloud_mcp.registry import CallContext, tool


@dataclass(frozen=True)
class IPGetParams:
    address: str = p.ip_address("The IPv4 or IPv6 address to look up", required=True)


@dataclass(frozen=True)
class ReservedIPUpdateParams:
    address: str = p.ip_address("The reserved IP address to update", required=True)
    rdns: str = p.string("Reverse DNS hostname; leave empty to reset to the default")


def _ip_summary(ip: IPAddress) -> str:
    lines = [
        f"Address: {ip.address} | {ip.type}",
        fmt.fields(
            ("Public", fmt.flag(ip.public)),
            ("Region", ip.region),
            ("Linode", ip.linode_id or "-"),
        ),
    ]
    if ip.rdns:
        lines.append(fmt.fields(("Reverse DNS", ip.rdns)))
    return "\n".join(lines)


def _vlan_summary(vlan: VLAN) -> str:
    return "\n".join(
        [
            f"Label: {vlan.label} | {vlan.region}",
            fmt.fields(
                ("Linodes", fmt.bracketed(vlan.linodes)),
                ("Created", fmt.timestamp(vlan.created)),
            ),
        ]
    )


@tool("linode_ips_list", "List all IP addresses on the current account.", p.NoParams)
async def ips_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list IP addresses"):
        ips = [IPAddress.from_api(d) for d in await client.paginate("networking/ips")]
    return fmt.listing(ips, "IP address", _ip_summary, plural="IP addresses")


@tool("linode_ip_get", "Get details of a single IP address.", IPGetParams)
async def ip_get(ctx: CallContext, client: LinodeClient, params: IPGetParams) -> str:
    with ctx.upstream(f"failed to get IP address {params.address}"):
        ip = IPAddress.from_api(await client.get(f"networking/ips/{params.address}"))
    return fmt.details(
        "IP Address",
        f"Address: {ip.address}",
        f"Type: {ip.type}",
        f"Public: {fmt.flag(ip.public)}",
        f"Region: {ip.region}",
        f"Linode: {ip.linode_id or '-'}",
        f"Gateway: {fmt.or_dash(ip.gateway)}",
        f"Prefix: {ip.prefix}",
        f"Reverse DNS: {fmt.or_dash(ip.rdns)}",
    )


@tool("linode_vlans_list", "List all VLANs on the current account.", p.NoParams)
async def vlans_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list VLANs"):
        vlans = [VLAN.from_api(d) for d in await client.paginate("networking/vlans")]
    return fmt.listing(vlans, "VLAN", _vlan_summary)


def _visibility(ip: IPAddress) -> str:
    return "Public" if ip.public else "Private"


def _assignment(ip: IPAddress) -> str:
    return f"Assigned to Linode {ip.linode_id}" if ip.linode_id else "Unassigned"


def _reserved_summary(ip: IPAddress) -> str:
    lines = [
        f"Address: {ip.address} ({ip.type} {_visibility(ip)})",
        fmt.fields(("Gateway", fmt.or_dash(ip.gateway)), ("Prefix", ip.prefix)),
        fmt.fields(("Region", ip.region)) + f" | {_assignment(ip)}",
    ]
    if ip.rdns:
        lines.append(fmt.fields(("RDNS", ip.rdns)))
    return "\n".join(lines)


@tool(
    "linode_reserved_ips_list",
    "List IP addresses on the current account that are not assigned to a Linode.",
    p.NoParams,
)
async def reserved_ips_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list IP addresses"):
        ips = [IPAddress.from_api(d) for d in await client.paginate("networking/ips")]
    reserved = [ip for ip in ips if not ip.linode_id]
    return fmt.listing(
        reserved, "reserved IP address", _reserved_summary, plural="reserved IP addresses"
    )


@tool("linode_reserved_ip_get", "Get details of a reserved IP address.", IPGetParams)
async def reserved_ip_get(ctx: CallContext, client: LinodeClient, params: IPGetParams) -> str:
    with ctx.upstream(f"failed to get IP address {params.address}"):
        ip = IPAddress.from_api(await client.get(f"networking/ips/{params.address}"))
    lines = [
        f"Address: {ip.address}",
        f"Type: {ip.type}",
        f"Gateway: {fmt.or_dash(ip.gateway)}",
        f"Subnet Mask: {fmt.or_dash(ip.subnet_mask)}",
        f"Prefix: {ip.prefix}",
        f"Region: {ip.region}",
        f"Visibility: {_visibility(ip)}",
        f"Assigned to Linode: {ip.linode_id}" if ip.linode_id else "Assignment: Unassigned",
    ]
    if ip.rdns:
        lines.append(f"Reverse DNS: {ip.rdns}")
    return fmt.details("IP Address", *lines)


@tool(
    "linode_reserved_ip_update",
    "Update the reverse DNS of a reserved IP address. An empty rdns resets it to the default.",
    ReservedIPUpdateParams,
)
async def reserved_ip_update(
    ctx: CallContext, client: LinodeClient, params: ReservedIPUpdateParams
) -> str:
    with ctx.upstream(f"failed to update IP address {params.address}"):
        data = await client.put(f"networking/ips/{params.address}", {"rdns": params.rdns or None})
    ip = IPAddress.from_api(data)
    return (
        "IP address updated successfully!\n\n"
        f"Address: {ip.address}\nReverse DNS: {fmt.or_dash(ip.rdns)}"
    )


def _ipv6_range_summary(r: IPv6Range) -> str:
    lines = [f"Range: {r.range}/{r.prefix}", fmt.fields(("Region", r.region))]
    if r.route_target:
        lines.append(fmt.fields(("Route Target", r.route_target)))
    return "\n".join(lines)


@tool("linode_ipv6_pools_list", "List the IPv6 pools available on the account.", p.NoParams)
async def ipv6_pools_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list IPv6 pools"):
        pools = [IPv6Range.from_api(d) for d in await client.paginate("networking/ipv6/pools")]
    return fmt.listing(pools, "IPv6 pool", _ipv6_range_summary)


@tool("linode_ipv6_ranges_list", "List the IPv6 ranges routed on the account.", p.NoParams)
async def ipv6_ranges_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list IPv6 ranges"):
        ranges = [IPv6Range.from_api(d) for d in await client.paginate("networking/ipv6/ranges")]
    return fmt.listing(ranges, "IPv6 range", _ipv6_range_summary)


TOOLS = [
    ips_list,
    ip_get,
    vlans_list,
    reserved_ips_list,
    reserved_ip_get,
    reserved_ip_update,
    ipv6_pools_list,
    ipv6_ranges_list,
]
