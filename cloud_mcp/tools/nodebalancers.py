"""NodeBalancer tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import NodeBalancer, NodeBalancerConfig
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.nodebalancers")

MAX_CONN_THROTTLE = 20
PROTOCOLS = ("http", "https", "tcp")
ALGORITHMS = ("roundrobin", "leastconn", "source")
STICKINESS = ("none", "table", "http_cookie")
CHECKS = ("none", "connection", "http", "http_body")
PROXY_PROTOCOLS = ("none", "v1", "v2")
CONFIG_FIELDS = (
    "port",
    "protocol",
    "algorithm",
    "stickiness",
    "check",
    "check_interval",
    "check_timeout",
    "check_attempts",
    "check_path",
    "check_body",
    "proxy_protocol",
    "ssl_cert",
    "ssl_key",
)


@dataclass(frozen=True)
class NodeBalancerIdParams:
    nodebalancer_id: int = p.identifier("The ID of the NodeBalancer", required=True)


@dataclass(frozen=True)
class NodeBalancerCreateParams:
    region: str = p.string("Region for the NodeBalancer", required=True)
    label: str = p.string("Label for the NodeBalancer")
    client_conn_throttle: int = p.integer(
        "Connections per second allowed per client IP (0 disables throttling)",
        minimum=0,
        maximum=MAX_CONN_THROTTLE,
        unit="conn/sec",
    )
    tags: list[str] = p.string_list("Tags to apply")


@dataclass(frozen=True)
class NodeBalancerUpdateParams:
    nodebalancer_id: int = p.identifier("The ID of the NodeBalancer", required=True)
    label: str = p.string("New label")
    client_conn_throttle: int = p.integer(
        "Connections per second allowed per client IP",
        minimum=0,
        maximum=MAX_CONN_THROTTLE,
        unit="conn/sec",
        default=-1,
    )
    tags: list[str] = p.string_list("Replacement tag list")


@dataclass(frozen=True)
class NodeBalancerConfigIdParams:
    nodebalancer_id: int = p.identifier("The ID of the NodeBalancer", required=True)
    config_id: int = p.identifier("The ID of the port configuration", required=True)


@dataclass(frozen=True)
class NodeBalancerConfigCreateParams:
    nodebalancer_id: int = p.identifier("The ID of the NodeBalancer", required=True)
    port: int = p.integer("Port to balance", required=True, minimum=1, maximum=65534)
    protocol: str = p.string("Protocol", required=True, choices=PROTOCOLS)
    algorithm: str = p.string("Balancing algorithm", choices=ALGORITHMS)
    stickiness: str = p.string("Session stickiness", choices=STICKINESS)
    check: str = p.string("Health check type", choices=CHECKS)
    check_interval: int = p.integer("Seconds between health checks", minimum=2, unit="seconds")
    check_timeout: int = p.integer("Health check timeout", minimum=1, maximum=30, unit="seconds")
    check_attempts: int = p.integer("Failed checks before a node is down", minimum=1, maximum=30)
    check_path: str = p.string("Path for http health checks")
    check_body: str = p.string("Expected response body for http_body checks")
    check_passive: bool = p.boolean("Enable passive health checks")
    proxy_protocol: str = p.string("Proxy protocol version (tcp only)", choices=PROXY_PROTOCOLS)
    ssl_cert: str = p.string("PEM certificate (https only)")
    ssl_key: str = p.string("PEM private key (https only)")


@dataclass(frozen=True)
class NodeBalancerConfigUpdateParams:
    nodebalancer_id: int = p.identifier("The ID of the NodeBalancer", required=True)
    config_id: int = p.identifier("The ID of the port configuration", required=True)
    port: int = p.integer("New port", minimum=1, maximum=65534)
    protocol: str = p.string("New protocol", choices=PROTOCOLS)
    algorithm: str = p.string("New balancing algorithm", choices=ALGORITHMS)
    stickiness: str = p.string("New session stickiness", choices=STICKINESS)
    check: str = p.string("New health check type", choices=CHECKS)
    check_interval: int = p.integer("Seconds between health checks", minimum=2, unit="seconds")
    check_timeout: int = p.integer("Health check timeout", minimum=1, maximum=30, unit="seconds")
    check_attempts: int = p.integer("Failed checks before a node is down", minimum=1, maximum=30)
    check_path: str = p.string("Path for http health checks")
    check_body: str = p.string("Expected response body for http_body checks")
    check_passive: bool = p.boolean("Enable passive health checks")
    proxy_protocol: str = p.string("Proxy protocol version (tcp only)", choices=PROXY_PROTOCOLS)
    ssl_cert: str = p.string("PEM certificate (https only)")
    ssl_key: str = p.string("PEM private key (https only)")


def _summary(nb: NodeBalancer) -> str:
    return "\n".join(
        [
            fmt.record_header(nb.id, nb.label),
            fmt.fields(("Region", nb.region), ("Hostname", fmt.or_dash(nb.hostname))),
            fmt.fields(
                ("IPv4", fmt.or_dash(nb.ipv4)),
                ("Throttle", fmt.conn_per_sec(nb.client_conn_throttle)),
            ),
        ]
    )


def _config_line(cfg: NodeBalancerConfig) -> str:
    return " | ".join(
        [
            f"Port {cfg.port} ({cfg.protocol})",
            f"Algorithm: {cfg.algorithm}",
            f"Stickiness: {cfg.stickiness}",
            f"Check: {cfg.check}",
            f"Nodes: {cfg.nodes_up} up, {cfg.nodes_down} down",
        ]
    )


def _config_body(params: NodeBalancerConfigCreateParams | NodeBalancerConfigUpdateParams) -> dict:
    body: dict[str, Any] = {}
    for key in CONFIG_FIELDS:
        if getattr(params, key):
            body[key] = getattr(params, key)
    if params.check_passive:
        body["check_passive"] = True
    return body


def _config_result(action: str, cfg: NodeBalancerConfig) -> str:
    return (
        f"NodeBalancer configuration {action} successfully!\n\n"
        f"Config ID: {cfg.id}\n"
        f"Port: {cfg.port}\n"
        f"Protocol: {cfg.protocol}\n"
        f"Algorithm: {cfg.algorithm}\n"
        f"Stickiness: {cfg.stickiness}\n"
        f"Check: {cfg.check}"
    )


@tool("linode_nodebalancers_list", "List all NodeBalancers.", p.NoParams)
async def nodebalancers_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list NodeBalancers"):
        nbs = [NodeBalancer.from_api(d) for d in await client.paginate("nodebalancers")]
    return fmt.listing(nbs, "NodeBalancer", _summary)


@tool(
    "linode_nodebalancer_get",
    "Get a NodeBalancer with its port configurations.",
    NodeBalancerIdParams,
)
async def nodebalancer_get(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerIdParams
) -> str:
    path = f"nodebalancers/{params.nodebalancer_id}"
    with ctx.upstream(f"failed to get NodeBalancer {params.nodebalancer_id}"):
        nb = NodeBalancer.from_api(await client.get(path))
        configs = [NodeBalancerConfig.from_api(d) for d in await client.paginate(f"{path}/configs")]

    text = fmt.details(
        "NodeBalancer",
        f"ID: {nb.id}",
        f"Label: {nb.label}",
        f"Region: {nb.region}",
        f"Hostname: {fmt.or_dash(nb.hostname)}",
        f"IPv4: {fmt.or_dash(nb.ipv4)}",
        f"IPv6: {fmt.or_dash(nb.ipv6)}",
        f"Client Connection Throttle: {fmt.conn_per_sec(nb.client_conn_throttle)}",
        fmt.section(
            "Transfer",
            f"In: {fmt.mb(nb.transfer_in)}",
            f"Out: {fmt.mb(nb.transfer_out)}",
            f"Total: {fmt.mb(nb.transfer_total)}",
        ),
        fmt.section("Configurations", *([_config_line(c) for c in configs] or ["(none)"])),
        f"\nCreated: {fmt.timestamp(nb.created)}",
        f"Updated: {fmt.timestamp(nb.updated)}",
    )
    if nb.tags:
        text += f"\nTags: {fmt.joined(nb.tags)}"
    return text


@tool("linode_nodebalancer_create", "Create a NodeBalancer.", NodeBalancerCreateParams)
async def nodebalancer_create(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerCreateParams
) -> str:
    body: dict[str, Any] = {
        "region": params.region,
        "client_conn_throttle": params.client_conn_throttle,
    }
    if params.label:
        body["label"] = params.label
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream("failed to create NodeBalancer"):
        nb = NodeBalancer.from_api(await client.post("nodebalancers", body))

    logger.info(f"Created NodeBalancer {nb.id} ({nb.label})")
    return (
        "NodeBalancer created successfully!\n\n"
        f"ID: {nb.id}\n"
        f"Label: {nb.label}\n"
        f"Region: {nb.region}\n"
        f"Hostname: {fmt.or_dash(nb.hostname)}\n"
        f"IPv4: {fmt.or_dash(nb.ipv4)}\n"
        f"Client Connection Throttle: {fmt.conn_per_sec(nb.client_conn_throttle)}"
    )


@tool(
    "linode_nodebalancer_update",
    "Update a NodeBalancer's label, connection throttle or tags.",
    NodeBalancerUpdateParams,
)
async def nodebalancer_update(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.label:
        body["label"] = params.label
    if params.client_conn_throttle >= 0:
        body["client_conn_throttle"] = params.client_conn_throttle
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError(
            "at least one of label, client_conn_throttle or tags must be provided"
        )

    with ctx.upstream(f"failed to update NodeBalancer {params.nodebalancer_id}"):
        nb = NodeBalancer.from_api(
            await client.put(f"nodebalancers/{params.nodebalancer_id}", body)
        )
    return (
        "NodeBalancer updated successfully!\n\n"
        f"ID: {nb.id}\n"
        f"Label: {nb.label}\n"
        f"Client Connection Throttle: {fmt.conn_per_sec(nb.client_conn_throttle)}"
    )


@tool("linode_nodebalancer_delete", "Delete a NodeBalancer.", NodeBalancerIdParams)
async def nodebalancer_delete(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerIdParams
) -> str:
    path = f"nodebalancers/{params.nodebalancer_id}"
    with ctx.upstream(f"failed to get NodeBalancer {params.nodebalancer_id}"):
        nb = NodeBalancer.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete NodeBalancer {params.nodebalancer_id}"):
        await client.delete(path)

    logger.info(f"Deleted NodeBalancer {nb.id} ({nb.label})")
    return f"NodeBalancer deleted successfully!\n\nDeleted NodeBalancer: {nb.label} (ID: {nb.id})"


@tool(
    "linode_nodebalancer_config_create",
    "Add a port configuration to a NodeBalancer.",
    NodeBalancerConfigCreateParams,
)
async def nodebalancer_config_create(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerConfigCreateParams
) -> str:
    if params.protocol == "https" and not (params.ssl_cert and params.ssl_key):
        raise ParameterError("ssl_cert and ssl_key are required for https configurations")

    path = f"nodebalancers/{params.nodebalancer_id}/configs"
    with ctx.upstream(
        f"failed to create configuration on NodeBalancer {params.nodebalancer_id}"
    ):
        cfg = NodeBalancerConfig.from_api(await client.post(path, _config_body(params)))

    logger.info(f"Created NodeBalancer {params.nodebalancer_id} config {cfg.id} on port {cfg.port}")
    return _config_result("created", cfg)


@tool(
    "linode_nodebalancer_config_update",
    "Update a NodeBalancer port configuration.",
    NodeBalancerConfigUpdateParams,
)
async def nodebalancer_config_update(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerConfigUpdateParams
) -> str:
    body = _config_body(params)
    if not body:
        raise ParameterError("at least one configuration field to update must be provided")

    path = f"nodebalancers/{params.nodebalancer_id}/configs/{params.config_id}"
    with ctx.upstream(f"failed to update NodeBalancer configuration {params.config_id}"):
        cfg = NodeBalancerConfig.from_api(await client.put(path, body))
    return _config_result("updated", cfg)


@tool(
    "linode_nodebalancer_config_delete",
    "Delete a NodeBalancer port configuration and its backend nodes.",
    NodeBalancerConfigIdParams,
)
async def nodebalancer_config_delete(
    ctx: CallContext, client: LinodeClient, params: NodeBalancerConfigIdParams
) -> str:
    path = f"nodebalancers/{params.nodebalancer_id}/configs/{params.config_id}"
    with ctx.upstream(f"failed to delete NodeBalancer configuration {params.config_id}"):
        await client.delete(path)

    logger.info(f"Deleted NodeBalancer {params.nodebalancer_id} config {params.config_id}")
    return (
        "NodeBalancer configuration deleted successfully!\n\n"
        f"Configuration {params.config_id} removed from NodeBalancer {params.nodebalancer_id}."
    )


TOOLS = [
    nodebalancers_list,
    nodebalancer_get,
    nodebalancer_create,
    nodebalancer_update,
    nodebalancer_delete,
    nodebalancer_config_create,
    nodebalancer_config_update,
    nodebalancer_config_delete,
]
