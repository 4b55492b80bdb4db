"""Linode Kubernetes Engine tools."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError, UpstreamError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import LKECluster, LKENodePool
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.lke")


@dataclass(frozen=True)
class ClusterIdParams:
    cluster_id: int = p.identifier("The ID of the LKE cluster", required=True)


@dataclass(frozen=True)
class ClusterCreateParams:
    label: str = p.string("Display label for the cluster", required=True)
    region: str = p.string("Region ID where the cluster will be created", required=True)
    k8s_version: str = p.string("Kubernetes version, e.g. 1.29", required=True)
    node_pools: list[dict] = p.mapping_list(
        "Node pools: objects with type, count and optional autoscaler {enabled, min, max} "
        "and tags",
        required=True,
    )
    high_availability: bool = p.boolean("Enable the high availability control plane")
    tags: list[str] = p.string_list("Tags to apply to the cluster")


@dataclass(frozen=True)
class ClusterUpdateParams:
    cluster_id: int = p.identifier("The ID of the LKE cluster", required=True)
    label: str = p.string("New display label")
    k8s_version: str = p.string("Kubernetes version to upgrade to")
    high_availability: bool = p.boolean("Upgrade to the high availability control plane")
    tags: list[str] = p.string_list("Replacement tag list")


@dataclass(frozen=True)
class NodePoolIdParams:
    cluster_id: int = p.identifier("The ID of the LKE cluster", required=True)
    pool_id: int = p.identifier("The ID of the node pool", required=True)


@dataclass(frozen=True)
class NodePoolCreateParams:
    cluster_id: int = p.identifier("The ID of the LKE cluster", required=True)
    type: str = p.string("Linode type for the nodes, e.g. g6-standard-2", required=True)
    count: int = p.integer("Number of nodes", required=True, minimum=1, maximum=100)
    autoscaler_min: int = p.integer("Autoscaler minimum node count", minimum=1, maximum=100)
    autoscaler_max: int = p.integer("Autoscaler maximum node count", minimum=1, maximum=100)
    tags: list[str] = p.string_list("Tags for the node pool")


@dataclass(frozen=True)
class NodePoolUpdateParams:
    cluster_id: int = p.identifier("The ID of the LKE cluster", required=True)
    pool_id: int = p.identifier("The ID of the node pool", required=True)
    count: int = p.integer("New number of nodes", minimum=1, maximum=100)
    autoscaler: str = p.string("Turn the autoscaler on or off", choices=("enabled", "disabled"))
    autoscaler_min: int = p.integer("Autoscaler minimum node count", minimum=1, maximum=100)
    autoscaler_max: int = p.integer("Autoscaler maximum node count", minimum=1, maximum=100)
    tags: list[str] = p.string_list("Replacement tag list")


def _summary(c: LKECluster) -> str:
    return "\n".join(
        [
            fmt.record_header(c.id, c.label),
            fmt.fields(
                ("Region", c.region),
                ("Kubernetes", c.k8s_version),
                ("Status", fmt.or_dash(c.status)),
                ("HA Control Plane", fmt.enabled(c.high_availability)),
            ),
        ]
    )


def _pool_line(pool: LKENodePool) -> str:
    ready = sum(1 for s in pool.node_statuses if s == "ready")
    line = f"Pool {pool.id}: {pool.count} x {pool.type} | Ready: {ready}/{len(pool.node_statuses)}"
    if pool.autoscaler_enabled:
        line += f" | Autoscaler: {pool.autoscaler_min}-{pool.autoscaler_max}"
    else:
        line += " | Autoscaler: Disabled"
    return line


def _autoscaler(minimum: int, maximum: int, where: str = "") -> dict[str, Any]:
    if not minimum or not maximum:
        raise ParameterError(f"{where}autoscaler needs both a minimum and a maximum")
    if minimum > maximum:
        raise ParameterError(f"{where}autoscaler minimum {minimum} exceeds maximum {maximum}")
    return {"enabled": True, "min": minimum, "max": maximum}


def _pool_body(pool: dict[str, Any], index: int) -> dict[str, Any]:
    where = f"node_pools[{index}]: "
    pool_type, count = pool.get("type"), pool.get("count")
    if not isinstance(pool_type, str) or not pool_type:
        raise ParameterError(f"{where}type must be a non-empty string")
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise ParameterError(f"{where}count must be a positive whole number")
    body: dict[str, Any] = {"type": pool_type, "count": count}
    autoscaler = pool.get("autoscaler")
    if isinstance(autoscaler, dict) and autoscaler.get("enabled"):
        body["autoscaler"] = _autoscaler(
            autoscaler.get("min") or 0, autoscaler.get("max") or 0, where
        )
    if pool.get("tags"):
        body["tags"] = list(pool["tags"])
    return body


def _pool_result(action: str, pool: LKENodePool) -> str:
    if pool.autoscaler_enabled:
        autoscaler = f"Enabled (Min: {pool.autoscaler_min}, Max: {pool.autoscaler_max})"
    else:
        autoscaler = "Disabled"
    return (
        f"Node pool {action} successfully!\n\n"
        f"Pool ID: {pool.id}\n"
        f"Type: {pool.type}\n"
        f"Count: {pool.count}\n"
        f"Autoscaler: {autoscaler}"
    )


@tool("linode_lke_clusters_list", "List all LKE clusters.", p.NoParams)
async def lke_clusters_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list LKE clusters"):
        clusters = [LKECluster.from_api(d) for d in await client.paginate("lke/clusters")]
    return fmt.listing(clusters, "LKE cluster", _summary)


@tool("linode_lke_cluster_get", "Get an LKE cluster with its node pools.", ClusterIdParams)
async def lke_cluster_get(ctx: CallContext, client: LinodeClient, params: ClusterIdParams) -> str:
    path = f"lke/clusters/{params.cluster_id}"
    with ctx.upstream(f"failed to get LKE cluster {params.cluster_id}"):
        c = LKECluster.from_api(await client.get(path))
        pools = [LKENodePool.from_api(d) for d in await client.paginate(f"{path}/pools")]

    text = fmt.details(
        "LKE Cluster",
        f"ID: {c.id}",
        f"Label: {c.label}",
        f"Region: {c.region}",
        f"Kubernetes Version: {c.k8s_version}",
        f"Status: {fmt.or_dash(c.status)}",
        f"HA Control Plane: {fmt.enabled(c.high_availability)}",
        fmt.section("Node Pools", *([_pool_line(pl) for pl in pools] or ["(none)"])),
        f"\nCreated: {fmt.timestamp(c.created)}",
        f"Updated: {fmt.timestamp(c.updated)}",
    )
    if c.tags:
        text += f"\nTags: {fmt.joined(c.tags)}"
    return text


@tool(
    "linode_lke_cluster_create",
    "Create an LKE cluster with one or more node pools.",
    ClusterCreateParams,
)
async def lke_cluster_create(
    ctx: CallContext, client: LinodeClient, params: ClusterCreateParams
) -> str:
    if not params.node_pools:
        raise ParameterError("node_pools must contain at least one pool")
    body: dict[str, Any] = {
        "label": params.label,
        "region": params.region,
        "k8s_version": params.k8s_version,
        "node_pools": [_pool_body(pool, i) for i, pool in enumerate(params.node_pools)],
    }
    if params.high_availability:
        body["control_plane"] = {"high_availability": True}
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream(f"failed to create LKE cluster {params.label}"):
        c = LKECluster.from_api(await client.post("lke/clusters", body))

    logger.info(f"Created LKE cluster {c.id} ({c.label}) in {c.region}")
    return (
        "LKE cluster created successfully!\n\n"
        f"ID: {c.id}\n"
        f"Label: {c.label}\n"
        f"Region: {c.region}\n"
        f"Kubernetes Version: {c.k8s_version}\n"
        f"HA Control Plane: {fmt.enabled(c.high_availability)}\n"
        f"Status: {fmt.or_dash(c.status)}"
    )


@tool("linode_lke_cluster_update", "Update an LKE cluster.", ClusterUpdateParams)
async def lke_cluster_update(
    ctx: CallContext, client: LinodeClient, params: ClusterUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.label:
        body["label"] = params.label
    if params.k8s_version:
        body["k8s_version"] = params.k8s_version
    if params.high_availability:
        body["control_plane"] = {"high_availability": True}
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError(
            "at least one of label, k8s_version, high_availability or tags must be provided"
        )

    with ctx.upstream(f"failed to update LKE cluster {params.cluster_id}"):
        c = LKECluster.from_api(await client.put(f"lke/clusters/{params.cluster_id}", body))
    return (
        "LKE cluster updated successfully!\n\n"
        f"ID: {c.id}\n"
        f"Label: {c.label}\n"
        f"Kubernetes Version: {c.k8s_version}\n"
        f"HA Control Plane: {fmt.enabled(c.high_availability)}\n"
        f"Status: {fmt.or_dash(c.status)}"
    )


@tool(
    "linode_lke_cluster_delete",
    "Delete an LKE cluster and all of its node pools.",
    ClusterIdParams,
)
async def lke_cluster_delete(
    ctx: CallContext, client: LinodeClient, params: ClusterIdParams
) -> str:
    path = f"lke/clusters/{params.cluster_id}"
    with ctx.upstream(f"failed to get LKE cluster {params.cluster_id}"):
        c = LKECluster.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete LKE cluster {params.cluster_id}"):
        await client.delete(path)

    logger.info(f"Deleted LKE cluster {c.id} ({c.label})")
    return (
        "LKE cluster deleted successfully!\n\n"
        f"Deleted Cluster: {c.label} (ID: {c.id})\n"
        "All node pools and their Linodes are being removed."
    )


@tool(
    "linode_lke_nodepool_create",
    "Add a node pool to an LKE cluster. Giving both autoscaler bounds enables the autoscaler.",
    NodePoolCreateParams,
)
async def lke_nodepool_create(
    ctx: CallContext, client: LinodeClient, params: NodePoolCreateParams
) -> str:
    body: dict[str, Any] = {"type": params.type, "count": params.count}
    if params.autoscaler_min or params.autoscaler_max:
        body["autoscaler"] = _autoscaler(params.autoscaler_min, params.autoscaler_max)
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream(f"failed to create node pool in LKE cluster {params.cluster_id}"):
        pool = LKENodePool.from_api(
            await client.post(f"lke/clusters/{params.cluster_id}/pools", body)
        )

    logger.info(f"Created node pool {pool.id} in LKE cluster {params.cluster_id}")
    return _pool_result("created", pool)


@tool("linode_lke_nodepool_update", "Resize or retune an LKE node pool.", NodePoolUpdateParams)
async def lke_nodepool_update(
    ctx: CallContext, client: LinodeClient, params: NodePoolUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.count:
        body["count"] = params.count
    if params.autoscaler == "enabled":
        body["autoscaler"] = _autoscaler(params.autoscaler_min, params.autoscaler_max)
    elif params.autoscaler == "disabled":
        body["autoscaler"] = {"enabled": False}
    elif params.autoscaler_min or params.autoscaler_max:
        raise ParameterError("autoscaler bounds need autoscaler set to enabled")
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError("at least one of count, autoscaler or tags must be provided")

    path = f"lke/clusters/{params.cluster_id}/pools/{params.pool_id}"
    with ctx.upstream(f"failed to update node pool {params.pool_id}"):
        pool = LKENodePool.from_api(await client.put(path, body))
    return _pool_result("updated", pool)


@tool("linode_lke_nodepool_delete", "Delete a node pool and its nodes.", NodePoolIdParams)
async def lke_nodepool_delete(
    ctx: CallContext, client: LinodeClient, params: NodePoolIdParams
) -> str:
    with ctx.upstream(f"failed to delete node pool {params.pool_id}"):
        await client.delete(f"lke/clusters/{params.cluster_id}/pools/{params.pool_id}")

    logger.info(f"Deleted node pool {params.pool_id} from LKE cluster {params.cluster_id}")
    return (
        "Node pool deleted successfully!\n\n"
        f"Pool {params.pool_id} removed from LKE cluster {params.cluster_id}."
    )


@tool("linode_lke_kubeconfig_get", "Get the kubeconfig for an LKE cluster.", ClusterIdParams)
async def lke_kubeconfig_get(
    ctx: CallContext, client: LinodeClient, params: ClusterIdParams
) -> str:
    with ctx.upstream(f"failed to get kubeconfig for LKE cluster {params.cluster_id}"):
        body = await client.get(f"lke/clusters/{params.cluster_id}/kubeconfig")

    service, _, name = ctx.qualifier.partition("/")
    encoded = body.get("kubeconfig")
    if not encoded:
        raise UpstreamError(service, name, "kubeconfig missing from response")
    try:
        kubeconfig = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise UpstreamError(service, name, "failed to decode kubeconfig", e) from e

    return (
        f"Kubeconfig for LKE cluster {params.cluster_id}:\n\n"
        f"```yaml\n{kubeconfig}\n```\n\n"
        "To use this kubeconfig:\n"
        "1. Save the content to a file (e.g., ~/.kube/config)\n"
        "2. Set KUBECONFIG environment variable: export KUBECONFIG=~/.kube/config\n"
        "3. Test connection: kubectl get nodes"
    )


TOOLS = [
    lke_clusters_list,
    lke_cluster_get,
    lke_cluster_create,
    lke_cluster_update,
    lke_cluster_delete,
    lke_nodepool_create,
    lke_nodepool_update,
    lke_nodepool_delete,
    lke_kubeconfig_get,
]
