"""Linode instance tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Instance
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.instances")


@dataclass(frozen=True)
class InstanceIdParams:
    instance_id: int = p.identifier("The ID of the Linode instance", required=True)


@dataclass(frozen=True)
class InstancePowerParams:
    instance_id: int = p.identifier("The ID of the Linode instance", required=True)
    config_id: int = p.identifier("Configuration profile to use (defaults to the last booted)")


@dataclass(frozen=True)
class InstanceCreateParams:
    region: str = p.string("Region for the instance, e.g. us-east", required=True)
    type: str = p.string("Linode plan type, e.g. g6-nanode-1", required=True)
    label: str = p.string("Label for the instance", required=True)
    image: str = p.string("Image to deploy, e.g. linode/ubuntu22.04")
    root_pass: str = p.string("Root password (required when deploying an image)")
    authorized_keys: list[str] = p.string_list("SSH public keys to install for root")
    stackscript_id: int = p.identifier("StackScript to run on first boot")
    backups_enabled: bool = p.boolean("Enroll the instance in the backup service")
    private_ip: bool = p.boolean("Allocate a private IPv4 address")
    tags: list[str] = p.string_list("Tags to apply")


def _summary(inst: Instance) -> str:
    lines = [
        fmt.record_header(inst.id, inst.label),
        fmt.fields(("Status", inst.status), ("Region", inst.region), ("Type", inst.type)),
    ]
    if inst.ipv4:
        lines.append(fmt.fields(("IPv4", fmt.bracketed(inst.ipv4))))
    return "\n".join(lines)


@tool("linode_instances_list", "List all Linode instances on the current account.", p.NoParams)
async def instances_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list instances"):
        instances = [Instance.from_api(d) for d in await client.paginate("linode/instances")]
    return fmt.listing(instances, "Linode instance", _summary)


@tool("linode_instance_get", "Get details of a single Linode instance.", InstanceIdParams)
async def instance_get(ctx: CallContext, client: LinodeClient, params: InstanceIdParams) -> str:
    with ctx.upstream(f"failed to get instance {params.instance_id}"):
        inst = Instance.from_api(await client.get(f"linode/instances/{params.instance_id}"))

    text = fmt.details(
        "Instance",
        f"ID: {inst.id}",
        f"Label: {inst.label}",
        f"Status: {inst.status}",
        f"Region: {inst.region}",
        f"Type: {inst.type}",
        f"Image: {fmt.or_dash(inst.image)}",
        fmt.section(
            "Specifications",
            f"CPUs: {inst.specs.vcpus}",
            f"Memory: {fmt.mb(inst.specs.memory)}",
            f"Disk: {fmt.mb_to_gb(inst.specs.disk)}",
            f"Transfer: {fmt.gb(inst.specs.transfer)}",
        ),
        fmt.section(
            "Network",
            f"IPv4: {fmt.joined(inst.ipv4)}",
            f"IPv6: {inst.ipv6}",
        ),
        f"\nCreated: {fmt.timestamp(inst.created)}",
        f"Updated: {fmt.timestamp(inst.updated)}",
        f"\nBackups: {fmt.enabled(inst.backups_enabled)}",
        f"Watchdog: {fmt.enabled(inst.watchdog_enabled)}",
    )
    if inst.tags:
        text += f"\nTags: {fmt.joined(inst.tags)}"
    return text


@tool("linode_instance_create", "Create a new Linode instance.", InstanceCreateParams)
async def instance_create(
    ctx: CallContext, client: LinodeClient, params: InstanceCreateParams
) -> str:
    body: dict = {"region": params.region, "type": params.type, "label": params.label}
    if params.image:
        body["image"] = params.image
    if params.root_pass:
        body["root_pass"] = params.root_pass
    if params.authorized_keys:
        body["authorized_keys"] = params.authorized_keys
    if params.stackscript_id:
        body["stackscript_id"] = params.stackscript_id
    if params.backups_enabled:
        body["backups_enabled"] = True
    if params.private_ip:
        body["private_ip"] = True
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream("failed to create instance"):
        inst = Instance.from_api(await client.post("linode/instances", body))

    logger.info(f"Created Linode instance {inst.id} ({inst.label})")
    return (
        "Instance created successfully!\n\n"
        f"ID: {inst.id}\n"
        f"Label: {inst.label}\n"
        f"Status: {inst.status}\n"
        f"Region: {inst.region}\n"
        f"Type: {inst.type}\n"
        f"IPv4: {fmt.joined(inst.ipv4)}\n"
        f"IPv6: {inst.ipv6}\n\n"
        f"The instance is now being provisioned. "
        f"Use linode_instance_get with ID {inst.id} to check its status."
    )


@tool("linode_instance_delete", "Delete a Linode instance and all of its disks.", InstanceIdParams)
async def instance_delete(ctx: CallContext, client: LinodeClient, params: InstanceIdParams) -> str:
    path = f"linode/instances/{params.instance_id}"
    with ctx.upstream(f"failed to get instance {params.instance_id}"):
        inst = Instance.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete instance {params.instance_id}"):
        await client.delete(path)

    logger.info(f"Deleted Linode instance {inst.id} ({inst.label})")
    return (
        "Instance deleted successfully!\n\n"
        "Deleted Instance:\n"
        f"  ID: {inst.id}\n"
        f"  Label: {inst.label}\n"
        f"  Region: {inst.region}\n"
        f"  Type: {inst.type}\n\n"
        "The instance and all its disks have been permanently deleted."
    )


async def _power_action(
    ctx: CallContext, client: LinodeClient, instance_id: int, action: str, body: dict, progress: str
) -> str:
    path = f"linode/instances/{instance_id}"
    with ctx.upstream(f"failed to {action} instance {instance_id}"):
        await client.post(f"{path}/{action}", body)
    with ctx.upstream("failed to get updated instance status"):
        inst = Instance.from_api(await client.get(path))
    return (
        f"Instance {action} initiated successfully!\n\n"
        f"Instance: {inst.label} (ID: {inst.id})\n"
        f"Status: {inst.status}\n"
        f"Region: {inst.region}\n\n"
        f"The instance is now {progress}."
    )


def _config_body(config_id: int) -> dict:
    return {"config_id": config_id} if config_id else {}


@tool("linode_instance_boot", "Boot a Linode instance.", InstancePowerParams)
async def instance_boot(ctx: CallContext, client: LinodeClient, params: InstancePowerParams) -> str:
    return await _power_action(
        ctx, client, params.instance_id, "boot", _config_body(params.config_id), "booting up"
    )


@tool("linode_instance_shutdown", "Shut down a running Linode instance.", InstanceIdParams)
async def instance_shutdown(
    ctx: CallContext, client: LinodeClient, params: InstanceIdParams
) -> str:
    return await _power_action(ctx, client, params.instance_id, "shutdown", {}, "shutting down")


@tool("linode_instance_reboot", "Reboot a Linode instance.", InstancePowerParams)
async def instance_reboot(
    ctx: CallContext, client: LinodeClient, params: InstancePowerParams
) -> str:
    return await _power_action(
        ctx, client, params.instance_id, "reboot", _config_body(params.config_id), "rebooting"
    )


TOOLS = [
    instances_list,
    instance_get,
    instance_create,
    instance_delete,
    instance_boot,
    instance_shutdown,
    instance_reboot,
]
