"""Block storage volume tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Volume
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.volumes")

MIN_VOLUME_GB = 10
MAX_VOLUME_GB = 8192


@dataclass(frozen=True)
class VolumeIdParams:
    volume_id: int = p.identifier("The ID of the volume", required=True)


@dataclass(frozen=True)
class VolumeCreateParams:
    label: str = p.string("Label for the volume", required=True)
    size: int = p.integer(
        "Size of the volume in GB",
        required=True,
        minimum=MIN_VOLUME_GB,
        maximum=MAX_VOLUME_GB,
        unit="GB",
    )
    region: str = p.string("Region for the volume (required unless linode_id is set)")
    linode_id: int = p.identifier("Linode instance to attach the new volume to")
    tags: list[str] = p.string_list("Tags to apply")


@dataclass(frozen=True)
class VolumeAttachParams:
    volume_id: int = p.identifier("The ID of the volume", required=True)
    linode_id: int = p.identifier("The ID of the Linode instance to attach to", required=True)
    persist_across_boots: bool = p.boolean(
        "Keep the volume attached across reboots", default=True
    )


def _summary(vol: Volume) -> str:
    lines = [
        fmt.record_header(vol.id, vol.label),
        fmt.fields(("Status", vol.status), ("Size", fmt.gb(vol.size)), ("Region", vol.region)),
    ]
    if vol.attached:
        attached = f"Linode {vol.linode_id}"
        if vol.linode_label:
            attached += f" ({vol.linode_label})"
        lines.append(fmt.fields(("Attached to", attached)))
        if vol.filesystem_path:
            lines.append(fmt.fields(("Mount Path", vol.filesystem_path)))
    if vol.tags:
        lines.append(fmt.fields(("Tags", fmt.joined(vol.tags))))
    return "\n".join(lines)


@tool("linode_volumes_list", "List all block storage volumes.", p.NoParams)
async def volumes_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list volumes"):
        volumes = [Volume.from_api(d) for d in await client.paginate("volumes")]
    return fmt.listing(volumes, "volume", _summary)


@tool("linode_volume_get", "Get details of a block storage volume.", VolumeIdParams)
async def volume_get(ctx: CallContext, client: LinodeClient, params: VolumeIdParams) -> str:
    with ctx.upstream(f"failed to get volume {params.volume_id}"):
        vol = Volume.from_api(await client.get(f"volumes/{params.volume_id}"))

    text = fmt.details(
        "Volume",
        f"ID: {vol.id}",
        f"Label: {vol.label}",
        f"Status: {vol.status}",
        f"Size: {fmt.gb(vol.size)}",
        f"Region: {vol.region}",
        f"\nCreated: {fmt.timestamp(vol.created)}",
        f"Updated: {fmt.timestamp(vol.updated)}",
    )
    if vol.attached:
        text += f"\n\nAttached to Linode: {vol.linode_id}"
        if vol.linode_label:
            text += f" ({vol.linode_label})"
        if vol.filesystem_path:
            text += f"\nMount Path: {vol.filesystem_path}"
    else:
        text += "\n\nAttachment: Unattached"
    if vol.tags:
        text += f"\n\nTags: {fmt.joined(vol.tags)}"
    return text


@tool(
    "linode_volume_create",
    f"Create a block storage volume ({MIN_VOLUME_GB}-{MAX_VOLUME_GB} GB).",
    VolumeCreateParams,
)
async def volume_create(ctx: CallContext, client: LinodeClient, params: VolumeCreateParams) -> str:
    body: dict = {"label": params.label, "size": params.size}
    if params.region:
        body["region"] = params.region
    if params.linode_id:
        body["linode_id"] = params.linode_id
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream("failed to create volume"):
        vol = Volume.from_api(await client.post("volumes", body))

    logger.info(f"Created volume {vol.id} ({vol.label})")
    text = (
        "Volume created successfully!\n\n"
        f"ID: {vol.id}\n"
        f"Label: {vol.label}\n"
        f"Size: {fmt.gb(vol.size)}\n"
        f"Region: {vol.region}\n"
        f"Status: {vol.status}"
    )
    if vol.attached:
        text += f"\nAttached to Linode: {vol.linode_id}"
        if vol.filesystem_path:
            text += f"\nMount Path: {vol.filesystem_path}"
    return text


@tool("linode_volume_delete", "Delete a block storage volume.", VolumeIdParams)
async def volume_delete(ctx: CallContext, client: LinodeClient, params: VolumeIdParams) -> str:
    path = f"volumes/{params.volume_id}"
    with ctx.upstream(f"failed to get volume {params.volume_id}"):
        vol = Volume.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete volume {params.volume_id}"):
        await client.delete(path)

    logger.info(f"Deleted volume {vol.id} ({vol.label})")
    return (
        "Volume deleted successfully!\n\n"
        "Deleted Volume:\n"
        f"  ID: {vol.id}\n"
        f"  Label: {vol.label}\n"
        f"  Size: {fmt.gb(vol.size)}\n"
        f"  Region: {vol.region}\n\n"
        "The volume has been permanently deleted."
    )


@tool("linode_volume_attach", "Attach a volume to a Linode instance.", VolumeAttachParams)
async def volume_attach(ctx: CallContext, client: LinodeClient, params: VolumeAttachParams) -> str:
    body = {"linode_id": params.linode_id, "persist_across_boots": params.persist_across_boots}
    with ctx.upstream(
        f"failed to attach volume {params.volume_id} to instance {params.linode_id}"
    ):
        vol = Volume.from_api(await client.post(f"volumes/{params.volume_id}/attach", body))

    return (
        "Volume attached successfully!\n\n"
        f"Volume: {vol.label} (ID: {vol.id})\n"
        f"Attached to Linode: {params.linode_id}\n"
        f"Mount Path: {fmt.or_dash(vol.filesystem_path)}\n"
        f"Persist Across Boots: {fmt.flag(params.persist_across_boots)}\n\n"
        "To mount the volume, SSH into your Linode and run:\n"
        f"mkdir -p /mnt/{vol.label}\n"
        f"mount {vol.filesystem_path} /mnt/{vol.label}"
    )


@tool("linode_volume_detach", "Detach a volume from its Linode instance.", VolumeIdParams)
async def volume_detach(ctx: CallContext, client: LinodeClient, params: VolumeIdParams) -> str:
    with ctx.upstream(f"failed to get volume {params.volume_id}"):
        vol = Volume.from_api(await client.get(f"volumes/{params.volume_id}"))
    with ctx.upstream(f"failed to detach volume {params.volume_id}"):
        await client.post(f"volumes/{params.volume_id}/detach")

    text = (
        "Volume detached successfully!\n\n"
        f"Volume: {vol.label} (ID: {vol.id})"
    )
    if vol.attached:
        text += f"\nDetached from Linode: {vol.linode_id}"
    return text


TOOLS = [volumes_list, volume_get, volume_create, volume_delete, volume_attach, volume_detach]
