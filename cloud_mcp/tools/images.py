"""Image tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Image
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.images")


@dataclass(frozen=True)
class ImagesListParams:
    is_public: str = p.string(
        "Only list public images (true) or private images (false)", choices=("true", "false")
    )


@dataclass(frozen=True)
class ImageIdParams:
    image_id: str = p.string("The image ID, e.g. private/12345", required=True)


@dataclass(frozen=True)
class ImageCreateParams:
    disk_id: int = p.identifier("The ID of the Linode disk to capture", required=True)
    label: str = p.string("Label for the image", required=True)
    description: str = p.string("Description of the image")
    cloud_init: bool = p.boolean("Image supports cloud-init metadata")
    tags: list[str] = p.string_list("Tags to apply")


@dataclass(frozen=True)
class ImageUpdateParams:
    image_id: str = p.string("The image ID, e.g. private/12345", required=True)
    label: str = p.string("New label")
    description: str = p.string("New description")
    tags: list[str] = p.string_list("Replacement tag list")


@dataclass(frozen=True)
class ImageUploadParams:
    label: str = p.string("Label for the uploaded image", required=True)
    region: str = p.string("Region that receives the upload", required=True)
    description: str = p.string("Description of the image")
    cloud_init: bool = p.boolean("Image supports cloud-init metadata")
    tags: list[str] = p.string_list("Tags to apply")


def _summary(img: Image) -> str:
    lines = [
        f"ID: {img.id} | {img.label}",
        fmt.fields(
            ("Type", img.type),
            ("Status", img.status),
            ("Size", fmt.mb(img.size)),
            ("Public", fmt.flag(img.is_public)),
        ),
    ]
    if img.deprecated:
        lines.append(fmt.fields(("Deprecated", fmt.flag(img.deprecated))))
    if img.description:
        lines.append(fmt.fields(("Description", img.description)))
    return "\n".join(lines)


def _detail(title: str, img: Image) -> str:
    text = fmt.details(
        title,
        f"ID: {img.id}",
        f"Label: {img.label}",
        f"Description: {fmt.or_dash(img.description)}",
        f"Type: {img.type}",
        f"Status: {img.status}",
        f"Size: {fmt.mb(img.size)}",
        f"Public: {fmt.flag(img.is_public)}",
        f"Deprecated: {fmt.flag(img.deprecated)}",
        f"Created: {fmt.timestamp(img.created)}",
        f"Created By: {fmt.or_dash(img.created_by)}",
    )
    if img.regions:
        text += "\n" + fmt.section(
            "Regions", *[f"{r.region}: {r.status}" for r in img.regions]
        ).lstrip("\n")
    if img.tags:
        text += f"\nTags: {fmt.joined(img.tags)}"
    return text


@tool(
    "linode_images_list",
    "List available images, optionally filtered by visibility.",
    ImagesListParams,
)
async def images_list(ctx: CallContext, client: LinodeClient, params: ImagesListParams) -> str:
    filters = {"is_public": params.is_public == "true"} if params.is_public else None
    with ctx.upstream("failed to list images"):
        images = [Image.from_api(d) for d in await client.paginate("images", filters=filters)]
    return fmt.listing(images, "image", _summary)


@tool("linode_image_get", "Get details of an image.", ImageIdParams)
async def image_get(ctx: CallContext, client: LinodeClient, params: ImageIdParams) -> str:
    with ctx.upstream(f"failed to get image {params.image_id}"):
        img = Image.from_api(await client.get(f"images/{params.image_id}"))
    return _detail("Image", img)


@tool("linode_image_create", "Create a private image from a Linode disk.", ImageCreateParams)
async def image_create(ctx: CallContext, client: LinodeClient, params: ImageCreateParams) -> str:
    body: dict = {"disk_id": params.disk_id, "label": params.label}
    if params.description:
        body["description"] = params.description
    if params.cloud_init:
        body["cloud_init"] = True
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream(f"failed to create image from disk {params.disk_id}"):
        img = Image.from_api(await client.post("images", body))

    logger.info(f"Created image {img.id} ({img.label})")
    return (
        "Image created successfully!\n\n"
        f"ID: {img.id}\n"
        f"Label: {img.label}\n"
        f"Status: {img.status}\n\n"
        "The image is being captured; it can be used once its status is available."
    )


@tool(
    "linode_image_upload_create",
    "Create an image and return the URL its disk file must be uploaded to.",
    ImageUploadParams,
)
async def image_upload_create(
    ctx: CallContext, client: LinodeClient, params: ImageUploadParams
) -> str:
    body: dict = {"label": params.label, "region": params.region}
    if params.description:
        body["description"] = params.description
    if params.cloud_init:
        body["cloud_init"] = True
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream(f"failed to create image upload {params.label}"):
        data = await client.post("images/upload", body)
    img = Image.from_api(data.get("image") or {})

    logger.info(f"Created image upload {img.id} ({img.label}) in {params.region}")
    return (
        "Image upload created successfully!\n\n"
        f"ID: {img.id}\n"
        f"Label: {img.label}\n"
        f"Status: {img.status}\n"
        f"Upload URL: {fmt.or_dash(data.get('upload_to'))}\n\n"
        "PUT the gzip-compressed raw disk file to the upload URL; the URL expires after a "
        "short time."
    )


@tool("linode_image_update", "Update an image's label, description or tags.", ImageUpdateParams)
async def image_update(ctx: CallContext, client: LinodeClient, params: ImageUpdateParams) -> str:
    body: dict = {}
    if params.label:
        body["label"] = params.label
    if params.description:
        body["description"] = params.description
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError("at least one of label, description or tags must be provided")

    with ctx.upstream(f"failed to update image {params.image_id}"):
        img = Image.from_api(await client.put(f"images/{params.image_id}", body))
    return "Image updated successfully!\n\n" + _detail("Image", img)


@tool("linode_image_delete", "Delete a private image.", ImageIdParams)
async def image_delete(ctx: CallContext, client: LinodeClient, params: ImageIdParams) -> str:
    path = f"images/{params.image_id}"
    with ctx.upstream(f"failed to get image {params.image_id}"):
        img = Image.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete image {params.image_id}"):
        await client.delete(path)

    logger.info(f"Deleted image {img.id} ({img.label})")
    return f"Image deleted successfully!\n\nDeleted Image: {img.label} (ID: {img.id})"


TOOLS = [images_list, image_get, image_create, image_upload_create, image_update, image_delete]
