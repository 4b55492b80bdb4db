"""Object Storage tools: buckets, access keys and clusters."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import (
    ObjectStorageBucket,
    ObjectStorageCluster,
    ObjectStorageKey,
)
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.objectstorage")

ACLS = ("private", "public-read", "authenticated-read", "public-read-write")
PERMISSIONS = ("read_only", "read_write")


@dataclass(frozen=True)
class BucketParams:
    region: str = p.string("Object Storage region ID, e.g. us-east", required=True)
    bucket: str = p.string("Bucket name", required=True)


@dataclass(frozen=True)
class BucketCreateParams:
    label: str = p.string("Bucket name (DNS compatible)", required=True)
    region: str = p.string("Object Storage region ID, e.g. us-east", required=True)
    acl: str = p.string("Canned access control list", choices=ACLS)
    cors_enabled: bool = p.boolean("Enable CORS for the bucket")


@dataclass(frozen=True)
class BucketUpdateParams:
    region: str = p.string("Object Storage region ID, e.g. us-east", required=True)
    bucket: str = p.string("Bucket name", required=True)
    acl: str = p.string("New canned access control list", choices=ACLS)
    cors: str = p.string("Turn CORS on or off", choices=("enabled", "disabled"))


@dataclass(frozen=True)
class KeyIdParams:
    key_id: int = p.identifier("The ID of the access key", required=True)


@dataclass(frozen=True)
class KeyCreateParams:
    label: str = p.string("Display label for the key", required=True)
    bucket_access: list[dict] = p.mapping_list(
        "Limit the key to buckets: objects with region, bucket_name and permissions "
        "(read_only or read_write). Omit for full access."
    )


@dataclass(frozen=True)
class KeyUpdateParams:
    key_id: int = p.identifier("The ID of the access key", required=True)
    label: str = p.string("New display label", required=True)


def _bucket_summary(b: ObjectStorageBucket) -> str:
    return "\n".join(
        [
            f"Bucket: {b.label}",
            fmt.fields(("Region", b.region), ("Hostname", fmt.or_dash(b.hostname))),
            fmt.fields(
                ("Objects", b.objects),
                ("Size", fmt.size_bytes(b.size)),
                ("Created", fmt.timestamp(b.created)),
            ),
        ]
    )


def _access_line(access: dict[str, Any]) -> str:
    return (
        f"{access.get('bucket_name', '-')} ({access.get('region') or access.get('cluster', '-')})"
        f": {access.get('permissions', '-')}"
    )


def _key_summary(k: ObjectStorageKey) -> str:
    # The secret half is only ever returned at creation time.
    return "\n".join(
        [
            fmt.record_header(k.id, k.label),
            fmt.fields(("Access Key", k.access_key), ("Limited", fmt.flag(k.limited))),
        ]
    )


def _cluster_summary(c: ObjectStorageCluster) -> str:
    return "\n".join(
        [
            f"ID: {c.id}",
            fmt.fields(
                ("Region", c.region),
                ("Status", c.status),
                ("Domain", fmt.or_dash(c.domain)),
            ),
        ]
    )


def _bucket_access_body(entries: list[dict]) -> list[dict[str, str]]:
    body = []
    for i, entry in enumerate(entries):
        where = f"bucket_access[{i}]: "
        for key in ("region", "bucket_name"):
            if not isinstance(entry.get(key), str) or not entry[key]:
                raise ParameterError(f"{where}{key} must be a non-empty string")
        if entry.get("permissions") not in PERMISSIONS:
            raise ParameterError(f"{where}permissions must be one of: {', '.join(PERMISSIONS)}")
        body.append(
            {
                "region": entry["region"],
                "bucket_name": entry["bucket_name"],
                "permissions": entry["permissions"],
            }
        )
    return body


@tool("linode_objectstorage_buckets_list", "List Object Storage buckets.", p.NoParams)
async def objectstorage_buckets_list(
    ctx: CallContext, client: LinodeClient, params: p.NoParams
) -> str:
    with ctx.upstream("failed to list Object Storage buckets"):
        buckets = [
            ObjectStorageBucket.from_api(d) for d in await client.paginate("object-storage/buckets")
        ]
    return fmt.listing(buckets, "Object Storage bucket", _bucket_summary)


@tool("linode_objectstorage_bucket_get", "Get an Object Storage bucket.", BucketParams)
async def objectstorage_bucket_get(
    ctx: CallContext, client: LinodeClient, params: BucketParams
) -> str:
    path = f"object-storage/buckets/{params.region}/{params.bucket}"
    with ctx.upstream(f"failed to get bucket {params.bucket} in {params.region}"):
        b = ObjectStorageBucket.from_api(await client.get(path))
    return fmt.details(
        "Object Storage Bucket",
        f"Name: {b.label}",
        f"Region: {b.region}",
        f"Hostname: {fmt.or_dash(b.hostname)}",
        f"Objects: {b.objects}",
        f"Size: {fmt.size_bytes(b.size)}",
        f"Created: {fmt.timestamp(b.created)}",
    )


@tool("linode_objectstorage_bucket_create", "Create an Object Storage bucket.", BucketCreateParams)
async def objectstorage_bucket_create(
    ctx: CallContext, client: LinodeClient, params: BucketCreateParams
) -> str:
    body: dict[str, Any] = {"label": params.label, "region": params.region}
    if params.acl:
        body["acl"] = params.acl
    if params.cors_enabled:
        body["cors_enabled"] = True

    with ctx.upstream(f"failed to create bucket {params.label}"):
        b = ObjectStorageBucket.from_api(await client.post("object-storage/buckets", body))

    logger.info(f"Created Object Storage bucket {b.label} in {b.region}")
    return (
        "Object Storage bucket created successfully!\n\n"
        f"Name: {b.label}\n"
        f"Region: {b.region}\n"
        f"Hostname: {fmt.or_dash(b.hostname)}"
    )


@tool(
    "linode_objectstorage_bucket_update",
    "Update the ACL or CORS setting of an Object Storage bucket.",
    BucketUpdateParams,
)
async def objectstorage_bucket_update(
    ctx: CallContext, client: LinodeClient, params: BucketUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.acl:
        body["acl"] = params.acl
    if params.cors:
        body["cors_enabled"] = params.cors == "enabled"
    if not body:
        raise ParameterError("at least one of acl or cors must be provided")

    path = f"object-storage/buckets/{params.region}/{params.bucket}/access"
    with ctx.upstream(f"failed to update access for bucket {params.bucket}"):
        await client.post(path, body)

    lines = [f"Bucket: {params.bucket}", f"Region: {params.region}"]
    if params.acl:
        lines.append(f"ACL: {params.acl}")
    if params.cors:
        lines.append(f"CORS: {params.cors.capitalize()}")
    return "Object Storage bucket updated successfully!\n\n" + "\n".join(lines)


@tool(
    "linode_objectstorage_bucket_delete",
    "Delete an empty Object Storage bucket.",
    BucketParams,
)
async def objectstorage_bucket_delete(
    ctx: CallContext, client: LinodeClient, params: BucketParams
) -> str:
    with ctx.upstream(f"failed to delete bucket {params.bucket}"):
        await client.delete(f"object-storage/buckets/{params.region}/{params.bucket}")

    logger.info(f"Deleted Object Storage bucket {params.bucket} in {params.region}")
    return (
        "Object Storage bucket deleted successfully!\n\n"
        f"Deleted Bucket: {params.bucket} ({params.region})"
    )


@tool("linode_objectstorage_keys_list", "List Object Storage access keys.", p.NoParams)
async def objectstorage_keys_list(
    ctx: CallContext, client: LinodeClient, params: p.NoParams
) -> str:
    with ctx.upstream("failed to list Object Storage keys"):
        keys = [ObjectStorageKey.from_api(d) for d in await client.paginate("object-storage/keys")]
    return fmt.listing(keys, "Object Storage key", _key_summary)


@tool("linode_objectstorage_key_get", "Get an Object Storage access key.", KeyIdParams)
async def objectstorage_key_get(
    ctx: CallContext, client: LinodeClient, params: KeyIdParams
) -> str:
    with ctx.upstream(f"failed to get Object Storage key {params.key_id}"):
        k = ObjectStorageKey.from_api(await client.get(f"object-storage/keys/{params.key_id}"))

    access = [_access_line(a) for a in k.bucket_access] or ["(all buckets)"]
    return fmt.details(
        "Object Storage Key",
        f"ID: {k.id}",
        f"Label: {k.label}",
        f"Access Key: {k.access_key}",
        f"Limited: {fmt.flag(k.limited)}",
        fmt.section("Bucket Access", *access),
    )


@tool(
    "linode_objectstorage_key_create",
    "Create an Object Storage access key. The secret is shown only once.",
    KeyCreateParams,
)
async def objectstorage_key_create(
    ctx: CallContext, client: LinodeClient, params: KeyCreateParams
) -> str:
    body: dict[str, Any] = {"label": params.label}
    if params.bucket_access:
        body["bucket_access"] = _bucket_access_body(params.bucket_access)

    with ctx.upstream(f"failed to create Object Storage key {params.label}"):
        k = ObjectStorageKey.from_api(await client.post("object-storage/keys", body))

    logger.info(f"Created Object Storage key {k.id} ({k.label})")
    return (
        "Object Storage key created successfully!\n\n"
        f"ID: {k.id}\n"
        f"Label: {k.label}\n"
        f"Access Key: {k.access_key}\n"
        f"Secret Key: {k.secret_key}\n"
        f"Access: {'Limited' if k.limited else 'Full'}\n\n"
        "Store the secret key now; it cannot be retrieved again."
    )


@tool("linode_objectstorage_key_update", "Rename an Object Storage access key.", KeyUpdateParams)
async def objectstorage_key_update(
    ctx: CallContext, client: LinodeClient, params: KeyUpdateParams
) -> str:
    path = f"object-storage/keys/{params.key_id}"
    with ctx.upstream(f"failed to update Object Storage key {params.key_id}"):
        k = ObjectStorageKey.from_api(await client.put(path, {"label": params.label}))
    return f"Object Storage key updated successfully!\n\nID: {k.id}\nLabel: {k.label}"


@tool(
    "linode_objectstorage_key_delete",
    "Revoke an Object Storage access key.",
    KeyIdParams,
)
async def objectstorage_key_delete(
    ctx: CallContext, client: LinodeClient, params: KeyIdParams
) -> str:
    with ctx.upstream(f"failed to delete Object Storage key {params.key_id}"):
        await client.delete(f"object-storage/keys/{params.key_id}")

    logger.info(f"Revoked Object Storage key {params.key_id}")
    return f"Object Storage key deleted successfully!\n\nKey {params.key_id} has been revoked."


@tool(
    "linode_objectstorage_clusters_list",
    "List Object Storage clusters and the regions they serve.",
    p.NoParams,
)
async def objectstorage_clusters_list(
    ctx: CallContext, client: LinodeClient, params: p.NoParams
) -> str:
    with ctx.upstream("failed to list Object Storage clusters"):
        clusters = [
            ObjectStorageCluster.from_api(d)
            for d in await client.paginate("object-storage/clusters")
        ]
    return fmt.listing(clusters, "Object Storage cluster", _cluster_summary)


TOOLS = [
    objectstorage_buckets_list,
    objectstorage_bucket_get,
    objectstorage_bucket_create,
    objectstorage_bucket_update,
    objectstorage_bucket_delete,
    objectstorage_keys_list,
    objectstorage_key_get,
    objectstorage_key_create,
    objectstorage_key_update,
    objectstorage_key_delete,
    objectstorage_clusters_list,
]
