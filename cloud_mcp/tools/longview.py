"""Longview monitoring client tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import LongviewClient
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.longview")


@dataclass(frozen=True)
class ClientIdParams:
    client_id: int = p.identifier("The ID of the Longview client", required=True)


@dataclass(frozen=True)
class ClientCreateParams:
    label: str = p.string("Display label for the Longview client", required=True)


@dataclass(frozen=True)
class ClientUpdateParams:
    client_id: int = p.identifier("The ID of the Longview client", required=True)
    label: str = p.string("New display label", required=True)


def _summary(c: LongviewClient) -> str:
    # API keys stay out of listings; longview_client_get shows them.
    return "\n".join(
        [
            fmt.record_header(c.id, c.label),
            fmt.fields(
                ("Created", fmt.timestamp(c.created)), ("Updated", fmt.timestamp(c.updated))
            ),
            fmt.fields(("Apps", fmt.joined(c.apps) or "none")),
        ]
    )


@tool("linode_longview_clients_list", "List Longview monitoring clients.", p.NoParams)
async def longview_clients_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list Longview clients"):
        clients = [LongviewClient.from_api(d) for d in await client.paginate("longview/clients")]
    return fmt.listing(clients, "Longview client", _summary)


@tool(
    "linode_longview_client_get",
    "Get a Longview client including its API key and install code.",
    ClientIdParams,
)
async def longview_client_get(
    ctx: CallContext, client: LinodeClient, params: ClientIdParams
) -> str:
    with ctx.upstream(f"failed to get Longview client {params.client_id}"):
        c = LongviewClient.from_api(await client.get(f"longview/clients/{params.client_id}"))

    return fmt.details(
        "Longview Client",
        f"ID: {c.id}",
        f"Label: {c.label}",
        f"API Key: {fmt.or_dash(c.api_key)}",
        f"Install Code: {fmt.or_dash(c.install_code)}",
        f"Monitored Apps: {fmt.joined(c.apps) or 'none'}",
        f"Created: {fmt.timestamp(c.created)}",
        f"Updated: {fmt.timestamp(c.updated)}",
        fmt.section(
            "Installation",
            "1. Install the Longview agent on the server",
            f"2. Configure it with the API key {fmt.or_dash(c.api_key)}",
            "3. Watch the metrics in the Linode Cloud Manager",
        ),
    )


@tool("linode_longview_client_create", "Create a Longview client.", ClientCreateParams)
async def longview_client_create(
    ctx: CallContext, client: LinodeClient, params: ClientCreateParams
) -> str:
    with ctx.upstream(f"failed to create Longview client {params.label}"):
        c = LongviewClient.from_api(
            await client.post("longview/clients", {"label": params.label})
        )

    logger.info(f"Created Longview client {c.id} ({c.label})")
    return (
        "Longview client created successfully!\n\n"
        f"ID: {c.id}\n"
        f"Label: {c.label}\n"
        f"API Key: {fmt.or_dash(c.api_key)}\n\n"
        "Use this API key to configure monitoring on your server."
    )


@tool("linode_longview_client_update", "Rename a Longview client.", ClientUpdateParams)
async def longview_client_update(
    ctx: CallContext, client: LinodeClient, params: ClientUpdateParams
) -> str:
    path = f"longview/clients/{params.client_id}"
    with ctx.upstream(f"failed to update Longview client {params.client_id}"):
        c = LongviewClient.from_api(await client.put(path, {"label": params.label}))
    return f"Longview client updated successfully!\n\nID: {c.id}\nLabel: {c.label}"


@tool("linode_longview_client_delete", "Delete a Longview client.", ClientIdParams)
async def longview_client_delete(
    ctx: CallContext, client: LinodeClient, params: ClientIdParams
) -> str:
    path = f"longview/clients/{params.client_id}"
    with ctx.upstream(f"failed to get Longview client {params.client_id}"):
        c = LongviewClient.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete Longview client {params.client_id}"):
        await client.delete(path)

    logger.info(f"Deleted Longview client {c.id} ({c.label})")
    return f"Longview client deleted successfully!\n\nDeleted Client: {c.label} (ID: {c.id})"


TOOLS = [
    longview_clients_list,
    longview_client_get,
    longview_client_create,
    longview_client_update,
    longview_client_delete,
]
