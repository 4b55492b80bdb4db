"""StackScript tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import StackScript
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.stackscripts")

MAX_DESCRIPTION = 100


@dataclass(frozen=True)
class StackScriptsListParams:
    include_public: bool = p.boolean(
        "Include public community StackScripts (can be thousands); default lists only your own"
    )


@dataclass(frozen=True)
class StackScriptIdParams:
    stackscript_id: int = p.identifier("The ID of the StackScript", required=True)


@dataclass(frozen=True)
class StackScriptCreateParams:
    label: str = p.string("Display label for the StackScript", required=True)
    script: str = p.string("Script body; must start with a shebang line", required=True)
    images: list[str] = p.string_list(
        "Compatible image IDs, e.g. linode/debian12 (any/all for every image)", required=True
    )
    description: str = p.string("Description of the StackScript")
    rev_note: str = p.string("Revision note for this version")
    is_public: bool = p.boolean("Publish the StackScript (cannot be made private again)")


@dataclass(frozen=True)
class StackScriptUpdateParams:
    stackscript_id: int = p.identifier("The ID of the StackScript", required=True)
    label: str = p.string("New display label")
    script: str = p.string("New script body; must start with a shebang line")
    images: list[str] = p.string_list("Replacement list of compatible image IDs")
    description: str = p.string("New description")
    rev_note: str = p.string("Revision note for this version")
    is_public: bool = p.boolean("Publish the StackScript (cannot be made private again)")


def _short(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > MAX_DESCRIPTION:
        return text[: MAX_DESCRIPTION - 3] + "..."
    return text


def _check_script(script: str) -> None:
    if script and not script.startswith("#!"):
        raise ParameterError("script must start with a shebang line, e.g. #!/bin/bash")


def _script_body(params: StackScriptCreateParams | StackScriptUpdateParams) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for key in ("label", "script", "images", "description", "rev_note"):
        if getattr(params, key):
            body[key] = getattr(params, key)
    if params.is_public:
        body["is_public"] = True
    return body


def _summary(s: StackScript) -> str:
    lines = [
        fmt.record_header(s.id, f"{s.label} ({'public' if s.is_public else 'private'})"),
        fmt.fields(
            ("Author", s.username),
            ("Deployments", f"{s.deployments_active} active / {s.deployments_total} total"),
        ),
        fmt.fields(("Images", fmt.joined(s.images) or "any")),
    ]
    if s.description:
        lines.append(fmt.fields(("Description", _short(s.description))))
    return "\n".join(lines)


@tool(
    "linode_stackscripts_list",
    "List StackScripts owned by the current account (optionally including public ones).",
    StackScriptsListParams,
)
async def stackscripts_list(
    ctx: CallContext, client: LinodeClient, params: StackScriptsListParams
) -> str:
    filters = None if params.include_public else {"mine": True}
    with ctx.upstream("failed to list StackScripts"):
        scripts = [
            StackScript.from_api(d)
            for d in await client.paginate("linode/stackscripts", filters=filters)
        ]
    return fmt.listing(scripts, "StackScript", _summary)


@tool("linode_stackscript_get", "Get a StackScript including its script body.", StackScriptIdParams)
async def stackscript_get(
    ctx: CallContext, client: LinodeClient, params: StackScriptIdParams
) -> str:
    with ctx.upstream(f"failed to get StackScript {params.stackscript_id}"):
        s = StackScript.from_api(await client.get(f"linode/stackscripts/{params.stackscript_id}"))

    text = fmt.details(
        "StackScript",
        f"ID: {s.id}",
        f"Label: {s.label}",
        f"Author: {s.username}",
        f"Public: {fmt.flag(s.is_public)}",
        f"Images: {fmt.joined(s.images) or 'any'}",
        f"Deployments: {s.deployments_active} active / {s.deployments_total} total",
        f"Revision Note: {fmt.or_dash(s.rev_note)}",
        f"Created: {fmt.timestamp(s.created)}",
        f"Updated: {fmt.timestamp(s.updated)}",
    )
    if s.description:
        text += f"\n\nDescription:\n{s.description}"
    if s.script:
        text += f"\n\nScript:\n```\n{s.script}\n```"
    return text


@tool("linode_stackscript_create", "Create a StackScript.", StackScriptCreateParams)
async def stackscript_create(
    ctx: CallContext, client: LinodeClient, params: StackScriptCreateParams
) -> str:
    _check_script(params.script)
    with ctx.upstream(f"failed to create StackScript {params.label}"):
        s = StackScript.from_api(await client.post("linode/stackscripts", _script_body(params)))

    logger.info(f"Created StackScript {s.id} ({s.label})")
    return (
        "StackScript created successfully!\n\n"
        f"ID: {s.id}\n"
        f"Label: {s.label}\n"
        f"Images: {fmt.joined(s.images) or 'any'}\n"
        f"Public: {fmt.flag(s.is_public)}"
    )


@tool("linode_stackscript_update", "Update a StackScript you own.", StackScriptUpdateParams)
async def stackscript_update(
    ctx: CallContext, client: LinodeClient, params: StackScriptUpdateParams
) -> str:
    _check_script(params.script)
    body = _script_body(params)
    if not body:
        raise ParameterError(
            "at least one of label, script, images, description, rev_note or is_public "
            "must be provided"
        )

    path = f"linode/stackscripts/{params.stackscript_id}"
    with ctx.upstream(f"failed to update StackScript {params.stackscript_id}"):
        s = StackScript.from_api(await client.put(path, body))
    return (
        "StackScript updated successfully!\n\n"
        f"ID: {s.id}\n"
        f"Label: {s.label}\n"
        f"Revision Note: {fmt.or_dash(s.rev_note)}\n"
        f"Public: {fmt.flag(s.is_public)}"
    )


@tool("linode_stackscript_delete", "Delete a private StackScript.", StackScriptIdParams)
async def stackscript_delete(
    ctx: CallContext, client: LinodeClient, params: StackScriptIdParams
) -> str:
    path = f"linode/stackscripts/{params.stackscript_id}"
    with ctx.upstream(f"failed to get StackScript {params.stackscript_id}"):
        s = StackScript.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete StackScript {params.stackscript_id}"):
        await client.delete(path)

    logger.info(f"Deleted StackScript {s.id} ({s.label})")
    return f"StackScript deleted successfully!\n\nDeleted StackScript: {s.label} (ID: {s.id})"


TOOLS = [
    stackscripts_list,
    stackscript_get,
    stackscript_create,
    stackscript_update,
    stackscript_delete,
]
