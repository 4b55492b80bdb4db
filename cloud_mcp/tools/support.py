"""Support ticket tools."""

from __future__ import annotations

from dataclasses import dataclass

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import SupportTicket
from cloud_mcp.registry import CallContext, tool


@dataclass(frozen=True)
class TicketIdParams:
    ticket_id: int = p.identifier("The ID of the support ticket", required=True)


def _summary(t: SupportTicket) -> str:
    lines = [
        fmt.record_header(t.id, t.summary),
        fmt.fields(("Status", t.status), ("Opened", fmt.timestamp(t.opened))),
    ]
    if t.entity_label:
        lines.append(fmt.fields(("Entity", f"{t.entity_label} ({t.entity_type})")))
    return "\n".join(lines)


@tool("linode_support_tickets_list", "List support tickets on the account.", p.NoParams)
async def support_tickets_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list support tickets"):
        tickets = [SupportTicket.from_api(d) for d in await client.paginate("support/tickets")]
    return fmt.listing(tickets, "support ticket", _summary)


@tool("linode_support_ticket_get", "Get a support ticket.", TicketIdParams)
async def support_ticket_get(ctx: CallContext, client: LinodeClient, params: TicketIdParams) -> str:
    with ctx.upstream(f"failed to get support ticket {params.ticket_id}"):
        t = SupportTicket.from_api(await client.get(f"support/tickets/{params.ticket_id}"))

    entity = f"{t.entity_label} ({t.entity_type})" if t.entity_label else "-"
    text = fmt.details(
        "Support Ticket",
        f"ID: {t.id}",
        f"Summary: {t.summary}",
        f"Status: {t.status}",
        f"Entity: {entity}",
        f"Opened: {fmt.timestamp(t.opened)}",
        f"Updated: {fmt.timestamp(t.updated)}",
    )
    if t.description:
        text += f"\n\nDescription:\n{t.description}"
    return text


TOOLS = [support_tickets_list, support_ticket_get]
