"""DNS domain and record tools."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Domain, DomainRecord
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.domains")

RECORD_TYPES = ("A", "AAAA", "NS", "MX", "CNAME", "TXT", "SRV", "PTR", "CAA")


@dataclass(frozen=True)
class DomainIdParams:
    domain_id: int = p.identifier("The ID of the domain", required=True)


@dataclass(frozen=True)
class DomainCreateParams:
    domain: str = p.string("The domain name, e.g. example.com", required=True)
    type: str = p.string("Zone type", choices=("master", "slave"), default="master")
    soa_email: str = p.string("Start of Authority email (required for master zones)")
    description: str = p.string("Description of the domain")
    ttl_sec: int = p.integer("Default TTL for records", minimum=0, unit="seconds")
    master_ips: list[str] = p.string_list("Master name server IPs (slave zones)")
    tags: list[str] = p.string_list("Tags to apply")


@dataclass(frozen=True)
class DomainUpdateParams:
    domain_id: int = p.identifier("The ID of the domain", required=True)
    soa_email: str = p.string("New Start of Authority email")
    description: str = p.string("New description")
    status: str = p.string("Zone status", choices=("active", "disabled"))
    ttl_sec: int = p.integer("Default TTL for records", minimum=0, unit="seconds")
    tags: list[str] = p.string_list("Replacement tag list")


@dataclass(frozen=True)
class DomainRecordCreateParams:
    domain_id: int = p.identifier("The ID of the domain", required=True)
    type: str = p.string("Record type", required=True, choices=RECORD_TYPES)
    name: str = p.string("Record name (hostname or subdomain; empty for the apex)")
    target: str = p.string("Record target (IP address, hostname or text)", required=True)
    ttl_sec: int = p.integer("TTL for this record", minimum=0, unit="seconds")
    priority: int = p.integer("Priority (MX and SRV)", minimum=0, maximum=255)
    weight: int = p.integer("Weight (SRV)", minimum=0, maximum=65535)
    port: int = p.integer("Port (SRV)", minimum=0, maximum=65535)


@dataclass(frozen=True)
class DomainRecordIdParams:
    domain_id: int = p.identifier("The ID of the domain", required=True)
    record_id: int = p.identifier("The ID of the record", required=True)


@dataclass(frozen=True)
class DomainRecordUpdateParams:
    domain_id: int = p.identifier("The ID of the domain", required=True)
    record_id: int = p.identifier("The ID of the record", required=True)
    name: str = p.string("New record name")
    target: str = p.string("New record target")
    ttl_sec: int = p.integer("New TTL for this record", minimum=0, unit="seconds")
    priority: int = p.integer("New priority (MX and SRV)", minimum=0, maximum=255)
    weight: int = p.integer("New weight (SRV)", minimum=0, maximum=65535)
    port: int = p.integer("New port (SRV)", minimum=0, maximum=65535)
    service: str = p.string("New service name (SRV)")
    protocol: str = p.string("New protocol (SRV)", choices=("tcp", "udp", "xmpp", "tls", "smtp"))
    tag: str = p.string("New tag (CAA)", choices=("issue", "issuewild", "iodef"))


def _summary(d: Domain) -> str:
    return "\n".join(
        [
            fmt.record_header(d.id, d.domain),
            fmt.fields(
                ("Type", d.type),
                ("Status", d.status),
                ("SOA Email", fmt.or_dash(d.soa_email)),
            ),
        ]
    )


def _record_summary(r: DomainRecord) -> str:
    lines = [
        fmt.record_header(r.id, r.name or "@"),
        fmt.fields(("Type", r.type), ("Target", r.target), ("TTL", f"{r.ttl_sec} seconds")),
    ]
    if r.type in ("MX", "SRV"):
        lines.append(fmt.fields(("Priority", r.priority), ("Weight", r.weight), ("Port", r.port)))
    return "\n".join(lines)


@tool("linode_domains_list", "List all DNS domains.", p.NoParams)
async def domains_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list domains"):
        domains = [Domain.from_api(d) for d in await client.paginate("domains")]
    return fmt.listing(domains, "domain", _summary)


@tool("linode_domain_get", "Get details of a DNS domain.", DomainIdParams)
async def domain_get(ctx: CallContext, client: LinodeClient, params: DomainIdParams) -> str:
    with ctx.upstream(f"failed to get domain {params.domain_id}"):
        d = Domain.from_api(await client.get(f"domains/{params.domain_id}"))

    text = fmt.details(
        "Domain",
        f"ID: {d.id}",
        f"Domain: {d.domain}",
        f"Type: {d.type}",
        f"Status: {d.status}",
        f"SOA Email: {fmt.or_dash(d.soa_email)}",
        f"Description: {fmt.or_dash(d.description)}",
        fmt.section(
            "Timing",
            f"TTL: {d.ttl_sec} seconds",
            f"Refresh: {d.refresh_sec} seconds",
            f"Retry: {d.retry_sec} seconds",
            f"Expire: {d.expire_sec} seconds",
        ),
        f"\nCreated: {fmt.timestamp(d.created)}",
        f"Updated: {fmt.timestamp(d.updated)}",
    )
    if d.master_ips:
        text += f"\nMaster IPs: {fmt.joined(d.master_ips)}"
    if d.tags:
        text += f"\nTags: {fmt.joined(d.tags)}"
    return text


@tool("linode_domain_create", "Create a DNS domain.", DomainCreateParams)
async def domain_create(ctx: CallContext, client: LinodeClient, params: DomainCreateParams) -> str:
    if params.type == "master" and not params.soa_email:
        raise ParameterError("soa_email is required for master domains")

    body: dict[str, Any] = {"domain": params.domain, "type": params.type}
    if params.soa_email:
        body["soa_email"] = params.soa_email
    if params.description:
        body["description"] = params.description
    if params.ttl_sec:
        body["ttl_sec"] = params.ttl_sec
    if params.master_ips:
        body["master_ips"] = params.master_ips
    if params.tags:
        body["tags"] = params.tags

    with ctx.upstream(f"failed to create domain {params.domain}"):
        d = Domain.from_api(await client.post("domains", body))

    logger.info(f"Created domain {d.id} ({d.domain})")
    return (
        "Domain created successfully!\n\n"
        f"ID: {d.id}\n"
        f"Domain: {d.domain}\n"
        f"Type: {d.type}\n"
        f"Status: {d.status}"
    )


@tool("linode_domain_update", "Update a DNS domain.", DomainUpdateParams)
async def domain_update(ctx: CallContext, client: LinodeClient, params: DomainUpdateParams) -> str:
    body: dict[str, Any] = {}
    if params.soa_email:
        body["soa_email"] = params.soa_email
    if params.description:
        body["description"] = params.description
    if params.status:
        body["status"] = params.status
    if params.ttl_sec:
        body["ttl_sec"] = params.ttl_sec
    if params.tags:
        body["tags"] = params.tags
    if not body:
        raise ParameterError(
            "at least one of soa_email, description, status, ttl_sec or tags must be provided"
        )

    with ctx.upstream(f"failed to update domain {params.domain_id}"):
        d = Domain.from_api(await client.put(f"domains/{params.domain_id}", body))
    return (
        "Domain updated successfully!\n\n"
        f"ID: {d.id}\n"
        f"Domain: {d.domain}\n"
        f"Status: {d.status}"
    )


@tool("linode_domain_delete", "Delete a DNS domain and all of its records.", DomainIdParams)
async def domain_delete(ctx: CallContext, client: LinodeClient, params: DomainIdParams) -> str:
    path = f"domains/{params.domain_id}"
    with ctx.upstream(f"failed to get domain {params.domain_id}"):
        d = Domain.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete domain {params.domain_id}"):
        await client.delete(path)

    logger.info(f"Deleted domain {d.id} ({d.domain})")
    return f"Domain deleted successfully!\n\nDeleted Domain: {d.domain} (ID: {d.id})"


@tool("linode_domain_records_list", "List the records of a DNS domain.", DomainIdParams)
async def domain_records_list(
    ctx: CallContext, client: LinodeClient, params: DomainIdParams
) -> str:
    with ctx.upstream(f"failed to list records for domain {params.domain_id}"):
        records = [
            DomainRecord.from_api(d)
            for d in await client.paginate(f"domains/{params.domain_id}/records")
        ]
    return fmt.listing(records, "domain record", _record_summary)


@tool("linode_domain_record_get", "Get details of a DNS domain record.", DomainRecordIdParams)
async def domain_record_get(
    ctx: CallContext, client: LinodeClient, params: DomainRecordIdParams
) -> str:
    with ctx.upstream(
        f"failed to get record {params.record_id} of domain {params.domain_id}"
    ):
        r = DomainRecord.from_api(
            await client.get(f"domains/{params.domain_id}/records/{params.record_id}")
        )

    lines = [
        f"ID: {r.id}",
        f"Type: {r.type}",
        f"Name: {r.name or '@'}",
        f"Target: {r.target}",
        f"TTL: {r.ttl_sec} seconds",
    ]
    if r.priority:
        lines.append(f"Priority: {r.priority}")
    if r.weight:
        lines.append(f"Weight: {r.weight}")
    if r.port:
        lines.append(f"Port: {r.port}")
    if r.service:
        lines.append(f"Service: {r.service}")
    if r.protocol:
        lines.append(f"Protocol: {r.protocol}")
    if r.tag:
        lines.append(f"Tag: {r.tag}")
    lines += [f"Created: {fmt.timestamp(r.created)}", f"Updated: {fmt.timestamp(r.updated)}"]
    return fmt.details("Domain Record", *lines)


@tool("linode_domain_record_create", "Create a record in a DNS domain.", DomainRecordCreateParams)
async def domain_record_create(
    ctx: CallContext, client: LinodeClient, params: DomainRecordCreateParams
) -> str:
    body: dict[str, Any] = {"type": params.type, "target": params.target}
    if params.name:
        body["name"] = params.name
    if params.ttl_sec:
        body["ttl_sec"] = params.ttl_sec
    if params.type in ("MX", "SRV"):
        body["priority"] = params.priority
    if params.type == "SRV":
        body["weight"] = params.weight
        body["port"] = params.port

    with ctx.upstream(f"failed to create record in domain {params.domain_id}"):
        r = DomainRecord.from_api(
            await client.post(f"domains/{params.domain_id}/records", body)
        )
    return (
        "Domain record created successfully!\n\n"
        f"ID: {r.id}\n"
        f"Type: {r.type}\n"
        f"Name: {r.name or '@'}\n"
        f"Target: {r.target}\n"
        f"TTL: {r.ttl_sec} seconds"
    )


@tool("linode_domain_record_update", "Update a DNS domain record.", DomainRecordUpdateParams)
async def domain_record_update(
    ctx: CallContext, client: LinodeClient, params: DomainRecordUpdateParams
) -> str:
    body: dict[str, Any] = {}
    for key in (
        "name", "target", "service", "protocol", "tag", "ttl_sec", "priority", "weight", "port"
    ):
        if getattr(params, key):
            body[key] = getattr(params, key)
    if not body:
        raise ParameterError("at least one record field to update must be provided")

    with ctx.upstream(
        f"failed to update record {params.record_id} of domain {params.domain_id}"
    ):
        r = DomainRecord.from_api(
            await client.put(f"domains/{params.domain_id}/records/{params.record_id}", body)
        )
    return (
        "Domain record updated successfully!\n\n"
        f"ID: {r.id}\n"
        f"Type: {r.type}\n"
        f"Name: {r.name or '@'}\n"
        f"Target: {r.target}\n"
        f"TTL: {r.ttl_sec} seconds"
    )


@tool(
    "linode_domain_record_delete",
    "Delete a record from a DNS domain.",
    DomainRecordIdParams,
)
async def domain_record_delete(
    ctx: CallContext, client: LinodeClient, params: DomainRecordIdParams
) -> str:
    with ctx.upstream(
        f"failed to delete record {params.record_id} from domain {params.domain_id}"
    ):
        await client.delete(f"domains/{params.domain_id}/records/{params.record_id}")
    return (
        "Domain record deleted successfully!\n\n"
        f"Record {params.record_id} removed from domain {params.domain_id}."
    )


TOOLS = [
    domains_list,
    domain_get,
    domain_create,
    domain_update,
    domain_delete,
    domain_records_list,
    domain_record_get,
    domain_record_create,
    domain_record_update,
    domain_record_delete,
]
