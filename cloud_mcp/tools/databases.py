"""Managed database tools: MySQL and PostgreSQL clusters, engines and plans."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.errors import ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Database, DatabaseEngine, DatabaseType
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.databases")

ENGINES = ("mysql", "postgresql")
ENGINE_NAMES = {"mysql": "MySQL", "postgresql": "PostgreSQL"}


@dataclass(frozen=True)
class DatabasesListParams:
    engine: str = p.string("Only list databases of this engine", choices=ENGINES)


@dataclass(frozen=True)
class DatabaseIdParams:
    database_id: int = p.identifier("The ID of the managed database", required=True)


@dataclass(frozen=True)
class DatabaseCreateParams:
    label: str = p.string("Display label for the database", required=True)
    region: str = p.string("Region where the database will be created", required=True)
    type: str = p.string("Plan type from linode_database_types_list", required=True)
    engine: str = p.string(
        "Engine ID from linode_database_engines_list, e.g. mysql/8 or postgresql/16",
        required=True,
    )
    cluster_size: int = p.integer("Number of nodes", minimum=1, maximum=3, default=1)
    allow_list: list[str] = p.string_list("IP addresses or CIDR ranges allowed to connect")


@dataclass(frozen=True)
class DatabaseUpdateParams:
    database_id: int = p.identifier("The ID of the managed database", required=True)
    label: str = p.string("New display label")
    allow_list: list[str] = p.string_list("Replacement list of allowed IP addresses or ranges")


def _summary(db: Database) -> str:
    return "\n".join(
        [
            fmt.record_header(db.id, db.label),
            fmt.fields(
                ("Engine", f"{db.engine} {db.version}"),
                ("Status", db.status),
                ("Region", db.region),
            ),
            fmt.fields(
                ("Type", db.type),
                ("Nodes", db.cluster_size),
                ("Primary Host", fmt.or_dash(db.primary_host)),
            ),
        ]
    )


def _engine_summary(e: DatabaseEngine) -> str:
    return "\n".join([f"ID: {e.id}", fmt.fields(("Engine", e.engine), ("Version", e.version))])


def _type_summary(t: DatabaseType) -> str:
    return "\n".join(
        [
            f"Type: {t.id}",
            fmt.fields(("Label", t.label), ("Class", t.type_class)),
            fmt.fields(
                ("vCPUs", t.vcpus), ("Memory", fmt.mb(t.memory)), ("Disk", fmt.mb_to_gb(t.disk))
            ),
        ]
    )


def _detail(db: Database) -> str:
    name = ENGINE_NAMES.get(db.engine, db.engine)
    return fmt.details(
        f"{name} Database",
        f"ID: {db.id}",
        f"Label: {db.label}",
        f"Engine: {db.engine} {db.version}",
        f"Status: {db.status}",
        f"Region: {db.region}",
        f"Type: {db.type}",
        f"Nodes: {db.cluster_size}",
        fmt.section(
            "Connection",
            f"Primary Host: {fmt.or_dash(db.primary_host)}",
            f"Secondary Host: {fmt.or_dash(db.secondary_host)}",
            f"Port: {fmt.or_dash(db.port)}",
            f"SSL Required: {fmt.flag(db.ssl_connection)}",
            f"Encrypted: {fmt.flag(db.encrypted)}",
            f"Allow List: {fmt.joined(db.allow_list) or '(none)'}",
        ),
        f"\nCreated: {fmt.timestamp(db.created)}",
        f"Updated: {fmt.timestamp(db.updated)}",
    )


async def _list(ctx: CallContext, client: LinodeClient, engine: str) -> str:
    with ctx.upstream(f"failed to list {ENGINE_NAMES[engine]} databases"):
        dbs = [
            Database.from_api(d) for d in await client.paginate(f"databases/{engine}/instances")
        ]
    return fmt.listing(dbs, f"{ENGINE_NAMES[engine]} database", _summary)


async def _get(ctx: CallContext, client: LinodeClient, engine: str, database_id: int) -> str:
    path = f"databases/{engine}/instances/{database_id}"
    with ctx.upstream(f"failed to get {ENGINE_NAMES[engine]} database {database_id}"):
        db = Database.from_api(await client.get(path))
    return _detail(db)


async def _create(
    ctx: CallContext, client: LinodeClient, engine: str, params: DatabaseCreateParams
) -> str:
    if not params.engine.startswith(f"{engine}/"):
        raise ParameterError(f"engine must be a {engine} engine ID such as {engine}/8")
    body: dict[str, Any] = {
        "label": params.label,
        "region": params.region,
        "type": params.type,
        "engine": params.engine,
        "cluster_size": params.cluster_size,
    }
    if params.allow_list:
        body["allow_list"] = params.allow_list

    name = ENGINE_NAMES[engine]
    with ctx.upstream(f"failed to create {name} database {params.label}"):
        db = Database.from_api(await client.post(f"databases/{engine}/instances", body))

    logger.info(f"Created {name} database {db.id} ({db.label}) in {db.region}")
    return (
        f"{name} database created successfully!\n\n"
        f"ID: {db.id}\n"
        f"Label: {db.label}\n"
        f"Engine: {db.engine} {db.version}\n"
        f"Region: {db.region}\n"
        f"Type: {db.type}\n"
        f"Status: {db.status}\n\n"
        "Provisioning takes several minutes; credentials are available once it is active."
    )


async def _update(
    ctx: CallContext, client: LinodeClient, engine: str, params: DatabaseUpdateParams
) -> str:
    body: dict[str, Any] = {}
    if params.label:
        body["label"] = params.label
    if params.allow_list:
        body["allow_list"] = params.allow_list
    if not body:
        raise ParameterError("at least one of label or allow_list must be provided")

    name = ENGINE_NAMES[engine]
    path = f"databases/{engine}/instances/{params.database_id}"
    with ctx.upstream(f"failed to update {name} database {params.database_id}"):
        db = Database.from_api(await client.put(path, body))
    return (
        f"{name} database updated successfully!\n\n"
        f"ID: {db.id}\n"
        f"Label: {db.label}\n"
        f"Allow List: {fmt.joined(db.allow_list) or '(none)'}"
    )


async def _delete(ctx: CallContext, client: LinodeClient, engine: str, database_id: int) -> str:
    name = ENGINE_NAMES[engine]
    path = f"databases/{engine}/instances/{database_id}"
    with ctx.upstream(f"failed to get {name} database {database_id}"):
        db = Database.from_api(await client.get(path))
    with ctx.upstream(f"failed to delete {name} database {database_id}"):
        await client.delete(path)

    logger.info(f"Deleted {name} database {db.id} ({db.label})")
    return f"{name} database deleted successfully!\n\nDeleted Database: {db.label} (ID: {db.id})"


@tool(
    "linode_databases_list",
    "List managed databases, optionally filtered by engine (mysql or postgresql).",
    DatabasesListParams,
)
async def databases_list(
    ctx: CallContext, client: LinodeClient, params: DatabasesListParams
) -> str:
    path = f"databases/{params.engine}/instances" if params.engine else "databases/instances"
    with ctx.upstream("failed to list databases"):
        dbs = [Database.from_api(d) for d in await client.paginate(path)]
    return fmt.listing(dbs, "database", _summary)


@tool("linode_mysql_databases_list", "List managed MySQL databases.", p.NoParams)
async def mysql_databases_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    return await _list(ctx, client, "mysql")


@tool("linode_mysql_database_get", "Get a managed MySQL database.", DatabaseIdParams)
async def mysql_database_get(
    ctx: CallContext, client: LinodeClient, params: DatabaseIdParams
) -> str:
    return await _get(ctx, client, "mysql", params.database_id)


@tool("linode_mysql_database_create", "Create a managed MySQL database.", DatabaseCreateParams)
async def mysql_database_create(
    ctx: CallContext, client: LinodeClient, params: DatabaseCreateParams
) -> str:
    return await _create(ctx, client, "mysql", params)


@tool(
    "linode_mysql_database_update",
    "Update the label or allow list of a managed MySQL database.",
    DatabaseUpdateParams,
)
async def mysql_database_update(
    ctx: CallContext, client: LinodeClient, params: DatabaseUpdateParams
) -> str:
    return await _update(ctx, client, "mysql", params)


@tool("linode_mysql_database_delete", "Delete a managed MySQL database.", DatabaseIdParams)
async def mysql_database_delete(
    ctx: CallContext, client: LinodeClient, params: DatabaseIdParams
) -> str:
    return await _delete(ctx, client, "mysql", params.database_id)


@tool("linode_postgres_databases_list", "List managed PostgreSQL databases.", p.NoParams)
async def postgres_databases_list(
    ctx: CallContext, client: LinodeClient, params: p.NoParams
) -> str:
    return await _list(ctx, client, "postgresql")


@tool("linode_postgres_database_get", "Get a managed PostgreSQL database.", DatabaseIdParams)
async def postgres_database_get(
    ctx: CallContext, client: LinodeClient, params: DatabaseIdParams
) -> str:
    return await _get(ctx, client, "postgresql", params.database_id)


@tool(
    "linode_postgres_database_create",
    "Create a managed PostgreSQL database.",
    DatabaseCreateParams,
)
async def postgres_database_create(
    ctx: CallContext, client: LinodeClient, params: DatabaseCreateParams
) -> str:
    return await _create(ctx, client, "postgresql", params)


@tool(
    "linode_postgres_database_update",
    "Update the label or allow list of a managed PostgreSQL database.",
    DatabaseUpdateParams,
)
async def postgres_database_update(
    ctx: CallContext, client: LinodeClient, params: DatabaseUpdateParams
) -> str:
    return await _update(ctx, client, "postgresql", params)


@tool(
    "linode_postgres_database_delete",
    "Delete a managed PostgreSQL database.",
    DatabaseIdParams,
)
async def postgres_database_delete(
    ctx: CallContext, client: LinodeClient, params: DatabaseIdParams
) -> str:
    return await _delete(ctx, client, "postgresql", params.database_id)


@tool(
    "linode_database_engines_list",
    "List the database engines and versions available for managed databases.",
    p.NoParams,
)
async def database_engines_list(
    ctx: CallContext, client: LinodeClient, params: p.NoParams
) -> str:
    with ctx.upstream("failed to list database engines"):
        engines = [DatabaseEngine.from_api(d) for d in await client.paginate("databases/engines")]
    return fmt.listing(engines, "database engine", _engine_summary)


@tool("linode_database_types_list", "List the plans available for managed databases.", p.NoParams)
async def database_types_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to list database types"):
        types = [DatabaseType.from_api(d) for d in await client.paginate("databases/types")]
    return fmt.listing(types, "database type", _type_summary)


TOOLS = [
    databases_list,
    mysql_databases_list,
    mysql_database_get,
    mysql_database_create,
    mysql_database_update,
    mysql_database_delete,
    postgres_databases_list,
    postgres_database_get,
    postgres_database_create,
    postgres_database_update,
    postgres_database_delete,
    database_engines_list,
    database_types_list,
]
