"""
Linode resource models.

Plain dataclasses built from API JSON with ``from_api``. Only the fields the
tool formatters render are kept; missing keys fall back to zero values so a
sparse response never breaks formatting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Profile:
    uid: int
    username: str
    email: str
    restricted: bool

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Profile:
        return cls(
            uid=data.get("uid", 0),
            username=data.get("username", ""),
            email=data.get("email", ""),
            restricted=bool(data.get("restricted", False)),
        )


@dataclass
class InstanceSpecs:
    vcpus: int = 0
    memory: int = 0  # MB
    disk: int = 0  # MB
    transfer: int = 0  # GB


@dataclass
class Instance:
    id: int
    label: str
    status: str
    region: str
    type: str
    image: str = ""
    ipv4: list[str] = field(default_factory=list)
    ipv6: str = ""
    specs: InstanceSpecs = field(default_factory=InstanceSpecs)
    backups_enabled: bool = False
    watchdog_enabled: bool = False
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Instance:
        specs = data.get("specs") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            status=data.get("status", ""),
            region=data.get("region", ""),
            type=data.get("type") or "",
            image=data.get("image") or "",
            ipv4=list(data.get("ipv4") or []),
            ipv6=data.get("ipv6") or "",
            specs=InstanceSpecs(
                vcpus=specs.get("vcpus", 0),
                memory=specs.get("memory", 0),
                disk=specs.get("disk", 0),
                transfer=specs.get("transfer", 0),
            ),
            backups_enabled=bool((data.get("backups") or {}).get("enabled", False)),
            watchdog_enabled=bool(data.get("watchdog_enabled", False)),
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class Volume:
    id: int
    label: str
    status: str
    size: int  # GB
    region: str
    linode_id: int | None = None
    linode_label: str = ""
    filesystem_path: str = ""
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Volume:
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            status=data.get("status", ""),
            size=data.get("size", 0),
            region=data.get("region", ""),
            linode_id=data.get("linode_id"),
            linode_label=data.get("linode_label") or "",
            filesystem_path=data.get("filesystem_path") or "",
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )

    @property
    def attached(self) -> bool:
        return bool(self.linode_id and self.linode_id > 0)


@dataclass
class IPAddress:
    address: str
    type: str
    public: bool
    region: str
    linode_id: int | None = None
    rdns: str = ""
    gateway: str = ""
    prefix: int = 0
    subnet_mask: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IPAddress:
        return cls(
            address=data.get("address", ""),
            type=data.get("type", ""),
            public=bool(data.get("public", False)),
            region=data.get("region", ""),
            linode_id=data.get("linode_id"),
            rdns=data.get("rdns") or "",
            gateway=data.get("gateway") or "",
            prefix=data.get("prefix") or 0,
            subnet_mask=data.get("subnet_mask") or "",
        )


@dataclass
class VLAN:
    label: str
    region: str
    linodes: list[int] = field(default_factory=list)
    created: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> VLAN:
        return cls(
            label=data.get("label", ""),
            region=data.get("region", ""),
            linodes=list(data.get("linodes") or []),
            created=data.get("created") or "",
        )


@dataclass
class IPv6Range:
    """An IPv6 range or pool; pools carry no route target."""

    range: str
    prefix: int
    region: str
    route_target: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IPv6Range:
        return cls(
            range=data.get("range", ""),
            prefix=data.get("prefix") or 0,
            region=data.get("region", ""),
            route_target=data.get("route_target") or "",
        )


@dataclass
class ImageRegion:
    region: str
    status: str


@dataclass
class Image:
    id: str
    label: str
    description: str
    type: str
    status: str
    size: int  # MB
    is_public: bool
    deprecated: bool = False
    created: str = ""
    created_by: str = ""
    regions: list[ImageRegion] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Image:
        return cls(
            id=data.get("id", ""),
            label=data.get("label", ""),
            description=data.get("description") or "",
            type=data.get("type", ""),
            status=data.get("status", ""),
            size=data.get("size", 0),
            is_public=bool(data.get("is_public", False)),
            deprecated=bool(data.get("deprecated", False)),
            created=data.get("created") or "",
            created_by=data.get("created_by") or "",
            regions=[
                ImageRegion(r.get("region", ""), r.get("status", ""))
                for r in data.get("regions") or []
            ],
            tags=list(data.get("tags") or []),
        )


@dataclass
class FirewallDevice:
    id: int
    entity_id: int
    entity_type: str
    entity_label: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> FirewallDevice:
        entity = data.get("entity") or {}
        return cls(
            id=data.get("id", 0),
            entity_id=entity.get("id", 0),
            entity_type=entity.get("type", ""),
            entity_label=entity.get("label") or "",
        )


@dataclass
class Firewall:
    id: int
    label: str
    status: str
    inbound_policy: str = ""
    outbound_policy: str = ""
    inbound_rules: list[dict[str, Any]] = field(default_factory=list)
    outbound_rules: list[dict[str, Any]] = field(default_factory=list)
    entities: list[dict[str, Any]] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Firewall:
        rules = data.get("rules") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            status=data.get("status", ""),
            inbound_policy=rules.get("inbound_policy", ""),
            outbound_policy=rules.get("outbound_policy", ""),
            inbound_rules=list(rules.get("inbound") or []),
            outbound_rules=list(rules.get("outbound") or []),
            entities=list(data.get("entities") or []),
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class NodeBalancer:
    id: int
    label: str
    region: str
    hostname: str = ""
    ipv4: str = ""
    ipv6: str = ""
    client_conn_throttle: int = 0
    transfer_in: float = 0.0  # MB
    transfer_out: float = 0.0  # MB
    transfer_total: float = 0.0  # MB
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> NodeBalancer:
        transfer = data.get("transfer") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            region=data.get("region", ""),
            hostname=data.get("hostname") or "",
            ipv4=data.get("ipv4") or "",
            ipv6=data.get("ipv6") or "",
            client_conn_throttle=data.get("client_conn_throttle", 0),
            transfer_in=transfer.get("in") or 0.0,
            transfer_out=transfer.get("out") or 0.0,
            transfer_total=transfer.get("total") or 0.0,
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class NodeBalancerConfig:
    id: int
    port: int
    protocol: str
    algorithm: str
    stickiness: str
    check: str
    nodes_up: int = 0
    nodes_down: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> NodeBalancerConfig:
        status = data.get("nodes_status") or {}
        return cls(
            id=data["id"],
            port=data.get("port", 0),
            protocol=data.get("protocol", ""),
            algorithm=data.get("algorithm", ""),
            stickiness=data.get("stickiness", ""),
            check=data.get("check", ""),
            nodes_up=status.get("up", 0),
            nodes_down=status.get("down", 0),
        )


@dataclass
class Domain:
    id: int
    domain: str
    type: str
    status: str
    soa_email: str = ""
    description: str = ""
    ttl_sec: int = 0
    refresh_sec: int = 0
    retry_sec: int = 0
    expire_sec: int = 0
    master_ips: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Domain:
        return cls(
            id=data["id"],
            domain=data.get("domain", ""),
            type=data.get("type", ""),
            status=data.get("status", ""),
            soa_email=data.get("soa_email") or "",
            description=data.get("description") or "",
            ttl_sec=data.get("ttl_sec", 0),
            refresh_sec=data.get("refresh_sec", 0),
            retry_sec=data.get("retry_sec", 0),
            expire_sec=data.get("expire_sec", 0),
            master_ips=list(data.get("master_ips") or []),
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class DomainRecord:
    id: int
    type: str
    name: str
    target: str
    ttl_sec: int = 0
    priority: int = 0
    weight: int = 0
    port: int = 0
    service: str = ""
    protocol: str = ""
    tag: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DomainRecord:
        return cls(
            id=data["id"],
            type=data.get("type", ""),
            name=data.get("name") or "",
            target=data.get("target") or "",
            ttl_sec=data.get("ttl_sec", 0),
            priority=data.get("priority") or 0,
            weight=data.get("weight") or 0,
            port=data.get("port") or 0,
            service=data.get("service") or "",
            protocol=data.get("protocol") or "",
            tag=data.get("tag") or "",
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class StackScript:
    id: int
    label: str
    username: str
    description: str = ""
    images: list[str] = field(default_factory=list)
    is_public: bool = False
    deployments_total: int = 0
    deployments_active: int = 0
    rev_note: str = ""
    script: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> StackScript:
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            username=data.get("username", ""),
            description=data.get("description") or "",
            images=list(data.get("images") or []),
            is_public=bool(data.get("is_public", False)),
            deployments_total=data.get("deployments_total", 0),
            deployments_active=data.get("deployments_active", 0),
            rev_note=data.get("rev_note") or "",
            script=data.get("script") or "",
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class LKENodePool:
    id: int
    type: str
    count: int
    node_statuses: list[str] = field(default_factory=list)
    autoscaler_enabled: bool = False
    autoscaler_min: int = 0
    autoscaler_max: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> LKENodePool:
        autoscaler = data.get("autoscaler") or {}
        return cls(
            id=data["id"],
            type=data.get("type", ""),
            count=data.get("count", 0),
            node_statuses=[n.get("status", "") for n in data.get("nodes") or []],
            autoscaler_enabled=bool(autoscaler.get("enabled", False)),
            autoscaler_min=autoscaler.get("min", 0),
            autoscaler_max=autoscaler.get("max", 0),
        )


@dataclass
class LKECluster:
    id: int
    label: str
    region: str
    k8s_version: str
    status: str = ""
    high_availability: bool = False
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> LKECluster:
        control_plane = data.get("control_plane") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            region=data.get("region", ""),
            k8s_version=data.get("k8s_version", ""),
            status=data.get("status") or "",
            high_availability=bool(control_plane.get("high_availability", False)),
            tags=list(data.get("tags") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class Database:
    id: int
    label: str
    engine: str
    version: str
    region: str
    type: str
    status: str
    cluster_size: int = 1
    primary_host: str = ""
    secondary_host: str = ""
    port: int = 0
    encrypted: bool = False
    ssl_connection: bool = False
    allow_list: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Database:
        hosts = data.get("hosts") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            engine=data.get("engine", ""),
            version=data.get("version", ""),
            region=data.get("region", ""),
            type=data.get("type", ""),
            status=data.get("status", ""),
            cluster_size=data.get("cluster_size", 1),
            primary_host=hosts.get("primary") or "",
            secondary_host=hosts.get("secondary") or "",
            port=data.get("port") or 0,
            encrypted=bool(data.get("encrypted", False)),
            ssl_connection=bool(data.get("ssl_connection", False)),
            allow_list=list(data.get("allow_list") or []),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class DatabaseType:
    id: str
    label: str
    type_class: str
    disk: int = 0  # MB
    memory: int = 0  # MB
    vcpus: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DatabaseType:
        return cls(
            id=data.get("id", ""),
            label=data.get("label", ""),
            type_class=data.get("class", ""),
            disk=data.get("disk", 0),
            memory=data.get("memory", 0),
            vcpus=data.get("vcpus", 0),
        )


@dataclass
class DatabaseEngine:
    id: str
    engine: str
    version: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DatabaseEngine:
        return cls(
            id=data.get("id", ""),
            engine=data.get("engine", ""),
            version=data.get("version", ""),
        )


@dataclass
class ObjectStorageBucket:
    label: str
    region: str
    hostname: str = ""
    objects: int = 0
    size: int = 0  # bytes
    created: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ObjectStorageBucket:
        return cls(
            label=data.get("label", ""),
            region=data.get("region") or data.get("cluster", ""),
            hostname=data.get("hostname") or "",
            objects=data.get("objects", 0),
            size=data.get("size", 0),
            created=data.get("created") or "",
        )


@dataclass
class ObjectStorageKey:
    id: int
    label: str
    access_key: str
    limited: bool = False
    secret_key: str = field(default="", repr=False)
    bucket_access: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ObjectStorageKey:
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            access_key=data.get("access_key", ""),
            limited=bool(data.get("limited", False)),
            secret_key=data.get("secret_key") or "",
            bucket_access=list(data.get("bucket_access") or []),
        )


@dataclass
class ObjectStorageCluster:
    id: str
    region: str
    status: str
    domain: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ObjectStorageCluster:
        return cls(
            id=data.get("id", ""),
            region=data.get("region", ""),
            status=data.get("status", ""),
            domain=data.get("domain") or "",
        )


@dataclass
class SupportTicket:
    id: int
    summary: str
    status: str
    description: str = ""
    entity_label: str = ""
    entity_type: str = ""
    opened: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SupportTicket:
        entity = data.get("entity") or {}
        return cls(
            id=data["id"],
            summary=data.get("summary", ""),
            status=data.get("status", ""),
            description=data.get("description") or "",
            entity_label=entity.get("label") or "",
            entity_type=entity.get("type") or "",
            opened=data.get("opened") or "",
            updated=data.get("updated") or "",
        )


@dataclass
class LongviewClient:
    id: int
    label: str
    api_key: str = field(default="", repr=False)
    install_code: str = ""
    apps: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> LongviewClient:
        apps = data.get("apps") or {}
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            api_key=data.get("api_key") or "",
            install_code=data.get("install_code") or "",
            apps=sorted(name for name, on in apps.items() if on),
            created=data.get("created") or "",
            updated=data.get("updated") or "",
        )
