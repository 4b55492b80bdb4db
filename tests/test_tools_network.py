"""Tests for networking, image, firewall, NodeBalancer and domain tools."""

from __future__ import annotations

import json

import pytest

from cloud_mcp.classifier import ToolCallError


def _text(result) -> str:
    return "\n".join(c.text for c in result.content)


def _body(request) -> dict:
    return json.loads(request.content)


IP = {
    "address": "192.168.1.1",
    "type": "ipv4",
    "public": True,
    "region": "us-east",
    "linode_id": 123456,
    "rdns": "li1-1.members.linode.com",
    "gateway": "192.168.1.254",
    "prefix": 24,
}

IMAGE = {
    "id": "private/4242",
    "label": "golden",
    "description": "Base web image",
    "type": "manual",
    "status": "available",
    "size": 2500,
    "is_public": False,
    "deprecated": False,
    "created": "2024-02-01T08:00:00",
    "created_by": "testuser",
    "regions": [{"region": "us-east", "status": "available"}],
    "tags": [],
}

FIREWALL = {
    "id": 900,
    "label": "web-fw",
    "status": "enabled",
    "rules": {
        "inbound_policy": "DROP",
        "outbound_policy": "ACCEPT",
        "inbound": [
            {
                "action": "ACCEPT",
                "protocol": "TCP",
                "ports": "22,443",
                "addresses": {"ipv4": ["0.0.0.0/0"], "ipv6": ["::/0"]},
                "label": "ssh-https",
            }
        ],
        "outbound": [],
    },
    "entities": [{"id": 123456, "type": "linode", "label": "test-instance-1"}],
    "tags": ["prod"],
    "created": "2024-01-05T00:00:00",
    "updated": "2024-01-06T00:00:00",
}

NODEBALANCER = {
    "id": 31,
    "label": "lb-1",
    "region": "us-east",
    "hostname": "nb-1.newark.nodebalancer.linode.com",
    "ipv4": "203.0.113.10",
    "ipv6": "2600:3c03::1",
    "client_conn_throttle": 5,
    "transfer": {"in": 12.5, "out": 30.0, "total": 42.5},
    "tags": [],
    "created": "2024-01-01T00:00:00",
    "updated": "2024-01-01T00:00:00",
}

NB_CONFIG = {
    "id": 4,
    "port": 80,
    "protocol": "http",
    "algorithm": "roundrobin",
    "stickiness": "none",
    "check": "http",
    "check_path": "/healthz",
    "nodes_status": {"up": 0, "down": 0},
}

DOMAIN = {
    "id": 55,
    "domain": "example.com",
    "type": "master",
    "status": "active",
    "soa_email": "admin@example.com",
    "ttl_sec": 300,
    "refresh_sec": 14400,
    "retry_sec": 3600,
    "expire_sec": 604800,
    "tags": [],
    "created": "2024-01-01T00:00:00",
    "updated": "2024-01-01T00:00:00",
}


class TestNetworkingTools:
    @pytest.mark.asyncio
    async def test_ips_list(self, dispatcher, fake):
        fake.collection("networking/ips", [IP])
        text = _text(await dispatcher.dispatch("linode_ips_list", {}))

        assert text.startswith("Found 1 IP address(s):")
        assert "Address: 192.168.1.1 | ipv4" in text
        assert "  Public: true | Region: us-east | Linode: 123456" in text
        assert "  Reverse DNS: li1-1.members.linode.com" in text

    @pytest.mark.asyncio
    async def test_ips_list_empty(self, dispatcher, fake):
        fake.collection("networking/ips", [])
        assert _text(await dispatcher.dispatch("linode_ips_list", {})) == "No IP addresses found."

    @pytest.mark.asyncio
    async def test_ip_get(self, dispatcher, fake):
        fake.route("GET", "networking/ips/192.168.1.1", IP)
        text = _text(await dispatcher.dispatch("linode_ip_get", {"address": "192.168.1.1"}))

        assert text.startswith("IP Address Details:")
        assert "Gateway: 192.168.1.254" in text
        assert "Prefix: 24" in text

    @pytest.mark.asyncio
    async def test_ip_get_rejects_malformed_address(self, dispatcher, fake):
        result = await dispatcher.dispatch("linode_ip_get", {"address": "not-an-ip"})

        assert result.isError
        assert _text(result) == (
            "linode/ip_get: address is required and must be a valid IP address"
        )
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_vlans_list(self, dispatcher, fake):
        fake.collection(
            "networking/vlans",
            [{"label": "backend", "region": "us-east", "linodes": [1, 2], "created": ""}],
        )
        text = _text(await dispatcher.dispatch("linode_vlans_list", {}))

        assert "Label: backend | us-east" in text
        assert "  Linodes: [1, 2] | Created: -" in text

    @pytest.mark.asyncio
    async def test_reserved_ips_list_skips_assigned(self, dispatcher, fake):
        reserved = {**IP, "address": "192.168.1.2", "linode_id": None, "rdns": ""}
        fake.collection("networking/ips", [IP, reserved])

        text = _text(await dispatcher.dispatch("linode_reserved_ips_list", {}))

        assert text.splitlines() == [
            "Found 1 reserved IP address(s):",
            "",
            "Address: 192.168.1.2 (ipv4 Public)",
            "  Gateway: 192.168.1.254 | Prefix: 24",
            "  Region: us-east | Unassigned",
        ]

    @pytest.mark.asyncio
    async def test_reserved_ips_list_empty(self, dispatcher, fake):
        fake.collection("networking/ips", [IP])
        assert _text(await dispatcher.dispatch("linode_reserved_ips_list", {})) == (
            "No reserved IP addresses found."
        )

    @pytest.mark.asyncio
    async def test_reserved_ip_get(self, dispatcher, fake):
        fake.route(
            "GET",
            "networking/ips/192.168.1.1",
            {**IP, "public": False, "subnet_mask": "255.255.255.0"},
        )

        text = _text(
            await dispatcher.dispatch("linode_reserved_ip_get", {"address": "192.168.1.1"})
        )

        assert text.startswith("IP Address Details:")
        assert "Subnet Mask: 255.255.255.0" in text
        assert "Visibility: Private" in text
        assert "Assigned to Linode: 123456" in text
        assert text.endswith("Reverse DNS: li1-1.members.linode.com")

    @pytest.mark.asyncio
    async def test_reserved_ip_update_sets_rdns(self, dispatcher, fake):
        fake.route("PUT", "networking/ips/192.168.1.1", {**IP, "rdns": "www.example.com"})

        text = _text(
            await dispatcher.dispatch(
                "linode_reserved_ip_update",
                {"address": "192.168.1.1", "rdns": "www.example.com"},
            )
        )

        assert text == (
            "IP address updated successfully!\n\n"
            "Address: 192.168.1.1\nReverse DNS: www.example.com"
        )
        assert _body(fake.calls("PUT", "networking/ips/192.168.1.1")[0]) == {
            "rdns": "www.example.com"
        }

    @pytest.mark.asyncio
    async def test_reserved_ip_update_empty_rdns_resets(self, dispatcher, fake):
        fake.route("PUT", "networking/ips/192.168.1.1", {**IP, "rdns": None})

        text = _text(
            await dispatcher.dispatch("linode_reserved_ip_update", {"address": "192.168.1.1"})
        )

        assert text.endswith("Reverse DNS: -")
        assert _body(fake.calls("PUT", "networking/ips/192.168.1.1")[0]) == {"rdns": None}

    @pytest.mark.asyncio
    async def test_ipv6_ranges_list(self, dispatcher, fake):
        fake.collection(
            "networking/ipv6/ranges",
            [
                {
                    "range": "2600:3c01::",
                    "prefix": 64,
                    "region": "us-east",
                    "route_target": "2600:3c01::f03c:91ff:fe24:3a2f",
                }
            ],
        )

        text = _text(await dispatcher.dispatch("linode_ipv6_ranges_list", {}))

        assert text.splitlines() == [
            "Found 1 IPv6 range(s):",
            "",
            "Range: 2600:3c01::/64",
            "  Region: us-east",
            "  Route Target: 2600:3c01::f03c:91ff:fe24:3a2f",
        ]

    @pytest.mark.asyncio
    async def test_ipv6_pools_list(self, dispatcher, fake):
        fake.collection(
            "networking/ipv6/pools", [{"range": "2600:3c01:1::", "prefix": 56, "region": "us-east"}]
        )

        text = _text(await dispatcher.dispatch("linode_ipv6_pools_list", {}))

        assert text.endswith("Range: 2600:3c01:1::/56\n  Region: us-east")
        assert "Route Target" not in text


class TestImageTools:
    @pytest.mark.asyncio
    async def test_list_public_filter(self, dispatcher, fake):
        fake.collection("images", [IMAGE])
        await dispatcher.dispatch("linode_images_list", {"is_public": "false"})

        request = fake.calls("GET", "images")[0]
        assert json.loads(request.headers["X-Filter"]) == {"is_public": False}

    @pytest.mark.asyncio
    async def test_list_unfiltered(self, dispatcher, fake):
        fake.collection("images", [IMAGE])
        text = _text(await dispatcher.dispatch("linode_images_list", {}))

        assert "X-Filter" not in fake.calls("GET", "images")[0].headers
        assert "ID: private/4242 | golden" in text
        assert "  Type: manual | Status: available | Size: 2500 MB | Public: false" in text

    @pytest.mark.asyncio
    async def test_get(self, dispatcher, fake):
        fake.route("GET", "images/private/4242", IMAGE)
        text = _text(await dispatcher.dispatch("linode_image_get", {"image_id": "private/4242"}))

        assert text.startswith("Image Details:")
        assert "Created By: testuser" in text
        assert "  us-east: available" in text

    @pytest.mark.asyncio
    async def test_create(self, dispatcher, fake):
        fake.route("POST", "images", {**IMAGE, "status": "creating"})

        text = _text(
            await dispatcher.dispatch(
                "linode_image_create", {"disk_id": 17, "label": "golden", "cloud_init": True}
            )
        )

        assert text.startswith("Image created successfully!")
        assert "Status: creating" in text
        assert _body(fake.calls("POST", "images")[0]) == {
            "disk_id": 17,
            "label": "golden",
            "cloud_init": True,
        }

    @pytest.mark.asyncio
    async def test_update_needs_a_field(self, dispatcher, fake):
        result = await dispatcher.dispatch("linode_image_update", {"image_id": "private/4242"})

        assert result.isError
        assert "at least one of label, description or tags" in _text(result)
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_delete(self, dispatcher, fake):
        fake.route("GET", "images/private/4242", IMAGE)
        fake.route("DELETE", "images/private/4242", {})

        text = _text(await dispatcher.dispatch("linode_image_delete", {"image_id": "private/4242"}))

        assert text == "Image deleted successfully!\n\nDeleted Image: golden (ID: private/4242)"

    @pytest.mark.asyncio
    async def test_upload_create_returns_url(self, dispatcher, fake):
        fake.route(
            "POST",
            "images/upload",
            {
                "image": {
                    **IMAGE,
                    "id": "private/4243",
                    "label": "custom",
                    "status": "pending_upload",
                },
                "upload_to": "https://us-east-1.linodeobjects.com/upload/4243",
            },
        )

        text = _text(
            await dispatcher.dispatch(
                "linode_image_upload_create",
                {"label": "custom", "region": "us-east", "cloud_init": True},
            )
        )

        assert text.startswith("Image upload created successfully!\n\nID: private/4243")
        assert "Status: pending_upload" in text
        assert "Upload URL: https://us-east-1.linodeobjects.com/upload/4243" in text
        assert _body(fake.calls("POST", "images/upload")[0]) == {
            "label": "custom",
            "region": "us-east",
            "cloud_init": True,
        }

    @pytest.mark.asyncio
    async def test_upload_create_requires_region(self, dispatcher, fake):
        result = await dispatcher.dispatch("linode_image_upload_create", {"label": "custom"})

        assert result.isError
        assert "region is required" in _text(result)
        assert fake.requests == []


class TestFirewallTools:
    @pytest.mark.asyncio
    async def test_list(self, dispatcher, fake):
        fake.collection("networking/firewalls", [FIREWALL])
        text = _text(await dispatcher.dispatch("linode_firewalls_list", {}))

        assert "ID: 900 | web-fw" in text
        assert (
            "  Status: enabled | Inbound: 1 rules (DROP) | Outbound: 0 rules (ACCEPT) | Devices: 1"
        ) in text

    @pytest.mark.asyncio
    async def test_get_renders_rules_and_devices(self, dispatcher, fake):
        fake.route("GET", "networking/firewalls/900", FIREWALL)
        text = _text(await dispatcher.dispatch("linode_firewall_get", {"firewall_id": 900}))

        assert "Inbound Rules (policy DROP):" in text
        assert (
            "  ACCEPT TCP | Ports: 22,443 | Addresses: [0.0.0.0/0, ::/0] | Label: ssh-https"
        ) in text
        assert "Outbound Rules (policy ACCEPT):\n  (none)" in text
        assert "  linode 123456 (test-instance-1)" in text
        assert text.endswith("Tags: prod")

    @pytest.mark.asyncio
    async def test_create_default_policies(self, dispatcher, fake):
        fake.route("POST", "networking/firewalls", FIREWALL)

        await dispatcher.dispatch("linode_firewall_create", {"label": "web-fw"})

        body = _body(fake.calls("POST", "networking/firewalls")[0])
        assert body == {
            "label": "web-fw",
            "rules": {
                "inbound_policy": "ACCEPT",
                "outbound_policy": "ACCEPT",
                "inbound": [],
                "outbound": [],
            },
        }

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_policy(self, dispatcher):
        result = await dispatcher.dispatch(
            "linode_firewall_create", {"label": "web-fw", "inbound_policy": "REJECT"}
        )
        assert result.isError
        assert "inbound_policy must be one of: ACCEPT, DROP" in _text(result)

    @pytest.mark.asyncio
    async def test_rules_update_keeps_omitted_direction(self, dispatcher, fake):
        path = "networking/firewalls/900/rules"
        fake.route("GET", path, FIREWALL["rules"])
        fake.route("PUT", path, lambda request: json.loads(request.content))
        rule = {"action": "ACCEPT", "protocol": "TCP", "ports": "80"}

        text = _text(
            await dispatcher.dispatch(
                "linode_firewall_rules_update", {"firewall_id": 900, "outbound": [rule]}
            )
        )

        body = _body(fake.calls("PUT", path)[0])
        assert body["inbound"] == FIREWALL["rules"]["inbound"]
        assert body["outbound"] == [rule]
        assert body["inbound_policy"] == "DROP"
        assert "Inbound: 1 rules (policy DROP)" in text
        assert "Outbound: 1 rules (policy ACCEPT)" in text

    @pytest.mark.asyncio
    async def test_rules_must_be_objects(self, dispatcher):
        result = await dispatcher.dispatch(
            "linode_firewall_rules_update", {"firewall_id": 900, "inbound": ["ACCEPT"]}
        )
        assert result.isError
        assert "inbound must be a list of objects" in _text(result)

    @pytest.mark.asyncio
    async def test_device_create(self, dispatcher, fake):
        fake.route(
            "POST",
            "networking/firewalls/900/devices",
            {"id": 3, "entity": {"id": 31, "type": "nodebalancer", "label": "lb-1"}},
        )

        text = _text(
            await dispatcher.dispatch(
                "linode_firewall_device_create",
                {"firewall_id": 900, "device_id": 31, "device_type": "nodebalancer"},
            )
        )

        assert "Entity: nodebalancer 31 (lb-1)" in text
        assert _body(fake.calls("POST", "networking/firewalls/900/devices")[0]) == {
            "id": 31,
            "type": "nodebalancer",
        }

    @pytest.mark.asyncio
    async def test_device_delete_failure(self, dispatcher):
        with pytest.raises(ToolCallError) as exc:
            await dispatcher.dispatch(
                "linode_firewall_device_delete", {"firewall_id": 900, "device_id": 3}
            )
        assert exc.value.error.message == (
            "linode/firewall_device_delete: failed to remove device 3 from firewall 900: "
            "[404] Not found"
        )


class TestNodeBalancerTools:
    @pytest.mark.asyncio
    async def test_list(self, dispatcher, fake):
        fake.collection("nodebalancers", [NODEBALANCER])
        text = _text(await dispatcher.dispatch("linode_nodebalancers_list", {}))

        assert "ID: 31 | lb-1" in text
        assert "  IPv4: 203.0.113.10 | Throttle: 5 conn/sec" in text

    @pytest.mark.asyncio
    async def test_get_with_configs(self, dispatcher, fake):
        fake.route("GET", "nodebalancers/31", NODEBALANCER)
        fake.collection(
            "nodebalancers/31/configs",
            [
                {
                    "id": 1,
                    "port": 443,
                    "protocol": "https",
                    "algorithm": "roundrobin",
                    "stickiness": "table",
                    "check": "http",
                    "nodes_status": {"up": 2, "down": 1},
                }
            ],
        )

        text = _text(await dispatcher.dispatch("linode_nodebalancer_get", {"nodebalancer_id": 31}))

        assert "  In: 12.50 MB" in text
        assert "  Total: 42.50 MB" in text
        assert (
            "  Port 443 (https) | Algorithm: roundrobin | Stickiness: table | Check: http"
            " | Nodes: 2 up, 1 down"
        ) in text

    @pytest.mark.asyncio
    async def test_create_body(self, dispatcher, fake):
        fake.route("POST", "nodebalancers", NODEBALANCER)

        await dispatcher.dispatch(
            "linode_nodebalancer_create", {"region": "us-east", "label": "lb-1"}
        )

        assert _body(fake.calls("POST", "nodebalancers")[0]) == {
            "region": "us-east",
            "client_conn_throttle": 0,
            "label": "lb-1",
        }

    @pytest.mark.asyncio
    async def test_throttle_out_of_range(self, dispatcher, fake):
        result = await dispatcher.dispatch(
            "linode_nodebalancer_create", {"region": "us-east", "client_conn_throttle": 25}
        )
        assert result.isError
        assert "client_conn_throttle must be between 0 and 20 conn/sec" in _text(result)
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_update_zero_throttle_is_sent(self, dispatcher, fake):
        fake.route("PUT", "nodebalancers/31", {**NODEBALANCER, "client_conn_throttle": 0})

        text = _text(
            await dispatcher.dispatch(
                "linode_nodebalancer_update", {"nodebalancer_id": 31, "client_conn_throttle": 0}
            )
        )

        assert _body(fake.calls("PUT", "nodebalancers/31")[0]) == {"client_conn_throttle": 0}
        assert "Client Connection Throttle: 0 conn/sec" in text

    @pytest.mark.asyncio
    async def test_update_needs_a_field(self, dispatcher):
        result = await dispatcher.dispatch("linode_nodebalancer_update", {"nodebalancer_id": 31})
        assert result.isError
        assert "at least one of label, client_conn_throttle or tags" in _text(result)

    @pytest.mark.asyncio
    async def test_config_create(self, dispatcher, fake):
        fake.route("POST", "nodebalancers/31/configs", NB_CONFIG)

        text = _text(
            await dispatcher.dispatch(
                "linode_nodebalancer_config_create",
                {
                    "nodebalancer_id": 31,
                    "port": 80,
                    "protocol": "http",
                    "check": "http",
                    "check_path": "/healthz",
                    "check_passive": True,
                },
            )
        )

        assert text == (
            "NodeBalancer configuration created successfully!\n\n"
            "Config ID: 4\nPort: 80\nProtocol: http\nAlgorithm: roundrobin\n"
            "Stickiness: none\nCheck: http"
        )
        assert _body(fake.calls("POST", "nodebalancers/31/configs")[0]) == {
            "port": 80,
            "protocol": "http",
            "check": "http",
            "check_path": "/healthz",
            "check_passive": True,
        }

    @pytest.mark.asyncio
    async def test_config_create_https_needs_certificate(self, dispatcher, fake):
        result = await dispatcher.dispatch(
            "linode_nodebalancer_config_create",
            {"nodebalancer_id": 31, "port": 443, "protocol": "https"},
        )

        assert result.isError
        assert "ssl_cert and ssl_key are required for https configurations" in _text(result)
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_config_create_rejects_unknown_algorithm(self, dispatcher):
        result = await dispatcher.dispatch(
            "linode_nodebalancer_config_create",
            {"nodebalancer_id": 31, "port": 80, "protocol": "http", "algorithm": "random"},
        )
        assert result.isError
        assert "algorithm must be one of: roundrobin, leastconn, source" in _text(result)

    @pytest.mark.asyncio
    async def test_config_update(self, dispatcher, fake):
        path = "nodebalancers/31/configs/4"
        fake.route("PUT", path, {**NB_CONFIG, "algorithm": "leastconn"})

        text = _text(
            await dispatcher.dispatch(
                "linode_nodebalancer_config_update",
                {"nodebalancer_id": 31, "config_id": 4, "algorithm": "leastconn"},
            )
        )

        assert text.startswith("NodeBalancer configuration updated successfully!")
        assert "Algorithm: leastconn" in text
        assert _body(fake.calls("PUT", path)[0]) == {"algorithm": "leastconn"}

    @pytest.mark.asyncio
    async def test_config_update_needs_a_field(self, dispatcher, fake):
        result = await dispatcher.dispatch(
            "linode_nodebalancer_config_update", {"nodebalancer_id": 31, "config_id": 4}
        )
        assert result.isError
        assert "at least one configuration field to update must be provided" in _text(result)
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_config_delete(self, dispatcher, fake):
        fake.route("DELETE", "nodebalancers/31/configs/4", {})

        text = _text(
            await dispatcher.dispatch(
                "linode_nodebalancer_config_delete", {"nodebalancer_id": 31, "config_id": 4}
            )
        )

        assert text == (
            "NodeBalancer configuration deleted successfully!\n\n"
            "Configuration 4 removed from NodeBalancer 31."
        )


class TestDomainTools:
    @pytest.mark.asyncio
    async def test_list(self, dispatcher, fake):
        fake.collection("domains", [DOMAIN])
        text = _text(await dispatcher.dispatch("linode_domains_list", {}))

        assert "ID: 55 | example.com" in text
        assert "  Type: master | Status: active | SOA Email: admin@example.com" in text

    @pytest.mark.asyncio
    async def test_get_timing(self, dispatcher, fake):
        fake.route("GET", "domains/55", DOMAIN)
        text = _text(await dispatcher.dispatch("linode_domain_get", {"domain_id": 55}))

        assert "Timing:\n  TTL: 300 seconds\n  Refresh: 14400 seconds" in text

    @pytest.mark.asyncio
    async def test_master_needs_soa_email(self, dispatcher, fake):
        result = await dispatcher.dispatch("linode_domain_create", {"domain": "example.com"})

        assert result.isError
        assert _text(result) == "linode/domain_create: soa_email is required for master domains"
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_create_slave(self, dispatcher, fake):
        fake.route("POST", "domains", {**DOMAIN, "type": "slave"})

        await dispatcher.dispatch(
            "linode_domain_create",
            {"domain": "example.com", "type": "slave", "master_ips": ["198.51.100.1"]},
        )

        assert _body(fake.calls("POST", "domains")[0]) == {
            "domain": "example.com",
            "type": "slave",
            "master_ips": ["198.51.100.1"],
        }

    @pytest.mark.asyncio
    async def test_records_list(self, dispatcher, fake):
        fake.collection(
            "domains/55/records",
            [
                {"id": 1, "type": "A", "name": "", "target": "203.0.113.5", "ttl_sec": 300},
                {
                    "id": 2,
                    "type": "MX",
                    "name": "mail",
                    "target": "mx.example.com",
                    "ttl_sec": 300,
                    "priority": 10,
                },
            ],
        )

        text = _text(await dispatcher.dispatch("linode_domain_records_list", {"domain_id": 55}))

        assert text.startswith("Found 2 domain record(s):")
        assert "ID: 1 | @" in text
        assert "  Priority: 10 | Weight: 0 | Port: 0" in text

    @pytest.mark.asyncio
    async def test_record_create_mx_sends_priority(self, dispatcher, fake):
        fake.route(
            "POST",
            "domains/55/records",
            {"id": 2, "type": "MX", "name": "", "target": "mx.example.com", "priority": 10},
        )

        text = _text(
            await dispatcher.dispatch(
                "linode_domain_record_create",
                {"domain_id": 55, "type": "MX", "target": "mx.example.com", "priority": 10},
            )
        )

        assert _body(fake.calls("POST", "domains/55/records")[0]) == {
            "type": "MX",
            "target": "mx.example.com",
            "priority": 10,
        }
        assert "Name: @" in text

    @pytest.mark.asyncio
    async def test_record_type_checked(self, dispatcher):
        result = await dispatcher.dispatch(
            "linode_domain_record_create", {"domain_id": 55, "type": "SPF", "target": "x"}
        )
        assert result.isError
        assert "type is required and must be one of: A, AAAA" in _text(result)

    @pytest.mark.asyncio
    async def test_delete(self, dispatcher, fake):
        fake.route("GET", "domains/55", DOMAIN)
        fake.route("DELETE", "domains/55", {})

        text = _text(await dispatcher.dispatch("linode_domain_delete", {"domain_id": 55}))

        assert text == "Domain deleted successfully!\n\nDeleted Domain: example.com (ID: 55)"

    @pytest.mark.asyncio
    async def test_record_get_shows_srv_fields(self, dispatcher, fake):
        fake.route(
            "GET",
            "domains/55/records/3",
            {
                "id": 3,
                "type": "SRV",
                "name": "_sip._tcp",
                "target": "sip.example.com",
                "ttl_sec": 300,
                "priority": 10,
                "weight": 5,
                "port": 5060,
                "service": "_sip",
                "protocol": "_tcp",
                "created": "2024-01-01T00:00:00",
                "updated": "2024-01-02T00:00:00",
            },
        )

        text = _text(
            await dispatcher.dispatch(
                "linode_domain_record_get", {"domain_id": 55, "record_id": 3}
            )
        )

        assert text.splitlines() == [
            "Domain Record Details:",
            "ID: 3",
            "Type: SRV",
            "Name: _sip._tcp",
            "Target: sip.example.com",
            "TTL: 300 seconds",
            "Priority: 10",
            "Weight: 5",
            "Port: 5060",
            "Service: _sip",
            "Protocol: _tcp",
            "Created: 2024-01-01T00:00:00",
            "Updated: 2024-01-02T00:00:00",
        ]

    @pytest.mark.asyncio
    async def test_record_update_sends_given_fields(self, dispatcher, fake):
        path = "domains/55/records/1"
        fake.route(
            "PUT",
            path,
            {"id": 1, "type": "A", "name": "www", "target": "203.0.113.9", "ttl_sec": 3600},
        )

        text = _text(
            await dispatcher.dispatch(
                "linode_domain_record_update",
                {"domain_id": 55, "record_id": 1, "target": "203.0.113.9", "ttl_sec": 3600},
            )
        )

        assert _body(fake.calls("PUT", path)[0]) == {"target": "203.0.113.9", "ttl_sec": 3600}
        assert text == (
            "Domain record updated successfully!\n\n"
            "ID: 1\nType: A\nName: www\nTarget: 203.0.113.9\nTTL: 3600 seconds"
        )

    @pytest.mark.asyncio
    async def test_record_update_needs_a_field(self, dispatcher, fake):
        result = await dispatcher.dispatch(
            "linode_domain_record_update", {"domain_id": 55, "record_id": 1}
        )
        assert result.isError
        assert "at least one record field to update must be provided" in _text(result)
        assert fake.requests == []
