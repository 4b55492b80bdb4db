"""Tests for tool registration, naming and the handler wrapper."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from cloud_mcp import decoder as p
from cloud_mcp.errors import AccountError, InternalError, ParameterError
from cloud_mcp.linode.client import LinodeAPIError
from cloud_mcp.observability import ObservabilityContext
from cloud_mcp.outcome import OutcomeKind
from cloud_mcp.registry import (
    CallContext,
    ToolRegistry,
    qualifier_for,
    tool,
    validate_tool_name,
)
from cloud_mcp.tools import all_registrations

EXPECTED_TOOLS = {
    "linode_account_get", "linode_account_list", "linode_account_switch", "linode_account_create",
    "linode_instances_list", "linode_instance_get", "linode_instance_create",
    "linode_instance_delete", "linode_instance_boot", "linode_instance_shutdown",
    "linode_instance_reboot",
    "linode_volumes_list", "linode_volume_get", "linode_volume_create", "linode_volume_delete",
    "linode_volume_attach", "linode_volume_detach",
    "linode_ips_list", "linode_ip_get", "linode_vlans_list",
    "linode_reserved_ips_list", "linode_reserved_ip_get", "linode_reserved_ip_update",
    "linode_ipv6_pools_list", "linode_ipv6_ranges_list",
    "linode_images_list", "linode_image_get", "linode_image_create", "linode_image_update",
    "linode_image_delete", "linode_image_upload_create",
    "linode_firewalls_list", "linode_firewall_get", "linode_firewall_create",
    "linode_firewall_update", "linode_firewall_delete", "linode_firewall_rules_update",
    "linode_firewall_device_create", "linode_firewall_device_delete",
    "linode_nodebalancers_list", "linode_nodebalancer_get", "linode_nodebalancer_create",
    "linode_nodebalancer_update", "linode_nodebalancer_delete",
    "linode_nodebalancer_config_create", "linode_nodebalancer_config_update",
    "linode_nodebalancer_config_delete",
    "linode_domains_list", "linode_domain_get", "linode_domain_create", "linode_domain_update",
    "linode_domain_delete", "linode_domain_records_list", "linode_domain_record_get",
    "linode_domain_record_create", "linode_domain_record_update", "linode_domain_record_delete",
    "linode_stackscripts_list", "linode_stackscript_get", "linode_stackscript_create",
    "linode_stackscript_update", "linode_stackscript_delete",
    "linode_lke_clusters_list", "linode_lke_cluster_get", "linode_lke_cluster_create",
    "linode_lke_cluster_update", "linode_lke_cluster_delete", "linode_lke_nodepool_create",
    "linode_lke_nodepool_update", "linode_lke_nodepool_delete", "linode_lke_kubeconfig_get",
    "linode_longview_clients_list", "linode_longview_client_get",
    "linode_longview_client_create", "linode_longview_client_update",
    "linode_longview_client_delete",
    "linode_databases_list", "linode_database_engines_list", "linode_database_types_list",
    "linode_mysql_databases_list", "linode_mysql_database_get", "linode_mysql_database_create",
    "linode_mysql_database_update", "linode_mysql_database_delete",
    "linode_postgres_databases_list", "linode_postgres_database_get",
    "linode_postgres_database_create", "linode_postgres_database_update",
    "linode_postgres_database_delete",
    "linode_objectstorage_buckets_list", "linode_objectstorage_bucket_get",
    "linode_objectstorage_bucket_create", "linode_objectstorage_bucket_update",
    "linode_objectstorage_bucket_delete",
    "linode_objectstorage_keys_list", "linode_objectstorage_key_get",
    "linode_objectstorage_key_create", "linode_objectstorage_key_update",
    "linode_objectstorage_key_delete",
    "linode_objectstorage_clusters_list",
    "linode_support_tickets_list", "linode_support_ticket_get",
    "cloudmcp_version_get", "cloudmcp_metrics_get",
}  # fmt: skip


@dataclass(frozen=True)
class EchoParams:
    word: str = p.string("Word to echo", required=True)


def _ctx(accounts, params=None) -> CallContext:
    return CallContext(
        tool="linode_echo_get",
        arguments={},
        params=params,
        account=accounts.get_current(),
        deadline=0.0,
        correlation_id="test0001",
        accounts=accounts,
        observability=ObservabilityContext(),
    )


class TestRegistry:
    def test_every_tool_registered_once(self, registry):
        assert set(registry.names()) == EXPECTED_TOOLS
        assert len(registry) == len(all_registrations())

    def test_mcp_tools_carry_schema_and_description(self, registry):
        for t in registry.mcp_tools():
            assert t.description
            assert t.inputSchema["type"] == "object"
            for prop in t.inputSchema["properties"].values():
                assert prop.get("description"), f"{t.name} has an undescribed property"

    def test_volume_create_schema(self, registry):
        schema = registry.get("linode_volume_create").input_schema
        assert schema["required"] == ["label", "size"]
        assert schema["properties"]["size"]["minimum"] == 10
        assert schema["properties"]["size"]["maximum"] == 8192

    def test_lookup(self, registry):
        assert "linode_instance_get" in registry
        assert registry.get("linode_nope_get") is None

    def test_duplicate_rejected(self):
        reg = all_registrations()[0]
        with pytest.raises(ValueError, match="duplicate tool name"):
            ToolRegistry([reg, reg])

    @pytest.mark.parametrize(
        "name",
        ["linode_instances", "Linode_instance_get", "linode_instance_explode", "linode__get"],
    )
    def test_bad_names(self, name):
        with pytest.raises(ValueError, match="invalid tool name"):
            validate_tool_name(name)

    def test_qualifier(self):
        assert qualifier_for("linode_instance_get") == "linode/instance_get"
        assert qualifier_for("cloudmcp_version_get") == "cloudmcp/version_get"


class TestHandlerWrapper:
    @pytest.mark.asyncio
    async def test_ok(self, accounts):
        @tool("linode_echo_get", "Echo.", EchoParams)
        async def echo(ctx, client, params):
            return params.word

        outcome = await echo.handler(_ctx(accounts, EchoParams("hi")), None)
        assert outcome.kind is OutcomeKind.OK
        assert outcome.text == "hi"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, kind",
        [
            (ParameterError("bad field"), OutcomeKind.PARAMETER),
            (AccountError("no current account"), OutcomeKind.ACCOUNT),
            (InternalError("broken invariant"), OutcomeKind.INTERNAL),
            (LinodeAPIError(500, ["boom"]), OutcomeKind.UPSTREAM),
            (KeyError("id"), OutcomeKind.INTERNAL),
        ],
    )
    async def test_exceptions_become_outcomes(self, accounts, exc, kind):
        @tool("linode_echo_get", "Echo.", EchoParams)
        async def fail(ctx, client, params):
            raise exc

        outcome = await fail.handler(_ctx(accounts), None)
        assert outcome.kind is kind
        assert outcome.qualifier == "linode/echo_get"

    @pytest.mark.asyncio
    async def test_upstream_context_keeps_message_and_cause(self, accounts):
        @tool("linode_echo_get", "Echo.", EchoParams)
        async def fail(ctx, client, params):
            with ctx.upstream("failed to echo 7"):
                raise LinodeAPIError(404, ["Not found"])

        outcome = await fail.handler(_ctx(accounts), None)
        assert outcome.kind is OutcomeKind.UPSTREAM
        assert outcome.text == "failed to echo 7"
        assert str(outcome.cause) == "[404] Not found"

    @pytest.mark.asyncio
    async def test_empty_text_is_internal(self, accounts):
        @tool("linode_echo_get", "Echo.", EchoParams)
        async def empty(ctx, client, params):
            return ""

        outcome = await empty.handler(_ctx(accounts), None)
        assert outcome.kind is OutcomeKind.INTERNAL

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, accounts):
        @tool("linode_echo_get", "Echo.", EchoParams)
        async def cancelled(ctx, client, params):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await cancelled.handler(_ctx(accounts), None)
