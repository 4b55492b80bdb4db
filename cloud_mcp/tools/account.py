"""Account tools: inspect, list, switch and add Linode accounts."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from cloud_mcp import decoder as p
from cloud_mcp import formatting as fmt
from cloud_mcp.accounts import AccountSummary
from cloud_mcp.errors import AccountError, ConfigError, ParameterError
from cloud_mcp.linode.client import LinodeClient
from cloud_mcp.linode.models import Profile
from cloud_mcp.registry import CallContext, tool

logger = logging.getLogger("cloud-mcp.tools.account")


@dataclass(frozen=True)
class AccountSwitchParams:
    account_name: str = p.string("Name of the configured account to make current", required=True)


@dataclass(frozen=True)
class AccountCreateParams:
    name: str = p.string("Unique short name for the account", required=True)
    token: str = p.string("Linode personal access token", required=True)
    label: str = p.string("Human readable label (defaults to the name)")
    api_url: str = p.string("Override for the API base URL, e.g. https://api.linode.com/v4")


@tool("linode_account_get", "Get the current Linode account and its profile.", p.NoParams)
async def account_get(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    with ctx.upstream("failed to get profile"):
        profile = Profile.from_api(await client.get("profile"))
    return (
        f"Account: {ctx.account.name} ({ctx.account.label})\n"
        f"Username: {profile.username}\n"
        f"Email: {profile.email}\n"
        f"UID: {profile.uid}\n"
        f"Restricted: {fmt.flag(profile.restricted)}"
    )


@tool("linode_account_list", "List all configured Linode accounts.", p.NoParams)
async def account_list(ctx: CallContext, client: LinodeClient, params: p.NoParams) -> str:
    summaries = ctx.accounts.list()

    def render(s: AccountSummary) -> str:
        marker = " (current)" if s.is_current else ""
        return f"{s.name} | {s.label}{marker}"

    text = fmt.listing(summaries, "account", render)
    current = next((s.name for s in summaries if s.is_current), None)
    if current is not None:
        text += f"\n\nCurrent account: {current}"
    return text


@tool(
    "linode_account_switch",
    "Switch the current Linode account. Later calls use the new account.",
    AccountSwitchParams,
)
async def account_switch(
    ctx: CallContext, client: LinodeClient, params: AccountSwitchParams
) -> str:
    entry = ctx.accounts.switch(params.account_name)
    # Calls already running keep their account; verify the new one.
    with ctx.upstream("failed to verify switched account"):
        profile = Profile.from_api(await entry.client.get("profile"))
    logger.info(f"Switched Linode account to {entry.name} (username {profile.username})")
    return (
        f"Successfully switched to account: {entry.name} ({entry.label})\n"
        f"Username: {profile.username}"
    )


@tool(
    "linode_account_create",
    "Add a Linode account for this session. The token is verified before the account is added; "
    "nothing is written to disk.",
    AccountCreateParams,
)
async def account_create(
    ctx: CallContext, client: LinodeClient, params: AccountCreateParams
) -> str:
    try:
        ctx.accounts.get(params.name)
    except AccountError:
        pass
    else:
        raise AccountError(f"account {params.name} already configured")

    try:
        entry = ctx.accounts.new_entry(params.name, params.label, params.token, params.api_url)
    except ConfigError as e:
        raise ParameterError(str(e)) from e

    try:
        with ctx.upstream(f"failed to verify token for account {params.name}"):
            profile = Profile.from_api(await entry.client.get("profile"))
        ctx.accounts.add(entry)
    except Exception:
        await entry.client.aclose()
        raise

    return (
        f"Account created successfully!\n\n"
        f"Name: {entry.name}\n"
        f"Label: {entry.label}\n"
        f"Username: {profile.username}\n"
        f"API URL: {entry.api_base_url}\n\n"
        f"Use linode_account_switch with account_name {entry.name} to make it current."
    )


TOOLS = [account_get, account_list, account_switch, account_create]
