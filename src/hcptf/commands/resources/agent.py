"""Agent pool, agent token and agent commands."""

from __future__ import annotations

from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    bool_flag,
    create_command,
    data_of,
    delete_command,
    id_flag,
    list_command,
    read_command,
    resource,
    show_item,
    text_flag,
    tristate_flag,
    update_command,
)

POOL_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Organization Scoped", "organization-scoped"),
    ("Agent Count", "agent-count"),
    ("Created At", "created-at"),
]
AGENT_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Status", "status"),
    ("IP Address", "ip-address"),
    ("Last Ping At", "last-ping-at"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Description", "description"),
    ("Created At", "created-at"),
    ("Last Used At", "last-used-at"),
]
POOL_ID = text_flag("agent-pool-id", "Agent pool ID", required=True, aliases=["pool"])


def token_create(inv: Invocation) -> None:
    doc = inv.client.post(
        inv.path("/agent-pools/{agent_pool_id}/authentication-tokens"),
        json=resource("authentication-tokens", {"description": inv["description"]}),
    )
    inv.notice("Agent token created. Store it securely, it is only shown once.")
    show_item(inv, data_of(doc), TOKEN_FIELDS + [("Token", "token")])


COMMANDS = [
    list_command(
        "agentpool list",
        "List agent pools",
        "/organizations/{organization}/agent-pools",
        [("ID", "id"), ("Name", "name"), ("Organization Scoped", "organization-scoped"),
         ("Agents", "agent-count")],
        flags=[ORG],
        empty="No agent pools found",
    ),
    create_command(
        "agentpool create",
        "Create an agent pool",
        "/organizations/{organization}/agent-pools",
        "agent-pools",
        POOL_FIELDS,
        flags=[ORG,
               text_flag("name", "Agent pool name", required=True),
               bool_flag("organization-scoped", "Make agent pool organization scoped")],
        attributes={"name": "name", "organization-scoped": "organization-scoped"},
        success="Agent pool '{name}' created",
    ),
    read_command(
        "agentpool read",
        "Show agent pool details",
        "/agent-pools/{id}",
        POOL_FIELDS,
        flags=[id_flag("Agent pool")],
    ),
    update_command(
        "agentpool update",
        "Update an agent pool",
        "/agent-pools/{id}",
        "agent-pools",
        POOL_FIELDS,
        flags=[id_flag("Agent pool"),
               text_flag("name", "Agent pool name"),
               tristate_flag("organization-scoped", "Make agent pool organization scoped")],
        attributes={"name": "name", "organization-scoped": "organization-scoped"},
        success="Agent pool '{id}' updated",
    ),
    delete_command(
        "agentpool delete",
        "Delete an agent pool",
        "/agent-pools/{id}",
        "Agent pool '{id}' deleted successfully",
        flags=[id_flag("Agent pool")],
        confirm="Are you sure you want to delete agent pool '{id}'? (yes/no): ",
    ),
    CommandSpec(
        name="agentpool token-create",
        synopsis="Create an agent token",
        handler=token_create,
        flags=[POOL_ID, text_flag("description", "Agent token description", required=True)],
    ),
    list_command(
        "agentpool token-list",
        "List agent tokens for an agent pool",
        "/agent-pools/{agent_pool_id}/authentication-tokens",
        [("ID", "id"), ("Description", "description"), ("Created At", "created-at"),
         ("Last Used At", "last-used-at")],
        flags=[POOL_ID],
        empty="No agent tokens found",
    ),
    delete_command(
        "agentpool token-delete",
        "Delete an agent token",
        "/authentication-tokens/{id}",
        "Agent token '{id}' deleted successfully",
        flags=[id_flag("Agent token")],
        confirm="Are you sure you want to delete agent token '{id}'? (yes/no): ",
    ),
    list_command(
        "agent list",
        "List agents in an agent pool",
        "/agent-pools/{agent_pool_id}/agents",
        [("ID", "id"), ("Name", "name"), ("Status", "status"), ("IP Address", "ip-address"),
         ("Last Ping At", "last-ping-at")],
        flags=[POOL_ID],
        empty="No agents found",
    ),
    read_command(
        "agent read",
        "Show agent details",
        "/agents/{id}",
        AGENT_FIELDS,
        flags=[id_flag("Agent")],
    ),
]
