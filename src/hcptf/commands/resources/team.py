"""Team commands: teams, membership, workspace access and team tokens."""

from __future__ import annotations

from typing import Any, Dict

from ...errors import ResourceNotFoundError
from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    choice_flag,
    collect,
    create_command,
    data_of,
    date_flag,
    delete_command,
    id_flag,
    identifiers,
    list_command,
    list_flag,
    read_command,
    relation,
    resource,
    show_item,
    text_flag,
    update_command,
)

TEAM_NAME = text_flag("name", "Team name", required=True)
TEAM_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Visibility", "visibility"),
    ("Users Count", "users-count"),
    ("SSO Team ID", "sso-team-id"),
]
ACCESS_FIELDS = [
    ("ID", "id"),
    ("Access", "access"),
    ("Runs", "runs"),
    ("Variables", "variables"),
    ("State Versions", "state-versions"),
    ("Team", "rel:team"),
    ("Workspace", "rel:workspace"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Description", "description"),
    ("Created At", "created-at"),
    ("Last Used At", "last-used-at"),
    ("Expired At", "expired-at"),
]
WORKSPACE_ACCESS = ["read", "plan", "write", "admin", "custom"]


def find_team(inv: Invocation) -> Dict[str, Any]:
    """Look up a team by name within the organization."""
    doc = inv.client.get(
        inv.path("/organizations/{organization}/teams"),
        params={"filter[names]": inv["name"]},
    )
    for item in (doc or {}).get("data") or []:
        if (item.get("attributes") or {}).get("name") == inv["name"]:
            return item
    raise ResourceNotFoundError(f"team '{inv['name']}'")


def team_show(inv: Invocation) -> None:
    show_item(inv, find_team(inv), TEAM_FIELDS)


def team_update(inv: Invocation) -> None:
    inv.require_one("new-name", "visibility")
    team = find_team(inv)
    attrs = collect(inv, {"new-name": "name", "visibility": "visibility"})
    doc = inv.client.patch(f"/teams/{team['id']}", json=resource("teams", attrs))
    inv.notice(f"Team '{inv['name']}' updated")
    show_item(inv, data_of(doc), TEAM_FIELDS)


def team_delete(inv: Invocation) -> None:
    team = find_team(inv)
    inv.client.delete(f"/teams/{team['id']}")
    inv.message(f"Team '{inv['name']}' deleted successfully")


def _membership(method: str, verb: str):
    def handler(inv: Invocation) -> None:
        team = find_team(inv)
        users = inv["usernames"]
        inv.client.request(
            method, f"/teams/{team['id']}/relationships/users", json=identifiers("users", users)
        )
        inv.message(f"Successfully {verb} {len(users)} user(s) in team '{inv['name']}'")
    return handler


def token_create(inv: Invocation) -> None:
    attrs = {"description": inv["description"]}
    if inv.provided("expired-at"):
        attrs["expired-at"] = inv["expired-at"]
    doc = inv.client.post(
        inv.path("/teams/{team_id}/authentication-tokens"),
        json=resource("authentication-tokens", attrs),
    )
    inv.notice("Team token created. Store it securely, it is only shown once.")
    show_item(inv, data_of(doc), TOKEN_FIELDS + [("Token", "token")])


COMMANDS = [
    list_command(
        "team list",
        "List teams",
        "/organizations/{organization}/teams",
        [("ID", "id"), ("Name", "name"), ("Visibility", "visibility"), ("Users", "users-count")],
        flags=[ORG],
        empty="No teams found",
    ),
    create_command(
        "team create",
        "Create a team",
        "/organizations/{organization}/teams",
        "teams",
        TEAM_FIELDS,
        flags=[ORG, TEAM_NAME,
               choice_flag("visibility", "Team visibility: secret or organization",
                           ["secret", "organization"], default="secret")],
        attributes={"name": "name", "visibility": "visibility"},
        success="Team '{name}' created",
    ),
    CommandSpec(
        name="team show",
        synopsis="Show team details",
        handler=team_show,
        flags=[ORG, TEAM_NAME],
    ),
    CommandSpec(
        name="team update",
        synopsis="Update a team",
        handler=team_update,
        flags=[ORG, TEAM_NAME,
               text_flag("new-name", "New team name"),
               choice_flag("visibility", "Team visibility: secret or organization",
                           ["secret", "organization"])],
    ),
    CommandSpec(
        name="team delete",
        synopsis="Delete a team",
        handler=team_delete,
        flags=[ORG, TEAM_NAME],
        output=False,
        confirm="Are you sure you want to delete team '{name}'? (yes/no): ",
    ),
    CommandSpec(
        name="team add-member",
        synopsis="Add users to a team",
        handler=_membership("POST", "added"),
        flags=[ORG, TEAM_NAME,
               list_flag("usernames", "Comma-separated usernames to add", required=True)],
        output=False,
    ),
    CommandSpec(
        name="team remove-member",
        synopsis="Remove users from a team",
        handler=_membership("DELETE", "removed"),
        flags=[ORG, TEAM_NAME,
               list_flag("usernames", "Comma-separated usernames to remove", required=True)],
        output=False,
    ),
    list_command(
        "team access list",
        "List team access for a workspace",
        "/team-workspaces",
        [("ID", "id"), ("Access", "access"), ("Team", "rel:team")],
        flags=[text_flag("workspace-id", "Workspace ID", required=True)],
        params={"workspace-id": "filter[workspace][id]"},
        empty="No team access found",
    ),
    create_command(
        "team access create",
        "Grant a team access to a workspace",
        "/team-workspaces",
        "team-workspaces",
        ACCESS_FIELDS,
        flags=[text_flag("workspace-id", "Workspace ID", required=True),
               text_flag("team-id", "Team ID", required=True),
               choice_flag("access", "Access level: read, plan, write, admin, or custom",
                           WORKSPACE_ACCESS, required=True)],
        body=lambda inv: resource(
            "team-workspaces",
            {"access": inv["access"]},
            {"workspace": relation("workspaces", inv["workspace-id"]),
             "team": relation("teams", inv["team-id"])},
        ),
        success="Team access created",
    ),
    read_command(
        "team access read",
        "Show team access details",
        "/team-workspaces/{id}",
        ACCESS_FIELDS,
        flags=[id_flag("Team access")],
    ),
    update_command(
        "team access update",
        "Update team access to a workspace",
        "/team-workspaces/{id}",
        "team-workspaces",
        ACCESS_FIELDS,
        flags=[id_flag("Team access"),
               choice_flag("access", "Access level: read, plan, write, admin, or custom",
                           WORKSPACE_ACCESS, required=True)],
        attributes={"access": "access"},
        success="Team access '{id}' updated",
    ),
    delete_command(
        "team access delete",
        "Revoke team access to a workspace",
        "/team-workspaces/{id}",
        "Team access '{id}' deleted successfully",
        flags=[id_flag("Team access")],
        confirm="Are you sure you want to delete team access '{id}'? (yes/no): ",
    ),
    list_command(
        "team token list",
        "List team tokens in an organization",
        "/organizations/{organization}/team-tokens",
        [("ID", "id"), ("Description", "description"), ("Team", "rel:team"),
         ("Last Used At", "last-used-at"), ("Expired At", "expired-at")],
        flags=[ORG],
        empty="No team tokens found",
    ),
    CommandSpec(
        name="team token create",
        synopsis="Create a team token",
        handler=token_create,
        flags=[text_flag("team-id", "Team ID", required=True),
               text_flag("description", "Token description", required=True),
               date_flag("expired-at", "Expiration date in ISO 8601 format (e.g., 2024-12-31T23:59:59Z)")],
    ),
    read_command(
        "team token read",
        "Show team token details",
        "/authentication-tokens/{id}",
        TOKEN_FIELDS,
        flags=[id_flag("Team token")],
    ),
    delete_command(
        "team token delete",
        "Delete a team token",
        "/authentication-tokens/{id}",
        "Team token '{id}' deleted successfully",
        flags=[id_flag("Team token")],
        confirm="Are you sure you want to delete team token '{id}'? (yes/no): ",
    ),
]
