"""Organization commands: organizations, memberships, tokens, tags and reserved tag keys."""

from __future__ import annotations

from ...errors import MissingParameterError
from ..base import CommandSpec, Flag, Invocation
from ..helpers import (
    ORG,
    bool_flag,
    create_command,
    data_of,
    date_flag,
    delete_command,
    fields_for,
    id_flag,
    identifiers,
    int_flag,
    list_command,
    list_flag,
    read_command,
    relation_list,
    resource,
    show_item,
    text_flag,
    tristate_flag,
    update_command,
)

ORG_FIELDS = [
    ("Name", "name"),
    ("Email", "email"),
    ("External ID", "external-id"),
    ("Plan", "plan-identifier"),
    ("Cost Estimation", "cost-estimation-enabled"),
    ("Session Timeout", "session-timeout"),
    ("Session Remember", "session-remember"),
    ("Two Factor Required", "collaborator-auth-policy"),
    ("Created At", "created-at"),
]
MEMBERSHIP_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Email", "email"),
    ("User", "rel:user"),
    ("Teams", "rel:teams"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Description", "description"),
    ("Created At", "created-at"),
    ("Last Used At", "last-used-at"),
    ("Expired At", "expired-at"),
]
RESERVED_KEY_FIELDS = [
    ("ID", "id"),
    ("Key", "key"),
    ("Disable Overrides", "disable-overrides"),
    ("Created At", "created-at"),
]

ORG_NAME = Flag(
    name="name",
    aliases=["organization", "org"],
    help="Organization name (defaults to the configured organization)",
)


def organization_show(inv: Invocation) -> None:
    name = inv.get("name") or inv.config.default_organization
    if not name:
        raise MissingParameterError("name", inv.command.name)
    inv.params["name"] = name
    doc = inv.client.get(inv.path("/organizations/{name}"))
    show_item(inv, data_of(doc), ORG_FIELDS)


def _org_attributes(inv: Invocation):
    attrs = {}
    if inv.provided("email"):
        attrs["email"] = inv["email"]
    for flag in ("session-timeout", "session-remember"):
        if inv.get(flag):
            attrs[flag] = inv[flag]
    if inv.provided("cost-estimation"):
        attrs["cost-estimation-enabled"] = inv["cost-estimation"]
    if inv.provided("new-name"):
        attrs["name"] = inv["new-name"]
    return attrs


def member_read(inv: Invocation) -> None:
    doc = inv.client.get(inv.path("/organization-memberships/{id}"), params={"include": "user"})
    record = fields_for(data_of(doc), MEMBERSHIP_FIELDS)
    for included in (doc or {}).get("included") or []:
        if included.get("type") == "users":
            attrs = included.get("attributes") or {}
            record["Username"] = attrs.get("username")
            record["Two Factor"] = (attrs.get("two-factor") or {}).get("enabled")
    inv.record(record)


def token_read(inv: Invocation) -> None:
    doc = inv.client.get(inv.path("/organizations/{organization}/authentication-token"))
    show_item(inv, data_of(doc), TOKEN_FIELDS)


def token_create(inv: Invocation) -> None:
    attrs = {"expired-at": inv["expired-at"]} if inv.provided("expired-at") else {}
    doc = inv.client.post(
        inv.path("/organizations/{organization}/authentication-token"),
        json=resource("authentication-token", attrs),
    )
    item = data_of(doc)
    inv.notice("Organization token created. Store it securely, it is only shown once.")
    show_item(inv, item, TOKEN_FIELDS + [("Token", "token")])


COMMANDS = [
    list_command(
        "organization list",
        "List organizations",
        "/organizations",
        [("Name", "name"), ("Email", "email"), ("Created At", "created-at")],
        empty="No organizations found",
        page_size=None,
    ),
    create_command(
        "organization create",
        "Create an organization",
        "/organizations",
        "organizations",
        ORG_FIELDS,
        flags=[text_flag("name", "Organization name", required=True),
               text_flag("email", "Admin email address", required=True)],
        attributes={"name": "name", "email": "email"},
        success="Organization '{name}' created successfully",
    ),
    CommandSpec(
        name="organization show",
        synopsis="Show organization details",
        handler=organization_show,
        flags=[ORG_NAME],
        examples=["hcptf organization show -name=my-org", "hcptf my-org"],
    ),
    update_command(
        "organization update",
        "Update organization settings",
        "/organizations/{name}",
        "organizations",
        ORG_FIELDS,
        flags=[text_flag("name", "Organization name", required=True),
               text_flag("new-name", "New organization name"),
               text_flag("email", "Admin email address"),
               int_flag("session-timeout", "Session timeout in minutes"),
               int_flag("session-remember", "Session remember duration in minutes"),
               tristate_flag("cost-estimation", "Enable cost estimation")],
        body=lambda inv: resource("organizations", _org_attributes(inv)),
        success="Organization '{name}' updated successfully",
    ),
    delete_command(
        "organization delete",
        "Delete an organization",
        "/organizations/{name}",
        "Organization '{name}' deleted successfully",
        flags=[text_flag("name", "Organization name", required=True)],
        confirm="Are you sure you want to delete organization '{name}'? (yes/no): ",
    ),
    list_command(
        "organization membership list",
        "List organization memberships",
        "/organizations/{organization}/organization-memberships",
        [("ID", "id"), ("Email", "email"), ("Status", "status"), ("User", "rel:user")],
        flags=[ORG, text_flag("status", "Filter by status (invited, active)"),
               text_flag("email", "Filter by email address")],
        params={"status": "filter[status]", "email": "filter[email]"},
        empty="No memberships found",
    ),
    create_command(
        "organization membership create",
        "Invite a user to an organization",
        "/organizations/{organization}/organization-memberships",
        "organization-memberships",
        MEMBERSHIP_FIELDS,
        flags=[ORG, text_flag("email", "Email address of user to invite", required=True),
               list_flag("team-ids", "Comma-separated list of team IDs", required=True)],
        body=lambda inv: resource(
            "organization-memberships",
            {"email": inv["email"]},
            {"teams": relation_list("teams", inv["team-ids"])},
        ),
        success="Invitation sent to {email}",
    ),
    read_command(
        "organization membership read",
        "Show an organization membership",
        "/organization-memberships/{id}",
        MEMBERSHIP_FIELDS,
        flags=[id_flag("Organization membership")],
    ),
    delete_command(
        "organization membership delete",
        "Remove a user from an organization",
        "/organization-memberships/{id}",
        "Organization membership '{id}' deleted successfully",
        flags=[id_flag("Organization membership")],
        confirm="Are you sure you want to delete organization membership '{id}'? (yes/no): ",
    ),
    CommandSpec(
        name="organization member read",
        synopsis="Show an organization member with user details",
        handler=member_read,
        flags=[id_flag("Organization membership")],
    ),
    CommandSpec(
        name="organization token list",
        synopsis="Show the organization API token",
        handler=token_read,
        flags=[ORG],
    ),
    CommandSpec(
        name="organization token create",
        synopsis="Create or regenerate the organization API token",
        handler=token_create,
        flags=[ORG, date_flag("expired-at", "Expiration date in ISO 8601 format (e.g., 2024-12-31T23:59:59Z)")],
    ),
    CommandSpec(
        name="organization token read",
        synopsis="Show organization token details",
        handler=token_read,
        flags=[ORG],
    ),
    delete_command(
        "organization token delete",
        "Delete the organization API token",
        "/organizations/{organization}/authentication-token",
        "Organization token deleted successfully",
        flags=[ORG],
        confirm="Are you sure you want to delete the token for organization '{organization}'? (yes/no): ",
    ),
    list_command(
        "organization tag list",
        "List organization tags",
        "/organizations/{organization}/tags",
        [("ID", "id"), ("Name", "name"), ("Instance Count", "instance-count")],
        flags=[ORG, text_flag("query", "Filter tags by name")],
        params={"query": "q"},
        empty="No tags found",
    ),
    create_command(
        "organization tag create",
        "Create an organization tag",
        "/organizations/{organization}/tags",
        "tags",
        [("ID", "id"), ("Name", "name")],
        flags=[ORG, text_flag("name", "Tag name", required=True)],
        body=lambda inv: {"data": [{"type": "tags", "attributes": {"name": inv["name"]}}]},
        success="Tag '{name}' created",
    ),
    delete_command(
        "organization tag delete",
        "Delete an organization tag",
        "/organizations/{organization}/tags",
        "Tag '{id}' deleted successfully",
        flags=[ORG, id_flag("Tag")],
        confirm="Are you sure you want to delete tag '{id}'? (yes/no): ",
        body=lambda inv: identifiers("tags", [inv["id"]]),
    ),
    list_command(
        "reservedtagkey list",
        "List reserved tag keys",
        "/organizations/{organization}/reserved-tag-keys",
        [("ID", "id"), ("Key", "key"), ("Disable Overrides", "disable-overrides")],
        flags=[ORG],
        empty="No reserved tag keys found",
    ),
    create_command(
        "reservedtagkey create",
        "Create a reserved tag key",
        "/organizations/{organization}/reserved-tag-keys",
        "reserved-tag-keys",
        RESERVED_KEY_FIELDS,
        flags=[ORG, text_flag("key", "Tag key to reserve", required=True),
               bool_flag("disable-overrides", "Disable overriding inherited tags at workspace level")],
        body=lambda inv: resource("reserved-tag-keys", {
            "key": inv["key"],
            "disable-overrides": bool(inv.get("disable_overrides")),
        }),
        success="Reserved tag key '{key}' created",
    ),
    update_command(
        "reservedtagkey update",
        "Update a reserved tag key",
        "/reserved-tag-keys/{id}",
        "reserved-tag-keys",
        RESERVED_KEY_FIELDS,
        flags=[id_flag("Reserved tag key"), text_flag("key", "Updated tag key"),
               tristate_flag("disable-overrides", "Set disable-overrides")],
        attributes={"key": "key", "disable-overrides": "disable-overrides"},
        success="Reserved tag key '{id}' updated",
    ),
    delete_command(
        "reservedtagkey delete",
        "Delete a reserved tag key",
        "/reserved-tag-keys/{id}",
        "Reserved tag key '{id}' deleted successfully",
        flags=[id_flag("Reserved tag key")],
        confirm="Are you sure you want to delete reserved tag key '{id}'? (yes/no): ",
    ),
]
