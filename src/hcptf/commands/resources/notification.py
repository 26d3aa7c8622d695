"""Workspace notification configuration commands."""

from __future__ import annotations

from typing import Any, Dict

from ...errors import MissingParameterError
from ..base import Invocation
from ..helpers import (
    ORG,
    WORKSPACE,
    action_command,
    bool_flag,
    choice_flag,
    collect,
    create_command,
    delete_command,
    id_flag,
    list_command,
    list_flag,
    read_command,
    resource,
    text_flag,
    tristate_flag,
    update_command,
)

DESTINATIONS = ["email", "slack", "generic", "microsoft-teams"]
NOTIFICATION_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Destination Type", "destination-type"),
    ("Enabled", "enabled"),
    ("URL", "url"),
    ("Triggers", "triggers"),
    ("Created At", "created-at"),
]
NOTIFICATION_ATTRIBUTES = {
    "name": "name",
    "enabled": "enabled",
    "url": "url",
    "token": "token",
    "triggers": "triggers",
    "email-addresses": "email-addresses",
}


def _create_body(inv: Invocation) -> Dict[str, Any]:
    if inv["destination-type"] != "email" and not inv.provided("url"):
        raise MissingParameterError("url", "notification create")
    attrs = collect(inv, NOTIFICATION_ATTRIBUTES)
    attrs["destination-type"] = inv["destination-type"]
    attrs["enabled"] = bool(inv.get("enabled"))
    attrs.setdefault("triggers", [])
    return resource("notification-configurations", attrs)


COMMANDS = [
    list_command(
        "notification list",
        "List notification configurations for a workspace",
        "/workspaces/{workspace_id}/notification-configurations",
        [("ID", "id"), ("Name", "name"), ("Destination Type", "destination-type"),
         ("Enabled", "enabled")],
        flags=[ORG, WORKSPACE],
        empty="No notification configurations found",
    ),
    create_command(
        "notification create",
        "Create a notification configuration",
        "/workspaces/{workspace_id}/notification-configurations",
        "notification-configurations",
        NOTIFICATION_FIELDS,
        flags=[ORG, WORKSPACE,
               text_flag("name", "Notification configuration name", required=True),
               choice_flag("destination-type",
                           "Destination type: email, slack, generic, microsoft-teams (required)",
                           DESTINATIONS, required=True),
               bool_flag("enabled", "Enable notification configuration", default=True),
               text_flag("url", "Webhook URL (required for slack, generic, microsoft-teams)"),
               text_flag("token", "Token for authentication (optional for generic)"),
               list_flag("triggers",
                         "Comma-separated list of trigger types (e.g., run:created,run:completed)"),
               list_flag("email-addresses",
                         "Comma-separated list of email addresses (for email type, TFE only)")],
        body=_create_body,
        success="Notification configuration '{name}' created",
    ),
    read_command(
        "notification read",
        "Show notification configuration details",
        "/notification-configurations/{id}",
        NOTIFICATION_FIELDS,
        flags=[id_flag("Notification configuration")],
    ),
    update_command(
        "notification update",
        "Update a notification configuration",
        "/notification-configurations/{id}",
        "notification-configurations",
        NOTIFICATION_FIELDS,
        flags=[id_flag("Notification configuration"),
               text_flag("name", "Notification configuration name"),
               tristate_flag("enabled", "Enable notification configuration"),
               text_flag("url", "Webhook URL"),
               text_flag("token", "Token for authentication"),
               list_flag("triggers", "Comma-separated list of trigger types"),
               list_flag("email-addresses", "Comma-separated list of email addresses (TFE only)")],
        attributes=NOTIFICATION_ATTRIBUTES,
        success="Notification configuration '{id}' updated",
    ),
    delete_command(
        "notification delete",
        "Delete a notification configuration",
        "/notification-configurations/{id}",
        "Notification configuration '{id}' deleted successfully",
        flags=[id_flag("Notification configuration")],
        confirm="Are you sure you want to delete notification configuration '{id}'? (yes/no): ",
    ),
    action_command(
        "notification verify",
        "Send a verification request to a notification destination",
        "/notification-configurations/{id}/actions/verify",
        "Verification sent for notification configuration '{id}'",
        flags=[id_flag("Notification configuration")],
        fields=NOTIFICATION_FIELDS,
    ),
]
