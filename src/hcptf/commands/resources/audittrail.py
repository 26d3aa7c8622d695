"""Audit trail events and audit trail tokens."""

from __future__ import annotations

from typing import Any, Dict, List

from ...errors import ResourceNotFoundError
from ..base import CommandSpec, Invocation
from ..helpers import ORG, data_of, date_flag, id_flag, int_flag, show_item, show_items

EVENT_COLUMNS = [
    ("ID", "id"),
    ("Timestamp", "timestamp"),
    ("Type", "type"),
    ("Action", "action"),
    ("Actor", "auth.description"),
    ("Resource", "resource.type"),
    ("Resource ID", "resource.id"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Created At", "created-at"),
    ("Last Used At", "last-used-at"),
    ("Expired At", "expired-at"),
]
TOKEN_PATH = "/organizations/{organization}/authentication-token"
TOKEN_QUERY = {"token": "audit-trails"}


def _event(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Audit events are flat JSON, not JSON:API; wrap them so the field readers apply."""
    return {"id": entry.get("id"), "type": "audit-trails", "attributes": entry}


def _events(inv: Invocation, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    doc = inv.client.get("/organization/audit-trail", params=params)
    return [_event(e) for e in (doc or {}).get("data") or []]


def audittrail_list(inv: Invocation) -> None:
    params: Dict[str, Any] = {
        "page[number]": inv.get("page-number", 1),
        "page[size]": inv.get("page-size", 100),
    }
    if inv.provided("since"):
        params["since"] = inv["since"]
    show_items(inv, _events(inv, params), EVENT_COLUMNS, "No audit trail events found")


def audittrail_read(inv: Invocation) -> None:
    page = 1
    while True:
        events = _events(inv, {"page[number]": page, "page[size]": 1000})
        for event in events:
            if event["id"] == inv["id"]:
                show_item(inv, event, EVENT_COLUMNS)
                return
        if len(events) < 1000:
            raise ResourceNotFoundError(f"audit trail event '{inv['id']}'")
        page += 1


def token_list(inv: Invocation) -> None:
    doc = inv.client.get(inv.path(TOKEN_PATH), params=TOKEN_QUERY)
    item = data_of(doc)
    show_items(inv, [item] if item else [], TOKEN_FIELDS, "No audit trail token found")


def token_read(inv: Invocation) -> None:
    show_item(inv, data_of(inv.client.get(inv.path(TOKEN_PATH), params=TOKEN_QUERY)), TOKEN_FIELDS)


def token_create(inv: Invocation) -> None:
    attrs = {}
    if inv.provided("expired-at"):
        attrs["expired-at"] = inv["expired-at"]
    doc = inv.client.post(
        inv.path(TOKEN_PATH),
        params=TOKEN_QUERY,
        json={"data": {"type": "authentication-token", "attributes": attrs}},
    )
    inv.notice("Audit trail token created. Store it securely, it is only shown once.")
    show_item(inv, data_of(doc), TOKEN_FIELDS + [("Token", "token")])


def token_delete(inv: Invocation) -> None:
    inv.client.request("DELETE", inv.path(TOKEN_PATH), params=TOKEN_QUERY)
    inv.message(f"Audit trail token for organization '{inv['organization']}' deleted successfully")


COMMANDS = [
    CommandSpec(
        name="audittrail list",
        synopsis="List audit trail events",
        handler=audittrail_list,
        flags=[date_flag("since", "Return audit events since this date (ISO8601 format)"),
               int_flag("page-number", "Page number", default=1),
               int_flag("page-size", "Number of items per page (max 1000)", default=100)],
        description=(
            "List audit trail events. Requires an organization audit trail token "
            "(see 'hcptf audittrail token create')."
        ),
    ),
    CommandSpec(
        name="audittrail read",
        synopsis="Show an audit trail event",
        handler=audittrail_read,
        flags=[id_flag("Audit trail event")],
    ),
    CommandSpec(
        name="audittrail token list",
        synopsis="List the audit trail token of an organization",
        handler=token_list,
        flags=[ORG],
    ),
    CommandSpec(
        name="audittrail token create",
        synopsis="Create an audit trail token",
        handler=token_create,
        flags=[ORG, date_flag("expired-at", "Token expiration date (ISO8601 format)")],
    ),
    CommandSpec(
        name="audittrail token read",
        synopsis="Show the audit trail token of an organization",
        handler=token_read,
        flags=[ORG],
    ),
    CommandSpec(
        name="audittrail token delete",
        synopsis="Delete the audit trail token of an organization",
        handler=token_delete,
        flags=[ORG],
        output=False,
        confirm="Are you sure you want to delete the audit trail token for '{organization}'? (yes/no): ",
    ),
]
