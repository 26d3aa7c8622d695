"""Organization-wide search: the explorer API and run/workspace queries."""

from __future__ import annotations

from urllib.parse import urlencode

from ...errors import InvalidValueError
from ..base import CommandSpec, Invocation
from ..helpers import ORG, bool_flag, choice_flag, int_flag, pluck, query, text_flag

EXPLORER_TYPES = ["workspaces", "tf_versions", "providers", "modules"]
MESSAGE_WIDTH = 50


def explorer_query(inv: Invocation) -> None:
    params = {"type": inv["type"]}
    params.update(query(inv, {"sort": "sort", "filter": "filter", "fields": "fields"}))
    page_size = inv.get("limit") or inv.get("page-size")
    if page_size is not None and page_size < 1:
        raise InvalidValueError("page-size", str(page_size), "a positive number")

    if inv["csv"]:
        path = inv.path("/organizations/{organization}/explorer/export/csv")
        inv.formatter.out.write(inv.client.text(f"{path}?{urlencode(params)}"))
        return

    params["page[number]"] = inv.get("page", 1)
    params["page[size]"] = page_size
    doc = inv.client.get(inv.path("/organizations/{organization}/explorer"), params=params) or {}
    if inv.is_json:
        inv.formatter.json(doc)
        return
    items = [item for item in doc.get("data") or [] if isinstance(item.get("attributes"), dict)]
    if not items:
        inv.message(f"No {inv['type']} found")
        return
    if inv.provided("fields"):
        headers = [f.strip() for f in inv["fields"].split(",") if f.strip()]
    else:
        headers = list(items[0]["attributes"])
    inv.message(f"Showing {len(items)} of {inv['type']} (page {params['page[number]']})\n")
    inv.table(headers, [[item["attributes"].get(h) for h in headers] for item in items])


def _shorten(message):
    if message and len(message) > MESSAGE_WIDTH:
        return message[: MESSAGE_WIDTH - 3] + "..."
    return message


def _included(doc, type_):
    return {i["id"]: i for i in doc.get("included") or [] if i.get("type") == type_}


def queryrun_list(inv: Invocation) -> None:
    params = query(inv, {
        "status": "filter[status]",
        "operation": "filter[operation]",
        "source": "filter[source]",
        "workspace": "filter[workspace_names]",
        "agent-pool": "filter[agent_pool_names]",
        "status-group": "filter[status_group]",
        "search-user": "search[user]",
        "search-commit": "search[commit]",
        "search-basic": "search[basic]",
    })
    params["include"] = "workspace"
    params["page[size]"] = 100
    doc = inv.client.get(inv.path("/organizations/{organization}/runs"), params=params) or {}
    runs = list(doc.get("data") or [])
    if inv.is_json:
        inv.formatter.json(runs)
        return
    if not runs:
        inv.message("No runs found")
        return
    workspaces = _included(doc, "workspaces")
    rows = []
    for run in runs:
        ws = workspaces.get(pluck(run, "rel:workspace"))
        rows.append([
            run.get("id"),
            pluck(ws, "name") if ws else None,
            pluck(run, "status"),
            pluck(run, "source"),
            _shorten(pluck(run, "message")),
            pluck(run, "created-at"),
        ])
    inv.table(["ID", "Workspace", "Status", "Source", "Message", "Created At"], rows)


def queryworkspace_list(inv: Invocation) -> None:
    params = query(inv, {
        "search": "search[name]",
        "tags": "search[tags]",
        "exclude-tags": "search[exclude-tags]",
        "wildcard": "search[wildcard-name]",
    })
    params["include"] = "current_run"
    params["page[size]"] = 100
    doc = inv.client.get(inv.path("/organizations/{organization}/workspaces"), params=params) or {}
    workspaces = list(doc.get("data") or [])
    if inv.is_json:
        inv.formatter.json(workspaces)
        return
    if not workspaces:
        inv.message("No workspaces found")
        return
    runs = _included(doc, "runs")
    rows = []
    for ws in workspaces:
        run = runs.get(pluck(ws, "rel:current-run"))
        rows.append([
            ws.get("id"),
            pluck(ws, "name"),
            pluck(ws, "terraform-version"),
            pluck(run, "status") if run else "None",
            pluck(ws, "auto-apply"),
            pluck(ws, "locked"),
        ])
    inv.table(["ID", "Name", "Terraform Version", "Current Run", "Auto Apply", "Locked"], rows)
    inv.message(f"\nTotal: {len(workspaces)} workspace(s)")


COMMANDS = [
    CommandSpec(
        name="explorer query",
        synopsis="Query workspaces, providers, modules and Terraform versions across an organization",
        handler=explorer_query,
        flags=[
            ORG,
            choice_flag("type", "Query type: workspaces, tf_versions, providers, modules (required)",
                        EXPLORER_TYPES, required=True),
            text_flag("sort", "Sort field (prefix with - for descending)"),
            text_flag("filter", "Filter conditions"),
            text_flag("fields", "Comma-separated fields to return"),
            int_flag("limit", "Maximum number of results to return (overrides page-size)"),
            int_flag("page", "Page number", default=1),
            int_flag("page-size", "Page size", default=20),
            bool_flag("csv", "Export as CSV instead of paginated JSON"),
        ],
        examples=[
            "hcptf explorer query -org=my-org -type=workspaces",
            "hcptf explorer query -org=my-org -type=workspaces -sort=-created_at",
            "hcptf explorer query -org=my-org -type=providers -fields=name,version,source",
            "hcptf explorer query -org=my-org -type=workspaces -csv > workspaces.csv",
        ],
    ),
    CommandSpec(
        name="queryrun list",
        synopsis="Search runs across organization",
        handler=queryrun_list,
        flags=[
            ORG,
            text_flag("status", "Filter by run status (comma-separated)"),
            text_flag("operation", "Filter by operation type (comma-separated)"),
            text_flag("source", "Filter by run source (comma-separated)"),
            text_flag("workspace", "Filter by workspace name (comma-separated)"),
            text_flag("agent-pool", "Filter by agent pool name (comma-separated)"),
            text_flag("status-group", "Filter by status group (final, non_final, discardable)"),
            text_flag("search-user", "Search by VCS username"),
            text_flag("search-commit", "Search by commit SHA"),
            text_flag("search-basic", "Basic search (username, commit, run ID, or message)"),
        ],
        examples=["hcptf queryrun list -org=my-org -status=errored,canceled"],
    ),
    CommandSpec(
        name="queryworkspace list",
        synopsis="Search workspaces across organization",
        handler=queryworkspace_list,
        flags=[
            ORG,
            text_flag("search", "Search query for workspace name"),
            text_flag("tags", "Filter by tags (comma-separated)"),
            text_flag("exclude-tags", "Exclude workspaces with tags (comma-separated)"),
            text_flag("wildcard", "Wildcard filter for workspace name"),
        ],
        examples=["hcptf queryworkspace list -org=my-org -tags=env:prod,team:platform"],
    ),
]
