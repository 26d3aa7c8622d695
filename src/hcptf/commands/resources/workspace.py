"""Workspace commands, including resources, tags, locking, assessments and change requests."""

from __future__ import annotations

from typing import Any, Dict

from ...errors import ResourceNotFoundError
from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    bool_flag,
    choice_flag,
    delete_command,
    data_of,
    id_flag,
    list_command,
    list_flag,
    read_command,
    relation,
    resource,
    show_item,
    show_items,
    text_flag,
    tristate_flag,
    update_command,
)

WS_NAME = text_flag("name", "Workspace name", required=True)
WS_NAME_OR_ALIAS = text_flag("name", "Workspace name", required=True, aliases=["workspace"])
WS_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Terraform Version", "terraform-version"),
    ("Execution Mode", "execution-mode"),
    ("Auto Apply", "auto-apply"),
    ("Working Directory", "working-directory"),
    ("Locked", "locked"),
    ("Resource Count", "resource-count"),
    ("Project", "rel:project"),
    ("Created At", "created-at"),
    ("Updated At", "updated-at"),
]

#: Boolean workspace settings shared by create and update, flag -> attribute.
TRISTATE_SETTINGS = {
    "allow-destroy-plan": "Allow destroy plans",
    "assessments-enabled": "Enable health assessments",
    "auto-apply-run-trigger": "Auto-apply run triggers",
    "file-triggers-enabled": "Enable file triggers",
    "global-remote-state": "Enable global remote state",
    "project-remote-state": "Enable project remote state",
    "queue-all-runs": "Queue all runs",
    "speculative-enabled": "Enable speculative plans",
    "structured-run-output-enabled": "Enable structured run output",
    "inherits-project-auto-destroy": "Inherit project auto-destroy settings",
    "hyok-enabled": "Enable HYOK",
}

STRING_SETTINGS = (
    "description",
    "terraform-version",
    "execution-mode",
    "working-directory",
    "agent-pool-id",
    "auto-destroy-at",
    "auto-destroy-activity-duration",
)

VCS_SETTINGS = {
    "vcs-identifier": "identifier",
    "vcs-branch": "branch",
    "vcs-oauth-token-id": "oauth-token-id",
    "vcs-ingress-submodules": "ingress-submodules",
    "vcs-tags-regex": "tags-regex",
    "vcs-gha-installation-id": "github-app-installation-id",
}


def _settings_flags():
    flags = [
        text_flag("description", "Workspace description"),
        text_flag("terraform-version", "Terraform version"),
        choice_flag("execution-mode", "Execution mode: remote, local, or agent",
                    ["remote", "local", "agent"]),
        text_flag("working-directory", "Working directory"),
        text_flag("agent-pool-id", "Agent pool ID (required when execution-mode is agent)"),
    ]
    flags += [tristate_flag(name, help) for name, help in TRISTATE_SETTINGS.items()]
    flags += [
        text_flag("vcs-identifier", "VCS repository identifier (e.g. org/repo)"),
        text_flag("vcs-branch", "VCS repository branch"),
        text_flag("vcs-oauth-token-id", "VCS OAuth token ID"),
        tristate_flag("vcs-ingress-submodules", "Enable VCS ingress submodules"),
        text_flag("vcs-tags-regex", "VCS tags regex"),
        text_flag("vcs-gha-installation-id", "GitHub App installation ID"),
        list_flag("trigger-prefixes", "Comma-separated list of trigger prefixes"),
        list_flag("trigger-patterns", "Comma-separated list of trigger patterns"),
        text_flag("auto-destroy-at", "Auto-destroy time (RFC3339)"),
        text_flag("auto-destroy-activity-duration", "Auto-destroy activity duration (e.g. '24h')"),
    ]
    return flags


def _workspace_document(inv: Invocation, name: str) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {}
    if name:
        attrs["name"] = name
    for flag in STRING_SETTINGS:
        if inv.provided(flag):
            value = inv[flag]
            attrs[flag] = None if value == "none" else value
    for flag in TRISTATE_SETTINGS:
        if inv.provided(flag):
            attrs[flag] = inv[flag]
    for flag in ("trigger-prefixes", "trigger-patterns"):
        if inv.get(flag) is not None:
            attrs[flag] = inv[flag]
    if inv.provided("auto-apply"):
        attrs["auto-apply"] = inv["auto-apply"]
    vcs = {attr: inv[flag] for flag, attr in VCS_SETTINGS.items() if inv.provided(flag)}
    if vcs:
        attrs["vcs-repo"] = vcs
    if inv.get("remove_vcs"):
        attrs["vcs-repo"] = None

    relationships = {}
    if inv.provided("project-id"):
        relationships["project"] = relation("projects", inv["project-id"])
    return resource("workspaces", attrs, relationships)


def workspace_create(inv: Invocation) -> None:
    document = _workspace_document(inv, inv["name"])
    attrs = document["data"]["attributes"]
    for flag in ("source-name", "source-url", "migration-environment"):
        if inv.provided(flag):
            attrs[flag] = inv[flag]
    if inv.get("tags"):
        attrs["tag-names"] = inv["tags"]
    doc = inv.client.post(inv.path("/organizations/{organization}/workspaces"), json=document)
    inv.notice(f"Workspace '{inv['name']}' created successfully")
    show_item(inv, data_of(doc), WS_FIELDS)


def workspace_update(inv: Invocation) -> None:
    document = _workspace_document(inv, inv.get("new_name", ""))
    doc = inv.client.patch(inv.path("/organizations/{organization}/workspaces/{name}"), json=document)
    inv.notice(f"Workspace '{inv['name']}' updated successfully")
    show_item(inv, data_of(doc), WS_FIELDS)


def _lock_action(action: str, success: str):
    def handler(inv: Invocation) -> None:
        body = {"reason": inv["reason"]} if inv.provided("reason") else None
        inv.client.post(inv.path("/workspaces/{workspace_id}/actions/" + action), json=body)
        inv.message(success.format(name=inv["name"]))
    return handler


RESOURCE_COLUMNS = [
    ("ID", "id"),
    ("Address", "address"),
    ("Name", "name"),
    ("Provider", "provider"),
    ("Module", "module"),
    ("Created At", "created-at"),
]


def resource_read(inv: Invocation) -> None:
    doc = inv.client.get(inv.path("/workspaces/{workspace_id}/resources"), params={"page[size]": 100})
    for item in (doc or {}).get("data") or []:
        if item.get("id") == inv["id"]:
            show_item(inv, item, RESOURCE_COLUMNS)
            return
    raise ResourceNotFoundError(f"resource '{inv['id']}'")


def tag_list(inv: Invocation) -> None:
    doc = inv.client.get(inv.path("/workspaces/{workspace_id}/relationships/tags"))
    show_items(inv, list((doc or {}).get("data") or []), [("ID", "id"), ("Name", "name")],
               "No tags found")


def _tag_change(method: str, verb: str):
    def handler(inv: Invocation) -> None:
        tags = inv["tags"]
        body = {"data": [{"type": "tags", "attributes": {"name": t}} for t in tags]}
        inv.client.request(method, inv.path("/workspaces/{workspace_id}/relationships/tags"), json=body)
        inv.message(f"Successfully {verb} {len(tags)} tag(s)")
    return handler


def assessment_list(inv: Invocation) -> None:
    doc = inv.client.get(
        inv.path("/workspaces/{workspace_id}"),
        params={"assessment_meta": "true", "include": "current_assessment_result"},
    )
    results = [i for i in (doc or {}).get("included") or [] if i.get("type") == "assessment-results"]
    show_items(
        inv,
        results,
        [("ID", "id"), ("Drifted", "drifted"), ("Succeeded", "succeeded"),
         ("Error", "error-msg"), ("Created At", "created-at")],
        "No assessment results found",
    )


ASSESSMENT_FIELDS = [
    ("ID", "id"),
    ("Drifted", "drifted"),
    ("Succeeded", "succeeded"),
    ("Error", "error-msg"),
    ("Created At", "created-at"),
]


def assessment_read(inv: Invocation) -> None:
    item = data_of(inv.client.get(inv.path("/assessment-results/{id}")))
    show_item(inv, item, ASSESSMENT_FIELDS)
    if inv.get("summary_only") or not inv.get("show_drift", True) or inv.is_json:
        return
    drift = (item.get("attributes") or {}).get("resource-drift") or []
    if drift:
        inv.message("")
        inv.table(["Address", "Action"],
                  [[d.get("address"), ", ".join(d.get("actions") or [])] for d in drift])


def change_request_create(inv: Invocation) -> None:
    ws_id = inv.workspace_id()
    body = {
        "data": {
            "type": "bulk_actions",
            "attributes": {
                "action_type": "change_requests",
                "action_inputs": {"subject": inv["subject"], "message": inv["message"]},
                "target_ids": [ws_id],
            },
        }
    }
    doc = inv.client.post(inv.path("/organizations/{organization}/explorer/bulk-actions"), json=body)
    data = data_of(doc)
    inv.notice(f"Change request created successfully via bulk action '{data.get('id')}'")
    inv.record({
        "BulkActionID": data.get("id"),
        "Subject": inv["subject"],
        "Message": inv["message"],
        "WorkspaceID": ws_id,
        "WorkspaceName": inv["workspace"],
    })


CHANGE_REQUEST_FIELDS = [
    ("ID", "id"),
    ("Subject", "subject"),
    ("Message", "message"),
    ("Archived By", "archived-by"),
    ("Archived At", "archived-at"),
    ("Created At", "created-at"),
]


COMMANDS = [
    list_command(
        "workspace list",
        "List workspaces",
        "/organizations/{organization}/workspaces",
        [("ID", "id"), ("Name", "name"), ("Terraform Version", "terraform-version"),
         ("Execution Mode", "execution-mode"), ("Auto Apply", "auto-apply"), ("Locked", "locked")],
        flags=[ORG, text_flag("search", "Search workspace names by substring"),
               text_flag("tags", "Filter by tag names (comma-separated)"),
               text_flag("project-id", "Filter by project ID")],
        params={"search": "search[name]", "tags": "search[tags]", "project-id": "filter[project][id]"},
        examples=["hcptf workspace list -org=my-org", "hcptf my-org workspaces"],
    ),
    CommandSpec(
        name="workspace create",
        synopsis="Create a workspace",
        handler=workspace_create,
        flags=[ORG, WS_NAME, text_flag("project-id", "Project ID to assign the workspace to"),
               bool_flag("auto-apply", "Enable auto-apply")]
        + _settings_flags()
        + [text_flag("source-name", "Source name for workspace creation tracking"),
           text_flag("source-url", "Source URL for workspace creation tracking"),
           text_flag("migration-environment", "Legacy TFE environment for migration"),
           list_flag("tags", "Comma-separated list of tags")],
        examples=["hcptf workspace create -org=my-org -name=prod -execution-mode=remote"],
    ),
    read_command(
        "workspace read",
        "Show workspace details",
        "/organizations/{organization}/workspaces/{name}",
        WS_FIELDS,
        flags=[ORG, WS_NAME_OR_ALIAS,
               text_flag("include", "Comma-separated related resources to include (e.g. project,current_run)")],
        params={"include": "include"},
        examples=["hcptf workspace read -org=my-org -name=prod", "hcptf my-org prod"],
    ),
    CommandSpec(
        name="workspace update",
        synopsis="Update workspace settings",
        handler=workspace_update,
        flags=[ORG, WS_NAME, text_flag("new-name", "New workspace name"),
               text_flag("project-id", "Project ID to move the workspace into"),
               tristate_flag("auto-apply", "Enable auto-apply")]
        + _settings_flags()
        + [bool_flag("remove-vcs", "Remove VCS connection from workspace")],
    ),
    delete_command(
        "workspace delete",
        "Delete a workspace",
        "/organizations/{organization}/workspaces/{name}",
        "Workspace '{name}' deleted successfully",
        flags=[ORG, WS_NAME],
        confirm="Are you sure you want to delete workspace '{name}'? (yes/no): ",
    ),
    CommandSpec(
        name="workspace lock",
        synopsis="Lock a workspace",
        handler=_lock_action("lock", "Workspace '{name}' locked successfully"),
        flags=[ORG, WS_NAME, text_flag("reason", "Reason for locking the workspace")],
        output=False,
    ),
    CommandSpec(
        name="workspace unlock",
        synopsis="Unlock a workspace",
        handler=_lock_action("unlock", "Workspace '{name}' unlocked successfully"),
        flags=[ORG, WS_NAME],
        output=False,
    ),
    CommandSpec(
        name="workspace force-unlock",
        synopsis="Force unlock a workspace",
        handler=_lock_action("force-unlock", "Workspace '{name}' force-unlocked successfully"),
        flags=[ORG, WS_NAME],
        output=False,
    ),
    list_command(
        "workspace resource list",
        "List resources managed by a workspace",
        "/workspaces/{workspace_id}/resources",
        RESOURCE_COLUMNS,
        flags=[text_flag("workspace-id", "Workspace ID"),
               text_flag("organization", "Organization name", aliases=["org"]),
               text_flag("workspace", "Workspace name")],
        empty="No resources found",
    ),
    CommandSpec(
        name="workspace resource read",
        synopsis="Show a workspace resource",
        handler=resource_read,
        flags=[text_flag("workspace-id", "Workspace ID", required=True), id_flag("Resource")],
    ),
    CommandSpec(
        name="workspace tag list",
        synopsis="List workspace tags",
        handler=tag_list,
        flags=[text_flag("workspace-id", "Workspace ID"),
               text_flag("organization", "Organization name", aliases=["org"]),
               text_flag("workspace", "Workspace name")],
    ),
    CommandSpec(
        name="workspace tag add",
        synopsis="Add tags to a workspace",
        handler=_tag_change("POST", "added"),
        flags=[text_flag("workspace-id", "Workspace ID", required=True, aliases=["id"]),
               list_flag("tags", "Comma-separated list of tag names to add", required=True)],
        output=False,
    ),
    CommandSpec(
        name="workspace tag remove",
        synopsis="Remove tags from a workspace",
        handler=_tag_change("DELETE", "removed"),
        flags=[text_flag("workspace-id", "Workspace ID", required=True, aliases=["id"]),
               list_flag("tags", "Comma-separated list of tag names to remove", required=True)],
        output=False,
    ),
    CommandSpec(
        name="assessmentresult list",
        synopsis="List health assessment results for a workspace",
        handler=assessment_list,
        flags=[ORG, text_flag("name", "Workspace name", required=True, aliases=["workspace"])],
    ),
    CommandSpec(
        name="assessmentresult read",
        synopsis="Show a health assessment result",
        handler=assessment_read,
        flags=[id_flag("Assessment result"),
               bool_flag("show-drift", "Show detailed drift information", default=True),
               bool_flag("summary-only", "Show only summary without drift details")],
    ),
    list_command(
        "changerequest list",
        "List change requests for a workspace",
        "/workspaces/{workspace_id}/change-requests",
        [("ID", "id"), ("Subject", "subject"), ("Archived At", "archived-at"),
         ("Created At", "created-at")],
        flags=[ORG, text_flag("workspace", "Workspace name", required=True)],
        empty="No change requests found",
    ),
    CommandSpec(
        name="changerequest create",
        synopsis="Create a change request for a workspace",
        handler=change_request_create,
        flags=[ORG, text_flag("workspace", "Workspace name", required=True),
               text_flag("subject", "Change request subject", required=True),
               text_flag("message", "Change request message", required=True)],
    ),
    read_command(
        "changerequest read",
        "Show a change request",
        "/change-requests/{id}",
        CHANGE_REQUEST_FIELDS,
        flags=[id_flag("Change request")],
    ),
    update_command(
        "changerequest update",
        "Archive a change request",
        "/change-requests/{id}",
        "change-requests",
        CHANGE_REQUEST_FIELDS,
        flags=[id_flag("Change request"), bool_flag("archive", "Archive the change request")],
        body=lambda inv: resource("change-requests", {"archived": bool(inv.get("archive"))}),
        success="Change request '{id}' updated successfully",
    ),
]
