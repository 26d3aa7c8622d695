"""Workspace variables and variable sets."""

from __future__ import annotations

from typing import Any, Dict, List

from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    WORKSPACE,
    bool_flag,
    choice_flag,
    create_command,
    delete_command,
    id_flag,
    identifiers,
    list_command,
    list_flag,
    read_command,
    relation_list,
    resource,
    text_flag,
    tristate_flag,
    update_command,
)

CATEGORIES = ["terraform", "env"]

VAR_COLUMNS = [
    ("ID", "id"),
    ("Key", "key"),
    ("Value", "value"),
    ("Category", "category"),
    ("Sensitive", "sensitive"),
    ("HCL", "hcl"),
]
VAR_FIELDS = VAR_COLUMNS + [("Description", "description")]
VARSET_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Global", "global"),
    ("Priority", "priority"),
    ("Workspace Count", "workspace-count"),
    ("Project Count", "project-count"),
    ("Var Count", "var-count"),
]
VARSET_COLUMNS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Global", "global"),
    ("Priority", "priority"),
    ("Workspaces", "workspace-count"),
    ("Projects", "project-count"),
]

#: Relationship scopes a variable set can be applied to, flag -> resource type.
SCOPES = {"workspaces": "workspaces", "projects": "projects", "stacks": "stacks"}


def _var_flags(required: bool):
    if required:
        return [
            text_flag("key", "Variable key", required=True),
            text_flag("value", "Variable value", required=True),
            choice_flag("category", "Variable category: terraform or env", CATEGORIES, default="terraform"),
            bool_flag("sensitive", "Mark variable as sensitive"),
            bool_flag("hcl", "Parse value as HCL"),
            text_flag("description", "Variable description"),
        ]
    return [
        text_flag("key", "Variable key"),
        text_flag("value", "Variable value"),
        tristate_flag("sensitive", "Mark variable as sensitive"),
        tristate_flag("hcl", "Parse value as HCL"),
        text_flag("description", "Variable description"),
    ]


VAR_ATTRIBUTES = {
    "key": "key",
    "value": "value",
    "category": "category",
    "sensitive": "sensitive",
    "hcl": "hcl",
    "description": "description",
}


def _scope_changes(method: str, verb: str):
    """Attach or detach a variable set to workspaces, projects and stacks."""

    def handler(inv: Invocation) -> None:
        changed: List[str] = []
        for flag, type_ in SCOPES.items():
            ids = inv.get(flag) or []
            if not ids:
                continue
            inv.client.request(
                method,
                inv.path("/varsets/{id}/relationships/" + flag),
                json=identifiers(type_, ids),
            )
            changed.append(f"{len(ids)} {flag}")
        if not changed:
            inv.require_one(*SCOPES)
        inv.message(f"Variable set '{inv['id']}' {verb} {', '.join(changed)}")

    return handler


def _replace_scope(flag: str):
    def body(inv: Invocation) -> Dict[str, Any]:
        return resource("varsets", {}, {flag: relation_list(flag, inv.get(flag) or [])}, id=inv["id"])
    return body


COMMANDS = [
    list_command(
        "variable list",
        "List workspace variables",
        "/workspaces/{workspace_id}/vars",
        VAR_COLUMNS,
        flags=[ORG, WORKSPACE],
        empty="No variables found",
        page_size=None,
    ),
    create_command(
        "variable create",
        "Create a workspace variable",
        "/workspaces/{workspace_id}/vars",
        "vars",
        VAR_FIELDS,
        flags=[ORG, WORKSPACE] + _var_flags(True),
        attributes=VAR_ATTRIBUTES,
        success="Variable '{key}' created",
        examples=["hcptf variable create -org=my-org -workspace=prod -key=region -value=us-east-1"],
    ),
    update_command(
        "variable update",
        "Update a workspace variable",
        "/workspaces/{workspace_id}/vars/{id}",
        "vars",
        VAR_FIELDS,
        flags=[ORG, WORKSPACE, id_flag("Variable")] + _var_flags(False),
        attributes=VAR_ATTRIBUTES,
        success="Variable '{id}' updated",
    ),
    delete_command(
        "variable delete",
        "Delete a workspace variable",
        "/workspaces/{workspace_id}/vars/{id}",
        "Variable '{id}' deleted successfully",
        flags=[ORG, WORKSPACE, id_flag("Variable")],
        confirm="Are you sure you want to delete variable '{id}'? (yes/no): ",
    ),
    list_command(
        "variableset list",
        "List variable sets",
        "/organizations/{organization}/varsets",
        VARSET_COLUMNS,
        flags=[ORG, text_flag("query", "Filter variable sets by name query")],
        params={"query": "q"},
        empty="No variable sets found",
    ),
    create_command(
        "variableset create",
        "Create a variable set",
        "/organizations/{organization}/varsets",
        "varsets",
        VARSET_FIELDS,
        flags=[ORG, text_flag("name", "Variable set name", required=True),
               text_flag("description", "Variable set description"),
               bool_flag("global", "Apply to all workspaces in the organization"),
               bool_flag("priority", "Variable set values override more specific scopes")],
        attributes={"name": "name", "description": "description", "global": "global",
                    "priority": "priority"},
        success="Variable set '{name}' created",
    ),
    read_command(
        "variableset read",
        "Show variable set details",
        "/varsets/{id}",
        VARSET_FIELDS,
        flags=[id_flag("Variable set")],
    ),
    update_command(
        "variableset update",
        "Update a variable set",
        "/varsets/{id}",
        "varsets",
        VARSET_FIELDS,
        flags=[id_flag("Variable set"), text_flag("name", "Variable set name"),
               text_flag("description", "Variable set description"),
               tristate_flag("global", "Apply to all workspaces"),
               tristate_flag("priority", "Variable set priority override")],
        attributes={"name": "name", "description": "description", "global": "global",
                    "priority": "priority"},
        success="Variable set '{id}' updated",
    ),
    delete_command(
        "variableset delete",
        "Delete a variable set",
        "/varsets/{id}",
        "Variable set '{id}' deleted successfully",
        flags=[id_flag("Variable set")],
        confirm="Are you sure you want to delete variable set '{id}'? (yes/no): ",
    ),
    CommandSpec(
        name="variableset apply",
        synopsis="Apply a variable set to workspaces, projects or stacks",
        handler=_scope_changes("POST", "applied to"),
        flags=[id_flag("Variable set"),
               list_flag("workspaces", "Comma-separated list of workspace IDs to apply to"),
               list_flag("projects", "Comma-separated list of project IDs to apply to"),
               list_flag("stacks", "Comma-separated list of stack IDs to apply to")],
        output=False,
        examples=["hcptf variableset apply -id=varset-123 -workspaces=ws-1,ws-2"],
    ),
    CommandSpec(
        name="variableset remove",
        synopsis="Remove a variable set from workspaces, projects or stacks",
        handler=_scope_changes("DELETE", "removed from"),
        flags=[id_flag("Variable set"),
               list_flag("workspaces", "Comma-separated workspace IDs to remove"),
               list_flag("projects", "Comma-separated project IDs to remove"),
               list_flag("stacks", "Comma-separated stack IDs to remove")],
        output=False,
    ),
    update_command(
        "variableset update-workspaces",
        "Replace the workspaces a variable set applies to",
        "/varsets/{id}",
        "varsets",
        VARSET_FIELDS,
        flags=[id_flag("Variable set"),
               list_flag("workspaces", "Comma-separated workspace IDs (empty clears all)")],
        body=_replace_scope("workspaces"),
        success="Variable set '{id}' workspaces updated",
    ),
    update_command(
        "variableset update-stacks",
        "Replace the stacks a variable set applies to",
        "/varsets/{id}",
        "varsets",
        VARSET_FIELDS,
        flags=[id_flag("Variable set"),
               list_flag("stacks", "Comma-separated stack IDs (empty clears all)")],
        body=_replace_scope("stacks"),
        success="Variable set '{id}' stacks updated",
    ),
    list_command(
        "variableset list-workspace",
        "List variable sets applied to a workspace",
        "/workspaces/{workspace_id}/varsets",
        VARSET_COLUMNS,
        flags=[text_flag("workspace-id", "Workspace ID", required=True),
               text_flag("query", "Filter variable sets by name query"),
               text_flag("include", "Include related resources (comma-separated)")],
        params={"query": "q", "include": "include"},
        empty="No variable sets found",
    ),
    list_command(
        "variableset list-project",
        "List variable sets applied to a project",
        "/projects/{project_id}/varsets",
        VARSET_COLUMNS,
        flags=[text_flag("project-id", "Project ID", required=True),
               text_flag("query", "Filter variable sets by name query"),
               text_flag("include", "Include related resources (comma-separated)")],
        params={"query": "q", "include": "include"},
        empty="No variable sets found",
    ),
    list_command(
        "variableset variable list",
        "List variables in a variable set",
        "/varsets/{variableset_id}/relationships/vars",
        VAR_COLUMNS,
        flags=[text_flag("variableset-id", "Variable set ID", required=True)],
        empty="No variables found",
        page_size=None,
    ),
    create_command(
        "variableset variable create",
        "Add a variable to a variable set",
        "/varsets/{variableset_id}/relationships/vars",
        "vars",
        VAR_FIELDS,
        flags=[text_flag("variableset-id", "Variable set ID", required=True)] + _var_flags(True),
        attributes=VAR_ATTRIBUTES,
        success="Variable '{key}' added to variable set '{variableset_id}'",
    ),
    update_command(
        "variableset variable update",
        "Update a variable in a variable set",
        "/varsets/{variableset_id}/relationships/vars/{variable_id}",
        "vars",
        VAR_FIELDS,
        flags=[text_flag("variableset-id", "Variable set ID", required=True),
               text_flag("variable-id", "Variable ID", required=True)] + _var_flags(False),
        attributes=VAR_ATTRIBUTES,
        success="Variable '{variable_id}' updated",
    ),
    delete_command(
        "variableset variable delete",
        "Delete a variable from a variable set",
        "/varsets/{variableset_id}/relationships/vars/{variable_id}",
        "Variable '{variable_id}' deleted successfully",
        flags=[text_flag("variableset-id", "Variable set ID", required=True),
               text_flag("variable-id", "Variable ID", required=True)],
        confirm="Are you sure you want to delete variable '{variable_id}'? (yes/no): ",
    ),
]
