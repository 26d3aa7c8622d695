"""Policy commands: policies, policy sets (parameters, outcomes, scope), checks and evaluations."""

from __future__ import annotations

import os
from pathlib import Path

from ...errors import InvalidValueError
from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    action_command,
    bool_flag,
    choice_flag,
    collect,
    create_command,
    data_of,
    delete_command,
    id_flag,
    identifiers,
    list_command,
    list_flag,
    read_command,
    resource,
    show_item,
    text_flag,
    tristate_flag,
    update_command,
)

ENFORCEMENT_LEVELS = ["advisory", "soft-mandatory", "hard-mandatory", "mandatory"]

POLICY_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Kind", "kind"),
    ("Enforcement Level", "enforcement-level"),
    ("Policy Sets", "policy-set-count"),
    ("Updated At", "updated-at"),
]
POLICYSET_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Kind", "kind"),
    ("Global", "global"),
    ("Overridable", "overridable"),
    ("Agent Enabled", "agent-enabled"),
    ("Policy Count", "policy-count"),
    ("Workspace Count", "workspace-count"),
    ("Project Count", "project-count"),
]
PARAMETER_COLUMNS = [
    ("ID", "id"),
    ("Key", "key"),
    ("Value", "value"),
    ("Sensitive", "sensitive"),
]
CHECK_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Scope", "scope"),
    ("Passed", "result.passed"),
    ("Total Failed", "result.total-failed"),
    ("Hard Failed", "result.hard-failed"),
    ("Soft Failed", "result.soft-failed"),
    ("Advisory Failed", "result.advisory-failed"),
]
OUTCOME_FIELDS = [
    ("ID", "id"),
    ("Policy Set", "policy-set-name"),
    ("Overridable", "overridable"),
    ("Error", "error"),
    ("Passed", "result-count.passed"),
    ("Advisory Failed", "result-count.advisory-failed"),
    ("Mandatory Failed", "result-count.mandatory-failed"),
    ("Errored", "result-count.errored"),
]


def _read_policy_file(inv: Invocation) -> bytes:
    path = Path(os.path.expanduser(inv["policy-file"]))
    if not path.is_file():
        raise InvalidValueError("policy-file", str(path), "an existing file")
    return path.read_bytes()


def policy_create(inv: Invocation) -> None:
    code = _read_policy_file(inv)
    attrs = {
        "name": inv["name"],
        "kind": inv["kind"],
        "enforcement-level": inv["enforce"],
    }
    if inv.provided("description"):
        attrs["description"] = inv["description"]
    if inv["kind"] == "opa" and inv.provided("query"):
        attrs["query"] = inv["query"]
    doc = inv.client.post(inv.path("/organizations/{organization}/policies"), json=resource("policies", attrs))
    item = data_of(doc)
    inv.client.upload(f"/policies/{item['id']}/upload", code)
    inv.notice(f"Policy '{inv['name']}' created successfully")
    show_item(inv, item, POLICY_FIELDS)


def policy_update(inv: Invocation) -> None:
    inv.require_one("description", "enforce", "policy-file")
    attrs = collect(inv, {"description": "description", "enforce": "enforcement-level"})
    if attrs:
        item = data_of(inv.client.patch(inv.path("/policies/{id}"), json=resource("policies", attrs)))
    if inv.provided("policy-file"):
        inv.client.upload(inv.path("/policies/{id}/upload"), _read_policy_file(inv))
    if not attrs:
        item = data_of(inv.client.get(inv.path("/policies/{id}")))
    inv.notice(f"Policy '{inv['id']}' updated successfully")
    show_item(inv, item, POLICY_FIELDS)


def _relationship_change(name: str, method: str, relationship: str, type_: str, ids_flag: str,
                         synopsis: str, verb: str, id_name: str = "id"):
    ids_help = "Comma-separated " + ids_flag.replace("-ids", "") + " IDs"
    path = "/policy-sets/{" + id_name.replace("-", "_") + "}/relationships/" + relationship
    return action_command(
        name,
        synopsis,
        path,
        "Policy set '{" + id_name.replace("-", "_") + "}' " + verb,
        flags=[text_flag(id_name, "Policy set ID", required=True),
               list_flag(ids_flag, ids_help, required=True)],
        body=lambda inv: identifiers(type_, inv[ids_flag]),
        method=method,
    )


COMMANDS = [
    list_command(
        "policy list",
        "List policies",
        "/organizations/{organization}/policies",
        [("ID", "id"), ("Name", "name"), ("Kind", "kind"),
         ("Enforcement Level", "enforcement-level"), ("Policy Sets", "policy-set-count")],
        flags=[ORG, text_flag("search", "Search policy names by substring"),
               choice_flag("kind", "Filter by policy kind: sentinel or opa", ["sentinel", "opa"])],
        params={"search": "search[name]", "kind": "filter[kind]"},
        empty="No policies found",
    ),
    CommandSpec(
        name="policy create",
        synopsis="Create a policy",
        handler=policy_create,
        flags=[ORG,
               text_flag("name", "Policy name", required=True),
               text_flag("description", "Policy description"),
               choice_flag("kind", "Policy kind: sentinel or opa", ["sentinel", "opa"], default="sentinel"),
               text_flag("query", "OPA query (opa policies only)"),
               choice_flag("enforce", "Enforcement level: advisory, soft-mandatory, or hard-mandatory",
                           ENFORCEMENT_LEVELS, default="advisory"),
               text_flag("policy-file", "Path to policy file", required=True, metavar="file")],
        examples=["hcptf policy create -org=my-org -name=cost-limit -policy-file=./cost.sentinel"],
    ),
    read_command(
        "policy read",
        "Show policy details",
        "/policies/{id}",
        POLICY_FIELDS,
        flags=[id_flag("Policy")],
    ),
    CommandSpec(
        name="policy update",
        synopsis="Update a policy",
        handler=policy_update,
        flags=[id_flag("Policy"),
               text_flag("description", "Policy description"),
               choice_flag("enforce", "Enforcement level: advisory, soft-mandatory, or hard-mandatory",
                           ENFORCEMENT_LEVELS),
               text_flag("policy-file", "Path to policy file", metavar="file")],
    ),
    delete_command(
        "policy delete",
        "Delete a policy",
        "/policies/{id}",
        "Policy '{id}' deleted successfully",
        flags=[id_flag("Policy")],
        confirm="Are you sure you want to delete policy '{id}'? (yes/no): ",
    ),
    list_command(
        "policyset list",
        "List policy sets",
        "/organizations/{organization}/policy-sets",
        [("ID", "id"), ("Name", "name"), ("Kind", "kind"), ("Global", "global"),
         ("Policies", "policy-count"), ("Workspaces", "workspace-count")],
        flags=[ORG,
               text_flag("search", "Search policy set names by substring"),
               choice_flag("kind", "Filter by policy set kind: sentinel or opa", ["sentinel", "opa"]),
               text_flag("include", "Include related resources (comma-separated)")],
        params={"search": "search[name]", "kind": "filter[kind]", "include": "include"},
        empty="No policy sets found",
    ),
    create_command(
        "policyset create",
        "Create a policy set",
        "/organizations/{organization}/policy-sets",
        "policy-sets",
        POLICYSET_FIELDS,
        flags=[ORG,
               text_flag("name", "Policy set name", required=True),
               text_flag("description", "Policy set description"),
               choice_flag("kind", "Policy set kind: sentinel or opa", ["sentinel", "opa"], default="sentinel"),
               bool_flag("global", "Apply to all workspaces"),
               tristate_flag("overridable", "Allow failed policy overrides (opa only)")],
        attributes={"name": "name", "description": "description", "kind": "kind",
                    "global": "global", "overridable": "overridable"},
        success="Policy set '{name}' created",
    ),
    read_command(
        "policyset read",
        "Show policy set details",
        "/policy-sets/{id}",
        POLICYSET_FIELDS,
        flags=[id_flag("Policy set"), text_flag("include", "Include related resources (comma-separated)")],
        params={"include": "include"},
    ),
    update_command(
        "policyset update",
        "Update a policy set",
        "/policy-sets/{id}",
        "policy-sets",
        POLICYSET_FIELDS,
        flags=[id_flag("Policy set"),
               text_flag("name", "Policy set name"),
               text_flag("description", "Policy set description"),
               tristate_flag("global", "Apply to all workspaces"),
               tristate_flag("overridable", "Allow failed policy overrides"),
               tristate_flag("agent-enabled", "Run policy evaluations in an agent"),
               text_flag("policy-tool-version", "Policy tool version"),
               text_flag("policies-path", "Subdirectory path for policy files in VCS")],
        attributes={"name": "name", "description": "description", "global": "global",
                    "overridable": "overridable", "agent-enabled": "agent-enabled",
                    "policy-tool-version": "policy-tool-version",
                    "policies-path": "policies-path"},
        success="Policy set '{id}' updated",
    ),
    delete_command(
        "policyset delete",
        "Delete a policy set",
        "/policy-sets/{id}",
        "Policy set '{id}' deleted successfully",
        flags=[id_flag("Policy set")],
        confirm="Are you sure you want to delete policy set '{id}'? (yes/no): ",
    ),
    _relationship_change("policyset add-policy", "POST", "policies", "policies", "policy-ids",
                         "Add policies to a policy set", "updated"),
    _relationship_change("policyset remove-policy", "DELETE", "policies", "policies", "policy-ids",
                         "Remove policies from a policy set", "updated"),
    _relationship_change("policyset add-workspace", "POST", "workspaces", "workspaces", "workspace-ids",
                         "Attach a policy set to workspaces", "updated", id_name="policyset-id"),
    _relationship_change("policyset remove-workspace", "DELETE", "workspaces", "workspaces",
                         "workspace-ids", "Detach a policy set from workspaces", "updated",
                         id_name="policyset-id"),
    _relationship_change("policyset add-workspace-exclusion", "POST", "workspace-exclusions",
                         "workspaces", "workspace-ids", "Exclude workspaces from a policy set",
                         "updated", id_name="policyset-id"),
    _relationship_change("policyset remove-workspace-exclusion", "DELETE", "workspace-exclusions",
                         "workspaces", "workspace-ids", "Remove workspace exclusions from a policy set",
                         "updated", id_name="policyset-id"),
    _relationship_change("policyset add-project", "POST", "projects", "projects", "project-ids",
                         "Attach a policy set to projects", "updated", id_name="policyset-id"),
    _relationship_change("policyset remove-project", "DELETE", "projects", "projects", "project-ids",
                         "Detach a policy set from projects", "updated", id_name="policyset-id"),
    list_command(
        "policyset parameter list",
        "List policy set parameters",
        "/policy-sets/{policy_set_id}/parameters",
        PARAMETER_COLUMNS,
        flags=[text_flag("policy-set-id", "Policy Set ID", required=True)],
        empty="No parameters found",
    ),
    create_command(
        "policyset parameter create",
        "Create a policy set parameter",
        "/policy-sets/{policy_set_id}/parameters",
        "vars",
        PARAMETER_COLUMNS,
        flags=[text_flag("policy-set-id", "Policy Set ID", required=True),
               text_flag("key", "Parameter key", required=True),
               text_flag("value", "Parameter value", required=True),
               bool_flag("sensitive", "Mark parameter as sensitive")],
        body=lambda inv: resource("vars", {
            "key": inv["key"],
            "value": inv["value"],
            "category": "policy-set",
            "sensitive": bool(inv.get("sensitive")),
        }),
        success="Parameter '{key}' created",
    ),
    update_command(
        "policyset parameter update",
        "Update a policy set parameter",
        "/policy-sets/{policy_set_id}/parameters/{id}",
        "vars",
        PARAMETER_COLUMNS,
        flags=[text_flag("policy-set-id", "Policy Set ID", required=True),
               id_flag("Parameter"),
               text_flag("key", "Parameter key"),
               text_flag("value", "Parameter value"),
               tristate_flag("sensitive", "Mark parameter as sensitive")],
        attributes={"key": "key", "value": "value", "sensitive": "sensitive"},
        success="Parameter '{id}' updated",
    ),
    delete_command(
        "policyset parameter delete",
        "Delete a policy set parameter",
        "/policy-sets/{policy_set_id}/parameters/{id}",
        "Parameter '{id}' deleted successfully",
        flags=[text_flag("policy-set-id", "Policy Set ID", required=True), id_flag("Parameter")],
        confirm="Are you sure you want to delete parameter '{id}'? (yes/no): ",
    ),
    list_command(
        "policyset outcome list",
        "List policy set outcomes for a policy evaluation",
        "/policy-evaluations/{policy_evaluation_id}/policy-set-outcomes",
        [("ID", "id"), ("Policy Set", "policy-set-name"), ("Overridable", "overridable"),
         ("Passed", "result-count.passed"), ("Mandatory Failed", "result-count.mandatory-failed")],
        flags=[text_flag("policy-evaluation-id", "Policy Evaluation ID", required=True)],
        empty="No policy set outcomes found",
    ),
    read_command(
        "policyset outcome read",
        "Show a policy set outcome",
        "/policy-set-outcomes/{id}",
        OUTCOME_FIELDS,
        flags=[id_flag("Policy Set Outcome")],
    ),
    list_command(
        "policycheck list",
        "List policy checks for a run",
        "/runs/{run_id}/policy-checks",
        [("ID", "id"), ("Status", "status"), ("Scope", "scope"),
         ("Passed", "result.passed"), ("Total Failed", "result.total-failed")],
        flags=[text_flag("run-id", "Run ID", required=True)],
        empty="No policy checks found",
    ),
    read_command(
        "policycheck read",
        "Show policy check details",
        "/policy-checks/{id}",
        CHECK_FIELDS,
        flags=[id_flag("Policy Check")],
    ),
    action_command(
        "policycheck override",
        "Override a soft-mandatory policy check",
        "/policy-checks/{id}/actions/override",
        "Policy check '{id}' overridden",
        flags=[id_flag("Policy Check")],
        fields=CHECK_FIELDS,
    ),
    list_command(
        "policyevaluation list",
        "List policy evaluations for a task stage",
        "/task-stages/{task_stage_id}/policy-evaluations",
        [("ID", "id"), ("Status", "status"), ("Policy Kind", "policy-kind"),
         ("Passed", "result-count.passed"), ("Mandatory Failed", "result-count.mandatory-failed")],
        flags=[text_flag("task-stage-id", "Task Stage ID", required=True)],
        empty="No policy evaluations found",
    ),
]
