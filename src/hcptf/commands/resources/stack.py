"""Stack commands: stacks, configurations, deployments and states."""

from __future__ import annotations

from typing import Any, Dict

from ...errors import HcptfError
from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    action_command,
    bool_flag,
    collect,
    create_command,
    data_of,
    delete_command,
    id_flag,
    list_command,
    read_command,
    relation,
    resource,
    rows_for,
    show_item,
    text_flag,
    update_command,
)

STACK_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Project", "rel:project"),
    ("VCS Repo", "vcs-repo.identifier"),
    ("Speculative Enabled", "speculative-enabled"),
    ("Created At", "created-at"),
    ("Updated At", "updated-at"),
]
CONFIGURATION_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Sequence Number", "sequence-number"),
    ("Speculative", "speculative"),
    ("Components", "components"),
    ("Created At", "created-at"),
]
DEPLOYMENT_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Deployment Group", "rel:stack-deployment-group"),
    ("Created At", "created-at"),
    ("Updated At", "updated-at"),
]
STEP_COLUMNS = [("ID", "id"), ("Status", "status"), ("Operation Type", "operation-type")]
STATE_FIELDS = [
    ("ID", "id"),
    ("Generation", "generation"),
    ("Status", "status"),
    ("Deployment", "deployment"),
    ("Resource Count", "resource-instance-count"),
    ("Created At", "created-at"),
]
STACK_ID = text_flag("stack-id", "Stack ID", required=True)


def _stack_body(inv: Invocation) -> Dict[str, Any]:
    attrs = collect(inv, {"name": "name", "description": "description",
                          "speculative-enabled": "speculative-enabled"})
    if inv.provided("vcs-identifier"):
        vcs = {"identifier": inv["vcs-identifier"]}
        vcs.update(collect(inv, {
            "vcs-branch": "branch",
            "oauth-token-id": "oauth-token-id",
            "github-app-installation-id": "github-app-installation-id",
        }))
        attrs["vcs-repo"] = vcs
    return resource("stacks", attrs, {"project": relation("projects", inv["project-id"])})


def configuration_update(inv: Invocation) -> None:
    raise HcptfError(
        "stack configurations cannot be updated: they are immutable",
        hint="Create a new configuration with 'hcptf stack configuration create'.",
    )


def configuration_delete(inv: Invocation) -> None:
    raise HcptfError(
        "deleting a stack configuration is not directly supported",
        hint="Configurations are removed together with their stack ('hcptf stack delete').",
    )


def deployment_read(inv: Invocation) -> None:
    run = data_of(inv.client.get(inv.path("/stack-deployment-runs/{id}")))
    steps = inv.client.get(inv.path("/stack-deployment-runs/{id}/stack-deployment-steps"))
    items = list((steps or {}).get("data") or [])
    if inv.is_json:
        inv.formatter.json({"deployment-run": run, "steps": items})
        return
    show_item(inv, run, DEPLOYMENT_FIELDS)
    if items:
        inv.message("")
        inv.table([h for h, _ in STEP_COLUMNS], rows_for(items, STEP_COLUMNS))


COMMANDS = [
    list_command(
        "stack list",
        "List stacks",
        "/organizations/{organization}/stacks",
        [("ID", "id"), ("Name", "name"), ("Project", "rel:project"), ("Updated At", "updated-at")],
        flags=[ORG, text_flag("project", "Filter by project ID")],
        params={"project": "filter[project][id]"},
        empty="No stacks found",
    ),
    create_command(
        "stack create",
        "Create a stack",
        "/stacks",
        "stacks",
        STACK_FIELDS,
        flags=[text_flag("name", "Stack name", required=True),
               text_flag("description", "Stack description"),
               text_flag("project-id", "Project ID", required=True),
               text_flag("vcs-identifier", "VCS repository identifier (org/repo)"),
               text_flag("vcs-branch", "VCS branch (defaults to repo default branch)"),
               text_flag("oauth-token-id", "OAuth token ID for VCS connection"),
               text_flag("github-app-installation-id", "GitHub App installation ID for VCS connection"),
               bool_flag("speculative-enabled", "Enable speculative plans on PRs")],
        body=_stack_body,
        success="Stack '{name}' created",
    ),
    read_command(
        "stack read",
        "Show stack details",
        "/stacks/{id}",
        STACK_FIELDS,
        flags=[id_flag("Stack")],
    ),
    update_command(
        "stack update",
        "Update a stack",
        "/stacks/{id}",
        "stacks",
        STACK_FIELDS,
        flags=[id_flag("Stack"),
               text_flag("name", "New stack name"),
               text_flag("description", "New stack description")],
        attributes={"name": "name", "description": "description"},
        success="Stack '{id}' updated",
    ),
    delete_command(
        "stack delete",
        "Delete a stack",
        "/stacks/{id}",
        "Stack '{id}' deleted successfully",
        flags=[id_flag("Stack")],
        confirm="Are you sure you want to delete stack '{id}'? (yes/no): ",
    ),
    list_command(
        "stack configuration list",
        "List stack configurations",
        "/stacks/{stack_id}/stack-configurations",
        [("ID", "id"), ("Status", "status"), ("Sequence Number", "sequence-number"),
         ("Created At", "created-at")],
        flags=[STACK_ID],
        empty="No stack configurations found",
    ),
    create_command(
        "stack configuration create",
        "Create a new stack configuration",
        "/stacks/{stack_id}/stack-configurations",
        "stack-configurations",
        CONFIGURATION_FIELDS,
        flags=[STACK_ID, bool_flag("speculative", "Create a speculative configuration")],
        attributes={"speculative": "speculative"},
        success="Stack configuration created",
    ),
    read_command(
        "stack configuration read",
        "Show stack configuration details",
        "/stack-configurations/{id}",
        CONFIGURATION_FIELDS,
        flags=[id_flag("Stack configuration")],
    ),
    CommandSpec(
        name="stack configuration update",
        synopsis="Update stack configuration (not supported - configurations are immutable)",
        handler=configuration_update,
        flags=[id_flag("Stack configuration")],
        output=False,
        description=(
            "Stack configurations are immutable. To change a configuration, create a new one "
            "with 'hcptf stack configuration create'."
        ),
    ),
    CommandSpec(
        name="stack configuration delete",
        synopsis="Delete a stack configuration (not directly supported)",
        handler=configuration_delete,
        flags=[id_flag("Stack configuration")],
        output=False,
    ),
    list_command(
        "stack deployment list",
        "List stack deployments",
        "/stacks/{stack_id}/stack-deployments",
        [("ID", "id"), ("Name", "name"), ("Status", "status"), ("Updated At", "updated-at")],
        flags=[STACK_ID],
        empty="No stack deployments found",
    ),
    action_command(
        "stack deployment create",
        "Fetch the latest configuration from VCS and start deployments",
        "/stacks/{stack_id}/fetch-latest-from-vcs",
        "Triggered a new deployment for stack '{stack_id}'",
        flags=[STACK_ID],
    ),
    CommandSpec(
        name="stack deployment read",
        synopsis="Show a stack deployment run and its steps",
        handler=deployment_read,
        flags=[id_flag("Stack deployment run")],
    ),
    list_command(
        "stack state list",
        "List stack states",
        "/stacks/{stack_id}/stack-states",
        [("ID", "id"), ("Generation", "generation"), ("Status", "status"),
         ("Deployment", "deployment")],
        flags=[STACK_ID],
        empty="No stack states found",
    ),
    read_command(
        "stack state read",
        "Show stack state details",
        "/stack-states/{id}",
        STATE_FIELDS,
        flags=[id_flag("Stack state")],
    ),
]
