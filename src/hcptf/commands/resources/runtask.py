"""Run task and run trigger commands."""

from __future__ import annotations

from urllib.parse import quote

from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    WORKSPACE,
    bool_flag,
    choice_flag,
    create_command,
    data_of,
    delete_command,
    id_flag,
    list_command,
    read_command,
    relation,
    resource,
    show_item,
    text_flag,
    tristate_flag,
    update_command,
)

RUNTASK_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("URL", "url"),
    ("Category", "category"),
    ("Enabled", "enabled"),
    ("Description", "description"),
    ("HMAC Key Set", "hmac-key"),
]
ATTACHMENT_FIELDS = [
    ("ID", "id"),
    ("Enforcement Level", "enforcement-level"),
    ("Stages", "stages"),
    ("Run Task", "rel:task"),
    ("Workspace", "rel:workspace"),
]
TRIGGER_FIELDS = [
    ("ID", "id"),
    ("Workspace", "workspace-name"),
    ("Source", "sourceable-name"),
    ("Created At", "created-at"),
]
STAGES = ["pre_plan", "post_plan", "pre_apply", "post_apply"]


def runtask_attach(inv: Invocation) -> None:
    workspace_id = inv.workspace_id()
    doc = inv.client.post(
        f"/workspaces/{workspace_id}/tasks",
        json=resource(
            "workspace-tasks",
            {"enforcement-level": inv["enforcement-level"], "stages": [inv["stage"]]},
            {"task": relation("tasks", inv["runtask-id"])},
        ),
    )
    inv.notice(f"Run task '{inv['runtask-id']}' attached to workspace '{inv['workspace']}'")
    show_item(inv, data_of(doc), ATTACHMENT_FIELDS)


def runtask_detach(inv: Invocation) -> None:
    workspace_id = inv.workspace_id()
    inv.client.delete(f"/workspaces/{workspace_id}/tasks/{quote(inv['workspace-runtask-id'], safe='')}")
    inv.message(f"Run task '{inv['workspace-runtask-id']}' detached from workspace '{inv['workspace']}'")


def runtrigger_create(inv: Invocation) -> None:
    workspace_id = inv.workspace_id()
    source = inv.client.get(
        inv.path("/organizations/{organization}/workspaces/{source_workspace}")
    )
    doc = inv.client.post(
        f"/workspaces/{workspace_id}/run-triggers",
        json=resource("run-triggers", relationships={
            "sourceable": relation("workspaces", data_of(source).get("id")),
        }),
    )
    inv.notice(
        f"Run trigger created: '{inv['source-workspace']}' triggers runs in '{inv['workspace']}'"
    )
    show_item(inv, data_of(doc), TRIGGER_FIELDS)


COMMANDS = [
    list_command(
        "runtask list",
        "List run tasks",
        "/organizations/{organization}/tasks",
        [("ID", "id"), ("Name", "name"), ("Category", "category"), ("Enabled", "enabled"),
         ("URL", "url")],
        flags=[ORG],
        empty="No run tasks found",
    ),
    create_command(
        "runtask create",
        "Create a run task",
        "/organizations/{organization}/tasks",
        "tasks",
        RUNTASK_FIELDS,
        flags=[ORG,
               text_flag("name", "Run task name", required=True),
               text_flag("url", "Run task URL", required=True),
               text_flag("hmac-key", "HMAC key for request authentication (optional)"),
               choice_flag("category", "Run task category: task or advisory", ["task", "advisory"],
                           default="task"),
               bool_flag("enabled", "Enable run task", default=True),
               text_flag("description", "Run task description (optional)")],
        attributes={"name": "name", "url": "url", "hmac-key": "hmac-key", "category": "category",
                    "enabled": "enabled", "description": "description"},
        success="Run task '{name}' created",
    ),
    read_command(
        "runtask read",
        "Show run task details",
        "/tasks/{id}",
        RUNTASK_FIELDS,
        flags=[id_flag("Run task")],
    ),
    update_command(
        "runtask update",
        "Update a run task",
        "/tasks/{id}",
        "tasks",
        RUNTASK_FIELDS,
        flags=[id_flag("Run task"),
               text_flag("name", "Run task name"),
               text_flag("url", "Run task URL"),
               text_flag("hmac-key", "HMAC key for request authentication"),
               choice_flag("category", "Run task category: task or advisory", ["task", "advisory"]),
               tristate_flag("enabled", "Enable run task"),
               text_flag("description", "Run task description")],
        attributes={"name": "name", "url": "url", "hmac-key": "hmac-key", "category": "category",
                    "enabled": "enabled", "description": "description"},
        success="Run task '{id}' updated",
    ),
    delete_command(
        "runtask delete",
        "Delete a run task",
        "/tasks/{id}",
        "Run task '{id}' deleted successfully",
        flags=[id_flag("Run task")],
        confirm="Are you sure you want to delete run task '{id}'? (yes/no): ",
    ),
    CommandSpec(
        name="runtask attach",
        synopsis="Attach a run task to a workspace",
        handler=runtask_attach,
        flags=[ORG, WORKSPACE,
               text_flag("runtask-id", "Run task ID", required=True),
               choice_flag("enforcement-level", "Enforcement level: advisory or mandatory",
                           ["advisory", "mandatory"], default="advisory"),
               choice_flag("stage", "Stage: post_plan, pre_plan, or pre_apply", STAGES,
                           default="post_plan")],
        examples=["hcptf runtask attach -org=my-org -workspace=prod -runtask-id=task-123 -stage=pre_apply"],
    ),
    CommandSpec(
        name="runtask detach",
        synopsis="Detach a run task from a workspace",
        handler=runtask_detach,
        flags=[ORG, WORKSPACE,
               text_flag("workspace-runtask-id", "Workspace run task ID", required=True)],
        output=False,
        confirm="Are you sure you want to detach run task '{workspace_runtask_id}'? (yes/no): ",
    ),
    list_command(
        "runtrigger list",
        "List run triggers for a workspace",
        "/workspaces/{workspace_id}/run-triggers",
        [("ID", "id"), ("Workspace", "workspace-name"), ("Source", "sourceable-name"),
         ("Created At", "created-at")],
        flags=[ORG, WORKSPACE,
               choice_flag("type", "Run trigger type: inbound or outbound", ["inbound", "outbound"],
                           default="inbound")],
        params={"type": "filter[run-trigger][type]"},
        empty="No run triggers found",
    ),
    CommandSpec(
        name="runtrigger create",
        synopsis="Create a run trigger",
        handler=runtrigger_create,
        flags=[ORG,
               text_flag("workspace", "Target workspace name", required=True),
               text_flag("source-workspace", "Source workspace name", required=True)],
    ),
    read_command(
        "runtrigger read",
        "Show run trigger details",
        "/run-triggers/{id}",
        TRIGGER_FIELDS,
        flags=[id_flag("Run trigger")],
    ),
    delete_command(
        "runtrigger delete",
        "Delete a run trigger",
        "/run-triggers/{id}",
        "Run trigger '{id}' deleted successfully",
        flags=[id_flag("Run trigger")],
        confirm="Are you sure you want to delete run trigger '{id}'? (yes/no): ",
    ),
]
