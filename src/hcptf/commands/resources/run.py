"""Run lifecycle commands: runs, plans, applies, plan exports, cost estimates,
comments and configuration versions."""

from __future__ import annotations

import io
import logging
import os
import tarfile
from pathlib import Path
from typing import Any, Dict, Optional

from ...errors import HcptfError, InvalidValueError
from ..base import CommandSpec, Flag, FlagKind, Invocation
from ..helpers import (
    ORG,
    WORKSPACE,
    action_command,
    bool_flag,
    choice_flag,
    create_command,
    data_of,
    delete_command,
    id_flag,
    list_command,
    list_flag,
    pluck,
    read_command,
    relation,
    resource,
    show_item,
    text_flag,
    tristate_flag,
)

logger = logging.getLogger(__name__)

RUN_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Message", "message"),
    ("Source", "source"),
    ("Trigger Reason", "trigger-reason"),
    ("Is Destroy", "is-destroy"),
    ("Has Changes", "has-changes"),
    ("Plan", "rel:plan"),
    ("Apply", "rel:apply"),
    ("Workspace", "rel:workspace"),
    ("Created At", "created-at"),
]
RUN_COLUMNS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Message", "message"),
    ("Source", "source"),
    ("Created At", "created-at"),
]
PLAN_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Has Changes", "has-changes"),
    ("Resource Additions", "resource-additions"),
    ("Resource Changes", "resource-changes"),
    ("Resource Destructions", "resource-destructions"),
    ("Resource Imports", "resource-imports"),
]
APPLY_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Resource Additions", "resource-additions"),
    ("Resource Changes", "resource-changes"),
    ("Resource Destructions", "resource-destructions"),
    ("Resource Imports", "resource-imports"),
]
CV_FIELDS = [
    ("ID", "id"),
    ("Status", "status"),
    ("Source", "source"),
    ("Speculative", "speculative"),
    ("Auto Queue Runs", "auto-queue-runs"),
    ("Provisional", "provisional"),
    ("Upload URL", "upload-url"),
]

RUN_FILTERS = {
    "user": "search[user]",
    "commit": "search[commit]",
    "search": "search[basic]",
    "status": "filter[status]",
    "source": "filter[source]",
    "operation": "filter[operation]",
    "include": "include",
}

LOG_OUTPUT = choice_flag("output", "Output format: raw or json", ["raw", "json"], default="raw")


def _run_relation(inv: Invocation, run_id: str, name: str) -> str:
    run = data_of(inv.client.get(f"/runs/{run_id}"))
    related = pluck(run, f"rel:{name}")
    if not related:
        raise HcptfError(f"run {run_id} has no {name.replace('-', ' ')}")
    return related


def _phase_id(inv: Invocation, phase: str) -> str:
    """Accept either a plan/apply ID or a run ID for -id."""
    if inv.provided("run-id"):
        return _run_relation(inv, inv["run-id"], phase)
    key = inv.require_one("id", "run-id")
    value = inv[key]
    if value.startswith("run-"):
        return _run_relation(inv, value, phase)
    return value


def _phase_reader(phase: str, fields):
    def handler(inv: Invocation) -> None:
        phase_id = _phase_id(inv, phase)
        doc = inv.client.get(f"/{phase}s/{phase_id}")
        show_item(inv, data_of(doc), fields)
    return handler


def _print_logs(inv: Invocation, phase: str, phase_id: str, run_id: Optional[str] = None) -> None:
    item = data_of(inv.client.get(f"/{phase}s/{phase_id}"))
    url = pluck(item, "log-read-url")
    if not url:
        raise HcptfError(f"{phase} {phase_id} has no logs available yet")
    logs = inv.client.text(url)
    if inv.get("output") == "json":
        doc: Dict[str, Any] = {"phase": phase, f"{phase}_id": phase_id, "logs": logs}
        if run_id:
            doc["run_id"] = run_id
        inv.formatter.json(doc)
    else:
        inv.meta.out.write(logs if logs.endswith("\n") else logs + "\n")


def _phase_logs(phase: str):
    def handler(inv: Invocation) -> None:
        _print_logs(inv, phase, _phase_id(inv, phase))
    return handler


def run_logs(inv: Invocation) -> None:
    run = data_of(inv.client.get(inv.path("/runs/{id}")))
    phase = inv["phase"]
    if phase == "auto":
        phase = "apply" if pluck(run, "rel:apply") else "plan"
    phase_id = pluck(run, f"rel:{phase}")
    if not phase_id:
        raise HcptfError(f"run {inv['id']} has no {phase}")
    _print_logs(inv, phase, phase_id, run_id=inv["id"])


def run_create(inv: Invocation) -> None:
    ws_id = inv.workspace_id()
    attrs: Dict[str, Any] = {"is-destroy": bool(inv.get("destroy"))}
    if inv.provided("message"):
        attrs["message"] = inv["message"]
    for flag in ("auto-apply", "plan-only", "refresh-only"):
        if inv.provided(flag):
            attrs[flag] = inv[flag]
    for flag in ("target-addrs", "replace-addrs"):
        if inv.get(flag):
            attrs[flag] = inv[flag]
    relationships = {"workspace": relation("workspaces", ws_id)}
    if inv.provided("configuration-version-id"):
        relationships["configuration-version"] = relation(
            "configuration-versions", inv["configuration-version-id"]
        )
    doc = inv.client.post("/runs", json=resource("runs", attrs, relationships))
    inv.notice(f"Run created for workspace '{inv['workspace']}'")
    show_item(inv, data_of(doc), RUN_FIELDS)


def _run_action(action: str, past: str):
    def body(inv: Invocation) -> Optional[Dict[str, Any]]:
        return {"comment": inv["comment"]} if inv.provided("comment") else None

    return action_command(
        f"run {action}",
        f"{action.capitalize()} a run",
        "/runs/{id}/actions/" + action,
        "Run '{id}' " + past,
        flags=[id_flag("Run"), text_flag("comment", f"Comment for the {action} action")],
        body=body,
    )


def configversion_read(inv: Invocation) -> None:
    key = inv.require_one("id", "run-id")
    cv_id = inv[key]
    if key == "run-id" or cv_id.startswith("run-"):
        cv_id = _run_relation(inv, cv_id, "configuration-version")
    doc = inv.client.get(f"/configuration-versions/{cv_id}")
    show_item(inv, data_of(doc), CV_FIELDS)


def _archive(path: Path) -> bytes:
    """tar.gz bytes for a directory, or the file itself when already packed."""
    if path.is_file():
        if not path.name.endswith((".tar.gz", ".tgz")):
            raise InvalidValueError("path", str(path), "a directory or a .tar.gz file")
        return path.read_bytes()
    if not path.is_dir():
        raise InvalidValueError("path", str(path), "an existing directory or .tar.gz file")
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for root, dirs, files in os.walk(path):
            dirs[:] = sorted(d for d in dirs if d not in (".git", ".terraform"))
            for name in sorted(files):
                full = Path(root) / name
                tar.add(str(full), arcname=str(full.relative_to(path)))
    return buf.getvalue()


def configversion_upload(inv: Invocation) -> None:
    data = _archive(Path(os.path.expanduser(inv["path"])))
    item = data_of(inv.client.get(inv.path("/configuration-versions/{id}")))
    url = pluck(item, "upload-url")
    if not url:
        raise HcptfError(f"configuration version {inv['id']} has no upload URL (already uploaded?)")
    logger.debug("Uploading %d bytes for %s", len(data), inv["id"])
    inv.client.upload(url, data)
    inv.message(f"Configuration uploaded successfully to {inv['id']}")


def planexport_download(inv: Invocation) -> None:
    target = inv.get("path") or f"{inv['id']}.tar.gz"
    data = inv.client.download(inv.path("/plan-exports/{id}/download"))
    Path(target).write_bytes(data)
    inv.message(f"Plan export downloaded to {target}")


COMMANDS = [
    list_command(
        "run list",
        "List runs in a workspace",
        "/workspaces/{workspace_id}/runs",
        RUN_COLUMNS,
        flags=[ORG, text_flag("workspace", "Workspace name", required=True, aliases=["name"]),
               text_flag("user", "Filter runs by VCS username"),
               text_flag("commit", "Filter runs by commit SHA"),
               text_flag("search", "Basic search across username/commit/run/message"),
               text_flag("status", "Filter by run status (comma-separated)"),
               text_flag("source", "Filter by run source (comma-separated)"),
               text_flag("operation", "Filter by run operation type (comma-separated)"),
               text_flag("include", "Comma-separated related resources to include")],
        params=RUN_FILTERS,
        empty="No runs found",
        examples=["hcptf run list -org=my-org -workspace=prod", "hcptf my-org prod runs"],
    ),
    list_command(
        "run list-org",
        "List runs across an organization",
        "/organizations/{organization}/runs",
        RUN_COLUMNS + [("Workspace", "rel:workspace")],
        flags=[ORG,
               text_flag("user", "Filter by VCS username"),
               text_flag("commit", "Filter by commit SHA"),
               text_flag("search", "Search runs by username, commit, run ID, or message"),
               text_flag("status", "Filter by run status (comma-separated)"),
               text_flag("source", "Filter by run source (comma-separated)"),
               text_flag("operation", "Filter by run operation (comma-separated)"),
               text_flag("agent-pool", "Filter by agent pool names (comma-separated)"),
               text_flag("status-group", "Filter by run status group (comma-separated)"),
               text_flag("timeframe", "Filter by timeframe (comma-separated)"),
               text_flag("workspace", "Filter by workspace names (comma-separated)"),
               text_flag("include", "Comma-separated related resources to include")],
        params=dict(RUN_FILTERS, **{
            "agent-pool": "filter[agent_pool_names]",
            "status-group": "filter[status_group]",
            "timeframe": "filter[timeframe]",
            "workspace": "filter[workspace_names]",
        }),
        empty="No runs found",
    ),
    CommandSpec(
        name="run create",
        synopsis="Create a new run",
        handler=run_create,
        flags=[ORG, WORKSPACE,
               text_flag("message", "Run message"),
               bool_flag("destroy", "Create a destroy plan"),
               tristate_flag("auto-apply", "Apply automatically when the plan succeeds"),
               tristate_flag("plan-only", "Create a plan-only run"),
               tristate_flag("refresh-only", "Create a refresh-only run"),
               list_flag("target-addrs", "Comma-separated resource addresses to target"),
               list_flag("replace-addrs", "Comma-separated resource addresses to replace"),
               text_flag("configuration-version-id", "Configuration version to use")],
        examples=['hcptf run create -org=my-org -workspace=prod -message="Deploy"'],
    ),
    read_command(
        "run show",
        "Show run details",
        "/runs/{id}",
        RUN_FIELDS,
        flags=[id_flag("Run"), text_flag("include", "Comma-separated related resources to include")],
        params={"include": "include"},
    ),
    _run_action("apply", "applied"),
    _run_action("discard", "discarded"),
    _run_action("cancel", "cancelled"),
    CommandSpec(
        name="run logs",
        synopsis="Show logs for a run",
        handler=run_logs,
        flags=[id_flag("Run"),
               choice_flag("phase", "Phase to show logs for: plan, apply, or auto",
                           ["plan", "apply", "auto"], default="auto"),
               LOG_OUTPUT],
        description=(
            "Show logs for a run. With -phase=auto, apply logs are shown when the run "
            "has an apply, otherwise plan logs."
        ),
        examples=["hcptf run logs -id=run-abc123", "hcptf run logs -id=run-abc123 -phase=plan"],
    ),
    CommandSpec(
        name="plan read",
        synopsis="Show plan details",
        handler=_phase_reader("plan", PLAN_FIELDS),
        flags=[id_flag("Plan ID or Run", required=False), text_flag("run-id", "Run ID (alternative to -id)")],
    ),
    CommandSpec(
        name="plan logs",
        synopsis="Show plan logs",
        handler=_phase_logs("plan"),
        flags=[id_flag("Plan ID or Run", required=False),
               text_flag("run-id", "Run ID (alternative to -id)"), LOG_OUTPUT],
    ),
    CommandSpec(
        name="apply read",
        synopsis="Show apply details",
        handler=_phase_reader("apply", APPLY_FIELDS),
        flags=[id_flag("Apply ID or Run", required=False), text_flag("run-id", "Run ID (alternative to -id)")],
    ),
    CommandSpec(
        name="apply logs",
        synopsis="Show apply logs",
        handler=_phase_logs("apply"),
        flags=[id_flag("Apply ID or Run", required=False),
               text_flag("run-id", "Run ID (alternative to -id)"), LOG_OUTPUT],
    ),
    create_command(
        "planexport create",
        "Create a plan export",
        "/plan-exports",
        "plan-exports",
        [("ID", "id"), ("Data Type", "data-type"), ("Status", "status")],
        flags=[text_flag("plan-id", "Plan ID", required=True),
               text_flag("data-type", "Data type for export", default="sentinel-mock-bundle-v0")],
        body=lambda inv: resource(
            "plan-exports",
            {"data-type": inv["data-type"]},
            {"plan": relation("plans", inv["plan-id"])},
        ),
        success="Plan export created",
    ),
    read_command(
        "planexport read",
        "Show plan export details",
        "/plan-exports/{id}",
        [("ID", "id"), ("Data Type", "data-type"), ("Status", "status"),
         ("Expired At", "status-timestamps.expired-at")],
        flags=[id_flag("Plan export")],
    ),
    CommandSpec(
        name="planexport download",
        synopsis="Download a plan export archive",
        handler=planexport_download,
        flags=[id_flag("Plan export"),
               Flag(name="path", help="Output file path (default: <export-id>.tar.gz)", metavar="file")],
        output=False,
    ),
    delete_command(
        "planexport delete",
        "Delete a plan export",
        "/plan-exports/{id}",
        "Plan export '{id}' deleted successfully",
        flags=[id_flag("Plan export")],
        confirm="Are you sure you want to delete plan export '{id}'? (yes/no): ",
    ),
    read_command(
        "costestimate read",
        "Show cost estimate details",
        "/cost-estimates/{id}",
        [("ID", "id"), ("Status", "status"),
         ("Prior Monthly Cost", "prior-monthly-cost"),
         ("Proposed Monthly Cost", "proposed-monthly-cost"),
         ("Delta Monthly Cost", "delta-monthly-cost"),
         ("Matched Resources", "matched-resources-count"),
         ("Unmatched Resources", "unmatched-resources-count")],
        flags=[id_flag("Cost estimate")],
    ),
    list_command(
        "comment list",
        "List comments on a run",
        "/runs/{run_id}/comments",
        [("ID", "id"), ("Body", "body"), ("Created At", "created-at")],
        flags=[text_flag("run-id", "Run ID", required=True)],
        empty="No comments found",
        page_size=None,
    ),
    create_command(
        "comment create",
        "Add a comment to a run",
        "/runs/{run_id}/comments",
        "comments",
        [("ID", "id"), ("Body", "body")],
        flags=[text_flag("run-id", "Run ID", required=True),
               text_flag("body", "Comment text", required=True)],
        attributes={"body": "body"},
        success="Comment added to run '{run_id}'",
    ),
    read_command(
        "comment read",
        "Show a run comment",
        "/comments/{id}",
        [("ID", "id"), ("Body", "body"), ("Run Event", "rel:run-event")],
        flags=[id_flag("Comment")],
    ),
    list_command(
        "configversion list",
        "List configuration versions for a workspace",
        "/workspaces/{workspace_id}/configuration-versions",
        [("ID", "id"), ("Status", "status"), ("Source", "source"), ("Speculative", "speculative")],
        flags=[ORG, WORKSPACE],
        empty="No configuration versions found",
    ),
    create_command(
        "configversion create",
        "Create a configuration version",
        "/workspaces/{workspace_id}/configuration-versions",
        "configuration-versions",
        CV_FIELDS,
        flags=[ORG, WORKSPACE,
               bool_flag("auto-queue-runs", "Automatically queue runs when uploaded", default=True),
               bool_flag("speculative", "Create a speculative configuration version"),
               bool_flag("provisional", "Create a provisional configuration version")],
        body=lambda inv: resource("configuration-versions", {
            "auto-queue-runs": bool(inv.get("auto_queue_runs")),
            "speculative": bool(inv.get("speculative")),
            "provisional": bool(inv.get("provisional")),
        }),
        success="Configuration version created",
    ),
    CommandSpec(
        name="configversion read",
        synopsis="Show configuration version details",
        handler=configversion_read,
        flags=[id_flag("Configuration version ID or Run", required=False),
               text_flag("run-id", "Run ID (alternative to -id)")],
    ),
    CommandSpec(
        name="configversion upload",
        synopsis="Upload configuration files",
        handler=configversion_upload,
        flags=[id_flag("Configuration version"),
               Flag(name="path", help="Path to configuration directory or tar.gz file (required)",
                    required=True, kind=FlagKind.STRING, metavar="dir")],
        output=False,
        examples=["hcptf configversion upload -id=cv-abc123 -path=./infra"],
    ),
]
