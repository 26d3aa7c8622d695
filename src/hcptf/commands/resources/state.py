"""State version commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ...errors import HcptfError
from ..base import CommandSpec, Flag, Invocation
from ..helpers import ORG, ORG_OPTIONAL, WORKSPACE, data_of, id_flag, list_command, read_command, text_flag

logger = logging.getLogger(__name__)

STATE_FIELDS = [
    ("ID", "id"),
    ("Serial", "serial"),
    ("Status", "status"),
    ("Terraform Version", "terraform-version"),
    ("Resources Processed", "resources-processed"),
    ("Created At", "created-at"),
    ("Run", "rel:run"),
]
SENSITIVE = "<sensitive>"


def _output_rows(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    rows = []
    for item in items:
        attrs = item.get("attributes") or {}
        sensitive = bool(attrs.get("sensitive"))
        rows.append({
            "name": attrs.get("name"),
            "value": SENSITIVE if sensitive else attrs.get("value"),
            "sensitive": sensitive,
            "type": attrs.get("type"),
        })
    return rows


def state_outputs(inv: Invocation) -> None:
    workspace_id = inv.workspace_id()
    doc = inv.client.get(f"/workspaces/{workspace_id}/current-state-version-outputs")
    outputs = _output_rows(list((doc or {}).get("data") or []))
    if not outputs:
        inv.message("No outputs found in current state")
        return
    if inv.is_json:
        inv.formatter.json({
            o["name"]: {"value": o["value"], "sensitive": o["sensitive"], "type": o["type"]}
            for o in outputs
        })
        return
    inv.table(
        ["Name", "Value", "Sensitive", "Type"],
        [[o["name"], o["value"], o["sensitive"], o["type"]] for o in outputs],
    )


def state_download(inv: Invocation) -> None:
    if inv.require_one("id", "workspace") == "id":
        item = data_of(inv.client.get(inv.path("/state-versions/{id}")))
    else:
        workspace_id = inv.workspace_id()
        item = data_of(inv.client.get(f"/workspaces/{workspace_id}/current-state-version"))
    url = (item.get("attributes") or {}).get("hosted-state-download-url")
    if not url:
        raise HcptfError(f"state version {item.get('id')} has no downloadable state")
    data = inv.client.download(url)
    target = Path(inv["path"])
    target.write_bytes(data)
    logger.debug("Wrote %d bytes of state to %s", len(data), target)
    inv.message(f"State downloaded to {target}")


COMMANDS = [
    list_command(
        "state list",
        "List state versions for a workspace",
        "/state-versions",
        [("ID", "id"), ("Serial", "serial"), ("Status", "status"),
         ("Terraform Version", "terraform-version"), ("Created At", "created-at")],
        flags=[ORG, WORKSPACE],
        params={"organization": "filter[organization][name]", "workspace": "filter[workspace][name]"},
        empty="No state versions found",
    ),
    read_command(
        "state read",
        "Show state version details",
        "/state-versions/{id}",
        STATE_FIELDS,
        flags=[id_flag("State version")],
    ),
    CommandSpec(
        name="state outputs",
        synopsis="Display outputs from the current state version",
        handler=state_outputs,
        flags=[ORG, WORKSPACE],
        examples=[
            "hcptf state outputs -org=my-org -workspace=prod",
            "hcptf state outputs -org=my-org -workspace=prod -output=json",
        ],
    ),
    CommandSpec(
        name="state download",
        synopsis="Download a state file",
        handler=state_download,
        flags=[ORG_OPTIONAL,
               text_flag("workspace", "Workspace name (downloads the current state)"),
               id_flag("State version", required=False),
               Flag(name="path", help="Output file path (required)", required=True, metavar="file")],
        output=False,
        description="Download the current state of a workspace, or a specific state version by ID.",
    ),
]
