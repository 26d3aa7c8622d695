"""Context help for URL-style invocations such as ``hcptf my-org -h``."""

from __future__ import annotations

from ..base import CommandSpec, Invocation
from ..helpers import text_flag

ORGANIZATION_PATHS = [
    ("", "Show organization details"),
    ("workspaces", "List workspaces"),
    ("projects", "List projects"),
    ("teams", "List teams"),
    ("policies", "List policies"),
    ("policysets", "List policy sets"),
    ("variablesets", "List variable sets"),
    ("agentpools", "List agent pools"),
    ("runtasks", "List run tasks"),
    ("oauthclients", "List OAuth clients"),
    ("sshkeys", "List SSH keys"),
    ("<workspace>", "Show workspace details"),
    ("<workspace> -h", "Show commands for a workspace"),
]

WORKSPACE_PATHS = [
    ("", "Show workspace details"),
    ("runs", "List runs"),
    ("runs <run-id>", "Show a run"),
    ("<run-id> [plan|logs|applylogs|comments|policychecks|apply|discard|cancel]",
     "Inspect or act on a run"),
    ("variables", "List variables"),
    ("state", "List state versions"),
    ("state outputs", "Show current state outputs"),
    ("resources", "List managed resources"),
    ("assessments", "List health assessment results"),
    ("changerequests", "List change requests"),
    ("configversions", "List configuration versions"),
    ("tags", "List workspace tags"),
]


def _render(inv: Invocation, title: str, prefix: str, paths) -> None:
    width = max(len(f"hcptf {prefix} {p}".rstrip()) for p, _ in paths)
    lines = [title, ""]
    for path, description in paths:
        usage = f"hcptf {prefix} {path}".rstrip()
        lines.append(f"  {usage:<{width}}  {description}")
    inv.message("\n".join(lines))


def organization_context(inv: Invocation) -> None:
    org = inv["org"]
    _render(inv, f"Commands for organization '{org}':", org, ORGANIZATION_PATHS)


def workspace_context(inv: Invocation) -> None:
    org, workspace = inv["org"], inv["workspace"]
    _render(
        inv,
        f"Commands for workspace '{workspace}' in organization '{org}':",
        f"{org} {workspace}",
        WORKSPACE_PATHS,
    )


COMMANDS = [
    CommandSpec(
        name="organization:context",
        synopsis="Show commands available for an organization",
        handler=organization_context,
        flags=[text_flag("org", "Organization name", required=True)],
        output=False,
    ),
    CommandSpec(
        name="workspace:context",
        synopsis="Show commands available for a workspace",
        handler=workspace_context,
        flags=[text_flag("org", "Organization name", required=True),
               text_flag("workspace", "Workspace name", required=True)],
        output=False,
    ),
]
