"""Naming conventions linking command names to source locations.

Command tables are grouped into one module per resource family under
:mod:`hcptf.commands.resources`. :func:`expected_module` names the module a
command belongs to and :func:`expected_file_name` gives the conventional flat
file name of a command, as used in the API documentation cross-reference.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

#: resources module -> top-level namespaces declared in it
MODULE_GROUPS: Dict[str, Tuple[str, ...]] = {
    "auth": ("version", "login", "logout", "whoami"),
    "context": ("organization:context", "workspace:context"),
    "account": ("account", "user"),
    "workspace": ("workspace", "assessmentresult", "changerequest"),
    "run": ("run", "plan", "planexport", "apply", "configversion", "costestimate", "comment"),
    "organization": ("organization", "reservedtagkey"),
    "variable": ("variable", "variableset"),
    "team": ("team",),
    "policy": ("policy", "policyset", "policycheck", "policyevaluation"),
    "project": ("project",),
    "state": ("state",),
    "notification": ("notification",),
    "runtask": ("runtask", "runtrigger"),
    "agent": ("agentpool", "agent"),
    "vcs": ("oauthclient", "oauthtoken", "githubapp", "vcsevent", "sshkey"),
    "audittrail": ("audittrail",),
    "stack": ("stack",),
    "registry": ("registry", "gpgkey", "nocode"),
    "publicregistry": ("publicregistry",),
    "oidc": ("awsoidc", "azureoidc", "gcpoidc", "vaultoidc"),
    "hyok": ("hyok", "hyokkey"),
    "explorer": ("explorer", "queryrun", "queryworkspace"),
    "platform": ("featureset", "iprange", "subscription", "stabilitypolicy"),
}

#: Multi-word namespaces written as a single token in file names.
JOINED_NAMESPACES: Tuple[str, ...] = (
    "audittrail token",
    "organization member",
    "organization membership",
    "organization tag",
    "organization token",
    "policyset outcome",
    "policyset parameter",
    "project teamaccess",
    "registry module",
    "registry provider",
    "registry provider platform",
    "registry provider version",
    "stack configuration",
    "stack deployment",
    "stack state",
    "team access",
    "team token",
    "user token",
    "workspace resource",
    "workspace tag",
)

FILE_NAME_OVERRIDES: Dict[str, str] = {
    "registry module version create": "registrymodule_create_version",
    "registry module version delete": "registrymodule_delete_version",
    "organization:context": "organization_context",
    "workspace:context": "workspace_context",
}

_BY_LENGTH = sorted((ns.split(" ") for ns in JOINED_NAMESPACES), key=len, reverse=True)


def expected_file_name(command_name: str) -> str:
    """Flat file name for a command, without extension.

    >>> expected_file_name("registry provider version create")
    'registryproviderversion_create'
    >>> expected_file_name("agentpool token-list")
    'agentpool_token_list'
    """
    if command_name in FILE_NAME_OVERRIDES:
        return FILE_NAME_OVERRIDES[command_name]
    words = command_name.split(" ")
    for namespace in _BY_LENGTH:
        if words[: len(namespace)] == namespace:
            words = ["".join(namespace)] + words[len(namespace):]
            break
    return "_".join(w.replace("-", "_") for w in words)


def expected_module(command_name: str) -> Optional[str]:
    """The resources module a command is declared in, or None if unknown."""
    root = command_name.split(" ", 1)[0]
    for module, roots in MODULE_GROUPS.items():
        if root in roots:
            return module
    return None
