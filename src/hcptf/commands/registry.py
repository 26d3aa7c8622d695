"""Command registry: canonical command name -> zero-argument command factory.

:func:`build_registry` is a pure function. It collects the command tables of
:mod:`hcptf.commands.resources`, wraps each spec in a lazy factory and
synthesizes a help-only :class:`NamespaceCommand` for every leading word
sequence (``team``, ``team access``, ``registry provider`` ...) that has no
command of its own.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .base import ApiCommand, Command, CommandSpec, Meta, NamespaceCommand
from .coverage import LEGACY_NAMESPACES
from .resources import MODULES

logger = logging.getLogger(__name__)

CommandFactory = Callable[[], Command]

NAMESPACE_SYNOPSES: Dict[str, str] = {
    "account": "Manage accounts",
    "agent": "Manage agents",
    "agentpool": "Manage agent pools",
    "apply": "Manage applies",
    "assessmentresult": "Manage assessment results",
    "audittrail": "Manage audit trail entries",
    "audittrail token": "Manage audit trail tokens",
    "awsoidc": "Manage AWS OIDC integration",
    "azureoidc": "Manage Azure OIDC integration",
    "changerequest": "Manage change requests",
    "comment": "Manage run comments",
    "configversion": "Manage workspace configuration versions",
    "costestimate": "Manage cost estimates",
    "explorer": "Query Terraform Cloud",
    "featureset": "Manage feature sets",
    "gcpoidc": "Manage GCP OIDC integration",
    "githubapp": "Manage GitHub app installations",
    "gpgkey": "Manage GPG keys",
    "hyok": "Manage Hold Your Own Key settings",
    "hyokkey": "Manage Hold Your Own Key versions",
    "iprange": "View Terraform IP ranges",
    "nocode": "Manage no-code provisioning",
    "notification": "Manage notifications",
    "oauthclient": "Manage OAuth clients",
    "oauthtoken": "Manage OAuth tokens",
    "organization": "Manage the current organization",
    "organization member": "Manage organization members",
    "organization membership": "Manage organization memberships",
    "organization tag": "Manage organization tags",
    "organization token": "Manage organization tokens",
    "plan": "Manage Terraform plans",
    "planexport": "Manage plan exports",
    "policy": "Manage policies",
    "policycheck": "Manage policy checks",
    "policyevaluation": "Manage policy evaluations",
    "policyset": "Manage policy sets",
    "policyset outcome": "Manage policy set outcomes",
    "policyset parameter": "Manage policy set parameters",
    "project": "Manage projects",
    "project teamaccess": "Manage project team access",
    "publicregistry": "Query the public Terraform registry",
    "queryrun": "Search runs",
    "queryworkspace": "Search workspaces",
    "registry": "Manage the private registry",
    "registry module": "Manage private registry modules",
    "registry provider": "Manage private registry providers",
    "reservedtagkey": "Manage reserved tag keys",
    "run": "Manage Terraform runs",
    "runtask": "Manage run tasks",
    "runtrigger": "Manage run triggers",
    "sshkey": "Manage SSH keys",
    "stabilitypolicy": "Read stability policy",
    "stack": "Manage Terraform Stacks",
    "state": "Manage Terraform states",
    "subscription": "Manage subscriptions",
    "team": "Manage teams",
    "team access": "Manage team access",
    "team token": "Manage team tokens",
    "user": "Manage users",
    "user token": "Manage user tokens",
    "variable": "Manage workspace variables",
    "variableset": "Manage variable sets",
    "vaultoidc": "Manage Vault OIDC integration",
    "vcsevent": "Manage VCS events",
    "workspace": "Manage workspaces",
    "workspace resource": "Manage workspace resources",
    "workspace tag": "Manage workspace tags",
}


def iter_specs() -> Iterator[CommandSpec]:
    for module in MODULES:
        yield from module.COMMANDS


def namespace_synopsis(namespace: str) -> str:
    return NAMESPACE_SYNOPSES.get(namespace, f"Manage {namespace}")


def _parents(name: str) -> Iterator[str]:
    words = name.split(" ")
    for i in range(1, len(words)):
        yield " ".join(words[:i])


def children_of(namespace: str, synopses: Dict[str, str]) -> List[Tuple[str, str]]:
    """Direct subcommands of ``namespace`` with their synopses, sorted by name."""
    depth = namespace.count(" ") + 2
    prefix = namespace + " "
    return sorted(
        (name, syn)
        for name, syn in synopses.items()
        if name.startswith(prefix) and name.count(" ") + 1 == depth
    )


def build_registry(meta: Optional[Meta] = None) -> Dict[str, CommandFactory]:
    """Return a fresh mapping of every canonical command name to its factory.

    Factories are lazy: no command (and no API client) is constructed until
    the factory is called, and every call yields an independent instance.
    """
    meta = meta or Meta()
    specs: Dict[str, CommandSpec] = {}
    for spec in iter_specs():
        if spec.name in specs:
            raise ValueError(f"command {spec.name!r} is declared twice")
        if spec.name.split(" ", 1)[0] in LEGACY_NAMESPACES:
            raise ValueError(f"command {spec.name!r} uses a legacy flat namespace")
        specs[spec.name] = spec

    synopses = {name: spec.synopsis for name, spec in specs.items()}
    for name in list(specs):
        for parent in _parents(name):
            synopses.setdefault(parent, namespace_synopsis(parent))

    registry: Dict[str, CommandFactory] = {}
    for name in sorted(synopses):
        if name in specs:
            registry[name] = partial(ApiCommand, specs[name], meta)
        else:
            registry[name] = partial(
                NamespaceCommand,
                name,
                synopses[name],
                partial(children_of, name, synopses),
                meta,
            )
    logger.debug("Registry built with %d commands", len(registry))
    return registry
