"""API coverage self-check.

:data:`RESOURCE_OPERATIONS` lists every operation of the HCP Terraform API,
keyed by the documentation page it is described on and the flat resource
prefix used in that documentation's naming. :func:`resolve` translates a
prefix and action into the canonical command names that implement it and
:func:`validate` reports every operation no registered command covers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

OP_CODES: Dict[str, str] = {
    "L": "list",
    "C": "create",
    "R": "read",
    "U": "update",
    "D": "delete",
}

CRUD = ("L", "C", "R", "U", "D")

#: Flat resource prefixes and the command namespace they live under.
NAMESPACE_ALIASES: Dict[str, str] = {
    "audittrailtoken": "audittrail token",
    "organizationmember": "organization member",
    "organizationmembership": "organization membership",
    "organizationtag": "organization tag",
    "organizationtoken": "organization token",
    "policysetoutcome": "policyset outcome",
    "policysetparameter": "policyset parameter",
    "projectteamaccess": "project teamaccess",
    "registrymodule": "registry module",
    "registrymoduleversion": "registry module version",
    "registryprovider": "registry provider",
    "registryproviderplatform": "registry provider platform",
    "registryproviderversion": "registry provider version",
    "stackconfiguration": "stack configuration",
    "stackdeployment": "stack deployment",
    "stackstate": "stack state",
    "teamaccess": "team access",
    "teamtoken": "team token",
    "usertoken": "user token",
    "variablesetvariable": "variableset variable",
    "workspaceresource": "workspace resource",
    "workspacetag": "workspace tag",
}

#: Flat namespaces that must never be registered as commands.
LEGACY_NAMESPACES: Tuple[str, ...] = tuple(sorted(NAMESPACE_ALIASES))

#: (prefix, action) -> verb of the command implementing it.
ACTION_OVERRIDES: Dict[Tuple[str, str], str] = {
    ("workspacetag", "create"): "add",
    ("workspacetag", "delete"): "remove",
    ("variableset", "apply-workspaces"): "apply",
    ("variableset", "apply-projects"): "apply",
    ("variableset", "apply-stacks"): "apply",
    ("variableset", "remove-workspaces"): "remove",
    ("variableset", "remove-projects"): "remove",
    ("variableset", "remove-stacks"): "remove",
}

VERB_ALIASES: Dict[str, Tuple[str, ...]] = {
    "read": ("show",),
}

AGENT_POOL_TOKEN_PREFIX = "agentpool_token"


@dataclass(frozen=True)
class ResourceOperation:
    document: str
    prefix: str
    operations: Tuple[str, ...]


RESOURCE_OPERATIONS: Tuple[ResourceOperation, ...] = (
    ResourceOperation("account", "account", ("C", "R", "U")),
    ResourceOperation("agents", "agent", ("L", "R")),
    ResourceOperation("agents", "agentpool", CRUD),
    ResourceOperation("agent-tokens", AGENT_POOL_TOKEN_PREFIX, ("L", "C", "D")),
    ResourceOperation("applies", "apply", ("R", "logs")),
    ResourceOperation("assessment-results", "assessmentresult", ("L", "R")),
    ResourceOperation("audit-trails", "audittrail", ("L", "R")),
    ResourceOperation("audit-trails-tokens", "audittrailtoken", ("L", "C", "R", "D")),
    ResourceOperation("change-requests", "changerequest", ("L", "C", "R", "U")),
    ResourceOperation("comments", "comment", ("L", "C", "R")),
    ResourceOperation("configuration-versions", "configversion", ("L", "C", "R", "upload")),
    ResourceOperation("cost-estimates", "costestimate", ("R",)),
    ResourceOperation("explorer", "explorer", ("query",)),
    ResourceOperation("feature-sets", "featureset", ("L",)),
    ResourceOperation("github-app-installations", "githubapp", ("L", "R")),
    ResourceOperation("hold-your-own-key/aws", "awsoidc", ("C", "R", "U", "D")),
    ResourceOperation("hold-your-own-key/azure", "azureoidc", ("C", "R", "U", "D")),
    ResourceOperation("hold-your-own-key/gcp", "gcpoidc", ("C", "R", "U", "D")),
    ResourceOperation("hold-your-own-key/vault", "vaultoidc", ("C", "R", "U", "D")),
    ResourceOperation("hold-your-own-key/configurations", "hyok", CRUD),
    ResourceOperation("hold-your-own-key/key-versions", "hyokkey", ("C", "R", "D")),
    ResourceOperation("ip-ranges", "iprange", ("L",)),
    ResourceOperation("no-code-provisioning", "nocode", ("L", "C", "R", "U")),
    ResourceOperation("notification-configurations", "notification", CRUD + ("verify",)),
    ResourceOperation("oauth-clients", "oauthclient", CRUD),
    ResourceOperation("oauth-tokens", "oauthtoken", ("L", "R", "U", "D")),
    ResourceOperation("organizations", "organization", CRUD),
    ResourceOperation("organization-memberships", "organizationmembership", ("L", "C", "R", "D")),
    ResourceOperation("organization-memberships", "organizationmember", ("R",)),
    ResourceOperation("organization-tags", "organizationtag", ("L", "C", "D")),
    ResourceOperation("organization-tokens", "organizationtoken", ("L", "C", "R", "D")),
    ResourceOperation("plan-exports", "planexport", ("C", "R", "D", "download")),
    ResourceOperation("plans", "plan", ("R", "logs")),
    ResourceOperation("policies", "policy", CRUD),
    ResourceOperation("policy-checks", "policycheck", ("L", "R", "override")),
    ResourceOperation("policy-evaluations", "policyevaluation", ("L",)),
    ResourceOperation("policy-evaluations", "policysetoutcome", ("L", "R")),
    ResourceOperation("policy-set-params", "policysetparameter", ("L", "C", "U", "D")),
    ResourceOperation("policy-sets", "policyset", CRUD + (
        "add-policy",
        "remove-policy",
        "add-workspace",
        "remove-workspace",
        "add-workspace-exclusion",
        "remove-workspace-exclusion",
        "add-project",
        "remove-project",
    )),
    ResourceOperation("private-registry/gpg-keys", "gpgkey", CRUD),
    ResourceOperation("private-registry/modules", "registrymodule", ("L", "C", "R", "D")),
    ResourceOperation("private-registry/modules", "registrymoduleversion", ("C", "D")),
    ResourceOperation("private-registry/providers", "registryprovider", ("L", "C", "R", "D")),
    ResourceOperation("private-registry/provider-versions-platforms", "registryproviderversion",
                      ("C", "R", "D")),
    ResourceOperation("private-registry/provider-versions-platforms", "registryproviderplatform",
                      ("C", "R", "D")),
    ResourceOperation("project-team-access", "projectteamaccess", CRUD),
    ResourceOperation("projects", "project", CRUD),
    ResourceOperation("registry-api/public", "publicregistry", ("provider", "module", "policy")),
    ResourceOperation("reserved-tag-keys", "reservedtagkey", ("L", "C", "U", "D")),
    ResourceOperation("run", "run", ("L", "C", "R", "apply", "discard", "cancel")),
    ResourceOperation("run", "queryrun", ("L",)),
    ResourceOperation("run-tasks/run-tasks", "runtask", CRUD + ("attach", "detach")),
    ResourceOperation("run-triggers", "runtrigger", ("L", "C", "R", "D")),
    ResourceOperation("ssh-keys", "sshkey", CRUD),
    ResourceOperation("stability-policy", "stabilitypolicy", ("R",)),
    ResourceOperation("stacks/stacks", "stack", CRUD),
    ResourceOperation("stacks/stack-configurations", "stackconfiguration", ("L", "C", "R")),
    ResourceOperation("stacks/stack-deployments", "stackdeployment", ("L", "C", "R")),
    ResourceOperation("stacks/stack-states", "stackstate", ("L", "R")),
    ResourceOperation("state-version-outputs", "state", ("outputs",)),
    ResourceOperation("state-versions", "state", ("L", "R", "download")),
    ResourceOperation("subscriptions", "subscription", ("L", "R")),
    ResourceOperation("team-access", "teamaccess", CRUD),
    ResourceOperation("team-members", "team", ("add-member", "remove-member")),
    ResourceOperation("team-tokens", "teamtoken", ("L", "C", "R", "D")),
    ResourceOperation("teams", "team", CRUD),
    ResourceOperation("user-tokens", "usertoken", ("L", "C", "R", "D")),
    ResourceOperation("users", "user", ("R",)),
    ResourceOperation("variable-sets", "variableset", CRUD + (
        "apply-workspaces",
        "apply-projects",
        "apply-stacks",
        "remove-workspaces",
        "remove-projects",
        "remove-stacks",
        "update-workspaces",
        "update-stacks",
        "list-workspace",
        "list-project",
    )),
    ResourceOperation("variable-sets", "variablesetvariable", ("L", "C", "U", "D")),
    ResourceOperation("vcs-events", "vcsevent", ("L", "R")),
    ResourceOperation("workspace-resources", "workspaceresource", ("L", "R")),
    ResourceOperation("workspace-variables", "variable", ("L", "C", "U", "D")),
    ResourceOperation("workspaces", "workspace", CRUD + ("lock", "unlock", "force-unlock")),
    ResourceOperation("workspaces", "workspacetag", ("L", "C", "D")),
    ResourceOperation("workspaces", "queryworkspace", ("L",)),
)


def resolve(raw_prefix: str, action: str) -> Tuple[str, ...]:
    """Candidate command names implementing ``action`` on ``raw_prefix``.

    >>> resolve("workspacetag", "create")
    ('workspace tag add',)
    >>> resolve("team", "read")
    ('team read', 'team show')
    """
    if raw_prefix == AGENT_POOL_TOKEN_PREFIX:
        return (f"agentpool token-{action}",)
    namespace = NAMESPACE_ALIASES.get(raw_prefix, raw_prefix)
    verb = ACTION_OVERRIDES.get((raw_prefix, action), action)
    candidates: List[str] = []
    for v in (verb,) + VERB_ALIASES.get(verb, ()):
        name = f"{namespace} {v}"
        if name not in candidates:
            candidates.append(name)
    return tuple(candidates)


def validate(
    registry: Iterable[str],
    operations: Iterable[ResourceOperation] = RESOURCE_OPERATIONS,
) -> List[str]:
    """Every operation without a registered command, as ``"<document> → <prefix> <action>"``."""
    names = set(registry)
    missing = []
    for op in operations:
        for code in op.operations:
            action = OP_CODES.get(code, code)
            if not any(name in names for name in resolve(op.prefix, action)):
                missing.append(f"{op.document} → {op.prefix} {action}")
    return missing
