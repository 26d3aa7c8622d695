"""URL-like argument routing.

Lets users address resources the way the web UI does::

    hcptf my-org                          -> organization show -name=my-org
    hcptf my-org workspaces               -> workspace list -org=my-org
    hcptf my-org my-ws                    -> workspace read -org=my-org -name=my-ws
    hcptf my-org my-ws runs               -> run list -org=my-org -workspace=my-ws
    hcptf my-org my-ws run-abc123 logs    -> plan logs -id=run-abc123
    hcptf my-org -h                       -> organization:context -org=my-org

Anything starting with a registered root command is passed through untouched.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .commands.base import HELP_FLAGS

logger = logging.getLogger(__name__)

RUN_ID_PREFIX = "run-"

#: ``<org> <workspace> <keyword> [list]`` -> list command scoped to the workspace
WORKSPACE_LISTS: Dict[str, List[str]] = {
    "runs": ["run", "list"],
    "variables": ["variable", "list"],
    "state": ["state", "list"],
    "resources": ["workspace", "resource", "list"],
    "assessments": ["assessmentresult", "list"],
    "changerequests": ["changerequest", "list"],
    "configversions": ["configversion", "list"],
    "tags": ["workspace", "tag", "list"],
}


def pluralize(token: str) -> str:
    if not token:
        return token
    if token.endswith(("s", "sh", "ch", "x", "z")):
        return token + "es"
    if token.endswith("y") and token[-2:-1] not in "aeiou":
        return token[:-1] + "ies"
    return token + "s"


def resource_keyword(token: str) -> str:
    """Collection keyword for a namespace: ``workspace`` -> ``workspaces``,
    ``workspaceresource`` -> ``resources``, ``assessmentresult`` -> ``assessments``."""
    if not token:
        return token
    if token.startswith("workspace") and token != "workspace":
        return pluralize(token[len("workspace"):])
    if token.endswith("result"):
        return token[: -len("result")] + "s"
    return pluralize(token)


def should_be_org_collection(verbs: Set[str]) -> bool:
    """Roots browsable as ``<org> <keyword>``: listable and deletable resources
    that can be read, or shown and have members."""
    if "list" not in verbs or "delete" not in verbs:
        return False
    if "read" in verbs:
        return True
    return "show" in verbs and ("add-member" in verbs or "remove-member" in verbs)


class CommandTree:
    """Index of registered command paths used to recognise URL-style arguments."""

    def __init__(self, command_paths: Iterable[str]) -> None:
        self.roots: Set[str] = set()
        self.org_collections: Dict[str, str] = {}
        self.resource_keywords: Set[str] = set()

        paths = [p.split() for p in command_paths if p.strip()]
        root_verbs: Dict[str, Set[str]] = {}
        for tokens in paths:
            self.roots.add(tokens[0])
            if len(tokens) == 2:
                root_verbs.setdefault(tokens[0], set()).add(tokens[1])

        for tokens in paths:
            if tokens[-1] != "list":
                continue
            if len(tokens) == 2:
                root = tokens[0]
                keyword = resource_keyword(root)
                self.resource_keywords.add(keyword)
                if should_be_org_collection(root_verbs.get(root, set())):
                    self.org_collections[keyword] = root
            elif tokens[0] == "workspace":
                self.resource_keywords.add(resource_keyword(tokens[-2]))

        for root, verbs in root_verbs.items():
            if "outputs" in verbs:
                self.resource_keywords.add(root)

    def has_root(self, token: str) -> bool:
        return token in self.roots

    def org_collection(self, token: str) -> Optional[str]:
        return self.org_collections.get(token)

    def is_resource_keyword(self, token: str) -> bool:
        return token in self.resource_keywords


class Router:
    """Translates URL-style arguments into registered command paths."""

    def __init__(self, command_paths: Iterable[str]) -> None:
        self.tree = CommandTree(command_paths)

    def translate_args(self, args: Sequence[str]) -> List[str]:
        args = list(args)
        if not args or args[0].startswith("-") or self.tree.has_root(args[0]):
            return args
        translated = self._translate(args)
        if translated != args:
            logger.debug("Routed %r to %r", args, translated)
        return translated

    def _translate(self, args: List[str]) -> List[str]:
        org = args[0]
        has_help = any(a in HELP_FLAGS for a in args)

        if len(args) == 1:
            return ["organization", "show", f"-name={org}"]
        if len(args) == 2 and has_help:
            return ["organization:context", f"-org={org}"]

        second = args[1]
        namespace = self.tree.org_collection(second)
        if namespace is not None:
            if len(args) == 2:
                return [namespace, "list", f"-org={org}"]
            third = args[2]
            if has_help and third in HELP_FLAGS:
                return [namespace, "-h"]
            if third == "list":
                return [namespace, "list", f"-org={org}"] + args[3:]
            return [namespace, third, f"-org={org}"] + args[3:]

        if second in ("variables", "runs"):
            return args

        if len(args) == 2:
            return ["workspace", "read", f"-org={org}", f"-name={second}"]

        if len(args) == 3 and has_help and not self.tree.is_resource_keyword(second):
            return ["workspace:context", f"-org={org}", f"-workspace={second}"]

        return self._translate_workspace(org, second, args)

    def _translate_workspace(self, org: str, workspace: str, args: List[str]) -> List[str]:
        scope = [f"-org={org}", f"-workspace={workspace}"]
        third = args[2]

        if third.startswith(RUN_ID_PREFIX):
            if len(args) == 3:
                return ["run", "show", f"-id={third}"]
            return self.translate_run_action(org, workspace, third, args[3], args[4:])

        if third == "runs" and len(args) >= 4 and args[3:] != ["list"]:
            run_id = args[3]
            if len(args) == 4:
                return ["run", "show", f"-id={run_id}"]
            return self.translate_run_action(org, workspace, run_id, args[4], args[5:])

        if third == "state" and len(args) == 4 and args[3] == "outputs":
            return ["state", "outputs"] + scope

        target = WORKSPACE_LISTS.get(third)
        if target is not None:
            if len(args) == 3:
                return target + scope
            if args[3] == "list":
                return target + scope + args[4:]
        return args

    @staticmethod
    def translate_run_action(
        org: str, workspace: str, run_id: str, action: str, rest: List[str]
    ) -> List[str]:
        """Map ``<run-id> <action>`` to the command inspecting that part of the run."""
        scope = [f"-org={org}", f"-workspace={workspace}"]
        if action == "plan":
            head = ["plan", "read", f"-id={run_id}"]
        elif action in ("logs", "planlogs"):
            head = ["plan", "logs", f"-id={run_id}"]
        elif action == "applylogs":
            head = ["apply", "logs", f"-id={run_id}"]
        elif action in ("applyread", "applydetails"):
            head = ["apply", "read", f"-id={run_id}"]
        elif action == "comments":
            head = ["comment", "list", f"-run-id={run_id}"]
        elif action == "policychecks":
            head = ["policycheck", "list", f"-run-id={run_id}"]
        elif action in ("state", "stateversions"):
            head = ["state", "list"] + scope
        elif action == "outputs":
            head = ["state", "outputs"] + scope
        elif action == "configversion":
            head = ["configversion", "read", f"-run-id={run_id}"]
        elif action == "assessment":
            head = ["assessmentresult", "list"] + scope
        else:
            head = ["run", action, f"-id={run_id}"]
        return head + rest
