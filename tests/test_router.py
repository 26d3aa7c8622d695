"""Tests for URL-style argument routing."""

import pytest

from hcptf.router import CommandTree, Router, pluralize, resource_keyword


@pytest.fixture
def router(registry):
    return Router(registry)


@pytest.mark.parametrize(
    "args,expected",
    [
        ([], []),
        (["-h"], ["-h"]),
        (["workspace", "list", "-org=myorg"], ["workspace", "list", "-org=myorg"]),
        (["myorg"], ["organization", "show", "-name=myorg"]),
        (["myorg", "-h"], ["organization:context", "-org=myorg"]),
        (["myorg", "workspaces"], ["workspace", "list", "-org=myorg"]),
        (["myorg", "projects"], ["project", "list", "-org=myorg"]),
        (["myorg", "teams"], ["team", "list", "-org=myorg"]),
        (["myorg", "policies"], ["policy", "list", "-org=myorg"]),
        (["myorg", "policysets"], ["policyset", "list", "-org=myorg"]),
        (["myorg", "sshkeys"], ["sshkey", "list", "-org=myorg"]),
        (["myorg", "workspaces", "list", "-output=json"],
         ["workspace", "list", "-org=myorg", "-output=json"]),
        (["myorg", "projects", "read", "-id=prj-1"], ["project", "read", "-org=myorg", "-id=prj-1"]),
        (["myorg", "projects", "-h"], ["project", "-h"]),
        (["myorg", "myworkspace"], ["workspace", "read", "-org=myorg", "-name=myworkspace"]),
        (["myorg", "myworkspace", "-h"],
         ["workspace:context", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "runs"], ["run", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "runs", "list"],
         ["run", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "runs", "run-123"], ["run", "show", "-id=run-123"]),
        (["myorg", "myworkspace", "runs", "run-123", "apply"], ["run", "apply", "-id=run-123"]),
        (["myorg", "myworkspace", "run-123"], ["run", "show", "-id=run-123"]),
        (["myorg", "myworkspace", "run-123", "logs"], ["plan", "logs", "-id=run-123"]),
        (["myorg", "myworkspace", "run-123", "applylogs"], ["apply", "logs", "-id=run-123"]),
        (["myorg", "myworkspace", "run-123", "comments"], ["comment", "list", "-run-id=run-123"]),
        (["myorg", "myworkspace", "variables"],
         ["variable", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "variables", "list"],
         ["variable", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "state"], ["state", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "state", "list"],
         ["state", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "state", "outputs"],
         ["state", "outputs", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "resources"],
         ["workspace", "resource", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "myworkspace", "tags"],
         ["workspace", "tag", "list", "-org=myorg", "-workspace=myworkspace"]),
        (["myorg", "variables"], ["myorg", "variables"]),
    ],
)
def test_translate_args(router, args, expected):
    assert router.translate_args(args) == expected


@pytest.mark.parametrize("root", ["workspace", "run", "organization", "login", "logout", "version"])
def test_known_roots(registry, root):
    assert CommandTree(registry).has_root(root)


@pytest.mark.parametrize("token", ["notacommand", "myorg", ""])
def test_unknown_roots(registry, token):
    assert not CommandTree(registry).has_root(token)


def test_org_collections_require_list_delete_and_read(registry):
    tree = CommandTree(registry)
    assert tree.org_collection("workspaces") == "workspace"
    assert tree.org_collection("teams") == "team"
    assert tree.org_collection("variablesets") == "variableset"
    assert tree.org_collection("plans") is None


@pytest.mark.parametrize(
    "token,expected",
    [
        ("workspace", "workspaces"),
        ("policy", "policies"),
        ("sshkey", "sshkeys"),
        ("gateway", "gateways"),
        ("", ""),
    ],
)
def test_pluralize(token, expected):
    assert pluralize(token) == expected


def test_resource_keyword():
    assert resource_keyword("workspaceresource") == "resources"
    assert resource_keyword("assessmentresult") == "assessments"
    assert resource_keyword("project") == "projects"
