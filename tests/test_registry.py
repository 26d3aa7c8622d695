"""Tests for the command registry."""

import io

import pytest

from hcptf.commands import ApiCommand, Meta, NamespaceCommand, build_registry
from hcptf.commands.coverage import LEGACY_NAMESPACES
from hcptf.commands.registry import NAMESPACE_SYNOPSES, children_of, iter_specs

CANONICAL_KEYS = [
    "audittrail token",
    "audittrail token list",
    "audittrail token create",
    "audittrail token read",
    "audittrail token delete",
    "organization member",
    "organization member read",
    "organization membership",
    "organization membership list",
    "organization membership create",
    "organization membership read",
    "organization membership delete",
    "organization token",
    "organization token list",
    "organization token create",
    "organization token read",
    "organization token delete",
    "organization tag",
    "organization tag list",
    "organization tag create",
    "organization tag delete",
    "policyset parameter",
    "policyset parameter list",
    "policyset parameter create",
    "policyset parameter update",
    "policyset parameter delete",
    "policyset outcome",
    "policyset outcome list",
    "policyset outcome read",
    "project teamaccess",
    "project teamaccess list",
    "project teamaccess create",
    "project teamaccess read",
    "project teamaccess update",
    "project teamaccess delete",
    "team access",
    "team access list",
    "team access create",
    "team access read",
    "team access update",
    "team access delete",
    "team token",
    "team token list",
    "team token create",
    "team token read",
    "team token delete",
    "user token",
    "user token list",
    "user token create",
    "user token read",
    "user token delete",
    "workspace resource",
    "workspace resource list",
    "workspace resource read",
    "workspace tag",
    "workspace tag list",
    "workspace tag add",
    "workspace tag remove",
]

LEGACY_KEYS = [
    "audittrailtoken",
    "audittrailtoken list",
    "organizationmember read",
    "organizationmembership list",
    "organizationtoken create",
    "organizationtag delete",
    "policysetparameter update",
    "policysetoutcome read",
    "projectteamaccess",
    "teamaccess list",
    "teamtoken delete",
    "workspaceresource read",
    "workspacetag add",
    "workspacetag remove",
    "usertoken",
]


@pytest.mark.parametrize("name", CANONICAL_KEYS)
def test_canonical_key_constructs(registry, name):
    assert name in registry
    command = registry[name]()
    assert command.synopsis()


@pytest.mark.parametrize("name", LEGACY_KEYS)
def test_legacy_key_absent(registry, name):
    assert name not in registry


def test_no_key_starts_with_a_legacy_namespace(registry):
    for name in registry:
        assert name.split(" ", 1)[0] not in LEGACY_NAMESPACES, name


def test_build_registry_is_idempotent():
    first = build_registry()
    second = build_registry()
    assert list(first) == list(second)
    assert first is not second


def test_factories_return_fresh_instances(registry):
    assert registry["workspace list"]() is not registry["workspace list"]()


def test_every_command_has_help_and_synopsis(registry):
    for name, factory in registry.items():
        command = factory()
        text = command.help()
        assert f"Usage: hcptf {name}" in text, name
        assert command.synopsis().strip(), name


def test_help_lists_every_flag(registry):
    for name, factory in registry.items():
        command = factory()
        if not isinstance(command, ApiCommand):
            continue
        text = command.help()
        for flag in command.flags:
            assert f"-{flag.name}" in text, f"{name}: -{flag.name}"


LOG_COMMANDS = {"plan logs", "apply logs", "run logs"}


def test_output_flag_is_uniform(registry):
    for name, factory in registry.items():
        command = factory()
        if isinstance(command, ApiCommand) and command.spec.output:
            output = next(f for f in command.flags if f.name == "output")
            expected = ["raw", "json"] if name in LOG_COMMANDS else ["table", "json"]
            assert output.choices == expected, name


def test_delete_commands_accept_force(registry):
    for name, factory in registry.items():
        if name.endswith(" delete"):
            flags = {f.name for f in factory().flags}
            assert "force" in flags, name


def test_namespace_stubs_are_synthesized(registry):
    for name in ("team", "team access", "registry provider", "registry provider version", "stack"):
        assert isinstance(registry[name](), NamespaceCommand), name


def test_namespace_stub_lists_direct_children(registry):
    text = registry["team token"]().help()
    assert "Usage: hcptf team token" in text
    for verb in ("list", "create", "read", "delete"):
        assert verb in text


def test_namespace_stub_prints_help_and_succeeds():
    out = io.StringIO()
    registry = build_registry(Meta(out=out, err=io.StringIO()))
    assert registry["team access"]().run([]) == 0
    assert "Manage team access" in out.getvalue()


def test_namespace_stub_rejects_unknown_subcommand():
    err = io.StringIO()
    registry = build_registry(Meta(out=io.StringIO(), err=err))
    assert registry["team access"]().run(["bogus"]) == 1
    assert "Unknown command 'team access bogus'" in err.getvalue()


def test_namespace_synopses_come_from_table(registry):
    assert registry["audittrail token"]().synopsis() == NAMESPACE_SYNOPSES["audittrail token"]


def test_children_of_only_returns_direct_children():
    synopses = {"a": "A", "a b": "AB", "a b c": "ABC", "a d": "AD", "ab": "x"}
    assert children_of("a", synopses) == [("a b", "AB"), ("a d", "AD")]


def test_spec_names_are_unique():
    names = [spec.name for spec in iter_specs()]
    assert len(names) == len(set(names))
