"""Tests for the API coverage check and file naming conventions."""

import re

import pytest

from hcptf.commands import expected_file_name, expected_module, resolve, validate
from hcptf.commands.coverage import OP_CODES, RESOURCE_OPERATIONS, ResourceOperation
from hcptf.commands.layout import MODULE_GROUPS
from hcptf.commands.registry import iter_specs
from hcptf.commands.resources import MODULES


class TestResolve:
    @pytest.mark.parametrize(
        "prefix,action,expected",
        [
            ("workspace", "list", ("workspace list",)),
            ("team", "read", ("team read", "team show")),
            ("workspacetag", "create", ("workspace tag add",)),
            ("workspacetag", "delete", ("workspace tag remove",)),
            ("workspacetag", "list", ("workspace tag list",)),
            ("variableset", "apply-workspaces", ("variableset apply",)),
            ("variableset", "apply-stacks", ("variableset apply",)),
            ("variableset", "remove-projects", ("variableset remove",)),
            ("variableset", "update-workspaces", ("variableset update-workspaces",)),
            ("agentpool_token", "list", ("agentpool token-list",)),
            ("agentpool_token", "create", ("agentpool token-create",)),
            ("registryproviderversion", "create", ("registry provider version create",)),
            ("teamaccess", "read", ("team access read", "team access show")),
        ],
    )
    def test_resolve(self, prefix, action, expected):
        assert resolve(prefix, action) == expected


class TestValidate:
    def test_registry_covers_every_documented_operation(self, registry):
        assert validate(registry) == []

    def test_missing_operations_are_reported_in_order(self):
        ops = [
            ResourceOperation("workspaces", "workspace", ("L", "R", "lock")),
            ResourceOperation("teams", "team", ("R",)),
        ]
        assert validate({"workspace list"}, ops) == [
            "workspaces → workspace read",
            "workspaces → workspace lock",
            "teams → team read",
        ]

    def test_show_satisfies_read(self):
        ops = [ResourceOperation("teams", "team", ("R",))]
        assert validate({"team show"}, ops) == []

    def test_operation_codes_are_crud_or_custom_verbs(self):
        for op in RESOURCE_OPERATIONS:
            assert op.operations, op.prefix
            for code in op.operations:
                assert code in OP_CODES or re.fullmatch(r"[a-z]+(-[a-z]+)*", code), (op.prefix, code)


class TestLayout:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("workspace list", "workspace_list"),
            ("workspace tag add", "workspacetag_add"),
            ("registry provider version create", "registryproviderversion_create"),
            ("registry provider platform read", "registryproviderplatform_read"),
            ("registry provider list", "registryprovider_list"),
            ("registry module version create", "registrymodule_create_version"),
            ("registry module version delete", "registrymodule_delete_version"),
            ("agentpool token-list", "agentpool_token_list"),
            ("workspace force-unlock", "workspace_force_unlock"),
            ("organization:context", "organization_context"),
            ("workspace:context", "workspace_context"),
        ],
    )
    def test_expected_file_name(self, name, expected):
        assert expected_file_name(name) == expected

    def test_every_command_lives_in_its_expected_module(self):
        for module in MODULES:
            short = module.__name__.rsplit(".", 1)[-1]
            for spec in module.COMMANDS:
                assert expected_module(spec.name) == short, spec.name

    def test_module_groups_match_resource_modules(self):
        assert set(MODULE_GROUPS) == {m.__name__.rsplit(".", 1)[-1] for m in MODULES}

    def test_unknown_command_has_no_module(self):
        assert expected_module("bogus list") is None

    def test_file_names_are_unique(self):
        names = [expected_file_name(spec.name) for spec in iter_specs()]
        assert len(names) == len(set(names))
