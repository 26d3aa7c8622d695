import io

import pytest

from hcptf.dispatch import (
    build_get_verb_index,
    dispatch,
    infer_implicit_get_verb,
    longest_match,
    normalize_delete_flags,
)
from hcptf.errors import AmbiguousCommandError

INDEX = {
    "workspace": frozenset({"list", "read"}),
    "organization": frozenset({"list", "show"}),
    "user": frozenset({"read"}),
    "featureset": frozenset({"list"}),
    "organization token": frozenset({"list", "read"}),
}


def test_build_get_verb_index():
    index = build_get_verb_index(
        [
            "workspace list",
            "workspace read",
            "organization show",
            "organization member",
            "organization token list",
            "team create",
        ]
    )
    assert index["workspace"] == {"list", "read"}
    assert index["organization"] == {"show"}
    assert index["organization token"] == {"list"}
    assert "team" not in index


@pytest.mark.parametrize(
    "args,expected",
    [
        ([], []),
        (["workspace", "-h"], ["workspace", "-h"]),
        (["workspace", "list", "-org=myorg"], ["workspace", "list", "-org=myorg"]),
        (["workspace", "-org=myorg"], ["workspace", "list", "-org=myorg"]),
        (["workspace", "-id=ws-123"], ["workspace", "read", "-id=ws-123"]),
        (["workspace", "-name=my-workspace"], ["workspace", "read", "-name=my-workspace"]),
        (["workspace", "-name", "my-workspace"], ["workspace", "read", "-name", "my-workspace"]),
        (["organization", "-id=org-123"], ["organization", "show", "-id=org-123"]),
        (["user"], ["user", "read"]),
        (["featureset"], ["featureset", "list"]),
        (["organization", "token", "-org=myorg"], ["organization", "token", "list", "-org=myorg"]),
        (["organization", "token", "-id=ot-123"], ["organization", "token", "read", "-id=ot-123"]),
        (["notacommand"], ["notacommand"]),
        (["workspace", "abc"], ["workspace", "abc"]),
    ],
)
def test_infer_implicit_get_verb(args, expected):
    assert infer_implicit_get_verb(args, INDEX) == expected


@pytest.mark.parametrize("args", [["workspace"], ["organization"], ["workspace", "-output=json"]])
def test_infer_implicit_get_verb_ambiguous(args):
    with pytest.raises(AmbiguousCommandError) as exc:
        infer_implicit_get_verb(args, INDEX)
    assert "specify one of: list" in exc.value.message


DELETE_COMMANDS = ["workspace delete", "organization token delete", "workspace read"]


@pytest.mark.parametrize(
    "args,expected",
    [
        (["workspace", "delete", "-f"], ["workspace", "delete", "-force"]),
        (["workspace", "delete", "-y"], ["workspace", "delete", "-force"]),
        (["organization", "token", "delete", "-y"], ["organization", "token", "delete", "-force"]),
        (["workspace", "read", "-y"], ["workspace", "read", "-y"]),
        (["workspace", "delete", "-h"], ["workspace", "delete", "-h"]),
    ],
)
def test_normalize_delete_flags(args, expected):
    assert normalize_delete_flags(args, DELETE_COMMANDS) == expected


def test_longest_match_prefers_deepest_path():
    names = ["registry provider", "registry provider version create", "registry"]
    assert longest_match(["registry", "provider", "version", "create", "-x=1"], names) == (
        "registry provider version create",
        ["-x=1"],
    )
    assert longest_match(["nope"], names) == (None, ["nope"])


def test_dispatch_unknown_command_suggests(registry):
    err = io.StringIO()
    assert dispatch(["workspce", "list"], registry, err) == 1
    assert "Unknown command 'workspce list'" in err.getvalue()
    assert "hcptf workspace list" in err.getvalue()


def test_dispatch_ambiguous_namespace(registry):
    err = io.StringIO()
    assert dispatch(["workspace"], registry, err) == 1
    assert 'ambiguous operation for "workspace"' in err.getvalue()


def test_dispatch_reports_factory_failure():
    def broken():
        raise RuntimeError("boom")

    err = io.StringIO()
    assert dispatch(["broken", "thing"], {"broken thing": broken}, err) == 1
    assert "failed to initialize command 'broken thing': boom" in err.getvalue()
