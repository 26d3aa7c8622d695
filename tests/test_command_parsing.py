"""Flag parsing and validation shared by every API command."""

import io

import pytest

from hcptf.commands import ApiCommand, CommandSpec, Flag, FlagKind, Meta
from hcptf.commands.base import render_help
from hcptf.config import Config
from hcptf.errors import InvalidValueError
from hcptf.settings import Settings


def make_command(flags, handler=None, **kwargs):
    seen = {}

    def record(inv):
        seen.update(inv.params)

    spec = CommandSpec(name="thing do", synopsis="Do a thing", handler=handler or record,
                       flags=flags, **kwargs)
    out, err = io.StringIO(), io.StringIO()
    meta = Meta(out=out, err=err, stdin=io.StringIO(), settings=Settings(), config=Config())
    return ApiCommand(spec, meta), seen, out, err


NAME = Flag(name="name", help="Name", aliases=["nm"])
COUNT = Flag(name="count", help="Count", kind=FlagKind.INT)
ENABLED = Flag(name="enabled", help="Enabled", kind=FlagKind.BOOL)
LOCKED = Flag(name="locked", help="Locked", kind=FlagKind.TRISTATE)
TAGS = Flag(name="tags", help="Tags", kind=FlagKind.LIST)
MODE = Flag(name="mode", help="Mode", kind=FlagKind.CHOICE, choices=["a", "b"])
WHEN = Flag(name="when", help="When", kind=FlagKind.DATE)


@pytest.mark.parametrize(
    "args",
    [["-name=x"], ["-name", "x"], ["--name=x"], ["--name", "x"], ["-nm=x"]],
)
def test_value_forms(args):
    command, seen, _, _ = make_command([NAME])
    assert command.run(args) == 0
    assert seen["name"] == "x"


def test_int_flag():
    command, seen, _, _ = make_command([COUNT])
    command.run(["-count=3"])
    assert seen["count"] == 3


def test_int_flag_rejects_text():
    command, _, _, err = make_command([COUNT])
    assert command.run(["-count=many"]) == 1
    assert "Usage: hcptf thing do" in err.getvalue()


@pytest.mark.parametrize(
    "args,expected",
    [([], False), (["-enabled"], True), (["-enabled=true"], True), (["-enabled=false"], False)],
)
def test_bool_flag(args, expected):
    command, seen, _, _ = make_command([ENABLED])
    command.run(args)
    assert seen["enabled"] is expected


@pytest.mark.parametrize(
    "args,expected",
    [([], None), (["-locked=true"], True), (["-locked=no"], False), (["-locked", "1"], True)],
)
def test_tristate_flag(args, expected):
    command, seen, _, _ = make_command([LOCKED])
    command.run(args)
    assert seen["locked"] is expected


def test_tristate_rejects_garbage():
    command, _, _, err = make_command([LOCKED])
    assert command.run(["-locked=maybe"]) == 1
    assert "expected true or false" in err.getvalue()


def test_list_flag_splits_on_commas():
    command, seen, _, _ = make_command([TAGS])
    command.run(["-tags=a, b,,c"])
    assert seen["tags"] == ["a", "b", "c"]


def test_choice_flag():
    command, seen, _, err = make_command([MODE])
    command.run(["-mode=b"])
    assert seen["mode"] == "b"
    assert command.run(["-mode=z"]) == 1
    assert "expected a, b" in err.getvalue()


def test_date_flag():
    command, seen, _, err = make_command([WHEN])
    command.run(["-when=2025-01-02T03:04:05Z"])
    assert seen["when"] == "2025-01-02T03:04:05Z"
    assert command.run(["-when=yesterday"]) == 1


def test_unknown_flag_fails_with_help():
    command, _, _, err = make_command([NAME])
    assert command.run(["-bogus=1"]) == 1
    assert "Usage: hcptf thing do" in err.getvalue()


def test_required_flag():
    required = Flag(name="id", help="ID", required=True)
    command, _, _, err = make_command([required])
    assert command.run([]) == 1
    assert "-id flag is required" in err.getvalue()


def test_help_flag_short_circuits():
    command, seen, out, _ = make_command([Flag(name="id", help="ID", required=True)])
    assert command.run(["-h"]) == 0
    assert "Usage: hcptf thing do" in out.getvalue()
    assert seen == {}


def test_output_flag_is_added():
    command, seen, _, _ = make_command([])
    assert [f.name for f in command.flags] == ["output"]
    command.run(["-output=json"])
    assert seen["output"] == "json"


def test_output_flag_rejects_unknown_format():
    command, _, _, err = make_command([])
    assert command.run(["-output=yaml"]) == 1
    assert "expected table, json" in err.getvalue()


def test_confirmation_declined():
    calls = []
    command, _, out, _ = make_command(
        [NAME], handler=calls.append, confirm="Delete {name}? (yes/no): ", output=False
    )
    command.meta.stdin = io.StringIO("no\n")
    assert command.run(["-name=x"]) == 0
    assert calls == []
    assert "Delete x? (yes/no): " in out.getvalue()
    assert "Deletion cancelled" in out.getvalue()


def test_confirmation_accepted():
    calls = []
    command, _, _, _ = make_command([NAME], handler=calls.append, confirm="Delete {name}? ")
    command.meta.stdin = io.StringIO("yes\n")
    assert command.run(["-name=x"]) == 0
    assert len(calls) == 1


def test_force_skips_confirmation():
    calls = []
    command, _, out, _ = make_command([NAME], handler=calls.append, confirm="Delete {name}? ")
    assert command.run(["-name=x", "-force"]) == 0
    assert len(calls) == 1
    assert "Delete" not in out.getvalue()


def test_handler_exit_code_is_returned():
    command, _, _, _ = make_command([], handler=lambda inv: 3)
    assert command.run([]) == 3


def test_flag_name_validation():
    with pytest.raises(ValueError):
        Flag(name="bad name", help="x")


def test_invalid_value_error_message():
    error = InvalidValueError("mode", "z", "a, b")
    assert error.message == "invalid value 'z' for -mode: expected a, b"


def test_render_help_sections():
    text = render_help("thing", "Things.", sections=[("Subcommands", [("do", "Do it")])],
                       examples=["hcptf thing do"])
    assert text.startswith("Usage: hcptf thing [options]")
    assert "Subcommands:" in text
    assert "Examples:" in text
