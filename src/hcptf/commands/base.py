"""Command base types for hcptf.

Every registered name maps to a zero-argument factory producing a
:class:`Command`. API commands are described declaratively with a
:class:`CommandSpec`; :class:`ApiCommand` turns a spec into a runnable
command by building a click parser for its flags, validating required
parameters and handing an :class:`Invocation` to the spec's handler.
"""

from __future__ import annotations

import logging
import string
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO, Tuple
from urllib.parse import quote

import click
import httpx
from pydantic import BaseModel, Field, field_validator

from ..client import PublicRegistryClient, TFEClient
from ..config import OUTPUT_FORMATS, Config
from ..errors import (
    ApiError,
    HcptfError,
    InvalidValueError,
    MissingParameterError,
    UnknownCommandError,
    suggest_commands,
)
from ..output import Formatter
from ..settings import Settings

logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "-help", "--help")
TRUE_VALUES = ("true", "1", "t", "yes")
FALSE_VALUES = ("false", "0", "f", "no")


class Command(ABC):
    """Capability set shared by every registered command."""

    @abstractmethod
    def run(self, args: List[str]) -> int:
        """Execute with the arguments following the command path."""

    @abstractmethod
    def help(self) -> str:
        """Long help text, starting with a Usage line."""

    @abstractmethod
    def synopsis(self) -> str:
        """One short phrase shown in command listings."""


CommandFactory = Callable[[], Command]


class FlagKind(str, Enum):
    """How a flag value is parsed and validated."""
    STRING = "string"
    BOOL = "bool"
    TRISTATE = "tristate"
    INT = "int"
    LIST = "list"
    CHOICE = "choice"
    DATE = "date"


class Flag(BaseModel):
    """A command-line flag, written as ``-name=value``, ``-name value`` or ``-name``."""

    name: str = Field(..., min_length=1)
    help: str = Field(..., min_length=1)
    kind: FlagKind = FlagKind.STRING
    aliases: List[str] = Field(default_factory=list)
    required: bool = False
    default: Any = None
    choices: List[str] = Field(default_factory=list)
    metavar: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.replace("-", "").isalnum():
            raise ValueError("Flag name must contain only alphanumeric characters and hyphens")
        return v

    @property
    def dest(self) -> str:
        return dest(self.name)

    @property
    def names(self) -> List[str]:
        return [self.name, *self.aliases]

    def usage(self) -> str:
        names = [f"-{n}" for n in self.names]
        if self.kind != FlagKind.BOOL:
            if self.kind == FlagKind.CHOICE and self.choices:
                metavar = "|".join(self.choices)
            else:
                metavar = self.metavar or "value"
            names[0] += f"=<{metavar}>"
        return ", ".join(names)

    def describe(self) -> str:
        text = self.help
        if self.default not in (None, "", False) and "default" not in text.lower():
            text += f" (default: {self.default})"
        return text

    def to_option(self) -> click.Option:
        decls = [self.dest] + [f"-{n}" for n in self.names] + [f"--{self.name}"]
        if self.kind == FlagKind.BOOL:
            return click.Option(decls, is_flag=True, flag_value=True, default=bool(self.default))
        if self.kind == FlagKind.INT:
            return click.Option(decls, type=click.INT, default=self.default)
        return click.Option(decls, type=click.STRING, default=self.default)

    def convert(self, value: Any) -> Any:
        """Validate and normalize a parsed value."""
        if self.kind == FlagKind.TRISTATE:
            if value in (None, ""):
                return None
            return parse_bool(self.name, value)
        if self.kind == FlagKind.LIST:
            if value is None:
                return None
            return [v.strip() for v in str(value).split(",") if v.strip()]
        if self.kind == FlagKind.CHOICE:
            if value in (None, ""):
                return None
            if value not in self.choices:
                raise InvalidValueError(self.name, value, ", ".join(self.choices))
            return value
        if self.kind == FlagKind.DATE:
            if value in (None, ""):
                return None
            try:
                datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            except ValueError:
                raise InvalidValueError(self.name, value, "an ISO 8601 timestamp") from None
            return value
        return value


def dest(name: str) -> str:
    return name.replace("-", "_")


def parse_bool(flag: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise InvalidValueError(flag, str(value), "true or false")


Handler = Callable[["Invocation"], Optional[int]]


@dataclass
class CommandSpec:
    """Declarative description of one API command."""

    name: str
    synopsis: str
    handler: Handler
    flags: List[Flag] = field(default_factory=list)
    description: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    #: Adds the uniform ``-output=table|json`` flag.
    output: bool = True
    #: Confirmation prompt (formatted with flag values). Delete commands always take ``-force``.
    confirm: Optional[str] = None

    def all_flags(self) -> List[Flag]:
        flags = list(self.flags)
        present = {f.name for f in flags}
        if self.output and "output" not in present:
            flags.append(
                Flag(
                    name="output",
                    help="Output format: table or json",
                    kind=FlagKind.CHOICE,
                    choices=list(OUTPUT_FORMATS),
                )
            )
        if (self.confirm or self.name.endswith(" delete")) and "force" not in present:
            flags.append(Flag(name="force", kind=FlagKind.BOOL, help="Force delete without confirmation"))
        return flags


@dataclass
class Meta:
    """Process-level collaborators shared by the commands of one registry."""

    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)
    stdin: TextIO = field(default_factory=lambda: sys.stdin)
    settings: Optional[Settings] = None
    config: Optional[Config] = None
    client_factory: Optional[Callable[[], TFEClient]] = None
    registry_client_factory: Optional[Callable[[], PublicRegistryClient]] = None
    #: Shared by every client built for this registry (tests inject a MockTransport).
    transport: Optional[httpx.BaseTransport] = None


def render_help(
    path: str,
    summary: str,
    flags: Sequence[Flag] = (),
    examples: Sequence[str] = (),
    args: str = "[options]",
    sections: Sequence[Tuple[str, List[Tuple[str, str]]]] = (),
) -> str:
    formatter = click.HelpFormatter(width=100)
    formatter.write_usage(f"hcptf {path}".rstrip(), args)
    formatter.write_paragraph()
    with formatter.indentation():
        formatter.write_text(summary)
    if flags:
        with formatter.section("Options"):
            formatter.write_dl([(f.usage(), f.describe()) for f in flags])
    for title, rows in sections:
        if rows:
            with formatter.section(title):
                formatter.write_dl(rows)
    if examples:
        with formatter.section("Examples"):
            for example in examples:
                formatter.write(f"{'':>{formatter.current_indent}}{example}\n")
    return formatter.getvalue().rstrip()


class ApiCommand(Command):
    """Runs a :class:`CommandSpec`."""

    def __init__(self, spec: CommandSpec, meta: Optional[Meta] = None) -> None:
        self.spec = spec
        self.meta = meta or Meta()
        self.flags = spec.all_flags()

    @property
    def name(self) -> str:
        return self.spec.name

    def synopsis(self) -> str:
        return self.spec.synopsis

    def help(self) -> str:
        return render_help(
            self.name,
            self.spec.description or f"{self.spec.synopsis}.",
            self.flags,
            self.spec.examples,
        )

    def _click_command(self) -> click.Command:
        return click.Command(
            self.name,
            params=[f.to_option() for f in self.flags],
            add_help_option=False,
        )

    def _rewrite_bool_values(self, args: Sequence[str]) -> Tuple[List[str], Dict[str, bool]]:
        """Turn ``-flag=true|false`` into click-friendly switches."""
        by_name = {}
        for flag in self.flags:
            if flag.kind == FlagKind.BOOL:
                for n in flag.names:
                    by_name[n] = flag
        rewritten: List[str] = []
        overrides: Dict[str, bool] = {}
        for arg in args:
            if arg.startswith("-") and "=" in arg:
                key, value = arg.lstrip("-").split("=", 1)
                flag = by_name.get(key)
                if flag is not None:
                    if parse_bool(flag.name, value):
                        rewritten.append(f"-{key}")
                    else:
                        overrides[flag.dest] = False
                    continue
            rewritten.append(arg)
        return rewritten, overrides

    def parse(self, args: Sequence[str]) -> Dict[str, Any]:
        args, overrides = self._rewrite_bool_values(args)
        ctx = self._click_command().make_context(f"hcptf {self.name}", list(args))
        params = dict(ctx.params)
        params.update(overrides)
        for flag in self.flags:
            params[flag.dest] = flag.convert(params.get(flag.dest))
        return params

    def _fail(self, error: HcptfError, with_help: bool = False) -> int:
        error.show(file=self.meta.err)
        if with_help:
            self.meta.err.write(self.help() + "\n")
        return 1

    def run(self, args: List[str]) -> int:
        if any(a in HELP_FLAGS for a in args):
            self.meta.out.write(self.help() + "\n")
            return 0
        try:
            params = self.parse(args)
        except click.UsageError as e:
            return self._fail(HcptfError(e.format_message()), with_help=True)
        except HcptfError as e:
            return self._fail(e, with_help=True)

        inv = Invocation(self, params)
        try:
            inv.validate()
            if self.spec.confirm and not params.get("force"):
                prompt = self.spec.confirm.format(**params)
                if not inv.confirm(prompt):
                    inv.message("Deletion cancelled")
                    return 0
            logger.debug("Running %s", self.name)
            result = self.spec.handler(inv)
            return 0 if result is None else int(result)
        except (MissingParameterError, InvalidValueError) as e:
            return self._fail(e, with_help=True)
        except HcptfError as e:
            return self._fail(e)
        finally:
            inv.close()


class NamespaceCommand(Command):
    """Help-only stub for a namespace such as ``team access``."""

    def __init__(
        self,
        name: str,
        synopsis: str,
        children: Callable[[], List[Tuple[str, str]]],
        meta: Optional[Meta] = None,
    ) -> None:
        self.name = name
        self._synopsis = synopsis
        self._children = children
        self.meta = meta or Meta()

    def synopsis(self) -> str:
        return self._synopsis

    def help(self) -> str:
        rows = [(child.rsplit(" ", 1)[-1], syn) for child, syn in self._children()]
        return render_help(
            self.name,
            f"{self._synopsis}.",
            args="<subcommand> [options]",
            sections=[("Subcommands", rows)],
        )

    def run(self, args: List[str]) -> int:
        positional = [a for a in args if not a.startswith("-")]
        if positional:
            attempted = f"{self.name} {positional[0]}"
            known = [child for child, _ in self._children()]
            UnknownCommandError(attempted, suggest_commands(attempted, known)).show(file=self.meta.err)
            return 1
        self.meta.out.write(self.help() + "\n")
        return 0


class Invocation:
    """Parsed flags plus lazily created collaborators for one command run."""

    def __init__(self, command: ApiCommand, params: Dict[str, Any]) -> None:
        self.command = command
        self.meta = command.meta
        self.params = params
        self._settings: Optional[Settings] = None
        self._config: Optional[Config] = None
        self._client: Optional[TFEClient] = None
        self._registry: Optional[PublicRegistryClient] = None
        self._formatter: Optional[Formatter] = None
        self._extra: List[TFEClient] = []

    # -- flag access -------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        value = self.params.get(dest(key))
        return default if value is None else value

    def __getitem__(self, key: str) -> Any:
        return self.params[dest(key)]

    def provided(self, key: str) -> bool:
        value = self.params.get(dest(key))
        return value is not None and value != ""

    def require(self, *keys: str) -> None:
        for key in keys:
            if not self.provided(key):
                raise MissingParameterError(key, self.command.name)

    def require_one(self, *keys: str) -> str:
        """Return the first provided key of an either/or group."""
        for key in keys:
            if self.provided(key):
                return key
        raise MissingParameterError(" or -".join(keys), self.command.name)

    def validate(self) -> None:
        flags = {f.dest: f for f in self.command.flags}
        org = flags.get("organization")
        if org is not None and not self.provided("organization"):
            default_org = self.config.default_organization
            if default_org:
                self.params["organization"] = default_org
        for flag in self.command.flags:
            if flag.required and not self.provided(flag.name):
                raise MissingParameterError(flag.name, self.command.name)

    # -- collaborators -----------------------------------------------------

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = self.meta.settings or Settings()
        return self._settings

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.meta.config or Config.load(self.settings)
        return self._config

    @property
    def client(self) -> TFEClient:
        if self._client is None:
            if self.meta.client_factory is not None:
                self._client = self.meta.client_factory()
            else:
                self._client = TFEClient.from_config(
                    self.settings, self.config, transport=self.meta.transport
                )
        return self._client

    @property
    def registry(self) -> PublicRegistryClient:
        if self._registry is None:
            if self.meta.registry_client_factory is not None:
                self._registry = self.meta.registry_client_factory()
            else:
                self._registry = PublicRegistryClient(transport=self.meta.transport)
        return self._registry

    def client_with_token(self, token: str, address: Optional[str] = None) -> TFEClient:
        """A client using an explicit token (may be empty) instead of stored credentials."""
        client = TFEClient(address or self.settings.address, token, transport=self.meta.transport)
        self._extra.append(client)
        return client

    @property
    def formatter(self) -> Formatter:
        if self._formatter is None:
            fmt = "table"
            if self.command.spec.output:
                fmt = self.get("output") or self.config.output_format
            self._formatter = Formatter(fmt, self.meta.out, self.meta.err)
        return self._formatter

    @property
    def is_json(self) -> bool:
        return self.formatter.is_json

    def close(self) -> None:
        for c in (self._client, self._registry, *self._extra):
            if c is not None:
                c.close()

    # -- lookups -----------------------------------------------------------

    def path(self, template: str) -> str:
        """Fill ``{placeholders}`` from flag values, URL-quoting each one."""
        values = {}
        for _, field_name, _, _ in string.Formatter().parse(template):
            if field_name and field_name not in values:
                values[field_name] = quote(str(self.resolve(field_name)), safe="")
        return template.format(**values)

    def resolve(self, key: str) -> Any:
        if key == "workspace_id" and not self.provided("workspace_id"):
            return self.workspace_id()
        if not self.provided(key):
            raise MissingParameterError(key.replace("_", "-"), self.command.name)
        return self.get(key)

    def workspace_id(self) -> str:
        """Workspace ID from -workspace-id, or looked up by organization and name."""
        if self.provided("workspace_id"):
            return self["workspace_id"]
        name_key = "workspace" if self.provided("workspace") else "name"
        self.require("organization", name_key)
        path = (
            f"/organizations/{quote(self['organization'], safe='')}"
            f"/workspaces/{quote(self[name_key], safe='')}"
        )
        data = (self.client.get(path) or {}).get("data") or {}
        if not data.get("id"):
            raise ApiError(200, f"no workspace ID in response to {path}")
        return data["id"]

    # -- output ------------------------------------------------------------

    def message(self, text: str) -> None:
        self.formatter.message(text)

    def notice(self, text: str) -> None:
        """A success line shown in table mode only."""
        if not self.is_json:
            self.formatter.message(text)

    def table(self, headers: Sequence[str], rows) -> None:
        self.formatter.table(headers, rows)

    def record(self, data: Dict[str, Any]) -> None:
        self.formatter.key_value(data)

    def confirm(self, prompt: str) -> bool:
        self.meta.out.write(prompt)
        self.meta.out.flush()
        answer = self.meta.stdin.readline()
        return answer.strip().lower() == "yes"
