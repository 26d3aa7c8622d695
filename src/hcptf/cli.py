"""hcptf entry point.

``main`` returns an exit code instead of exiting so it can be driven from
tests with in-memory streams; ``run`` is the console script.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Mapping, Optional, Sequence, TextIO

import httpx
from pydantic import ValidationError

from . import get_version
from .commands.base import HELP_FLAGS, Meta, render_help
from .commands.registry import CommandFactory, build_registry
from .dispatch import dispatch
from .errors import ConfigError
from .logging_config import configure_logging
from .router import Router
from .settings import Settings

logger = logging.getLogger(__name__)

VERSION_FLAGS = ("-v", "-version", "--version")


def top_level_help(registry: Mapping[str, CommandFactory]) -> str:
    rows = []
    for name in sorted(registry):
        if " " in name or ":" in name:
            continue
        rows.append((name, registry[name]().synopsis()))
    return render_help(
        "",
        "Command-line client for the HCP Terraform and Terraform Enterprise API.",
        args="<command> [args]",
        sections=[("Available commands", rows)],
        examples=[
            "hcptf workspace list -org=my-org",
            "hcptf my-org my-workspace runs",
            "hcptf run show -id=run-abc123 -output=json",
        ],
    )


def main(
    argv: Optional[Sequence[str]] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    stdin: Optional[TextIO] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    args: List[str] = list(sys.argv[1:] if argv is None else argv)

    try:
        settings = Settings()
    except ValidationError as e:
        ConfigError(str(e)).show(file=err)
        return 1
    configure_logging(settings.log_level, settings.log_format, stream=err)

    meta = Meta(out=out, err=err, stdin=stdin or sys.stdin, settings=settings,
                transport=transport)
    registry = build_registry(meta)

    if not args or args[0] in HELP_FLAGS:
        out.write(top_level_help(registry) + "\n")
        return 0
    if args[0] in VERSION_FLAGS:
        out.write(f"hcptf v{get_version()}\n")
        return 0

    args = Router(registry).translate_args(args)
    logger.debug("Arguments after routing: %r", args)
    return dispatch(args, registry, err)


def run() -> None:
    sys.exit(main())
