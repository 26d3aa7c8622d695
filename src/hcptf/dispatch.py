"""Argument pre-processing and command lookup.

After URL-style routing (:mod:`hcptf.router`) the argument vector goes
through two rewrites before it is matched against the registry:

* an implicit get verb is inserted when a namespace is invoked without one
  (``workspace -org=x`` -> ``workspace list -org=x``);
* ``-f`` and ``-y`` become ``-force`` for delete commands.

The command is then found by longest registered path match.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, TextIO, Tuple

from .commands.base import HELP_FLAGS, Command
from .commands.registry import CommandFactory
from .errors import AmbiguousCommandError, HcptfError, UnknownCommandError, suggest_commands

logger = logging.getLogger(__name__)

GET_VERBS = ("list", "read", "show")
#: Order in which choices are offered when the verb is ambiguous.
GET_VERB_CHOICES = ("list", "show", "read")
IDENTITY_FLAGS = ("id", "name")
NON_COLLECTION_FLAGS = ("id", "name", "h", "help", "output", "o")
DELETE_CONFIRM_FLAGS = ("-f", "-y")


def has_help_flag(args: Sequence[str]) -> bool:
    return any(a in HELP_FLAGS for a in args)


def command_tokens(args: Sequence[str]) -> List[str]:
    """The positional words preceding the first flag."""
    tokens = []
    for arg in args:
        if arg.startswith("-"):
            break
        tokens.append(arg)
    return tokens


def flag_name(flag: str) -> str:
    return flag.lstrip("-").split("=", 1)[0]


def build_get_verb_index(names: Iterable[str]) -> Dict[str, FrozenSet[str]]:
    """Map each namespace to the get verbs (list/read/show) registered under it."""
    index: Dict[str, set] = {}
    for name in names:
        parts = name.split(" ")
        if len(parts) < 2 or parts[-1] not in GET_VERBS:
            continue
        index.setdefault(" ".join(parts[:-1]), set()).add(parts[-1])
    return {ns: frozenset(verbs) for ns, verbs in index.items()}


def has_identity_selector(flags: Sequence[str]) -> bool:
    for i, flag in enumerate(flags):
        if not flag.startswith("-"):
            continue
        key = flag.lstrip("-")
        if key.split("=", 1)[0] not in IDENTITY_FLAGS:
            continue
        if "=" in key:
            return True
        if i + 1 < len(flags) and not flags[i + 1].startswith("-"):
            return True
    return False


def has_collection_selector(flags: Sequence[str]) -> bool:
    return any(
        flag.startswith("-") and flag_name(flag) not in NON_COLLECTION_FLAGS for flag in flags
    )


def choose_get_verb(flags: Sequence[str], verbs: FrozenSet[str]) -> Optional[str]:
    """The verb implied by ``flags``, or None when it is ambiguous."""
    if len(verbs) == 1:
        return next(iter(verbs))
    if has_identity_selector(flags):
        if "read" in verbs:
            return "read"
        if "show" in verbs:
            return "show"
    if "list" in verbs and has_collection_selector(flags):
        return "list"
    return None


def infer_implicit_get_verb(args: List[str], index: Mapping[str, FrozenSet[str]]) -> List[str]:
    """Insert list/read/show after a bare namespace.

    Raises :class:`AmbiguousCommandError` when several verbs fit the flags.
    """
    if not args or not index or args[0].startswith("-") or has_help_flag(args):
        return args
    tokens = command_tokens(args)
    for length in range(len(tokens), 0, -1):
        namespace = " ".join(tokens[:length])
        if namespace in index:
            break
    else:
        return args
    if length < len(tokens):
        return args

    verbs = index[namespace]
    verb = choose_get_verb(args[length:], verbs)
    if verb is None:
        raise AmbiguousCommandError(namespace, [v for v in GET_VERB_CHOICES if v in verbs])
    logger.debug("Inferred %r for %r", verb, namespace)
    return args[:length] + [verb] + args[length:]


def longest_match(args: Sequence[str], names: Iterable[str]) -> Tuple[Optional[str], List[str]]:
    """The longest registered command path at the start of ``args`` and the remaining args."""
    known = set(names)
    tokens = command_tokens(args)
    for length in range(len(tokens), 0, -1):
        candidate = " ".join(tokens[:length])
        if candidate in known:
            return candidate, list(args[length:])
    return None, list(args)


def normalize_delete_flags(args: List[str], names: Iterable[str]) -> List[str]:
    """Rewrite ``-f``/``-y`` to ``-force`` when the command is a delete."""
    if not args or args[0].startswith("-") or has_help_flag(args):
        return args
    name, _ = longest_match(args, names)
    if name is None or not name.endswith(" delete"):
        return args
    first_flag = len(command_tokens(args))
    return args[:first_flag] + [
        "-force" if arg in DELETE_CONFIRM_FLAGS else arg for arg in args[first_flag:]
    ]


def dispatch(args: List[str], registry: Mapping[str, CommandFactory], err: TextIO) -> int:
    """Pre-process ``args``, find the command and run it."""
    try:
        args = infer_implicit_get_verb(args, build_get_verb_index(registry))
    except HcptfError as e:
        e.show(file=err)
        return 1
    args = normalize_delete_flags(args, registry)

    name, rest = longest_match(args, registry)
    if name is None:
        attempted = " ".join(command_tokens(args)) or args[0]
        UnknownCommandError(attempted, suggest_commands(attempted, registry)).show(file=err)
        return 1

    logger.debug("Dispatching %r with %d argument(s)", name, len(rest))
    try:
        command: Command = registry[name]()
    except HcptfError as e:
        e.show(file=err)
        return 1
    except Exception as e:
        logger.debug("Failed to construct %r", name, exc_info=True)
        HcptfError(f"failed to initialize command '{name}': {e}").show(file=err)
        return 1
    return command.run(rest)
