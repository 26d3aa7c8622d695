"""Command registry and command base types."""

from .base import ApiCommand, Command, CommandSpec, Flag, FlagKind, Meta, NamespaceCommand
from .coverage import resolve, validate
from .layout import expected_file_name, expected_module
from .registry import build_registry

__all__ = [
    "ApiCommand",
    "Command",
    "CommandSpec",
    "Flag",
    "FlagKind",
    "Meta",
    "NamespaceCommand",
    "build_registry",
    "expected_file_name",
    "expected_module",
    "resolve",
    "validate",
]
