"""Error handling for the hcptf CLI with friendly, actionable messages."""

from __future__ import annotations

import difflib
from typing import Iterable, List, Optional

import click


class HcptfError(click.ClickException):
    """Base class for all CLI-visible errors."""

    #: Emoji shown at the beginning of every error line
    emoji: str = "❌"

    #: Short, actionable suggestion shown after the main message.
    hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint

    @property
    def formatted_message(self) -> str:
        """
        Returns the final string written to the error stream.
        Includes:
        * emoji + "Error:" + main message (bold)
        * optional hint on a new line
        """
        lines = [f"{self.emoji}  {click.style('Error: ' + self.message, fg='red', bold=True)}"]
        if self.hint:
            lines.append(click.style(f"💡 {self.hint}", fg="yellow"))
        return "\n".join(lines)

    def show(self, file=None) -> None:
        click.echo(self.formatted_message, err=True, file=file)


class UnknownCommandError(HcptfError):
    """Raised when the command path does not match any registered command."""
    emoji = "🚫"

    def __init__(self, cmd: str, suggestions: Optional[List[str]] = None):
        if suggestions:
            hint = "Did you mean: " + ", ".join(f"hcptf {s}" for s in suggestions) + "?"
        else:
            hint = f"Run {click.style('hcptf -help', fg='cyan')} to see available commands."
        super().__init__(f"Unknown command '{cmd}'", hint)


class MissingParameterError(HcptfError):
    """Raised when a required flag is missing."""
    emoji = "⚠️"

    def __init__(self, flag: str, cmd: Optional[str] = None):
        hint = None
        if cmd:
            hint = f"See {click.style(f'hcptf {cmd} -help', fg='cyan')} for usage."
        super().__init__(f"-{flag} flag is required", hint)
        self.flag = flag


class InvalidValueError(HcptfError):
    """Raised when a flag carries a value outside its accepted set."""
    emoji = "⚠️"

    def __init__(self, flag: str, value: str, expected: str):
        super().__init__(f"invalid value {value!r} for -{flag}: expected {expected}")
        self.flag = flag


class ConfigError(HcptfError):
    """Raised when there's a configuration problem."""
    emoji = "🔧"

    def __init__(self, details: str):
        hint = (
            f"Run {click.style('hcptf login', fg='cyan')} or set "
            f"{click.style('TFE_TOKEN', fg='cyan')}."
        )
        super().__init__(f"Configuration problem: {details}", hint)


class NetworkError(HcptfError):
    """Raised when the API cannot be reached."""
    emoji = "🌐"

    def __init__(self, details: str):
        hint = (
            "Verify you are online. If behind a proxy, set the environment variable "
            f"{click.style('HTTPS_PROXY', fg='cyan')}."
        )
        super().__init__(f"Network error: {details}", hint)


class AuthenticationError(HcptfError):
    """Raised when the API rejects the token."""
    emoji = "🔐"

    def __init__(self, details: str):
        hint = f"Check your token with {click.style('hcptf whoami', fg='cyan')} or log in again."
        super().__init__(f"Authentication failed: {details}", hint)


class ResourceNotFoundError(HcptfError):
    """Raised when a requested resource cannot be found."""
    emoji = "🔍"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", "Double-check the name or ID.")


class ApiError(HcptfError):
    """Raised for any other unsuccessful API response."""
    emoji = "💥"

    def __init__(self, status: int, detail: str):
        super().__init__(f"API request failed (HTTP {status}): {detail}")
        self.status = status


class AmbiguousCommandError(HcptfError):
    """Raised when a namespace is invoked without a verb and several get verbs fit."""
    emoji = "🤔"

    def __init__(self, namespace: str, verbs: List[str]):
        hint = f"For example: hcptf {namespace} {verbs[0]} -help"
        super().__init__(f'ambiguous operation for "{namespace}"; specify one of: {", ".join(verbs)}', hint)
        self.namespace = namespace
        self.verbs = verbs


def suggest_commands(invalid_cmd: str, known: Iterable[str], limit: int = 3) -> List[str]:
    """Return the registered command names closest to the user input."""
    return difflib.get_close_matches(invalid_cmd, list(known), n=limit, cutoff=0.6)