"""Authentication and version commands."""

from __future__ import annotations

import logging

import click

from ... import get_version
from ...config import remove_credential, save_credential, terraform_credentials_path
from ...errors import AuthenticationError, ConfigError, HcptfError
from ..base import CommandSpec, Invocation
from ..helpers import bool_flag, data_of, text_flag

logger = logging.getLogger(__name__)

DEFAULT_HOSTNAME = "app.terraform.io"


def version(inv: Invocation) -> None:
    inv.message(f"hcptf v{get_version()}")


def _read_token(inv: Invocation) -> str:
    stdin = inv.meta.stdin
    if getattr(stdin, "isatty", lambda: False)():
        return click.prompt("Enter your API token", hide_input=True, default="", show_default=False)
    inv.meta.out.write("Enter your API token: ")
    inv.meta.out.flush()
    return stdin.readline().strip()


def login(inv: Invocation) -> None:
    hostname = inv["hostname"]
    if inv.get("show_token"):
        token = inv.config.credentials.get(hostname)
        if not token:
            raise ConfigError(f"no token found for {hostname}. Run 'hcptf login' first")
        inv.message(token)
        return

    inv.message(f"Authenticating to {hostname}\n")
    inv.message(f"This command will store an API token in {terraform_credentials_path()}")
    inv.message("The token will be shared with the Terraform CLI.\n")
    inv.message("Generate a token at:")
    inv.message(f"  https://{hostname}/app/settings/tokens\n")

    token = _read_token(inv)
    if not token:
        raise HcptfError("token cannot be empty")

    inv.message("Validating token...")
    client = inv.client_with_token(token, address=f"https://{hostname}")
    try:
        doc = client.get("/account/details")
    except AuthenticationError as e:
        raise AuthenticationError(f"token validation failed for {hostname}") from e
    username = (data_of(doc).get("attributes") or {}).get("username")
    path = save_credential(hostname, token)
    logger.info("Stored credentials for %s", hostname)
    inv.message("")
    inv.message(f"Success! Logged in as {username}." if username else "Success! Credentials saved.")
    inv.message(f"Token stored in {path}")


def logout(inv: Invocation) -> None:
    hostname = inv.get("hostname") or inv.settings.hostname
    if remove_credential(hostname):
        inv.message(f"Removed credentials for {hostname}")
    else:
        inv.message(f"No credentials found for {hostname}")


def whoami(inv: Invocation) -> None:
    item = data_of(inv.client.get("/account/details"))
    attrs = item.get("attributes") or {}
    inv.record({
        "Hostname": inv.settings.hostname,
        "ID": item.get("id"),
        "Username": attrs.get("username"),
        "Email": attrs.get("email"),
        "Two Factor": (attrs.get("two-factor") or {}).get("enabled"),
    })


COMMANDS = [
    CommandSpec(
        name="version",
        synopsis="Show the hcptf version",
        handler=version,
        output=False,
    ),
    CommandSpec(
        name="login",
        synopsis="Store an API token for HCP Terraform",
        handler=login,
        flags=[text_flag("hostname", "HCP Terraform hostname", default=DEFAULT_HOSTNAME),
               bool_flag("show-token", "Show the stored token instead of logging in")],
        output=False,
        description=(
            "Prompt for an API token, validate it against the account details "
            "endpoint and store it in the Terraform CLI credentials file."
        ),
        examples=["hcptf login", "hcptf login -hostname=tfe.example.com"],
    ),
    CommandSpec(
        name="logout",
        synopsis="Remove stored credentials",
        handler=logout,
        flags=[text_flag("hostname", "Hostname to log out from (defaults to the configured address)")],
        output=False,
    ),
    CommandSpec(
        name="whoami",
        synopsis="Show the authenticated user",
        handler=whoami,
    ),
]
