"""Account and user commands."""

from __future__ import annotations

from ...errors import HcptfError
from ..base import CommandSpec, Invocation
from ..helpers import (
    data_of,
    date_flag,
    delete_command,
    id_flag,
    read_command,
    resource,
    show_item,
    show_items,
    text_flag,
)

ACCOUNT_FIELDS = [
    ("ID", "id"),
    ("Username", "username"),
    ("Email", "email"),
    ("Unconfirmed Email", "unconfirmed-email"),
    ("Two Factor", "two-factor.enabled"),
    ("Is Service Account", "is-service-account"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Description", "description"),
    ("Created At", "created-at"),
    ("Last Used At", "last-used-at"),
    ("Expired At", "expired-at"),
]


def account_create(inv: Invocation) -> None:
    client = inv.client_with_token("")
    doc = client.post("/account/create", json=resource("users", {
        "email": inv["email"],
        "username": inv["username"],
        "password": inv["password"],
    }))
    inv.notice("Account created successfully")
    show_item(inv, data_of(doc), ACCOUNT_FIELDS[:3])


def account_update(inv: Invocation) -> None:
    if inv.provided("new-password"):
        if not inv.provided("password"):
            raise HcptfError("-password is required to change the password")
        inv.client.patch("/account/password", json=resource("users", {
            "current_password": inv["password"],
            "password": inv["new-password"],
            "password_confirmation": inv["new-password"],
        }))
        inv.notice("Password updated successfully")

    attrs = {}
    for flag in ("email", "username"):
        if inv.provided(flag):
            attrs[flag] = inv[flag]
    if not attrs:
        if not inv.provided("new-password"):
            inv.require_one("email", "username", "new-password")
        return
    doc = inv.client.patch("/account/update", json=resource("users", attrs))
    inv.notice("Account updated successfully")
    show_item(inv, data_of(doc), ACCOUNT_FIELDS)


def user_token_create(inv: Invocation) -> None:
    attrs = {"description": inv["description"]}
    if inv.provided("expired-at"):
        attrs["expired-at"] = inv["expired-at"]
    user = data_of(inv.client.get("/account/details"))
    doc = inv.client.post(
        f"/users/{user.get('id')}/authentication-tokens",
        json=resource("authentication-tokens", attrs),
    )
    inv.notice("User token created. Store it securely, it is only shown once.")
    show_item(inv, data_of(doc), TOKEN_FIELDS + [("Token", "token")])


def user_token_list(inv: Invocation) -> None:
    user = data_of(inv.client.get("/account/details"))
    doc = inv.client.get(f"/users/{user.get('id')}/authentication-tokens")
    show_items(inv, list((doc or {}).get("data") or []), TOKEN_FIELDS, "No user tokens found")


COMMANDS = [
    CommandSpec(
        name="account create",
        synopsis="Create a new user account",
        handler=account_create,
        flags=[text_flag("email", "Email address", required=True),
               text_flag("username", "Username", required=True),
               text_flag("password", "Password", required=True)],
    ),
    read_command(
        "account show",
        "Show the current account",
        "/account/details",
        ACCOUNT_FIELDS,
    ),
    CommandSpec(
        name="account update",
        synopsis="Update the current account",
        handler=account_update,
        flags=[text_flag("email", "New email address"),
               text_flag("username", "New username"),
               text_flag("password", "Current password (required for changes)"),
               text_flag("new-password", "New password")],
    ),
    read_command(
        "user read",
        "Show user details",
        "/users/{id}",
        ACCOUNT_FIELDS[:3] + [("Avatar URL", "avatar-url"), ("Is Service Account", "is-service-account")],
        flags=[id_flag("User")],
    ),
    CommandSpec(
        name="user token list",
        synopsis="List tokens for the current user",
        handler=user_token_list,
    ),
    CommandSpec(
        name="user token create",
        synopsis="Create a token for the current user",
        handler=user_token_create,
        flags=[text_flag("description", "Token description", required=True),
               date_flag("expired-at", "Expiration date in ISO 8601 format (e.g., 2024-12-31T23:59:59Z)")],
    ),
    read_command(
        "user token read",
        "Show user token details",
        "/authentication-tokens/{id}",
        TOKEN_FIELDS,
        flags=[id_flag("User token")],
    ),
    delete_command(
        "user token delete",
        "Delete a user token",
        "/authentication-tokens/{id}",
        "User token '{id}' deleted successfully",
        flags=[id_flag("User token")],
        confirm="Are you sure you want to delete user token '{id}'? (yes/no): ",
    ),
]
