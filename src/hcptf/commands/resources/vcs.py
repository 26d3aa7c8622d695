"""VCS connection commands: OAuth clients and tokens, GitHub App installations,
VCS events and SSH keys."""

from __future__ import annotations

from typing import Any, Dict

from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    choice_flag,
    collect,
    create_command,
    date_flag,
    delete_command,
    id_flag,
    list_command,
    read_command,
    resource,
    show_items,
    text_flag,
    tristate_flag,
    update_command,
)

SERVICE_PROVIDERS = [
    "github",
    "github_enterprise",
    "gitlab_hosted",
    "gitlab_community_edition",
    "gitlab_enterprise_edition",
    "ado_server",
    "ado_services",
    "bitbucket_hosted",
    "bitbucket_data_center",
]
CLIENT_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Service Provider", "service-provider"),
    ("HTTP URL", "http-url"),
    ("API URL", "api-url"),
    ("Organization Scoped", "organization-scoped"),
    ("Callback URL", "callback-url"),
    ("Created At", "created-at"),
]
TOKEN_FIELDS = [
    ("ID", "id"),
    ("Service Provider User", "service-provider-user"),
    ("Has SSH Key", "has-ssh-key"),
    ("Created At", "created-at"),
    ("OAuth Client", "rel:oauth-client"),
]
EVENT_FIELDS = [
    ("ID", "id"),
    ("Level", "level"),
    ("Message", "message"),
    ("Suggested Action", "suggested-action"),
    ("Created At", "created-at"),
]
SSH_KEY_FIELDS = [("ID", "id"), ("Name", "name")]
CLIENT_ATTRIBUTES = {
    "name": "name",
    "key": "key",
    "secret": "secret",
    "rsa-public-key": "rsa-public-key",
    "oauth-token-string": "oauth-token-string",
    "organization-scoped": "organization-scoped",
}


def _client_body(inv: Invocation) -> Dict[str, Any]:
    attrs = collect(inv, dict(CLIENT_ATTRIBUTES, **{"private-key": "private-key"}))
    attrs.update({
        "service-provider": inv["service-provider"],
        "http-url": inv["http-url"],
        "api-url": inv["api-url"],
    })
    return resource("oauth-clients", attrs)


def oauthtoken_list(inv: Invocation) -> None:
    if inv.require_one("oauth-client-id", "organization") == "oauth-client-id":
        client_ids = [inv["oauth-client-id"]]
    else:
        doc = inv.client.get(inv.path("/organizations/{organization}/oauth-clients"))
        client_ids = [c["id"] for c in (doc or {}).get("data") or []]
    tokens = []
    for client_id in client_ids:
        doc = inv.client.get(f"/oauth-clients/{client_id}/oauth-tokens")
        tokens.extend((doc or {}).get("data") or [])
    show_items(inv, tokens, TOKEN_FIELDS, "No OAuth tokens found")


COMMANDS = [
    list_command(
        "oauthclient list",
        "List OAuth clients",
        "/organizations/{organization}/oauth-clients",
        [("ID", "id"), ("Name", "name"), ("Service Provider", "service-provider"),
         ("HTTP URL", "http-url")],
        flags=[ORG],
        empty="No OAuth clients found",
    ),
    create_command(
        "oauthclient create",
        "Create an OAuth client for a VCS provider",
        "/organizations/{organization}/oauth-clients",
        "oauth-clients",
        CLIENT_FIELDS,
        flags=[ORG,
               choice_flag("service-provider", "VCS provider (required)", SERVICE_PROVIDERS,
                           required=True),
               text_flag("name", "Display name for the OAuth client"),
               text_flag("http-url", "VCS provider HTTP URL", required=True),
               text_flag("api-url", "VCS provider API URL", required=True),
               text_flag("oauth-token-string", "OAuth token string from VCS provider"),
               text_flag("key", "OAuth client key"),
               text_flag("secret", "OAuth client secret"),
               text_flag("private-key", "SSH private key (required for Azure DevOps Server)"),
               text_flag("rsa-public-key", "RSA public key (required for Bitbucket Data Center)"),
               tristate_flag("organization-scoped", "Whether OAuth client is scoped to all projects")],
        body=_client_body,
        success="OAuth client created",
        examples=[
            "hcptf oauthclient create -org=my-org -service-provider=github "
            "-http-url=https://github.com -api-url=https://api.github.com -oauth-token-string=ghp_xxx",
        ],
    ),
    read_command(
        "oauthclient read",
        "Show OAuth client details",
        "/oauth-clients/{id}",
        CLIENT_FIELDS,
        flags=[id_flag("OAuth client")],
    ),
    update_command(
        "oauthclient update",
        "Update an OAuth client",
        "/oauth-clients/{id}",
        "oauth-clients",
        CLIENT_FIELDS,
        flags=[id_flag("OAuth client"),
               text_flag("name", "Display name for the OAuth client"),
               text_flag("key", "OAuth client key"),
               text_flag("secret", "OAuth client secret"),
               text_flag("rsa-public-key", "RSA public key"),
               text_flag("oauth-token-string", "New OAuth token string (for credential rotation)"),
               tristate_flag("organization-scoped", "Whether OAuth client is scoped to all projects")],
        attributes=CLIENT_ATTRIBUTES,
        success="OAuth client '{id}' updated",
    ),
    delete_command(
        "oauthclient delete",
        "Delete an OAuth client",
        "/oauth-clients/{id}",
        "OAuth client '{id}' deleted successfully",
        flags=[id_flag("OAuth client")],
        confirm="Are you sure you want to delete OAuth client '{id}'? (yes/no): ",
    ),
    CommandSpec(
        name="oauthtoken list",
        synopsis="List OAuth tokens",
        handler=oauthtoken_list,
        flags=[text_flag("oauth-client-id", "OAuth client ID"),
               text_flag("organization", "Organization name (lists tokens of every OAuth client)",
                         aliases=["org"])],
    ),
    read_command(
        "oauthtoken read",
        "Show OAuth token details",
        "/oauth-tokens/{id}",
        TOKEN_FIELDS,
        flags=[id_flag("OAuth token")],
    ),
    update_command(
        "oauthtoken update",
        "Update an OAuth token",
        "/oauth-tokens/{id}",
        "oauth-tokens",
        TOKEN_FIELDS,
        flags=[id_flag("OAuth token"),
               text_flag("ssh-key", "SSH private key content", required=True)],
        attributes={"ssh-key": "ssh-key"},
        success="OAuth token '{id}' updated",
    ),
    delete_command(
        "oauthtoken delete",
        "Delete an OAuth token",
        "/oauth-tokens/{id}",
        "OAuth token '{id}' deleted successfully",
        flags=[id_flag("OAuth token")],
        confirm="Are you sure you want to delete OAuth token '{id}'? (yes/no): ",
    ),
    list_command(
        "githubapp list",
        "List GitHub App installations",
        "/github-app/installations",
        [("ID", "id"), ("Name", "name"), ("Installation ID", "installation-id"),
         ("Installation Type", "installation-type")],
        flags=[text_flag("name", "Filter installations by name")],
        params={"name": "filter[name]"},
        empty="No GitHub App installations found",
    ),
    read_command(
        "githubapp read",
        "Show GitHub App installation details",
        "/github-app/installation/{id}",
        [("ID", "id"), ("Name", "name"), ("Installation ID", "installation-id"),
         ("Installation Type", "installation-type"), ("Installation URL", "installation-url")],
        flags=[id_flag("GitHub App installation")],
    ),
    list_command(
        "vcsevent list",
        "List VCS events for an organization",
        "/organizations/{organization}/vcs-events",
        [("ID", "id"), ("Level", "level"), ("Message", "message"), ("Created At", "created-at")],
        flags=[ORG,
               date_flag("from", "Start time (RFC3339 format in UTC, e.g., 2021-02-02T14:09:00Z)"),
               date_flag("to", "End time (RFC3339 format in UTC, e.g., 2021-02-12T14:09:59Z)"),
               text_flag("oauth-client", "Filter by OAuth client external ID"),
               choice_flag("level", "Filter by level: info or error", ["info", "error"])],
        params={"from": "filter[from]", "to": "filter[to]",
                "oauth-client": "filter[oauth_client_external_ids]", "level": "filter[levels]"},
        empty="No VCS events found",
    ),
    read_command(
        "vcsevent read",
        "Show VCS event details",
        "/vcs-events/{id}",
        EVENT_FIELDS,
        flags=[id_flag("VCS Event")],
    ),
    list_command(
        "sshkey list",
        "List SSH keys",
        "/organizations/{organization}/ssh-keys",
        SSH_KEY_FIELDS,
        flags=[ORG],
        empty="No SSH keys found",
    ),
    create_command(
        "sshkey create",
        "Create an SSH key",
        "/organizations/{organization}/ssh-keys",
        "ssh-keys",
        SSH_KEY_FIELDS,
        flags=[ORG,
               text_flag("name", "SSH key name", required=True),
               text_flag("value", "SSH private key content", required=True)],
        attributes={"name": "name", "value": "value"},
        success="SSH key '{name}' created",
    ),
    read_command(
        "sshkey read",
        "Show SSH key details",
        "/ssh-keys/{id}",
        SSH_KEY_FIELDS,
        flags=[id_flag("SSH key")],
    ),
    update_command(
        "sshkey update",
        "Update an SSH key",
        "/ssh-keys/{id}",
        "ssh-keys",
        SSH_KEY_FIELDS,
        flags=[id_flag("SSH key"), text_flag("name", "SSH key name", required=True)],
        attributes={"name": "name"},
        success="SSH key '{id}' updated",
    ),
    delete_command(
        "sshkey delete",
        "Delete an SSH key",
        "/ssh-keys/{id}",
        "SSH key '{id}' deleted successfully",
        flags=[id_flag("SSH key")],
        confirm="Are you sure you want to delete SSH key '{id}'? (yes/no): ",
    ),
]
