"""Hold Your Own Key (HYOK) configurations and customer key versions."""

from __future__ import annotations

from typing import Any, Dict

from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    choice_flag,
    collect,
    create_command,
    delete_command,
    id_flag,
    list_command,
    read_command,
    relation,
    resource,
    text_flag,
    tristate_flag,
    update_command,
)

OIDC_TYPES = {
    "aws": "aws-oidc-configurations",
    "azure": "azure-oidc-configurations",
    "gcp": "gcp-oidc-configurations",
    "vault": "vault-oidc-configurations",
}
HYOK_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("KEK ID", "kek-id"),
    ("Primary", "primary"),
    ("Status", "status"),
    ("Error", "error"),
    ("Agent Pool", "rel:agent-pool"),
    ("OIDC Configuration", "rel:oidc-configuration"),
]
KEY_FIELDS = [
    ("ID", "id"),
    ("Key Version", "key-version"),
    ("Status", "status"),
    ("Workspaces Secured", "workspaces-secured"),
    ("Error", "error"),
    ("Created At", "created-at"),
]
KMS_OPTIONS = {"key-region": "key_region", "key-location": "key_location", "key-ring-id": "key_ring_id"}
KMS_FLAGS = [
    text_flag("key-region", "AWS KMS key region (for AWS KMS only)"),
    text_flag("key-location", "GCP key location (for GCP Cloud KMS only)"),
    text_flag("key-ring-id", "GCP key ring ID (for GCP Cloud KMS only)"),
]


def _attributes(inv: Invocation) -> Dict[str, Any]:
    attrs = collect(inv, {"name": "name", "kek-id": "kek-id", "primary": "primary"})
    kms = collect(inv, KMS_OPTIONS)
    if kms:
        attrs["kms-options"] = kms
    return attrs


def _create_body(inv: Invocation) -> Dict[str, Any]:
    return resource("hyok-configurations", _attributes(inv), {
        "agent-pool": relation("agent-pools", inv["agent-pool-id"]),
        "oidc-configuration": relation(OIDC_TYPES[inv["oidc-type"]], inv["oidc-config-id"]),
    })


def key_revoke(inv: Invocation) -> None:
    inv.client.post(inv.path("/hyok-customer-key-versions/{id}/actions/revoke"))
    inv.message(f"HYOK customer key version '{inv['id']}' revoked")


COMMANDS = [
    list_command(
        "hyok list",
        "List HYOK configurations",
        "/organizations/{organization}/hyok-configurations",
        [("ID", "id"), ("Name", "name"), ("Primary", "primary"), ("Status", "status")],
        flags=[ORG],
        empty="No HYOK configurations found",
    ),
    create_command(
        "hyok create",
        "Create a HYOK configuration",
        "/organizations/{organization}/hyok-configurations",
        "hyok-configurations",
        HYOK_FIELDS,
        flags=[ORG,
               text_flag("name", "HYOK configuration name", required=True),
               text_flag("kek-id", "Key Encryption Key ID from your KMS", required=True),
               text_flag("agent-pool-id", "Agent pool ID", required=True),
               text_flag("oidc-config-id", "OIDC configuration ID", required=True),
               choice_flag("oidc-type", "OIDC type: aws, azure, gcp, or vault (required)",
                           list(OIDC_TYPES), required=True)] + KMS_FLAGS,
        body=_create_body,
        success="HYOK configuration '{name}' created",
    ),
    read_command(
        "hyok read",
        "Show HYOK configuration details",
        "/hyok-configurations/{id}",
        HYOK_FIELDS,
        flags=[id_flag("HYOK configuration")],
    ),
    update_command(
        "hyok update",
        "Update a HYOK configuration",
        "/hyok-configurations/{id}",
        "hyok-configurations",
        HYOK_FIELDS,
        flags=[id_flag("HYOK configuration"),
               text_flag("name", "HYOK configuration name"),
               text_flag("kek-id", "Key Encryption Key ID from your KMS"),
               tristate_flag("primary", "Set as primary HYOK configuration")] + KMS_FLAGS,
        body=lambda inv: resource("hyok-configurations", _attributes(inv)),
        success="HYOK configuration '{id}' updated",
    ),
    delete_command(
        "hyok delete",
        "Delete a HYOK configuration",
        "/hyok-configurations/{id}",
        "HYOK configuration '{id}' deleted successfully",
        flags=[id_flag("HYOK configuration")],
        confirm="Are you sure you want to delete HYOK configuration '{id}'? (yes/no): ",
    ),
    create_command(
        "hyokkey create",
        "Create a HYOK customer key version",
        "/hyok-configurations/{hyok_config_id}/hyok-customer-key-versions",
        "hyok-customer-key-versions",
        KEY_FIELDS,
        flags=[text_flag("hyok-config-id", "HYOK configuration ID", required=True)],
        body=lambda inv: resource("hyok-customer-key-versions", {}),
        success="HYOK customer key version created",
    ),
    read_command(
        "hyokkey read",
        "Show HYOK customer key version details",
        "/hyok-customer-key-versions/{id}",
        KEY_FIELDS,
        flags=[id_flag("HYOK customer key version")],
    ),
    CommandSpec(
        name="hyokkey delete",
        synopsis="Revoke a HYOK customer key version",
        handler=key_revoke,
        flags=[id_flag("HYOK customer key version")],
        output=False,
        confirm="Are you sure you want to revoke HYOK customer key version '{id}'? (yes/no): ",
    ),
]
