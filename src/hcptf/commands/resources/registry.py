"""Private registry commands: modules, providers (versions, platforms), GPG keys
and no-code modules."""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Any, Dict

from ...errors import InvalidValueError
from ..base import CommandSpec, Invocation
from ..helpers import (
    ORG,
    bool_flag,
    choice_flag,
    create_command,
    data_of,
    delete_command,
    id_flag,
    list_command,
    parse_payload,
    raw_command,
    read_command,
    relation,
    resource,
    show_item,
    show_items,
    text_flag,
)

REGISTRY_NAMES = ["private", "public"]
MODULE_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Provider", "provider"),
    ("Namespace", "namespace"),
    ("Registry Name", "registry-name"),
    ("Status", "status"),
    ("No Code", "no-code"),
    ("Created At", "created-at"),
]
MODULE_VERSION_FIELDS = [
    ("ID", "id"),
    ("Version", "version"),
    ("Status", "status"),
    ("Source", "source"),
    ("Upload URL", "links.upload"),
]
PROVIDER_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Namespace", "namespace"),
    ("Registry Name", "registry-name"),
    ("Created At", "created-at"),
]
PROVIDER_VERSION_FIELDS = [
    ("ID", "id"),
    ("Version", "version"),
    ("Key ID", "key-id"),
    ("Protocols", "protocols"),
    ("Shasums Uploaded", "shasums-uploaded"),
    ("Shasums Sig Uploaded", "shasums-sig-uploaded"),
]
PLATFORM_FIELDS = [
    ("ID", "id"),
    ("OS", "os"),
    ("Arch", "arch"),
    ("Filename", "filename"),
    ("Shasum", "shasum"),
    ("Provider Binary Uploaded", "provider-binary-uploaded"),
]
GPG_FIELDS = [
    ("ID", "id"),
    ("Key ID", "key-id"),
    ("Namespace", "namespace"),
    ("Source", "source"),
    ("Created At", "created-at"),
]
NOCODE_FIELDS = [
    ("ID", "id"),
    ("Enabled", "enabled"),
    ("Version Pin", "version-pin"),
    ("Registry Module", "rel:registry-module"),
]

MODULE_PATH = "/organizations/{organization}/registry-modules"
PRIVATE_MODULE = MODULE_PATH + "/private/{namespace}/{name}/{provider}"
PROVIDER_PATH = "/organizations/{organization}/registry-providers"
PRIVATE_PROVIDER = PROVIDER_PATH + "/{registry_name}/{namespace}/{name}"
PROVIDER_VERSION = PROVIDER_PATH + "/private/{namespace}/{name}/versions/{version}"
GPG_KEYS = "/api/registry/private/v2/gpg-keys"

NAMESPACE = text_flag("namespace", "Namespace (defaults to organization)")
MODULE_NAME = text_flag("name", "Module name", required=True)
PROVIDER_NAME = text_flag("name", "Provider name", required=True)
REGISTRY_NAME = choice_flag("registry-name", "Registry name: public or private", REGISTRY_NAMES,
                            default="private")
VERSION = text_flag("version", "Version string, e.g., 1.0.0", required=True)
GPG_NAMESPACE = text_flag("namespace", "Namespace (organization name)", required=True)
KEY_ID = text_flag("key-id", "GPG key ID", required=True)


def namespaced(spec: CommandSpec) -> CommandSpec:
    """Default ``-namespace`` to the organization before the handler runs."""
    handler = spec.handler

    @functools.wraps(handler)
    def wrapper(inv: Invocation):
        if not inv.provided("namespace"):
            inv.params["namespace"] = inv.get("organization")
        return handler(inv)

    spec.handler = wrapper
    return spec


def module_delete(inv: Invocation) -> None:
    path = inv.path(MODULE_PATH + "/private/{organization}/{name}")
    if inv.provided("provider"):
        path = inv.path(MODULE_PATH + "/private/{organization}/{name}/{provider}")
    inv.client.delete(path)
    inv.message(f"Registry module '{inv['name']}' deleted successfully")


def module_version_create(inv: Invocation) -> None:
    attrs = {"version": inv["version"]}
    if inv.provided("commit-sha"):
        attrs["commit-sha"] = inv["commit-sha"]
    doc = inv.client.post(
        inv.path(PRIVATE_MODULE + "/versions"),
        json=resource("registry-module-versions", attrs),
    )
    item = data_of(doc)
    inv.notice(f"Module version {inv['version']} created")
    show_item(inv, item, MODULE_VERSION_FIELDS)


def _gpg_url(inv: Invocation, suffix: str = "") -> str:
    return inv.client.address + GPG_KEYS + suffix


def gpgkey_list(inv: Invocation) -> None:
    doc = inv.client.get(_gpg_url(inv), params={"filter[namespace]": inv["namespace"]})
    show_items(inv, list((doc or {}).get("data") or []), GPG_FIELDS, "No GPG keys found")


def _read_armor(inv: Invocation) -> str:
    if inv.require_one("ascii-armor", "file") == "ascii-armor":
        return inv["ascii-armor"]
    path = Path(os.path.expanduser(inv["file"]))
    if not path.is_file():
        raise InvalidValueError("file", str(path), "an existing file")
    return path.read_text()


def gpgkey_create(inv: Invocation) -> None:
    doc = inv.client.post(
        _gpg_url(inv),
        json=resource("gpg-keys", {"namespace": inv["namespace"], "ascii-armor": _read_armor(inv)}),
    )
    inv.notice("GPG key created")
    show_item(inv, data_of(doc), GPG_FIELDS)


def _gpg_key_url(inv: Invocation) -> str:
    return _gpg_url(inv, inv.path("/{namespace}/{key_id}"))


def gpgkey_read(inv: Invocation) -> None:
    show_item(inv, data_of(inv.client.get(_gpg_key_url(inv))), GPG_FIELDS)


def gpgkey_update(inv: Invocation) -> None:
    doc = inv.client.patch(
        _gpg_key_url(inv),
        json=resource("gpg-keys", {"namespace": inv["new-namespace"]}),
    )
    inv.notice(f"GPG key '{inv['key-id']}' moved to namespace '{inv['new-namespace']}'")
    show_item(inv, data_of(doc), GPG_FIELDS)


def gpgkey_delete(inv: Invocation) -> None:
    inv.client.delete(_gpg_key_url(inv))
    inv.message(f"GPG key '{inv['key-id']}' deleted successfully")


def nocode_create(inv: Invocation) -> None:
    if inv.provided("payload"):
        document = parse_payload(inv, "payload")
    else:
        inv.require("module-id")
        attrs: Dict[str, Any] = {"enabled": True}
        if inv.provided("version-pin"):
            attrs["version-pin"] = inv["version-pin"]
        document = resource(
            "no-code-modules", attrs,
            {"registry-module": relation("registry-modules", inv["module-id"])},
        )
    doc = inv.client.post(inv.path("/organizations/{organization}/no-code-modules"), json=document)
    inv.formatter.api_response(doc)


COMMANDS = [
    list_command(
        "registry module list",
        "List private registry modules",
        MODULE_PATH,
        [("ID", "id"), ("Name", "name"), ("Provider", "provider"), ("Namespace", "namespace"),
         ("Status", "status")],
        flags=[ORG],
        empty="No registry modules found",
    ),
    create_command(
        "registry module create",
        "Create a private registry module",
        MODULE_PATH,
        "registry-modules",
        MODULE_FIELDS,
        flags=[ORG, MODULE_NAME,
               text_flag("provider", "Provider name", required=True),
               REGISTRY_NAME,
               bool_flag("no-code", "Enable no-code publishing workflow")],
        attributes={"name": "name", "provider": "provider", "registry-name": "registry-name",
                    "no-code": "no-code"},
        success="Registry module '{name}' created",
    ),
    namespaced(read_command(
        "registry module read",
        "Show private registry module details",
        MODULE_PATH + "/{registry_name}/{namespace}/{name}/{provider}",
        MODULE_FIELDS,
        flags=[ORG, MODULE_NAME, text_flag("provider", "Provider name", required=True),
               NAMESPACE, REGISTRY_NAME],
    )),
    CommandSpec(
        name="registry module delete",
        synopsis="Delete a private registry module",
        handler=module_delete,
        flags=[ORG, MODULE_NAME, text_flag("provider", "Provider name (deletes only that provider)")],
        output=False,
        confirm="Are you sure you want to delete registry module '{name}'? (yes/no): ",
    ),
    namespaced(CommandSpec(
        name="registry module version create",
        synopsis="Create a private registry module version",
        handler=module_version_create,
        flags=[ORG, MODULE_NAME, text_flag("provider", "Provider name", required=True), NAMESPACE,
               VERSION, text_flag("commit-sha", "Commit SHA for the version")],
        description=(
            "Create a module version. The response includes an upload URL; upload the module "
            "archive there to publish it."
        ),
    )),
    namespaced(delete_command(
        "registry module version delete",
        "Delete a private registry module version",
        PRIVATE_MODULE + "/{version}",
        "Version {version} of module '{name}' deleted successfully",
        flags=[ORG, MODULE_NAME, text_flag("provider", "Provider name", required=True), NAMESPACE,
               text_flag("version", "Version string", required=True)],
        confirm="Are you sure you want to delete version {version} of module '{name}'? (yes/no): ",
    )),
    list_command(
        "registry provider list",
        "List private registry providers",
        PROVIDER_PATH,
        [("ID", "id"), ("Name", "name"), ("Namespace", "namespace"),
         ("Registry Name", "registry-name")],
        flags=[ORG],
        empty="No registry providers found",
    ),
    namespaced(create_command(
        "registry provider create",
        "Create a private registry provider",
        PROVIDER_PATH,
        "registry-providers",
        PROVIDER_FIELDS,
        flags=[ORG, PROVIDER_NAME, NAMESPACE, REGISTRY_NAME],
        attributes={"name": "name", "namespace": "namespace", "registry-name": "registry-name"},
        success="Registry provider '{name}' created",
    )),
    namespaced(read_command(
        "registry provider read",
        "Show private registry provider details",
        PRIVATE_PROVIDER,
        PROVIDER_FIELDS,
        flags=[ORG, PROVIDER_NAME, NAMESPACE, REGISTRY_NAME],
    )),
    namespaced(delete_command(
        "registry provider delete",
        "Delete a private registry provider",
        PRIVATE_PROVIDER,
        "Registry provider '{name}' deleted successfully",
        flags=[ORG, PROVIDER_NAME, NAMESPACE, REGISTRY_NAME],
        confirm="Are you sure you want to delete registry provider '{name}'? (yes/no): ",
    )),
    namespaced(create_command(
        "registry provider version create",
        "Create a private registry provider version",
        PROVIDER_PATH + "/private/{namespace}/{name}/versions",
        "registry-provider-versions",
        PROVIDER_VERSION_FIELDS + [("Shasums Upload", "links.shasums-upload"),
                                   ("Shasums Sig Upload", "links.shasums-sig-upload")],
        flags=[ORG, PROVIDER_NAME, NAMESPACE, VERSION,
               text_flag("key-id", "GPG key ID for signing", required=True)],
        body=lambda inv: resource("registry-provider-versions", {
            "version": inv["version"],
            "key-id": inv["key-id"],
            "protocols": ["5.0"],
        }),
        success="Provider version {version} created",
    )),
    namespaced(read_command(
        "registry provider version read",
        "Show a private registry provider version",
        PROVIDER_VERSION,
        PROVIDER_VERSION_FIELDS,
        flags=[ORG, PROVIDER_NAME, NAMESPACE, text_flag("version", "Version string", required=True)],
    )),
    namespaced(delete_command(
        "registry provider version delete",
        "Delete a private registry provider version",
        PROVIDER_VERSION,
        "Version {version} of provider '{name}' deleted successfully",
        flags=[ORG, PROVIDER_NAME, NAMESPACE, text_flag("version", "Version string", required=True)],
        confirm="Are you sure you want to delete version {version} of provider '{name}'? (yes/no): ",
    )),
    namespaced(create_command(
        "registry provider platform create",
        "Create a platform for a private provider version",
        PROVIDER_VERSION + "/platforms",
        "registry-provider-platforms",
        PLATFORM_FIELDS + [("Binary Upload", "links.provider-binary-upload")],
        flags=[ORG, PROVIDER_NAME, NAMESPACE,
               text_flag("version", "Version string", required=True),
               text_flag("os", "Operating system, e.g., linux, darwin, windows", required=True),
               text_flag("arch", "Architecture, e.g., amd64, arm64, 386", required=True),
               text_flag("shasum", "SHA256 checksum", required=True),
               text_flag("filename", "Binary filename", required=True)],
        attributes={"os": "os", "arch": "arch", "shasum": "shasum", "filename": "filename"},
        success="Platform {os}_{arch} created for version {version}",
    )),
    namespaced(read_command(
        "registry provider platform read",
        "Show a private provider platform",
        PROVIDER_VERSION + "/platforms/{os}/{arch}",
        PLATFORM_FIELDS,
        flags=[ORG, PROVIDER_NAME, NAMESPACE,
               text_flag("version", "Version string", required=True),
               text_flag("os", "Operating system", required=True),
               text_flag("arch", "Architecture", required=True)],
    )),
    namespaced(delete_command(
        "registry provider platform delete",
        "Delete a private provider platform",
        PROVIDER_VERSION + "/platforms/{os}/{arch}",
        "Platform {os}_{arch} of version {version} deleted successfully",
        flags=[ORG, PROVIDER_NAME, NAMESPACE,
               text_flag("version", "Version string", required=True),
               text_flag("os", "Operating system", required=True),
               text_flag("arch", "Architecture", required=True)],
        confirm="Are you sure you want to delete platform {os}_{arch}? (yes/no): ",
    )),
    CommandSpec(
        name="gpgkey list",
        synopsis="List GPG keys for a registry namespace",
        handler=gpgkey_list,
        flags=[GPG_NAMESPACE],
    ),
    CommandSpec(
        name="gpgkey create",
        synopsis="Add a GPG key for signing private providers",
        handler=gpgkey_create,
        flags=[GPG_NAMESPACE,
               text_flag("ascii-armor", "GPG public key in ASCII armor format"),
               text_flag("file", "Path to file containing GPG public key", metavar="file")],
    ),
    CommandSpec(
        name="gpgkey read",
        synopsis="Show GPG key details",
        handler=gpgkey_read,
        flags=[GPG_NAMESPACE, KEY_ID],
    ),
    CommandSpec(
        name="gpgkey update",
        synopsis="Move a GPG key to another namespace",
        handler=gpgkey_update,
        flags=[text_flag("namespace", "Current namespace (organization name)", required=True),
               KEY_ID,
               text_flag("new-namespace", "New namespace (organization name)", required=True)],
    ),
    CommandSpec(
        name="gpgkey delete",
        synopsis="Delete a GPG key",
        handler=gpgkey_delete,
        flags=[GPG_NAMESPACE, KEY_ID],
        output=False,
        confirm="Are you sure you want to delete GPG key '{key_id}'? (yes/no): ",
    ),
    list_command(
        "nocode list",
        "List no-code modules",
        "/organizations/{organization}/no-code-modules",
        NOCODE_FIELDS,
        flags=[ORG],
        empty="No no-code modules found",
    ),
    CommandSpec(
        name="nocode create",
        synopsis="Create a no-code module",
        handler=nocode_create,
        flags=[ORG,
               text_flag("module-id", "Registry module ID to enable for no-code provisioning"),
               text_flag("version-pin", "Module version to pin"),
               text_flag("payload", "JSON payload for the create request")],
    ),
    read_command(
        "nocode read",
        "Show no-code module details",
        "/no-code-modules/{id}",
        NOCODE_FIELDS,
        flags=[id_flag("No-code module"),
               text_flag("include", "Include related resources (e.g. variable-options)")],
        params={"include": "include"},
    ),
    raw_command(
        "nocode update",
        "Update a no-code module",
        "PATCH",
        "/no-code-modules/{id}",
        flags=[id_flag("No-code module"),
               text_flag("payload", "JSON payload for the update request", required=True)],
        payload_flag="payload",
    ),
]
