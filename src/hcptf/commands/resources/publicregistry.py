"""Lookups against the public Terraform registry (registry.terraform.io)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...errors import InvalidValueError, ResourceNotFoundError
from ..base import CommandSpec, Invocation
from ..helpers import int_flag, text_flag

REGISTRY_SITE = "https://registry.terraform.io"
POLICY_PAGE = {"page[size]": 100, "include": "latest-version"}


def _split(inv: Invocation, parts: int, example: str) -> List[str]:
    value = inv["name"]
    pieces = value.split("/")
    if len(pieces) != parts or not all(pieces):
        raise InvalidValueError("name", value, f"the form {example}")
    return pieces


def provider_info(inv: Invocation) -> None:
    namespace, name = _split(inv, 2, "namespace/name (e.g., hashicorp/aws)")
    info = inv.registry.get(f"/v1/providers/{namespace}/{name}")
    inv.record({
        "Name": f"{namespace}/{name}",
        "Version": info.get("version"),
        "Description": info.get("description"),
        "Source": info.get("source"),
        "Published": info.get("published_at"),
        "Downloads": info.get("downloads"),
        "DocsURL": f"{REGISTRY_SITE}/providers/{namespace}/{name}/latest/docs",
    })


def provider_versions(inv: Invocation) -> None:
    namespace, name = _split(inv, 2, "namespace/name (e.g., hashicorp/aws)")
    doc = inv.registry.get(f"/v1/providers/{namespace}/{name}/versions")
    versions = list(reversed(doc.get("versions") or []))
    if inv.is_json:
        inv.formatter.json(versions)
        return
    if not versions:
        inv.message("No versions found")
        return
    rows = []
    for v in versions:
        platforms = v.get("platforms") or []
        rows.append([
            v.get("version"),
            ", ".join(v.get("protocols") or []),
            len(platforms),
        ])
    inv.table(["Version", "Protocols", "Platforms"], rows)


def module_info(inv: Invocation) -> None:
    namespace, name, system = _split(
        inv, 3, "namespace/name/system (e.g., terraform-aws-modules/vpc/aws)"
    )
    info = inv.registry.get(f"/v1/modules/{namespace}/{name}/{system}")
    base = f"{REGISTRY_SITE}/modules/{namespace}/{name}/{system}"
    inv.record({
        "Name": f"{namespace}/{name}/{system}",
        "Version": info.get("version"),
        "Description": info.get("description"),
        "Source": info.get("source"),
        "Downloads": info.get("downloads"),
        "Published": info.get("published_at"),
        "Verified": info.get("verified"),
        "DocsURL": f"{base}/latest",
        "VersionsURL": f"{base}?tab=versions",
    })


def _latest_version(policy: Dict[str, Any]) -> Optional[str]:
    related = (((policy.get("relationships") or {}).get("latest-version") or {})
               .get("links") or {}).get("related") or ""
    parts = related.replace("/v2/policies/", "", 1).split("/")
    return parts[2] if len(parts) == 3 else None


def policy_list(inv: Invocation) -> None:
    doc = inv.registry.get("/v2/policies", params=POLICY_PAGE)
    policies = list(doc.get("data") or [])
    if inv.is_json:
        inv.formatter.json(doc)
        return
    if not policies:
        inv.message("No policies found")
        return
    shown = policies[: inv.get("limit", 20)]
    rows = []
    for p in shown:
        attrs = p.get("attributes") or {}
        rows.append([attrs.get("full-name") or attrs.get("name"), attrs.get("title"),
                     attrs.get("downloads"), _latest_version(p)])
    inv.message(f"Showing {len(shown)} of {len(policies)} policies\n")
    inv.table(["Name", "Title", "Downloads", "Latest Version"], rows)


def policy_info(inv: Invocation) -> None:
    namespace, name = _split(inv, 2, "namespace/name (e.g., hashicorp/CIS-Policy-Set-for-AWS-Terraform)")
    version = inv.get("version")
    if not version:
        doc = inv.registry.get("/v2/policies", params=POLICY_PAGE)
        for p in doc.get("data") or []:
            related = _latest_version(p)
            attrs = p.get("attributes") or {}
            if related and attrs.get("full-name", "").lower() == f"{namespace}/{name}".lower():
                version = related
                break
        if not version:
            raise ResourceNotFoundError(f"public policy '{namespace}/{name}'")
    doc = inv.registry.get(
        f"/v2/policies/{namespace}/{name}/{version}",
        params={"include": "policies,policy-modules,policy-library"},
    )
    attrs = (doc.get("data") or {}).get("attributes") or {}
    included = doc.get("included") or []
    inv.record({
        "Name": f"{namespace}/{name}",
        "Version": version,
        "Title": attrs.get("title"),
        "Description": attrs.get("description"),
        "Downloads": attrs.get("downloads"),
        "Published": attrs.get("published-at"),
        "Policies": sum(1 for i in included if i.get("type") == "policies"),
        "DocsURL": f"{REGISTRY_SITE}/policies/{namespace}/{name}/{version}",
        "VersionsURL": f"{REGISTRY_SITE}/policies/{namespace}/{name}",
    })


COMMANDS = [
    CommandSpec(
        name="publicregistry provider",
        synopsis="Get provider info from public registry",
        handler=provider_info,
        flags=[text_flag("name", "Provider name (e.g., hashicorp/aws)", required=True)],
        examples=["hcptf publicregistry provider -name=hashicorp/aws"],
    ),
    CommandSpec(
        name="publicregistry provider versions",
        synopsis="List provider versions from public registry",
        handler=provider_versions,
        flags=[text_flag("name", "Provider name (e.g., hashicorp/aws)", required=True)],
    ),
    CommandSpec(
        name="publicregistry module",
        synopsis="Get module info from public registry",
        handler=module_info,
        flags=[text_flag("name", "Module name (e.g., terraform-aws-modules/s3-bucket/aws)",
                         required=True)],
    ),
    CommandSpec(
        name="publicregistry policy",
        synopsis="Get policy set info from public registry",
        handler=policy_info,
        flags=[text_flag("name", "Policy name (e.g., hashicorp/CIS-Policy-Set-for-AWS-Terraform)",
                         required=True),
               text_flag("version", "Policy version (e.g., 1.0.1). If not specified, uses 'latest'")],
    ),
    CommandSpec(
        name="publicregistry policy list",
        synopsis="List policy sets in the public registry",
        handler=policy_list,
        flags=[int_flag("limit", "Maximum number of policies to display", default=20)],
    ),
]
