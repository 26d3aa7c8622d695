"""Platform-level information: feature sets, subscriptions, IP ranges and API stability."""

from __future__ import annotations

from ..base import CommandSpec, Invocation
from ..helpers import ORG, data_of, id_flag, list_command, read_command, show_items

IP_RANGE_KINDS = ("api", "notifications", "sentinel", "vcs")
SUBSCRIPTION_FIELDS = [
    ("ID", "id"),
    ("Active", "is-active"),
    ("Public Free Tier", "is-public-free-tier"),
    ("Self Serve Trial", "is-self-serve-trial"),
    ("Runs Ceiling", "runs-ceiling"),
    ("Contract Start", "contract-start-at"),
    ("Contract Apply Limit", "contract-apply-limit"),
    ("Agents Ceiling", "agents-ceiling"),
    ("Feature Set", "rel:feature-set"),
]
SUBSCRIPTION_COLUMNS = [
    ("ID", "id"),
    ("Active", "is-active"),
    ("Runs Ceiling", "runs-ceiling"),
    ("Feature Set", "rel:feature-set"),
]
STABILITY_POLICY = {
    "Policy": "HCP Terraform API stability policy",
    "Stable": "Endpoints under /api/v2 are stable; breaking changes ship as new API versions",
    "Beta": "Endpoints documented as beta may change without notice",
    "Additive Changes": "New attributes, relationships and endpoints may be added at any time",
    "Deprecation": "Removals are announced in the changelog before they take effect",
    "Docs URL": "https://developer.hashicorp.com/terraform/cloud-docs/api-docs/stability-policy",
}


def iprange_list(inv: Invocation) -> None:
    ranges = inv.client.get(f"{inv.client.address}/api/meta/ip-ranges") or {}
    if inv.is_json:
        inv.formatter.json(ranges)
        return
    rows = [[kind, cidr] for kind in IP_RANGE_KINDS for cidr in ranges.get(kind) or []]
    if not rows:
        inv.message("No IP ranges found")
        return
    inv.table(["Service", "CIDR"], rows)


def subscription_list(inv: Invocation) -> None:
    doc = inv.client.get(inv.path("/organizations/{organization}/subscription"))
    item = data_of(doc)
    show_items(inv, [item] if item else [], SUBSCRIPTION_COLUMNS, "No subscriptions found")


def stabilitypolicy_read(inv: Invocation) -> None:
    inv.record(STABILITY_POLICY)


COMMANDS = [
    list_command(
        "featureset list",
        "List feature sets",
        "/feature-sets",
        [("ID", "id"), ("Name", "name"), ("Runs Ceiling", "runs-ceiling"),
         ("Concurrency Override", "concurrency-override"), ("Self Serve Billing", "self-serve-billing")],
        empty="No feature sets found",
    ),
    CommandSpec(
        name="iprange list",
        synopsis="List HCP Terraform IP ranges",
        handler=iprange_list,
    ),
    CommandSpec(
        name="subscription list",
        synopsis="Show an organization's subscription",
        handler=subscription_list,
        flags=[ORG],
    ),
    read_command(
        "subscription read",
        "Show subscription details",
        "/subscriptions/{id}",
        SUBSCRIPTION_FIELDS,
        flags=[id_flag("Subscription")],
    ),
    CommandSpec(
        name="stabilitypolicy read",
        synopsis="Show the API stability policy",
        handler=stabilitypolicy_read,
    ),
]
