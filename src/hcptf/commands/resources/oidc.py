"""OIDC configurations used by HYOK encryption: AWS, Azure, GCP and Vault.

All four share the same endpoints and differ only in their JSON:API type and
attributes, so each command family is generated from an :class:`OIDCProvider`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..base import CommandSpec
from ..helpers import (
    ORG,
    create_command,
    delete_command,
    id_flag,
    read_command,
    text_flag,
    update_command,
)


@dataclass(frozen=True)
class OIDCProvider:
    prefix: str
    title: str
    type_: str
    #: (flag, attribute, help, required on create, default)
    attributes: Tuple[Tuple[str, str, str, bool, Optional[str]], ...]

    def fields(self):
        return [("ID", "id")] + [(help_.split(" (")[0], attr) for _, attr, help_, _, _ in self.attributes]

    def commands(self) -> List[CommandSpec]:
        what = f"{self.title} OIDC configuration"
        mapping = {flag: attr for flag, attr, _, _, _ in self.attributes}
        return [
            create_command(
                f"{self.prefix} create",
                f"Create {what}",
                "/organizations/{organization}/oidc-configurations",
                self.type_,
                self.fields(),
                flags=[ORG] + [text_flag(flag, help_, required=required, default=default)
                               for flag, _, help_, required, default in self.attributes],
                attributes=mapping,
                success=f"{what} created",
            ),
            read_command(
                f"{self.prefix} read",
                f"Show {what} details",
                "/oidc-configurations/{id}",
                self.fields(),
                flags=[id_flag(what)],
            ),
            update_command(
                f"{self.prefix} update",
                f"Update {what}",
                "/oidc-configurations/{id}",
                self.type_,
                self.fields(),
                flags=[id_flag(what)] + [text_flag(flag, help_) for flag, _, help_, _, _ in self.attributes],
                attributes=mapping,
                success=f"{what} '{{id}}' updated",
            ),
            delete_command(
                f"{self.prefix} delete",
                f"Delete {what}",
                "/oidc-configurations/{id}",
                f"{what} '{{id}}' deleted successfully",
                flags=[id_flag(what)],
                confirm=f"Are you sure you want to delete {what} '{{id}}'? (yes/no): ",
            ),
        ]


PROVIDERS = [
    OIDCProvider("awsoidc", "AWS", "aws-oidc-configurations", (
        ("role-arn", "role-arn", "AWS IAM role ARN", True, None),
    )),
    OIDCProvider("azureoidc", "Azure", "azure-oidc-configurations", (
        ("client-id", "client-id", "Azure application (client) ID", True, None),
        ("subscription-id", "subscription-id", "Azure subscription ID", True, None),
        ("tenant-id", "tenant-id", "Azure tenant (directory) ID", True, None),
    )),
    OIDCProvider("gcpoidc", "GCP", "gcp-oidc-configurations", (
        ("service-account-email", "service-account-email", "GCP service account email", True, None),
        ("workload-provider-name", "workload-provider-name", "Workload provider path", True, None),
        ("project-number", "project-number", "GCP project number", True, None),
    )),
    OIDCProvider("vaultoidc", "Vault", "vault-oidc-configurations", (
        ("address", "address", "Vault instance address", True, None),
        ("role", "role", "Vault JWT auth role name", True, None),
        ("namespace", "namespace", "Vault namespace", True, None),
        ("auth-path", "auth-path", "Vault JWT auth mount path", False, "jwt"),
        ("encoded-cacert", "encoded-cacert", "Base64-encoded CA certificate (optional)", False, None),
    )),
]

COMMANDS = [spec for provider in PROVIDERS for spec in provider.commands()]
