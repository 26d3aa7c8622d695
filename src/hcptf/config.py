"""File-based configuration for hcptf.

Two files are consulted:

* ``~/.hcptfrc`` (or ``$HCPTF_CONFIG``), a YAML document holding credentials,
  the default organization and the default output format. JSON is valid YAML
  so a JSON file works too.
* ``~/.terraform.d/credentials.tfrc.json``, the Terraform CLI credentials
  file. ``hcptf login`` and ``hcptf logout`` manage this one.

Credentials from the hcptfrc file take precedence over the Terraform ones.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .settings import Settings

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("table", "json")


class Config(BaseModel):
    credentials: Dict[str, str] = Field(
        default_factory=dict, description="Hostname to API token"
    )
    default_organization: Optional[str] = Field(default=None)
    output_format: str = Field(default="table", description="Default output format")

    @field_validator("credentials", mode="before")
    @classmethod
    def flatten_credentials(cls, v):
        # Accept both {host: token} and {host: {token: ...}}
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("must map hostnames to tokens")
        flat = {}
        for host, cred in v.items():
            if isinstance(cred, dict):
                cred = cred.get("token")
            if cred:
                flat[str(host)] = str(cred)
        return flat

    @field_validator("output_format", mode="before")
    @classmethod
    def default_output_format(cls, v):
        return v or "table"

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from a YAML (or JSON) file."""
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid {path}: {e}") from e

    @classmethod
    def load(cls, settings: Optional[Settings] = None) -> "Config":
        """Load the hcptfrc file and merge in Terraform CLI credentials."""
        settings = settings or Settings()
        path = cls.default_config_path(settings)
        config = cls.from_file(path) if path.exists() else cls()

        tf_path = terraform_credentials_path()
        if tf_path.exists():
            for host, token in load_terraform_credentials(tf_path).items():
                config.credentials.setdefault(host, token)
        return config

    def save_to_file(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "credentials": {host: {"token": tok} for host, tok in self.credentials.items()},
            "default_organization": self.default_organization,
            "output_format": self.output_format,
        }
        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, indent=2)
        os.chmod(path, 0o600)

    def token_for(self, settings: Settings) -> Optional[str]:
        """Return the API token: environment first, then stored credentials."""
        if settings.token:
            return settings.token
        return self.credentials.get(settings.hostname)

    @staticmethod
    def default_config_path(settings: Optional[Settings] = None) -> Path:
        """Return the hcptfrc location, honoring HCPTF_CONFIG."""
        if settings is not None and settings.config_path:
            return Path(os.path.expanduser(settings.config_path))
        return Path.home() / ".hcptfrc"


def terraform_credentials_path() -> Path:
    return Path.home() / ".terraform.d" / "credentials.tfrc.json"


def load_terraform_credentials(path: Optional[Path] = None) -> Dict[str, str]:
    """Read the Terraform CLI credentials file into hostname -> token."""
    path = path or terraform_credentials_path()
    try:
        with open(path, "r") as f:
            data: Dict[str, Any] = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to load Terraform credentials from {path}: {e}") from e
    creds = (data.get("credentials") if isinstance(data, dict) else None) or {}
    if not isinstance(creds, dict):
        raise ConfigError(f"invalid Terraform credentials in {path}: expected a mapping")
    tokens: Dict[str, str] = {}
    for host, entry in creds.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"invalid Terraform credentials for {host} in {path}: expected an object")
        if entry.get("token"):
            tokens[host] = entry["token"]
    return tokens


def _write_terraform_credentials(path: Path, creds: Dict[str, str]) -> None:
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    doc = {"credentials": {host: {"token": tok} for host, tok in creds.items()}}
    with open(path, "w") as f:
        json.dump(doc, f, indent=2)
    os.chmod(path, 0o600)


def save_credential(hostname: str, token: str) -> Path:
    """Store a token for hostname in the Terraform CLI credentials file."""
    path = terraform_credentials_path()
    creds = load_terraform_credentials(path) if path.exists() else {}
    creds[hostname] = token
    _write_terraform_credentials(path, creds)
    logger.debug("Saved credential for %s to %s", hostname, path)
    return path


def remove_credential(hostname: str) -> bool:
    """Remove the token for hostname. Returns False when none was stored."""
    path = terraform_credentials_path()
    if not path.exists():
        return False
    creds = load_terraform_credentials(path)
    if hostname not in creds:
        return False
    del creds[hostname]
    if not creds:
        path.unlink()
    else:
        _write_terraform_credentials(path, creds)
    logger.debug("Removed credential for %s", hostname)
    return True
