"""Environment-based configuration using pydantic-settings.

Settings holds everything that can be supplied through the environment:
the API token and address, the location of the hcptfrc file and the logging
knobs. File-based configuration lives in :mod:`hcptf.config`.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADDRESS = "https://app.terraform.io"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HCPTF_",
        case_sensitive=False,
        env_ignore_empty=True,
        populate_by_name=True,
    )

    # TFE_TOKEN wins over HCPTF_TOKEN
    token: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("TFE_TOKEN", "HCPTF_TOKEN")
    )
    # HCPTF_ADDRESS wins over TFE_ADDRESS
    address: str = Field(
        default=DEFAULT_ADDRESS,
        validation_alias=AliasChoices("HCPTF_ADDRESS", "TFE_ADDRESS"),
    )
    config_path: Optional[str] = Field(
        default=None,
        validation_alias="HCPTF_CONFIG",
        description="Override for the ~/.hcptfrc location",
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Application log level")
    log_format: str = Field(default="text", description="Log format: json or text")

    @field_validator("address")
    @classmethod
    def normalize_address(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if "://" not in v:
            v = f"https://{v}"
        return v

    @property
    def hostname(self) -> str:
        """Host part of the address, used as the credentials key."""
        return urlparse(self.address).netloc
