"""Environment-driven settings for the vault client."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VaultSettings(BaseSettings):
    """
    Settings read from ``SKYFLOW_*`` environment variables.

    - SKYFLOW_VAULT_URL: Base vault URL, e.g. "https://abc.vault.skyflowapis.com"
    - SKYFLOW_VAULT_ID: Vault identifier
    - SKYFLOW_TIMEOUT: Request timeout in seconds
    - SKYFLOW_LOG_LEVEL: DEBUG, INFO, WARN, ERROR or OFF
    """

    model_config = SettingsConfigDict(env_prefix="SKYFLOW_", case_sensitive=False)

    vault_url: str = Field("", description="Base URL of the vault")
    vault_id: str = Field("", description="Identifier of the vault")
    timeout: float = Field(30.0, description="Request timeout in seconds")
    log_level: str = Field("ERROR", description="Log level for the skyflow_vault logger")
