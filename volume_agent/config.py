from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Azure storage account (required, used as identity for every volume)
    account_name: str
    account_key: str
    storage_base: str = "core.windows.net"

    # Filstier
    mountpoint: str = "/var/run/docker/volumedriver/azurefile"
    metadata_path: str = "/etc/docker/plugins/azurefile/volumes/"
    mountinfo_path: str = "/proc/self/mountinfo"

    # Volume lifecycle
    remove_shares: bool = False  # Delete the azure file share when a volume is removed

    # CIFS mount options (empty = driver default)
    mount_file_mode: str = ""
    mount_dir_mode: str = ""
    mount_uid: str = ""
    mount_gid: str = ""
    mount_nolock: bool = False

    # Plugin server
    host: str = "0.0.0.0"
    port: int = 8080
    plugin_name: str = "azurefile"
    plugin_spec_dir: str = "/etc/docker/plugins"
    write_plugin_spec: bool = True

    # Logging konfiguration
    debug: bool = False
    log_level: str = "INFO"
    log_file_path: str = "logs/volume_agent.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(
        env_file="settings.env",
        env_prefix="AZUREFILE_",
        extra="ignore",
        cli_kebab_case=True,
        cli_implicit_flags=True,
    )

    @field_validator("account_name", "account_key")
    @classmethod
    def _require_credentials(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("azure storage account name and key must be provided")
        return value

    @property
    def effective_log_level(self) -> str:
        """--debug overrides the configured log level."""
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def log_directory(self) -> Path:
        """Returnerer log directory som Path objekt"""
        return Path(self.log_file_path).parent
