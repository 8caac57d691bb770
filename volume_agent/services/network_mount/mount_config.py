"""Mount Configuration Handler - mount-related settings access."""

from ...config import Settings
from ...models import MountOptions


class MountConfigHandler:
    """Exposes the account identity and default CIFS options from settings."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def account_name(self) -> str:
        return self._settings.account_name

    @property
    def account_key(self) -> str:
        return self._settings.account_key

    @property
    def storage_base(self) -> str:
        return self._settings.storage_base

    @property
    def mount_root(self) -> str:
        return self._settings.mountpoint

    def get_mount_options(self) -> MountOptions:
        """Configured CIFS options; blanks are defaulted by the mounter."""
        return MountOptions(
            file_mode=self._settings.mount_file_mode,
            dir_mode=self._settings.mount_dir_mode,
            uid=self._settings.mount_uid,
            gid=self._settings.mount_gid,
            nolock=self._settings.mount_nolock,
        )

    def get_platform_config(self) -> dict:
        """Loggable summary. Never includes the account key."""
        return {
            "account_name": self.account_name,
            "storage_base": self.storage_base,
            "mount_root": self.mount_root,
            "mount_options": self.get_mount_options().resolved().model_dump(),
        }
