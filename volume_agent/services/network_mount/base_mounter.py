"""Abstract Base Mounter - interface for the OS mount primitive."""

from abc import ABC, abstractmethod

from ...models import MountOptions


class BaseMounter(ABC):
    """Abstract base class for platform-specific mount operations."""

    @abstractmethod
    async def mount(
        self,
        account_name: str,
        account_key: str,
        storage_base: str,
        share: str,
        local_path: str,
        options: MountOptions,
    ) -> None:
        """Mount the share at local_path. Raises MountError on failure."""
        pass

    @abstractmethod
    async def unmount(self, local_path: str) -> None:
        """Unmount local_path. Raises UnmountError on failure."""
        pass

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        pass
