"""Abstract remote share client."""

from abc import ABC, abstractmethod


class BaseShareClient(ABC):
    """Create-if-absent / delete-if-present against the backing file service."""

    @abstractmethod
    async def create_share_if_not_exists(self, share: str) -> bool:
        """Create share. Returns True if created, False if it already existed."""
        pass

    @abstractmethod
    async def delete_share_if_exists(self, share: str) -> bool:
        """Delete share. Returns True if deleted, False if it was already gone."""
        pass

    async def close(self) -> None:
        pass
