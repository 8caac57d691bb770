"""
Volume Driver Service - the volume lifecycle coordinator.

Every operation for every volume runs inside one asyncio.Lock, so the
metadata directory and the mountpoint tree have a single writer.

Mount state is never tracked in memory. Docker issues Mount/Unmount for each
container using a volume without telling us how many there are, so repeated
mounts leave duplicate entries in the kernel mount table. After each unmount
the mount table is consulted, and the mountpoint directory is only removed
once nothing is mounted there any more.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

import aiofiles.os

from ..core.exceptions import (
    CleanupError,
    CrossAccountError,
    MetadataError,
    MissingShareError,
    MkdirError,
    VolumeDriverError,
)
from ..models import VolumeEntry, VolumeMetadata
from .metadata import MetadataStore
from .network_mount import BaseMounter, MountConfigHandler, MountTableInspector
from .remote_share import BaseShareClient


class VolumeDriverService:
    """Serializes create/mount/unmount/remove/path/get/list for all volumes."""

    def __init__(
        self,
        mount_config: MountConfigHandler,
        metadata_store: MetadataStore,
        share_client: BaseShareClient,
        mounter: BaseMounter,
        mount_table: MountTableInspector,
        remove_shares: bool = False,
    ):
        self._config = mount_config
        self._metadata = metadata_store
        self._shares = share_client
        self._mounter = mounter
        self._mount_table = mount_table
        self._remove_shares = remove_shares
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _operation(
        self, operation: str, name: Optional[str] = None
    ) -> AsyncIterator[dict]:
        """Hold the global lock for one request and log its failure, if any."""
        log_extra = {"operation": operation, "volume": name or ""}
        label = operation if name is None else f"{operation} {name}"
        async with self._lock:
            logging.debug(f"{label}: request accepted", extra=log_extra)
            try:
                if name is not None:
                    self._metadata.validate_name(name)
                yield log_extra
            except VolumeDriverError as e:
                logging.error(f"{label} failed: {e}", extra=log_extra)
                raise

    def path_for_volume(self, name: str) -> str:
        return os.path.join(self._config.mount_root, name)

    def _volume_entry(self, name: str) -> VolumeEntry:
        return VolumeEntry(name=name, mountpoint=self.path_for_volume(name))

    async def create(self, name: str, options: dict) -> None:
        async with self._operation("create", name) as log_extra:
            record = self._metadata.validate(options)
            share = record.options.share
            if not share:
                raise MissingShareError()

            if await self._shares.create_share_if_not_exists(share):
                logging.info(f"Created azure file share {share!r}", extra=log_extra)

            existing = await self._existing_record(name)
            if existing is not None:
                if (
                    existing.options.share == share
                    and existing.account == self._config.account_name
                ):
                    logging.info(
                        f"Volume {name} already exists with share {share!r}, keeping record",
                        extra=log_extra,
                    )
                    return
                logging.warning(
                    f"Volume {name} already exists (share {existing.options.share!r}, "
                    f"account {existing.account!r}), overwriting metadata",
                    extra=log_extra,
                )

            record.account = self._config.account_name
            record.created_at = datetime.now(timezone.utc)
            await self._metadata.set(name, record)
            logging.info(f"Volume {name} created on share {share!r}", extra=log_extra)

    async def path(self, name: str) -> str:
        async with self._operation("path", name):
            await self._metadata.get(name)
            return self.path_for_volume(name)

    async def mount(self, name: str) -> str:
        async with self._operation("mount", name) as log_extra:
            path = self.path_for_volume(name)
            created_dir = await self._ensure_mountpoint(path)

            try:
                meta = await self._metadata.get(name)
                if meta.account != self._config.account_name:
                    raise CrossAccountError(name, meta.account)
            except VolumeDriverError:
                if created_dir:
                    await self._discard_mountpoint(path)
                raise

            await self._mounter.mount(
                self._config.account_name,
                self._config.account_key,
                self._config.storage_base,
                meta.options.share,
                path,
                self._config.get_mount_options(),
            )
            logging.info(f"Volume {name} mounted at {path}", extra=log_extra)
            return path

    async def unmount(self, name: str) -> None:
        async with self._operation("unmount", name) as log_extra:
            await self._metadata.get(name)
            path = self.path_for_volume(name)

            await self._mounter.unmount(path)
            logging.debug(f"unmount {name}: unmount successful", extra=log_extra)

            if await self._mount_table.is_active(path):
                logging.debug(
                    f"unmount {name}: mountpoint still has active mounts, not removing",
                    extra=log_extra,
                )
                return

            logging.debug(
                f"unmount {name}: mountpoint has no further mounts, removing",
                extra=log_extra,
            )
            try:
                await aiofiles.os.rmdir(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise CleanupError(f"error removing mountpoint: {e}") from e
            logging.info(f"Volume {name} unmounted, removed {path}", extra=log_extra)

    async def remove(self, name: str) -> None:
        async with self._operation("remove", name) as log_extra:
            meta = await self._metadata.get(name)
            share = meta.options.share

            if self._remove_shares:
                if await self._shares.delete_share_if_exists(share):
                    logging.info(f"Removed azure file share {share!r}", extra=log_extra)
            else:
                logging.debug(
                    f"remove {name}: not removing share {share!r} upon volume removal",
                    extra=log_extra,
                )

            await self._metadata.delete(name)
            logging.info(f"Volume {name} removed", extra=log_extra)

    async def get(self, name: str) -> VolumeEntry:
        async with self._operation("get", name):
            await self._metadata.get(name)
            return self._volume_entry(name)

    async def list(self) -> List[VolumeEntry]:
        async with self._operation("list") as log_extra:
            names = await self._metadata.list()
            volumes = [self._volume_entry(name) for name in sorted(names)]
            logging.debug(f"list: response has {len(volumes)} items", extra=log_extra)
            return volumes

    def capabilities(self) -> str:
        """Volumes are host-local: every host mounts the share itself."""
        return "local"

    async def _existing_record(self, name: str) -> Optional[VolumeMetadata]:
        if not await self._metadata.exists(name):
            return None
        try:
            return await self._metadata.get(name)
        except MetadataError as e:
            logging.warning(f"Existing metadata for {name} is unreadable: {e}")
            return None

    async def _ensure_mountpoint(self, path: str) -> bool:
        """Create the mountpoint directory. Returns True if this call created it."""
        if await aiofiles.os.path.isdir(path):
            return False
        try:
            await aiofiles.os.makedirs(path, mode=0o700, exist_ok=True)
        except OSError as e:
            raise MkdirError(f"could not create mount point: {e}") from e
        return True

    async def _discard_mountpoint(self, path: str) -> None:
        try:
            await aiofiles.os.rmdir(path)
        except OSError as e:
            logging.warning(f"Could not remove unused mountpoint {path}: {e}")
