"""
Metadata Store - durable, file-backed volume metadata.

One JSON document per volume under the configured metadata root. There is no
in-memory cache: every call goes to disk, so a restarted agent sees exactly
what the previous process left behind.
"""

import asyncio
import errno
import logging
import os
from pathlib import Path
from typing import Mapping, Set
from uuid import uuid4

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from ...core.exceptions import (
    InvalidOptionError,
    InvalidVolumeNameError,
    MetadataError,
    VolumeNotFoundError,
)
from ...models import RECOGNIZED_OPTIONS, VolumeMetadata, VolumeOptions

TEMP_FILE_PREFIX = ".tmp-"


def _private_opener(path, flags):
    return os.open(path, flags, 0o600)


def _fsync_directory(path: Path) -> None:
    """Flush a rename in path to disk."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class MetadataStore:
    """Reads and writes VolumeMetadata records keyed by volume name."""

    def __init__(self, metadata_root: str):
        self._root = Path(metadata_root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        """Create the metadata root directory if it is missing."""
        try:
            self._root.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise MetadataError(f"error creating {self._root}: {e}") from e

    def validate(self, raw_options: Mapping[str, str]) -> VolumeMetadata:
        """
        Build a metadata record from raw create options.

        Raises:
            InvalidOptionError: if an option is not recognized.

        An empty or missing share is allowed here; the caller decides whether
        that is an error.
        """
        for key in raw_options:
            if key not in RECOGNIZED_OPTIONS:
                raise InvalidOptionError(key)

        return VolumeMetadata(
            options=VolumeOptions(share=raw_options.get("share", ""))
        )

    async def set(self, name: str, record: VolumeMetadata) -> None:
        """Persist record for name, replacing any previous record atomically."""
        final_path = self._path(name)
        temp_path = self._root / f"{TEMP_FILE_PREFIX}{name}-{uuid4().hex}"

        try:
            payload = record.model_dump_json()
        except (TypeError, ValueError) as e:
            raise MetadataError(f"cannot serialize metadata: {e}") from e

        try:
            async with aiofiles.open(
                temp_path, "w", encoding="utf-8", opener=_private_opener
            ) as f:
                await f.write(payload)
                await f.flush()
                await asyncio.to_thread(os.fsync, f.fileno())
            await aiofiles.os.replace(temp_path, final_path)
            await asyncio.to_thread(_fsync_directory, self._root)
        except OSError as e:
            await self._discard(temp_path)
            raise MetadataError(f"cannot write metadata: {e}") from e

        logging.debug(f"Metadata written for volume {name}: {final_path}")

    async def get(self, name: str) -> VolumeMetadata:
        path = self._path(name)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError as e:
            raise VolumeNotFoundError(name) from e
        except OSError as e:
            raise MetadataError(f"cannot read metadata: {e}") from e

        try:
            return VolumeMetadata.model_validate_json(content)
        except ValidationError as e:
            raise MetadataError(f"cannot deserialize metadata: {e}") from e

    async def exists(self, name: str) -> bool:
        return await aiofiles.os.path.isfile(self._path(name))

    async def delete(self, name: str) -> None:
        path = self._path(name)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as e:
            raise VolumeNotFoundError(name) from e
        except OSError as e:
            raise MetadataError(f"cannot delete metadata: {e}") from e
        logging.debug(f"Metadata removed for volume {name}")

    async def list(self) -> Set[str]:
        """Return the names of every volume with a current record."""
        try:
            entries = await aiofiles.os.listdir(self._root)
        except OSError as e:
            raise MetadataError(f"cannot list metadata directory {self._root}: {e}") from e

        names = set()
        for entry in entries:
            if entry.startswith("."):
                continue
            if await aiofiles.os.path.isfile(self._root / entry):
                names.add(entry)
        return names

    def validate_name(self, name: str) -> None:
        """Reject names that cannot safely be used as a file or directory name."""
        if (
            not name
            or name.startswith(".")
            or "/" in name
            or "\x00" in name
            or os.sep in name
        ):
            raise InvalidVolumeNameError(name)

    def _path(self, name: str) -> Path:
        self.validate_name(name)
        return self._root / name

    async def _discard(self, temp_path: Path) -> None:
        try:
            await aiofiles.os.remove(temp_path)
        except OSError as e:
            if e.errno != errno.ENOENT:
                logging.warning(f"Could not remove temporary metadata file {temp_path}: {e}")
