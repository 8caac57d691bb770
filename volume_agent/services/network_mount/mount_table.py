"""
Mount-Table Inspector - answers "is this path still mounted?" from the live
OS mount table.

Repeated mounts of the same share at the same path stack up as duplicate
entries in the mount table, and umount only pops one of them. Whether a
mountpoint is still active is therefore decided by reading mountinfo, never
by counting mount requests.

Paths are compared by identity (st_dev, st_ino) rather than by string, since
mountinfo may report a path that differs textually from ours (symlinks, bind
mounts) while referring to the same directory.
"""

import asyncio
import logging
import os
import re
from typing import List, Optional, Tuple

import aiofiles

from ...core.exceptions import MountTableError

DEFAULT_MOUNTINFO_PATH = "/proc/self/mountinfo"

# mountinfo fields: ID, parent ID, major:minor, root, *mount point*, options, ...
MOUNT_POINT_FIELD = 4

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def unescape_mount_path(raw: str) -> str:
    """Decode the octal escapes (\\040 for space etc.) used by the kernel."""
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), raw)


def parse_mount_points(content: str) -> List[str]:
    mount_points = []
    for line in content.splitlines():
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) <= MOUNT_POINT_FIELD:
            raise MountTableError(
                f"mountinfo line {line!r} has less than 5 fields, cannot parse mountpoint"
            )
        mount_points.append(unescape_mount_path(fields[MOUNT_POINT_FIELD]))
    return mount_points


class MountTableInspector:
    """Checks mountpoint liveness against /proc/self/mountinfo."""

    def __init__(self, mountinfo_path: str = DEFAULT_MOUNTINFO_PATH):
        self._mountinfo_path = mountinfo_path

    async def is_active(self, path: str) -> bool:
        target = await asyncio.to_thread(self._stat_identity, path)
        if target is None:
            logging.debug(f"Mountpoint does not exist: {path}")
            return False

        try:
            async with aiofiles.open(self._mountinfo_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise MountTableError(f"cannot read mountinfo: {e}") from e

        mount_points = parse_mount_points(content)
        matched = await asyncio.to_thread(self._find_match, target, mount_points)
        if matched is None:
            logging.debug(f"Mountpoint not found in mount table: {path}")
            return False

        logging.debug(f"Mountpoint {path} is active (mount table entry {matched})")
        return True

    @staticmethod
    def _stat_identity(path: str) -> Optional[Tuple[int, int]]:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise MountTableError(f"cannot stat mountpoint: {e}") from e
        return st.st_dev, st.st_ino

    @staticmethod
    def _find_match(target: Tuple[int, int], mount_points: List[str]) -> Optional[str]:
        for mount_point in mount_points:
            try:
                st = os.stat(mount_point)
            except OSError as e:
                # Stale or unreachable mounts belong to other consumers
                logging.debug(f"Skipping mount table entry {mount_point}: {e}")
                continue
            if (st.st_dev, st.st_ino) == target:
                return mount_point
        return None
