"""
Pytest configuration og shared fixtures.
"""

from pathlib import Path
from typing import List

import pytest

from volume_agent.config import Settings
from volume_agent.core.exceptions import MountError, UnmountError
from volume_agent.dependencies import reset_singletons
from volume_agent.models import MountOptions
from volume_agent.services.network_mount import BaseMounter
from volume_agent.services.remote_share import BaseShareClient


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before hver test."""
    reset_singletons()
    yield
    reset_singletons()


class FakeShareClient(BaseShareClient):
    """In-memory stand-in for the Azure file service."""

    def __init__(self):
        self.shares = set()
        self.create_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.closed = False

    async def create_share_if_not_exists(self, share: str) -> bool:
        self.create_calls.append(share)
        if share in self.shares:
            return False
        self.shares.add(share)
        return True

    async def delete_share_if_exists(self, share: str) -> bool:
        self.delete_calls.append(share)
        if share not in self.shares:
            return False
        self.shares.discard(share)
        return True

    async def close(self) -> None:
        self.closed = True


class FakeKernelMounter(BaseMounter):
    """
    Simulates mount(8)/umount(8) by maintaining a mountinfo-format file.

    Every mount appends an entry for the target path, every unmount pops one,
    mirroring how the kernel stacks duplicate mounts on the same directory.
    """

    BASE_LINE = "22 1 8:1 / / rw,relatime - ext4 /dev/sda1 rw"

    def __init__(self, mountinfo_path: Path):
        self.mountinfo_path = mountinfo_path
        self.mount_calls: List[dict] = []
        self.unmount_calls: List[str] = []
        self.fail_mount = False
        self.fail_unmount = False
        self._entries: List[str] = []
        self._next_id = 100
        self._write()

    async def mount(
        self,
        account_name: str,
        account_key: str,
        storage_base: str,
        share: str,
        local_path: str,
        options: MountOptions,
    ) -> None:
        self.mount_calls.append(
            {
                "account_name": account_name,
                "storage_base": storage_base,
                "share": share,
                "local_path": local_path,
                "options": options,
            }
        )
        if self.fail_mount:
            raise MountError("mount failed: exit status 32")
        self._next_id += 1
        self._entries.append(
            f"{self._next_id} 22 0:{self._next_id} / {local_path} rw,relatime - cifs "
            f"//{account_name}.file.{storage_base}/{share} rw,vers=3.0"
        )
        self._write()

    async def unmount(self, local_path: str) -> None:
        self.unmount_calls.append(local_path)
        if self.fail_unmount:
            raise UnmountError("unmount failed: exit status 32")
        for i in range(len(self._entries) - 1, -1, -1):
            if self._entries[i].split()[4] == local_path:
                del self._entries[i]
                self._write()
                return
        raise UnmountError(f"unmount failed: {local_path}: not mounted")

    def get_platform_name(self) -> str:
        return "fake"

    def active_mounts(self, local_path: str) -> int:
        return sum(1 for e in self._entries if e.split()[4] == local_path)

    def _write(self) -> None:
        lines = [self.BASE_LINE] + self._entries
        self.mountinfo_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        account_name="testaccount",
        account_key="c2VjcmV0LWtleQ==",
        mountpoint=str(tmp_path / "mnt"),
        metadata_path=str(tmp_path / "meta"),
        mountinfo_path=str(tmp_path / "mountinfo"),
        plugin_spec_dir=str(tmp_path / "plugins"),
        log_file_path=str(tmp_path / "logs" / "volume_agent.log"),
    )


@pytest.fixture
def share_client() -> FakeShareClient:
    return FakeShareClient()


@pytest.fixture
def mounter(settings) -> FakeKernelMounter:
    return FakeKernelMounter(Path(settings.mountinfo_path))
