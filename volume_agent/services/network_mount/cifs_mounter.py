"""Linux CIFS Mounter - runs mount(8)/umount(8) for Azure file shares."""

import asyncio
import logging
from typing import List, Tuple

from .base_mounter import BaseMounter
from .mount_options import build_mount_source, build_option_string, redact
from ...core.exceptions import MountError, UnmountError
from ...models import MountOptions


class CifsMounter(BaseMounter):
    """Linux-specific CIFS mount implementation."""

    def __init__(self, mount_binary: str = "mount", umount_binary: str = "umount"):
        self._mount_binary = mount_binary
        self._umount_binary = umount_binary

    async def mount(
        self,
        account_name: str,
        account_key: str,
        storage_base: str,
        share: str,
        local_path: str,
        options: MountOptions,
    ) -> None:
        source = build_mount_source(account_name, storage_base, share)
        option_string = build_option_string(account_name, account_key, options)
        cmd = [
            self._mount_binary, "-t", "cifs", source, local_path,
            "-o", option_string, "--verbose",
        ]

        logging.debug(f"Attempting CIFS mount: {source} -> {local_path}")
        try:
            returncode, output = await self._run(cmd)
        except OSError as e:
            raise MountError(f"mount failed: {e}") from e

        if returncode != 0:
            raise MountError(
                f"mount failed: exit status {returncode}\n"
                f"output={redact(output, account_key)!r}"
            )
        logging.info(f"Successfully mounted {source} at {local_path}")

    async def unmount(self, local_path: str) -> None:
        cmd = [self._umount_binary, local_path]
        try:
            returncode, output = await self._run(cmd)
        except OSError as e:
            raise UnmountError(f"unmount failed: {e}") from e

        if returncode != 0:
            raise UnmountError(
                f"unmount failed: exit status {returncode}\noutput={output!r}"
            )
        logging.debug(f"Unmounted {local_path}")

    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        return "Linux (cifs)"

    async def _run(self, cmd: List[str]) -> Tuple[int, str]:
        """Run cmd and return (exit status, combined stdout/stderr)."""
        process = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.STDOUT
        )
        stdout, _ = await process.communicate()
        output = stdout.decode(errors="replace") if stdout else ""
        return process.returncode, output
