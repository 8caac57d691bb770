"""CIFS mount option resolution. Pure functions, no state."""

from typing import List

from ...models import MountOptions

CIFS_VERSION = "3.0"
REDACTED = "********"


def build_mount_source(account_name: str, storage_base: str, share: str) -> str:
    """UNC-style source for mount.cifs, e.g. //acct.file.core.windows.net/share"""
    return f"//{account_name}.file.{storage_base}/{share}"


def build_option_list(
    account_name: str, account_key: str, options: MountOptions
) -> List[str]:
    resolved = options.resolved()
    opts = [
        f"vers={CIFS_VERSION}",
        f"username={account_name}",
        f"password={account_key}",
        f"file_mode={resolved.file_mode}",
        f"dir_mode={resolved.dir_mode}",
        f"uid={resolved.uid}",
        f"gid={resolved.gid}",
    ]
    if resolved.nolock:
        opts.append("nolock")
    return opts


def build_option_string(
    account_name: str, account_key: str, options: MountOptions
) -> str:
    return ",".join(build_option_list(account_name, account_key, options))


def redact(text: str, secret: str) -> str:
    """Strip the account key from anything headed for a log line or an error."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)
