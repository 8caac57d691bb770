"""
Network Mount Module

Components:
- BaseMounter: Abstract interface for the OS mount/unmount primitive
- CifsMounter: Linux mount.cifs implementation
- MountTableInspector: Mountpoint liveness from /proc/self/mountinfo
- MountConfigHandler: Account identity and default CIFS options
- PlatformFactory: Platform detection and mounter creation
"""

from .base_mounter import BaseMounter
from .cifs_mounter import CifsMounter
from .mount_config import MountConfigHandler
from .mount_table import MountTableInspector
from .platform_factory import PlatformFactory, UnsupportedPlatformError

__all__ = [
    "BaseMounter",
    "CifsMounter",
    "MountConfigHandler",
    "MountTableInspector",
    "PlatformFactory",
    "UnsupportedPlatformError",
]
