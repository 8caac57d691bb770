"""Platform Factory - platform detection and mounter creation."""

import logging
import platform

from .base_mounter import BaseMounter
from .cifs_mounter import CifsMounter


class UnsupportedPlatformError(Exception):
    """Raised when platform is not supported for CIFS mounting."""
    pass


class PlatformFactory:
    """Factory for creating platform-specific mount implementations."""

    def detect_platform(self) -> str:
        """Detect current platform. Volume plugins mount into the docker host, which is linux."""
        system = platform.system().lower()
        if system != "linux":
            raise UnsupportedPlatformError(f"Platform {system} not supported for CIFS volume mounts")
        return system

    def create_mounter(self) -> BaseMounter:
        """Create platform-specific mounter instance."""
        self.detect_platform()
        mounter = CifsMounter()
        logging.info(f"Initialized {mounter.get_platform_name()} mounter")
        return mounter
