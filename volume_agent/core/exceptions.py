# volume_agent/core/exceptions.py


class VolumeDriverError(Exception):
    """Base class for every failure reported back to the volume plugin caller."""


class OptionValidationError(VolumeDriverError):
    """Raised when a create request carries options or a name we cannot accept."""


class InvalidOptionError(OptionValidationError):
    """Raised when a volume option is outside the recognized set."""
    def __init__(self, option: str):
        self.option = option
        super().__init__(f"not a recognized volume driver option: {option!r}")


class MissingShareError(OptionValidationError):
    """Raised when the required 'share' option is missing or empty."""
    def __init__(self):
        super().__init__("missing volume option: 'share'")


class InvalidVolumeNameError(OptionValidationError):
    """Raised when a volume name cannot be used as a file name."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid volume name: {name!r}")


class VolumeNotFoundError(VolumeDriverError):
    """Raised when no metadata record exists for a volume name."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"volume {name!r} not found")


class CrossAccountError(VolumeDriverError):
    """Raised when a volume was created under a different storage account."""
    def __init__(self, name: str, account: str):
        self.name = name
        self.account = account
        super().__init__(
            f"volume hosted on a different account ('{account}') cannot mount"
        )


class RemoteShareError(VolumeDriverError):
    """Raised when creating or deleting the backing file share fails."""


class MountError(VolumeDriverError):
    """Raised when the mount command fails."""


class UnmountError(VolumeDriverError):
    """Raised when the umount command fails."""


class MountTableError(VolumeDriverError):
    """Raised when the OS mount table cannot be read or parsed."""


class MkdirError(VolumeDriverError):
    """Raised when the mountpoint directory cannot be created."""


class CleanupError(VolumeDriverError):
    """Raised when a mountpoint directory cannot be removed after unmount."""


class MetadataError(VolumeDriverError):
    """Raised when volume metadata cannot be read, written or serialized."""


class MalformedRequestError(VolumeDriverError):
    """Raised when a plugin request body cannot be decoded."""
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"malformed plugin request: {detail}")
