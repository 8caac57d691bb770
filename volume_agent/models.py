from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

RECOGNIZED_OPTIONS = ("share",)


class VolumeOptions(BaseModel):
    """Options accepted on volume create. Closed set, see RECOGNIZED_OPTIONS."""

    share: str = Field("", description="Azure file share backing the volume")


class VolumeMetadata(BaseModel):
    """
    Persisted record for a single named volume.

    The volume name itself is the storage key and is not part of the document.
    Records are write-once: they are created by Create and deleted by Remove.
    """

    created_at: Optional[datetime] = Field(
        None, description="UTC timestamp stamped when the volume was created"
    )
    account: str = Field("", description="Storage account owning the share")
    options: VolumeOptions = Field(default_factory=VolumeOptions)


class MountOptions(BaseModel):
    """CIFS mount options. Empty values are replaced by driver defaults."""

    file_mode: str = ""
    dir_mode: str = ""
    uid: str = ""
    gid: str = ""
    nolock: bool = False

    def resolved(self) -> "MountOptions":
        return MountOptions(
            file_mode=self.file_mode or "0777",
            dir_mode=self.dir_mode or "0777",
            uid=self.uid or "0",
            gid=self.gid or "0",
            nolock=self.nolock,
        )


# Docker volume plugin protocol models


class _PluginModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class VolumeRequest(_PluginModel):
    name: str = Field("", alias="Name")
    options: Dict[str, str] = Field(default_factory=dict, alias="Opts")
    id: str = Field("", alias="ID")

    @field_validator("options", mode="before")
    @classmethod
    def _null_options(cls, value):
        # Docker encodes a nil Opts map as null
        return {} if value is None else value


class VolumeEntry(_PluginModel):
    name: str = Field(..., alias="Name")
    mountpoint: str = Field(..., alias="Mountpoint")


class VolumeResponse(_PluginModel):
    err: str = Field("", alias="Err")


class MountResponse(VolumeResponse):
    mountpoint: str = Field("", alias="Mountpoint")


class GetResponse(VolumeResponse):
    volume: Optional[VolumeEntry] = Field(None, alias="Volume")


class ListResponse(VolumeResponse):
    volumes: List[VolumeEntry] = Field(default_factory=list, alias="Volumes")


class Capabilities(_PluginModel):
    scope: str = Field("local", alias="Scope")


class CapabilitiesResponse(_PluginModel):
    capabilities: Capabilities = Field(default_factory=Capabilities, alias="Capabilities")


class ActivateResponse(_PluginModel):
    implements: List[str] = Field(
        default_factory=lambda: ["VolumeDriver"], alias="Implements"
    )
