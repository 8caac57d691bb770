from typing import Any, Dict, Optional

from .config import Settings
from .services.metadata import MetadataStore
from .services.network_mount import (
    BaseMounter,
    MountConfigHandler,
    MountTableInspector,
    PlatformFactory,
)
from .services.plugin_spec import PluginSpecWriter
from .services.remote_share import AzureFileShareClient, BaseShareClient
from .services.volume_driver import VolumeDriverService

# Global singleton instances
_singletons: Dict[str, Any] = {}


def configure_settings(settings: Settings) -> None:
    """Install settings parsed elsewhere (e.g. from the command line)."""
    _singletons["settings"] = settings


def get_settings() -> Settings:
    """Hent Settings singleton instance."""
    if "settings" not in _singletons:
        _singletons["settings"] = Settings()
    return _singletons["settings"]


def get_mount_config() -> MountConfigHandler:
    if "mount_config" not in _singletons:
        _singletons["mount_config"] = MountConfigHandler(get_settings())
    return _singletons["mount_config"]


def get_metadata_store() -> MetadataStore:
    if "metadata_store" not in _singletons:
        store = MetadataStore(get_settings().metadata_path)
        store.ensure_root()
        _singletons["metadata_store"] = store
    return _singletons["metadata_store"]


def get_share_client() -> BaseShareClient:
    if "share_client" not in _singletons:
        settings = get_settings()
        _singletons["share_client"] = AzureFileShareClient(
            account_name=settings.account_name,
            account_key=settings.account_key,
            storage_base=settings.storage_base,
        )
    return _singletons["share_client"]


def get_mounter() -> BaseMounter:
    if "mounter" not in _singletons:
        _singletons["mounter"] = PlatformFactory().create_mounter()
    return _singletons["mounter"]


def get_mount_table() -> MountTableInspector:
    if "mount_table" not in _singletons:
        _singletons["mount_table"] = MountTableInspector(get_settings().mountinfo_path)
    return _singletons["mount_table"]


def get_volume_driver() -> VolumeDriverService:
    if "volume_driver" not in _singletons:
        _singletons["volume_driver"] = VolumeDriverService(
            mount_config=get_mount_config(),
            metadata_store=get_metadata_store(),
            share_client=get_share_client(),
            mounter=get_mounter(),
            mount_table=get_mount_table(),
            remove_shares=get_settings().remove_shares,
        )
    return _singletons["volume_driver"]


def get_plugin_spec_writer() -> PluginSpecWriter:
    if "plugin_spec_writer" not in _singletons:
        settings = get_settings()
        _singletons["plugin_spec_writer"] = PluginSpecWriter(
            plugin_spec_dir=settings.plugin_spec_dir, plugin_name=settings.plugin_name
        )
    return _singletons["plugin_spec_writer"]


async def close_share_client() -> None:
    client: Optional[BaseShareClient] = _singletons.get("share_client")
    if client is not None:
        await client.close()


def reset_singletons() -> None:
    global _singletons
    _singletons.clear()
