"""
Tests for singleton wiring and application startup/shutdown.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from volume_agent import dependencies
from volume_agent.main import app
from volume_agent.services.network_mount import (
    CifsMounter,
    PlatformFactory,
    UnsupportedPlatformError,
)
from volume_agent.services.volume_driver import VolumeDriverService


def test_volume_driver_is_singleton(settings, mounter):
    dependencies.configure_settings(settings)
    with patch.object(dependencies.PlatformFactory, "create_mounter", return_value=mounter):
        first = dependencies.get_volume_driver()
        second = dependencies.get_volume_driver()

    assert isinstance(first, VolumeDriverService)
    assert first is second


def test_metadata_root_created_on_first_use(settings, tmp_path):
    dependencies.configure_settings(settings)

    store = dependencies.get_metadata_store()

    assert store.root.is_dir()


@pytest.mark.parametrize("system", ["Darwin", "Windows", "FreeBSD"])
def test_unsupported_platform_is_fatal(settings, system):
    dependencies.configure_settings(settings)
    with patch("platform.system", return_value=system):
        with pytest.raises(UnsupportedPlatformError):
            dependencies.get_mounter()


def test_linux_gets_cifs_mounter():
    with patch("platform.system", return_value="Linux"):
        mounter = PlatformFactory().create_mounter()

    assert isinstance(mounter, CifsMounter)


def test_lifespan_writes_and_removes_plugin_spec(settings, mounter, share_client):
    dependencies.configure_settings(settings)
    dependencies._singletons["share_client"] = share_client
    spec_path = dependencies.get_plugin_spec_writer().spec_path

    with patch.object(dependencies.PlatformFactory, "create_mounter", return_value=mounter):
        with TestClient(app) as client:
            assert spec_path.read_text() == "tcp://127.0.0.1:8080"
            assert client.post("/VolumeDriver.List", json={}).json() == {"Err": "", "Volumes": []}

    assert not spec_path.exists()
    assert share_client.closed is True
