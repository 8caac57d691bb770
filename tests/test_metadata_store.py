"""
Tests for the file-backed MetadataStore.
"""

import json
import os
import stat
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from volume_agent.core.exceptions import (
    InvalidOptionError,
    InvalidVolumeNameError,
    MetadataError,
    VolumeNotFoundError,
)
from volume_agent.models import VolumeMetadata, VolumeOptions
from volume_agent.services.metadata import MetadataStore


@pytest.fixture
def store(tmp_path):
    metadata_store = MetadataStore(str(tmp_path / "volumes"))
    metadata_store.ensure_root()
    return metadata_store


def _record(share="data", account="testaccount"):
    return VolumeMetadata(
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        account=account,
        options=VolumeOptions(share=share),
    )


class TestValidate:
    def test_accepts_share(self, store):
        record = store.validate({"share": "data"})
        assert record.options.share == "data"
        assert record.account == ""
        assert record.created_at is None

    def test_missing_share_is_left_to_caller(self, store):
        assert store.validate({}).options.share == ""

    def test_rejects_unknown_option(self, store):
        with pytest.raises(InvalidOptionError) as exc_info:
            store.validate({"share": "data", "uid": "1000"})
        assert exc_info.value.option == "uid"


class TestPersistence:
    def test_ensure_root_creates_private_directory(self, tmp_path):
        root = tmp_path / "nested" / "volumes"
        MetadataStore(str(root)).ensure_root()
        assert root.is_dir()
        assert stat.S_IMODE(root.stat().st_mode) == 0o700

    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        await store.set("vol1", _record())

        loaded = await store.get("vol1")

        assert loaded == _record()

    @pytest.mark.asyncio
    async def test_document_layout(self, store):
        await store.set("vol1", _record())

        path = store.root / "vol1"
        document = json.loads(path.read_text())
        assert set(document) == {"created_at", "account", "options"}
        assert document["options"] == {"share": "data"}
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_set_syncs_private_temp_file_and_directory(self, store):
        real_fsync = os.fsync
        synced = []

        def recording_fsync(fd):
            info = os.fstat(fd)
            synced.append((stat.S_ISDIR(info.st_mode), stat.S_IMODE(info.st_mode)))
            real_fsync(fd)

        with patch("os.fsync", side_effect=recording_fsync):
            await store.set("vol1", _record())

        # Temp file is private from creation, then the directory entry is flushed
        assert synced == [(False, 0o600), (True, 0o700)]

    @pytest.mark.asyncio
    async def test_set_overwrites(self, store):
        await store.set("vol1", _record(share="first"))
        await store.set("vol1", _record(share="second"))

        assert (await store.get("vol1")).options.share == "second"

    @pytest.mark.asyncio
    async def test_failed_write_leaves_previous_record_intact(self, store):
        await store.set("vol1", _record(share="first"))

        with patch(
            "aiofiles.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(MetadataError):
                await store.set("vol1", _record(share="second"))

        assert (await store.get("vol1")).options.share == "first"
        # No temporary files left behind
        assert os.listdir(store.root) == ["vol1"]

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, store):
        with pytest.raises(VolumeNotFoundError):
            await store.get("missing")

    @pytest.mark.asyncio
    async def test_get_corrupt_record_raises_metadata_error(self, store):
        (store.root / "broken").write_text("{not json")

        with pytest.raises(MetadataError):
            await store.get("broken")

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.set("vol1", _record())

        await store.delete("vol1")

        assert not await store.exists("vol1")
        with pytest.raises(VolumeNotFoundError):
            await store.delete("vol1")

    @pytest.mark.asyncio
    async def test_list_ignores_temporary_files(self, store):
        await store.set("a", _record())
        await store.set("b", _record())
        (store.root / ".tmp-c-deadbeef").write_text("{}")

        assert await store.list() == {"a", "b"}

    @pytest.mark.asyncio
    async def test_list_missing_root_raises_metadata_error(self, tmp_path):
        store = MetadataStore(str(tmp_path / "does-not-exist"))

        with pytest.raises(MetadataError):
            await store.list()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", ".", "..", "../etc/passwd", "a/b", "nul\x00"])
    async def test_rejects_unsafe_names(self, store, name):
        with pytest.raises(InvalidVolumeNameError):
            await store.get(name)
