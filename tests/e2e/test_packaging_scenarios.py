# SPDX-License-Identifier: LGPL-3.0-or-later
"""
End-to-end packaging runs against a simulated host.

The host's C:\\ is a temp directory (FakeHost) and the inventory is a
FakeCatalog, so the whole pipeline from discovery to the archive runs for
real on any OS.
"""
from __future__ import annotations

import os
import zipfile
from pathlib import PureWindowsPath

import pytest

from fakes.fake_catalog import (
    AMD_PACKAGE,
    NV_PACKAGE,
    FakeCatalog,
    amd_records,
    merge_records,
    nvidia_records,
    populate_host,
)
from gpupkg.catalog.models import DriverFileAssociation
from gpupkg.core.exceptions import (
    ArchiveError,
    CorrelationError,
    DiscoveryError,
    PackagingCancelled,
    StagingError,
)
from gpupkg.pipeline.packager import DriverPackager

NV_PKG = PureWindowsPath(NV_PACKAGE).name
AMD_PKG = PureWindowsPath(AMD_PACKAGE).name
STORE = "System32/HostDriverStore/FileRepository"


class _Answer:
    def __init__(self, value):
        self.value = value
        self.asked = 0

    def __call__(self, _question):
        self.asked += 1
        return self.value


def _packager(logger, host, records, staging_parent, answer=True):
    populate_host(host, records)
    catalog = FakeCatalog(logger, **records)
    confirm = _Answer(answer)
    p = DriverPackager(logger, catalog, layout=host.layout, confirm=confirm, staging_parent=staging_parent)
    return p, catalog, confirm


def _names(archive):
    with zipfile.ZipFile(archive) as zf:
        return set(zf.namelist())


@pytest.mark.e2e
class TestPackagingScenarios:
    def test_single_gpu(self, logger, host, staging_parent, tmp_path):
        packager, catalog, confirm = _packager(logger, host, nvidia_records(), staging_parent)
        result = packager.run(destination=str(tmp_path / "out" / "nv.zip"))

        assert result.archive_path == tmp_path / "out" / "nv.zip"
        assert result.size == result.archive_path.stat().st_size > 0
        names = _names(result.archive_path)
        assert f"{STORE}/{NV_PKG}/nvlddmkm.sys" in names
        assert f"{STORE}/{NV_PKG}/nvldumdx.dll" in names
        assert {"System32/nvapi64.dll", "System32/nvml.dll", "SysWOW64/nvapi.dll"} <= names
        # only the driver-store folder and the three outside files
        assert len([n for n in names if not n.endswith("/")]) == 5

        assert confirm.asked == 0
        assert catalog.association_fetches == 1
        assert list(staging_parent.iterdir()) == []

    def test_two_gpus_filtered(self, logger, host, staging_parent, tmp_path):
        records = merge_records(nvidia_records(), amd_records())
        packager, catalog, confirm = _packager(logger, host, records, staging_parent)
        result = packager.run(destination=str(tmp_path), name_filter="RTX")

        assert confirm.asked == 1
        assert [t.friendly_name for t in result.targets] == ["NVIDIA GeForce RTX 3060"]
        assert result.archive_path.parent == tmp_path
        assert result.archive_path.name.startswith("GPUPDriverPackage-")
        names = _names(result.archive_path)
        assert any(n.startswith(f"{STORE}/{NV_PKG}/") for n in names)
        assert not any(AMD_PKG in n for n in names)
        assert "System32/amdxc64.dll" not in names
        assert catalog.association_fetches == 1
        assert list(staging_parent.iterdir()) == []

    def test_two_gpus_all_packaged(self, logger, host, staging_parent, tmp_path):
        records = merge_records(nvidia_records(), amd_records())
        packager, _catalog, _confirm = _packager(logger, host, records, staging_parent)
        result = packager.run(destination=str(tmp_path / "both.zip"))
        names = _names(result.archive_path)
        assert f"{STORE}/{AMD_PKG}/B381234/amdkmdag.sys" in names
        assert f"{STORE}/{NV_PKG}/nvlddmkm.sys" in names
        assert "System32/amdxc64.dll" in names

    def test_two_gpus_declined(self, logger, host, staging_parent, tmp_path):
        records = merge_records(nvidia_records(), amd_records())
        packager, _catalog, _confirm = _packager(logger, host, records, staging_parent, answer=False)
        with pytest.raises(PackagingCancelled):
            packager.run(destination=str(tmp_path / "out.zip"))
        assert not (tmp_path / "out.zip").exists()
        assert list(staging_parent.iterdir()) == []

    def test_no_gpus(self, logger, host, staging_parent, tmp_path):
        packager, _catalog, _confirm = _packager(logger, host, merge_records(), staging_parent)
        with pytest.raises(DiscoveryError):
            packager.run(destination=str(tmp_path / "out"))
        assert list(staging_parent.iterdir()) == []
        assert not (tmp_path / "out").exists()

    def test_correlation_failure_stops_before_staging(self, logger, host, staging_parent, tmp_path):
        records = nvidia_records()
        records["services"] = []
        packager, _catalog, _confirm = _packager(logger, host, records, staging_parent)
        with pytest.raises(CorrelationError):
            packager.run(destination=str(tmp_path / "out.zip"))
        assert list(staging_parent.iterdir()) == []
        assert not (tmp_path / "out.zip").exists()

    def test_missing_file_cleans_up(self, logger, host, staging_parent, tmp_path):
        records = nvidia_records()
        packager, _catalog, _confirm = _packager(logger, host, records, staging_parent)
        host.local(r"C:\Windows\SysWOW64\nvapi.dll").unlink()
        with pytest.raises(StagingError):
            packager.run(destination=str(tmp_path / "out.zip"))
        assert list(staging_parent.iterdir()) == []
        assert not (tmp_path / "out.zip").exists()

    def test_stale_staging_swept(self, logger, host, staging_parent, tmp_path):
        stale = staging_parent / "gpupkg-staging-old"
        stale.mkdir()
        (stale / ".gpupkg-staging").write_text("{}")
        packager, _catalog, _confirm = _packager(logger, host, nvidia_records(), staging_parent)
        packager.run(destination=str(tmp_path / "out.zip"))
        assert not stale.exists()

    def test_result_to_dict(self, logger, host, staging_parent, tmp_path):
        packager, _catalog, _confirm = _packager(logger, host, nvidia_records(), staging_parent)
        d = packager.run(destination=str(tmp_path / "x.zip")).to_dict()
        assert d["archive_path"] == str(tmp_path / "x.zip")
        assert d["targets"][0]["driver_store_folder"].endswith(NV_PKG)

    def test_inventory_casing_does_not_split_system_dirs(self, logger, host, staging_parent, tmp_path):
        records = nvidia_records()
        populate_host(host, records)
        # The inventory may report the same files in any case.
        records["files"] = [
            DriverFileAssociation(a.owner_device_id, a.file_path.replace("System32", "system32").replace("SysWOW64", "syswow64"))
            for a in records["files"]
        ]
        packager, _catalog, _confirm = _packager(logger, host, records, staging_parent)
        result = packager.run(destination=str(tmp_path / "nv.zip"))

        names = _names(result.archive_path)
        assert {"System32/nvapi64.dll", "System32/nvml.dll", "SysWOW64/nvapi.dll"} <= names
        assert not any(n.startswith(("system32/", "syswow64/")) for n in names)

    def test_unwritable_destination_cleans_up(self, logger, host, staging_parent, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        packager, _catalog, _confirm = _packager(logger, host, nvidia_records(), staging_parent)
        with pytest.raises(ArchiveError):
            packager.run(destination=str(blocker / "pkg.zip"))
        assert list(staging_parent.iterdir()) == []
        assert blocker.read_text() == "not a directory"

    @pytest.mark.skipif(os.name == "nt", reason="drive-letter paths are native on Windows")
    def test_windows_destination_rejected_before_discovery(self, logger, host, staging_parent, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        packager, catalog, _confirm = _packager(logger, host, nvidia_records(), staging_parent)
        with pytest.raises(ArchiveError):
            packager.run(destination=r"C:\out\pkg.zip")
        assert catalog.association_fetches == 0
        assert list(staging_parent.iterdir()) == []
        assert sorted(p.name for p in tmp_path.iterdir()) == ["host", "staging"]
