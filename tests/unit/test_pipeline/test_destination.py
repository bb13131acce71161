# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import datetime as dt
import os
from pathlib import Path, PureWindowsPath

import pytest

from gpupkg.core.exceptions import ArchiveError
from gpupkg.pipeline.destination import default_filename, resolve_destination

DAY = dt.date(2024, 3, 9)


@pytest.mark.unit
class TestResolveDestination:
    def test_default_filename(self):
        assert default_filename(DAY) == "GPUPDriverPackage-20240309.zip"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_absent(self, tmp_path, raw):
        d = resolve_destination(raw, today=DAY, cwd=tmp_path)
        assert d.archive_path == tmp_path / "GPUPDriverPackage-20240309.zip"

    def test_windows_zip_path(self):
        d = resolve_destination(r"C:\out\pkg.zip", today=DAY)
        assert PureWindowsPath(str(d.folder)) == PureWindowsPath(r"C:\out")
        assert d.filename == "pkg.zip"

    def test_zip_suffix_case_insensitive(self, tmp_path):
        d = resolve_destination(str(tmp_path / "PKG.ZIP"), today=DAY)
        assert d.folder == tmp_path
        assert d.filename == "PKG.ZIP"

    def test_existing_directory(self, tmp_path):
        d = resolve_destination(str(tmp_path), today=DAY)
        assert d.archive_path == tmp_path / "GPUPDriverPackage-20240309.zip"

    def test_new_directory_not_created(self, tmp_path):
        target = tmp_path / "new" / "share"
        d = resolve_destination(str(target), today=DAY)
        assert d.archive_path == target / "GPUPDriverPackage-20240309.zip"
        assert not target.exists()

    def test_relative_to_cwd(self, tmp_path):
        d = resolve_destination("pkgs/gpu.zip", today=DAY, cwd=tmp_path)
        assert d.archive_path == tmp_path / "pkgs" / "gpu.zip"

    def test_unc_folder(self):
        d = resolve_destination(r"\\fileserver\share\gpu", today=DAY)
        assert PureWindowsPath(str(d.folder)) == PureWindowsPath(r"\\fileserver\share\gpu")
        assert d.filename == "GPUPDriverPackage-20240309.zip"

    @pytest.mark.skipif(os.name == "nt", reason="drive-letter paths are native on Windows")
    def test_windows_folder_rejected_off_windows(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        d = resolve_destination(r"C:\out\pkg.zip", today=DAY)
        with pytest.raises(ArchiveError) as ei:
            d.archive_path
        assert "not Windows" in str(ei.value)
        assert list(tmp_path.iterdir()) == []

    def test_default_date_is_today(self, tmp_path):
        d = resolve_destination(None, cwd=tmp_path)
        assert d.filename == default_filename(dt.date.today())
        assert isinstance(d.archive_path, Path)
