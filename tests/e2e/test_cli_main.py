# SPDX-License-Identifier: LGPL-3.0-or-later
"""The gpupkg command, run in-process from a saved inventory snapshot."""
from __future__ import annotations

import argparse
import zipfile

import pytest

from fakes.fake_catalog import FakeCatalog, amd_records, merge_records, nvidia_records, populate_host
from gpupkg.__main__ import main
from gpupkg.catalog.snapshot import write_snapshot
from gpupkg.orchestrator import Orchestrator
from gpupkg.pipeline import selector as selector_mod


class _NoTty:
    def isatty(self):
        return False


def _snapshot(logger, host, records, path):
    populate_host(host, records)
    return write_snapshot(path, FakeCatalog(logger, **records).snapshot())


def _run(argv):
    with pytest.raises(SystemExit) as ei:
        main(argv)
    return ei.value.code


@pytest.mark.e2e
class TestCliMain:
    def _argv(self, snap, host, tmp_path, *extra):
        return [
            "--catalog", str(snap),
            "--host-root", str(host.root),
            "--system-root", r"C:\Windows",
            "--staging-dir", str(tmp_path / "staging"),
            *extra,
        ]

    def test_package_from_snapshot(self, logger, host, tmp_path):
        snap = _snapshot(logger, host, nvidia_records(), tmp_path / "inv.json")
        out = tmp_path / "share" / "gpu.zip"

        rc = _run(self._argv(snap, host, tmp_path, "-d", str(out)))

        assert rc == 0
        with zipfile.ZipFile(out) as zf:
            assert "System32/nvapi64.dll" in zf.namelist()
        assert list((tmp_path / "staging").iterdir()) == []

    def test_yaml_snapshot_with_filter_and_yes(self, logger, host, tmp_path):
        snap = _snapshot(logger, host, merge_records(nvidia_records(), amd_records()), tmp_path / "inv.yaml")
        out = tmp_path / "rx.zip"

        rc = _run(self._argv(snap, host, tmp_path, "-d", str(out), "--filter", "radeon", "--yes"))

        assert rc == 0
        with zipfile.ZipFile(out) as zf:
            names = zf.namelist()
        assert "System32/amdxc64.dll" in names
        assert "System32/nvapi64.dll" not in names

    def test_multi_gpu_without_tty_is_cancelled(self, logger, host, tmp_path, monkeypatch):
        monkeypatch.setattr(selector_mod.sys, "stdin", _NoTty())
        snap = _snapshot(logger, host, merge_records(nvidia_records(), amd_records()), tmp_path / "inv.json")
        out = tmp_path / "x.zip"

        assert _run(self._argv(snap, host, tmp_path, "-d", str(out))) == 3
        assert not out.exists()

    def test_no_gpu_exit_code(self, logger, host, tmp_path):
        snap = _snapshot(logger, host, merge_records(), tmp_path / "inv.json")
        assert _run(self._argv(snap, host, tmp_path, "-d", str(tmp_path / "x.zip"))) == 11

    def test_filter_without_match_exit_code(self, logger, host, tmp_path):
        snap = _snapshot(logger, host, nvidia_records(), tmp_path / "inv.json")
        assert _run(self._argv(snap, host, tmp_path, "-d", str(tmp_path / "x.zip"), "-f", "Arc")) == 13

    def test_staging_failure_logs_error_details(self, logger, host, tmp_path):
        snap = _snapshot(logger, host, nvidia_records(), tmp_path / "inv.json")
        host.local(r"C:\Windows\System32\nvml.dll").unlink()
        log_file = tmp_path / "run.log"

        rc = _run(self._argv(snap, host, tmp_path, "-d", str(tmp_path / "x.zip"), "-vv", "--log-file", str(log_file)))

        assert rc == 20
        text = log_file.read_text(encoding="utf-8")
        assert '"type": "StagingError"' in text
        assert '"gpu": "NVIDIA GeForce RTX 3060"' in text
        assert '"cause": {' in text

    def test_broken_snapshot_exit_code(self, host, tmp_path):
        snap = tmp_path / "inv.json"
        snap.write_text("{broken", encoding="utf-8")
        assert _run(self._argv(snap, host, tmp_path)) == 10

    def test_dump_catalog(self, logger, tmp_path):
        catalog = FakeCatalog(logger, **nvidia_records())
        orch = Orchestrator(logger, argparse.Namespace(dump_catalog=str(tmp_path / "inv.yaml")))
        assert orch.dump_catalog(catalog, str(tmp_path / "inv.yaml")) == 0
        assert (tmp_path / "inv.yaml").read_text(encoding="utf-8").startswith("partitionable_gpus:")
