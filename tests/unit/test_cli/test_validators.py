# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import logging

import pytest

from gpupkg.cli.argument_parser import build_parser, parse_args_with_config

LOG = logging.getLogger("gpupkg_tests.args")


def _parse(argv):
    return parse_args_with_config(argv=argv, logger=LOG)[0]


@pytest.mark.unit
class TestArgs:
    def test_defaults(self):
        args = _parse([])
        assert args.destination is None
        assert args.filter is None
        assert args.yes is False
        assert args.powershell == "powershell.exe"
        assert args.catalog is None

    def test_short_flags(self):
        args = _parse(["-d", "out.zip", "-f", "RTX", "-y"])
        assert (args.destination, args.filter, args.yes) == ("out.zip", "RTX", True)

    def test_help_mentions_package_options(self):
        text = build_parser().format_help()
        assert "--destination" in text
        assert "--dump-catalog" in text

    def test_catalog_and_dump_exclusive(self, tmp_path):
        snap = tmp_path / "inv.json"
        snap.write_text("{}")
        with pytest.raises(SystemExit):
            _parse(["--catalog", str(snap), "--dump-catalog", str(tmp_path / "new.json")])

    def test_catalog_must_exist(self, tmp_path):
        with pytest.raises(SystemExit):
            _parse(["--catalog", str(tmp_path / "missing.json")])

    def test_snapshot_suffix(self, tmp_path):
        with pytest.raises(SystemExit):
            _parse(["--dump-catalog", str(tmp_path / "inv.txt")])
        assert _parse(["--dump-catalog", str(tmp_path / "inv.yml")]).dump_catalog.endswith("inv.yml")

    def test_host_root_must_be_directory(self, tmp_path):
        with pytest.raises(SystemExit):
            _parse(["--host-root", str(tmp_path / "nope")])
        assert _parse(["--host-root", str(tmp_path)]).host_root == str(tmp_path)

    def test_empty_filter_rejected(self):
        with pytest.raises(SystemExit):
            _parse(["--filter", "  "])

    def test_dump_args(self, capsys):
        with pytest.raises(SystemExit) as ei:
            _parse(["--dump-args", "-f", "RTX"])
        assert ei.value.code == 0
        assert '"filter": "RTX"' in capsys.readouterr().out
