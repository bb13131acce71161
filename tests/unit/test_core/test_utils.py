# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import logging
import subprocess
import sys

import pytest

from gpupkg.core.logger import TRACE, Log
from gpupkg.core.logging_utils import log_step
from gpupkg.core.utils import U


@pytest.mark.unit
class TestUtils:
    def test_human_bytes(self):
        assert U.human_bytes(None) == "unknown"
        assert U.human_bytes(512) == "512 B"
        assert U.human_bytes(1024) == "1.00 KiB"
        assert U.human_bytes(1536) == "1.50 KiB"
        assert U.human_bytes(3 * 1024 ** 3) == "3.00 GiB"

    def test_to_text(self):
        assert U.to_text(None) == ""
        assert U.to_text(b"caf\xc3\xa9") == "café"
        assert U.to_text("x") == "x"

    def test_json_dump_handles_paths(self, tmp_path):
        out = U.json_dump({"p": tmp_path})
        assert str(tmp_path) in out

    def test_run_cmd_capture(self, logger):
        cp = U.run_cmd(logger, [sys.executable, "-c", "print('hi')"], capture=True)
        assert cp.stdout.strip() == "hi"

    def test_run_cmd_failure_raises(self, logger):
        with pytest.raises(subprocess.CalledProcessError):
            U.run_cmd(logger, [sys.executable, "-c", "raise SystemExit(4)"], capture=True)


@pytest.mark.unit
class TestLogging:
    def test_level_from_flags(self):
        assert Log._level_from_flags(0, 0) == logging.INFO
        assert Log._level_from_flags(2, 0) == logging.DEBUG
        assert Log._level_from_flags(3, 0) == TRACE
        assert Log._level_from_flags(3, 1) == logging.WARNING
        assert Log._level_from_flags(0, 2) == logging.ERROR

    def test_setup_writes_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        lg = Log.setup(1, str(log_file), logger_name="gpupkg.tests.setup", color=False)
        lg.info("hello file")
        for h in lg.handlers:
            h.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
        for h in list(lg.handlers):
            lg.removeHandler(h)
            h.close()

    def test_log_step_reraises(self, logger, caplog):
        caplog.set_level(logging.INFO, logger=logger.name)
        with pytest.raises(ValueError):
            with log_step(logger, "Staging"):
                raise ValueError("copy failed")
        assert any("Staging failed" in r.getMessage() for r in caplog.records)

    def test_log_step_done(self, logger, caplog):
        caplog.set_level(logging.INFO, logger=logger.name)
        with log_step(logger, "Archiving"):
            pass
        assert any("Archiving done" in r.getMessage() for r in caplog.records)
