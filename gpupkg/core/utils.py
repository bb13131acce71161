# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/core/utils.py
from __future__ import annotations

import json
import logging
import shlex
import subprocess
from typing import Any, List, Optional


class U:
    @staticmethod
    def json_dump(obj: Any) -> str:
        return json.dumps(obj, indent=2, sort_keys=True, default=str)

    @staticmethod
    def human_bytes(n: Optional[int]) -> str:
        if n is None:
            return "unknown"
        if n < 1024:
            return f"{n} B"
        x = float(n)
        for unit in ("KiB", "MiB", "GiB", "TiB"):
            x /= 1024
            if x < 1024:
                break
        return f"{x:.2f} {unit}"

    @staticmethod
    def banner(logger: logging.Logger, title: str) -> None:
        rule = "─" * (len(title) + 4)
        logger.info(rule)
        logger.info("  %s", title)
        logger.info(rule)

    @staticmethod
    def run_cmd(
        logger: logging.Logger,
        cmd: List[str],
        *,
        check: bool = True,
        capture: bool = False,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        """
        subprocess.run() with logging.

        Failures are logged with whatever the command printed and then
        re-raised as-is.
        """
        pretty = " ".join(shlex.quote(x) for x in cmd)
        logger.debug("Running: %s", pretty)
        try:
            return subprocess.run(cmd, check=check, capture_output=capture, text=True, timeout=timeout)
        except subprocess.CalledProcessError as e:
            output = "\n".join(s.strip() for s in (e.stdout, e.stderr) if s and s.strip())
            logger.error("Command failed (rc=%s): %s%s", e.returncode, cmd[0], f"\n{output}" if output else "")
            raise
        except subprocess.TimeoutExpired:
            logger.error("Command timed out after %ss: %s", timeout, cmd[0])
            raise
        except OSError as e:
            logger.error("Cannot run %s: %s", cmd[0], e)
            raise

    @staticmethod
    def to_text(x: Any) -> str:
        if x is None:
            return ""
        if isinstance(x, bytes):
            return x.decode("utf-8", "replace")
        return str(x)
