# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/catalog/powershell.py
"""
PowerShell query runner.

All inventory and hypervisor reads go through here:
  - scripts are run non-interactively with a fixed prologue
  - output is always ConvertTo-Json and parsed into a list of dicts
  - any failure (missing executable, non-zero exit, bad JSON) becomes CatalogError
"""
from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Dict, List, Optional

from ..core.exceptions import CatalogError
from ..core.logger import Log
from ..core.utils import U

DEFAULT_POWERSHELL = "powershell.exe"

# Without this, non-terminating errors are printed and the pipeline keeps
# going with partial data.
_PROLOGUE = "$ErrorActionPreference = 'Stop'; $ProgressPreference = 'SilentlyContinue'; "


def _as_records(obj: Any) -> List[Dict[str, Any]]:
    # ConvertTo-Json emits a bare object for single results and nothing for none.
    if obj is None:
        return []
    if isinstance(obj, dict):
        return [obj]
    if isinstance(obj, list):
        return [x for x in obj if isinstance(x, dict)]
    raise CatalogError(f"unexpected JSON shape from PowerShell: {type(obj).__name__}")


class PowerShell:
    def __init__(
        self,
        logger: logging.Logger,
        executable: str = DEFAULT_POWERSHELL,
        *,
        timeout: Optional[int] = 900,
    ):
        self.logger = logger
        self.executable = executable
        self.timeout = timeout

    def _argv(self, script: str) -> List[str]:
        return [
            self.executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            _PROLOGUE + script,
        ]

    def run(self, script: str) -> str:
        Log.trace(self.logger, "🐚 PowerShell: %s", script)
        try:
            cp = U.run_cmd(self.logger, self._argv(script), capture=True, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip() or f"exit code {e.returncode}"
            raise CatalogError(f"PowerShell query failed: {detail}", cause=e, context={"script": script})
        except subprocess.TimeoutExpired as e:
            raise CatalogError(f"PowerShell query timed out after {self.timeout}s", cause=e, context={"script": script})
        except OSError as e:
            raise CatalogError(f"cannot run {self.executable}: {e}", cause=e)
        return U.to_text(cp.stdout)

    def query(self, script: str, *, depth: int = 3) -> List[Dict[str, Any]]:
        """Run `script`, pipe it through ConvertTo-Json, return the records."""
        out = self.run(f"{script} | ConvertTo-Json -Depth {depth} -Compress").strip()
        if not out:
            return []
        try:
            obj = json.loads(out)
        except json.JSONDecodeError as e:
            raise CatalogError(f"PowerShell returned invalid JSON: {e}", cause=e, context={"script": script})
        return _as_records(obj)

    def has_command(self, name: str) -> bool:
        out = self.run(
            f"if (Get-Command -Name '{name}' -ErrorAction SilentlyContinue) {{ 'YES' }} else {{ 'NO' }}"
        )
        return out.strip().upper().endswith("YES")
