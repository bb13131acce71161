# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/orchestrator.py

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .catalog.inventory import CimDeviceCatalog, DeviceCatalog
from .catalog.powershell import PowerShell
from .catalog.snapshot import SnapshotDeviceCatalog, write_snapshot
from .core.logger import Log
from .core.logging_utils import log_step
from .pipeline.hostpaths import HostLayout
from .pipeline.packager import DriverPackager, PackageResult
from .pipeline.selector import ConfirmFn, rich_confirm


class Orchestrator:
    """
    CLI-level wiring: pick the inventory source, then either dump it or run
    the packaging pipeline.
    """

    def __init__(self, logger: logging.Logger, args: argparse.Namespace, *, confirm: Optional[ConfirmFn] = None):
        self.logger = logger
        self.args = args
        self.confirm = confirm
        self.result: Optional[PackageResult] = None

        Log.trace(
            self.logger,
            "🧠 Orchestrator init: destination=%r filter=%r catalog=%r",
            getattr(args, "destination", None),
            getattr(args, "filter", None),
            getattr(args, "catalog", None),
        )

    def build_catalog(self) -> DeviceCatalog:
        snapshot = getattr(self.args, "catalog", None)
        if snapshot:
            return SnapshotDeviceCatalog(self.logger, Path(snapshot).expanduser())
        shell = PowerShell(self.logger, getattr(self.args, "powershell", None) or "powershell.exe")
        return CimDeviceCatalog(self.logger, shell)

    def dump_catalog(self, catalog: DeviceCatalog, target: str) -> int:
        with log_step(self.logger, "💾 Saving inventory snapshot"):
            path = write_snapshot(Path(target), catalog.snapshot())
        Log.ok(self.logger, f"Inventory snapshot written: {path}")
        return 0

    def run(self) -> int:
        catalog = self.build_catalog()

        dump = getattr(self.args, "dump_catalog", None)
        if dump:
            return self.dump_catalog(catalog, dump)

        layout = HostLayout.from_args(
            system_root=getattr(self.args, "system_root", None),
            host_root=getattr(self.args, "host_root", None),
        )
        staging = getattr(self.args, "staging_dir", None)

        packager = DriverPackager(
            self.logger,
            catalog,
            layout=layout,
            confirm=self.confirm or rich_confirm(bool(getattr(self.args, "yes", False))),
            staging_parent=Path(staging).expanduser().resolve() if staging else None,
        )
        self.result = packager.run(
            destination=getattr(self.args, "destination", None),
            name_filter=getattr(self.args, "filter", None),
        )
        return 0
